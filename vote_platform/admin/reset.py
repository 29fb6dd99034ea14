"""
Administrative reset of today's data.

Destructive and not undoable: every counter of today's snapshot goes back
to 0 and every voter entry is closed with an explicit False (never
deleted, so store rules keyed on "path exists" keep working). Reaching it
takes a separate AdminReset object plus the configured confirmation
phrase; nothing in the normal vote flow holds one.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional, Set

from ..catalog import Catalog
from ..config import settings
from ..errors import ResetNotConfirmed
from ..ledger.vote_ledger import VoteLedger
from ..paths import LAST_DURATION, SUBJECT_COUNTERS, VOTES_ROOT, counter_path, day_path, today_key, visits_path
from ..storage.base import BaseStore

log = logging.getLogger(__name__)


class AdminReset:
    def __init__(
        self,
        store: BaseStore,
        ledger: VoteLedger,
        catalog: Optional[Catalog] = None,
        clock: Optional[Callable[[], datetime]] = None,
        phrase: Optional[str] = None,
    ):
        self.store = store
        self.ledger = ledger
        self.catalog = catalog or Catalog()
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self.phrase = phrase if phrase is not None else settings.RESET_PHRASE

    async def _subjects(self, day_raw: Any) -> Set[str]:
        subjects = set(self.catalog.keys())
        if isinstance(day_raw, dict):
            for counter in SUBJECT_COUNTERS + (LAST_DURATION,):
                if isinstance(day_raw.get(counter), dict):
                    subjects.update(day_raw[counter])
        votes = await self.store.read(VOTES_ROOT)
        if isinstance(votes, dict):
            subjects.update(votes)
        return subjects

    async def reset_today(self, confirm: str) -> Dict[str, Any]:
        """
        Zero today's counters and close every vote.

        Raises:
            ResetNotConfirmed: If `confirm` doesn't match the phrase.
            StoreError: Propagated; a failed reset may be partially applied
                and can simply be run again.
        """
        if not self.phrase or confirm != self.phrase:
            raise ResetNotConfirmed("Reset not confirmed")

        day = today_key(self.clock())
        subjects = await self._subjects(await self.store.read(day_path(day)))
        log.warning("resetting analytics for %s and votes for %d subjects", day, len(subjects))

        await self.store.write(visits_path(day), 0)
        for counter in SUBJECT_COUNTERS + (LAST_DURATION,):
            for subject in sorted(subjects):
                await self.store.write(counter_path(day, counter, subject), 0)

        closed = 0
        for subject in sorted(subjects):
            closed += await self.ledger.reset_subject(subject)

        return {"date": day, "subjects": len(subjects), "voters_closed": closed}
