"""
Analytics reconciler for Vote Platform.

Responsibilities:
    - Count visits, views, interactions and session time per day
    - Keep today's `upvotes[subject]` equal to the ledger's count
    - Record vote / unvote activity as separate, monotonic event counters

Design:
    - The net metric is resynchronized, never accumulated: after each toggle
      `upvotes[subject]` is overwritten with the ledger's new count. Adding
      +1 per vote and -1 per retraction drifts as soon as one of those writes
      is lost or raced; an overwrite converges on the next toggle.
    - `upvote_events` / `unvote_events` only ever grow and are never read back
      into the net metric. They measure activity, not state.
    - Everything here runs after the vote has already been committed, so
      failures are logged and swallowed. Analytics must never fail a vote.
    - No division happens here; ratios belong to the dashboard.

Store layout:
    analytics/events/{date}/total_visits
    analytics/events/{date}/{counter}/{subject}
"""

import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from ..config import settings
from ..errors import StoreError
from ..paths import (
    INTERACTIONS,
    LAST_DURATION,
    PROJECT_VIEWS,
    SESSION_DURATION,
    SESSION_SAMPLES,
    UNVOTE_EVENTS,
    UPVOTE_EVENTS,
    UPVOTES,
    counter_path,
    today_key,
    visits_path,
)
from ..storage.base import BaseStore
from .base import BaseAnalytics

log = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AnalyticsReconciler(BaseAnalytics):
    def __init__(self, store: BaseStore, clock: Optional[Clock] = None, min_duration: Optional[int] = None):
        """
        Args:
            store (BaseStore): Shared remote store.
            clock (Callable[[], datetime]): Source of "now"; decides the day key.
            min_duration (int): Durations below this many seconds are ignored.
        """
        self.store = store
        self.clock = clock or _utcnow
        self.min_duration = settings.MIN_DURATION_SECONDS if min_duration is None else min_duration

    def today(self) -> str:
        return today_key(self.clock())

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    async def _increment(self, path: str, by: int = 1) -> bool:
        """Read-then-write `path += by`; False when the store failed."""
        try:
            current = await self.store.read(path)
            if not isinstance(current, int) or isinstance(current, bool):
                current = 0
            await self.store.write(path, current + by)
            return True
        except StoreError as exc:
            log.warning("analytics increment of %s dropped: %s", path, exc)
            return False

    async def _overwrite(self, path: str, value: int) -> bool:
        try:
            await self.store.write(path, value)
            return True
        except StoreError as exc:
            log.warning("analytics write of %s dropped: %s", path, exc)
            return False

    # ------------------------------------------------------------------
    # Hooks
    # ------------------------------------------------------------------
    async def record_visit(self) -> None:
        await self._increment(visits_path(self.today()))

    async def record_view(self, subject: str) -> None:
        await self._increment(counter_path(self.today(), PROJECT_VIEWS, subject))

    async def record_interaction(self, subject: str) -> None:
        """First rotate/zoom on a subject during one view."""
        await self._increment(counter_path(self.today(), INTERACTIONS, subject))

    async def on_vote_toggled(self, subject: str, new_count: int, voted: bool) -> None:
        day = self.today()
        await self._overwrite(counter_path(day, UPVOTES, subject), max(0, int(new_count)))
        event = UPVOTE_EVENTS if voted else UNVOTE_EVENTS
        await self._increment(counter_path(day, event, subject))

    async def record_session_duration(self, subject: str, seconds: int) -> bool:
        """
        Add a finished view's duration to today's totals.

        Views shorter than `min_duration` are treated as accidental clicks
        and skipped. Returns True when the duration was counted.
        """
        seconds = int(seconds)
        if seconds < self.min_duration:
            return False
        day = self.today()
        added = await self._increment(counter_path(day, SESSION_DURATION, subject), by=seconds)
        if added:
            await self._increment(counter_path(day, SESSION_SAMPLES, subject))
        return added

    def beacon_last_duration(self, subject: str, seconds: int) -> bool:
        """
        Page-unload variant: fire-and-forget write of the final duration.

        A beacon can't read first, so it only overwrites `last_duration`
        instead of adding to the totals. Returns True when a beacon was sent.
        """
        seconds = int(seconds)
        if seconds < self.min_duration:
            return False
        self.store.beacon(counter_path(self.today(), LAST_DURATION, subject), seconds)
        return True
