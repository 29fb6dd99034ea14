"""
VoteLedger module for Vote Platform.

Responsibilities:
    - Own the per-subject vote record: {count, voters: {identity: bool}}
    - Expose `toggle(subject, identity)` as the single mutation entry point
    - Sanitize identities into store-safe key segments

Design notes:
    - The store has no transactions and no compare-and-swap, so a toggle is
      two independent read-then-write pairs (count, then voter flag). Within
      one call every write waits for its read; across calls the last write
      wins per key.
    - Retractions write an explicit False instead of deleting the voter
      entry; store rules that key off "does this path exist" must never see
      a retracted vote as a fresh one.
    - The count never goes below zero, even when a retraction races a reset.
    - If the count write lands and the voter write fails, the two disagree
      until that identity's next toggle. That window is accepted; there is
      no multi-key rollback to attempt.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional

from ..errors import IdentityUnavailable
from ..paths import count_path, voter_path, voters_path
from ..storage.base import BaseStore

log = logging.getLogger(__name__)

UNAVAILABLE_IDENTITY = "unavailable"

# Characters the store refuses inside a key, plus the escape character itself
_FORBIDDEN = set(".$#[]/%")


@dataclass(frozen=True)
class ToggleResult:
    subject: str
    new_count: int
    voted: bool


def sanitize_identity(identity: Optional[str]) -> str:
    """
    Map an identity token onto a store-safe key segment.

    Forbidden characters (and control characters) become %XX escapes, so
    the mapping is deterministic and injective: "1.2.3.4" -> "1%2E2%2E3%2E4".

    Raises:
        IdentityUnavailable: If the token is empty or the provider's
            "unavailable" marker.
    """
    token = (identity or "").strip()
    if not token or token == UNAVAILABLE_IDENTITY:
        raise IdentityUnavailable()
    return "".join(
        f"%{ord(ch):02X}" if ch in _FORBIDDEN or ord(ch) < 0x20 or ord(ch) == 0x7F else ch
        for ch in token
    )


def _as_count(raw) -> int:
    try:
        return max(0, int(raw or 0))
    except (TypeError, ValueError):
        log.warning("non-numeric vote count %r treated as 0", raw)
        return 0


class VoteLedger:
    """
    Per-subject vote counts and voter flags on top of a shared store.

    No other component writes under `votes/`; the administrative reset goes
    through `reset_subject` here as well.
    """

    def __init__(self, store: BaseStore):
        self.store = store

    async def count(self, subject: str) -> int:
        return _as_count(await self.store.read(count_path(subject)))

    async def has_voted(self, subject: str, identity: str) -> bool:
        key = sanitize_identity(identity)
        return await self.store.read(voter_path(subject, key)) is True

    async def toggle(self, subject: str, identity: str) -> ToggleResult:
        """
        Flip this identity's vote on `subject` and adjust the shared count.

        Steps:
            1. read the voter flag (absent and False both mean "not voted")
            2. target = not voted
            3. read the count
            4. new_count = count + 1, or max(0, count - 1) on retraction
            5. write the count
            6. write the voter flag

        Returns:
            ToggleResult: The new count and voted state for the caller's UI.

        Raises:
            IdentityUnavailable: If no usable identity was supplied.
            StoreError: If any read or write fails; nothing after the
                failing step is attempted.
        """
        key = sanitize_identity(identity)

        voted = await self.store.read(voter_path(subject, key)) is True
        target = not voted

        count = _as_count(await self.store.read(count_path(subject)))
        new_count = count + 1 if target else max(0, count - 1)

        await self.store.write(count_path(subject), new_count)
        await self.store.write(voter_path(subject, key), target)

        log.debug("toggle %s by %s: %d -> %d (voted=%s)", subject, key, count, new_count, target)
        return ToggleResult(subject=subject, new_count=new_count, voted=target)

    async def reset_subject(self, subject: str) -> int:
        """
        Administrative: zero the count and set every voter flag to False.

        Returns the number of voter entries closed. Only AdminReset calls this.
        """
        voters: Dict[str, bool] = await self.store.read(voters_path(subject)) or {}
        await self.store.write(count_path(subject), 0)
        for key in voters:
            await self.store.write(voter_path(subject, key), False)
        return len(voters)
