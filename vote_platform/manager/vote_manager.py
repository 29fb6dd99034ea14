"""
VoteManager module for Vote Platform.

Responsibilities:
    - Validate the subject against the catalog and the identity token
    - Run one toggle at a time per (subject, identity) pair
    - Hand the committed result to analytics and to the local cache
    - Serve vote status, falling back to the local cache when the store is down

Design notes:
    - The ledger owns the vote record; the manager only orchestrates around it.
    - The single-flight guard is the server-side twin of disabling the heart
      button while a toggle is running. It stops one control from overlapping
      itself; it does not stop a second tab (see VoteLedger for that race).
    - Analytics runs after the ledger has committed and cannot fail the vote.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Set, Tuple

from ..analytics.base import BaseAnalytics
from ..catalog import Catalog
from ..errors import IdentityUnavailable, StoreError, ToggleInFlight
from ..ledger.vote_ledger import ToggleResult, VoteLedger, sanitize_identity
from ..storage.local_cache import LocalCache

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class VoteStatus:
    subject: str
    count: int
    voted: bool
    cached: bool = False


class VoteManager:
    def __init__(
        self,
        ledger: VoteLedger,
        analytics: Optional[BaseAnalytics] = None,
        cache: Optional[LocalCache] = None,
        catalog: Optional[Catalog] = None,
    ):
        """
        Args:
            ledger (VoteLedger): Owner of counts and voter flags.
            analytics (Optional[BaseAnalytics]): Notified after each committed toggle.
            cache (Optional[LocalCache]): Degraded-mode mirror; in-memory if omitted.
            catalog (Optional[Catalog]): Known subjects; configured catalog if omitted.
        """
        self.ledger = ledger
        self.analytics = analytics
        self.cache = cache if cache is not None else LocalCache()
        self.catalog = catalog or Catalog()
        self._in_flight: Set[Tuple[str, str]] = set()

    async def toggle_vote(self, subject: str, identity: Optional[str]) -> ToggleResult:
        """
        Toggle `identity`'s vote on `subject`.

        Raises:
            UnknownSubject: Subject not in the catalog.
            IdentityUnavailable: No usable identity token.
            ToggleInFlight: The previous toggle for this pair hasn't finished.
            StoreError: The ledger could not complete the toggle.
        """
        self.catalog.require(subject)
        key = sanitize_identity(identity)
        flight = (subject, key)
        if flight in self._in_flight:
            raise ToggleInFlight(f"toggle already running for {subject}")

        self._in_flight.add(flight)
        try:
            try:
                result = await self.ledger.toggle(subject, identity)
            except StoreError as exc:
                log.warning("vote toggle on %s failed: %s", subject, exc)
                raise
            self.cache.remember_vote(subject, key, result.new_count, result.voted)
            if self.analytics is not None:
                await self.analytics.on_vote_toggled(subject, result.new_count, result.voted)
            return result
        finally:
            self._in_flight.discard(flight)

    async def vote_status(self, subject: str, identity: Optional[str]) -> VoteStatus:
        """
        Current count and this identity's flag.

        Falls back to the local cache (flagged `cached=True`) when the remote
        store can't be read. Without an identity, `voted` is False.
        """
        self.catalog.require(subject)
        try:
            key: Optional[str] = sanitize_identity(identity)
        except IdentityUnavailable:
            key = None

        try:
            count = await self.ledger.count(subject)
            voted = await self.ledger.has_voted(subject, identity) if key else False
        except StoreError as exc:
            log.warning("vote status for %s served from cache: %s", subject, exc)
            cached = self.cache.cached_vote(subject, key or "")
            return VoteStatus(subject, cached["count"], cached["voted"] if key else False, cached=True)

        if key:
            self.cache.remember_vote(subject, key, count, voted)
        return VoteStatus(subject, count, voted)
