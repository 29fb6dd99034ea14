"""
Abstract Base Class for Analytics Backends.

Responsibilities:
    - Define the hooks the vote path and the page lifecycle call into
    - Allow substitution (store-backed reconciler, no-op for tests/offline)

Every hook is best-effort: implementations must not raise store errors
back into the caller.
"""

from abc import ABC, abstractmethod

__all__ = ["BaseAnalytics"]


class BaseAnalytics(ABC):
    """Abstract base for pluggable analytics backends."""

    @abstractmethod
    async def record_visit(self) -> None:  # pragma: no cover
        """Count one page visit for today."""
        raise NotImplementedError

    @abstractmethod
    async def record_view(self, subject: str) -> None:  # pragma: no cover
        """Count one view of `subject` for today."""
        raise NotImplementedError

    @abstractmethod
    async def on_vote_toggled(self, subject: str, new_count: int, voted: bool) -> None:  # pragma: no cover
        """
        Mirror a completed toggle into today's analytics.

        Args:
            subject (str): The subject that was toggled.
            new_count (int): The ledger's authoritative count after the toggle.
            voted (bool): True for a vote, False for a retraction.
        """
        raise NotImplementedError
