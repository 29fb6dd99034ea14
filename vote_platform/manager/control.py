"""
Client-side vote control (the heart button).

Mirrors how the button behaves in the page: it disables itself for the
whole toggle, flips optimistically, and on failure puts back exactly what
was displayed before the click along with a short message.
"""

from typing import Optional

from ..errors import VOTE_RETRY_MESSAGE, IdentityUnavailable, VotePlatformError
from .vote_manager import VoteManager


class VoteControl:
    def __init__(self, manager: VoteManager, subject: str, identity: Optional[str]):
        self.manager = manager
        self.subject = subject
        self.identity = identity
        self.count = 0
        self.voted = False
        self.disabled = False
        self.message: Optional[str] = None

    async def load(self) -> None:
        status = await self.manager.vote_status(self.subject, self.identity)
        self.count, self.voted = status.count, status.voted

    async def click(self) -> bool:
        """Toggle the vote. Returns False when ignored or reverted."""
        if self.disabled:
            return False
        self.disabled = True
        self.message = None
        before = (self.count, self.voted)

        # Optimistic flip
        self.voted = not self.voted
        self.count = self.count + 1 if self.voted else max(0, self.count - 1)
        try:
            result = await self.manager.toggle_vote(self.subject, self.identity)
        except IdentityUnavailable as exc:
            self.count, self.voted = before
            self.message = str(exc)
            return False
        except VotePlatformError:
            self.count, self.voted = before
            self.message = VOTE_RETRY_MESSAGE
            return False
        finally:
            self.disabled = False

        self.count, self.voted = result.new_count, result.voted
        return True
