"""
Error taxonomy for Vote Platform.

    VotePlatformError
    ├── StoreError            remote store failed the request
    │   ├── StoreUnavailable  network error, timeout, non-success response
    │   └── PermissionDenied  store rules rejected the operation
    ├── IdentityUnavailable   no stable visitor token could be obtained
    ├── ToggleInFlight        a toggle for the same control is still running
    ├── UnknownSubject        subject is not part of the catalog
    └── ResetNotConfirmed     admin reset attempted without the confirmation phrase

The vote path lets StoreError propagate so callers can revert the UI; the
analytics path catches it, logs it and moves on.
"""

VOTE_RETRY_MESSAGE = "Couldn't save your vote. Please try again."
IDENTITY_MESSAGE = "We couldn't recognise your browser, so your vote wasn't counted."


class VotePlatformError(Exception):
    """Base class for all platform errors."""


class StoreError(VotePlatformError):
    """A remote store operation failed."""

    def __init__(self, message: str, path: str = ""):
        super().__init__(message)
        self.path = path


class StoreUnavailable(StoreError):
    """Network failure, timeout or non-success response from the store."""


class PermissionDenied(StoreError):
    """The store refused the operation under its declarative rules."""


class IdentityUnavailable(VotePlatformError):
    """The identity provider could not supply a stable token."""

    def __init__(self, message: str = IDENTITY_MESSAGE):
        super().__init__(message)


class ToggleInFlight(VotePlatformError):
    """A toggle for this (subject, identity) pair has not finished yet."""


class UnknownSubject(VotePlatformError):
    """The subject key is not in the catalog."""


class ResetNotConfirmed(VotePlatformError):
    """The administrative reset was invoked without the confirmation phrase."""
