"""
Utility functions for the auth module.
"""

import hashlib
import secrets


def hash_password(password: str) -> str:
    """Return the SHA-256 hex digest of `password`."""
    return hashlib.sha256(password.encode()).hexdigest()


def password_matches(stored: str, supplied: str) -> bool:
    """Constant-time check against a plain or SHA-256-hashed stored password."""
    stored_b = stored.encode()
    return secrets.compare_digest(stored_b, supplied.encode()) or secrets.compare_digest(
        stored_b, hash_password(supplied).encode()
    )
