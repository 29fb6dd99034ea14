"""
FastAPI dependency functions for authentication.

Use with Depends() on administrative routes.
"""

from fastapi import Depends
from fastapi.security import HTTPBasic, HTTPBasicCredentials
from .service import authenticate_admin

security = HTTPBasic()


def require_admin(credentials: HTTPBasicCredentials = Depends(security)) -> str:
    """Return the authenticated operator's username."""
    return authenticate_admin(credentials.username, credentials.password)
