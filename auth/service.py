"""
Core authentication logic for administrative routes.
"""

from fastapi import HTTPException, status
from .config import USERS
from .utils import password_matches


def authenticate_admin(username: str, password: str) -> str:
    """
    Validate operator credentials.

    Returns:
        str: The authenticated username.

    Raises:
        HTTPException: 401 when the user is unknown or the password is wrong.
    """
    stored_password = USERS.get(username)
    if stored_password is None or not password_matches(stored_password, password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid admin credentials",
            headers={"WWW-Authenticate": "Basic"},
        )
    return username
