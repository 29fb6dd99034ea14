"""
Configuration for the auth module.

A single operator account, read from the environment. The password may be
given in plain text or as a SHA-256 hex digest.
"""

from typing import Dict
import os

ADMIN_USERNAME = os.getenv("ADMIN_USER", "vote_admin")

USERS: Dict[str, str] = {
    ADMIN_USERNAME: os.getenv("ADMIN_USER_PASSWORD", "vote_admin"),
}
