"""
vote_platform package initializer.
"""

from . import admin
from . import analytics
from . import ledger
from . import manager
from . import storage

__all__ = ["admin", "analytics", "ledger", "manager", "storage"]
