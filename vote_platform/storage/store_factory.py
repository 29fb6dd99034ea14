"""
Store factory – switch the remote store backend from config (lazy env version)
=============================================================================

Centralizes selection of the store backend so the ledger, the analytics
layer and the API stay ignorant of where data lives.

- Reads environment **at call time** so tests can switch backends.
- Imports the REST and DB backends **only if** selected.

Environment variables
---------------------
- VOTE_STORE_BACKEND: "memory" (default), "rest" or "postgres"
- VOTE_STORE_URL:     base URL if backend == "rest"
- VOTE_DB_DSN:        DSN string if backend == "postgres"
"""

import logging
import os
from typing import Optional

from vote_platform.config import settings
from vote_platform.storage.base import BaseStore
from vote_platform.storage.memory_store import MemoryStore

log = logging.getLogger(__name__)


def get_store(backend: Optional[str] = None, **kwargs) -> BaseStore:
    """
    Return a store based on configuration.

    Parameters
    ----------
    backend : str, optional
        "memory", "rest" or "postgres". If omitted, reads VOTE_STORE_BACKEND.
    kwargs : dict
        Extra args for the backend: base_url/timeout for rest, dsn for postgres.
    """
    be = (backend or os.getenv("VOTE_STORE_BACKEND", settings.STORE_BACKEND)).strip().lower()
    log.info("Selected store backend: %r", be)

    if be == "memory":
        return MemoryStore()

    if be == "rest":
        base_url = kwargs.get("base_url") or os.getenv("VOTE_STORE_URL", settings.STORE_URL)
        if not base_url:
            raise ValueError("VOTE_STORE_URL is required for the rest backend")
        from vote_platform.storage.rest_store import RestStore
        return RestStore(base_url, timeout=kwargs.get("timeout", settings.STORE_TIMEOUT))

    if be == "postgres":
        dsn = kwargs.get("dsn") or os.getenv("VOTE_DB_DSN", settings.DB_DSN)
        if not dsn:
            raise ValueError("VOTE_DB_DSN is required for the postgres backend")
        from vote_platform.storage.db_store import PostgresStore
        return PostgresStore(dsn=dsn)

    raise ValueError(f"Unknown store backend: {be!r}")
