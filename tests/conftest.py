"""
Global pytest fixtures for the Vote Platform test suite.

Responsibilities:
    - Provide a fresh FastAPI TestClient via the app factory for integration tests
    - Provide isolated in-memory store, local cache, ledger, reconciler and
      manager fixtures for direct testing
    - Provide a store whose reads/writes can be made to fail per path prefix
    - Pin "today" with a fixed clock so day keys are predictable
"""

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from main import create_app
from vote_platform.analytics.reconciler import AnalyticsReconciler
from vote_platform.catalog import Catalog
from vote_platform.errors import PermissionDenied, StoreUnavailable
from vote_platform.ledger.vote_ledger import VoteLedger
from vote_platform.manager.vote_manager import VoteManager
from vote_platform.storage.local_cache import LocalCache
from vote_platform.storage.memory_store import MemoryStore

TODAY = "2026-10-18"
SUBJECTS = ["dungeon", "rocketship", "ak47", "pizza"]


class FlakyStore(MemoryStore):
    """MemoryStore that fails on chosen path prefixes."""

    def __init__(self):
        super().__init__()
        self.fail_reads = set()
        self.fail_writes = set()
        self.deny_writes = set()
        self.calls = []

    @staticmethod
    def _hit(prefixes, path):
        return any(path.startswith(p) for p in prefixes)

    async def read(self, path):
        self.calls.append(("read", path))
        if self._hit(self.fail_reads, path):
            raise StoreUnavailable(f"read {path} failed", path=path)
        return await super().read(path)

    async def write(self, path, value):
        self.calls.append(("write", path))
        if self._hit(self.deny_writes, path):
            raise PermissionDenied(f"write {path} denied", path=path)
        if self._hit(self.fail_writes, path):
            raise StoreUnavailable(f"write {path} failed", path=path)
        await super().write(path, value)


@pytest.fixture
def clock():
    fixed = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)
    return lambda: fixed


@pytest.fixture
def store() -> FlakyStore:
    """Fresh in-memory store; healthy until a test sets failure prefixes."""
    return FlakyStore()


@pytest.fixture
def cache() -> LocalCache:
    return LocalCache()


@pytest.fixture
def catalog() -> Catalog:
    return Catalog(SUBJECTS)


@pytest.fixture
def ledger(store) -> VoteLedger:
    return VoteLedger(store)


@pytest.fixture
def reconciler(store, clock) -> AnalyticsReconciler:
    return AnalyticsReconciler(store, clock=clock, min_duration=2)


@pytest.fixture
def manager(ledger, reconciler, cache, catalog) -> VoteManager:
    return VoteManager(ledger, analytics=reconciler, cache=cache, catalog=catalog)


@pytest.fixture
def client(store, cache, catalog, clock) -> TestClient:
    """Fresh app per test, wired to the shared store fixture."""
    app = create_app(store=store, cache=cache, catalog=catalog, clock=clock)
    return TestClient(app)
