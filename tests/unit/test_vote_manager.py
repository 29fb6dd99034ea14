"""
Unit tests for VoteManager and the client-side VoteControl.

Covers:
    - toggle flows through ledger, analytics and local cache
    - catalog and identity validation
    - single-flight guard per (subject, identity)
    - analytics failure never fails the vote
    - status falls back to the local cache when the store is down
    - the heart control: optimistic flip, revert on failure, disabled in flight
"""

import asyncio

import pytest

from vote_platform.errors import (
    IDENTITY_MESSAGE,
    VOTE_RETRY_MESSAGE,
    IdentityUnavailable,
    StoreUnavailable,
    ToggleInFlight,
    UnknownSubject,
)
from vote_platform.ledger.vote_ledger import VoteLedger
from vote_platform.manager.control import VoteControl
from vote_platform.manager.vote_manager import VoteManager
from vote_platform.storage.memory_store import MemoryStore

DAY = "analytics/events/2026-10-18"


class GatedStore(MemoryStore):
    """Holds every count write until `gate` is set."""

    def __init__(self):
        super().__init__()
        self.gate = asyncio.Event()
        self.waiting = asyncio.Event()

    async def write(self, path, value):
        if path.endswith("/count"):
            self.waiting.set()
            await self.gate.wait()
        await super().write(path, value)


# -------------------------
# VoteManager
# -------------------------

@pytest.mark.asyncio
async def test_toggle_updates_ledger_analytics_and_cache(manager, store, cache):
    result = await manager.toggle_vote("dungeon", "v1")
    assert (result.new_count, result.voted) == (1, True)
    assert await store.read(f"{DAY}/upvotes/dungeon") == 1
    assert cache.cached_vote("dungeon", "v1") == {"count": 1, "voted": True}


@pytest.mark.asyncio
async def test_unknown_subject_rejected(manager, store):
    with pytest.raises(UnknownSubject):
        await manager.toggle_vote("spaceship", "v1")
    assert store.calls == []


@pytest.mark.asyncio
async def test_missing_identity_rejected(manager):
    with pytest.raises(IdentityUnavailable):
        await manager.toggle_vote("dungeon", None)


@pytest.mark.asyncio
async def test_overlapping_toggle_from_same_control_rejected(catalog):
    store = GatedStore()
    manager = VoteManager(VoteLedger(store), catalog=catalog)

    first = asyncio.create_task(manager.toggle_vote("dungeon", "v1"))
    await store.waiting.wait()
    with pytest.raises(ToggleInFlight):
        await manager.toggle_vote("dungeon", "v1")

    # A different identity is a different control
    other = asyncio.create_task(manager.toggle_vote("dungeon", "v2"))
    store.gate.set()
    assert (await first).voted is True
    await other

    # Guard released once the toggle finished
    result = await manager.toggle_vote("dungeon", "v1")
    assert result.voted is False


@pytest.mark.asyncio
async def test_guard_released_after_failure(manager, store):
    store.fail_reads.add("votes/")
    with pytest.raises(StoreUnavailable):
        await manager.toggle_vote("dungeon", "v1")
    store.fail_reads.clear()
    assert (await manager.toggle_vote("dungeon", "v1")).voted is True


@pytest.mark.asyncio
async def test_analytics_outage_does_not_fail_vote(manager, store):
    store.fail_writes.add("analytics/")
    result = await manager.toggle_vote("dungeon", "v1")
    assert result.new_count == 1
    assert await store.read("votes/dungeon/count") == 1


@pytest.mark.asyncio
async def test_status_reads_remote_and_refreshes_cache(manager, store, cache):
    await store.write("votes/pizza", {"count": 4, "voters": {"v1": True}})
    status = await manager.vote_status("pizza", "v1")
    assert (status.count, status.voted, status.cached) == (4, True, False)
    assert cache.cached_vote("pizza", "v1") == {"count": 4, "voted": True}


@pytest.mark.asyncio
async def test_status_falls_back_to_cache(manager, store):
    await manager.toggle_vote("pizza", "v1")
    store.fail_reads.add("votes/")
    status = await manager.vote_status("pizza", "v1")
    assert (status.count, status.voted, status.cached) == (1, True, True)


@pytest.mark.asyncio
async def test_status_without_identity(manager, store):
    await store.write("votes/pizza/count", 2)
    status = await manager.vote_status("pizza", "unavailable")
    assert (status.count, status.voted) == (2, False)


# -------------------------
# VoteControl
# -------------------------

@pytest.mark.asyncio
async def test_control_click_round_trip(manager):
    control = VoteControl(manager, "dungeon", "v1")
    await control.load()
    assert (control.count, control.voted) == (0, False)

    assert await control.click() is True
    assert (control.count, control.voted, control.disabled) == (1, True, False)

    assert await control.click() is True
    assert (control.count, control.voted) == (0, False)


@pytest.mark.asyncio
async def test_control_reverts_when_store_read_fails(manager, store):
    await store.write("votes/dungeon/count", 5)
    control = VoteControl(manager, "dungeon", "v1")
    await control.load()

    store.fail_reads.add("votes/")
    assert await control.click() is False

    assert (control.count, control.voted) == (5, False)
    assert control.message == VOTE_RETRY_MESSAGE
    assert control.disabled is False
    store.fail_reads.clear()
    assert await store.read("votes/dungeon/count") == 5


@pytest.mark.asyncio
async def test_control_reverts_on_unknown_subject(manager, store):
    control = VoteControl(manager, "spaceship", "v1")
    assert await control.click() is False
    assert (control.count, control.voted) == (0, False)
    assert control.message == VOTE_RETRY_MESSAGE
    assert control.disabled is False
    assert await store.read("votes/spaceship") is None


@pytest.mark.asyncio
async def test_control_refuses_without_identity(manager):
    control = VoteControl(manager, "dungeon", None)
    assert await control.click() is False
    assert (control.count, control.voted) == (0, False)
    assert control.message == IDENTITY_MESSAGE


@pytest.mark.asyncio
async def test_control_ignores_clicks_while_disabled(catalog):
    store = GatedStore()
    manager = VoteManager(VoteLedger(store), catalog=catalog)
    control = VoteControl(manager, "dungeon", "v1")

    first = asyncio.create_task(control.click())
    await store.waiting.wait()
    assert control.disabled is True
    assert (control.count, control.voted) == (1, True)  # optimistic
    assert await control.click() is False

    store.gate.set()
    assert await first is True
    assert (control.count, control.voted, control.disabled) == (1, True, False)
