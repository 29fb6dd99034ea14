"""
Unit tests for LocalCache.

Covers:
    - defaults when nothing is cached
    - vote mirrors per subject and identity
    - JSON file persistence across instances
    - unreadable / unwritable files degrade to in-memory
"""

from vote_platform.storage.local_cache import LocalCache


def test_defaults_when_empty():
    cache = LocalCache()
    assert cache.cached_vote("dungeon", "v1") == {"count": 0, "voted": False}


def test_vote_mirror_is_per_identity():
    cache = LocalCache()
    cache.remember_vote("dungeon", "v1", 3, True)
    assert cache.cached_vote("dungeon", "v1") == {"count": 3, "voted": True}
    # The count is shared, the flag is not
    assert cache.cached_vote("dungeon", "v2") == {"count": 3, "voted": False}


def test_persists_to_file(tmp_path):
    path = tmp_path / "cache" / "votes.json"
    LocalCache(str(path)).remember_vote("pizza", "v1", 2, True)
    assert path.exists()
    assert LocalCache(str(path)).cached_vote("pizza", "v1") == {"count": 2, "voted": True}


def test_corrupt_file_starts_empty(tmp_path):
    path = tmp_path / "votes.json"
    path.write_text("{not json", encoding="utf-8")
    cache = LocalCache(str(path))
    assert cache.cached_vote("pizza", "v1") == {"count": 0, "voted": False}
    cache.remember_vote("pizza", "v1", 1, True)
    assert LocalCache(str(path)).cached_vote("pizza", "v1") == {"count": 1, "voted": True}


def test_unwritable_location_keeps_memory_copy(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("x", encoding="utf-8")
    cache = LocalCache(str(blocker / "votes.json"))
    cache.remember_vote("pizza", "v1", 1, True)
    assert cache.cached_vote("pizza", "v1") == {"count": 1, "voted": True}
