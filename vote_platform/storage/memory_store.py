"""
In-memory store for Vote Platform.

Responsibilities:
    - Hold a nested dict tree addressed by slash-delimited paths
    - Provide READ / WRITE / DELETE with the same semantics as the REST store

Design:
    - Reference implementation of the BaseStore contract used by the test
      suite and by local development (VOTE_STORE_BACKEND=memory).
    - Values are deep-copied on the way in and out so callers can never
      mutate stored state behind the store's back.
    - Writing None (or an empty dict) removes the node, as the REST store
      does, and empty parents are pruned.
    - Every method awaits once so callers observe the same suspension
      points they would against a real remote store.
"""

import asyncio
import copy
from typing import Any, Dict, Optional

from .base import BaseStore, split_path


class MemoryStore(BaseStore):
    def __init__(self, data: Optional[Dict[str, Any]] = None):
        """
        Initialize the tree, optionally seeded.

        Internal schema:
            self.tree = {"votes": {"dungeon": {"count": 1, "voters": {...}}}, ...}
        """
        super().__init__()
        self.tree: Dict[str, Any] = copy.deepcopy(data) if data else {}

    async def read(self, path: str) -> Optional[Any]:
        await asyncio.sleep(0)
        node: Any = self.tree
        for segment in split_path(path):
            if not isinstance(node, dict) or segment not in node:
                return None
            node = node[segment]
        if node == {}:
            return None
        return copy.deepcopy(node)

    async def write(self, path: str, value: Any) -> None:
        await asyncio.sleep(0)
        if value is None or value == {}:
            self._remove(path)
            return
        segments = split_path(path)
        if not segments:
            if not isinstance(value, dict):
                raise ValueError("the store root only accepts a mapping")
            self.tree = copy.deepcopy(value)
            return
        node = self.tree
        for segment in segments[:-1]:
            child = node.get(segment)
            if not isinstance(child, dict):
                # A leaf on the way down is replaced by a branch
                child = node[segment] = {}
            node = child
        node[segments[-1]] = copy.deepcopy(value)

    async def delete(self, path: str) -> None:
        await asyncio.sleep(0)
        self._remove(path)

    def _remove(self, path: str) -> None:
        segments = split_path(path)
        if not segments:
            self.tree = {}
            return
        trail = [self.tree]
        for segment in segments[:-1]:
            child = trail[-1].get(segment)
            if not isinstance(child, dict):
                return
            trail.append(child)
        trail[-1].pop(segments[-1], None)
        # Prune parents left empty by the removal
        for depth in range(len(trail) - 1, 0, -1):
            if trail[depth]:
                break
            trail[depth - 1].pop(segments[depth - 1], None)
