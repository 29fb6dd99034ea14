"""
Base store interface for Vote Platform.

Purpose:
    Define the small contract every remote aggregate store offers: a
    hierarchical key-value tree addressed by slash-delimited paths with
    READ, full-value WRITE and subtree DELETE. There is no partial update,
    no transaction and no server-side increment, so every counter in the
    platform is a plain read-then-write.

Testing & Coverage:
    Abstract methods are not executed directly in tests and carry
    `# pragma: no cover`.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Optional, Set

from ..errors import StoreError

log = logging.getLogger(__name__)


def split_path(path: str) -> list:
    """Split a store path into its non-empty segments."""
    return [segment for segment in path.strip("/").split("/") if segment]


def join_path(*segments: str) -> str:
    return "/".join(s.strip("/") for s in segments if s)


class BaseStore(ABC):
    """Abstract base class for remote aggregate stores."""

    def __init__(self) -> None:
        # Strong references to in-flight beacons so the loop doesn't drop them.
        self._beacons: Set[asyncio.Task] = set()

    @abstractmethod  # pragma: no cover
    async def read(self, path: str) -> Optional[Any]:
        """
        Return the value at `path`, or None when absent.

        A path that holds children reads back as a nested dict.

        Raises:
            StoreError: On network failure or rejection.
        """
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    async def write(self, path: str, value: Any) -> None:
        """
        Overwrite the value at `path` (not a merge).

        Raises:
            StoreError: On network failure or rejection.
        """
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    async def delete(self, path: str) -> None:
        """
        Remove `path` and all of its children.

        Only administrative flows use this; the vote path writes explicit
        `False`/`0` values instead.
        """
        raise NotImplementedError

    async def aclose(self) -> None:
        """Release any connections held by the store."""

    def beacon(self, path: str, value: Any) -> None:
        """
        Fire-and-forget write used while a page is being torn down.

        Schedules the write and returns immediately: no suspension, no
        delivery confirmation, no retry. Lost beacons are accepted data loss.
        """
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            log.warning("beacon dropped for %s: no running event loop", path)
            return
        task = loop.create_task(self._send_beacon(path, value))
        self._beacons.add(task)
        task.add_done_callback(self._beacons.discard)

    async def _send_beacon(self, path: str, value: Any) -> None:
        try:
            await self.write(path, value)
        except StoreError as exc:
            log.info("beacon to %s not delivered: %s", path, exc)
