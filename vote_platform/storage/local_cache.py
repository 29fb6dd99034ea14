"""
Local cache – per-client fallback mirror.

Holds the last known vote count per subject and this client's own vote
flag, so a status read can still render something when the remote store
is unreachable. It is never authoritative: any successful remote read
overwrites it, and nothing ever reads it while the remote store answers.

Persistence is a single JSON file (VOTE_CACHE_PATH); without a path the
cache lives only in memory. I/O problems are logged and ignored, the
cache is best-effort by nature.
"""

import json
import logging
import os
from typing import Any, Dict, Optional

log = logging.getLogger(__name__)


def count_key(subject: str) -> str:
    return f"vote_count_{subject}"


def voted_key(subject: str, identity: str) -> str:
    return f"voted_{subject}_{identity}"


class LocalCache:
    def __init__(self, path: Optional[str] = None):
        self.path = path or None
        self._data: Dict[str, Any] = {}
        self._load()

    def _load(self) -> None:
        if not self.path or not os.path.exists(self.path):
            return
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
            if isinstance(data, dict):
                self._data = data
        except (OSError, ValueError) as exc:
            log.warning("local cache %s unreadable, starting empty: %s", self.path, exc)

    def _save(self) -> None:
        if not self.path:
            return
        try:
            directory = os.path.dirname(self.path)
            if directory:
                os.makedirs(directory, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(self._data, f)
        except OSError as exc:
            log.warning("local cache %s not saved: %s", self.path, exc)

    # ---- Vote mirrors -----------------------------------------------------

    def remember_vote(self, subject: str, identity: str, count: int, voted: bool) -> None:
        self._data[count_key(subject)] = count
        self._data[voted_key(subject, identity)] = voted
        self._save()

    def cached_vote(self, subject: str, identity: str) -> Dict[str, Any]:
        """Return {"count", "voted"} from the cache, defaulting to 0/False."""
        return {
            "count": int(self._data.get(count_key(subject), 0) or 0),
            "voted": bool(self._data.get(voted_key(subject, identity), False)),
        }
