"""
Subject catalog.

The set of votable subjects is small and known in advance. The built-in
entries mirror the portfolio models; deployments can narrow or replace the
list with VOTE_SUBJECTS.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional

from .config import settings
from .errors import UnknownSubject


@dataclass(frozen=True)
class Subject:
    key: str
    name: str
    category: str


DEFAULT_SUBJECTS: Dict[str, Subject] = {
    s.key: s
    for s in (
        Subject("dungeon", "Dungeon Environment", "Environment"),
        Subject("rocketship", "Rocketship", "Vehicle"),
        Subject("ak47", "AK47 Assault Rifle", "Weapon"),
        Subject("awp", "AWP Sniper Rifle", "Weapon"),
        Subject("pizza", "Pizza", "Food"),
        Subject("mouse", "Computer Mouse", "Tech"),
        Subject("house", "House", "Architecture"),
        Subject("lighthouse", "Lighthouse", "Environment"),
    )
}


class Catalog:
    """Lookup over the configured subjects."""

    def __init__(self, keys: Optional[List[str]] = None):
        keys = keys if keys is not None else (settings.SUBJECTS or list(DEFAULT_SUBJECTS))
        self._subjects: Dict[str, Subject] = {
            key: DEFAULT_SUBJECTS.get(key, Subject(key, key.replace("_", " ").title(), "Other"))
            for key in keys
        }

    def __contains__(self, key: str) -> bool:
        return key in self._subjects

    def keys(self) -> List[str]:
        return list(self._subjects)

    def all(self) -> List[Subject]:
        return list(self._subjects.values())

    def require(self, key: str) -> Subject:
        """Return the subject or raise UnknownSubject."""
        try:
            return self._subjects[key]
        except KeyError:
            raise UnknownSubject(f"Unknown subject: {key!r}") from None
