"""
Daily analytics snapshot.

One snapshot per UTC day, read in a single request from
`analytics/events/{date}`. Whatever shape the store returns (missing
maps, nulls, stray non-numeric values) is normalized here so the
dashboard can stay a set of pure functions.
"""

from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any, Dict, List

from ..paths import (
    INTERACTIONS,
    LAST_DURATION,
    PROJECT_VIEWS,
    SESSION_DURATION,
    SESSION_SAMPLES,
    TOTAL_VISITS,
    UNVOTE_EVENTS,
    UPVOTE_EVENTS,
    UPVOTES,
    date_key,
    day_path,
)
from ..storage.base import BaseStore


def _count(raw: Any) -> int:
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        return 0
    return max(0, int(raw))


def _counter_map(raw: Any) -> Dict[str, int]:
    if not isinstance(raw, dict):
        return {}
    return {str(k): _count(v) for k, v in raw.items()}


@dataclass(frozen=True)
class DailySnapshot:
    date: str
    total_visits: int = 0
    project_views: Dict[str, int] = field(default_factory=dict)
    upvotes: Dict[str, int] = field(default_factory=dict)
    upvote_events: Dict[str, int] = field(default_factory=dict)
    unvote_events: Dict[str, int] = field(default_factory=dict)
    session_duration: Dict[str, int] = field(default_factory=dict)
    session_samples: Dict[str, int] = field(default_factory=dict)
    interactions: Dict[str, int] = field(default_factory=dict)
    last_duration: Dict[str, int] = field(default_factory=dict)

    @classmethod
    def from_raw(cls, day: str, raw: Any) -> "DailySnapshot":
        raw = raw if isinstance(raw, dict) else {}
        return cls(
            date=day,
            total_visits=_count(raw.get(TOTAL_VISITS)),
            project_views=_counter_map(raw.get(PROJECT_VIEWS)),
            upvotes=_counter_map(raw.get(UPVOTES)),
            upvote_events=_counter_map(raw.get(UPVOTE_EVENTS)),
            unvote_events=_counter_map(raw.get(UNVOTE_EVENTS)),
            session_duration=_counter_map(raw.get(SESSION_DURATION)),
            session_samples=_counter_map(raw.get(SESSION_SAMPLES)),
            interactions=_counter_map(raw.get(INTERACTIONS)),
            last_duration=_counter_map(raw.get(LAST_DURATION)),
        )


async def fetch_snapshot(store: BaseStore, day: str) -> DailySnapshot:
    """Read one day. Store errors propagate to the caller."""
    return DailySnapshot.from_raw(day, await store.read(day_path(day)))


async def fetch_range(store: BaseStore, end: date, days: int) -> List[DailySnapshot]:
    """Read `days` consecutive days ending on `end`, oldest first."""
    start = end - timedelta(days=days - 1)
    keys = [date_key(start + timedelta(days=i)) for i in range(days)]
    return [await fetch_snapshot(store, key) for key in keys]
