"""
Dashboard aggregation.

Pure functions over already-fetched DailySnapshot objects: hero totals,
the upvote leaderboard, the views trend and average session time. No I/O
and no mutation happens here.
"""

import random
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional

from ..paths import date_key
from .snapshot import DailySnapshot


@dataclass(frozen=True)
class LeaderboardRow:
    rank: int
    subject: str
    upvotes: int
    views: int
    upvote_ratio: float
    upvote_percent: float


@dataclass(frozen=True)
class TrendPoint:
    date: str
    total_views: int


def hero_metrics(snapshot: DailySnapshot) -> Dict[str, int]:
    return {
        "total_visits": snapshot.total_visits,
        "total_views": sum(snapshot.project_views.values()),
        "total_upvotes": sum(snapshot.upvotes.values()),
    }


def upvote_ratio(upvotes: int, total_upvotes: int) -> float:
    """Share of all upvotes; exactly 0 when nobody has upvoted anything."""
    if total_upvotes <= 0:
        return 0.0
    return min(1.0, max(0.0, upvotes / total_upvotes))


def leaderboard(snapshot: DailySnapshot, rng: Optional[random.Random] = None) -> List[LeaderboardRow]:
    """
    Rank every subject seen in views or upvotes.

    Order: upvotes desc, then views desc, then a random tiebreak that is
    drawn once per call (so it may change between renders).
    """
    rng = rng or random.Random()
    subjects = set(snapshot.project_views) | set(snapshot.upvotes)
    total = sum(snapshot.upvotes.get(s, 0) for s in subjects)
    tiebreak = {s: rng.random() for s in subjects}

    ordered = sorted(
        subjects,
        key=lambda s: (-snapshot.upvotes.get(s, 0), -snapshot.project_views.get(s, 0), tiebreak[s]),
    )
    rows = []
    for rank, subject in enumerate(ordered, start=1):
        up = snapshot.upvotes.get(subject, 0)
        ratio = upvote_ratio(up, total)
        rows.append(
            LeaderboardRow(
                rank=rank,
                subject=subject,
                upvotes=up,
                views=snapshot.project_views.get(subject, 0),
                upvote_ratio=ratio,
                upvote_percent=round(ratio * 100, 1),
            )
        )
    return rows


def average_session_seconds(snapshot: DailySnapshot) -> int:
    samples = sum(snapshot.session_samples.values())
    if samples <= 0:
        return 0
    return round(sum(snapshot.session_duration.values()) / samples)


def views_trend(snapshots: Iterable[DailySnapshot], end: date, days: int) -> List[TrendPoint]:
    """
    Total views per day for the `days` days ending on `end`, oldest first.

    Days without a snapshot count as zero so the series has no gaps.
    """
    by_day = {s.date: s for s in snapshots}
    start = end - timedelta(days=days - 1)
    series = []
    for i in range(days):
        key = date_key(start + timedelta(days=i))
        snap = by_day.get(key)
        series.append(TrendPoint(date=key, total_views=sum(snap.project_views.values()) if snap else 0))
    return series
