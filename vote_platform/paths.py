"""
Canonical store paths.

    votes/{subject}/count
    votes/{subject}/voters/{identity}
    analytics/events/{date}/total_visits
    analytics/events/{date}/{counter}/{subject}

`date` is the UTC calendar day as YYYY-MM-DD so keys sort chronologically.
"""

from datetime import date, datetime, timezone
from typing import Optional

VOTES_ROOT = "votes"
EVENTS_ROOT = "analytics/events"

TOTAL_VISITS = "total_visits"
PROJECT_VIEWS = "project_views"
UPVOTES = "upvotes"
UPVOTE_EVENTS = "upvote_events"
UNVOTE_EVENTS = "unvote_events"
SESSION_DURATION = "session_duration"
SESSION_SAMPLES = "session_samples"
INTERACTIONS = "interactions"
LAST_DURATION = "last_duration"

# Per-subject counters kept in a day's snapshot
SUBJECT_COUNTERS = (
    PROJECT_VIEWS,
    UPVOTES,
    UPVOTE_EVENTS,
    UNVOTE_EVENTS,
    SESSION_DURATION,
    SESSION_SAMPLES,
    INTERACTIONS,
)


def today_key(now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).date().isoformat()


def date_key(day: date) -> str:
    return day.isoformat()


def count_path(subject: str) -> str:
    return f"{VOTES_ROOT}/{subject}/count"


def voters_path(subject: str) -> str:
    return f"{VOTES_ROOT}/{subject}/voters"


def voter_path(subject: str, identity: str) -> str:
    return f"{voters_path(subject)}/{identity}"


def day_path(day: str) -> str:
    return f"{EVENTS_ROOT}/{day}"


def visits_path(day: str) -> str:
    return f"{day_path(day)}/{TOTAL_VISITS}"


def counter_path(day: str, counter: str, subject: str) -> str:
    return f"{day_path(day)}/{counter}/{subject}"
