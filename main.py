"""
Main API module for Vote Platform.

Responsibilities:
    - Expose the vote toggle and vote status endpoints
    - Record visits, views, interactions and view durations
    - Serve the dashboard (hero metrics, leaderboard, views trend)
    - Offer the administrative "reset today" behind admin auth and a
      confirmation phrase

Architecture:
    - App Factory pattern (create_app) for test isolation and DI.
    - Store chosen by the store factory (memory / rest / postgres).
    - VoteManager orchestrates ledger, analytics and local cache; the
      dashboard functions stay pure and only see fetched snapshots.
"""

import contextlib
import logging
from dataclasses import asdict
from datetime import date, datetime
from typing import Any, Callable, Dict, Optional

from fastapi import Depends, FastAPI, Header, HTTPException, Query
from pydantic import BaseModel, Field

from auth.dependencies import require_admin
from vote_platform.admin.reset import AdminReset
from vote_platform.analytics import dashboard
from vote_platform.analytics.reconciler import AnalyticsReconciler
from vote_platform.analytics.snapshot import fetch_range, fetch_snapshot
from vote_platform.catalog import Catalog
from vote_platform.config import settings
from vote_platform.errors import (
    VOTE_RETRY_MESSAGE,
    IdentityUnavailable,
    PermissionDenied,
    ResetNotConfirmed,
    StoreError,
    ToggleInFlight,
    UnknownSubject,
)
from vote_platform.ledger.vote_ledger import UNAVAILABLE_IDENTITY, VoteLedger
from vote_platform.manager.vote_manager import VoteManager
from vote_platform.storage.base import BaseStore
from vote_platform.storage.local_cache import LocalCache
from vote_platform.storage.store_factory import get_store

IDENTITY_HEADER = "X-Visitor-Id"


class DurationRequest(BaseModel):
    """Seconds a visitor spent on one subject."""
    seconds: int = Field(..., ge=0)


class ResetRequest(BaseModel):
    """Operator must echo the configured confirmation phrase."""
    confirm: str


def get_identity(x_visitor_id: Optional[str] = Header(None)) -> str:
    """Identity token resolved upstream; "unavailable" when the header is missing."""
    return (x_visitor_id or "").strip() or UNAVAILABLE_IDENTITY


def create_app(
    store: Optional[BaseStore] = None,
    cache: Optional[LocalCache] = None,
    catalog: Optional[Catalog] = None,
    clock: Optional[Callable[[], datetime]] = None,
) -> FastAPI:
    """
    Factory function to build and configure a new FastAPI app instance.

    Every argument is optional; omitted collaborators come from config.
    Tests pass an in-memory (or deliberately failing) store and a fixed clock.
    """
    log = logging.getLogger("vote_platform")
    if not logging.getLogger().handlers:
        logging.basicConfig(level=logging.INFO)

    store = store if store is not None else get_store()
    cache = cache if cache is not None else LocalCache(settings.CACHE_PATH)
    catalog = catalog or Catalog()

    ledger = VoteLedger(store)
    reconciler = AnalyticsReconciler(store, clock=clock)
    manager = VoteManager(ledger, analytics=reconciler, cache=cache, catalog=catalog)
    admin = AdminReset(store, ledger, catalog=catalog, clock=clock)

    log.info("Vote store backend: %s, subjects: %s", type(store).__name__, ", ".join(catalog.keys()))

    @contextlib.asynccontextmanager
    async def lifespan(_app: FastAPI):
        yield
        await store.aclose()

    app = FastAPI(
        title="Vote Platform",
        description="Toggleable upvotes with drift-free daily analytics",
        docs_url="/docs",
        lifespan=lifespan,
    )

    # ----------------------------------------------------------------
    # Utilities
    # ----------------------------------------------------------------
    def _require_subject(subject: str) -> None:
        try:
            catalog.require(subject)
        except UnknownSubject as exc:
            raise HTTPException(status_code=404, detail=str(exc))

    def _parse_day(raw: str) -> str:
        try:
            return date.fromisoformat(raw).isoformat()
        except ValueError:
            raise HTTPException(status_code=400, detail="Date must be YYYY-MM-DD")

    async def _snapshot(day: str):
        try:
            return await fetch_snapshot(store, day)
        except StoreError as exc:
            log.warning("dashboard read for %s failed: %s", day, exc)
            raise HTTPException(status_code=503, detail="Analytics are unavailable right now")

    # ----------------------------------------------------------------
    # Routes
    # ----------------------------------------------------------------
    @app.get("/health")
    def health():
        return {"status": "ok"}

    @app.get("/subjects")
    def subjects():
        return [asdict(s) for s in catalog.all()]

    @app.get("/votes/{subject}")
    async def vote_status(subject: str, identity: str = Depends(get_identity)) -> Dict[str, Any]:
        """Count and own vote flag; served from the local cache when the store is down."""
        _require_subject(subject)
        return asdict(await manager.vote_status(subject, identity))

    @app.post("/votes/{subject}/toggle")
    async def toggle_vote(subject: str, identity: str = Depends(get_identity)) -> Dict[str, Any]:
        """
        Flip the caller's vote on `subject`.

        Errors:
            400 identity unavailable, 404 unknown subject, 409 toggle still
            running, 403/503 store refused or unreachable ("try again").
        """
        _require_subject(subject)
        try:
            result = await manager.toggle_vote(subject, identity)
        except IdentityUnavailable as exc:
            raise HTTPException(status_code=400, detail=str(exc))
        except ToggleInFlight:
            raise HTTPException(status_code=409, detail=VOTE_RETRY_MESSAGE)
        except PermissionDenied:
            raise HTTPException(status_code=403, detail=VOTE_RETRY_MESSAGE)
        except StoreError:
            raise HTTPException(status_code=503, detail=VOTE_RETRY_MESSAGE)
        return {"subject": subject, "count": result.new_count, "voted": result.voted}

    @app.post("/analytics/visit")
    async def record_visit():
        await reconciler.record_visit()
        return {"status": "ok"}

    @app.post("/analytics/views/{subject}")
    async def record_view(subject: str):
        _require_subject(subject)
        await reconciler.record_view(subject)
        return {"status": "ok"}

    @app.post("/analytics/interactions/{subject}")
    async def record_interaction(subject: str):
        _require_subject(subject)
        await reconciler.record_interaction(subject)
        return {"status": "ok"}

    @app.post("/analytics/durations/{subject}")
    async def record_duration(subject: str, req: DurationRequest):
        _require_subject(subject)
        counted = await reconciler.record_session_duration(subject, req.seconds)
        return {"status": "ok", "counted": counted}

    @app.post("/analytics/beacon/{subject}", status_code=202)
    async def unload_beacon(subject: str, req: DurationRequest):
        """Page-unload beacon: accepted immediately, delivery is not confirmed."""
        _require_subject(subject)
        return {"status": "accepted", "sent": reconciler.beacon_last_duration(subject, req.seconds)}

    # Registered before /dashboard/{day} so "trend" isn't taken for a date
    @app.get("/dashboard/trend")
    async def views_trend(
        end: Optional[str] = Query(None, description="Last day of the series (YYYY-MM-DD); default today."),
        days: int = Query(7, ge=1, le=90),
    ):
        end_day = date.fromisoformat(_parse_day(end)) if end else date.fromisoformat(reconciler.today())
        try:
            snapshots = await fetch_range(store, end_day, days)
        except StoreError as exc:
            log.warning("trend read failed: %s", exc)
            raise HTTPException(status_code=503, detail="Analytics are unavailable right now")
        return [asdict(p) for p in dashboard.views_trend(snapshots, end_day, days)]

    @app.get("/dashboard/{day}")
    async def dashboard_day(day: str):
        snap = await _snapshot(_parse_day(day))
        return {
            "date": snap.date,
            "hero": dashboard.hero_metrics(snap),
            "average_session_seconds": dashboard.average_session_seconds(snap),
            "leaderboard": [asdict(row) for row in dashboard.leaderboard(snap)],
        }

    @app.post("/admin/reset")
    async def reset_today(req: ResetRequest, user: str = Depends(require_admin)):
        """Destructive: zero today's analytics and close every vote."""
        try:
            summary = await admin.reset_today(req.confirm)
        except ResetNotConfirmed as exc:
            raise HTTPException(status_code=400, detail=str(exc))
        except StoreError as exc:
            log.error("reset by %s failed part-way: %s", user, exc)
            raise HTTPException(status_code=503, detail="Reset failed; run it again")
        log.warning("today's data reset by %s", user)
        return summary

    return app


# `uvicorn main:app --reload` and `from main import app` keep working.
app = create_app()
