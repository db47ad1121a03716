"""FastAPI application entry point."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from backend.app.api.routes.analytics import router as analytics_router
from backend.app.api.routes.ask import router as ask_router
from backend.app.api.routes.health import router as health_router
from backend.app.api.routes.posts import router as posts_router
from backend.app.api.routes.reports import router as reports_router
from backend.app.api.routes.sources import router as sources_router
from backend.app.core.logging import EVENT_APP_START, EVENT_CONFIG_LOADED, log_event, setup_logging
from backend.app.core.scheduler import ChangeWatcher
from backend.app.core.settings import settings
from backend.app.db.engine import init_db
from backend.app.db.migrations import run_migrations
from backend.app.services.dashboard import (
    get_change_notifier,
    get_dashboard_service,
    reset_dashboard_service,
)
from backend.app.services.record_source import SqlRecordSource

setup_logging(level=getattr(logging, settings.log_level.upper(), logging.INFO))
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    log_event(logger, "info", EVENT_APP_START)
    log_event(logger, "info", EVENT_CONFIG_LOADED, **settings.safe_dump())
    init_db()
    run_migrations()

    service = get_dashboard_service()
    if settings.seed_sample_posts and isinstance(service.source, SqlRecordSource):
        service.source.seed_if_empty()
    service.refresh("startup")

    watcher: ChangeWatcher | None = None
    if settings.change_poll_enabled:
        watcher = ChangeWatcher(
            service.source.change_token,
            get_change_notifier(),
            interval_seconds=settings.change_poll_interval_seconds,
        )
        watcher.start()
    logger.info("Social Pulse Analytics API ready")
    yield
    if watcher is not None:
        watcher.stop()
    reset_dashboard_service()
    logger.info("Social Pulse Analytics API shutting down")


app = FastAPI(
    title="Social Pulse Analytics API",
    version="0.1.0",
    description="Backend API for the social media engagement analytics dashboard.",
    lifespan=lifespan,
)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler: log details, return safe generic message."""
    from backend.app.core.errors import normalize_unknown_error

    error = normalize_unknown_error(exc, operation=f"{request.method} {request.url.path}")
    return JSONResponse(
        status_code=error.http_status,
        content={"detail": error.user_message},
    )


app.include_router(health_router, tags=["health"])
app.include_router(posts_router, tags=["posts"])
app.include_router(analytics_router, tags=["analytics"])
app.include_router(ask_router, tags=["ask"])
app.include_router(reports_router, tags=["reports"])
app.include_router(sources_router, tags=["sources"])
