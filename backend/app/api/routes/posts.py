"""/api/v1/posts — list scored posts and add new ones."""

import logging

from fastapi import APIRouter, Depends, HTTPException

from backend.app.core.errors import normalize_db_error
from backend.app.core.scheduler import ChangeNotifier
from backend.app.models.analytics import ScoredPost
from backend.app.models.post import Post, PostCreate
from backend.app.services.dashboard import (
    DashboardService,
    get_change_notifier,
    get_dashboard_service,
)
from backend.app.services.record_source import SourceWriteError

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/api/v1/posts", response_model=list[ScoredPost])
def list_scored_posts(
    service: DashboardService = Depends(get_dashboard_service),
) -> list[ScoredPost]:
    """Scored posts from the current snapshot (empty when disconnected)."""
    return service.snapshot().posts


@router.post("/api/v1/posts", response_model=Post, status_code=201)
def add_post(
    body: PostCreate,
    service: DashboardService = Depends(get_dashboard_service),
    notifier: ChangeNotifier = Depends(get_change_notifier),
) -> Post:
    """Persist a post, then signal subscribers so the dashboard recomputes."""
    try:
        post = service.source.add_post(body)
    except SourceWriteError as exc:
        error = normalize_db_error(exc.__cause__ or exc, operation="create_post")
        raise HTTPException(status_code=error.http_status, detail=error.user_message) from exc

    notifier.notify("post_created")
    return post
