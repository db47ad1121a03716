"""/api/v1/analytics — dashboard snapshot, manual refresh, predictions."""

from fastapi import APIRouter, Depends

from backend.app.models.analytics import DashboardSnapshot, PredictionsResponse
from backend.app.services.dashboard import DashboardService, get_dashboard_service
from backend.app.services.predictions import build_predictions

router = APIRouter()


@router.get("/api/v1/analytics", response_model=DashboardSnapshot)
def get_analytics(
    service: DashboardService = Depends(get_dashboard_service),
) -> DashboardSnapshot:
    return service.snapshot()


@router.post("/api/v1/analytics/refresh", response_model=DashboardSnapshot)
def refresh_analytics(
    service: DashboardService = Depends(get_dashboard_service),
) -> DashboardSnapshot:
    return service.refresh("manual")


@router.get("/api/v1/analytics/predictions", response_model=PredictionsResponse)
def get_predictions(
    service: DashboardService = Depends(get_dashboard_service),
) -> PredictionsResponse:
    """Regression line and success probability over the current snapshot."""
    return build_predictions(service.snapshot().posts)
