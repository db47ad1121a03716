"""GET /api/v1/reports/export — printable HTML report."""

from datetime import UTC, datetime

from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse

from backend.app.services.dashboard import DashboardService, get_dashboard_service
from backend.app.services.report_export import DEFAULT_REPORT_TITLE, render_report_html

router = APIRouter()


@router.get("/api/v1/reports/export", response_class=HTMLResponse)
def export_report(
    title: str = DEFAULT_REPORT_TITLE,
    service: DashboardService = Depends(get_dashboard_service),
) -> HTMLResponse:
    document = render_report_html(
        service.snapshot().aggregates,
        title=title,
        generated_at=datetime.now(UTC),
    )
    return HTMLResponse(
        content=document,
        headers={"Content-Disposition": 'attachment; filename="analytics-report.html"'},
    )
