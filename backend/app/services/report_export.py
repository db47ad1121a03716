"""Printable HTML report of the dashboard summary.

The document is self-contained (inline CSS) so the browser can save it as
PDF through its print dialog.  The "Top Performing Posts" table is a fixed
illustrative sample and does not reflect live data.
"""

from __future__ import annotations

import html
import logging
from datetime import datetime

from backend.app.core.logging import EVENT_REPORT_EXPORTED, log_event
from backend.app.models.analytics import Aggregates
from backend.app.services.engagement_scoring import percent_to_label

logger = logging.getLogger(__name__)

DEFAULT_REPORT_TITLE = "Social Media Analytics Report"

# (title, platform, likes, comments, engagement percent)
SAMPLE_REPORT_POSTS: tuple[tuple[str, str, int, int, float], ...] = (
    ("Year End Report", "LinkedIn", 3400, 780, 98.2),
    ("Star exec hackathon", "Instagram", 300, 20, 56.6),
    ("Quarterly Review", "Facebook", 1200, 45, 72.3),
)

FORMULA_NOTE = "Weighted formula: (Likes × 1) + (Comments × 2) + (Shares × 3)"
BENCHMARK_NOTE = (
    "Excellent (80-100%), Good (60-80%), Average (40-60%), "
    "Low (10-40%), Very Low (0-10%)"
)

_LABEL_COLOURS = {
    "Excellent": "#10b981",
    "Good": "#3b82f6",
    "Average": "#f59e0b",
    "Low": "#f97316",
    "Very Low": "#ef4444",
}

_STYLE = """
body { font-family: Arial, sans-serif; padding: 30px; max-width: 800px; margin: 0 auto; }
h1 { color: #1f2937; border-bottom: 2px solid #3b82f6; padding-bottom: 10px; }
.summary-grid { display: grid; grid-template-columns: repeat(2, 1fr); gap: 15px; margin: 20px 0; }
.stat-card { background: #f8fafc; border: 1px solid #e2e8f0; border-radius: 8px; padding: 15px; }
.stat-label { font-size: 12px; color: #64748b; margin-bottom: 5px; }
.stat-value { font-size: 20px; font-weight: bold; color: #1e293b; }
.platforms { background: #f8fafc; padding: 15px; border-radius: 8px; margin: 15px 0; }
.platform-row { display: flex; justify-content: space-between; padding: 8px 0; border-bottom: 1px solid #e2e8f0; }
table { border-collapse: collapse; width: 100%; margin: 20px 0; border: 1px solid #e2e8f0; }
th, td { border: 1px solid #e2e8f0; padding: 10px; text-align: left; }
th { background-color: #f1f5f9; font-weight: 600; }
.footer { margin-top: 30px; padding-top: 15px; border-top: 1px solid #e2e8f0; font-size: 12px; color: #64748b; text-align: center; }
"""


def _stat_card(label: str, value: str) -> str:
    return (
        '<div class="stat-card">'
        f'<div class="stat-label">{html.escape(label)}</div>'
        f'<div class="stat-value">{html.escape(value)}</div>'
        "</div>"
    )


def _platform_rows(aggregates: Aggregates) -> str:
    if not aggregates.platforms:
        return '<div class="platform-row"><span>No posts yet</span><span></span></div>'
    return "".join(
        '<div class="platform-row">'
        f"<span>{html.escape(p.name)}</span>"
        f'<span style="font-weight: bold;">{p.posts} posts</span>'
        "</div>"
        for p in aggregates.platforms
    )


def _sample_rows() -> str:
    rows = []
    for title, platform, likes, comments, percent in SAMPLE_REPORT_POSTS:
        colour = _LABEL_COLOURS[percent_to_label(percent)]
        rows.append(
            "<tr>"
            f"<td>{html.escape(title)}</td>"
            f"<td>{html.escape(platform)}</td>"
            f"<td>{likes:,}</td>"
            f"<td>{comments:,}</td>"
            f'<td style="color: {colour}; font-weight: bold;">{percent:.1f}%</td>'
            "</tr>"
        )
    return "".join(rows)


def render_report_html(
    aggregates: Aggregates,
    *,
    title: str = DEFAULT_REPORT_TITLE,
    generated_at: datetime,
) -> str:
    """Render the printable report for *aggregates*."""
    safe_title = html.escape(title)
    cards = "".join(
        (
            _stat_card("Total Posts", f"{aggregates.total_posts:,}"),
            _stat_card("Total Likes", f"{aggregates.total_likes:,}"),
            _stat_card("Total Comments", f"{aggregates.total_comments:,}"),
            _stat_card("Average Engagement", f"{aggregates.avg_engagement_percent:.1f}%"),
        )
    )

    document = f"""<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<title>{safe_title}</title>
<style>{_STYLE}</style>
</head>
<body>
<h1>{safe_title}</h1>
<p><strong>Generated on:</strong> {generated_at.strftime("%B %d, %Y %H:%M")}</p>
<h2>Dashboard Summary</h2>
<div class="summary-grid">{cards}</div>
<h2>Platform Distribution</h2>
<div class="platforms">{_platform_rows(aggregates)}</div>
<h2>Top Performing Posts</h2>
<table>
<thead><tr><th>Post</th><th>Platform</th><th>Likes</th><th>Comments</th><th>Engagement %</th></tr></thead>
<tbody>{_sample_rows()}</tbody>
</table>
<div class="footer">
<p><strong>Engagement Calculation:</strong> {html.escape(FORMULA_NOTE)}</p>
<p><strong>Industry Benchmarks:</strong> {html.escape(BENCHMARK_NOTE)}</p>
</div>
</body>
</html>
"""

    log_event(
        logger, "info", EVENT_REPORT_EXPORTED,
        total_posts=aggregates.total_posts,
        platforms=len(aggregates.platforms),
        length=len(document),
    )
    return document
