"""Shared UI helper functions for the Streamlit frontend."""

import logging

import httpx
import pandas as pd
import streamlit as st
from backend.app.core.settings import settings
from backend.app.models.analytics import DashboardSnapshot, ScoredPost
from backend.app.services.auth import SessionContext
from pydantic import ValidationError
from streamlit_js_eval import streamlit_js_eval

logger = logging.getLogger(__name__)

API_BASE = f"http://{settings.api_host}:{settings.api_port}"
API_TIMEOUT_SECONDS = 15.0
SESSION_KEY = "session_context"


def _safe_error_detail(resp: httpx.Response) -> str:
    """Extract a user-friendly error message from an API response.

    Never exposes raw stack traces or secrets.
    """
    try:
        body = resp.json()
        detail = body.get("detail", "")
        if isinstance(detail, list):
            return "; ".join(str(d.get("msg", d)) if isinstance(d, dict) else str(d) for d in detail)
        return str(detail)
    except Exception:
        return f"Unexpected error (HTTP {resp.status_code}). Please try again."


# --- Session ---


def current_session() -> SessionContext:
    if SESSION_KEY not in st.session_state:
        st.session_state[SESSION_KEY] = SessionContext.anonymous()
    return st.session_state[SESSION_KEY]


def set_session(context: SessionContext) -> None:
    st.session_state[SESSION_KEY] = context


# --- API access ---


def fetch_snapshot(*, refresh: bool = False) -> DashboardSnapshot | None:
    """Load the dashboard snapshot from the API; show an error and return None on failure."""
    try:
        if refresh:
            resp = httpx.post(f"{API_BASE}/api/v1/analytics/refresh", timeout=API_TIMEOUT_SECONDS)
        else:
            resp = httpx.get(f"{API_BASE}/api/v1/analytics", timeout=API_TIMEOUT_SECONDS)
    except httpx.HTTPError:
        logger.warning("snapshot_fetch_failed: reason=api_unreachable")
        st.error(f"Cannot reach the analytics API at {API_BASE}. Is the backend running?")
        return None

    if resp.status_code != 200:
        st.error(_safe_error_detail(resp))
        return None
    try:
        return DashboardSnapshot.model_validate(resp.json())
    except ValidationError:
        logger.warning("snapshot_fetch_failed: reason=invalid_payload")
        st.error("The analytics API returned an unexpected response.")
        return None


def api_healthy() -> bool:
    try:
        resp = httpx.get(f"{API_BASE}/health", timeout=5.0)
    except httpx.HTTPError:
        return False
    return resp.status_code == 200


def show_status_banner(snapshot: DashboardSnapshot) -> None:
    """Connected / disconnected banner shown at the top of every data page."""
    if snapshot.status == "disconnected":
        st.error(f"Data source disconnected: {snapshot.error_message}")
    elif not snapshot.posts:
        st.info("Connected, but there are no posts yet.")
    if snapshot.refreshed_at:
        st.caption(f"Last refreshed {snapshot.refreshed_at.strftime('%Y-%m-%d %H:%M:%S')} UTC")


def load_page_snapshot() -> DashboardSnapshot:
    """Refresh control + snapshot + banner; stops the page when nothing loaded."""
    refresh = st.sidebar.button("Refresh data", key="refresh_data")
    snapshot = fetch_snapshot(refresh=refresh)
    if snapshot is None:
        st.stop()
    show_status_banner(snapshot)
    return snapshot


# --- Tables ---


def scored_posts_frame(posts: list[ScoredPost]) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "Title": s.post.display_title,
                "Platform": s.post.platform,
                "Type": s.post.content_type,
                "Likes": s.post.likes,
                "Comments": s.post.comments,
                "Shares": s.post.shares,
                "Weighted Score": s.weighted_score,
                "Engagement %": round(s.engagement_percent, 1),
                "Label": s.label,
                "Posted": s.post.created_at or "",
            }
            for s in posts
        ]
    )


# --- Browser ---


def print_page() -> None:
    """Open the browser print dialog (save as PDF from there)."""
    counter = st.session_state.get("_print_counter", 0) + 1
    st.session_state["_print_counter"] = counter
    streamlit_js_eval(js_expressions="window.print()", key=f"print_{counter}")
