"""System status — live record source check and YouTube sync."""

import httpx
import streamlit as st
from ui_helpers import API_BASE, API_TIMEOUT_SECONDS, _safe_error_detail

st.title("System Status")

if st.button("Test connection"):
    st.rerun()

try:
    resp = httpx.get(f"{API_BASE}/api/v1/sources/status", timeout=API_TIMEOUT_SECONDS)
except httpx.HTTPError:
    st.error(f"Cannot reach the analytics API at {API_BASE}. Is the backend running?")
    st.stop()

if resp.status_code != 200:
    st.error(_safe_error_detail(resp))
    st.stop()

status = resp.json()
col_source, col_state, col_posts, col_latency = st.columns(4)
col_source.metric("Record source", status["source"])
col_state.metric("Status", status["status"].title())
col_posts.metric("Posts", f"{status['post_count']:,}")
col_latency.metric("Latency", f"{status['latency_ms']} ms")

if status["status"] == "connected":
    st.success("Record source connected.")
else:
    st.error(f"{status['error_message']} ({status['error_category']})")
st.caption(f"Checked at {status['checked_at']}")

st.subheader("Configuration")
for name, enabled in status["configured"].items():
    st.write(f"{'✅' if enabled else '⚪'} {name}")

st.divider()

st.subheader("YouTube")
if not status["configured"].get("youtube"):
    st.info("Set YOUTUBE_API_KEY and YOUTUBE_CHANNEL_ID to import channel videos.")
elif st.button("Sync latest videos", type="primary"):
    with st.spinner("Fetching videos from YouTube..."):
        try:
            sync = httpx.post(
                f"{API_BASE}/api/v1/sources/youtube/sync",
                timeout=API_TIMEOUT_SECONDS * 3,
            )
        except httpx.HTTPError:
            st.error(f"Cannot reach the analytics API at {API_BASE}. Is the backend running?")
            st.stop()
    if sync.status_code == 200:
        body = sync.json()
        st.success(
            f"Fetched {body['fetched']} videos: {body['inserted']} added, "
            f"{body['skipped']} already present."
        )
    else:
        st.error(_safe_error_detail(sync))
