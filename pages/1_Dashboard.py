"""Dashboard overview — KPIs, platform mix, and API health."""

import logging

import pandas as pd
import streamlit as st
from ui_helpers import API_BASE, api_healthy, load_page_snapshot

logger = logging.getLogger(__name__)

st.title("Dashboard")

snapshot = load_page_snapshot()
agg = snapshot.aggregates

# --- KPIs ---
col_posts, col_likes, col_comments, col_shares, col_engagement = st.columns(5)
col_posts.metric("Total Posts", f"{agg.total_posts:,}")
col_likes.metric("Total Likes", f"{agg.total_likes:,}")
col_comments.metric("Total Comments", f"{agg.total_comments:,}")
col_shares.metric("Total Shares", f"{agg.total_shares:,}")
col_engagement.metric("Avg Engagement", f"{agg.avg_engagement_percent:.1f}%")

if agg.total_posts == 0:
    st.stop()

st.divider()

col_platforms, col_top = st.columns(2)

with col_platforms:
    st.subheader("Posts by Platform")
    platform_frame = pd.DataFrame(
        {"Platform": [p.name for p in agg.platforms], "Posts": [p.posts for p in agg.platforms]}
    ).set_index("Platform")
    st.bar_chart(platform_frame)

with col_top:
    st.subheader("Best Performing Content")
    for rank, scored in enumerate(agg.top_posts, start=1):
        st.markdown(
            f"**{rank}. {scored.post.display_title}**  \n"
            f"{scored.post.platform} · score {scored.weighted_score} · "
            f"{scored.engagement_percent:.1f}% ({scored.label})"
        )

st.divider()

# --- API health ---
with st.expander("System status"):
    if api_healthy():
        st.success(f"API reachable at {API_BASE}")
    else:
        st.error(f"API not reachable at {API_BASE}")
    st.write(f"Snapshot generation: {snapshot.generation}")
