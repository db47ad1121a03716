"""Content view — every post with its weighted score, percentage, and label."""

import streamlit as st
from ui_helpers import load_page_snapshot, scored_posts_frame

st.title("Content")

snapshot = load_page_snapshot()
if not snapshot.posts:
    st.stop()

platforms = sorted({s.post.platform for s in snapshot.posts})
selected = st.multiselect("Platforms", options=platforms, default=platforms)

posts = [s for s in snapshot.posts if s.post.platform in selected]
frame = scored_posts_frame(posts)
if frame.empty:
    st.info("No posts match the selected platforms.")
    st.stop()

st.caption(f"Showing {len(frame)} of {len(snapshot.posts)} posts")
st.dataframe(
    frame.sort_values("Engagement %", ascending=False),
    hide_index=True,
    use_container_width=True,
    column_config={
        "Engagement %": st.column_config.ProgressColumn(
            "Engagement %", min_value=0, max_value=100, format="%.1f%%"
        ),
    },
)
