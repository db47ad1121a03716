"""Compare view — platform and content-type breakdowns."""

import pandas as pd
import streamlit as st
from backend.app.models.analytics import GroupStat
from ui_helpers import load_page_snapshot

st.title("Compare")


def _breakdown_frame(stats: list[GroupStat], label: str) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                label: s.name,
                "Posts": s.posts,
                "Likes": s.total_likes,
                "Comments": s.total_comments,
                "Shares": s.total_shares,
                "Avg Weighted Score": round(s.avg_weighted_score, 1),
                "Avg Engagement %": round(s.avg_engagement_percent, 1),
                "Performance": s.performance,
            }
            for s in stats
        ]
    )


snapshot = load_page_snapshot()
agg = snapshot.aggregates
if agg.total_posts == 0:
    st.stop()

tab_platform, tab_type = st.tabs(["By Platform", "By Content Type"])

with tab_platform:
    frame = _breakdown_frame(agg.platforms, "Platform")
    st.dataframe(frame, hide_index=True, use_container_width=True)
    st.bar_chart(frame.set_index("Platform")[["Avg Engagement %"]])

with tab_type:
    frame = _breakdown_frame(agg.content_types, "Content Type")
    st.dataframe(frame, hide_index=True, use_container_width=True)
    st.bar_chart(frame.set_index("Content Type")[["Avg Engagement %"]])
