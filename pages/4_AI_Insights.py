"""AI Insights — rule-based insight cards, posting times, and trend."""

import pandas as pd
import streamlit as st
from backend.app.models.analytics import Impact, Trend
from ui_helpers import load_page_snapshot

st.title("AI Insights")

_IMPACT_ICON = {Impact.high: "🔴", Impact.medium: "🟠", Impact.low: "🟢"}
_TREND_LABEL = {
    Trend.increasing: "📈 Increasing",
    Trend.decreasing: "📉 Decreasing",
    Trend.stable: "➖ Stable",
}

snapshot = load_page_snapshot()
agg = snapshot.aggregates

if not snapshot.insights:
    st.info("No insights yet. Add posts to see recommendations.")
    st.stop()

col_trend, col_peak = st.columns(2)
col_trend.metric("Engagement Trend", _TREND_LABEL[agg.trend])
col_peak.metric(
    "Peak Hours",
    ", ".join(f"{h}:00" for h in agg.peak_hours) if agg.peak_hours else "Not enough data",
)

st.divider()

for insight in snapshot.insights:
    with st.container(border=True):
        st.markdown(f"{_IMPACT_ICON[insight.impact]} **{insight.title}**")
        st.write(insight.description)
        st.caption(
            f"{insight.category.value.title()} · {insight.platform} · "
            f"confidence {insight.confidence:.0%}"
        )
        for point in insight.data_points:
            st.markdown(f"- {point}")

if agg.hours:
    st.subheader("Time Analysis")
    hours = pd.DataFrame(
        {"Hour": [h.hour for h in agg.hours], "Avg Weighted Score": [h.avg_weighted_score for h in agg.hours]}
    ).sort_values("Hour").set_index("Hour")
    st.bar_chart(hours)
