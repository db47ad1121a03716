"""Predictions — engagement trend line and per-post success probability."""

import httpx
import pandas as pd
import streamlit as st
from backend.app.models.analytics import PredictionsResponse
from ui_helpers import API_BASE, API_TIMEOUT_SECONDS, _safe_error_detail

st.title("Predictions")

try:
    resp = httpx.get(f"{API_BASE}/api/v1/analytics/predictions", timeout=API_TIMEOUT_SECONDS)
except httpx.HTTPError:
    st.error(f"Cannot reach the analytics API at {API_BASE}. Is the backend running?")
    st.stop()

if resp.status_code != 200:
    st.error(_safe_error_detail(resp))
    st.stop()

predictions = PredictionsResponse.model_validate(resp.json())

if len(predictions.regression.points) < 2:
    st.info("At least two posts are needed for a forecast.")
    st.stop()

regression = predictions.regression
direction = "up" if regression.slope > 0 else "down" if regression.slope < 0 else "flat"
st.metric("Trend per post", f"{regression.slope:+.1f}", help=f"Weighted score is trending {direction}.")

line = pd.DataFrame(
    {
        "Post": [p.index for p in regression.points],
        "Actual": [p.weighted_score for p in regression.points],
        "Trend": [round(p.predicted, 1) for p in regression.points],
    }
).set_index("Post")
st.line_chart(line)

st.subheader("Success Probability")
st.dataframe(
    pd.DataFrame(
        [
            {
                "Title": p.title,
                "Weighted Score": p.weighted_score,
                "Success Probability": round(p.success_probability * 100, 1),
            }
            for p in predictions.posts
        ]
    ),
    hide_index=True,
    use_container_width=True,
    column_config={
        "Success Probability": st.column_config.ProgressColumn(
            "Success Probability", min_value=0, max_value=100, format="%.1f%%"
        ),
    },
)
