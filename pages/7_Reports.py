"""Reports — download the printable HTML report or print this page."""

import httpx
import streamlit as st
import streamlit.components.v1 as components
from backend.app.services.report_export import DEFAULT_REPORT_TITLE
from ui_helpers import API_BASE, API_TIMEOUT_SECONDS, _safe_error_detail, print_page

st.title("Reports")

title = st.text_input("Report title", value=DEFAULT_REPORT_TITLE, max_chars=200)

try:
    resp = httpx.get(
        f"{API_BASE}/api/v1/reports/export",
        params={"title": title or DEFAULT_REPORT_TITLE},
        timeout=API_TIMEOUT_SECONDS,
    )
except httpx.HTTPError:
    st.error(f"Cannot reach the analytics API at {API_BASE}. Is the backend running?")
    st.stop()

if resp.status_code != 200:
    st.error(_safe_error_detail(resp))
    st.stop()

col_download, col_print = st.columns(2)
with col_download:
    st.download_button(
        "Download report (HTML)",
        data=resp.text,
        file_name="analytics-report.html",
        mime="text/html",
        help="Open the file in a browser and print it to save as PDF.",
    )
with col_print:
    if st.button("Print this page"):
        print_page()

st.divider()
components.html(resp.text, height=900, scrolling=True)
