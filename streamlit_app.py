"""Streamlit UI for Social Pulse Analytics.

This is the only place that checks the session: anonymous visitors are
routed to the login page, and individual pages assume an authenticated
session.
"""

import logging

import streamlit as st
from backend.app.core.settings import settings
from backend.app.services.auth import SessionContext, authenticate
from ui_helpers import current_session, set_session

logger = logging.getLogger(__name__)

LOCAL_USER = "local"

st.set_page_config(page_title="Social Pulse Analytics", layout="wide")


def _login_page() -> None:
    st.title("Social Pulse Analytics")
    st.subheader("Sign in")
    with st.form("login_form"):
        email = st.text_input("Email")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Sign in", type="primary")

    if submitted:
        context = authenticate(email, password)
        if context.is_authenticated:
            set_session(context)
            st.rerun()
        else:
            st.error("Invalid email or password.")


def _logout() -> None:
    set_session(SessionContext.anonymous())
    st.rerun()


session = current_session()

if not settings.is_login_configured and not session.is_authenticated:
    # No credentials configured: run as a local single-user dashboard.
    session = SessionContext.authenticated(LOCAL_USER)
    set_session(session)

if not session.is_authenticated:
    navigation = st.navigation([st.Page(_login_page, title="Sign in", icon="🔐")])
else:
    if not settings.is_login_configured:
        st.sidebar.warning(
            "Login is not configured. Set DASHBOARD_USER_EMAIL and "
            "DASHBOARD_PASSWORD to require sign-in."
        )
    else:
        st.sidebar.caption(f"Signed in as {session.user_email}")
        if st.sidebar.button("Sign out"):
            _logout()

    if not settings.is_llm_configured:
        st.sidebar.info("No LLM API key set: Ask AI uses a mock assistant.")

    navigation = st.navigation(
        [
            st.Page("pages/1_Dashboard.py", title="Dashboard", icon="📊", default=True),
            st.Page("pages/2_Content.py", title="Content", icon="📝"),
            st.Page("pages/3_Compare.py", title="Compare", icon="⚖️"),
            st.Page("pages/4_AI_Insights.py", title="AI Insights", icon="💡"),
            st.Page("pages/5_Predictions.py", title="Predictions", icon="📈"),
            st.Page("pages/6_Ask_AI.py", title="Ask AI", icon="🤖"),
            st.Page("pages/7_Reports.py", title="Reports", icon="🖨️"),
            st.Page("pages/8_System_Status.py", title="System Status", icon="🩺"),
        ]
    )

navigation.run()
