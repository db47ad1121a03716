"""Ask AI — questions about your analytics, answered by the LLM via the API."""

import logging

import httpx
import streamlit as st
from backend.app.models.llm import MAX_QUESTION_CHARS
from ui_helpers import API_BASE, _safe_error_detail

logger = logging.getLogger(__name__)

ASK_TIMEOUT_SECONDS = 60.0

st.title("Ask AI")
st.caption("Ask about your posts, platforms, timing, or engagement.")

if "qa_history" not in st.session_state:
    st.session_state.qa_history = []

for role, text in st.session_state.qa_history:
    with st.chat_message(role):
        st.write(text)

question = st.chat_input("e.g. Which platform should I focus on?", max_chars=MAX_QUESTION_CHARS)

if question:
    st.session_state.qa_history.append(("user", question))
    with st.chat_message("user"):
        st.write(question)

    with st.chat_message("assistant"), st.spinner("Thinking..."):
        try:
            resp = httpx.post(
                f"{API_BASE}/api/v1/ask",
                json={"question": question},
                timeout=ASK_TIMEOUT_SECONDS,
            )
        except httpx.HTTPError:
            answer = None
            st.error(f"Cannot reach the analytics API at {API_BASE}. Is the backend running?")
        else:
            if resp.status_code != 200:
                answer = None
                st.error(_safe_error_detail(resp))
            else:
                result = resp.json()["result"]
                if result["status"] == "success":
                    answer = result["answer_text"]
                    st.write(answer)
                else:
                    answer = None
                    st.error(result["user_message"])
                    if result.get("retryable"):
                        st.caption("This looks temporary. Try asking again.")

    if answer:
        st.session_state.qa_history.append(("assistant", answer))

if st.session_state.qa_history and st.button("Clear conversation"):
    st.session_state.qa_history = []
    st.rerun()
