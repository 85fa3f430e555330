# main.py

"""
Entry point for the StudyHub Streamlit application.
Resolves the auth session, shows sign-in for visitors and the
dashboard for signed-in users. The other views live under pages/.
"""

import html

import streamlit as st

from auth import render_auth_gate
from dashboard import (
    render_course_progress, render_overview, render_smart_revision, render_upcoming_tasks
)
from session import ensure_auth, render_store_error
from sidebar import render_sidebar


def init_session_state() -> None:
    """
    Ensure all expected Streamlit session_state keys exist with default values.
    """
    state = st.session_state
    state.setdefault("auth_initialized", False)
    state.setdefault("cancel_tokens", {})
    state.setdefault("revision_added", set()) # recommendation ids already turned into tasks


def main() -> None:
    st.set_page_config(page_title="StudyHub", page_icon="📚", layout="wide")
    init_session_state()

    store = ensure_auth()
    render_sidebar()

    if store.user is None:
        render_auth_gate()
        return

    name = html.escape(store.user.name or store.user.email)
    st.markdown(f"<h2 style='text-align:center;'>Welcome back, {name}</h2>", unsafe_allow_html=True)
    st.text("")

    render_store_error(store, retry=lambda: (store.fetch_courses(), store.fetch_tasks()), key="dashboard")
    render_overview()
    st.text("")

    left, right = st.columns([3, 2])
    with left:
        with st.container(border=True):
            render_smart_revision()
    with right:
        with st.container(border=True):
            render_upcoming_tasks()
        st.text("")
        with st.container(border=True):
            render_course_progress()


# Run the app
if __name__ == "__main__":
    main()
