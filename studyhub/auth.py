# auth.py

"""
Sign-in and registration forms shown before anything else in the app.
"""

import streamlit as st

from core.logger import logger
from session import get_backend, get_store, state


def render_sign_in() -> None:
    store = get_store()
    with st.form("sign_in_form"):
        email = st.text_input("Email")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Sign in", type="primary", use_container_width=True)

    if submitted:
        if not email or not password:
            st.error("Email and password are required.")
            return
        with st.spinner("Signing in..."):
            result = store.sign_in(email.strip(), password)
        if result.ok:
            state.auth_initialized = True
            st.rerun()
        else:
            st.error(result.error)
            store.clear_error()


def render_register() -> None:
    """
    Registration form. The profile row is written right after the auth
    account; a failed profile write is reported as a failed sign-up.
    """
    backend = get_backend()
    with st.form("register_form"):
        name = st.text_input("Full name")
        institution = st.text_input("Institution (optional)")
        email = st.text_input("Email", key="register_email")
        password = st.text_input("Password", type="password", key="register_password")
        confirm = st.text_input("Confirm password", type="password")
        submitted = st.form_submit_button("Create account", type="primary", use_container_width=True)

    if not submitted:
        return
    if not name.strip() or not email.strip() or not password:
        st.error("Name, email and password are required.")
        return
    if password != confirm:
        st.error("Passwords do not match.")
        return

    with st.spinner("Creating your account..."):
        user, error = backend.sign_up(email.strip(), password, name.strip(), institution.strip() or None)
    if error:
        st.error(error)
        return

    logger.info("Registered %s", user.email if user else email)
    st.success("Account created. Check your email to confirm it, then sign in.")


def render_auth_gate() -> None:
    """Centered sign-in / register tabs for signed-out visitors."""
    st.markdown("<h1 style='text-align:center;'>StudyHub 📚</h1>", unsafe_allow_html=True)
    st.markdown(
        "<p style='text-align:center;'>Your courses, tasks, notes and AI study tools in one place.</p>",
        unsafe_allow_html=True,
    )
    st.text("")

    _, center, _ = st.columns([1, 2, 1])
    with center:
        sign_in_tab, register_tab = st.tabs(["Sign in", "Register"])
        with sign_in_tab:
            render_sign_in()
        with register_tab:
            render_register()
