# session.py

"""
Per-session wiring for the Streamlit pages.

Each browser session gets its own Supabase client (it holds the auth
session) and its own AppStore. The AI client is stateless and shared.
"""

import streamlit as st

from core.ai_client import AIClient
from core.backend import BackendFacade, create_backend
from core.config import get_settings
from core.logger import logger
from core.results import CancelToken
from core.store import AppStore

# Alias for Streamlit session state for convenience
state = st.session_state


def get_backend() -> BackendFacade:
    if "backend" not in state:
        try:
            state.backend = create_backend(get_settings())
        except BackendFacade.NotConfiguredError as e:
            logger.error("Backend not configured: %s", e)
            st.error("StudyHub is not configured. Set SUPABASE_URL and SUPABASE_ANON_KEY in your .env file.")
            st.stop()
    return state.backend


def get_store() -> AppStore:
    if "store" not in state:
        state.store = AppStore(get_backend())
    return state.store


@st.cache_resource
def get_ai() -> AIClient:
    return AIClient(get_settings())


def ensure_auth() -> AppStore:
    """
    Run init_auth once per session and return the store.
    """
    store = get_store()
    if not state.get("auth_initialized"):
        store.init_auth()
        state.auth_initialized = True
    return store


def require_user() -> AppStore:
    """
    Stop the page unless someone is signed in.
    """
    store = ensure_auth()
    if store.user is None:
        st.info("Please sign in to continue.")
        st.page_link("main.py", label="Go to sign in", icon=":material/login:")
        st.stop()
    return store


def new_cancel_token(key: str) -> CancelToken:
    """
    Cancel whatever request was running under ``key`` and start a new token.
    """
    tokens = state.setdefault("cancel_tokens", {})
    previous = tokens.get(key)
    if previous is not None:
        previous.cancel()
    token = CancelToken()
    tokens[key] = token
    return token


def cancel_all() -> None:
    for token in state.get("cancel_tokens", {}).values():
        token.cancel()
    state.cancel_tokens = {}


def render_store_error(store: AppStore, retry=None, key: str = "store_error") -> None:
    """
    Inline error for the last failed store action with a retry button.
    """
    if not store.error:
        return
    st.error(store.error)
    if st.button("Try again", key=f"{key}_retry", icon=":material/refresh:"):
        store.clear_error()
        if retry is not None:
            retry()
        st.rerun()
