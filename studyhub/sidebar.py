# sidebar.py

import streamlit as st

from session import cancel_all, get_store, state


def render_sidebar() -> None:
    """Signed-in user card and sign-out button, shown on every page."""
    store = get_store()
    with st.sidebar:
        if store.user is None:
            return

        user = store.user
        st.markdown(f"**{user.name or user.email}**")
        if user.institution:
            st.caption(user.institution)

        if st.button("Sign out", icon=":material/logout:", use_container_width=True, key="sidebar_sign_out"):
            # drop in-flight requests tied to this session's views
            cancel_all()
            result = store.sign_out()
            if result.ok:
                for key in list(state.keys()):
                    if key not in ("store", "backend"):
                        del state[key]
                st.rerun()
            else:
                st.error(result.error)
