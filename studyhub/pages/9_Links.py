# 9_Links.py

"""
Link repository: save external study resources, then find them again by
tag or by searching title, description and URL.
"""

import streamlit as st

from core.links import MAX_TAG_CHIPS, all_tags, filter_links, save_link
from session import get_backend, require_user
from sidebar import render_sidebar


def render_link_form(user_id: str) -> None:
    with st.form("link_form", clear_on_submit=True):
        st.markdown("**Save a link**")
        title = st.text_input("Title")
        url = st.text_input("URL", placeholder="https://")
        description = st.text_area("Description", height=100)
        tags = st.text_input("Tags (comma separated)")
        saved = st.form_submit_button("Save link", type="primary", use_container_width=True)

    if not saved:
        return
    _, error = save_link(get_backend(), user_id, title, url, description, tags)
    if error:
        st.error(error)
        return
    st.success("Link saved")
    st.rerun()


def render_links(links: list) -> None:
    if not links:
        st.caption("No links found.")
        return
    for link in links:
        with st.container(border=True):
            st.markdown(f"**[{link.title}]({link.url})**")
            if link.description:
                st.write(link.description)
            if link.tags:
                st.caption(" · ".join(f"🏷️ {tag}" for tag in link.tags))
            if st.button("Delete", key=f"link_del_{link.id}", icon=":material/delete:"):
                _, error = get_backend().delete_link(link.id)
                if error:
                    st.error(error)
                else:
                    st.rerun()


def main() -> None:
    st.set_page_config(page_title="Links · StudyHub", page_icon="🔗", layout="wide")
    store = require_user()
    render_sidebar()
    user_id = store.user.id

    st.markdown("<h2 style='text-align:center;'>Link Repository 🔗</h2>", unsafe_allow_html=True)
    st.text("")

    links, error = get_backend().get_links(user_id)
    if error:
        st.error(error)
        if st.button("Try again", icon=":material/refresh:"):
            st.rerun()
        return
    links = links or []

    left, right = st.columns([3, 2])
    with left:
        query = st.text_input("Search links", key="links_query", placeholder="Search title, description or URL")
        selected = st.pills("Tags", all_tags(links)[:MAX_TAG_CHIPS], selection_mode="multi", key="links_tags")
        render_links(filter_links(links, query, selected or []))
    with right:
        render_link_form(user_id)


if __name__ == "__main__":
    main()
