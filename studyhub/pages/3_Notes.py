# 3_Notes.py

"""
Notes per course with an editor and a camera scanner that saves a
photographed page as a note.
"""

import streamlit as st

from core.scanner import save_scan
from session import get_store, render_store_error, require_user, state
from sidebar import render_sidebar

ALL_COURSES = "All courses"


def _load_notes(course_id) -> None:
    # pull on first view and whenever the course filter changes
    if "notes_loaded_for" not in state or state.notes_loaded_for != course_id:
        get_store().fetch_notes(course_id)
        state.notes_loaded_for = course_id


def render_note_editor(course_id) -> None:
    store = get_store()
    editing = next((n for n in store.notes if n.id == state.get("editing_note_id")), None)

    with st.form("note_form", clear_on_submit=editing is None):
        st.markdown("**Edit note**" if editing else "**New note**")
        title = st.text_input("Title", value=editing.title if editing else "")
        content = st.text_area("Content", value=editing.content if editing else "", height=250)
        col_save, col_cancel = st.columns(2)
        saved = col_save.form_submit_button("Save", type="primary", use_container_width=True)
        cancelled = col_cancel.form_submit_button("Cancel", use_container_width=True, disabled=editing is None)

    if cancelled:
        state.editing_note_id = None
        st.rerun()
    if not saved:
        return
    if not title.strip():
        st.error("Note title is required.")
        return
    if editing:
        result = store.update_note(editing.id, title.strip(), content)
    else:
        result = store.create_note(title.strip(), content, course_id)
    if result.ok:
        state.editing_note_id = None
        st.rerun()


def render_note_list() -> None:
    store = get_store()
    if not store.notes:
        st.caption("No notes yet.")
        return

    for note in store.notes:
        with st.expander(note.title):
            if note.content.lstrip().startswith("<div"):
                # scanned pages are stored as HTML with an embedded image
                st.html(note.content)
            else:
                st.markdown(note.content)
            col_edit, col_delete = st.columns(2)
            if col_edit.button("Edit", key=f"note_edit_{note.id}", icon=":material/edit:"):
                state.editing_note_id = note.id
                st.rerun()
            if col_delete.button("Delete", key=f"note_del_{note.id}", icon=":material/delete:"):
                if store.delete_note(note.id).ok:
                    st.rerun()


def render_scanner(course_id) -> None:
    store = get_store()
    photo = st.camera_input("Scan a page", key="scanner_camera")
    if photo is None:
        return
    title = st.text_input("Title for the scanned note", key="scanner_title")
    if st.button("Save scan", type="primary", icon=":material/document_scanner:"):
        try:
            result = save_scan(store, title, photo.getvalue(), course_id)
        except ValueError as e:
            st.error(str(e))
            return
        if result.ok:
            st.success("Scan saved as a note")
            state.pop("scanner_camera", None)
            st.rerun()


def main() -> None:
    st.set_page_config(page_title="Notes · StudyHub", page_icon="📝", layout="wide")
    store = require_user()
    render_sidebar()
    state.setdefault("editing_note_id", None)

    st.markdown("<h2 style='text-align:center;'>Notes 📝</h2>", unsafe_allow_html=True)
    st.text("")

    courses = {ALL_COURSES: None, **{c.name: c.id for c in store.courses}}
    course_name = st.selectbox("Course", list(courses), key="notes_course")
    course_id = courses[course_name]
    _load_notes(course_id)
    render_store_error(store, retry=lambda: store.fetch_notes(course_id), key="notes")

    notes_tab, scan_tab = st.tabs(["Notes", "Scanner"])
    with notes_tab:
        left, right = st.columns([3, 2])
        with left:
            render_note_list()
        with right:
            render_note_editor(course_id)
    with scan_tab:
        render_scanner(course_id)


if __name__ == "__main__":
    main()
