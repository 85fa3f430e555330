# courses.py

"""
Course list, syllabus editor and per-course document panel.
"""

import html

import streamlit as st

from core import syllabus as sy
from core.ai_client import AIServiceError
from core.document_actions import (
    ACTION_LABELS, DocumentNotProcessedError, ai_actions_enabled, disabled_reason, run_document_action
)
from core.model_schemas import Course, Document, Syllabus
from core.results import OperationCancelled
from flashcards import render_saved_flashcards
from session import get_ai, get_backend, get_store, new_cancel_token, state


def render_course_list() -> None:
    """
    Create form plus one row per course with open / delete buttons.
    """
    store = get_store()

    with st.expander("New course", icon=":material/add:"):
        with st.form("new_course_form", clear_on_submit=True):
            name = st.text_input("Course name")
            description = st.text_area("Description")
            if st.form_submit_button("Create", type="primary"):
                if not name.strip():
                    st.error("Course name is required.")
                else:
                    result = store.create_course(name.strip(), description.strip())
                    if result.ok:
                        st.rerun()

    if not store.courses:
        st.info("No courses yet. Create your first one above.")
        return

    pending_delete = state.get("course_pending_delete")
    for course in store.courses:
        with st.container(border=True):
            col_name, col_progress, col_open, col_delete = st.columns([4, 2, 1, 1])
            col_name.markdown(f"**{course.name}**  \n{course.description}")
            col_progress.progress(sy.progress(course.syllabus) / 100)
            if col_open.button("", key=f"open_{course.id}", icon=":material/open_in_new:", use_container_width=True):
                store.set_current_course(course)
                store.fetch_documents(course.id)
                st.rerun()
            if col_delete.button("", key=f"delete_{course.id}", icon=":material/delete:", use_container_width=True):
                state.course_pending_delete = course.id
                st.rerun()

            if pending_delete == course.id:
                st.warning(f"Delete '{course.name}' with its tasks, notes and documents?")
                col_yes, col_no = st.columns(2)
                if col_yes.button("Delete", key=f"confirm_delete_{course.id}", type="primary"):
                    store.delete_course(course.id)
                    state.course_pending_delete = None
                    st.rerun()
                if col_no.button("Cancel", key=f"cancel_delete_{course.id}"):
                    state.course_pending_delete = None
                    st.rerun()


def render_course_header(course: Course) -> None:
    store = get_store()
    col_back, col_title = st.columns([1, 6])
    if col_back.button("Back", icon=":material/arrow_back:"):
        store.set_current_course(None)
        st.rerun()
    col_title.markdown(f"<h2>{html.escape(course.name)}</h2>", unsafe_allow_html=True)

    with st.expander("Edit course details", icon=":material/edit:"):
        with st.form(f"edit_course_{course.id}"):
            name = st.text_input("Course name", value=course.name)
            description = st.text_area("Description", value=course.description)
            if st.form_submit_button("Save"):
                if not name.strip():
                    st.error("Course name is required.")
                elif store.update_course(course.id, name.strip(), description.strip()).ok:
                    st.rerun()


def _show(result) -> None:
    if result.ok:
        st.rerun()
    st.error(result.error)


def render_syllabus_editor(course_id: str) -> None:
    """
    Chapters with their topics, completion checkboxes and inline edits.
    Every edit is saved to the course right away.
    """
    store = get_store()
    editor = sy.SyllabusEditor(store, course_id)
    if editor.course is None:
        st.error("Course not found")
        return
    if not editor.syllabus.chapters:
        # first visit: persist the starter syllabus
        editor.load()

    syllabus = editor.syllabus
    st.progress(sy.progress(syllabus) / 100, text=f"{sy.progress(syllabus):.0f}% complete")

    for chapter in syllabus.chapters:
        with st.expander(("✅ " if chapter.completed else "") + chapter.title):
            if chapter.description:
                st.caption(chapter.description)

            done = st.checkbox("Chapter complete", value=chapter.completed, key=f"ch_done_{chapter.id}")
            if done != chapter.completed:
                _show(editor.apply(sy.toggle_chapter_complete, chapter.id))

            for topic in chapter.topics:
                col_check, col_title, col_del = st.columns([1, 6, 1])
                checked = col_check.checkbox("Done", value=topic.completed, key=f"tp_done_{topic.id}",
                                             label_visibility="collapsed")
                if checked != topic.completed:
                    _show(editor.apply(sy.toggle_topic_complete, chapter.id, topic.id))
                title = col_title.text_input("Topic", value=topic.title, key=f"tp_title_{topic.id}",
                                             label_visibility="collapsed")
                if title != topic.title:
                    _show(editor.apply(sy.edit_topic, chapter.id, topic.id, title))
                if col_del.button("", key=f"tp_del_{topic.id}", icon=":material/close:"):
                    _show(editor.apply(sy.delete_topic, chapter.id, topic.id))

            with st.form(f"add_topic_{chapter.id}", clear_on_submit=True):
                col_new, col_add = st.columns([6, 1])
                new_topic = col_new.text_input("New topic", label_visibility="collapsed", placeholder="New topic")
                if col_add.form_submit_button("Add"):
                    _show(editor.apply(sy.add_topic, chapter.id, new_topic))

            with st.form(f"edit_chapter_{chapter.id}"):
                ch_title = st.text_input("Chapter title", value=chapter.title)
                ch_description = st.text_input("Chapter description", value=chapter.description)
                col_save, col_delete = st.columns(2)
                if col_save.form_submit_button("Save chapter"):
                    _show(editor.apply(sy.edit_chapter, chapter.id, ch_title, ch_description))
                if col_delete.form_submit_button("Delete chapter"):
                    _show(editor.apply(sy.delete_chapter, chapter.id))

    with st.form(f"add_chapter_{course_id}", clear_on_submit=True):
        st.markdown("**Add chapter**")
        title = st.text_input("Title")
        description = st.text_input("Description")
        if st.form_submit_button("Add chapter", icon=":material/add:"):
            _show(editor.apply(sy.add_chapter, title, description))


def _run_action(document: Document, action: str) -> None:
    cancel = new_cancel_token(f"document_ai_{document.id}")
    try:
        with st.spinner(f"{ACTION_LABELS[action]}..."):
            output = run_document_action(document, action, get_ai(), get_backend(), cancel=cancel)
    except OperationCancelled:
        return
    except (DocumentNotProcessedError, AIServiceError) as e:
        state[f"doc_ai_{document.id}"] = {"action": action, "error": str(e)}
        return
    state[f"doc_ai_{document.id}"] = {"action": action, "output": output}


def render_document_row(document: Document) -> None:
    store = get_store()
    with st.container(border=True):
        col_name, col_link, col_delete = st.columns([5, 1, 1])
        col_name.markdown(f"**{document.name}**  \n{document.file_type or ''}")

        if col_link.button("", key=f"doc_link_{document.id}", icon=":material/link:", help="Get download link"):
            url, error = get_backend().get_document_signed_url(document.file_path)
            if error:
                st.error(error)
            else:
                st.markdown(f"[Open {document.name}]({url})")
        if col_delete.button("", key=f"doc_del_{document.id}", icon=":material/delete:"):
            result = store.delete_document(document.id)
            if result.ok:
                st.rerun()
            st.error(result.error)

        enabled = ai_actions_enabled(document)
        cols = st.columns(len(ACTION_LABELS))
        for col, (action, label) in zip(cols, ACTION_LABELS.items()):
            if col.button(label, key=f"doc_{action}_{document.id}", disabled=not enabled,
                          help=disabled_reason(document), use_container_width=True):
                _run_action(document, action)
        if not enabled:
            st.caption(disabled_reason(document))

        outcome = state.get(f"doc_ai_{document.id}")
        if outcome:
            if "error" in outcome:
                st.error(outcome["error"])
                if st.button("Try again", key=f"doc_retry_{document.id}", icon=":material/refresh:"):
                    _run_action(document, outcome["action"])
                    st.rerun()
            else:
                with st.expander(ACTION_LABELS[outcome["action"]], expanded=True):
                    st.markdown(outcome["output"])

        with st.expander("Saved flashcards", icon=":material/style:"):
            render_saved_flashcards(document.id)


def render_documents_panel(course: Course) -> None:
    """
    Upload form plus the course's documents with their AI actions.
    """
    store = get_store()
    syllabus = course.syllabus or Syllabus()
    chapters = {"No chapter": None, **{ch.title: ch for ch in syllabus.chapters}}

    # outside the form so the topic list follows the chosen chapter
    col_chapter, col_topic = st.columns(2)
    chapter_title = col_chapter.selectbox("Chapter", list(chapters), key=f"upload_chapter_{course.id}")
    chapter = chapters[chapter_title]
    topics = {"No topic": None, **({t.title: t.id for t in chapter.topics} if chapter else {})}
    topic_title = col_topic.selectbox("Topic", list(topics), key=f"upload_topic_{course.id}")

    with st.form(f"upload_{course.id}", clear_on_submit=True):
        uploaded = st.file_uploader("Upload a document")
        if st.form_submit_button("Upload", icon=":material/upload:"):
            if uploaded is None:
                st.error("Choose a file to upload.")
            else:
                result = store.upload_document(
                    course.id,
                    uploaded.name,
                    uploaded.getvalue(),
                    uploaded.type,
                    chapter.id if chapter else None,
                    topics[topic_title],
                )
                if result.ok:
                    st.rerun()

    documents = [d for d in store.documents if d.course_id == course.id]
    if not documents:
        st.caption("No documents uploaded for this course yet.")
    for document in documents:
        render_document_row(document)
