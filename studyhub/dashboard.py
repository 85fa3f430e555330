# dashboard.py

"""
Home view widgets: course progress, upcoming tasks and smart revision
recommendations that can be turned into tasks.
"""

from datetime import datetime, timezone

import streamlit as st
from dateutil import parser as dateparser

from core.revision import add_to_todo, build_recommendations, course_scores
from session import get_store, state

PRIORITY_ICONS = {"high": "🔴", "medium": "🟡", "low": "🟢"}


def due_label(due_date: str) -> str:
    try:
        due = dateparser.isoparse(due_date)
    except ValueError:
        return due_date
    if due.tzinfo is None:
        due = due.replace(tzinfo=timezone.utc)
    return due.astimezone().strftime("%a %d %b, %H:%M")


def render_overview() -> None:
    store = get_store()
    pending = [t for t in store.tasks if t.status != "completed"]

    col_courses, col_pending, col_done = st.columns(3)
    col_courses.metric("Courses", len(store.courses))
    col_pending.metric("Pending tasks", len(pending))
    col_done.metric("Completed tasks", len(store.tasks) - len(pending))


def render_upcoming_tasks(limit: int = 5) -> None:
    store = get_store()
    st.markdown("#### Upcoming")
    pending = [t for t in store.tasks if t.status != "completed"][:limit]
    if not pending:
        st.caption("Nothing due. Add tasks from the Tasks page.")
        return
    for task in pending:
        st.markdown(f"{PRIORITY_ICONS.get(task.priority, '')} **{task.title}**  \n_{due_label(task.due_date)}_")


def render_course_progress() -> None:
    store = get_store()
    st.markdown("#### Course progress")
    if not store.courses:
        st.caption("Create a course to start tracking your syllabus.")
        return
    scores = course_scores(store.courses)
    for course in store.courses:
        score = scores[course.id]
        st.progress(score / 100, text=f"{course.name}: {score:.0f}%")


def render_smart_revision() -> None:
    """
    Recommendations for courses whose syllabus completion is low.
    Each one can be added to the task list once.
    """
    store = get_store()
    added = state.setdefault("revision_added", set())

    st.markdown("#### Smart revision")
    recommendations = build_recommendations(store.courses)
    if not recommendations:
        st.caption("You're on track. No revision suggestions right now.")
        return

    for rec in recommendations:
        with st.container(border=True):
            col_text, col_btn = st.columns([5, 1])
            col_text.markdown(
                f"{PRIORITY_ICONS.get(rec.priority, '')} **{rec.title}**  \n"
                f"{rec.description}  \n_{rec.course_name} · {rec.estimated_time}_"
            )
            if rec.id in added:
                col_btn.button("Added", key=f"rec_{rec.id}", disabled=True, icon=":material/check:")
                continue
            if col_btn.button("To-do", key=f"rec_{rec.id}", icon=":material/add_task:"):
                result = add_to_todo(store, rec, datetime.now(timezone.utc))
                if result.ok:
                    added.add(rec.id)
                    st.toast(f"Added '{rec.title}' to your tasks")
                    st.rerun()
                else:
                    st.error(result.error)
