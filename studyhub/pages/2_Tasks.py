# 2_Tasks.py

"""
Task manager: create, filter, sort, complete and delete tasks,
plus the calendar export.
"""

from datetime import datetime, time, timezone

import streamlit as st

from core.config import get_settings
from core.ics_export import build_ics, webcal_url
from core.model_schemas import TASK_PRIORITIES, TASK_TYPES
from dashboard import PRIORITY_ICONS, due_label
from session import get_store, render_store_error, require_user
from sidebar import render_sidebar

SORT_OPTIONS = {
    "Due date": None, # already in due order from the store
    "Priority": lambda t: TASK_PRIORITIES[::-1].index(t.priority) if t.priority in TASK_PRIORITIES else 3,
    "Title": lambda t: t.title.lower(),
}


def render_task_form() -> None:
    store = get_store()
    courses = {"No course": None, **{c.name: c.id for c in store.courses}}

    with st.expander("New task", icon=":material/add_task:"):
        with st.form("new_task_form", clear_on_submit=True):
            title = st.text_input("Title")
            description = st.text_area("Description")
            col_date, col_time = st.columns(2)
            due_day = col_date.date_input("Due date")
            due_time = col_time.time_input("Due time", value=time(23, 59))
            col_priority, col_type, col_course = st.columns(3)
            priority = col_priority.selectbox("Priority", TASK_PRIORITIES, index=1)
            task_type = col_type.selectbox("Type", TASK_TYPES)
            course_name = col_course.selectbox("Course", list(courses))

            if st.form_submit_button("Add task", type="primary"):
                if not title.strip():
                    st.error("Task title is required.")
                    return
                due = datetime.combine(due_day, due_time, tzinfo=get_settings().tzinfo).astimezone(timezone.utc)
                result = store.create_task(
                    title.strip(), description.strip(), due.isoformat(), priority, courses[course_name], task_type
                )
                if result.ok:
                    st.rerun()


def render_task_list() -> None:
    store = get_store()
    course_names = {c.id: c.name for c in store.courses}

    col_status, col_priority, col_sort = st.columns(3)
    status = col_status.selectbox("Status", ["All", "Pending", "Completed"], key="task_filter_status")
    priority = col_priority.selectbox("Priority", ["All", *TASK_PRIORITIES], key="task_filter_priority")
    sort_by = col_sort.selectbox("Sort by", list(SORT_OPTIONS), key="task_sort")

    tasks = store.tasks
    if status != "All":
        tasks = [t for t in tasks if t.status == status.lower()]
    if priority != "All":
        tasks = [t for t in tasks if t.priority == priority]
    if SORT_OPTIONS[sort_by] is not None:
        tasks = sorted(tasks, key=SORT_OPTIONS[sort_by])

    if not tasks:
        st.caption("No tasks match these filters.")
        return

    for task in tasks:
        with st.container(border=True):
            col_check, col_text, col_delete = st.columns([1, 8, 1])
            done = col_check.checkbox(
                "Done", value=task.status == "completed", key=f"task_done_{task.id}", label_visibility="collapsed"
            )
            if done != (task.status == "completed"):
                if store.toggle_task(task.id).ok:
                    st.rerun()
            title = f"~~{task.title}~~" if task.status == "completed" else f"**{task.title}**"
            meta = [due_label(task.due_date), task.type or "", course_names.get(task.course_id, "")]
            col_text.markdown(
                f"{PRIORITY_ICONS.get(task.priority, '')} {title}  \n"
                + (f"{task.description}  \n" if task.description else "")
                + f"_{' · '.join(m for m in meta if m)}_"
            )
            if col_delete.button("", key=f"task_del_{task.id}", icon=":material/delete:"):
                if store.delete_task(task.id).ok:
                    st.rerun()


def render_calendar_export() -> None:
    """
    Download the task list as .ics or copy the subscription URL.
    """
    store = get_store()
    include_completed = st.checkbox("Include completed tasks", value=True, key="ics_include_completed")
    st.download_button(
        "Download calendar (.ics)",
        data=build_ics(store.tasks, store.courses, include_completed=include_completed),
        file_name="studyhub-tasks.ics",
        mime="text/calendar",
        icon=":material/calendar_month:",
    )
    st.markdown("Subscribe from your calendar app:")
    st.code(webcal_url(store.user.id, get_settings().calendar_host), language=None)


def main() -> None:
    st.set_page_config(page_title="Tasks · StudyHub", page_icon="✅", layout="wide")
    store = require_user()
    render_sidebar()

    st.markdown("<h2 style='text-align:center;'>Tasks ✅</h2>", unsafe_allow_html=True)
    st.text("")
    render_store_error(store, retry=store.fetch_tasks, key="tasks")

    tasks_tab, calendar_tab = st.tabs(["Tasks", "Calendar"])
    with tasks_tab:
        render_task_form()
        render_task_list()
    with calendar_tab:
        render_calendar_export()


if __name__ == "__main__":
    main()
