# 1_Courses.py

import streamlit as st

from courses import render_course_header, render_course_list, render_documents_panel, render_syllabus_editor
from session import render_store_error, require_user
from sidebar import render_sidebar


def main() -> None:
    st.set_page_config(page_title="Courses · StudyHub", page_icon="📘", layout="wide")
    store = require_user()
    render_sidebar()

    course = store.current_course
    if course is None:
        st.markdown("<h2 style='text-align:center;'>Courses 📘</h2>", unsafe_allow_html=True)
        st.text("")
        render_store_error(store, retry=store.fetch_courses, key="courses")
        render_course_list()
        return

    render_course_header(course)
    render_store_error(store, retry=lambda: store.fetch_documents(course.id), key="course_detail")

    syllabus_tab, documents_tab = st.tabs(["Syllabus", "Documents"])
    with syllabus_tab:
        render_syllabus_editor(course.id)
    with documents_tab:
        render_documents_panel(course)


if __name__ == "__main__":
    main()
