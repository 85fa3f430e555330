# 5_Quiz.py

import streamlit as st

from quiz import render_quiz_generator
from session import require_user
from sidebar import render_sidebar


def main() -> None:
    st.set_page_config(page_title="Quiz · StudyHub", page_icon="📝", layout="wide")
    require_user()
    render_sidebar()

    st.markdown("<h2 style='text-align:center;'>Quiz 📝</h2>", unsafe_allow_html=True)
    st.text("")

    with st.container(border=True):
        render_quiz_generator()


if __name__ == "__main__":
    main()
