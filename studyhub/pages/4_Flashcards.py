# 4_Flashcards.py

import streamlit as st

from flashcards import render_flashcard_generator
from session import get_backend, require_user
from sidebar import render_sidebar


def main() -> None:
    st.set_page_config(page_title="Flashcards · StudyHub", page_icon="🃏", layout="wide")
    require_user()
    render_sidebar()

    st.markdown("<h2 style='text-align:center;'>Flashcards 🃏</h2>", unsafe_allow_html=True)
    total, error = get_backend().count_flashcards()
    if not error:
        st.markdown(f"<p style='text-align:center;'>{total} saved flashcards</p>", unsafe_allow_html=True)
    st.text("")

    with st.container(border=True):
        render_flashcard_generator()


if __name__ == "__main__":
    main()
