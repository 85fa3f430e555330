# quiz.py

"""
Quiz generation from study content and the answering / grading view.
"""

from typing import List

import streamlit as st

from core.ai_client import AIServiceError
from core.logger import logger
from core.model_schemas import QuizQuestion
from core.results import OperationCancelled
from core.study_sets import grade_quiz, quiz_to_text
from session import get_ai, new_cancel_token, state


def _reset_answers(key: str) -> None:
    state[f"{key}_answers"] = {}
    state[f"{key}_graded"] = None


def render_quiz_interface(questions: List[QuizQuestion], key: str) -> None:
    """
    Render each question with its choices; grade multiple-choice answers
    on submit and reveal the sample answer for open questions.
    """
    state.setdefault(f"{key}_answers", {})
    state.setdefault(f"{key}_graded", None)
    answers = state[f"{key}_answers"]
    graded = state[f"{key}_graded"]

    for idx, question in enumerate(questions):
        with st.container(border=True):
            st.markdown(f"**{idx + 1}. {question.question}**")
            if question.is_multiple_choice:
                choice = st.radio(
                    "Answer",
                    question.options,
                    index=None,
                    key=f"{key}_q{idx}",
                    label_visibility="collapsed",
                    disabled=graded is not None,
                )
                if choice is not None:
                    answers[idx] = choice
                if graded is not None:
                    if answers.get(idx) == question.answer:
                        st.success("✅ Correct!")
                    else:
                        st.error(f"❌ Incorrect. Correct answer: {question.answer}")
            else:
                st.text_area("Your answer", key=f"{key}_q{idx}", disabled=graded is not None)
                if graded is not None:
                    st.info(f"Sample answer: {question.answer}")

    if graded is None:
        if st.button("Submit answers", type="primary", key=f"{key}_submit"):
            state[f"{key}_graded"] = grade_quiz(questions, answers)
            st.rerun()
        return

    st.markdown(f"### Score: {graded['correct']} / {graded['total']}")
    if st.button("Retake", key=f"{key}_retake", icon=":material/replay:"):
        _reset_answers(key)
        for idx in range(len(questions)):
            state.pop(f"{key}_q{idx}", None)
        st.rerun()


def _generate(content: str) -> None:
    cancel = new_cancel_token("quiz")
    try:
        with st.spinner("Generating quiz..."):
            questions = get_ai().generate_quiz(content, cancel=cancel)
    except OperationCancelled:
        return
    except (ValueError, AIServiceError) as e:
        state.quiz_error = str(e)
        return
    logger.info("Generated %d quiz questions", len(questions))
    state.generated_quiz = questions
    state.quiz_error = None
    _reset_answers("generated_quiz")


def render_quiz_generator() -> None:
    state.setdefault("generated_quiz", [])
    state.setdefault("quiz_error", None)

    content = st.text_area(
        "Study content",
        height=200,
        placeholder="Paste your notes or a chapter to be quizzed on...",
        key="quiz_content",
    )
    if st.button("Generate quiz", type="primary", icon=":material/quiz:"):
        _generate(content)

    if state.quiz_error:
        st.error(state.quiz_error)
        if st.button("Try again", key="quiz_retry", icon=":material/refresh:"):
            state.quiz_error = None
            _generate(content)
            st.rerun()

    questions = state.generated_quiz
    if not questions:
        return

    st.divider()
    render_quiz_interface(questions, key="generated_quiz")
    st.download_button(
        "Download quiz",
        data=quiz_to_text(questions),
        file_name="quiz.txt",
        mime="text/plain",
        icon=":material/download:",
    )
