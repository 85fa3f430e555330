# flashcards.py

"""
Flashcard generation and review widgets.
Generated sets live in session state until the user saves them;
saved sets are read back per document.
"""

from typing import List, Optional

import streamlit as st

from core.ai_client import AIServiceError
from core.logger import logger
from core.model_schemas import FlashcardItem
from core.results import OperationCancelled
from core.study_sets import flashcards_to_text, save_generated_flashcards
from session import get_ai, get_backend, get_store, new_cancel_token, state


def render_flashcard_viewer(cards: List[FlashcardItem], key: str) -> None:
    """
    One card at a time with flip / previous / next controls.
    """
    if not cards:
        st.caption("No flashcards yet.")
        return

    idx_key, flip_key = f"{key}_idx", f"{key}_flipped"
    state.setdefault(idx_key, 0)
    state.setdefault(flip_key, False)
    # the set may have shrunk since the last run
    state[idx_key] = min(state[idx_key], len(cards) - 1)

    card = cards[state[idx_key]]
    side = "Answer" if state[flip_key] else "Question"
    with st.container(border=True):
        st.caption(f"Card {state[idx_key] + 1} of {len(cards)} · {side}")
        st.markdown(f"### {card.back if state[flip_key] else card.front}")

    col_prev, col_flip, col_next = st.columns(3)
    if col_prev.button("Previous", key=f"{key}_prev", icon=":material/arrow_back:",
                       disabled=state[idx_key] == 0, use_container_width=True):
        state[idx_key] -= 1
        state[flip_key] = False
        st.rerun()
    if col_flip.button("Flip", key=f"{key}_flip", icon=":material/flip:", use_container_width=True):
        state[flip_key] = not state[flip_key]
        st.rerun()
    if col_next.button("Next", key=f"{key}_next", icon=":material/arrow_forward:",
                       disabled=state[idx_key] >= len(cards) - 1, use_container_width=True):
        state[idx_key] += 1
        state[flip_key] = False
        st.rerun()


def _generate(topic: Optional[str], content: Optional[str]) -> None:
    cancel = new_cancel_token("flashcards")
    try:
        with st.spinner("Generating flashcards..."):
            cards = get_ai().generate_flashcards(topic=topic, content=content, cancel=cancel)
    except OperationCancelled:
        return
    except (ValueError, AIServiceError) as e:
        state.flashcard_error = str(e)
        return
    logger.info("Generated %d flashcards", len(cards))
    state.generated_flashcards = cards
    state.flashcard_error = None
    state.generated_flashcards_viewer_idx = 0
    state.generated_flashcards_viewer_flipped = False


def _document_options() -> dict:
    store = get_store()
    return {"Not linked to a document": None, **{d.name: d.id for d in store.documents}}


def render_flashcard_generator() -> None:
    """
    Generate from a topic or pasted content, then review, save or download.
    """
    state.setdefault("generated_flashcards", [])
    state.setdefault("flashcard_error", None)

    mode = st.radio("Generate from", ["Topic", "Content"], horizontal=True, key="flashcard_mode")
    if mode == "Topic":
        topic = st.text_input("Topic", placeholder="e.g. Photosynthesis", key="flashcard_topic")
        content = None
    else:
        topic = None
        content = st.text_area("Study content", height=200, key="flashcard_content")

    if st.button("Generate flashcards", type="primary", icon=":material/auto_awesome:"):
        _generate(topic, content)

    if state.flashcard_error:
        st.error(state.flashcard_error)
        if st.button("Try again", key="flashcard_retry", icon=":material/refresh:"):
            state.flashcard_error = None
            _generate(topic, content)
            st.rerun()

    cards = state.generated_flashcards
    if not cards:
        return

    st.divider()
    render_flashcard_viewer(cards, key="generated_flashcards_viewer")

    st.text("")
    options = _document_options()
    col_doc, col_save, col_download = st.columns([3, 1, 1])
    target = col_doc.selectbox("Save to", list(options), key="flashcard_save_target", label_visibility="collapsed")
    if col_save.button("Save", icon=":material/save:", use_container_width=True):
        saved, error = save_generated_flashcards(get_backend(), cards, options[target])
        if error:
            st.error(error)
        else:
            st.success(f"Saved {len(saved)} flashcards")
    col_download.download_button(
        "Download",
        data=flashcards_to_text(cards),
        file_name="flashcards.txt",
        mime="text/plain",
        icon=":material/download:",
        use_container_width=True,
    )


def render_saved_flashcards(document_id: str) -> None:
    cards, error = get_backend().get_flashcards(document_id)
    if error:
        st.error(error)
        return
    render_flashcard_viewer(cards or [], key=f"saved_flashcards_{document_id}")
