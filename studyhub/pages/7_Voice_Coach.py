# 7_Voice_Coach.py

"""
Voice coach: keep presentation scripts and listen to them read aloud.
"""

import streamlit as st

from core.ai_client import TTS_MAX_CHARS, AIServiceError
from core.results import OperationCancelled
from session import get_ai, get_store, new_cancel_token, render_store_error, require_user, state
from sidebar import render_sidebar


def render_script_form() -> None:
    store = get_store()
    editing = next((s for s in store.voice_scripts if s.id == state.get("editing_script_id")), None)

    with st.form("script_form", clear_on_submit=editing is None):
        st.markdown("**Edit script**" if editing else "**New script**")
        title = st.text_input("Title", value=editing.title if editing else "")
        content = st.text_area("Script", value=editing.content if editing else "", height=250)
        st.caption(f"Read-aloud uses the first {TTS_MAX_CHARS} characters.")
        col_save, col_cancel = st.columns(2)
        saved = col_save.form_submit_button("Save", type="primary", use_container_width=True)
        cancelled = col_cancel.form_submit_button("Cancel", use_container_width=True, disabled=editing is None)

    if cancelled:
        state.editing_script_id = None
        st.rerun()
    if not saved:
        return
    if not title.strip() or not content.strip():
        st.error("Title and script are required.")
        return
    if editing:
        result = store.update_voice_script(editing.id, {"title": title.strip(), "content": content})
    else:
        result = store.create_voice_script(title.strip(), content)
    if result.ok:
        state.editing_script_id = None
        st.rerun()


def _synthesize(script) -> None:
    cancel = new_cancel_token(f"tts_{script.id}")
    try:
        with st.spinner("Converting to speech..."):
            state.script_audio[script.id] = get_ai().synthesize_speech(script.content, cancel=cancel)
    except OperationCancelled:
        return
    except (ValueError, AIServiceError) as e:
        st.error(str(e))


def render_script_list() -> None:
    store = get_store()
    if not store.voice_scripts:
        st.caption("No scripts yet.")
        return

    for script in store.voice_scripts:
        with st.container(border=True):
            st.markdown(f"**{script.title}**")
            st.caption(script.content[:200] + ("..." if len(script.content) > 200 else ""))

            col_play, col_edit, col_delete = st.columns(3)
            if col_play.button("Read aloud", key=f"tts_{script.id}", icon=":material/record_voice_over:"):
                _synthesize(script)
            if col_edit.button("Edit", key=f"script_edit_{script.id}", icon=":material/edit:"):
                state.editing_script_id = script.id
                st.rerun()
            if col_delete.button("Delete", key=f"script_del_{script.id}", icon=":material/delete:"):
                if store.delete_voice_script(script.id).ok:
                    state.script_audio.pop(script.id, None)
                    st.rerun()

            audio = state.script_audio.get(script.id)
            if audio:
                st.audio(audio, format="audio/mp3")
            elif script.audio_url:
                st.audio(script.audio_url)


def main() -> None:
    st.set_page_config(page_title="Voice Coach · StudyHub", page_icon="🎙️", layout="wide")
    store = require_user()
    render_sidebar()
    state.setdefault("editing_script_id", None)
    state.setdefault("script_audio", {}) # script id -> synthesized mp3 bytes

    if not state.get("voice_scripts_loaded"):
        store.fetch_voice_scripts()
        state.voice_scripts_loaded = True

    st.markdown("<h2 style='text-align:center;'>Voice Coach 🎙️</h2>", unsafe_allow_html=True)
    st.text("")
    render_store_error(store, retry=store.fetch_voice_scripts, key="voice_scripts")

    left, right = st.columns([3, 2])
    with left:
        render_script_list()
    with right:
        render_script_form()


if __name__ == "__main__":
    main()
