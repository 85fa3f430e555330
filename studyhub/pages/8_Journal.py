# 8_Journal.py

"""
Private journal behind a passcode gate.
The gate only hides the view; entries are protected by the backend's
row-level access rules, not by the passcode.
"""

import streamlit as st

from core.journal import (
    DEFAULT_AUTO_LOCK_MINUTES, MOODS, JournalGate, set_passcode, validate_new_passcode
)
from session import get_backend, require_user, state
from sidebar import render_sidebar

MOOD_ICONS = {"happy": "😊", "sad": "😢", "neutral": "😐", "excited": "🤩"}


def _parse_tags(raw: str) -> list:
    return [tag.strip() for tag in raw.split(",") if tag.strip()]


def render_passcode_setup(user_id: str, auto_lock_minutes: int) -> None:
    with st.form("journal_passcode_setup"):
        st.markdown("**Protect your journal with a passcode**")
        passcode = st.text_input("Passcode", type="password")
        confirm = st.text_input("Confirm passcode", type="password")
        minutes = st.number_input("Auto-lock after (minutes)", min_value=1, value=auto_lock_minutes)
        if st.form_submit_button("Set passcode", type="primary"):
            problem = validate_new_passcode(passcode, confirm)
            if problem:
                st.error(problem)
                return
            _, error = set_passcode(get_backend(), user_id, passcode, int(minutes))
            if error:
                st.error(error)
                return
            state.journal_gate = JournalGate(int(minutes))
            state.journal_gate.unlock_without_passcode()
            st.rerun()


def render_unlock(user_id: str) -> None:
    gate: JournalGate = state.journal_gate
    with st.form("journal_unlock"):
        st.markdown("🔒 **Your journal is locked**")
        passcode = st.text_input("Passcode", type="password")
        if st.form_submit_button("Unlock", type="primary"):
            if gate.unlock(get_backend(), user_id, passcode):
                st.rerun()
            st.error("Incorrect passcode")


def render_entry_form(user_id: str, entries: list) -> None:
    backend = get_backend()
    editing = next((e for e in entries if e.id == state.get("editing_entry_id")), None)

    with st.form("journal_entry_form", clear_on_submit=editing is None):
        st.markdown("**Edit entry**" if editing else "**New entry**")
        title = st.text_input("Title", value=editing.title if editing else "")
        content = st.text_area("Entry", value=editing.content if editing else "", height=250)
        col_mood, col_tags = st.columns(2)
        mood = col_mood.selectbox(
            "Mood",
            MOODS,
            index=MOODS.index(editing.mood) if editing and editing.mood in MOODS else 2,
            format_func=lambda m: f"{MOOD_ICONS[m]} {m}",
        )
        tags = col_tags.text_input("Tags (comma separated)", value=", ".join(editing.tags) if editing else "")
        locked = st.toggle("Lock entry", value=editing.is_locked if editing else False)
        col_save, col_cancel = st.columns(2)
        saved = col_save.form_submit_button("Save", type="primary", use_container_width=True)
        cancelled = col_cancel.form_submit_button("Cancel", use_container_width=True, disabled=editing is None)

    if cancelled:
        state.editing_entry_id = None
        st.rerun()
    if not saved:
        return
    if not title.strip():
        st.error("Entry title is required.")
        return
    if editing:
        _, error = backend.update_journal_entry(
            editing.id, title.strip(), content, mood, _parse_tags(tags), is_locked=locked
        )
    else:
        _, error = backend.create_journal_entry(
            user_id, title.strip(), content, mood, _parse_tags(tags), is_locked=locked
        )
    if error:
        st.error(error)
        return
    state.editing_entry_id = None
    st.rerun()


def render_entries(entries: list) -> None:
    if not entries:
        st.caption("No journal entries yet.")
        return
    for entry in entries:
        badge = " 🔒" if entry.is_locked else ""
        with st.expander(f"{MOOD_ICONS.get(entry.mood, '')} {entry.title}{badge}"):
            st.caption((entry.created_at or "")[:10] + ("  ·  " + ", ".join(entry.tags) if entry.tags else ""))
            st.markdown(entry.content)
            col_edit, col_delete = st.columns(2)
            if col_edit.button("Edit", key=f"entry_edit_{entry.id}", icon=":material/edit:"):
                state.editing_entry_id = entry.id
                st.rerun()
            if col_delete.button("Delete", key=f"entry_del_{entry.id}", icon=":material/delete:"):
                _, error = get_backend().delete_journal_entry(entry.id)
                if error:
                    st.error(error)
                else:
                    st.rerun()


def main() -> None:
    st.set_page_config(page_title="Journal · StudyHub", page_icon="📓", layout="wide")
    store = require_user()
    render_sidebar()
    state.setdefault("editing_entry_id", None)
    user_id = store.user.id
    backend = get_backend()

    st.markdown("<h2 style='text-align:center;'>Journal 📓</h2>", unsafe_allow_html=True)
    st.text("")

    settings, error = backend.get_journal_settings(user_id)
    if error:
        st.error(error)
        if st.button("Try again", icon=":material/refresh:"):
            st.rerun()
        return

    auto_lock = settings.auto_lock_minutes if settings else DEFAULT_AUTO_LOCK_MINUTES
    if "journal_gate" not in state:
        state.journal_gate = JournalGate(auto_lock)
    gate: JournalGate = state.journal_gate

    if not gate.is_unlocked:
        if settings and settings.passcode_hash:
            render_unlock(user_id)
            return
        render_passcode_setup(user_id, auto_lock)
        if st.button("Continue without a passcode"):
            gate.unlock_without_passcode()
            st.rerun()
        return

    gate.touch()
    if st.button("Lock journal", icon=":material/lock:"):
        gate.lock()
        st.rerun()

    entries, error = backend.get_journal_entries(user_id)
    if error:
        st.error(error)
        return

    left, right = st.columns([3, 2])
    with left:
        render_entries(entries or [])
    with right:
        render_entry_form(user_id, entries or [])


if __name__ == "__main__":
    main()
