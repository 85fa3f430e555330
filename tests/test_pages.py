from unittest.mock import MagicMock

from streamlit.testing.v1 import AppTest

from core.backend import BackendFacade
from core.journal import JournalGate
from core.model_schemas import JournalEntry
from core.results import Result
from core.store import AppStore


def course_header_app():
    from unittest.mock import MagicMock

    import streamlit as st

    from core.model_schemas import Course
    from courses import render_course_header

    st.session_state.store = MagicMock(name="store")
    render_course_header(Course(id="c1", name="<img src=x onerror=alert(1)> & Bio"))


def test_course_header_escapes_course_name():
    app = AppTest.from_function(course_header_app)
    app.run(timeout=30)

    assert not app.exception
    headings = [block.value for block in app.markdown if block.value.startswith("<h2>")]
    assert headings == ["<h2>&lt;img src=x onerror=alert(1)&gt; &amp; Bio</h2>"]


def test_journal_marks_locked_entries(user):
    backend = MagicMock(spec=BackendFacade)
    backend.get_journal_settings.return_value = Result.success(None)
    backend.get_journal_entries.return_value = Result.success([
        JournalEntry(id="j1", title="Exam nerves", mood="sad", is_locked=True),
        JournalEntry(id="j2", title="Good day", mood="happy"),
    ])
    store = AppStore(backend)
    store.set_user(user)
    gate = JournalGate()
    gate.unlock_without_passcode()

    app = AppTest.from_file("../studyhub/pages/8_Journal.py")
    app.session_state["backend"] = backend
    app.session_state["store"] = store
    app.session_state["auth_initialized"] = True
    app.session_state["journal_gate"] = gate
    app.run(timeout=30)

    assert not app.exception
    assert [expander.label for expander in app.expander] == ["😢 Exam nerves 🔒", "😊 Good day"]
    assert app.toggle[0].label == "Lock entry"
