import threading

from conftest import make_course, make_task
from core.model_schemas import Document, Note, Syllabus, VoiceScript
from core.results import CancelToken, Result
from core.store import NOT_SIGNED_IN, AppState


# ----------------------------------------------------------------------
# Auth and fetches
# ----------------------------------------------------------------------

def test_fetches_are_noops_without_user(store, mock_backend):
    for fetch in (store.fetch_courses, store.fetch_tasks, store.fetch_notes, store.fetch_voice_scripts):
        assert fetch().ok
    assert store.fetch_documents("c1").ok

    mock_backend.get_courses.assert_not_called()
    mock_backend.get_tasks.assert_not_called()
    mock_backend.get_notes.assert_not_called()
    mock_backend.get_documents.assert_not_called()
    mock_backend.get_voice_scripts.assert_not_called()
    assert [record.outcome for record in store.log] == ["skipped"] * 5


def test_init_auth_loads_user_courses_and_tasks(store, mock_backend, user):
    mock_backend.get_courses.return_value = Result.success([make_course("c1")])
    mock_backend.get_tasks.return_value = Result.success([make_task("t1", "2026-03-01T10:00:00Z")])

    store.init_auth()

    assert store.user == user
    assert [c.id for c in store.courses] == ["c1"]
    assert [t.id for t in store.tasks] == ["t1"]
    assert store.is_loading is False


def test_init_auth_twice_does_not_duplicate(store, mock_backend):
    mock_backend.get_courses.return_value = Result.success([make_course("c1"), make_course("c2")])

    store.init_auth()
    store.init_auth()

    assert [c.id for c in store.courses] == ["c1", "c2"]


def test_init_auth_without_session_stays_signed_out(store, mock_backend):
    mock_backend.get_current_user.return_value = Result.success(None)

    store.init_auth()

    assert store.user is None
    mock_backend.get_courses.assert_not_called()


def test_sign_in_failure_sets_error(store, mock_backend):
    mock_backend.sign_in.return_value = Result.failure("Invalid login credentials")

    result = store.sign_in("ada@example.com", "wrong")

    assert not result.ok
    assert store.user is None
    assert store.error == "Invalid login credentials"


def test_sign_out_resets_every_slice(signed_in_store, mock_backend):
    store = signed_in_store
    mock_backend.create_course.return_value = Result.success(make_course("c1"))
    store.create_course("Biology")
    store.set_current_course(store.courses[0])
    store.set_error("stale")

    store.sign_out()

    assert store.state == AppState()


def test_failed_sign_out_keeps_state(signed_in_store, mock_backend, user):
    store = signed_in_store
    mock_backend.get_courses.return_value = Result.success([make_course("c1")])
    store.fetch_courses()
    mock_backend.sign_out.return_value = Result.failure("network unreachable")

    result = store.sign_out()

    assert not result.ok
    assert store.user == user
    assert [c.id for c in store.courses] == ["c1"]
    assert store.error == "network unreachable"
    assert store.log[-1].outcome == "error"

def test_fetch_error_is_stored_as_string(signed_in_store, mock_backend):
    mock_backend.get_tasks.return_value = Result.failure("permission denied")

    result = signed_in_store.fetch_tasks()

    assert result.error == "permission denied"
    assert signed_in_store.error == "permission denied"
    assert signed_in_store.is_loading is False


def test_cancelled_fetch_is_discarded(signed_in_store, mock_backend):
    token = CancelToken()

    def cancel_midway(user_id):
        token.cancel()
        return Result.success([make_course("c1")])

    mock_backend.get_courses.side_effect = cancel_midway

    result = signed_in_store.fetch_courses(cancel=token)

    assert not result.ok
    assert signed_in_store.courses == []
    assert signed_in_store.log[-1].outcome == "cancelled"


def test_backend_exception_becomes_error(signed_in_store, mock_backend):
    mock_backend.get_notes.side_effect = RuntimeError("boom")

    result = signed_in_store.fetch_notes()

    assert result.error == "boom"
    assert signed_in_store.error == "boom"


# ----------------------------------------------------------------------
# Mutations
# ----------------------------------------------------------------------

def test_mutations_require_user(store, mock_backend):
    assert store.create_course("Biology").error == NOT_SIGNED_IN
    assert store.create_task("Read", "", "2026-03-01T10:00:00Z").error == NOT_SIGNED_IN
    mock_backend.create_course.assert_not_called()


def test_create_course_appends(signed_in_store, mock_backend, user):
    mock_backend.create_course.return_value = Result.success(make_course("c1", "Biology"))

    result = signed_in_store.create_course("Biology", "Cells and tissues")

    assert result.ok
    assert [c.name for c in signed_in_store.courses] == ["Biology"]
    mock_backend.create_course.assert_called_once_with(user.id, "Biology", "Cells and tissues")
    record = signed_in_store.log[-1]
    assert (record.name, record.args, record.outcome) == ("create_course", {"name": "Biology"}, "ok")


def test_cancelled_mutation_leaves_state(signed_in_store, mock_backend):
    token = CancelToken()

    def cancel_midway(user_id, title, content, course_id):
        token.cancel()
        return Result.success(Note(id="n1", title=title))

    mock_backend.create_note.side_effect = cancel_midway

    result = signed_in_store.create_note("Mitosis", "", cancel=token)

    assert not result.ok
    assert signed_in_store.notes == []
    assert signed_in_store.log[-1].outcome == "cancelled"

def test_create_task_keeps_due_order(signed_in_store, mock_backend):
    store = signed_in_store
    mock_backend.get_tasks.return_value = Result.success([
        make_task("t1", "2026-03-01T10:00:00Z"),
        make_task("t3", "2026-03-05T10:00:00Z"),
    ])
    store.fetch_tasks()
    mock_backend.create_task.return_value = Result.success(make_task("t2", "2026-03-03T10:00:00+00:00"))

    store.create_task("t2", "", "2026-03-03T10:00:00+00:00", "high")

    assert [t.id for t in store.tasks] == ["t1", "t2", "t3"]


def test_toggle_task(signed_in_store, mock_backend):
    store = signed_in_store
    mock_backend.get_tasks.return_value = Result.success([make_task("t1", "2026-03-01T10:00:00Z")])
    store.fetch_tasks()
    mock_backend.update_task_status.return_value = Result.success(
        make_task("t1", "2026-03-01T10:00:00Z", status="completed")
    )

    store.toggle_task("t1")

    mock_backend.update_task_status.assert_called_once_with("t1", "completed")
    assert store.tasks[0].status == "completed"


def test_update_of_missing_row_is_not_found(signed_in_store, mock_backend):
    mock_backend.update_note.return_value = Result.success(None)

    result = signed_in_store.update_note("missing", "Title", "Body")

    assert result.error == "Note not found"


def test_update_course_refreshes_current_course(signed_in_store, mock_backend):
    store = signed_in_store
    mock_backend.create_course.return_value = Result.success(make_course("c1", "Bio"))
    store.create_course("Bio")
    store.set_current_course(store.courses[0])
    renamed = make_course("c1", "Biology", syllabus=Syllabus())
    mock_backend.update_course.return_value = Result.success(renamed)

    store.update_course("c1", "Biology")

    assert store.courses == [renamed]
    assert store.current_course == renamed


def test_delete_course_drops_dependants(signed_in_store, mock_backend):
    store = signed_in_store
    mock_backend.get_courses.return_value = Result.success([make_course("c1"), make_course("c2")])
    mock_backend.get_tasks.return_value = Result.success([
        make_task("t1", "2026-03-01T10:00:00Z", course_id="c1"),
        make_task("t2", "2026-03-02T10:00:00Z", course_id="c2"),
    ])
    mock_backend.get_notes.return_value = Result.success([Note(id="n1", title="N", course_id="c1")])
    mock_backend.get_documents.return_value = Result.success([
        Document(id="d1", course_id="c1", name="a.pdf", file_path="u/c1/a.pdf"),
    ])
    store.fetch_courses()
    store.fetch_tasks()
    store.fetch_notes()
    store.fetch_documents("c1")
    store.set_current_course(store.courses[0])
    mock_backend.delete_course.return_value = Result.success()

    store.delete_course("c1")

    assert [c.id for c in store.courses] == ["c2"]
    assert [t.id for t in store.tasks] == ["t2"]
    assert store.notes == [] and store.documents == []
    assert store.current_course is None


def test_failed_delete_keeps_state(signed_in_store, mock_backend):
    store = signed_in_store
    mock_backend.get_courses.return_value = Result.success([make_course("c1")])
    store.fetch_courses()
    mock_backend.delete_course.return_value = Result.failure("foreign key violation")

    store.delete_course("c1")

    assert [c.id for c in store.courses] == ["c1"]
    assert store.error == "foreign key violation"


def test_upload_document_appends(signed_in_store, mock_backend, user):
    document = Document(id="d1", course_id="c1", name="a.pdf", file_path="u/c1/a.pdf")
    mock_backend.upload_document.return_value = Result.success(document)

    signed_in_store.upload_document("c1", "a.pdf", b"%PDF", "application/pdf")

    assert signed_in_store.documents == [document]
    mock_backend.upload_document.assert_called_once_with(
        "c1", user.id, "a.pdf", b"%PDF", "application/pdf", None, None
    )


def test_voice_scripts_prepend_update_delete(signed_in_store, mock_backend):
    store = signed_in_store
    old = VoiceScript(id="v1", title="Old")
    mock_backend.get_voice_scripts.return_value = Result.success([old])
    store.fetch_voice_scripts()

    new = VoiceScript(id="v2", title="New")
    mock_backend.create_voice_script.return_value = Result.success(new)
    store.create_voice_script("New", "Hello")
    assert [s.id for s in store.voice_scripts] == ["v2", "v1"]

    edited = VoiceScript(id="v1", title="Edited")
    mock_backend.update_voice_script.return_value = Result.success(edited)
    store.update_voice_script("v1", {"title": "Edited"})
    assert [s.title for s in store.voice_scripts] == ["New", "Edited"]

    mock_backend.delete_voice_script.return_value = Result.success()
    store.delete_voice_script("v2")
    assert [s.id for s in store.voice_scripts] == ["v1"]


def test_concurrent_creates_are_all_kept(signed_in_store, mock_backend):
    store = signed_in_store
    mock_backend.create_note.side_effect = lambda user_id, title, content, course_id: Result.success(
        Note(id=title, title=title)
    )

    threads = [threading.Thread(target=store.create_note, args=(f"n{i}", "")) for i in range(20)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert sorted(n.id for n in store.notes) == sorted(f"n{i}" for i in range(20))


def test_action_log_is_bounded(signed_in_store):
    for _ in range(signed_in_store.LOG_LIMIT + 10):
        signed_in_store.fetch_courses()
    assert len(signed_in_store.log) == signed_in_store.LOG_LIMIT
