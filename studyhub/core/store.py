# store.py

"""
Application store: the single owner of what the signed-in user currently sees.

One ``AppStore`` lives in each Streamlit session (see ``session.py``). Pages
read slices (``store.tasks``, ``store.courses`` ...) and change them only
through the actions below. Every action follows the same pattern:

    set is_loading -> call the backend façade -> on error set ``error`` and
    stop -> on success update the slice and clear is_loading

Fetches replace whole collections. Mutations reconcile the cached
collection from the row the backend returns instead of refetching.
"""

from __future__ import annotations

import threading
from collections import deque
from datetime import datetime
from typing import Any, Callable, Dict, List, NamedTuple, Optional

from dateutil import parser as dateparser
from pydantic import BaseModel, ConfigDict, Field

from core.backend import BackendFacade
from core.logger import get_logger
from core.model_schemas import Course, Document, Note, Syllabus, Task, User, VoiceScript
from core.results import CancelToken, Result, is_cancelled

logger = get_logger("store")

NOT_SIGNED_IN = "You must be signed in to do that."


class AppState(BaseModel):
    """
    Snapshot of the store. A fresh instance is the signed-out shape.
    """
    user: Optional[User] = None
    courses: List[Course] = Field(default_factory=list)
    current_course: Optional[Course] = None
    documents: List[Document] = Field(default_factory=list)
    tasks: List[Task] = Field(default_factory=list)
    notes: List[Note] = Field(default_factory=list)
    voice_scripts: List[VoiceScript] = Field(default_factory=list)
    is_loading: bool = False
    error: Optional[str] = None
    model_config = ConfigDict(frozen=True)


class ActionRecord(NamedTuple):
    name: str
    args: Dict[str, Any]
    outcome: str # ok | error | skipped | cancelled
    at: datetime


def _due_key(task: Task) -> float:
    try:
        return dateparser.isoparse(task.due_date).timestamp()
    except (ValueError, OverflowError):
        return float("inf")


def _replace(items: list, row) -> list:
    return [row if item.id == row.id else item for item in items]


def _without(items: list, item_id: str) -> list:
    return [item for item in items if item.id != item_id]


class AppStore:
    """
    Explicit state container with an action log.

    State writes happen under a re-entrant lock, so concurrent actions from
    different script threads interleave safely and the last write wins.
    """

    LOG_LIMIT = 200

    def __init__(self, backend: BackendFacade):
        self.backend = backend
        self._lock = threading.RLock()
        self._state = AppState()
        self.log = deque(maxlen=self.LOG_LIMIT)

    # ------------------------------------------------------------------
    # State access
    # ------------------------------------------------------------------

    @property
    def state(self) -> AppState:
        return self._state

    def __getattr__(self, name: str):
        # Slices read straight from the current snapshot: store.tasks, store.user ...
        if name in AppState.model_fields:
            return getattr(self._state, name)
        raise AttributeError(name)

    def _set(self, **changes) -> None:
        with self._lock:
            self._state = self._state.model_copy(update=changes)

    def _update(self, fn: Callable[[AppState], dict]) -> None:
        """
        Apply changes computed from the state as it is at write time.
        """
        with self._lock:
            self._state = self._state.model_copy(update=fn(self._state))

    def _record(self, action: str, args: dict, outcome: str) -> None:
        self.log.append(ActionRecord(action, args, outcome, datetime.now()))

    def _run(
        self,
        action: str,
        call: Callable[[], Result],
        apply: Callable[[AppState, Any], dict],
        cancel: Optional[CancelToken] = None,
        **args,
    ) -> Result:
        """
        Shared action skeleton: loading flag, façade call, error capture,
        cancellation check and slice update.
        """
        self._set(is_loading=True)
        try:
            result = call()
        except Exception as e:
            # façade calls return errors; anything raised here is a bug
            logger.error("Action %s raised unexpectedly: %s", action, e, exc_info=True)
            result = Result.failure(e)

        if is_cancelled(cancel):
            self._set(is_loading=False)
            self._record(action, args, "cancelled")
            return Result.failure("Request cancelled")

        if not result.ok:
            self._set(error=result.error, is_loading=False)
            self._record(action, args, "error")
            return result

        self._update(lambda state: {**apply(state, result.data), "is_loading": False})
        self._record(action, args, "ok")
        return result

    def _skip(self, action: str, args: dict) -> Result:
        self._record(action, args, "skipped")
        return Result.success(None)

    # ------------------------------------------------------------------
    # Plain setters
    # ------------------------------------------------------------------

    def set_user(self, user: Optional[User]) -> None:
        self._set(user=user)

    def set_current_course(self, course: Optional[Course]) -> None:
        self._set(current_course=course)

    def set_error(self, error: Optional[str]) -> None:
        self._set(error=error)

    def clear_error(self) -> None:
        self._set(error=None)

    def set_loading(self, is_loading: bool) -> None:
        self._set(is_loading=is_loading)

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    def init_auth(self, cancel: Optional[CancelToken] = None) -> Result:
        """
        Load the session user and, when present, their courses and tasks.

        Safe to call more than once: the fetches replace their slices.
        """
        result = self._run(
            "init_auth",
            self.backend.get_current_user,
            lambda state, user: {"user": user} if user else {},
            cancel=cancel,
        )
        if result.ok and result.data is not None:
            self.fetch_courses(cancel=cancel)
            self.fetch_tasks(cancel=cancel)
        return result

    def sign_in(self, email: str, password: str, cancel: Optional[CancelToken] = None) -> Result:
        result = self._run(
            "sign_in",
            lambda: self.backend.sign_in(email, password),
            lambda state, user: {"user": user, "error": None},
            cancel=cancel,
            email=email,
        )
        if result.ok:
            self.fetch_courses(cancel=cancel)
            self.fetch_tasks(cancel=cancel)
        return result

    def sign_out(self, cancel: Optional[CancelToken] = None) -> Result:
        """
        Sign out and reset every slice to the initial empty shape. A failed
        sign-out leaves the state as it was.
        """
        result = self._run("sign_out", self.backend.sign_out, lambda state, _: {}, cancel=cancel)
        if result.ok:
            with self._lock:
                self._state = AppState()
        return result

    # ------------------------------------------------------------------
    # Fetches (no-ops until a user is loaded)
    # ------------------------------------------------------------------

    def fetch_courses(self, cancel: Optional[CancelToken] = None) -> Result:
        user = self._state.user
        if user is None:
            return self._skip("fetch_courses", {})
        return self._run(
            "fetch_courses",
            lambda: self.backend.get_courses(user.id),
            lambda state, rows: {"courses": list(rows or [])},
            cancel=cancel,
        )

    def fetch_tasks(self, cancel: Optional[CancelToken] = None) -> Result:
        user = self._state.user
        if user is None:
            return self._skip("fetch_tasks", {})
        return self._run(
            "fetch_tasks",
            lambda: self.backend.get_tasks(user.id),
            lambda state, rows: {"tasks": list(rows or [])},
            cancel=cancel,
        )

    def fetch_notes(self, course_id: Optional[str] = None, cancel: Optional[CancelToken] = None) -> Result:
        user = self._state.user
        if user is None:
            return self._skip("fetch_notes", {"course_id": course_id})
        return self._run(
            "fetch_notes",
            lambda: self.backend.get_notes(user.id, course_id),
            lambda state, rows: {"notes": list(rows or [])},
            cancel=cancel,
            course_id=course_id,
        )

    def fetch_documents(self, course_id: str, cancel: Optional[CancelToken] = None) -> Result:
        if self._state.user is None:
            return self._skip("fetch_documents", {"course_id": course_id})
        return self._run(
            "fetch_documents",
            lambda: self.backend.get_documents(course_id),
            lambda state, rows: {"documents": list(rows or [])},
            cancel=cancel,
            course_id=course_id,
        )

    def fetch_voice_scripts(self, cancel: Optional[CancelToken] = None) -> Result:
        user = self._state.user
        if user is None:
            return self._skip("fetch_voice_scripts", {})
        return self._run(
            "fetch_voice_scripts",
            lambda: self.backend.get_voice_scripts(user.id),
            lambda state, rows: {"voice_scripts": list(rows or [])},
            cancel=cancel,
        )

    # ------------------------------------------------------------------
    # Courses
    # ------------------------------------------------------------------

    def create_course(self, name: str, description: str = "", cancel: Optional[CancelToken] = None) -> Result:
        user = self._state.user
        if user is None:
            return Result.failure(NOT_SIGNED_IN)
        return self._run(
            "create_course",
            lambda: self.backend.create_course(user.id, name, description),
            lambda state, course: {"courses": state.courses + [course]},
            cancel=cancel,
            name=name,
        )

    def _apply_course(self, state: AppState, course: Course) -> dict:
        changes = {"courses": _replace(state.courses, course)}
        if state.current_course is not None and state.current_course.id == course.id:
            changes["current_course"] = course
        return changes

    def update_course(
        self,
        course_id: str,
        name: str,
        description: str = "",
        cancel: Optional[CancelToken] = None,
    ) -> Result:
        return self._run(
            "update_course",
            lambda: _require_row(self.backend.update_course(course_id, name, description), "Course"),
            self._apply_course,
            cancel=cancel,
            course_id=course_id,
        )

    def update_course_syllabus(
        self,
        course_id: str,
        syllabus: Syllabus,
        cancel: Optional[CancelToken] = None,
    ) -> Result:
        return self._run(
            "update_course_syllabus",
            lambda: _require_row(self.backend.update_course_syllabus(course_id, syllabus), "Course"),
            self._apply_course,
            cancel=cancel,
            course_id=course_id,
        )

    def delete_course(self, course_id: str, cancel: Optional[CancelToken] = None) -> Result:
        """
        Delete a course and drop its dependants from the cached slices, the
        same rows the backend removes by cascade.
        """
        def apply(state: AppState, _) -> dict:
            changes = {
                "courses": _without(state.courses, course_id),
                "tasks": [t for t in state.tasks if t.course_id != course_id],
                "notes": [n for n in state.notes if n.course_id != course_id],
                "documents": [d for d in state.documents if d.course_id != course_id],
            }
            if state.current_course is not None and state.current_course.id == course_id:
                changes["current_course"] = None
            return changes

        return self._run(
            "delete_course", lambda: self.backend.delete_course(course_id), apply, cancel=cancel, course_id=course_id
        )

    # ------------------------------------------------------------------
    # Tasks
    # ------------------------------------------------------------------

    def create_task(
        self,
        title: str,
        description: str,
        due_date: str,
        priority: str = "medium",
        course_id: Optional[str] = None,
        task_type: Optional[str] = None,
        cancel: Optional[CancelToken] = None,
    ) -> Result:
        user = self._state.user
        if user is None:
            return Result.failure(NOT_SIGNED_IN)
        return self._run(
            "create_task",
            lambda: self.backend.create_task(user.id, title, description, due_date, priority, course_id, task_type),
            # Keep the due-date order that fetch_tasks returns
            lambda state, task: {"tasks": sorted(state.tasks + [task], key=_due_key)},
            cancel=cancel,
            title=title,
        )

    def update_task_status(self, task_id: str, status: str, cancel: Optional[CancelToken] = None) -> Result:
        return self._run(
            "update_task_status",
            lambda: _require_row(self.backend.update_task_status(task_id, status), "Task"),
            lambda state, task: {"tasks": _replace(state.tasks, task)},
            cancel=cancel,
            task_id=task_id,
            status=status,
        )

    def toggle_task(self, task_id: str, cancel: Optional[CancelToken] = None) -> Result:
        task = next((t for t in self._state.tasks if t.id == task_id), None)
        if task is None:
            return Result.failure("Task not found")
        status = "pending" if task.status == "completed" else "completed"
        return self.update_task_status(task_id, status, cancel=cancel)

    def delete_task(self, task_id: str, cancel: Optional[CancelToken] = None) -> Result:
        return self._run(
            "delete_task",
            lambda: self.backend.delete_task(task_id),
            lambda state, _: {"tasks": _without(state.tasks, task_id)},
            cancel=cancel,
            task_id=task_id,
        )

    # ------------------------------------------------------------------
    # Notes
    # ------------------------------------------------------------------

    def create_note(
        self,
        title: str,
        content: str,
        course_id: Optional[str] = None,
        cancel: Optional[CancelToken] = None,
    ) -> Result:
        user = self._state.user
        if user is None:
            return Result.failure(NOT_SIGNED_IN)
        return self._run(
            "create_note",
            lambda: self.backend.create_note(user.id, title, content, course_id),
            lambda state, note: {"notes": state.notes + [note]},
            cancel=cancel,
            title=title,
        )

    def update_note(self, note_id: str, title: str, content: str, cancel: Optional[CancelToken] = None) -> Result:
        return self._run(
            "update_note",
            lambda: _require_row(self.backend.update_note(note_id, title, content), "Note"),
            lambda state, note: {"notes": _replace(state.notes, note)},
            cancel=cancel,
            note_id=note_id,
        )

    def delete_note(self, note_id: str, cancel: Optional[CancelToken] = None) -> Result:
        return self._run(
            "delete_note",
            lambda: self.backend.delete_note(note_id),
            lambda state, _: {"notes": _without(state.notes, note_id)},
            cancel=cancel,
            note_id=note_id,
        )

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    def upload_document(
        self,
        course_id: str,
        file_name: str,
        file_bytes: bytes,
        content_type: Optional[str] = None,
        chapter_id: Optional[str] = None,
        topic_id: Optional[str] = None,
        cancel: Optional[CancelToken] = None,
    ) -> Result:
        user = self._state.user
        if user is None:
            return Result.failure(NOT_SIGNED_IN)
        return self._run(
            "upload_document",
            lambda: self.backend.upload_document(
                course_id, user.id, file_name, file_bytes, content_type, chapter_id, topic_id
            ),
            lambda state, document: {"documents": state.documents + [document]},
            cancel=cancel,
            course_id=course_id,
            file_name=file_name,
        )

    def delete_document(self, document_id: str, cancel: Optional[CancelToken] = None) -> Result:
        return self._run(
            "delete_document",
            lambda: self.backend.delete_document(document_id),
            lambda state, _: {"documents": _without(state.documents, document_id)},
            cancel=cancel,
            document_id=document_id,
        )

    # ------------------------------------------------------------------
    # Voice scripts
    # ------------------------------------------------------------------

    def create_voice_script(
        self,
        title: str,
        content: str,
        audio_url: Optional[str] = None,
        cancel: Optional[CancelToken] = None,
    ) -> Result:
        user = self._state.user
        if user is None:
            return Result.failure(NOT_SIGNED_IN)
        return self._run(
            "create_voice_script",
            lambda: self.backend.create_voice_script(user.id, title, content, audio_url),
            lambda state, script: {"voice_scripts": [script] + state.voice_scripts},
            cancel=cancel,
            title=title,
        )

    def update_voice_script(self, script_id: str, patch: dict, cancel: Optional[CancelToken] = None) -> Result:
        return self._run(
            "update_voice_script",
            lambda: _require_row(self.backend.update_voice_script(script_id, patch), "Voice script"),
            lambda state, script: {"voice_scripts": _replace(state.voice_scripts, script)},
            cancel=cancel,
            script_id=script_id,
        )

    def delete_voice_script(self, script_id: str, cancel: Optional[CancelToken] = None) -> Result:
        return self._run(
            "delete_voice_script",
            lambda: self.backend.delete_voice_script(script_id),
            lambda state, _: {"voice_scripts": _without(state.voice_scripts, script_id)},
            cancel=cancel,
            script_id=script_id,
        )



def _require_row(result: Result, label: str) -> Result:
    """
    Updates that matched no row come back empty; treat that as not-found.
    """
    if result.ok and result.data is None:
        return Result.failure(f"{label} not found")
    return result
