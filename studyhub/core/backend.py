# backend.py

"""
Backend query façade over the Supabase client.

Every public method returns a ``Result(data, error)`` and never raises for
expected failures (not-found, constraint violations, auth errors). Callers
check ``error`` before touching ``data``. Rows are returned as the pydantic
models from ``model_schemas``.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, List, Optional
from uuid import uuid4

from pydantic import ValidationError
from supabase import Client, ClientOptions, create_client

from core.config import Settings, get_settings
from core.logger import get_logger
from core.model_schemas import (
    Course,
    Document,
    ExternalLink,
    FlashcardItem,
    JournalEntry,
    JournalSettings,
    Note,
    Syllabus,
    Task,
    User,
    VoiceScript,
)
from core.results import Result

logger = get_logger("backend")


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class BackendFacade:
    """
    Thin, single-purpose wrappers around auth, table and storage calls.
    """

    class NotConfiguredError(RuntimeError):
        """
        Raised by create_backend() when the Supabase URL or key is missing.
        """
        pass

    def __init__(self, client: Client, bucket: str = "documents"):
        self.client = client
        self.bucket = bucket

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _execute(self, action: str, query, model=None, single: bool = False) -> Result:
        """
        Run a prepared query builder and wrap its rows.

        ``model`` validates each returned row; ``single`` unwraps the first row
        (or None) for insert/update calls that select the mutated row back.
        """
        try:
            response = query.execute()
        except Exception as e:
            logger.error("Backend call '%s' failed: %s", action, e)
            return Result.failure(e)

        rows = (response.data if response is not None else None) or []
        if isinstance(rows, dict):
            rows = [rows]
        if model is not None:
            try:
                rows = [model.model_validate(row) for row in rows]
            except ValidationError as e:
                logger.error("Backend call '%s' returned a malformed %s row: %s", action, model.__name__, e)
                return Result.failure(f"Unexpected {model.__name__.lower()} data from the server")
        if single:
            return Result.success(rows[0] if rows else None)
        return Result.success(rows)

    def _fetch_profile(self, user) -> Result:
        """
        Join the profile row (name, institution) onto an auth user.
        """
        try:
            response = (
                self.client.table("profiles")
                .select("name, institution")
                .eq("id", user.id)
                .single()
                .execute()
            )
        except Exception as e:
            logger.error("Profile read failed for user %s: %s", user.id, e)
            return Result.failure(e)

        profile = response.data or {}
        return Result.success(User(
            id=user.id,
            email=user.email or "",
            name=profile.get("name"),
            institution=profile.get("institution"),
        ))

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------

    def sign_up(self, email: str, password: str, name: str, institution: Optional[str] = None) -> Result:
        """
        Create an auth identity, then upsert its profile row.

        A failed profile upsert is reported as an error even though the
        identity now exists; callers must not assume the profile is there.
        """
        try:
            response = self.client.auth.sign_up({
                "email": email,
                "password": password,
                "options": {"data": {"name": name}},
            })
        except Exception as e:
            logger.error("Sign up failed for %s: %s", email, e)
            return Result.failure(e)

        user = response.user
        if user is None:
            return Result.failure("Sign up failed. Please try again.")

        try:
            self.client.table("profiles").upsert({
                "id": user.id,
                "email": email,
                "name": name,
                "institution": institution,
            }).execute()
        except Exception as e:
            logger.error("Profile upsert failed after sign up of %s (identity %s): %s", email, user.id, e)
            return Result.failure(e)

        return Result.success(User(id=user.id, email=user.email or email, name=name, institution=institution))

    def sign_in(self, email: str, password: str) -> Result:
        """
        Authenticate and join profile fields onto the user.

        Fails closed: a profile read error after valid credentials is still a
        sign-in error.
        """
        try:
            response = self.client.auth.sign_in_with_password({"email": email, "password": password})
        except Exception as e:
            logger.warning("Sign in failed for %s: %s", email, e)
            return Result.failure(e)

        if response.user is None:
            return Result.failure("Invalid login credentials")
        return self._fetch_profile(response.user)

    def sign_out(self) -> Result:
        try:
            self.client.auth.sign_out()
        except Exception as e:
            logger.error("Sign out failed: %s", e)
            return Result.failure(e)
        return Result.success()

    def get_current_user(self) -> Result:
        """
        Current session user joined with its profile.

        No session is not a failure: returns ``Result(None, None)``.
        """
        try:
            session = self.client.auth.get_session()
            if session is None:
                return Result.success(None)
            response = self.client.auth.get_user()
        except Exception as e:
            logger.error("Current user lookup failed: %s", e)
            return Result.failure(e)

        if response is None or response.user is None:
            return Result.success(None)
        return self._fetch_profile(response.user)

    def get_session_token(self) -> Result:
        """
        Access token of the active session, or None when signed out.
        """
        try:
            session = self.client.auth.get_session()
        except Exception as e:
            logger.error("Session lookup failed: %s", e)
            return Result.failure(e)
        return Result.success(session.access_token if session else None)

    # ------------------------------------------------------------------
    # Courses
    # ------------------------------------------------------------------

    def get_courses(self, user_id: str) -> Result:
        query = self.client.table("courses").select("*").eq("user_id", user_id)
        return self._execute("get courses", query, Course)

    def create_course(self, user_id: str, name: str, description: str = "") -> Result:
        query = self.client.table("courses").insert([{
            "user_id": user_id,
            "name": name,
            "description": description,
        }])
        return self._execute("create course", query, Course, single=True)

    def update_course(self, course_id: str, name: str, description: str = "") -> Result:
        query = (
            self.client.table("courses")
            .update({"name": name, "description": description})
            .eq("id", course_id)
        )
        return self._execute("update course", query, Course, single=True)

    def update_course_syllabus(self, course_id: str, syllabus: Syllabus) -> Result:
        """
        Overwrite the whole syllabus JSON of a course (last write wins).
        """
        query = (
            self.client.table("courses")
            .update({"syllabus": syllabus.model_dump()})
            .eq("id", course_id)
        )
        return self._execute("update syllabus", query, Course, single=True)

    def delete_course(self, course_id: str) -> Result:
        """
        Delete a course; documents, notes and tasks cascade on the backend.
        """
        query = self.client.table("courses").delete().eq("id", course_id)
        result = self._execute("delete course", query)
        return Result(error=result.error)

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    def get_documents(self, course_id: str) -> Result:
        query = self.client.table("documents").select("*").eq("course_id", course_id)
        return self._execute("get documents", query, Document)

    def upload_document(
        self,
        course_id: str,
        user_id: str,
        file_name: str,
        file_bytes: bytes,
        content_type: Optional[str] = None,
        chapter_id: Optional[str] = None,
        topic_id: Optional[str] = None,
    ) -> Result:
        """
        Upload raw bytes to storage, then insert the metadata row.

        The blob lives at ``{user_id}/{course_id}/{random}.{ext}``. If the
        upload fails nothing is inserted; if the insert fails the uploaded blob
        is removed again so no orphan is left in the bucket.
        """
        file_ext = file_name.rsplit(".", 1)[-1].lower() if "." in file_name else ""
        random_name = f"{uuid4().hex}.{file_ext}" if file_ext else uuid4().hex
        file_path = f"{user_id}/{course_id}/{random_name}"
        storage = self.client.storage.from_(self.bucket)

        try:
            storage.upload(
                file_path,
                file_bytes,
                {"content-type": content_type or "application/octet-stream"},
            )
        except Exception as e:
            logger.error("Storage upload of %s failed: %s", file_name, e)
            return Result.failure(e)

        row = {
            "course_id": course_id,
            "name": file_name,
            "file_path": file_path,
            "file_type": file_ext,
            "size": len(file_bytes),
        }
        if chapter_id:
            row["chapter_id"] = chapter_id
        if topic_id:
            row["topic_id"] = topic_id

        result = self._execute("insert document", self.client.table("documents").insert([row]), Document, single=True)
        if not result.ok:
            # Compensating delete for the blob that now has no metadata row
            try:
                storage.remove([file_path])
            except Exception as cleanup_error:
                logger.warning("Could not remove orphaned blob %s: %s", file_path, cleanup_error)
        return result

    def delete_document(self, document_id: str) -> Result:
        """
        Remove a document's blob, then its row.

        Storage failures are logged and ignored so the database never keeps a
        row pointing at a file the user asked to delete.
        """
        try:
            response = (
                self.client.table("documents")
                .select("file_path")
                .eq("id", document_id)
                .single()
                .execute()
            )
        except Exception as e:
            logger.error("Could not read document %s before deletion: %s", document_id, e)
            return Result.failure(e)

        file_path = (response.data or {}).get("file_path")
        if file_path:
            try:
                self.client.storage.from_(self.bucket).remove([file_path])
            except Exception as e:
                # Continue with database deletion even if storage deletion fails
                logger.warning("Storage deletion failed for %s: %s", file_path, e)

        query = self.client.table("documents").delete().eq("id", document_id)
        result = self._execute("delete document", query)
        return Result(error=result.error)

    def get_document_signed_url(self, file_path: str, expires_in: int = 3600) -> Result:
        try:
            response = self.client.storage.from_(self.bucket).create_signed_url(file_path, expires_in)
        except Exception as e:
            logger.error("Signed URL for %s failed: %s", file_path, e)
            return Result.failure(e)
        url = None
        if isinstance(response, dict):
            url = response.get("signedURL") or response.get("signedUrl")
        if not url:
            return Result.failure("Failed to access document file")
        return Result.success(url)

    # ------------------------------------------------------------------
    # Tasks
    # ------------------------------------------------------------------

    def get_tasks(self, user_id: str) -> Result:
        query = (
            self.client.table("tasks")
            .select("*")
            .eq("user_id", user_id)
            .order("due_date", desc=False)
        )
        return self._execute("get tasks", query, Task)

    def create_task(
        self,
        user_id: str,
        title: str,
        description: str,
        due_date: str,
        priority: str,
        course_id: Optional[str] = None,
        task_type: Optional[str] = None,
    ) -> Result:
        row = {
            "user_id": user_id,
            "title": title,
            "description": description,
            "due_date": due_date,
            "priority": priority,
            "course_id": course_id,
            "status": "pending",
        }
        if task_type:
            row["type"] = task_type
        return self._execute("create task", self.client.table("tasks").insert([row]), Task, single=True)

    def update_task_status(self, task_id: str, status: str) -> Result:
        query = self.client.table("tasks").update({"status": status}).eq("id", task_id)
        return self._execute("update task status", query, Task, single=True)

    def update_task(self, task_id: str, patch: dict) -> Result:
        query = self.client.table("tasks").update(patch).eq("id", task_id)
        return self._execute("update task", query, Task, single=True)

    def delete_task(self, task_id: str) -> Result:
        result = self._execute("delete task", self.client.table("tasks").delete().eq("id", task_id))
        return Result(error=result.error)

    # ------------------------------------------------------------------
    # Notes
    # ------------------------------------------------------------------

    def get_notes(self, user_id: str, course_id: Optional[str] = None) -> Result:
        query = self.client.table("notes").select("*").eq("user_id", user_id)
        if course_id:
            query = query.eq("course_id", course_id)
        return self._execute("get notes", query, Note)

    def create_note(self, user_id: str, title: str, content: str, course_id: Optional[str] = None) -> Result:
        query = self.client.table("notes").insert([{
            "user_id": user_id,
            "title": title,
            "content": content,
            "course_id": course_id,
        }])
        return self._execute("create note", query, Note, single=True)

    def update_note(self, note_id: str, title: str, content: str) -> Result:
        query = (
            self.client.table("notes")
            .update({"title": title, "content": content, "updated_at": _now_iso()})
            .eq("id", note_id)
        )
        return self._execute("update note", query, Note, single=True)

    def delete_note(self, note_id: str) -> Result:
        result = self._execute("delete note", self.client.table("notes").delete().eq("id", note_id))
        return Result(error=result.error)

    # ------------------------------------------------------------------
    # Flashcards
    # ------------------------------------------------------------------

    def get_flashcards(self, document_id: str) -> Result:
        query = (
            self.client.table("flashcards")
            .select("*")
            .eq("document_id", document_id)
            .order("created_at", desc=False)
        )
        return self._execute("get flashcards", query, FlashcardItem)

    def create_flashcards(self, cards: Iterable[FlashcardItem], document_id: Optional[str] = None) -> Result:
        """
        Batch insert generated cards, each tagged with ``document_id`` (or null
        for standalone sets).
        """
        rows = [{"front": card.front, "back": card.back, "document_id": document_id} for card in cards]
        if not rows:
            return Result.failure("No flashcards to save")
        return self._execute("create flashcards", self.client.table("flashcards").insert(rows), FlashcardItem)

    def delete_flashcard(self, flashcard_id: str) -> Result:
        result = self._execute("delete flashcard", self.client.table("flashcards").delete().eq("id", flashcard_id))
        return Result(error=result.error)

    def count_flashcards(self) -> Result:
        try:
            response = self.client.table("flashcards").select("id", count="exact").execute()
        except Exception as e:
            logger.error("Flashcard count failed: %s", e)
            return Result.failure(e)
        return Result.success(response.count or 0)

    # ------------------------------------------------------------------
    # Journal
    # ------------------------------------------------------------------

    def get_journal_entries(self, user_id: str) -> Result:
        query = (
            self.client.table("journal_entries")
            .select("*")
            .eq("user_id", user_id)
            .order("created_at", desc=True)
        )
        return self._execute("get journal entries", query, JournalEntry)

    def create_journal_entry(
        self,
        user_id: str,
        title: str,
        content: str,
        mood: Optional[str] = None,
        tags: Optional[List[str]] = None,
        is_locked: bool = False,
    ) -> Result:
        query = self.client.table("journal_entries").insert([{
            "user_id": user_id,
            "title": title,
            "content": content,
            "mood": mood,
            "tags": tags or [],
            "is_locked": is_locked,
        }])
        return self._execute("create journal entry", query, JournalEntry, single=True)

    def update_journal_entry(
        self,
        entry_id: str,
        title: str,
        content: str,
        mood: Optional[str] = None,
        tags: Optional[List[str]] = None,
        is_locked: Optional[bool] = None,
    ) -> Result:
        row = {
            "title": title,
            "content": content,
            "mood": mood,
            "tags": tags or [],
            "updated_at": _now_iso(),
        }
        # None leaves the lock flag as it is
        if is_locked is not None:
            row["is_locked"] = is_locked
        query = self.client.table("journal_entries").update(row).eq("id", entry_id)
        return self._execute("update journal entry", query, JournalEntry, single=True)

    def delete_journal_entry(self, entry_id: str) -> Result:
        query = self.client.table("journal_entries").delete().eq("id", entry_id)
        result = self._execute("delete journal entry", query)
        return Result(error=result.error)

    def get_journal_settings(self, user_id: str) -> Result:
        """
        Settings row for a user, or ``Result(None)`` when none was saved yet.
        """
        query = (
            self.client.table("journal_settings")
            .select("*")
            .eq("user_id", user_id)
            .maybe_single()
        )
        return self._execute("get journal settings", query, JournalSettings, single=True)

    def upsert_journal_settings(
        self,
        user_id: str,
        passcode_hash: Optional[str] = None,
        auto_lock_minutes: int = 30,
    ) -> Result:
        row = {"user_id": user_id, "auto_lock_minutes": auto_lock_minutes}
        # Omitting the key keeps an existing passcode
        if passcode_hash:
            row["passcode_hash"] = passcode_hash
        query = self.client.table("journal_settings").upsert(row, on_conflict="user_id")
        return self._execute("upsert journal settings", query, JournalSettings, single=True)

    # ------------------------------------------------------------------
    # Voice scripts
    # ------------------------------------------------------------------

    def get_voice_scripts(self, user_id: str) -> Result:
        query = (
            self.client.table("voice_scripts")
            .select("*")
            .eq("user_id", user_id)
            .order("created_at", desc=True)
        )
        return self._execute("get voice scripts", query, VoiceScript)

    def create_voice_script(self, user_id: str, title: str, content: str, audio_url: Optional[str] = None) -> Result:
        row = {"user_id": user_id, "title": title, "content": content}
        if audio_url:
            row["audio_url"] = audio_url
        return self._execute("create voice script", self.client.table("voice_scripts").insert([row]), VoiceScript, single=True)

    def update_voice_script(self, script_id: str, patch: dict) -> Result:
        query = (
            self.client.table("voice_scripts")
            .update({**patch, "updated_at": _now_iso()})
            .eq("id", script_id)
        )
        return self._execute("update voice script", query, VoiceScript, single=True)

    def delete_voice_script(self, script_id: str) -> Result:
        query = self.client.table("voice_scripts").delete().eq("id", script_id)
        result = self._execute("delete voice script", query)
        return Result(error=result.error)

    # ------------------------------------------------------------------
    # External links
    # ------------------------------------------------------------------

    def get_links(self, user_id: str) -> Result:
        query = (
            self.client.table("external_links")
            .select("*")
            .eq("user_id", user_id)
            .order("created_at", desc=True)
        )
        return self._execute("get links", query, ExternalLink)

    def create_link(
        self,
        user_id: str,
        title: str,
        url: str,
        description: str = "",
        tags: Optional[List[str]] = None,
    ) -> Result:
        query = self.client.table("external_links").insert([{
            "user_id": user_id,
            "title": title,
            "url": url,
            "description": description,
            "tags": tags or [],
        }])
        return self._execute("create link", query, ExternalLink, single=True)

    def delete_link(self, link_id: str) -> Result:
        query = self.client.table("external_links").delete().eq("id", link_id)
        result = self._execute("delete link", query)
        return Result(error=result.error)


def create_backend(settings: Optional[Settings] = None) -> BackendFacade:
    """
    Build a façade around a real Supabase client from settings.
    """
    settings = settings or get_settings()
    if not settings.supabase_url or not settings.supabase_anon_key:
        raise BackendFacade.NotConfiguredError("Missing SUPABASE_URL / SUPABASE_ANON_KEY.")

    timeout = int(settings.request_timeout)
    options = ClientOptions(postgrest_client_timeout=timeout, storage_client_timeout=timeout)
    client = create_client(settings.supabase_url, settings.supabase_anon_key, options=options)
    logger.info("Supabase client created for %s", settings.supabase_url)
    return BackendFacade(client, bucket=settings.documents_bucket)
