# model_schemas.py

"""
Pydantic models describing the rows StudyHub reads from the backend and the
items produced by the generation endpoints.

Row models and generated items both ignore unknown fields. Generated items
still require their core fields (front/back, question).
"""

from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, model_validator

# Allowed values for task fields, in display order
TASK_PRIORITIES = ("low", "medium", "high")
TASK_STATUSES = ("pending", "completed")
TASK_TYPES = ("assignment", "exam", "reading", "project", "other")


class Row(BaseModel):
    """
    Base for backend rows: tolerant of extra columns.
    """
    model_config = ConfigDict(extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def null_columns_use_defaults(cls, data):
        # a null in a column with a non-null default (tags, description ...) means "unset"
        if not isinstance(data, dict):
            return data
        fields = cls.model_fields
        return {
            key: value for key, value in data.items()
            if value is not None
            or key not in fields
            or fields[key].is_required()
            or fields[key].get_default(call_default_factory=True) is None
        }


class User(Row):
    """
    Authenticated identity joined with its profile row.
    """
    id: str
    email: str = ""
    name: Optional[str] = None
    institution: Optional[str] = None


class Topic(Row):
    id: str
    title: str
    completed: bool = False


class Chapter(Row):
    id: str
    title: str
    description: str = ""
    completed: bool = False
    topics: List[Topic] = Field(default_factory=list)


class Syllabus(Row):
    """
    Ordered chapters, each with ordered topics. Stored as JSON on the course row.
    """
    chapters: List[Chapter] = Field(default_factory=list)


class Course(Row):
    id: str
    user_id: Optional[str] = None
    name: str
    description: str = ""
    syllabus: Optional[Syllabus] = None
    created_at: Optional[str] = None


class Document(Row):
    """
    Uploaded file metadata. ``content`` stays null until text extraction runs.
    """
    id: str
    course_id: str
    chapter_id: Optional[str] = None
    topic_id: Optional[str] = None
    name: str
    file_path: str
    file_type: Optional[str] = None
    size: Optional[int] = None
    content: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    created_at: Optional[str] = None

    @property
    def is_processed(self) -> bool:
        return bool(self.content and self.content.strip())


class Task(Row):
    id: str
    user_id: Optional[str] = None
    course_id: Optional[str] = None
    title: str
    description: str = ""
    due_date: str
    priority: str = "medium"
    status: str = "pending"
    type: Optional[str] = None
    created_at: Optional[str] = None


class Note(Row):
    id: str
    user_id: Optional[str] = None
    course_id: Optional[str] = None
    title: str
    content: str = ""
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class VoiceScript(Row):
    id: str
    user_id: Optional[str] = None
    title: str
    content: str = ""
    audio_url: Optional[str] = None
    recording_url: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class JournalEntry(Row):
    id: str
    user_id: Optional[str] = None
    title: str
    content: str = ""
    mood: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    is_locked: bool = False
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class ExternalLink(Row):
    id: str
    user_id: Optional[str] = None
    title: str
    url: str
    description: str = ""
    tags: List[str] = Field(default_factory=list)
    created_at: Optional[str] = None


class JournalSettings(Row):
    id: Optional[str] = None
    user_id: str
    passcode_hash: Optional[str] = None
    auto_lock_minutes: int = 30


class FlashcardItem(BaseModel):
    """
    A single flashcard. ``id`` and ``document_id`` are only set once persisted.
    - front: question or concept
    - back: answer or explanation
    """
    id: Optional[str] = None
    front: str = Field(min_length=1, description="Question or concept shown first.")
    back: str = Field(min_length=1, description="Answer revealed on flip.")
    document_id: Optional[str] = None
    created_at: Optional[str] = None
    model_config = ConfigDict(extra="ignore")


class QuizQuestion(BaseModel):
    """
    A generated quiz question.
    - type: "mcq" (multiple choice) or "open"
    - options: choices for MCQs, empty for open questions
    - answer: correct option for MCQs, sample answer for open questions
    """
    type: str = Field(default="mcq", description="mcq | open")
    question: str = Field(min_length=1)
    options: List[str] = Field(default_factory=list)
    answer: str = ""
    model_config = ConfigDict(extra="ignore")

    @property
    def is_multiple_choice(self) -> bool:
        return self.type.lower() in ("mcq", "multiple-choice", "multiple_choice") or bool(self.options)
