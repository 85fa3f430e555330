# syllabus.py

"""
Course syllabus editing.

A syllabus is an ordered list of chapters, each holding ordered topics with
a completion flag. Edit helpers return a new ``Syllabus``; ``SyllabusEditor``
applies them to a course and saves the whole document back through the
store. Two sessions editing the same course overwrite each other: the last
save wins.
"""

from __future__ import annotations

from typing import Optional
from uuid import uuid4

from core.model_schemas import Chapter, Course, Syllabus, Topic
from core.results import Result


def _new_id() -> str:
    return str(uuid4())


def _clean_title(title: str, what: str) -> str:
    title = (title or "").strip()
    if not title:
        raise ValueError(f"{what} title cannot be empty.")
    return title


def default_syllabus() -> Syllabus:
    """
    Starter syllabus used for courses that have none yet.
    """
    return Syllabus(chapters=[
        Chapter(
            id=_new_id(),
            title="Chapter 1: Introduction",
            description="Getting started with the course material",
            topics=[Topic(id=_new_id(), title="Overview")],
        )
    ])


def _map_chapter(syllabus: Syllabus, chapter_id: str, fn) -> Syllabus:
    if not any(ch.id == chapter_id for ch in syllabus.chapters):
        raise KeyError(f"Chapter {chapter_id} not found")
    return Syllabus(chapters=[fn(ch) if ch.id == chapter_id else ch for ch in syllabus.chapters])


def add_chapter(syllabus: Syllabus, title: str, description: str = "") -> Syllabus:
    chapter = Chapter(id=_new_id(), title=_clean_title(title, "Chapter"), description=description.strip())
    return Syllabus(chapters=syllabus.chapters + [chapter])


def edit_chapter(syllabus: Syllabus, chapter_id: str, title: str, description: Optional[str] = None) -> Syllabus:
    title = _clean_title(title, "Chapter")

    def update(ch: Chapter) -> Chapter:
        changes = {"title": title}
        if description is not None:
            changes["description"] = description.strip()
        return ch.model_copy(update=changes)

    return _map_chapter(syllabus, chapter_id, update)


def delete_chapter(syllabus: Syllabus, chapter_id: str) -> Syllabus:
    """
    Remove a chapter. Documents filed under it are left untouched.
    """
    return Syllabus(chapters=[ch for ch in syllabus.chapters if ch.id != chapter_id])


def toggle_chapter_complete(syllabus: Syllabus, chapter_id: str) -> Syllabus:
    """
    Flip a chapter's flag and set every topic in it to match.
    """
    def update(ch: Chapter) -> Chapter:
        done = not ch.completed
        topics = [t.model_copy(update={"completed": done}) for t in ch.topics]
        return ch.model_copy(update={"completed": done, "topics": topics})

    return _map_chapter(syllabus, chapter_id, update)


def add_topic(syllabus: Syllabus, chapter_id: str, title: str) -> Syllabus:
    topic = Topic(id=_new_id(), title=_clean_title(title, "Topic"))

    def update(ch: Chapter) -> Chapter:
        # A new open topic means the chapter is no longer complete
        return ch.model_copy(update={"topics": ch.topics + [topic], "completed": False})

    return _map_chapter(syllabus, chapter_id, update)


def edit_topic(syllabus: Syllabus, chapter_id: str, topic_id: str, title: str) -> Syllabus:
    title = _clean_title(title, "Topic")

    def update(ch: Chapter) -> Chapter:
        topics = [t.model_copy(update={"title": title}) if t.id == topic_id else t for t in ch.topics]
        return ch.model_copy(update={"topics": topics})

    return _map_chapter(syllabus, chapter_id, update)


def delete_topic(syllabus: Syllabus, chapter_id: str, topic_id: str) -> Syllabus:
    def update(ch: Chapter) -> Chapter:
        return ch.model_copy(update={"topics": [t for t in ch.topics if t.id != topic_id]})

    return _map_chapter(syllabus, chapter_id, update)


def toggle_topic_complete(syllabus: Syllabus, chapter_id: str, topic_id: str) -> Syllabus:
    """
    Flip one topic; the chapter counts as complete once all its topics are.
    """
    def update(ch: Chapter) -> Chapter:
        topics = [
            t.model_copy(update={"completed": not t.completed}) if t.id == topic_id else t
            for t in ch.topics
        ]
        completed = bool(topics) and all(t.completed for t in topics)
        return ch.model_copy(update={"topics": topics, "completed": completed})

    return _map_chapter(syllabus, chapter_id, update)


def progress(syllabus: Optional[Syllabus]) -> float:
    """
    Percentage of completed topics (0-100). Chapters without topics count
    as a single item.
    """
    if syllabus is None:
        return 0.0
    total = done = 0
    for ch in syllabus.chapters:
        if ch.topics:
            total += len(ch.topics)
            done += sum(1 for t in ch.topics if t.completed)
        else:
            total += 1
            done += 1 if ch.completed else 0
    return round(100.0 * done / total, 1) if total else 0.0


class SyllabusEditor:
    """
    Applies syllabus edits to one course and saves them through the store.
    """

    def __init__(self, store, course_id: str):
        self.store = store
        self.course_id = course_id

    @property
    def course(self) -> Optional[Course]:
        return next((c for c in self.store.courses if c.id == self.course_id), None)

    @property
    def syllabus(self) -> Syllabus:
        course = self.course
        return course.syllabus if course and course.syllabus else Syllabus()

    def load(self) -> Result:
        """
        Make sure the course has a syllabus, saving the default one if not.
        """
        course = self.course
        if course is None:
            return Result.failure("Course not found")
        if course.syllabus and course.syllabus.chapters:
            return Result.success(course.syllabus)
        return self.save(default_syllabus())

    def save(self, syllabus: Syllabus) -> Result:
        return self.store.update_course_syllabus(self.course_id, syllabus)

    def apply(self, edit, *args, **kwargs) -> Result:
        """
        Run one of the edit helpers above against the current syllabus and save.
        """
        try:
            updated = edit(self.syllabus, *args, **kwargs)
        except (ValueError, KeyError) as e:
            return Result.failure(str(e).strip("'"))
        return self.save(updated)
