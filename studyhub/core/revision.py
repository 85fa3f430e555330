# revision.py

"""
Smart revision recommendations.

Each course is scored by its syllabus completion. Low scores produce a short
list of recommended study actions that can be turned into tasks.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional

from pydantic import BaseModel

from core.model_schemas import Course
from core.results import Result
from core.syllabus import progress

STRUGGLING_BELOW = 50
NEEDS_PRACTICE_BELOW = 70


class Recommendation(BaseModel):
    id: str
    type: str # review | quiz | flashcard | practice
    title: str
    description: str
    priority: str
    estimated_time: str
    course_id: str
    course_name: str
    chapter: Optional[str] = None
    added_to_todo: bool = False


def _first_open_chapter(course: Course) -> Optional[str]:
    if not course.syllabus:
        return None
    for chapter in course.syllabus.chapters:
        if not chapter.completed:
            return chapter.title
    return None


def recommend_for_course(course: Course, score: float) -> List[Recommendation]:
    """
    Recommendations for one course given its score (0-100).
    """
    base = {"course_id": course.id, "course_name": course.name}
    if score < STRUGGLING_BELOW:
        chapter = _first_open_chapter(course)
        return [
            Recommendation(
                id=f"{course.id}-review-1",
                type="review",
                title=f"Review {course.name}" + (f" - {chapter}" if chapter else ""),
                description=f"Your progress is below {STRUGGLING_BELOW}%. Focus on fundamental concepts.",
                priority="high",
                estimated_time="45 min",
                chapter=chapter,
                **base,
            ),
            Recommendation(
                id=f"{course.id}-quiz-1",
                type="quiz",
                title=f"Practice Quiz: {course.name} Basics",
                description="Take a focused quiz on fundamental concepts to identify specific gaps.",
                priority="high",
                estimated_time="20 min",
                **base,
            ),
            Recommendation(
                id=f"{course.id}-flashcard-1",
                type="flashcard",
                title="Flashcard Review: Key Terms",
                description="Review essential terminology and definitions for better understanding.",
                priority="medium",
                estimated_time="15 min",
                **base,
            ),
        ]
    if score < NEEDS_PRACTICE_BELOW:
        return [
            Recommendation(
                id=f"{course.id}-practice-1",
                type="practice",
                title=f"Practice Problems: {course.name}",
                description="Work on practice problems to strengthen your understanding.",
                priority="medium",
                estimated_time="30 min",
                **base,
            )
        ]
    return []


def course_scores(courses: Iterable[Course]) -> Dict[str, float]:
    return {course.id: progress(course.syllabus) for course in courses}


def build_recommendations(courses: Iterable[Course]) -> List[Recommendation]:
    """
    Recommendations across all courses, high priority first.
    """
    courses = list(courses)
    scores = course_scores(courses)
    recommendations = [
        rec for course in courses for rec in recommend_for_course(course, scores[course.id])
    ]
    order = {"high": 0, "medium": 1, "low": 2}
    return sorted(recommendations, key=lambda rec: order.get(rec.priority, 3))


def recommendation_due_date(recommendation: Recommendation, now: Optional[datetime] = None) -> datetime:
    """
    High priority is due in 24 hours, everything else in 48.
    """
    now = now or datetime.now(timezone.utc)
    hours = 24 if recommendation.priority == "high" else 48
    return now + timedelta(hours=hours)


def add_to_todo(store, recommendation: Recommendation, now: Optional[datetime] = None) -> Result:
    """
    Turn a recommendation into a task through the store.
    """
    due = recommendation_due_date(recommendation, now)
    result = store.create_task(
        recommendation.title,
        recommendation.description,
        due.isoformat(),
        recommendation.priority,
        recommendation.course_id,
        task_type="reading" if recommendation.type in ("review", "flashcard") else "assignment",
    )
    if result.ok:
        recommendation.added_to_todo = True
    return result
