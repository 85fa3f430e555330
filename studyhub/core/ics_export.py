# ics_export.py

"""
iCalendar export of the task list.

Builds a VCALENDAR text document with one VEVENT per task: the due date is
the event end and the event starts one hour earlier.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Iterable, List, Optional

from dateutil import parser as dateparser

from core.model_schemas import Course, Task

PRODID = "-//StudyHub//StudyTasks//EN"
CALENDAR_NAME = "StudyHub Tasks"
UID_DOMAIN = "studyhub.app"
EVENT_LENGTH = timedelta(hours=1)

# iCalendar PRIORITY: 1 = highest, 9 = lowest
PRIORITY_MAP = {"high": "1", "medium": "5", "low": "9"}


def format_utc(value: datetime) -> str:
    """
    ``YYYYMMDDTHHMMSSZ``; naive datetimes are taken as local time.
    """
    return value.astimezone(timezone.utc).strftime("%Y%m%dT%H%M%SZ")


def escape_text(value: str) -> str:
    """
    Escape a TEXT value (backslash, semicolon, comma, newline).
    """
    return (
        (value or "")
        .replace("\\", "\\\\")
        .replace(";", "\\;")
        .replace(",", "\\,")
        .replace("\r\n", "\\n")
        .replace("\n", "\\n")
    )


def _parse(value: Optional[str], fallback: datetime) -> datetime:
    if not value:
        return fallback
    try:
        return dateparser.isoparse(value)
    except ValueError:
        return dateparser.parse(value)


def task_event(task: Task, course: Optional[Course], now: datetime) -> List[str]:
    due = _parse(task.due_date, now)
    start = due - EVENT_LENGTH
    description = task.description or ""
    if course:
        description += f"\n\nCourse: {course.name}"
    categories = ["Study", task.priority.upper()]
    if course:
        categories.append(escape_text(course.name))

    return [
        "BEGIN:VEVENT",
        f"UID:{task.id}@{UID_DOMAIN}",
        f"DTSTAMP:{format_utc(now)}",
        f"DTSTART:{format_utc(start)}",
        f"DTEND:{format_utc(due)}",
        f"SUMMARY:{escape_text(task.title)}",
        f"DESCRIPTION:{escape_text(description)}",
        f"PRIORITY:{PRIORITY_MAP.get(task.priority, '5')}",
        f"STATUS:{'COMPLETED' if task.status == 'completed' else 'CONFIRMED'}",
        f"CATEGORIES:{','.join(categories)}",
        f"CREATED:{format_utc(_parse(task.created_at, now))}",
        f"LAST-MODIFIED:{format_utc(now)}",
        "END:VEVENT",
    ]


def build_ics(
    tasks: Iterable[Task],
    courses: Iterable[Course] = (),
    now: Optional[datetime] = None,
    include_completed: bool = True,
) -> str:
    """
    Render tasks as an iCalendar document with CRLF line endings.
    """
    now = now or datetime.now(timezone.utc)
    courses_by_id = {course.id: course for course in courses}

    lines = [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        f"PRODID:{PRODID}",
        "CALSCALE:GREGORIAN",
        "METHOD:PUBLISH",
        f"X-WR-CALNAME:{CALENDAR_NAME}",
        "X-WR-CALDESC:Study tasks and assignments from StudyHub",
    ]
    for task in tasks:
        if not include_completed and task.status == "completed":
            continue
        lines.extend(task_event(task, courses_by_id.get(task.course_id), now))
    lines.append("END:VCALENDAR")
    return "\r\n".join(lines) + "\r\n"


def webcal_url(user_id: str, host: str = "api.studyhub.app") -> str:
    """
    Subscription URL template for calendar apps. Nothing serves it yet.
    """
    return f"webcal://{host}/calendar/{user_id}/tasks.ics"
