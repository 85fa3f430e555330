from datetime import datetime, timezone

from conftest import make_course, make_task
from core.ics_export import build_ics, escape_text, format_utc, webcal_url

NOW = datetime(2026, 3, 1, 9, 30, tzinfo=timezone.utc)


def event_lines(ics):
    return ics.split("\r\n")


def test_high_priority_pending_task():
    task = make_task("t1", "2026-03-10T23:59:00Z", title="Essay", priority="high", course_id="c1",
                     created_at="2026-02-20T08:00:00Z")
    ics = build_ics([task], [make_course("c1", "Biology")], now=NOW)
    lines = event_lines(ics)

    assert "UID:t1@studyhub.app" in lines
    assert "DTSTART:20260310T225900Z" in lines
    assert "DTEND:20260310T235900Z" in lines
    assert "PRIORITY:1" in lines
    assert "STATUS:CONFIRMED" in lines
    assert "CATEGORIES:Study,HIGH,Biology" in lines
    assert "DESCRIPTION:\\n\\nCourse: Biology" in lines
    assert "CREATED:20260220T080000Z" in lines
    assert "DTSTAMP:20260301T093000Z" in lines


def test_calendar_envelope_uses_crlf():
    ics = build_ics([], now=NOW)
    assert ics.startswith("BEGIN:VCALENDAR\r\nVERSION:2.0\r\nPRODID:-//StudyHub//StudyTasks//EN\r\n")
    assert ics.endswith("END:VCALENDAR\r\n")
    assert "\n" not in ics.replace("\r\n", "")


def test_priority_and_status_mapping():
    tasks = [
        make_task("m", "2026-03-10T10:00:00Z", priority="medium", status="completed"),
        make_task("l", "2026-03-11T10:00:00Z", priority="low"),
    ]
    lines = event_lines(build_ics(tasks, now=NOW))
    assert lines.count("PRIORITY:5") == 1
    assert lines.count("PRIORITY:9") == 1
    assert "STATUS:COMPLETED" in lines


def test_completed_tasks_can_be_left_out():
    tasks = [
        make_task("done", "2026-03-10T10:00:00Z", status="completed"),
        make_task("open", "2026-03-11T10:00:00Z"),
    ]
    ics = build_ics(tasks, now=NOW, include_completed=False)
    assert "UID:open@studyhub.app" in ics
    assert "UID:done@studyhub.app" not in ics


def test_text_escaping():
    expected = "Read ch. 1\\, 2\\; then\\nsummarise \\\\ review"
    assert escape_text("Read ch. 1, 2; then\nsummarise \\ review") == expected
    task = make_task("t1", "2026-03-10T10:00:00Z", title="A, B; C")
    assert "SUMMARY:A\\, B\\; C" in event_lines(build_ics([task], now=NOW))


def test_offsets_are_converted_to_utc():
    task = make_task("t1", "2026-03-10T12:00:00+02:00")
    assert "DTEND:20260310T100000Z" in event_lines(build_ics([task], now=NOW))
    assert format_utc(datetime(2026, 1, 2, 3, 4, 5, tzinfo=timezone.utc)) == "20260102T030405Z"


def test_webcal_url():
    assert webcal_url("user-1") == "webcal://api.studyhub.app/calendar/user-1/tasks.ics"
    assert webcal_url("user-1", "cal.example.org") == "webcal://cal.example.org/calendar/user-1/tasks.ics"
