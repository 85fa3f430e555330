from datetime import datetime, timezone

from conftest import make_course, make_task
from core.model_schemas import Chapter, Syllabus, Topic
from core.results import Result
from core.revision import add_to_todo, build_recommendations, recommend_for_course, recommendation_due_date

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def course_with_progress(course_id, done, total):
    topics = [Topic(id=f"{course_id}-t{i}", title=f"T{i}", completed=i < done) for i in range(total)]
    return make_course(course_id, syllabus=Syllabus(chapters=[Chapter(id=f"{course_id}-ch", title="Basics", topics=topics)]))


def test_struggling_course_gets_three_recommendations():
    recs = recommend_for_course(make_course("c1", "Physics"), 20)
    assert [r.type for r in recs] == ["review", "quiz", "flashcard"]
    assert [r.priority for r in recs] == ["high", "high", "medium"]


def test_middling_course_gets_practice():
    recs = recommend_for_course(make_course("c1", "Physics"), 60)
    assert [(r.type, r.priority) for r in recs] == [("practice", "medium")]


def test_strong_course_gets_nothing():
    assert recommend_for_course(make_course("c1"), 70) == []


def test_build_orders_high_priority_first():
    recs = build_recommendations([course_with_progress("mid", 6, 10), course_with_progress("low", 1, 10)])
    assert [r.priority for r in recs] == ["high", "high", "medium", "medium"]
    assert recs[0].course_id == "low"


def test_due_dates():
    high, _, medium = recommend_for_course(make_course("c1"), 0)
    assert (recommendation_due_date(high, NOW) - NOW).total_seconds() == 24 * 3600
    assert (recommendation_due_date(medium, NOW) - NOW).total_seconds() == 48 * 3600


def test_add_to_todo_creates_task(signed_in_store, mock_backend):
    rec = recommend_for_course(make_course("c1", "Physics"), 10)[0]
    mock_backend.create_task.return_value = Result.success(make_task("t9", "2026-03-02T12:00:00+00:00"))

    result = add_to_todo(signed_in_store, rec, NOW)

    assert result.ok
    assert rec.added_to_todo
    args = mock_backend.create_task.call_args.args
    assert args[1] == rec.title
    assert args[3] == "2026-03-02T12:00:00+00:00"
    assert args[4] == "high"
    assert args[5] == "c1"
