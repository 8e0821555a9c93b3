from datetime import date, time

from cuaderno.repositories import (
    EventRepository, GoalRepository, MaterialRepository, ScheduleRepository,
)
from cuaderno.services.context_service import (
    NO_EVENTS, NO_GOALS, NO_MATERIALS, NO_SCHEDULES, ContextAssembler,
)


def _material(db, user_id, subject_id, title, content=None, **extra):
    row = MaterialRepository().create_owned(db, user_id, {
        "subject_id": subject_id, "title": title, "type": extra.pop("type", "notes"), "content": content, **extra,
    })
    db.commit()
    return row


# ---------- subject context ----------
def test_subject_without_materials(db, student, biology):
    assert ContextAssembler().assemble_subject_context(db, student.id, biology.id) == NO_MATERIALS


def test_missing_subject_id_gives_empty_context(db, student):
    assert ContextAssembler().assemble_subject_context(db, student.id, None) == ""


def test_subject_context_lists_materials_with_snippets(db, student, biology):
    _material(db, student.id, biology.id, "Cell biology", "Cells are the basic unit of life.")

    ctx = ContextAssembler().assemble_subject_context(db, student.id, biology.id)

    assert ctx.splitlines() == [
        "Attached study materials (1/1):",
        "- Cell biology (notes) snippet: Cells are the basic unit of life.",
    ]


def test_topic_filter_is_trimmed_and_case_insensitive(db, student, biology):
    _material(db, student.id, biology.id, "Cell biology", "Membranes")
    _material(db, student.id, biology.id, "Genetics", "DNA replication")
    _material(db, student.id, biology.id, "Review", "Mitochondria are cell organelles")

    ctx = ContextAssembler().assemble_subject_context(db, student.id, biology.id, "  CELL ")

    assert ctx.startswith("Attached study materials (2/3):")
    assert "Genetics" not in ctx
    assert "Cell biology" in ctx and "Review" in ctx


def test_snippet_is_capped_with_ellipsis(db, student, biology):
    _material(db, student.id, biology.id, "Long", "x" * 500)

    line = ContextAssembler().assemble_subject_context(db, student.id, biology.id).splitlines()[1]

    assert line.endswith("snippet: " + "x" * 400 + "…")


def test_signed_url_failure_is_not_fatal(db, student, biology, storage):
    _material(db, student.id, biology.id, "Slides", None, type="pdf", file_path="1/1/missing.pdf")

    ctx = ContextAssembler(storage=storage).assemble_subject_context(db, student.id, biology.id)

    assert ctx.splitlines()[1] == "- Slides (pdf)"


def test_stored_files_get_a_signed_url(db, student, biology, storage):
    storage.upload("1/1/slides.pdf", b"%PDF-1.4")
    _material(db, student.id, biology.id, "Slides", None, type="pdf", file_path="1/1/slides.pdf")

    line = ContextAssembler(storage=storage).assemble_subject_context(db, student.id, biology.id).splitlines()[1]

    assert "[url: http://testserver/storage/study-materials/1/1/slides.pdf?token=" in line


def test_material_query_errors_yield_empty_context(db, student, biology):
    class BrokenRepo:
        def list_recent_for_subject(self, *args, **kwargs):
            raise RuntimeError("database unavailable")

    assert ContextAssembler(material_repo=BrokenRepo()).assemble_subject_context(db, student.id, biology.id) == ""


def test_other_users_materials_are_not_included(db, student, biology):
    _material(db, student.id, biology.id, "Mine", "ok")
    MaterialRepository().create_owned(db, student.id + 1000, {
        "subject_id": biology.id, "title": "Theirs", "type": "notes",
    })
    db.commit()

    ctx = ContextAssembler().assemble_subject_context(db, student.id, biology.id)

    assert "Theirs" not in ctx
    assert ctx.startswith("Attached study materials (1/1):")


# ---------- agenda context ----------
def test_empty_agenda_has_no_data_lines(db, student):
    ctx = ContextAssembler().assemble_agenda_context(db, student.id)

    assert ctx.splitlines() == ["Agenda data provided to assistant:", NO_EVENTS, NO_SCHEDULES, NO_GOALS]


def test_agenda_with_only_a_goal(db, student, biology):
    GoalRepository().create_owned(db, student.id, {
        "subject_id": biology.id, "target_hours": 5, "current_hours": 3,
        "week_start": date(2024, 1, 1), "week_end": date(2024, 1, 7),
    })
    db.commit()

    ctx = ContextAssembler().assemble_agenda_context(db, student.id)

    assert ctx.splitlines() == [
        "Agenda data provided to assistant:",
        NO_EVENTS,
        NO_SCHEDULES,
        "Recent weekly goals:",
        "- Biology: 3/5h for week 2024-01-01 → 2024-01-07",
    ]


def test_agenda_lists_events_schedules_and_goals(db, student, biology):
    EventRepository().create_owned(db, student.id, {
        "subject_id": biology.id, "name": "Midterm", "event_type": "exam",
        "event_date": date(2024, 3, 10), "description": "Chapters 1-3",
    })
    ScheduleRepository().create_owned(db, student.id, {
        "subject_id": biology.id, "day_of_week": 1,
        "start_time": time(9, 0), "end_time": time(10, 30), "location": "Room 4",
    })
    GoalRepository().create_owned(db, student.id, {
        "subject_id": biology.id, "target_hours": 5, "current_hours": 3,
        "week_start": date(2024, 1, 1), "week_end": date(2024, 1, 7),
    })
    db.commit()

    lines = ContextAssembler().assemble_agenda_context(db, student.id).splitlines()

    assert "- Midterm [exam] on 2024-03-10 — Chapters 1-3" in lines
    assert "- Day 1: 09:00-10:30 at Room 4" in lines
    assert "- Biology: 3/5h for week 2024-01-01 → 2024-01-07" in lines
    assert NO_EVENTS not in lines and NO_GOALS not in lines


def test_agenda_goals_newest_week_first(db, student, biology):
    goals = GoalRepository()
    for start, end, hours in [(date(2024, 1, 1), date(2024, 1, 7), 1), (date(2024, 1, 8), date(2024, 1, 14), 2.5)]:
        goals.create_owned(db, student.id, {
            "subject_id": biology.id, "target_hours": 4, "current_hours": hours,
            "week_start": start, "week_end": end,
        })
    db.commit()

    goal_lines = [
        line for line in ContextAssembler().assemble_agenda_context(db, student.id).splitlines()
        if line.startswith("- Biology")
    ]

    assert goal_lines == [
        "- Biology: 2.5/4h for week 2024-01-08 → 2024-01-14",
        "- Biology: 1/4h for week 2024-01-01 → 2024-01-07",
    ]


def test_agenda_query_errors_degrade_to_no_data(db, student):
    class BrokenEvents:
        def list_upcoming(self, *args, **kwargs):
            raise RuntimeError("boom")

    ctx = ContextAssembler(event_repo=BrokenEvents()).assemble_agenda_context(db, student.id)

    assert NO_EVENTS in ctx
