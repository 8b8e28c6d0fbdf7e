"""Map raw database rows onto the domain dataclasses.

Rows come back from storage in whatever shape the table happens to have:
older rows miss columns that were added later, numbers may arrive as
strings, and a question goal of 0 was historically written instead of
NULL. Storage is the source of truth for validation, so nothing here
rejects a row; missing or malformed fields get deterministic defaults.
"""
import math
from collections.abc import Mapping

from studyhike.models import StudyTask, TestScore, WeakTopic

# storage column -> dataclass attribute
_TASK_COLUMNS = {
    "duration_hours": "duration",
    "day_of_week": "day",
    "is_completed": "completed",
}


def _get(raw, *keys, default=None):
    for key in keys:
        try:
            value = raw[key]
        except (KeyError, IndexError):
            continue
        if value is not None:
            return value
    return default


def _as_dict(raw) -> dict:
    if isinstance(raw, Mapping):
        return dict(raw)
    try:
        return {k: raw[k] for k in raw.keys()}
    except (AttributeError, TypeError):
        return {}


def _to_float(value, default=0.0) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return default
    return number if math.isfinite(number) else default


def _to_int(value, default=0) -> int:
    number = _to_float(value, default=None)
    return default if number is None else int(number)


def _to_bool(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "t", "yes")
    return bool(value)


def _to_str(value):
    if value is None:
        return None
    text = str(value)
    return text or None


def normalize_task(raw) -> StudyTask:
    """Build a StudyTask from a row. Never raises."""
    row = _as_dict(raw)
    goal = _to_int(_get(row, "question_goal"), default=0)
    question_goal = goal if goal > 0 else None
    done = max(0, _to_int(_get(row, "completed_questions"), default=0))
    if question_goal is not None:
        done = min(done, question_goal)
    raw_id = _get(row, "id")
    return StudyTask(
        id=_to_int(raw_id, default=None) if raw_id is not None else None,
        student_id=str(_get(row, "student_id", default="")),
        subject=str(_get(row, "subject", default="")),
        topic=str(_get(row, "topic", default="")),
        day=str(_get(row, "day_of_week", "day", default="")),
        duration=_to_float(_get(row, "duration_hours", "duration")),
        completed=_to_bool(_get(row, "is_completed", "completed", default=False)),
        start_time=_to_str(_get(row, "start_time")),
        end_time=_to_str(_get(row, "end_time")),
        week_start=_to_str(_get(row, "week_start")),
        added_by=_to_str(_get(row, "added_by")) or "student",
        authenticity=_to_str(_get(row, "authenticity")) or "self-decided",
        mentor_notes=_to_str(_get(row, "mentor_notes")),
        resource_link=_to_str(_get(row, "resource_link")),
        question_goal=question_goal,
        completed_questions=done,
    )


def normalize_weak_topic(raw) -> WeakTopic:
    row = _as_dict(raw)
    raw_id = _get(row, "id")
    return WeakTopic(
        id=_to_int(raw_id, default=None) if raw_id is not None else None,
        student_id=str(_get(row, "student_id", default="")),
        subject=str(_get(row, "subject", default="")),
        topic=str(_get(row, "topic", default="")),
        status=str(_get(row, "status", default="needs_improvement")),
        priority=_to_int(_get(row, "priority"), default=0),
    )


def normalize_test_score(raw) -> TestScore:
    row = _as_dict(raw)
    raw_id = _get(row, "id")
    return TestScore(
        id=_to_int(raw_id, default=None) if raw_id is not None else None,
        student_id=str(_get(row, "student_id", default="")),
        subject=str(_get(row, "subject", default="")),
        test_name=str(_get(row, "test_name", default="")),
        score=_to_float(_get(row, "score")),
        max_score=_to_float(_get(row, "max_score")),
        test_date=_to_str(_get(row, "test_date")),
    )


def task_to_row(task: StudyTask) -> dict:
    """Inverse of normalize_task: storage column names, id left out."""
    row = {
        "student_id": task.student_id,
        "subject": task.subject,
        "topic": task.topic,
        "day_of_week": task.day,
        "duration_hours": task.duration,
        "is_completed": int(task.completed),
        "start_time": task.start_time,
        "end_time": task.end_time,
        "week_start": task.week_start,
        "added_by": task.added_by,
        "authenticity": task.authenticity,
        "mentor_notes": task.mentor_notes,
        "resource_link": task.resource_link,
        "question_goal": task.question_goal or None,
        "completed_questions": task.completed_questions,
    }
    return row


def fields_to_columns(fields: dict) -> dict:
    """Rename dataclass attribute names in a partial update to column names."""
    reverse = {attr: column for column, attr in _TASK_COLUMNS.items()}
    columns = {}
    for name, value in fields.items():
        column = reverse.get(name, name)
        if column == "is_completed":
            value = int(bool(value))
        elif column == "question_goal":
            value = value or None
        columns[column] = value
    return columns
