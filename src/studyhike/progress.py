"""Completion percentages for a week, a day or a subject."""
from dataclasses import replace

from studyhike.errors import ValidationError
from studyhike.models import StudyTask


def _percent(done: int, total: int) -> int:
    if total == 0:
        return 0
    return round(done / total * 100)


def progress(tasks) -> int:
    tasks = list(tasks)
    return _percent(sum(1 for t in tasks if t.completed), len(tasks))


def day_progress(tasks, day: str) -> int:
    return progress(t for t in tasks if t.day == day)


def subject_progress(tasks, subject: str) -> int:
    return progress(t for t in tasks if t.subject == subject)


def question_progress(tasks) -> int:
    """Completed questions over question goals, for tasks that have a goal."""
    with_goal = [t for t in tasks if t.question_goal]
    goal = sum(t.question_goal for t in with_goal)
    done = sum(min(t.completed_questions, t.question_goal) for t in with_goal)
    return _percent(done, goal)


def subject_breakdown(tasks) -> list[dict]:
    by_subject: dict[str, list[StudyTask]] = {}
    for task in tasks:
        by_subject.setdefault(task.subject, []).append(task)
    results = []
    for subject in sorted(by_subject):
        items = by_subject[subject]
        completed = sum(1 for t in items if t.completed)
        results.append({
            "subject": subject,
            "total": len(items),
            "completed": completed,
            "percent": _percent(completed, len(items)),
            "hours": round(sum(t.duration for t in items), 1),
        })
    return results


def increment_questions(task: StudyTask, by: int = 1) -> StudyTask:
    """Return a copy with by more questions done, capped at the goal."""
    if not task.question_goal:
        raise ValidationError(f"Task {task.id} has no question goal")
    if by < 0:
        raise ValidationError("Question progress cannot go backwards")
    done = min(task.question_goal, task.completed_questions + by)
    return replace(task, completed_questions=done)


def readiness_label(pct: float) -> str:
    if pct >= 80:
        return "ON TRACK"
    elif pct >= 50:
        return "BEHIND"
    return "AT RISK"


def readiness_color(pct: float) -> str:
    if pct >= 80:
        return "green"
    elif pct >= 50:
        return "yellow"
    return "red"
