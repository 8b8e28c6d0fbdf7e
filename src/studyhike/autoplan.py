"""Turn a student's weak topics into a week of study tasks."""
from datetime import date

from studyhike.errors import ValidationError
from studyhike.models import CRITICAL, WEEKDAYS, StudyTask, WeakTopic

MAX_TOPICS = 7
FIRST_HOUR = 14
SLOT_HOURS = 2

CRITICAL_NOTE = "Focus on this critical weakness area"
IMPROVEMENT_NOTE = "This topic needs improvement"

# author -> (added_by, authenticity)
_PROVENANCE = {
    "system": ("system", "auto-generated"),
    "mentor": ("mentor", "mentor-assigned"),
}


def rank_weak_topics(topics) -> list[WeakTopic]:
    """Highest priority first; ties keep their input order."""
    return sorted(topics, key=lambda t: t.priority, reverse=True)


def mentor_note(topic: WeakTopic) -> str:
    return CRITICAL_NOTE if topic.status == CRITICAL else IMPROVEMENT_NOTE


def generate_plan(
    weak_topics,
    week_start: date | str,
    student_id: str,
    author: str = "system",
) -> list[StudyTask]:
    """Spread up to seven weak topics over the week, one per day.

    Topics must already be ordered highest priority first. Task i lands on
    WEEKDAYS[i % 7] in a two-hour slot starting at 14:00 + (i % 8) hours.
    """
    topics = list(weak_topics)[:MAX_TOPICS]
    if not topics:
        raise ValidationError("No weak topics found. Take some tests first to identify weak areas.")
    if author not in _PROVENANCE:
        raise ValidationError(f"Unknown plan author: {author}")
    added_by, authenticity = _PROVENANCE[author]
    week = week_start.isoformat() if isinstance(week_start, date) else str(week_start)

    tasks = []
    for i, topic in enumerate(topics):
        start_hour = FIRST_HOUR + (i % 8)
        tasks.append(StudyTask(
            id=None,
            student_id=student_id,
            subject=topic.subject,
            topic=topic.topic,
            day=WEEKDAYS[i % 7],
            duration=2.0 if topic.status == CRITICAL else 1.5,
            completed=False,
            start_time=f"{start_hour:02d}:00",
            end_time=f"{start_hour + SLOT_HOURS:02d}:00",
            week_start=week,
            added_by=added_by,
            authenticity=authenticity,
            mentor_notes=mentor_note(topic),
        ))
    return tasks
