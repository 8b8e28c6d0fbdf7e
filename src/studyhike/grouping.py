"""Bucket a week's tasks into the seven calendar columns."""
from studyhike.models import WEEKDAYS, StudyTask


def parse_time(value) -> tuple[int, int] | None:
    """Parse "H:MM", "HH:MM" or "HH:MM:SS" into (hour, minute)."""
    if not value:
        return None
    parts = str(value).strip().split(":")
    if len(parts) < 2:
        return None
    try:
        hour, minute = int(parts[0]), int(parts[1])
    except ValueError:
        return None
    if not (0 <= hour <= 24 and 0 <= minute < 60):
        return None
    return hour, minute


def _sort_key(task: StudyTask):
    parsed = parse_time(task.start_time)
    # untimed tasks go last; sorted() keeps insertion order among equal keys
    return (1, 0, 0) if parsed is None else (0, *parsed)


def group_by_day(tasks) -> dict[str, list[StudyTask]]:
    buckets = {day: [] for day in WEEKDAYS}
    for task in tasks:
        if task.day in buckets:
            buckets[task.day].append(task)
    return {day: sorted(items, key=_sort_key) for day, items in buckets.items()}


def unscheduled(tasks) -> list[StudyTask]:
    """Tasks whose day is not a weekday name and so have no grid column."""
    return [t for t in tasks if t.day not in WEEKDAYS]
