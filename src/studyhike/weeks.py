"""Monday-based week windows and task membership."""
from datetime import date, timedelta

from studyhike.models import WEEKDAYS, StudyTask, WeekWindow


def week_start(d: date) -> date:
    """Return the Monday on or before d."""
    return d - timedelta(days=d.weekday())


def window_for(reference: date, offset_weeks: int = 0) -> WeekWindow:
    start = week_start(reference + timedelta(days=7 * offset_weeks))
    return WeekWindow(start=start, end=start + timedelta(days=6))


def weekday_name(d: date) -> str:
    return WEEKDAYS[d.weekday()]


def parse_date(value) -> date | None:
    if isinstance(value, date):
        return value
    if not value:
        return None
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        return None


def in_window(task: StudyTask, window: WeekWindow, current: WeekWindow) -> bool:
    """Whether task belongs to window.

    A task without a stored week floats: it is shown in the current week
    only, never in past or future weeks.
    """
    stored = parse_date(task.week_start)
    if stored is None:
        return window == current
    return window.contains(stored)


def tasks_in_window(tasks, window: WeekWindow, current: WeekWindow) -> list[StudyTask]:
    return [t for t in tasks if in_window(t, window, current)]
