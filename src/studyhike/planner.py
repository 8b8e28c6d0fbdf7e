"""Weekly study plan for one student, backed by a TaskStore.

Every change is applied to the in-memory task list first so the caller can
redraw straight away, then written to the store. If the write fails the
list is restored to what it was before the change and the PersistenceError
is re-raised; nothing is retried.
"""
import logging
from dataclasses import fields as dataclass_fields, replace
from datetime import date

from studyhike import progress as prog
from studyhike.autoplan import generate_plan, rank_weak_topics
from studyhike.errors import PersistenceError, TaskNotFound, ValidationError
from studyhike.grouping import group_by_day, parse_time
from studyhike.models import WEEKDAYS, StudyTask
from studyhike.weeks import tasks_in_window, weekday_name, window_for

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = {f.name for f in dataclass_fields(StudyTask)} - {"id", "student_id"}


def validate_task(task: StudyTask) -> None:
    """Raise ValidationError if task cannot be saved."""
    if not task.topic or not task.topic.strip():
        raise ValidationError("Topic is required")
    if not task.subject:
        raise ValidationError("Subject is required")
    if task.day not in WEEKDAYS:
        raise ValidationError(f"Unknown day: {task.day}")
    try:
        duration = float(task.duration)
    except (TypeError, ValueError):
        raise ValidationError("Duration must be a number") from None
    if duration <= 0:
        raise ValidationError("Duration must be a positive number of hours")
    if task.start_time or task.end_time:
        start, end = parse_time(task.start_time), parse_time(task.end_time)
        if start is None or end is None:
            raise ValidationError("Start and end time must both be given as HH:MM")
        if start >= end:
            raise ValidationError("End time must be after start time")
    if task.question_goal is not None:
        if task.question_goal < 0:
            raise ValidationError("Question goal cannot be negative")
        if task.completed_questions > task.question_goal:
            raise ValidationError("Completed questions cannot exceed the question goal")


class StudyPlan:
    def __init__(self, store, student_id: str, today: date | None = None):
        self.store = store
        self.student_id = student_id
        self.today = today or date.today()
        self.tasks: list[StudyTask] = []
        self.weak_topics = []
        self.test_scores = []
        self.streak = 0
        self._streak_counted_on = None

    def load(self) -> None:
        self.tasks = self.store.list_tasks(self.student_id)
        self.weak_topics = self.store.list_weak_topics(self.student_id)
        self.test_scores = self.store.list_test_scores(self.student_id)
        self.streak = self.store.get_study_streak(self.student_id)

    # -- windows ---------------------------------------------------------

    def window(self, offset: int = 0):
        return window_for(self.today, offset)

    @property
    def this_week(self):
        return self.window(0)

    @property
    def next_week(self):
        return self.window(1)

    def week_tasks(self, offset: int = 0) -> list[StudyTask]:
        return tasks_in_window(self.tasks, self.window(offset), self.this_week)

    def week_grid(self, offset: int = 0) -> dict[str, list[StudyTask]]:
        return group_by_day(self.week_tasks(offset))

    def week_progress(self, offset: int = 0) -> int:
        return prog.progress(self.week_tasks(offset))

    def day_progress(self, day: str, offset: int = 0) -> int:
        return prog.day_progress(self.week_tasks(offset), day)

    def subject_progress(self, subject: str, offset: int = 0) -> int:
        return prog.subject_progress(self.week_tasks(offset), subject)

    def question_progress(self, offset: int = 0) -> int:
        return prog.question_progress(self.week_tasks(offset))

    def todays_tasks(self) -> list[StudyTask]:
        today = weekday_name(self.today)
        return [t for t in self.week_tasks(0) if t.day == today]

    def get(self, task_id) -> StudyTask:
        return self.tasks[self._index(task_id)]

    # -- mutations -------------------------------------------------------

    def _index(self, task_id) -> int:
        for i, task in enumerate(self.tasks):
            if task.id == task_id:
                return i
        raise TaskNotFound(task_id)

    def _apply(self, mutate, persist):
        """Run mutate on the local list, then persist; undo mutate if persist fails."""
        snapshot = list(self.tasks)
        mutate()
        try:
            return persist()
        except PersistenceError:
            self.tasks = snapshot
            logger.warning("Rolled back local change for student %s", self.student_id)
            raise

    def _replace(self, task_id, updated: StudyTask, changes: dict) -> StudyTask:
        i = self._index(task_id)

        def mutate():
            self.tasks[i] = updated

        self._apply(mutate, lambda: self.store.update_task(task_id, changes))
        return updated

    def toggle_complete(self, task_id) -> StudyTask:
        task = self.get(task_id)
        updated = self._replace(task_id, replace(task, completed=not task.completed),
                                {"completed": not task.completed})
        if updated.completed:
            self._count_streak(updated)
        return updated

    def _count_streak(self, task: StudyTask) -> None:
        """Bump the streak once per day, when the last of today's tasks is done."""
        todays = self.todays_tasks()
        if task not in todays or not all(t.completed for t in todays):
            return
        if self._streak_counted_on == self.today:
            return
        try:
            self.store.set_study_streak(self.student_id, self.streak + 1)
        except PersistenceError as e:
            logger.error("Could not update study streak for %s: %s", self.student_id, e)
            return
        self.streak += 1
        self._streak_counted_on = self.today
        logger.info("Study streak for %s is now %d", self.student_id, self.streak)

    def add_task(
        self,
        subject: str,
        topic: str,
        day: str,
        duration: float,
        start_time: str | None = None,
        end_time: str | None = None,
        week_start: str | None = None,
        question_goal: int = 0,
        authenticity: str = "self-decided",
        resource_link: str | None = None,
        added_by: str = "student",
        mentor_notes: str | None = None,
    ) -> StudyTask:
        if question_goal and question_goal < 0:
            raise ValidationError("Question goal cannot be negative")
        task = StudyTask(
            id=None,
            student_id=self.student_id,
            subject=subject,
            topic=topic.strip() if topic else topic,
            day=day,
            duration=duration,
            start_time=start_time,
            end_time=end_time,
            week_start=week_start or self.this_week.start.isoformat(),
            added_by=added_by,
            authenticity=authenticity,
            mentor_notes=mentor_notes or None,
            resource_link=resource_link or None,
            question_goal=question_goal if question_goal and question_goal > 0 else None,
        )
        validate_task(task)
        task = replace(task, duration=float(task.duration))
        # the id comes from the store, so this one is not optimistic
        task.id = self.store.insert_task(task)
        self.tasks.append(task)
        return task

    def edit_task(self, task_id, as_mentor: bool = False, **changes) -> StudyTask:
        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            raise ValidationError(f"Cannot edit: {', '.join(sorted(unknown))}")
        if "question_goal" in changes and not changes["question_goal"]:
            changes["question_goal"] = None
        current = self.get(task_id)
        done = changes.get("completed_questions", current.completed_questions)
        if not isinstance(done, int) or done < current.completed_questions:
            raise ValidationError("Completed questions can only go up")
        if as_mentor:
            changes["added_by"] = "mentor"
        updated = replace(current, **changes)
        validate_task(updated)
        return self._replace(task_id, updated, changes)

    def delete_task(self, task_id) -> None:
        i = self._index(task_id)

        def mutate():
            del self.tasks[i]

        self._apply(mutate, lambda: self.store.delete_task(task_id))

    def record_question(self, task_id, by: int = 1) -> StudyTask:
        updated = prog.increment_questions(self.get(task_id), by)
        return self._replace(task_id, updated, {"completed_questions": updated.completed_questions})

    def set_question_goal(self, task_id, goal: int) -> StudyTask:
        if goal < 0:
            raise ValidationError("Question goal cannot be negative")
        task = self.get(task_id)
        done = min(task.completed_questions, goal) if goal else task.completed_questions
        updated = replace(task, question_goal=goal or None, completed_questions=done)
        return self._replace(task_id, updated, {
            "question_goal": updated.question_goal,
            "completed_questions": done,
        })

    def auto_generate(self, offset: int = 0, author: str = "system") -> list[StudyTask]:
        """Build and insert a plan from the student's weak topics.

        The batch is written in one transaction, so on PersistenceError
        nothing was inserted and the local list is untouched.
        """
        self.weak_topics = self.store.list_weak_topics(self.student_id)
        plan = generate_plan(
            rank_weak_topics(self.weak_topics), self.window(offset).start, self.student_id, author
        )
        ids = self.store.insert_tasks(plan)
        created = [replace(t, id=task_id) for t, task_id in zip(plan, ids)]
        try:
            self.tasks = self.store.list_tasks(self.student_id)
        except PersistenceError as e:
            logger.warning("Refresh after auto-generate failed, keeping local copy: %s", e)
            self.tasks.extend(created)
        logger.info("Auto-generated %d tasks for %s (week of %s)",
                    len(created), self.student_id, self.window(offset).start)
        return created
