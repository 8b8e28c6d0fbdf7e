"""Persistence for study tasks, weak topics and test scores."""
import logging
import sqlite3
from contextlib import contextmanager
from datetime import date
from typing import Protocol

from studyhike.db import get_connection
from studyhike.errors import PersistenceError
from studyhike.models import StudyTask, TestScore, WeakTopic, WeekWindow
from studyhike.normalize import (
    fields_to_columns, normalize_task, normalize_test_score, normalize_weak_topic, task_to_row,
)
from studyhike.weeks import tasks_in_window, window_for

logger = logging.getLogger(__name__)

UPDATABLE_COLUMNS = {
    "subject", "topic", "day_of_week", "duration_hours", "is_completed",
    "start_time", "end_time", "week_start", "added_by", "authenticity",
    "mentor_notes", "resource_link", "question_goal", "completed_questions",
}


class TaskStore(Protocol):
    """What the study plan needs from storage. Failures raise PersistenceError."""

    def list_tasks(self, student_id: str, day: str | None = None,
                   window: WeekWindow | None = None,
                   current: WeekWindow | None = None) -> list[StudyTask]: ...

    def insert_task(self, task: StudyTask) -> int: ...

    def insert_tasks(self, tasks: list[StudyTask]) -> list[int]: ...

    def update_task(self, task_id: int, fields: dict) -> None: ...

    def delete_task(self, task_id: int) -> None: ...

    def list_weak_topics(self, student_id: str) -> list[WeakTopic]: ...

    def list_test_scores(self, student_id: str, limit: int = 5) -> list[TestScore]: ...

    def get_study_streak(self, student_id: str) -> int: ...

    def set_study_streak(self, student_id: str, value: int) -> None: ...


class SQLiteTaskStore:
    def __init__(self, db_path: str):
        self.db_path = db_path

    @contextmanager
    def _connect(self):
        try:
            conn = get_connection(self.db_path)
        except sqlite3.Error as e:
            logger.error("Cannot open %s: %s", self.db_path, e)
            raise PersistenceError(f"Cannot open database: {e}") from e
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            logger.error("Database error: %s", e)
            raise PersistenceError(str(e)) from e
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _insert(self, conn: sqlite3.Connection, task: StudyTask) -> int:
        conn.execute("INSERT OR IGNORE INTO students (id) VALUES (?)", (task.student_id,))
        row = task_to_row(task)
        columns = ", ".join(row)
        marks = ", ".join("?" for _ in row)
        cur = conn.execute(
            f"INSERT INTO study_plans ({columns}) VALUES ({marks})", tuple(row.values())
        )
        return cur.lastrowid

    def list_tasks(self, student_id, day=None, window=None, current=None):
        """Tasks for a student, optionally narrowed to one day or week.

        Tasks with no stored week only match the current week, which
        defaults to the one containing today.
        """
        query = "SELECT * FROM study_plans WHERE student_id = ?"
        params: list = [student_id]
        if day is not None:
            query += " AND day_of_week = ?"
            params.append(day)
        if window is not None:
            query += (" AND (week_start IS NULL OR week_start = ''"
                      " OR (week_start >= ? AND week_start <= ?))")
            params += [window.start.isoformat(), window.end.isoformat()]
        query += " ORDER BY id"
        with self._connect() as conn:
            rows = conn.execute(query, params).fetchall()
        tasks = [normalize_task(r) for r in rows]
        if window is None:
            return tasks
        return tasks_in_window(tasks, window, current or window_for(date.today()))

    def get_task(self, task_id: int) -> StudyTask | None:
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM study_plans WHERE id = ?", (task_id,)).fetchone()
        return normalize_task(row) if row else None

    def insert_task(self, task):
        with self._connect() as conn:
            return self._insert(conn, task)

    def insert_tasks(self, tasks):
        """Insert a batch in one transaction: every row is written or none is."""
        with self._connect() as conn:
            ids = [self._insert(conn, t) for t in tasks]
        logger.info("Inserted %d study tasks", len(ids))
        return ids

    def update_task(self, task_id, fields):
        columns = fields_to_columns(fields)
        unknown = set(columns) - UPDATABLE_COLUMNS
        if unknown:
            raise PersistenceError(f"Cannot update columns: {', '.join(sorted(unknown))}")
        if not columns:
            return
        assignments = ", ".join(f"{c} = ?" for c in columns)
        with self._connect() as conn:
            cur = conn.execute(
                f"UPDATE study_plans SET {assignments} WHERE id = ?",
                (*columns.values(), task_id),
            )
            if cur.rowcount == 0:
                raise PersistenceError(f"Study task {task_id} does not exist")

    def delete_task(self, task_id):
        with self._connect() as conn:
            cur = conn.execute("DELETE FROM study_plans WHERE id = ?", (task_id,))
            if cur.rowcount == 0:
                raise PersistenceError(f"Study task {task_id} does not exist")

    def list_weak_topics(self, student_id):
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT * FROM weak_topics WHERE student_id = ? ORDER BY priority DESC, id",
                (student_id,),
            ).fetchall()
        return [normalize_weak_topic(r) for r in rows]

    def list_test_scores(self, student_id, limit=5):
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT * FROM tests WHERE student_id = ? ORDER BY test_date DESC, id DESC LIMIT ?",
                (student_id, limit),
            ).fetchall()
        return [normalize_test_score(r) for r in rows]

    def get_study_streak(self, student_id):
        with self._connect() as conn:
            row = conn.execute(
                "SELECT study_streak FROM students WHERE id = ?", (student_id,)
            ).fetchone()
        return (row["study_streak"] or 0) if row else 0

    def set_study_streak(self, student_id, value):
        with self._connect() as conn:
            conn.execute(
                "INSERT INTO students (id, study_streak) VALUES (?, ?) "
                "ON CONFLICT(id) DO UPDATE SET study_streak = ?",
                (student_id, value, value),
            )
