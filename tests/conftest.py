from dataclasses import replace
from datetime import date

import pytest

from studyhike.errors import PersistenceError
from studyhike.models import WeakTopic


class FakeStore:
    """In-memory TaskStore. Put a method name in .fail to make it raise."""

    def __init__(self):
        self.tasks = {}
        self.weak_topics = []
        self.test_scores = []
        self.streaks = {}
        self.fail = set()
        self.calls = []
        self._next_id = 1

    def _check(self, name):
        self.calls.append(name)
        if name in self.fail:
            raise PersistenceError(f"{name} failed")

    def list_tasks(self, student_id, day=None, window=None, current=None):
        self._check("list_tasks")
        return [replace(t) for t in self.tasks.values()
                if t.student_id == student_id and (day is None or t.day == day)]

    def insert_task(self, task):
        self._check("insert_task")
        task_id = self._next_id
        self._next_id += 1
        self.tasks[task_id] = replace(task, id=task_id)
        return task_id

    def insert_tasks(self, tasks):
        self._check("insert_tasks")
        ids = []
        for task in tasks:
            ids.append(self._next_id)
            self.tasks[self._next_id] = replace(task, id=self._next_id)
            self._next_id += 1
        return ids

    def update_task(self, task_id, fields):
        self._check("update_task")
        if task_id not in self.tasks:
            raise PersistenceError(f"Study task {task_id} does not exist")
        self.tasks[task_id] = replace(self.tasks[task_id], **fields)

    def delete_task(self, task_id):
        self._check("delete_task")
        if task_id not in self.tasks:
            raise PersistenceError(f"Study task {task_id} does not exist")
        del self.tasks[task_id]

    def list_weak_topics(self, student_id):
        self._check("list_weak_topics")
        return [t for t in self.weak_topics if t.student_id == student_id]

    def list_test_scores(self, student_id, limit=5):
        self._check("list_test_scores")
        return self.test_scores[:limit]

    def get_study_streak(self, student_id):
        self._check("get_study_streak")
        return self.streaks.get(student_id, 0)

    def set_study_streak(self, student_id, value):
        self._check("set_study_streak")
        self.streaks[student_id] = value


@pytest.fixture
def tmp_db(tmp_path):
    """Provide a temporary SQLite database path for tests."""
    db_path = str(tmp_path / "test_studyhike.db")
    return db_path


@pytest.fixture
def fake_store():
    return FakeStore()


@pytest.fixture
def weak_topics():
    return [
        WeakTopic(1, "s1", "Physics", "Rotational Mechanics", "critical_weakness", 10),
        WeakTopic(2, "s1", "Chemistry", "Chemical Equilibrium", "needs_improvement", 7),
        WeakTopic(3, "s1", "Mathematics", "Probability", "needs_improvement", 4),
    ]


@pytest.fixture
def today():
    """A Wednesday; its week runs Monday 2024-01-01 to Sunday 2024-01-07."""
    return date(2024, 1, 3)
