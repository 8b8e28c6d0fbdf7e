from unittest.mock import patch

import pytest

from studyhike import app
from studyhike.app import (
    cmd_add, cmd_auto, cmd_dashboard, cmd_done, cmd_week, cmd_weak, describe_task, progress_bar,
    render_week,
)
from studyhike.models import StudyTask
from studyhike.planner import StudyPlan


@pytest.fixture
def plan(fake_store, today, weak_topics):
    fake_store.weak_topics = weak_topics
    plan = StudyPlan(fake_store, "s1", today=today)
    plan.load()
    return plan


def _output(func, *args):
    with app.console.capture() as capture:
        func(*args)
    return capture.get()


def test_progress_bar_width():
    bar = progress_bar(50, width=10)
    assert bar.count("█") == 5
    assert bar.count("░") == 5


def test_describe_task_shows_badges_and_questions():
    task = StudyTask(3, "s1", "Physics", "Optics", "Monday", 2, start_time="14:00:00",
                     end_time="16:00:00", added_by="system", question_goal=10,
                     completed_questions=4, mentor_notes="Focus on this critical weakness area")
    text = describe_task(task)
    assert "#3" in text
    assert "14:00-16:00" in text
    assert "auto" in text
    assert "Q 4/10" in text
    assert "Focus on this critical weakness area" in text


def test_render_week_has_seven_columns(plan):
    table = render_week(plan, 0)
    assert len(table.columns) == 7
    assert "Jan 1 - Jan 7" in table.title


def test_cmd_week_prints_tasks(plan):
    plan.add_task("Physics", "Optics", "Monday", 1, "09:00", "10:00")
    out = _output(cmd_week, plan, 0)
    assert "Optics" in out
    assert "Completed: 0%" in out


def test_cmd_week_lists_tasks_without_a_valid_day(plan):
    plan.tasks.append(StudyTask(9, "s1", "Chemistry", "Buffers", "Funday", 1,
                                week_start="2024-01-01"))
    out = _output(cmd_week, plan, 0)
    assert "Unscheduled" in out
    assert "Buffers" in out
    assert "#9" in out
    assert "Completed: 0%" in out


def test_cmd_add_uses_prompts(plan):
    answers = iter(["Chemistry", "Mole Concept", "Tuesday", "08:00", "09:30", "next", ""])
    with patch("studyhike.app.Prompt.ask", side_effect=lambda *a, **k: next(answers)), \
            patch("studyhike.app.FloatPrompt.ask", return_value=1.5), \
            patch("studyhike.app.IntPrompt.ask", return_value=15):
        _output(cmd_add, plan)
    task = plan.tasks[-1]
    assert task.subject == "Chemistry"
    assert task.topic == "Mole Concept"
    assert task.week_start == "2024-01-08"
    assert task.question_goal == 15
    assert task.resource_link is None


def test_cmd_done_toggles(plan):
    task = plan.add_task("Physics", "Optics", "Monday", 1, "09:00", "10:00")
    with patch("studyhike.app.IntPrompt.ask", return_value=task.id):
        out = _output(cmd_done, plan)
    assert plan.get(task.id).completed
    assert "marked complete" in out


def test_cmd_auto_creates_tasks(plan):
    with patch("studyhike.app.Prompt.ask", return_value="this"):
        out = _output(cmd_auto, plan)
    assert "Created 3 study tasks" in out
    assert len(plan.week_tasks(0)) == 3


def test_cmd_weak_lists_topics(plan):
    out = _output(cmd_weak, plan)
    assert "Rotational Mechanics" in out
    assert "Critical Weakness" in out


def test_cmd_weak_without_topics(fake_store, today):
    plan = StudyPlan(fake_store, "s1", today=today)
    out = _output(cmd_weak, plan)
    assert "No weak topics yet" in out


def test_cmd_dashboard(plan):
    task = plan.add_task("Physics", "Optics", "Wednesday", 1, "09:00", "10:00")
    plan.toggle_complete(task.id)
    out = _output(cmd_dashboard, plan)
    assert "100%" in out
    assert "Physics" in out
