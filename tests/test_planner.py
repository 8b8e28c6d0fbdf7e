import pytest

from studyhike.errors import PersistenceError, TaskNotFound, ValidationError
from studyhike.planner import StudyPlan, validate_task
from studyhike.models import StudyTask


@pytest.fixture
def plan(fake_store, today):
    plan = StudyPlan(fake_store, "s1", today=today)
    plan.load()
    return plan


def _add(plan, topic="Optics", day="Monday", **kw):
    kw.setdefault("start_time", "09:00")
    kw.setdefault("end_time", "10:00")
    return plan.add_task(subject="Physics", topic=topic, day=day, duration=1.5, **kw)


def test_load_reads_everything(fake_store, weak_topics, today):
    fake_store.weak_topics = weak_topics
    fake_store.streaks["s1"] = 4
    plan = StudyPlan(fake_store, "s1", today=today)
    plan.load()
    assert plan.weak_topics == weak_topics
    assert plan.streak == 4
    assert plan.tasks == []


def test_add_task_defaults_to_this_week(plan, fake_store):
    task = _add(plan, question_goal=10)
    assert task.id is not None
    assert task.week_start == "2024-01-01"
    assert task.question_goal == 10
    assert task.added_by == "student"
    assert plan.tasks == [task]
    assert fake_store.tasks[task.id].topic == "Optics"


def test_add_task_validation_has_no_side_effects(plan, fake_store):
    with pytest.raises(ValidationError):
        _add(plan, start_time="10:00", end_time="09:00")
    with pytest.raises(ValidationError):
        plan.add_task("Physics", "Optics", "Monday", 0)
    with pytest.raises(ValidationError):
        plan.add_task("Physics", "  ", "Monday", 1)
    with pytest.raises(ValidationError):
        plan.add_task("Physics", "Optics", "Someday", 1)
    with pytest.raises(ValidationError):
        _add(plan, question_goal=-1)
    assert plan.tasks == []
    assert "insert_task" not in fake_store.calls


def test_add_task_store_failure_leaves_list_unchanged(plan, fake_store):
    fake_store.fail.add("insert_task")
    with pytest.raises(PersistenceError):
        _add(plan)
    assert plan.tasks == []


def test_week_views(plan):
    _add(plan, "this week", day="Tuesday")
    _add(plan, "next week", day="Monday", week_start="2024-01-08")
    floating = _add(plan, "floating", day="Monday")
    plan.tasks[-1] = StudyTask(floating.id, "s1", "Physics", "floating", "Monday", 1)
    assert [t.topic for t in plan.week_tasks(0)] == ["this week", "floating"]
    assert [t.topic for t in plan.week_tasks(1)] == ["next week"]
    grid = plan.week_grid(0)
    assert [t.topic for t in grid["Tuesday"]] == ["this week"]
    assert [t.topic for t in grid["Monday"]] == ["floating"]
    assert plan.next_week.start.isoformat() == "2024-01-08"


def test_toggle_complete_and_progress(plan, fake_store):
    a = _add(plan, "a", day="Monday")
    _add(plan, "b", day="Monday")
    plan.toggle_complete(a.id)
    assert plan.get(a.id).completed is True
    assert fake_store.tasks[a.id].completed is True
    assert plan.week_progress() == 50
    assert plan.day_progress("Monday") == 50
    assert plan.subject_progress("Physics") == 50
    plan.toggle_complete(a.id)
    assert plan.get(a.id).completed is False


def test_toggle_complete_rolls_back_on_failure(plan, fake_store):
    a = _add(plan)
    fake_store.fail.add("update_task")
    with pytest.raises(PersistenceError):
        plan.toggle_complete(a.id)
    assert plan.get(a.id).completed is False


def test_unknown_task(plan):
    with pytest.raises(TaskNotFound):
        plan.toggle_complete(42)
    with pytest.raises(TaskNotFound):
        plan.delete_task(42)


def test_delete_task(plan, fake_store):
    a = _add(plan)
    plan.delete_task(a.id)
    assert plan.tasks == []
    assert a.id not in fake_store.tasks


def test_delete_task_rolls_back_on_failure(plan, fake_store):
    a = _add(plan, "a")
    b = _add(plan, "b")
    fake_store.fail.add("delete_task")
    with pytest.raises(PersistenceError):
        plan.delete_task(a.id)
    assert [t.id for t in plan.tasks] == [a.id, b.id]


def test_record_question_saturates(plan, fake_store):
    a = _add(plan, question_goal=2)
    plan.record_question(a.id)
    plan.record_question(a.id)
    task = plan.record_question(a.id)
    assert task.completed_questions == 2
    assert fake_store.tasks[a.id].completed_questions == 2
    assert plan.question_progress() == 100


def test_record_question_rollback(plan, fake_store):
    a = _add(plan, question_goal=5)
    fake_store.fail.add("update_task")
    with pytest.raises(PersistenceError):
        plan.record_question(a.id)
    assert plan.get(a.id).completed_questions == 0


def test_record_question_needs_goal(plan):
    a = _add(plan)
    with pytest.raises(ValidationError):
        plan.record_question(a.id)


def test_set_question_goal_clamps_progress(plan):
    a = _add(plan, question_goal=10)
    plan.record_question(a.id, by=8)
    task = plan.set_question_goal(a.id, 5)
    assert task.question_goal == 5
    assert task.completed_questions == 5
    task = plan.set_question_goal(a.id, 0)
    assert task.question_goal is None
    with pytest.raises(ValidationError):
        plan.set_question_goal(a.id, -3)


def test_edit_task_as_mentor(plan, fake_store):
    a = _add(plan)
    task = plan.edit_task(a.id, as_mentor=True, topic="Wave Optics", mentor_notes="Do HC Verma ch. 17")
    assert task.added_by == "mentor"
    assert task.topic == "Wave Optics"
    assert fake_store.tasks[a.id].mentor_notes == "Do HC Verma ch. 17"


def test_edit_task_validates_merged_task(plan):
    a = _add(plan)
    with pytest.raises(ValidationError):
        plan.edit_task(a.id, end_time="08:00")
    with pytest.raises(ValidationError):
        plan.edit_task(a.id, id=99)
    assert plan.get(a.id).end_time == "10:00"


def test_edit_task_cannot_lower_completed_questions(plan, fake_store):
    a = _add(plan, question_goal=10)
    plan.record_question(a.id, by=4)
    with pytest.raises(ValidationError):
        plan.edit_task(a.id, completed_questions=1)
    assert plan.get(a.id).completed_questions == 4
    assert fake_store.tasks[a.id].completed_questions == 4
    assert plan.edit_task(a.id, completed_questions=6).completed_questions == 6


def test_auto_generate(plan, fake_store, weak_topics):
    fake_store.weak_topics = list(reversed(weak_topics))
    created = plan.auto_generate(offset=1)
    assert [t.topic for t in created] == ["Rotational Mechanics", "Chemical Equilibrium", "Probability"]
    assert all(t.id is not None for t in created)
    assert all(t.week_start == "2024-01-08" for t in created)
    assert len(plan.week_tasks(1)) == 3
    assert plan.week_tasks(0) == []


def test_auto_generate_without_weak_topics(plan, fake_store):
    with pytest.raises(ValidationError):
        plan.auto_generate()
    assert "insert_tasks" not in fake_store.calls


def test_auto_generate_batch_failure_inserts_nothing(plan, fake_store, weak_topics):
    fake_store.weak_topics = weak_topics
    fake_store.fail.add("insert_tasks")
    with pytest.raises(PersistenceError):
        plan.auto_generate()
    assert plan.tasks == []
    assert fake_store.tasks == {}


def test_auto_generate_keeps_local_copy_when_refresh_fails(plan, fake_store, weak_topics):
    fake_store.weak_topics = weak_topics
    fake_store.fail.add("list_tasks")
    created = plan.auto_generate()
    assert plan.tasks == created


def test_streak_counts_when_todays_tasks_done(plan, fake_store):
    # today is Wednesday
    a = _add(plan, "a", day="Wednesday")
    b = _add(plan, "b", day="Wednesday")
    plan.toggle_complete(a.id)
    assert plan.streak == 0
    plan.toggle_complete(b.id)
    assert plan.streak == 1
    assert fake_store.streaks["s1"] == 1
    # same day: no double count
    plan.toggle_complete(b.id)
    plan.toggle_complete(b.id)
    assert plan.streak == 1


def test_streak_ignores_other_days(plan):
    a = _add(plan, "a", day="Friday")
    plan.toggle_complete(a.id)
    assert plan.streak == 0


def test_streak_failure_does_not_undo_completion(plan, fake_store):
    a = _add(plan, "a", day="Wednesday")
    fake_store.fail.add("set_study_streak")
    task = plan.toggle_complete(a.id)
    assert task.completed is True
    assert plan.streak == 0


def test_todays_tasks(plan):
    _add(plan, "a", day="Wednesday")
    _add(plan, "b", day="Thursday")
    assert [t.topic for t in plan.todays_tasks()] == ["a"]


def test_validate_task_question_invariant():
    task = StudyTask(1, "s1", "Physics", "Optics", "Monday", 1, question_goal=3, completed_questions=4)
    with pytest.raises(ValidationError):
        validate_task(task)
