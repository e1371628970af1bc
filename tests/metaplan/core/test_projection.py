"""
Tests for read-only views (metaplan/core/projection.py).
"""

from __future__ import annotations

import pytest

from metaplan.core.ordering import toggle_task
from metaplan.core.projection import daily_tasks, daily_view, goals_for, values_by_category
from metaplan.models.entities import (
    AppData,
    CoreCategory,
    CoreValue,
    Goal,
    GoalType,
    Priority,
    Task,
)


def _task(task_id, date, importance=Priority.A, sequence=1, completed=False):
    return Task(
        id=task_id,
        text=task_id,
        importance=importance,
        sequence=sequence,
        date=date,
        completed=completed,
    )


def test_incomplete_past_task_is_carried_over():
    data = AppData(tasks=(_task("old", "2024-01-01"),))
    items = daily_view(data, "2024-01-05")
    assert [(i.task.id, i.carried_over) for i in items] == [("old", True)]
    # The stored date is never rewritten
    assert items[0].task.date == "2024-01-01"


def test_completing_carried_task_removes_it():
    data = AppData(tasks=(_task("old", "2024-01-01"),))
    data = toggle_task(data, "old")
    assert daily_view(data, "2024-01-05") == ()


def test_completed_task_on_selected_day_still_shown():
    data = AppData(tasks=(_task("done", "2024-01-05", completed=True),))
    items = daily_view(data, "2024-01-05")
    assert len(items) == 1
    assert items[0].carried_over is False


def test_future_tasks_hidden():
    data = AppData(tasks=(_task("later", "2024-01-06"),))
    assert daily_view(data, "2024-01-05") == ()


def test_ordering_is_priority_then_date_then_sequence():
    tasks = (
        _task("b-today", "2024-01-05", Priority.B, 1),
        _task("a-today-2", "2024-01-05", Priority.A, 2),
        _task("a-today-1", "2024-01-05", Priority.A, 1),
        _task("a-old", "2024-01-02", Priority.A, 1),
        _task("c-old", "2024-01-01", Priority.C, 1),
    )
    items = daily_tasks(tasks, "2024-01-05")
    assert [i.task.id for i in items] == ["a-old", "a-today-1", "a-today-2", "b-today", "c-old"]


def test_daily_tasks_is_memoized_per_snapshot():
    tasks = (_task("x", "2024-01-05"),)
    assert daily_tasks(tasks, "2024-01-05") is daily_tasks(tasks, "2024-01-05")


def test_goals_for_filters_type_and_identifier():
    goals = (
        Goal(id="w1", text="a", type=GoalType.WEEKLY, identifier="2024-01-01"),
        Goal(id="w2", text="b", type=GoalType.WEEKLY, identifier="2024-01-08"),
        Goal(id="m1", text="c", type=GoalType.MONTHLY, identifier="2024.01"),
    )
    assert [g.id for g in goals_for(goals, GoalType.WEEKLY, "2024-01-01")] == ["w1"]
    assert [g.id for g in goals_for(goals, GoalType.MONTHLY, "2024.01")] == ["m1"]
    assert goals_for(goals, GoalType.YEARLY, "2024") == ()


def test_values_by_category_has_every_category():
    values = (
        CoreValue(id="v1", text="Health", category=CoreCategory.PHYSICAL),
        CoreValue(id="v2", text="Prayer", category=CoreCategory.SPIRITUAL),
    )
    grouped = values_by_category(values)
    assert set(grouped) == set(CoreCategory)
    assert [v.id for v in grouped[CoreCategory.PHYSICAL]] == ["v1"]
    assert grouped[CoreCategory.SOCIAL] == ()


def test_completing_carried_task_leaves_day_buckets_alone():
    data = AppData(
        tasks=(
            _task("t1", "2024-01-05", sequence=1),
            _task("t2", "2024-01-05", sequence=2),
            _task("old", "2024-01-01"),
        )
    )
    before = {t.id: t.sequence for t in data.tasks if t.date == "2024-01-05"}

    data = toggle_task(data, "old")

    assert {t.id: t.sequence for t in data.tasks if t.date == "2024-01-05"} == before
    assert [i.task.id for i in daily_view(data, "2024-01-05")] == ["t1", "t2"]


def test_values_by_category_result_is_read_only():
    values = (CoreValue(id="v1", text="Health", category=CoreCategory.PHYSICAL),)
    grouped = values_by_category(values)
    with pytest.raises(TypeError):
        grouped[CoreCategory.SOCIAL] = values  # type: ignore[index]
    assert values_by_category(values)[CoreCategory.SOCIAL] == ()
