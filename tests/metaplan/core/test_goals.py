"""
Tests for goals, core values and promotion (metaplan/core/goals.py).
"""

from __future__ import annotations

import pytest

from metaplan.core import goals as ops
from metaplan.core.goals import BreakdownItem, coerce_priority
from metaplan.core.ordering import is_dense
from metaplan.lib.exceptions import ValidationError
from metaplan.models.entities import EMPTY_APP_DATA, CoreCategory, GoalType, Priority

DAY = "2024-01-05"


# =============================================================================
# Goals
# =============================================================================


def test_add_goal_starts_at_zero(sample_data):
    data = ops.add_goal(sample_data, GoalType.MONTHLY, "Read 2 books", "2024.02", goal_id="m2")
    goal = ops.find_goal(data, "m2")
    assert goal.progress == 0
    assert goal.completed is False
    assert goal.identifier == "2024.02"


def test_add_goal_blank_text_is_noop(sample_data):
    assert ops.add_goal(sample_data, GoalType.YEARLY, "  ", "2024") is sample_data


@pytest.mark.parametrize(
    ("goal_type", "identifier"),
    [
        (GoalType.WEEKLY, "2024-01-03"),  # a Wednesday
        (GoalType.MONTHLY, "2024-01"),
        (GoalType.MONTHLY, "2024.13"),
        (GoalType.YEARLY, "24"),
    ],
)
def test_add_goal_rejects_wrong_identifier(goal_type, identifier):
    with pytest.raises(ValidationError):
        ops.add_goal(EMPTY_APP_DATA, goal_type, "text", identifier)


@pytest.mark.parametrize(("value", "expected"), [(-10, 0), (55, 55), (250, 100)])
def test_set_goal_progress_clamps(sample_data, value, expected):
    data = ops.set_goal_progress(sample_data, "m1", value)
    assert ops.find_goal(data, "m1").progress == expected


def test_goal_at_100_is_completed(sample_data):
    data = ops.set_goal_progress(sample_data, "m1", 100)
    assert ops.find_goal(data, "m1").completed is True
    data = ops.set_goal_progress(data, "m1", 90)
    assert ops.find_goal(data, "m1").completed is False


def test_adjust_goal_progress(sample_data):
    data = ops.adjust_goal_progress(sample_data, "m1", 30)
    data = ops.adjust_goal_progress(data, "m1", 90)
    goal = ops.find_goal(data, "m1")
    assert goal.progress == 100
    assert goal.completed is True


def test_set_goal_completed_keeps_progress(sample_data):
    data = ops.set_goal_progress(sample_data, "w1", 40)
    data = ops.set_goal_completed(data, "w1", True)
    goal = ops.find_goal(data, "w1")
    assert goal.completed is True
    assert goal.progress == 40


def test_edit_goal_text_and_memo(sample_data):
    data = ops.edit_goal_text(sample_data, "y1", "Run two marathons")
    data = ops.set_goal_memo(data, "y1", "spring and autumn")
    goal = ops.find_goal(data, "y1")
    assert goal.text == "Run two marathons"
    assert goal.memo == "spring and autumn"
    assert ops.edit_goal_text(data, "y1", "") is data


def test_delete_goal(sample_data):
    data = ops.delete_goal(sample_data, "w1")
    assert ops.find_goal(data, "w1") is None
    assert len(data.goals) == 2


# =============================================================================
# Core values
# =============================================================================


def test_add_core_value(sample_data):
    data = ops.add_core_value(sample_data, "Friendship", "social", value_id="v2")
    value = ops.find_core_value(data, "v2")
    assert value.category == CoreCategory.SOCIAL
    assert value.progress == 0
    assert ops.add_core_value(sample_data, "", CoreCategory.SOCIAL) is sample_data


def test_value_progress_clamps(sample_data):
    data = ops.adjust_value_progress(sample_data, "v1", 80)
    assert ops.find_core_value(data, "v1").progress == 100
    data = ops.set_value_progress(data, "v1", -5)
    assert ops.find_core_value(data, "v1").progress == 0


def test_edit_and_delete_core_value(sample_data):
    data = ops.edit_core_value_text(sample_data, "v1", "Strength")
    assert ops.find_core_value(data, "v1").text == "Strength"
    data = ops.delete_core_value(data, "v1")
    assert data.core_values == ()


# =============================================================================
# Promotion & copy-to-today
# =============================================================================


def test_promote_yearly_creates_prefixed_monthly(sample_data):
    data = ops.promote_goal(sample_data, "y1", month_id="2024.03", week_id="2024-01-01")
    new = data.goals[-1]
    assert new.type == GoalType.MONTHLY
    assert new.identifier == "2024.03"
    assert new.text == "[Yearly] Run a marathon"
    assert new.progress == 0


def test_promote_monthly_creates_prefixed_weekly(sample_data):
    data = ops.promote_goal(sample_data, "m1", month_id="2024.01", week_id="2024-01-08")
    new = data.goals[-1]
    assert new.type == GoalType.WEEKLY
    assert new.identifier == "2024-01-08"
    assert new.text == "[Monthly] Run 100km"


def test_promote_weekly_is_noop(sample_data):
    result = ops.promote_goal(sample_data, "w1", month_id="2024.01", week_id="2024-01-01")
    assert result is sample_data


def test_promotion_never_changes_source(sample_data):
    data = ops.set_goal_progress(sample_data, "y1", 70)
    source = ops.find_goal(data, "y1")
    promoted = ops.promote_goal(data, "y1", month_id="2024.01", week_id="2024-01-01")
    assert ops.find_goal(promoted, "y1") == source


def test_promote_core_value(sample_data):
    data = ops.promote_core_value(sample_data, "v1", year_id="2025")
    new = data.goals[-1]
    assert new.type == GoalType.YEARLY
    assert new.identifier == "2025"
    assert new.text == "[Core Value] Health"
    assert ops.find_core_value(data, "v1").progress == 40


def test_copy_goal_to_today_appends_focus_task(sample_data):
    data = ops.copy_goal_to_today(sample_data, "w1", DAY, Priority.A)
    new = data.tasks[-1]
    assert new.text == "[Focus] Run 3 times"
    assert new.importance == Priority.A
    assert new.sequence == 3
    assert new.date == DAY
    assert is_dense(data.tasks)


def test_copy_unknown_goal_is_noop(sample_data):
    assert ops.copy_goal_to_today(sample_data, "missing", DAY, Priority.A) is sample_data


# =============================================================================
# AI breakdown
# =============================================================================


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("A", Priority.A), ("b", Priority.B), (" C ", Priority.C), ("Z", Priority.A), (None, Priority.A)],
)
def test_coerce_priority(raw, expected):
    assert coerce_priority(raw) == expected


def test_apply_breakdown_adds_focus_tasks(sample_data):
    items = [
        BreakdownItem(task="Buy shoes", priority="B"),
        BreakdownItem(task="Plan route", priority="nonsense"),
        BreakdownItem(task="   ", priority="A"),
        BreakdownItem(task="Stretch", priority="C"),
    ]
    data = ops.apply_breakdown(sample_data, items, DAY)

    added = [t for t in data.tasks if t.text.startswith("[Focus] ")]
    assert {t.text: t.importance for t in added} == {
        "[Focus] Buy shoes": Priority.B,
        "[Focus] Plan route": Priority.A,
        "[Focus] Stretch": Priority.C,
    }
    assert all(t.date == DAY for t in added)
    assert is_dense(data.tasks)


def test_apply_breakdown_with_nothing_usable_is_noop(sample_data):
    items = [BreakdownItem(task="   ", priority="A"), BreakdownItem(task="", priority=None)]
    assert ops.apply_breakdown(sample_data, items, DAY) is sample_data
    assert ops.apply_breakdown(sample_data, [], DAY) is sample_data
