"""
Goal hierarchy, core values, and promotion between horizons.

Horizons, top to bottom:

    core value -> yearly goal -> monthly goal -> weekly goal -> daily task

Promotion copies an entity's text one level down into the currently
navigated bucket of the next horizon, prefixed with its provenance. The
source entity is never changed. Any goal can also be copied straight into
today's task list (copy-to-today), which goes through the same append and
normalize path as add_task.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, replace

from metaplan.core.ids import new_id
from metaplan.core.ordering import append_task, normalize_group
from metaplan.lib.dates import identifier_matches
from metaplan.lib.exceptions import ValidationError
from metaplan.models.entities import (
    PRIORITY_CYCLE,
    AppData,
    CoreCategory,
    CoreValue,
    Goal,
    GoalType,
    Priority,
    clamp_progress,
)


FOCUS_PREFIX = "[Focus] "
YEARLY_PREFIX = "[Yearly] "
MONTHLY_PREFIX = "[Monthly] "
CORE_VALUE_PREFIX = "[Core Value] "


def _blank(text: str) -> bool:
    return not text or not text.strip()


# =============================================================================
# Goals
# =============================================================================


def find_goal(data: AppData, goal_id: str) -> Goal | None:
    return next((g for g in data.goals if g.id == goal_id), None)


def add_goal(
    data: AppData,
    goal_type: GoalType | str,
    text: str,
    identifier: str,
    goal_id: str | None = None,
) -> AppData:
    """
    Append a new goal with progress 0.

    Blank text is ignored.

    Raises:
        ValidationError: If the identifier does not fit the horizon's
            key format (Monday date, YYYY.MM or YYYY).
    """
    if _blank(text):
        return data
    goal_type = GoalType(goal_type)
    if not identifier_matches(goal_type.value, identifier):
        raise ValidationError(
            f"Identifier {identifier!r} is not a valid {goal_type.value} key"
        )
    goal = Goal(id=goal_id or new_id(), text=text, type=goal_type, identifier=identifier)
    return replace(data, goals=(*data.goals, goal))


def _update_goal(data: AppData, goal_id: str, **changes: object) -> AppData:
    if find_goal(data, goal_id) is None:
        return data
    goals = tuple(
        replace(g, **changes) if g.id == goal_id else g  # type: ignore[arg-type]
        for g in data.goals
    )
    return replace(data, goals=goals)


def edit_goal_text(data: AppData, goal_id: str, text: str) -> AppData:
    goal = find_goal(data, goal_id)
    if goal is None or _blank(text) or text == goal.text:
        return data
    return _update_goal(data, goal_id, text=text)


def set_goal_memo(data: AppData, goal_id: str, memo: str) -> AppData:
    return _update_goal(data, goal_id, memo=memo)


def set_goal_progress(data: AppData, goal_id: str, progress: int) -> AppData:
    """Set progress (clamped); completion follows progress == 100."""
    value = clamp_progress(progress)
    return _update_goal(data, goal_id, progress=value, completed=value == 100)


def adjust_goal_progress(data: AppData, goal_id: str, delta: int) -> AppData:
    goal = find_goal(data, goal_id)
    if goal is None:
        return data
    return set_goal_progress(data, goal_id, goal.progress + delta)


def set_goal_completed(data: AppData, goal_id: str, completed: bool) -> AppData:
    """Mark a goal done or not done without touching its progress.

    A goal at 100% stays completed.
    """
    return _update_goal(data, goal_id, completed=completed)


def delete_goal(data: AppData, goal_id: str) -> AppData:
    return replace(data, goals=tuple(g for g in data.goals if g.id != goal_id))


# =============================================================================
# Core values
# =============================================================================


def find_core_value(data: AppData, value_id: str) -> CoreValue | None:
    return next((v for v in data.core_values if v.id == value_id), None)


def add_core_value(
    data: AppData,
    text: str,
    category: CoreCategory | str,
    value_id: str | None = None,
) -> AppData:
    if _blank(text):
        return data
    value = CoreValue(id=value_id or new_id(), text=text, category=CoreCategory(category))
    return replace(data, core_values=(*data.core_values, value))


def _update_core_value(data: AppData, value_id: str, **changes: object) -> AppData:
    if find_core_value(data, value_id) is None:
        return data
    values = tuple(
        replace(v, **changes) if v.id == value_id else v  # type: ignore[arg-type]
        for v in data.core_values
    )
    return replace(data, core_values=values)


def edit_core_value_text(data: AppData, value_id: str, text: str) -> AppData:
    value = find_core_value(data, value_id)
    if value is None or _blank(text) or text == value.text:
        return data
    return _update_core_value(data, value_id, text=text)


def set_value_progress(data: AppData, value_id: str, progress: int) -> AppData:
    return _update_core_value(data, value_id, progress=clamp_progress(progress))


def adjust_value_progress(data: AppData, value_id: str, delta: int) -> AppData:
    value = find_core_value(data, value_id)
    if value is None:
        return data
    return set_value_progress(data, value_id, value.progress + delta)


def delete_core_value(data: AppData, value_id: str) -> AppData:
    return replace(
        data, core_values=tuple(v for v in data.core_values if v.id != value_id)
    )


# =============================================================================
# Promotion & copy-to-today
# =============================================================================


def promote_goal(
    data: AppData,
    goal_id: str,
    *,
    month_id: str,
    week_id: str,
) -> AppData:
    """
    Copy a goal one horizon down.

    yearly -> monthly goal in ``month_id`` prefixed "[Yearly] ";
    monthly -> weekly goal in ``week_id`` prefixed "[Monthly] ".
    Weekly goals have no promotion target (use copy-to-today).
    """
    goal = find_goal(data, goal_id)
    if goal is None:
        return data
    if goal.type == GoalType.YEARLY:
        return add_goal(data, GoalType.MONTHLY, f"{YEARLY_PREFIX}{goal.text}", month_id)
    if goal.type == GoalType.MONTHLY:
        return add_goal(data, GoalType.WEEKLY, f"{MONTHLY_PREFIX}{goal.text}", week_id)
    return data


def promote_core_value(data: AppData, value_id: str, *, year_id: str) -> AppData:
    """Copy a core value into a yearly goal for ``year_id``."""
    value = find_core_value(data, value_id)
    if value is None:
        return data
    return add_goal(data, GoalType.YEARLY, f"{CORE_VALUE_PREFIX}{value.text}", year_id)


def copy_to_today(data: AppData, text: str, day: str, priority: Priority) -> AppData:
    """Append ``text`` as a new task at the end of (day, priority)."""
    if _blank(text):
        return data
    return append_task(data, text, day, Priority(priority))


def copy_goal_to_today(
    data: AppData, goal_id: str, day: str, priority: Priority
) -> AppData:
    goal = find_goal(data, goal_id)
    if goal is None:
        return data
    return copy_to_today(data, f"{FOCUS_PREFIX}{goal.text}", day, priority)


# =============================================================================
# AI breakdown
# =============================================================================


@dataclass(frozen=True)
class BreakdownItem:
    """One suggested task from the AI collaborator."""

    task: str
    priority: str | None = None


def coerce_priority(raw: str | None) -> Priority:
    """Map a returned priority code to Priority, defaulting to A."""
    try:
        return Priority(str(raw).strip().upper())
    except ValueError:
        return Priority.A


def apply_breakdown(data: AppData, items: Iterable[BreakdownItem], day: str) -> AppData:
    """
    Turn AI breakdown items into tasks on ``day``.

    Each item is appended to its priority bucket with a "[Focus] " prefix;
    items with blank text are skipped. All three of the day's buckets are
    renormalized afterwards. With nothing to add the snapshot is returned
    unchanged.
    """
    before = data
    for item in items:
        if _blank(item.task):
            continue
        data = append_task(data, f"{FOCUS_PREFIX}{item.task}", day, coerce_priority(item.priority))
    if data is before:
        return data

    tasks = data.tasks
    for priority in PRIORITY_CYCLE:
        tasks = normalize_group(tasks, day, priority)
    return replace(data, tasks=tasks)


__all__ = [
    "BreakdownItem",
    "CORE_VALUE_PREFIX",
    "FOCUS_PREFIX",
    "MONTHLY_PREFIX",
    "YEARLY_PREFIX",
    "add_core_value",
    "add_goal",
    "adjust_goal_progress",
    "adjust_value_progress",
    "apply_breakdown",
    "coerce_priority",
    "copy_goal_to_today",
    "copy_to_today",
    "delete_core_value",
    "delete_goal",
    "edit_core_value_text",
    "edit_goal_text",
    "find_core_value",
    "find_goal",
    "promote_core_value",
    "promote_goal",
    "set_goal_completed",
    "set_goal_memo",
    "set_goal_progress",
    "set_value_progress",
]
