"""
Read-only views over an AppData snapshot.

The daily view never moves overdue work. It is the union of the selected
day's tasks and every earlier task that is still open; the latter are
flagged ``carried_over`` while their stored date stays as it was.

Snapshots are immutable and hashable, so every view is memoized on
(snapshot, navigation key) with functools.lru_cache.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from functools import lru_cache
from types import MappingProxyType

from metaplan.models.entities import (
    AppData,
    CoreCategory,
    CoreValue,
    Goal,
    GoalType,
    Task,
)

_CACHE_SIZE = 64


@dataclass(frozen=True)
class DailyItem:
    """A task as shown on a given day."""

    task: Task
    carried_over: bool


def _visible_on(task: Task, day: str) -> bool:
    # ISO day keys compare chronologically as strings
    return task.date == day or (task.date < day and not task.completed)


@lru_cache(maxsize=_CACHE_SIZE)
def daily_tasks(tasks: tuple[Task, ...], day: str) -> tuple[DailyItem, ...]:
    """
    Tasks visible on ``day``, ordered by (importance, date, sequence).

    That is: priority first, then oldest carried-over work first, then
    manual order inside each bucket.
    """
    visible = sorted(
        (t for t in tasks if _visible_on(t, day)),
        key=lambda t: (t.importance.value, t.date, t.sequence),
    )
    return tuple(DailyItem(task=t, carried_over=t.date < day) for t in visible)


@lru_cache(maxsize=_CACHE_SIZE)
def goals_for(goals: tuple[Goal, ...], goal_type: GoalType, identifier: str) -> tuple[Goal, ...]:
    """Goals of one horizon belonging to the navigated bucket key."""
    return tuple(g for g in goals if g.type == goal_type and g.identifier == identifier)


@lru_cache(maxsize=_CACHE_SIZE)
def values_by_category(
    core_values: tuple[CoreValue, ...],
) -> Mapping[CoreCategory, tuple[CoreValue, ...]]:
    """Values grouped by category. The mapping is shared and read-only."""
    grouped: dict[CoreCategory, list[CoreValue]] = {c: [] for c in CoreCategory}
    for value in core_values:
        grouped[value.category].append(value)
    return MappingProxyType({c: tuple(vs) for c, vs in grouped.items()})


def daily_view(data: AppData, day: str) -> tuple[DailyItem, ...]:
    return daily_tasks(data.tasks, day)


def clear_caches() -> None:
    daily_tasks.cache_clear()
    goals_for.cache_clear()
    values_by_category.cache_clear()
