"""
Core planning engine: ordering, goal hierarchy, projections, session.

All operations are pure functions from one AppData snapshot to the next;
PlannerSession applies them and tracks navigation state.
"""

from metaplan.core.ordering import (
    Direction,
    add_task,
    cycle_priority,
    delete_task,
    get_next_sequence,
    move_task,
    normalize_group,
)
from metaplan.core.projection import DailyItem, daily_tasks, goals_for
from metaplan.core.session import PlannerSession

__all__ = [
    "DailyItem",
    "Direction",
    "PlannerSession",
    "add_task",
    "cycle_priority",
    "daily_tasks",
    "delete_task",
    "get_next_sequence",
    "goals_for",
    "move_task",
    "normalize_group",
]
