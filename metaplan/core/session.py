"""
Planner session: the explicit context for one logged-in user.

Holds the current AppData snapshot and the navigation state the views
and operations depend on (selected day, navigated month, navigated year,
active priority, active core-value category).

Mutations go through apply(): it runs a pure operation against the
current snapshot, swaps in the result atomically, and notifies
subscribers (the SyncController) only when the snapshot actually
changed. replace_data() is the load-time path and notifies nobody.

Usage:
    session = PlannerSession("alice", today="2024-01-05")
    session.add_task("Write report")
    for item in session.daily_tasks():
        ...
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

from metaplan.core import goals as goal_ops
from metaplan.core import ordering
from metaplan.core import projection
from metaplan.lib.dates import (
    month_id,
    parse_day,
    shift_day,
    shift_month,
    today_str,
    week_id,
    year_id,
)
from metaplan.models.entities import (
    EMPTY_APP_DATA,
    AppData,
    CoreCategory,
    CoreValue,
    Goal,
    GoalType,
    Priority,
)

logger = logging.getLogger(__name__)

Listener = Callable[[AppData], None]
Operation = Callable[..., AppData]


class PlannerSession:
    """
    Session-scoped state for one user identifier.

    Args:
        user_id: The identifier that keys the remote record.
        data: Initial snapshot (normally empty until the first load).
        today: Override for "today" (``YYYY-MM-DD``); defaults to the
            local date.
    """

    def __init__(
        self,
        user_id: str,
        data: AppData = EMPTY_APP_DATA,
        today: str | None = None,
    ) -> None:
        self.user_id = user_id
        self._data = data
        self._listeners: list[Listener] = []

        start = parse_day(today or today_str())
        self.selected_date: str = start.isoformat()
        self.nav_year_month: tuple[int, int] = (start.year, start.month)
        self.nav_year: int = start.year
        self.active_priority: Priority = Priority.A
        self.active_category: CoreCategory = CoreCategory.SPIRITUAL

    # -------------------------------------------------------------------------
    # Snapshot
    # -------------------------------------------------------------------------

    @property
    def data(self) -> AppData:
        return self._data

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a mutation listener; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def apply(self, operation: Operation, *args: Any, **kwargs: Any) -> AppData:
        """Run ``operation(data, *args, **kwargs)`` and adopt its result."""
        new_data = operation(self._data, *args, **kwargs)
        if new_data is self._data:
            return new_data
        self._data = new_data
        for listener in list(self._listeners):
            listener(new_data)
        return new_data

    def replace_data(self, data: AppData) -> None:
        """Adopt a loaded document wholesale, without notifying listeners."""
        self._data = data

    def close(self) -> None:
        """Tear down on logout: drop listeners and local data."""
        self._listeners.clear()
        self._data = EMPTY_APP_DATA
        logger.debug("Session closed for %s", self.user_id)

    # -------------------------------------------------------------------------
    # Navigation
    # -------------------------------------------------------------------------

    @property
    def week_id(self) -> str:
        return week_id(self.selected_date)

    @property
    def month_id(self) -> str:
        return month_id(*self.nav_year_month)

    @property
    def year_id(self) -> str:
        return year_id(self.nav_year)

    def select_date(self, day: str) -> None:
        self.selected_date = parse_day(day).isoformat()

    def shift_day(self, days: int) -> None:
        self.selected_date = shift_day(self.selected_date, days)

    def go_today(self) -> None:
        self.selected_date = today_str()

    def shift_month(self, months: int) -> None:
        self.nav_year_month = shift_month(*self.nav_year_month, months)

    def shift_year(self, years: int) -> None:
        self.nav_year += years

    def set_active_priority(self, priority: Priority | str) -> None:
        self.active_priority = Priority(priority)

    def set_active_category(self, category: CoreCategory | str) -> None:
        self.active_category = CoreCategory(category)

    def identifier_for(self, goal_type: GoalType | str) -> str:
        """The currently navigated bucket key for a horizon."""
        goal_type = GoalType(goal_type)
        if goal_type == GoalType.WEEKLY:
            return self.week_id
        if goal_type == GoalType.MONTHLY:
            return self.month_id
        return self.year_id

    # -------------------------------------------------------------------------
    # Operations bound to navigation state
    # -------------------------------------------------------------------------

    def add_task(self, text: str, priority: Priority | str | None = None) -> AppData:
        return self.apply(
            ordering.add_task,
            text,
            self.selected_date,
            Priority(priority or self.active_priority),
        )

    def add_goal(self, goal_type: GoalType | str, text: str) -> AppData:
        return self.apply(goal_ops.add_goal, goal_type, text, self.identifier_for(goal_type))

    def add_core_value(self, text: str, category: CoreCategory | str | None = None) -> AppData:
        return self.apply(goal_ops.add_core_value, text, category or self.active_category)

    def promote_goal(self, goal_id: str) -> AppData:
        return self.apply(
            goal_ops.promote_goal, goal_id, month_id=self.month_id, week_id=self.week_id
        )

    def promote_core_value(self, value_id: str) -> AppData:
        return self.apply(goal_ops.promote_core_value, value_id, year_id=self.year_id)

    def copy_goal_to_today(self, goal_id: str) -> AppData:
        return self.apply(
            goal_ops.copy_goal_to_today, goal_id, self.selected_date, self.active_priority
        )

    def apply_breakdown(self, items: list[goal_ops.BreakdownItem]) -> AppData:
        return self.apply(goal_ops.apply_breakdown, items, self.selected_date)

    # -------------------------------------------------------------------------
    # Views
    # -------------------------------------------------------------------------

    def daily_tasks(self) -> tuple[projection.DailyItem, ...]:
        return projection.daily_tasks(self._data.tasks, self.selected_date)

    def weekly_goals(self) -> tuple[Goal, ...]:
        return projection.goals_for(self._data.goals, GoalType.WEEKLY, self.week_id)

    def monthly_goals(self) -> tuple[Goal, ...]:
        return projection.goals_for(self._data.goals, GoalType.MONTHLY, self.month_id)

    def yearly_goals(self) -> tuple[Goal, ...]:
        return projection.goals_for(self._data.goals, GoalType.YEARLY, self.year_id)

    def values_by_category(self) -> Mapping[CoreCategory, tuple[CoreValue, ...]]:
        return projection.values_by_category(self._data.core_values)
