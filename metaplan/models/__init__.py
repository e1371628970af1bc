"""
Models package for Metaplan.

Usage:
    from metaplan.models import AppData, Task, Goal, CoreValue, Priority
    from metaplan.models import PlanRecord, PlanRecordRow
"""

from metaplan.models.base import Base
from metaplan.models.entities import (
    EMPTY_APP_DATA,
    PRIORITY_CYCLE,
    AppData,
    CoreCategory,
    CoreValue,
    Goal,
    GoalType,
    Priority,
    Task,
    clamp_progress,
)
from metaplan.models.record import INFO_FIELDS, PlanRecord, PlanRecordRow

__all__ = [
    # Base
    "Base",
    # Entities
    "AppData",
    "CoreCategory",
    "CoreValue",
    "EMPTY_APP_DATA",
    "Goal",
    "GoalType",
    "PRIORITY_CYCLE",
    "Priority",
    "Task",
    "clamp_progress",
    # Remote record
    "INFO_FIELDS",
    "PlanRecord",
    "PlanRecordRow",
]
