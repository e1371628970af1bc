"""
Pydantic schemas for the Metaplan REST API.

Request models validate input at the edge; response models mirror the
domain entities with snake_case fields.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from metaplan.core.ordering import Direction
from metaplan.core.projection import DailyItem
from metaplan.lib.dates import parse_day
from metaplan.models.entities import (
    AppData,
    CoreCategory,
    CoreValue,
    Goal,
    GoalType,
    Priority,
    Task,
)

# =============================================================================
# Entities
# =============================================================================


class TaskOut(BaseModel):
    id: str
    text: str
    importance: Priority
    sequence: int
    completed: bool
    date: str
    memo: str

    @classmethod
    def from_entity(cls, task: Task) -> TaskOut:
        return cls(
            id=task.id,
            text=task.text,
            importance=task.importance,
            sequence=task.sequence,
            completed=task.completed,
            date=task.date,
            memo=task.memo,
        )


class DailyItemOut(TaskOut):
    carried_over: bool

    @classmethod
    def from_item(cls, item: DailyItem) -> DailyItemOut:
        return cls(
            **TaskOut.from_entity(item.task).model_dump(),
            carried_over=item.carried_over,
        )


class GoalOut(BaseModel):
    id: str
    text: str
    type: GoalType
    identifier: str
    progress: int
    completed: bool
    memo: str

    @classmethod
    def from_entity(cls, goal: Goal) -> GoalOut:
        return cls(
            id=goal.id,
            text=goal.text,
            type=goal.type,
            identifier=goal.identifier,
            progress=goal.progress,
            completed=goal.completed,
            memo=goal.memo,
        )


class CoreValueOut(BaseModel):
    id: str
    text: str
    category: CoreCategory
    progress: int

    @classmethod
    def from_entity(cls, value: CoreValue) -> CoreValueOut:
        return cls(id=value.id, text=value.text, category=value.category, progress=value.progress)


class DocumentResponse(BaseModel):
    """The whole AppData document."""

    tasks: list[TaskOut]
    goals: list[GoalOut]
    core_values: list[CoreValueOut]

    @classmethod
    def from_data(cls, data: AppData) -> DocumentResponse:
        return cls(
            tasks=[TaskOut.from_entity(t) for t in data.tasks],
            goals=[GoalOut.from_entity(g) for g in data.goals],
            core_values=[CoreValueOut.from_entity(v) for v in data.core_values],
        )


# =============================================================================
# Session & navigation
# =============================================================================


class LoginRequest(BaseModel):
    user_id: str = Field(..., min_length=1, max_length=255)


class NavigationState(BaseModel):
    selected_date: str
    week_id: str
    month_id: str
    year_id: str
    active_priority: Priority
    active_category: CoreCategory


class SessionStatus(BaseModel):
    user_id: str | None
    sync_status: str
    loaded: bool
    pending_write: bool
    last_synced: datetime | None
    navigation: NavigationState | None = None


class NavigationUpdate(BaseModel):
    """Any subset of navigation changes, applied in field order."""

    selected_date: str | None = None
    today: bool = False
    shift_day: int = 0
    shift_month: int = 0
    shift_year: int = 0
    active_priority: Priority | None = None
    active_category: CoreCategory | None = None

    @field_validator("selected_date")
    @classmethod
    def _valid_day(cls, v: str | None) -> str | None:
        if v is not None:
            parse_day(v)
        return v


class TodayResponse(BaseModel):
    selected_date: str
    inspiration: str
    items: list[DailyItemOut]


# =============================================================================
# Tasks
# =============================================================================


class CreateTaskRequest(BaseModel):
    text: str = Field(..., max_length=1000)
    priority: Priority | None = None


class MoveTaskRequest(BaseModel):
    direction: Direction


class UpdateTaskRequest(BaseModel):
    text: str | None = Field(default=None, max_length=1000)
    memo: str | None = Field(default=None, max_length=5000)


# =============================================================================
# Goals & values
# =============================================================================


class CreateGoalRequest(BaseModel):
    type: GoalType
    text: str = Field(..., max_length=1000)


class UpdateGoalRequest(BaseModel):
    text: str | None = Field(default=None, max_length=1000)
    memo: str | None = Field(default=None, max_length=5000)
    progress: int | None = None
    progress_delta: int | None = None
    completed: bool | None = None


class GoalsResponse(BaseModel):
    weekly: list[GoalOut]
    monthly: list[GoalOut]
    yearly: list[GoalOut]


class CreateValueRequest(BaseModel):
    text: str = Field(..., max_length=1000)
    category: CoreCategory | None = None


class UpdateValueRequest(BaseModel):
    text: str | None = Field(default=None, max_length=1000)
    progress: int | None = None
    progress_delta: int | None = None


class BreakdownResponse(BaseModel):
    added: int
    document: DocumentResponse


class InspirationResponse(BaseModel):
    inspiration: str
