"""
Domain entities for Metaplan.

Every entity is a frozen dataclass: an edit produces a new instance via
``dataclasses.replace`` and a new AppData snapshot, never an in-place
mutation. Collections are tuples so that a snapshot is hashable and the
view projections can be memoized on it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum


class Priority(StrEnum):
    """Task importance, highest first. String order equals rank order."""

    A = "A"
    B = "B"
    C = "C"


PRIORITY_CYCLE: tuple[Priority, ...] = (Priority.A, Priority.B, Priority.C)


class GoalType(StrEnum):
    """Goal horizons."""

    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class CoreCategory(StrEnum):
    """The four fixed life domains a core value belongs to."""

    SPIRITUAL = "spiritual"
    PHYSICAL = "physical"
    SOCIAL = "social"
    MENTAL = "mental"


def clamp_progress(value: int) -> int:
    """Clamp a progress value into 0..100."""
    return max(0, min(100, int(value)))


@dataclass(frozen=True)
class Task:
    """
    One prioritized daily task.

    Attributes:
        id: Opaque unique id, assigned at creation.
        text: Label; never empty once stored.
        importance: Priority bucket (A > B > C).
        sequence: 1-based manual order inside the (date, importance) bucket.
        completed: Checked off by the user.
        date: ``YYYY-MM-DD`` day the task belongs to. Never rewritten by
            rollover.
        memo: Optional free-text detail.
    """

    id: str
    text: str
    importance: Priority
    sequence: int
    date: str
    completed: bool = False
    memo: str = ""

    @property
    def bucket(self) -> tuple[str, Priority]:
        return (self.date, self.importance)


@dataclass(frozen=True)
class Goal:
    """
    A weekly, monthly or yearly goal.

    ``identifier`` is the bucket key for the horizon: the week's Monday,
    ``YYYY.MM`` or ``YYYY``. A goal at 100% progress is always completed;
    below that, ``completed`` is whatever was set explicitly.
    """

    id: str
    text: str
    type: GoalType
    identifier: str
    progress: int = 0
    completed: bool = False
    memo: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "progress", clamp_progress(self.progress))
        if self.progress == 100:
            object.__setattr__(self, "completed", True)


@dataclass(frozen=True)
class CoreValue:
    """A core life value with a 0..100 progress gauge."""

    id: str
    text: str
    category: CoreCategory
    progress: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "progress", clamp_progress(self.progress))


@dataclass(frozen=True)
class AppData:
    """The whole persisted document; the unit of load and write-back."""

    tasks: tuple[Task, ...] = field(default_factory=tuple)
    goals: tuple[Goal, ...] = field(default_factory=tuple)
    core_values: tuple[CoreValue, ...] = field(default_factory=tuple)


EMPTY_APP_DATA = AppData()


__all__ = [
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
]
