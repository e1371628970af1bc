"""
JSON codec for the persisted AppData payload.

The payload is stored as an opaque string inside the remote record. Its
shape is camelCase and matches what earlier clients wrote:

    {"tasks": [...], "goals": [...], "coreValues": [...]}

Missing top-level lists load as empty. Missing optional entity fields
(memo, completed, progress) take their defaults. Anything else that is
malformed raises SerializationError.
"""

from __future__ import annotations

import json
from typing import Any

from metaplan.lib.exceptions import SerializationError
from metaplan.models.entities import (
    AppData,
    CoreCategory,
    CoreValue,
    Goal,
    GoalType,
    Priority,
    Task,
)


def task_to_dict(task: Task) -> dict[str, Any]:
    return {
        "id": task.id,
        "text": task.text,
        "importance": task.importance.value,
        "sequence": task.sequence,
        "completed": task.completed,
        "date": task.date,
        "memo": task.memo,
    }


def goal_to_dict(goal: Goal) -> dict[str, Any]:
    return {
        "id": goal.id,
        "text": goal.text,
        "progress": goal.progress,
        "completed": goal.completed,
        "identifier": goal.identifier,
        "type": goal.type.value,
        "memo": goal.memo,
    }


def core_value_to_dict(value: CoreValue) -> dict[str, Any]:
    return {
        "id": value.id,
        "text": value.text,
        "category": value.category.value,
        "progress": value.progress,
    }


def app_data_to_dict(data: AppData) -> dict[str, Any]:
    return {
        "tasks": [task_to_dict(t) for t in data.tasks],
        "goals": [goal_to_dict(g) for g in data.goals],
        "coreValues": [core_value_to_dict(v) for v in data.core_values],
    }


def task_from_dict(raw: dict[str, Any]) -> Task:
    return Task(
        id=str(raw["id"]),
        text=str(raw["text"]),
        importance=Priority(raw["importance"]),
        sequence=int(raw["sequence"]),
        completed=bool(raw.get("completed", False)),
        date=str(raw["date"]),
        memo=str(raw.get("memo") or ""),
    )


def goal_from_dict(raw: dict[str, Any]) -> Goal:
    return Goal(
        id=str(raw["id"]),
        text=str(raw["text"]),
        type=GoalType(raw["type"]),
        identifier=str(raw["identifier"]),
        progress=int(raw.get("progress") or 0),
        completed=bool(raw.get("completed", False)),
        memo=str(raw.get("memo") or ""),
    )


def core_value_from_dict(raw: dict[str, Any]) -> CoreValue:
    return CoreValue(
        id=str(raw["id"]),
        text=str(raw["text"]),
        category=CoreCategory(raw["category"]),
        progress=int(raw.get("progress") or 0),
    )


def app_data_from_dict(raw: dict[str, Any]) -> AppData:
    """
    Build AppData from a decoded payload dict.

    Raises:
        SerializationError: If an entity is missing required fields or
            carries an unknown priority/type/category.
    """
    if not isinstance(raw, dict):
        raise SerializationError(f"AppData payload must be an object, got {type(raw).__name__}")
    try:
        return AppData(
            tasks=tuple(task_from_dict(t) for t in raw.get("tasks") or []),
            goals=tuple(goal_from_dict(g) for g in raw.get("goals") or []),
            core_values=tuple(core_value_from_dict(v) for v in raw.get("coreValues") or []),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise SerializationError(f"Malformed AppData payload: {e}") from e


def dump_app_data(data: AppData) -> str:
    """Serialize AppData to the JSON string stored remotely."""
    return json.dumps(app_data_to_dict(data), ensure_ascii=False)


def load_app_data(payload: str) -> AppData:
    """
    Parse a stored JSON string back into AppData.

    Raises:
        SerializationError: On invalid JSON or a malformed document.
    """
    try:
        raw = json.loads(payload)
    except (json.JSONDecodeError, TypeError) as e:
        raise SerializationError(f"AppData payload is not valid JSON: {e}") from e
    return app_data_from_dict(raw)
