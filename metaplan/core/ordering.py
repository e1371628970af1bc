"""
Ordering engine for prioritized daily tasks.

Tasks are grouped into buckets keyed by (date, importance). Inside a
bucket, ``sequence`` gives the manual order and must be exactly 1..n
once an operation completes. normalize_group() is the only thing that
restores that; every operation that adds a task to a bucket, removes one
from it, or changes a task's priority calls it for each bucket touched.

All operations take an AppData snapshot and return a new one. Invalid
input (empty text, unknown id, moving past a bucket edge) returns the
snapshot unchanged instead of raising.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import replace
from enum import StrEnum

from metaplan.core.ids import new_id
from metaplan.models.entities import PRIORITY_CYCLE, AppData, Priority, Task

BucketKey = tuple[str, Priority]


class Direction(StrEnum):
    UP = "up"
    DOWN = "down"


def _in_bucket(task: Task, date: str, priority: Priority) -> bool:
    return task.date == date and task.importance == priority


def _bucket_order(task: Task) -> tuple[int, str]:
    return (task.sequence, task.id)


# =============================================================================
# Bucket primitives
# =============================================================================


def normalize_group(
    tasks: Iterable[Task], date: str, priority: Priority
) -> tuple[Task, ...]:
    """
    Renumber one bucket to 1..n.

    The bucket's tasks are ordered by current sequence, ties broken by id,
    and reassigned 1..n in that order. Tasks outside the bucket pass
    through untouched and come first in the result.
    """
    others: list[Task] = []
    group: list[Task] = []
    for task in tasks:
        (group if _in_bucket(task, date, priority) else others).append(task)
    group.sort(key=_bucket_order)
    renumbered = [
        task if task.sequence == index else replace(task, sequence=index)
        for index, task in enumerate(group, start=1)
    ]
    return (*others, *renumbered)


def get_next_sequence(tasks: Iterable[Task], date: str, priority: Priority) -> int:
    """Sequence a task appended to the end of the bucket would get."""
    return sum(1 for t in tasks if _in_bucket(t, date, priority)) + 1


def bucket_index(tasks: Iterable[Task]) -> dict[BucketKey, list[Task]]:
    """Map every (date, importance) key to its tasks in manual order."""
    buckets: dict[BucketKey, list[Task]] = {}
    for task in tasks:
        buckets.setdefault(task.bucket, []).append(task)
    for members in buckets.values():
        members.sort(key=_bucket_order)
    return buckets


def is_dense(tasks: Iterable[Task]) -> bool:
    """True if every bucket's sequences are exactly 1..n."""
    return all(
        [t.sequence for t in members] == list(range(1, len(members) + 1))
        for members in bucket_index(tasks).values()
    )


def find_task(data: AppData, task_id: str) -> Task | None:
    return next((t for t in data.tasks if t.id == task_id), None)


def next_priority(priority: Priority) -> Priority:
    """A -> B -> C -> A."""
    index = PRIORITY_CYCLE.index(priority)
    return PRIORITY_CYCLE[(index + 1) % len(PRIORITY_CYCLE)]


# =============================================================================
# Task operations
# =============================================================================


def append_task(
    data: AppData,
    text: str,
    date: str,
    priority: Priority,
    task_id: str | None = None,
) -> AppData:
    """Append a task to the end of its bucket and renormalize the bucket.

    Shared by add_task, copy-to-today and AI breakdown.
    """
    task = Task(
        id=task_id or new_id(),
        text=text,
        importance=priority,
        sequence=get_next_sequence(data.tasks, date, priority),
        completed=False,
        date=date,
        memo="",
    )
    tasks = normalize_group((*data.tasks, task), date, priority)
    return replace(data, tasks=tasks)


def add_task(
    data: AppData,
    text: str,
    date: str,
    priority: Priority,
    task_id: str | None = None,
) -> AppData:
    """Add a task to the (date, priority) bucket; blank text is ignored."""
    if not text or not text.strip():
        return data
    return append_task(data, text, date, Priority(priority), task_id=task_id)


def move_task(data: AppData, task_id: str, direction: Direction | str) -> AppData:
    """
    Swap a task with its neighbour in the bucket.

    Only the two swapped tasks change. Moving the first task up or the
    last task down is a no-op.
    """
    task = find_task(data, task_id)
    if task is None:
        return data
    direction = Direction(direction)

    bucket = sorted(
        (t for t in data.tasks if _in_bucket(t, task.date, task.importance)),
        key=_bucket_order,
    )
    index = next(i for i, t in enumerate(bucket) if t.id == task_id)
    target = index - 1 if direction == Direction.UP else index + 1
    if target < 0 or target >= len(bucket):
        return data

    other = bucket[target]
    swapped = {task.id: other.sequence, other.id: task.sequence}
    tasks = tuple(
        replace(t, sequence=swapped[t.id]) if t.id in swapped else t
        for t in data.tasks
    )
    return replace(data, tasks=tasks)


def cycle_priority(data: AppData, task_id: str) -> AppData:
    """
    Move a task to the next priority (A -> B -> C -> A).

    The task carries its old sequence into the new bucket. The source
    bucket is renormalized first, then the destination bucket (ties with
    an existing member are broken by id).
    """
    task = find_task(data, task_id)
    if task is None:
        return data
    new_priority = next_priority(task.importance)

    tasks: tuple[Task, ...] = tuple(
        replace(t, importance=new_priority) if t.id == task_id else t
        for t in data.tasks
    )
    tasks = normalize_group(tasks, task.date, task.importance)
    tasks = normalize_group(tasks, task.date, new_priority)
    return replace(data, tasks=tasks)


def delete_task(data: AppData, task_id: str) -> AppData:
    """Remove a task and close the gap it leaves in its own bucket."""
    task = find_task(data, task_id)
    if task is None:
        return data
    remaining = tuple(t for t in data.tasks if t.id != task_id)
    return replace(data, tasks=normalize_group(remaining, task.date, task.importance))


def _update_task(data: AppData, task_id: str, **changes: object) -> AppData:
    if find_task(data, task_id) is None:
        return data
    tasks = tuple(
        replace(t, **changes) if t.id == task_id else t  # type: ignore[arg-type]
        for t in data.tasks
    )
    return replace(data, tasks=tasks)


def toggle_task(data: AppData, task_id: str) -> AppData:
    """Flip a task's completed flag. Sequences are not touched."""
    task = find_task(data, task_id)
    if task is None:
        return data
    return _update_task(data, task_id, completed=not task.completed)


def edit_task_text(data: AppData, task_id: str, text: str) -> AppData:
    """Replace a task's label; blank or unchanged text is discarded."""
    task = find_task(data, task_id)
    if task is None or not text.strip() or text == task.text:
        return data
    return _update_task(data, task_id, text=text)


def set_task_memo(data: AppData, task_id: str, memo: str) -> AppData:
    return _update_task(data, task_id, memo=memo)


__all__ = [
    "BucketKey",
    "Direction",
    "add_task",
    "append_task",
    "bucket_index",
    "cycle_priority",
    "delete_task",
    "edit_task_text",
    "find_task",
    "get_next_sequence",
    "is_dense",
    "move_task",
    "next_priority",
    "normalize_group",
    "set_task_memo",
    "toggle_task",
]
