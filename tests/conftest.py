"""
Shared test fixtures for Metaplan.

This module provides common fixtures used across all test modules:
- Environment setup (dev mode, offline store, no AI key)
- Sample AppData documents built with fixed ids
- A PlannerSession pinned to a known "today"
- An in-memory RemoteStore and a disabled AI assistant

Usage:
    All fixtures are automatically available to any test in the tests/ directory.
"""

from __future__ import annotations

import os

import httpx
import pytest

# ---------------------------------------------------------------------------
# 1. Environment setup -- must run before any application imports
# ---------------------------------------------------------------------------

os.environ.setdefault("METAPLAN_DEV_MODE", "1")
os.environ.setdefault("METAPLAN_STORE", "memory")
os.environ.pop("METAPLAN_AI_API_KEY", None)

# ---------------------------------------------------------------------------
# Application imports (after env vars are set)
# ---------------------------------------------------------------------------

from metaplan.core.projection import clear_caches  # noqa: E402
from metaplan.core.session import PlannerSession  # noqa: E402
from metaplan.models.entities import (  # noqa: E402
    AppData,
    CoreCategory,
    CoreValue,
    Goal,
    GoalType,
    Priority,
    Task,
)
from metaplan.services.ai import PlanningAssistant  # noqa: E402
from metaplan.services.stores import MemoryStore  # noqa: E402

TODAY = "2024-01-05"


def make_task(
    task_id: str,
    sequence: int,
    importance: Priority = Priority.A,
    date: str = TODAY,
    completed: bool = False,
    text: str | None = None,
) -> Task:
    return Task(
        id=task_id,
        text=text or f"task {task_id}",
        importance=importance,
        sequence=sequence,
        date=date,
        completed=completed,
    )


# ---------------------------------------------------------------------------
# 2. Documents
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _fresh_projection_caches():
    """Keep memoized views from leaking between tests."""
    clear_caches()
    yield
    clear_caches()


@pytest.fixture()
def sample_data() -> AppData:
    """A small document touching every entity type."""
    return AppData(
        tasks=(
            make_task("a1", 1),
            make_task("a2", 2),
            make_task("b1", 1, importance=Priority.B),
        ),
        goals=(
            Goal(id="y1", text="Run a marathon", type=GoalType.YEARLY, identifier="2024"),
            Goal(id="m1", text="Run 100km", type=GoalType.MONTHLY, identifier="2024.01"),
            Goal(id="w1", text="Run 3 times", type=GoalType.WEEKLY, identifier="2024-01-01"),
        ),
        core_values=(
            CoreValue(id="v1", text="Health", category=CoreCategory.PHYSICAL, progress=40),
        ),
    )


# ---------------------------------------------------------------------------
# 3. Session & collaborators
# ---------------------------------------------------------------------------


@pytest.fixture()
def session(sample_data: AppData) -> PlannerSession:
    return PlannerSession("alice", data=sample_data, today=TODAY)


@pytest.fixture()
def memory_store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture()
def offline_assistant() -> PlanningAssistant:
    """An assistant with no API key: every call returns its safe default."""
    return PlanningAssistant(
        api_key=None,
        base_url="https://ai.test/v1beta",
        breakdown_model="breakdown-model",
        inspiration_model="inspiration-model",
        client=httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(500))),
    )
