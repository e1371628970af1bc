"""
Tests for debounced write-back (metaplan/services/sync.py).

Covers:
- Load: existing payload replaces local state, missing record is created
- Debounce: a burst of edits produces one write carrying the final state
- No write while the load is in flight
- Store failures are logged and swallowed, local state is kept
- stop() drops the pending write; flush() writes immediately
"""

from __future__ import annotations

import asyncio
from datetime import datetime
from unittest.mock import AsyncMock

import httpx
import pytest

from metaplan.core.session import PlannerSession
from metaplan.lib.exceptions import StoreError
from metaplan.models.codec import dump_app_data, load_app_data
from metaplan.models.entities import EMPTY_APP_DATA
from metaplan.models.record import PlanRecord
from metaplan.services.stores import MemoryStore, SheetStore
from metaplan.services.sync import SyncController, SyncStatus

DELAY = 0.02
FIXED_NOW = datetime(2024, 1, 5, 9, 0)


def _controller(store) -> SyncController:
    return SyncController(store, delay=DELAY, clock=lambda: FIXED_NOW)


async def _settle(controller: SyncController) -> None:
    await asyncio.sleep(DELAY * 5)
    await controller.wait_idle()


# =============================================================================
# Load
# =============================================================================


@pytest.mark.asyncio
async def test_load_replaces_local_state(memory_store, sample_data):
    await memory_store.create("alice", dump_app_data(sample_data), {})
    session = PlannerSession("alice", today="2024-01-05")
    controller = _controller(memory_store)

    await controller.start(session)

    assert session.data == sample_data
    assert controller.loaded is True
    assert controller.last_synced == FIXED_NOW
    assert controller.status == SyncStatus.IDLE
    assert memory_store.writes == 0


@pytest.mark.asyncio
async def test_missing_record_is_created_empty(memory_store, sample_data):
    session = PlannerSession("new-user", data=sample_data, today="2024-01-05")
    controller = _controller(memory_store)

    await controller.start(session)

    record = await memory_store.find("new-user")
    assert record is not None
    assert load_app_data(record.payload) == EMPTY_APP_DATA
    assert record.info["week"] == "2024-01-01"
    assert session.data is EMPTY_APP_DATA
    assert controller.last_synced == FIXED_NOW


@pytest.mark.asyncio
async def test_record_without_payload_keeps_local_state(sample_data):
    store = AsyncMock()
    store.find.return_value = PlanRecord(record_id="alice_1", user_id="alice", payload=None)
    session = PlannerSession("alice", data=sample_data, today="2024-01-05")
    controller = _controller(store)

    await controller.start(session)

    assert session.data is sample_data
    assert controller.last_synced == FIXED_NOW
    store.create.assert_not_called()


@pytest.mark.asyncio
async def test_load_failure_is_swallowed(sample_data):
    store = AsyncMock()
    store.find.side_effect = StoreError("offline")
    session = PlannerSession("alice", data=sample_data, today="2024-01-05")
    controller = _controller(store)

    await controller.start(session)

    assert session.data is sample_data
    assert controller.last_synced is None
    assert controller.loaded is True


@pytest.mark.asyncio
async def test_corrupt_payload_is_swallowed(memory_store):
    await memory_store.create("alice", "not json", {})
    session = PlannerSession("alice", today="2024-01-05")
    controller = _controller(memory_store)

    await controller.start(session)

    assert session.data is EMPTY_APP_DATA
    assert controller.last_synced is None


# =============================================================================
# Debounced write
# =============================================================================


@pytest.mark.asyncio
async def test_burst_of_edits_coalesces_into_one_write(memory_store):
    session = PlannerSession("alice", today="2024-01-05")
    controller = _controller(memory_store)
    await controller.start(session)

    for i in range(5):
        session.add_task(f"task {i}")
    assert controller.has_pending_write is True
    assert memory_store.writes == 0

    await _settle(controller)

    assert memory_store.writes == 1
    assert controller.has_pending_write is False
    record = await memory_store.find("alice")
    assert load_app_data(record.payload) == session.data
    assert len(session.data.tasks) == 5


@pytest.mark.asyncio
async def test_each_quiet_period_writes_latest_snapshot(memory_store):
    session = PlannerSession("alice", today="2024-01-05")
    controller = _controller(memory_store)
    await controller.start(session)

    session.add_task("first")
    await _settle(controller)
    session.add_task("second")
    await _settle(controller)

    assert memory_store.writes == 2
    record = await memory_store.find("alice")
    assert [t.text for t in load_app_data(record.payload).tasks] == ["first", "second"]


@pytest.mark.asyncio
async def test_no_write_while_loading(sample_data):
    release = asyncio.Event()
    store = AsyncMock()

    async def slow_find(user_id):
        await release.wait()
        return None

    store.find.side_effect = slow_find
    session = PlannerSession("alice", today="2024-01-05")
    controller = _controller(store)

    loading = asyncio.create_task(controller.start(session))
    await asyncio.sleep(0)
    assert controller.status == SyncStatus.LOADING

    session.add_task("typed during load")
    assert controller.has_pending_write is False

    release.set()
    await loading
    await asyncio.sleep(DELAY * 5)

    store.replace.assert_not_called()
    # The loaded (new, empty) document wins over the edit made mid-load
    assert session.data is EMPTY_APP_DATA


@pytest.mark.asyncio
async def test_write_failure_keeps_local_state():
    store = AsyncMock()
    store.find.return_value = None
    store.replace.side_effect = StoreError("server said no")
    session = PlannerSession("alice", today="2024-01-05")
    controller = _controller(store)
    await controller.start(session)
    synced_at_load = controller.last_synced

    session.add_task("survives")
    await _settle(controller)

    store.replace.assert_awaited_once()
    assert [t.text for t in session.data.tasks] == ["survives"]
    assert controller.last_synced == synced_at_load
    assert controller.status == SyncStatus.IDLE


@pytest.mark.asyncio
async def test_write_sends_bookkeeping_fields(memory_store):
    session = PlannerSession("alice", today="2024-01-05")
    controller = _controller(memory_store)
    await controller.start(session)

    session.add_task("x")
    await _settle(controller)

    record = await memory_store.find("alice")
    assert record.info == {
        "date": "2024-01-05",
        "year": "2024",
        "month": "1",
        "day": "Friday",
        "week": "2024-01-01",
    }


# =============================================================================
# flush / stop
# =============================================================================


@pytest.mark.asyncio
async def test_flush_writes_immediately(memory_store):
    session = PlannerSession("alice", today="2024-01-05")
    controller = SyncController(memory_store, delay=60)
    await controller.start(session)

    session.add_task("now please")
    assert controller.has_pending_write is True
    await controller.flush()

    assert controller.has_pending_write is False
    assert memory_store.writes == 1


@pytest.mark.asyncio
async def test_stop_drops_pending_write(memory_store):
    session = PlannerSession("alice", today="2024-01-05")
    controller = _controller(memory_store)
    await controller.start(session)

    session.add_task("never sent")
    controller.stop()
    await asyncio.sleep(DELAY * 5)

    assert memory_store.writes == 0
    assert controller.session is None
    assert controller.loaded is False

    # Detached: later edits are not observed either
    session.add_task("also never sent")
    assert controller.has_pending_write is False


@pytest.mark.asyncio
async def test_start_same_session_twice_loads_once(memory_store):
    session = PlannerSession("alice", today="2024-01-05")
    store = AsyncMock(wraps=memory_store)
    controller = _controller(store)

    await asyncio.gather(controller.start(session), controller.start(session))

    assert store.find.await_count == 1


@pytest.mark.asyncio
async def test_malformed_search_rows_are_swallowed(sample_data):
    client = httpx.AsyncClient(
        transport=httpx.MockTransport(lambda r: httpx.Response(200, json=["garbage"]))
    )
    store = SheetStore("https://sheet.test/api/v1/abc", client=client)
    session = PlannerSession("alice", data=sample_data, today="2024-01-05")
    controller = _controller(store)

    await controller.start(session)

    assert session.data is sample_data
    assert controller.loaded is True
    assert controller.last_synced is None
