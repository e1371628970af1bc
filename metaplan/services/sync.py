"""
Debounced write-back of the session document to a remote store.

Lifecycle per session:
1. start(): fetch the user's record. An existing payload replaces local
   state wholesale; no record means a new one is created with an empty
   document. Either way "last synced" is stamped on success.
2. Every snapshot change after the load restarts a single timer. When
   the timer fires, the snapshot current at that moment is serialized and
   sent as a full replacement. Intermediate snapshots are never queued.
3. Load/create/write failures are logged and swallowed. Local state is
   kept and the next successful write carries it.
4. stop(): drop the pending timer and detach from the session. In-flight
   requests are left to finish.

Writes are never sent while the load is in flight, and at most one write
is in flight at a time (an asyncio.Lock serializes them).

Last writer wins: two sessions on the same identifier overwrite each
other's documents.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime
from enum import StrEnum

from metaplan.core.session import PlannerSession
from metaplan.lib.dates import date_info
from metaplan.lib.exceptions import SerializationError, StoreError
from metaplan.models.codec import dump_app_data, load_app_data
from metaplan.models.entities import EMPTY_APP_DATA, AppData
from metaplan.services.stores import RemoteStore

logger = logging.getLogger(__name__)


class SyncStatus(StrEnum):
    IDLE = "idle"
    LOADING = "loading"
    SYNCING = "syncing"


class SyncController:
    """
    Keeps one PlannerSession's document in step with a RemoteStore.

    Args:
        store: Backing RemoteStore.
        delay: Debounce delay in seconds.
        clock: Returns "now" for last-synced stamps and bookkeeping fields.
    """

    def __init__(
        self,
        store: RemoteStore,
        delay: float = 1.5,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._store = store
        self._delay = delay
        self._clock = clock

        self._session: PlannerSession | None = None
        self._unsubscribe: Callable[[], None] | None = None
        self._loading = False
        self._loaded = False
        self._in_flight_writes = 0
        self._timer: asyncio.TimerHandle | None = None
        self._write_task: asyncio.Task[None] | None = None
        self._write_lock = asyncio.Lock()
        self._load_lock = asyncio.Lock()

        self.last_synced: datetime | None = None

    # -------------------------------------------------------------------------
    # Status
    # -------------------------------------------------------------------------

    @property
    def status(self) -> SyncStatus:
        if self._loading:
            return SyncStatus.LOADING
        if self._in_flight_writes:
            return SyncStatus.SYNCING
        return SyncStatus.IDLE

    @property
    def session(self) -> PlannerSession | None:
        return self._session

    @property
    def loaded(self) -> bool:
        return self._loaded

    @property
    def has_pending_write(self) -> bool:
        return self._timer is not None

    # -------------------------------------------------------------------------
    # Load
    # -------------------------------------------------------------------------

    async def start(self, session: PlannerSession) -> None:
        """
        Attach to ``session`` and load its remote document.

        Concurrent calls for the same session share one load.
        """
        async with self._load_lock:
            if self._session is session and self._loaded:
                return
            self.stop()
            self._session = session
            self._unsubscribe = session.subscribe(self._on_change)
            self._loading = True
            try:
                await self._load(session)
            finally:
                self._loading = False
                self._loaded = True

    async def _load(self, session: PlannerSession) -> None:
        user_id = session.user_id
        try:
            record = await self._store.find(user_id)
            if record is not None:
                if record.payload:
                    session.replace_data(load_app_data(record.payload))
                self.last_synced = self._clock()
                logger.info("Loaded document for %s", user_id)
                return

            await self._store.create(user_id, dump_app_data(EMPTY_APP_DATA), date_info(self._clock()))
            session.replace_data(EMPTY_APP_DATA)
            self.last_synced = self._clock()
            logger.info("Created new record for %s", user_id)
        except (StoreError, SerializationError) as e:
            logger.error("Load failed for %s: %s", user_id, e)

    # -------------------------------------------------------------------------
    # Debounced write
    # -------------------------------------------------------------------------

    def _on_change(self, data: AppData) -> None:
        if self._loading or not self._loaded:
            return
        self._restart_timer()

    def _restart_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(self._delay, self._fire)

    def _fire(self) -> None:
        self._timer = None
        self._write_task = asyncio.get_running_loop().create_task(self._write_current())

    async def _write_current(self) -> None:
        async with self._write_lock:
            session = self._session
            if session is None or self._loading:
                return
            self._in_flight_writes += 1
            try:
                payload = dump_app_data(session.data)
                await self._store.replace(session.user_id, payload, date_info(self._clock()))
                self.last_synced = self._clock()
                logger.debug("Synced document for %s", session.user_id)
            except (StoreError, SerializationError) as e:
                logger.error("Sync failed for %s: %s", session.user_id, e)
            finally:
                self._in_flight_writes -= 1

    async def flush(self) -> None:
        """Send the current snapshot now, superseding any pending timer."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        await self._write_current()

    async def wait_idle(self) -> None:
        """Wait for the last started write to finish."""
        if self._write_task is not None:
            await asyncio.shield(self._write_task)

    # -------------------------------------------------------------------------
    # Teardown
    # -------------------------------------------------------------------------

    def stop(self) -> None:
        """Detach from the current session, dropping any pending write."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self._session = None
        self._loaded = False
