"""
Remote document stores for Metaplan.

A store keeps one record per user identifier and supports exactly three
calls: find (zero or one record), create, and replace (full overwrite of
the payload). There is no partial update and no version check; the last
replace wins.

Backends:
- MemoryStore: process-local dict (offline use and tests)
- SheetStore: sheet-style REST API over httpx (search / POST / PATCH)
- SQLStore: SQLAlchemy table ``plan_records``
- RedisStore: one JSON row per ``metaplan:record:{user_id}`` key

Every backend raises StoreError for transport or server failures so the
SyncController has a single exception type to catch.
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
from typing import Any, Protocol
from urllib.parse import quote

import httpx
import redis.asyncio as redis
from redis.exceptions import RedisError
from sqlalchemy import create_engine, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from metaplan.config.settings import Settings
from metaplan.lib.exceptions import ConfigurationError, StoreError
from metaplan.models.base import Base
from metaplan.models.record import INFO_FIELDS, PlanRecord, PlanRecordRow

logger = logging.getLogger(__name__)

PAYLOAD_FIELD = "corevalue"


def new_record_id(user_id: str) -> str:
    """Record ids are "{user_id}_{epoch millis}"."""
    return f"{user_id}_{int(time.time() * 1000)}"


class RemoteStore(Protocol):
    """What the SyncController needs from a backing store."""

    async def find(self, user_id: str) -> PlanRecord | None: ...

    async def create(self, user_id: str, payload: str, info: dict[str, str]) -> PlanRecord: ...

    async def replace(self, user_id: str, payload: str, info: dict[str, str]) -> None: ...


def _row_to_record(row: dict[str, Any]) -> PlanRecord:
    return PlanRecord(
        record_id=str(row.get("id", "")),
        user_id=str(row.get("user_id", "")),
        payload=row.get(PAYLOAD_FIELD) or None,
        info={k: str(row[k]) for k in INFO_FIELDS if row.get(k) is not None},
    )


# =============================================================================
# In-memory
# =============================================================================


class MemoryStore:
    """Keeps records in a dict. Useful offline and as a test double."""

    def __init__(self) -> None:
        self._records: dict[str, PlanRecord] = {}
        self.writes = 0

    async def find(self, user_id: str) -> PlanRecord | None:
        return self._records.get(user_id)

    async def create(self, user_id: str, payload: str, info: dict[str, str]) -> PlanRecord:
        record = PlanRecord(
            record_id=new_record_id(user_id), user_id=user_id, payload=payload, info=dict(info)
        )
        self._records[user_id] = record
        return record

    async def replace(self, user_id: str, payload: str, info: dict[str, str]) -> None:
        current = self._records.get(user_id)
        record_id = current.record_id if current else new_record_id(user_id)
        self._records[user_id] = PlanRecord(
            record_id=record_id, user_id=user_id, payload=payload, info=dict(info)
        )
        self.writes += 1


# =============================================================================
# Sheet-style REST API
# =============================================================================


class SheetStore:
    """
    Records as rows in a spreadsheet-backed REST API.

    Endpoints (relative to ``base_url``):
        GET   /search?user_id={id}      -> list of rows
        POST  /                          {"data": [row]}
        PATCH /user_id/{id}              {"data": {...}}

    When several rows match a user, the last one is the live record.

    Args:
        base_url: API root, e.g. "https://sheetdb.io/api/v1/<sheet>".
        client: Optional httpx.AsyncClient (tests inject a MockTransport).
        timeout: Per-request timeout in seconds.
    """

    def __init__(
        self,
        base_url: str,
        client: httpx.AsyncClient | None = None,
        timeout: float = 15.0,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            response = await self._client.request(method, url, **kwargs)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise StoreError(f"{method} {url} failed: {e}") from e
        return response

    async def find(self, user_id: str) -> PlanRecord | None:
        response = await self._request(
            "GET", f"{self._base_url}/search", params={"user_id": user_id}
        )
        try:
            rows = response.json()
        except json.JSONDecodeError as e:
            raise StoreError(f"Search for {user_id!r} returned invalid JSON") from e
        if not isinstance(rows, list) or not rows:
            return None
        if not isinstance(rows[-1], dict):
            raise StoreError(f"Search for {user_id!r} returned a non-object row")
        return _row_to_record(rows[-1])

    async def create(self, user_id: str, payload: str, info: dict[str, str]) -> PlanRecord:
        row = {"id": new_record_id(user_id), "user_id": user_id, PAYLOAD_FIELD: payload, **info}
        await self._request("POST", self._base_url, json={"data": [row]})
        return _row_to_record(row)

    async def replace(self, user_id: str, payload: str, info: dict[str, str]) -> None:
        await self._request(
            "PATCH",
            f"{self._base_url}/user_id/{quote(user_id, safe='')}",
            json={"data": {PAYLOAD_FIELD: payload, **info}},
        )

    async def aclose(self) -> None:
        await self._client.aclose()


# =============================================================================
# SQL
# =============================================================================


class SQLStore:
    """
    Records in a SQL table via SQLAlchemy.

    Queries run on a worker thread (asyncio.to_thread) so the event loop
    never blocks on the database driver.

    Args:
        engine: SQLAlchemy engine. Tables are created if missing.
    """

    def __init__(self, engine: Engine) -> None:
        self._engine = engine
        Base.metadata.create_all(engine)
        self._sessions = sessionmaker(bind=engine, expire_on_commit=False)

    @classmethod
    def from_url(cls, url: str) -> SQLStore:
        return cls(create_engine(url))

    def _latest(self, db: Session, user_id: str) -> PlanRecordRow | None:
        return db.execute(
            select(PlanRecordRow)
            .where(PlanRecordRow.user_id == user_id)
            .order_by(PlanRecordRow.pk.desc())
            .limit(1)
        ).scalar_one_or_none()

    def _find_sync(self, user_id: str) -> PlanRecord | None:
        with self._sessions() as db:
            row = self._latest(db, user_id)
            return row.to_record() if row else None

    def _create_sync(self, user_id: str, payload: str, info: dict[str, str]) -> PlanRecord:
        with self._sessions() as db:
            row = PlanRecordRow(
                record_id=new_record_id(user_id),
                user_id=user_id,
                corevalue=payload,
                **{name: info[name] for name in INFO_FIELDS if name in info},
            )
            db.add(row)
            db.commit()
            return row.to_record()

    def _replace_sync(self, user_id: str, payload: str, info: dict[str, str]) -> None:
        with self._sessions() as db:
            row = self._latest(db, user_id)
            if row is None:
                row = PlanRecordRow(record_id=new_record_id(user_id), user_id=user_id)
                db.add(row)
            row.corevalue = payload
            for name in INFO_FIELDS:
                if name in info:
                    setattr(row, name, info[name])
            db.commit()

    async def _run(self, fn: Any, *args: Any) -> Any:
        try:
            return await asyncio.to_thread(fn, *args)
        except SQLAlchemyError as e:
            raise StoreError(f"SQL store failure: {e}") from e

    async def find(self, user_id: str) -> PlanRecord | None:
        result: PlanRecord | None = await self._run(self._find_sync, user_id)
        return result

    async def create(self, user_id: str, payload: str, info: dict[str, str]) -> PlanRecord:
        result: PlanRecord = await self._run(self._create_sync, user_id, payload, info)
        return result

    async def replace(self, user_id: str, payload: str, info: dict[str, str]) -> None:
        await self._run(self._replace_sync, user_id, payload, info)


# =============================================================================
# Redis
# =============================================================================


class RedisStore:
    """
    One JSON-encoded row per user under ``metaplan:record:{user_id}``.

    Args:
        client: A redis.asyncio client created with decode_responses=True.
    """

    KEY_PREFIX = "metaplan:record:"

    def __init__(self, client: redis.Redis) -> None:
        self._client = client

    @classmethod
    def from_url(cls, url: str) -> RedisStore:
        return cls(redis.from_url(url, decode_responses=True))  # type: ignore[no-untyped-call]

    def _key(self, user_id: str) -> str:
        return f"{self.KEY_PREFIX}{user_id}"

    async def _set_row(self, row: dict[str, Any]) -> None:
        try:
            await self._client.set(self._key(row["user_id"]), json.dumps(row, ensure_ascii=False))
        except RedisError as e:
            raise StoreError(f"Redis write failed: {e}") from e

    async def find(self, user_id: str) -> PlanRecord | None:
        try:
            raw = await self._client.get(self._key(user_id))
        except RedisError as e:
            raise StoreError(f"Redis read failed: {e}") from e
        if raw is None:
            return None
        try:
            row = json.loads(raw)
        except json.JSONDecodeError as e:
            raise StoreError(f"Redis record for {user_id!r} is corrupt") from e
        if not isinstance(row, dict):
            raise StoreError(f"Redis record for {user_id!r} is not an object")
        return _row_to_record(row)

    async def create(self, user_id: str, payload: str, info: dict[str, str]) -> PlanRecord:
        row = {"id": new_record_id(user_id), "user_id": user_id, PAYLOAD_FIELD: payload, **info}
        await self._set_row(row)
        return _row_to_record(row)

    async def replace(self, user_id: str, payload: str, info: dict[str, str]) -> None:
        current = await self.find(user_id)
        record_id = current.record_id if current else new_record_id(user_id)
        await self._set_row(
            {"id": record_id, "user_id": user_id, PAYLOAD_FIELD: payload, **info}
        )


def build_store(settings: Settings) -> RemoteStore:
    """Instantiate the backend selected by METAPLAN_STORE."""
    backend = settings.store_backend
    if backend == "memory":
        logger.info("Using in-memory store (data is not persisted)")
        return MemoryStore()
    if not settings.store_url:
        raise ConfigurationError(f"METAPLAN_STORE_URL is required for the {backend} store")
    logger.info("Using %s store", backend)
    if backend == "http":
        return SheetStore(settings.store_url)
    if backend == "sql":
        return SQLStore.from_url(settings.store_url)
    if backend == "redis":
        return RedisStore.from_url(settings.store_url)
    raise ConfigurationError(f"Unknown store backend {backend!r}")
