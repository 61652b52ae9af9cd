"""Persistent record store interface and in-memory implementation.

The agent only needs two operations from its store: insert a record into a
table and query a table with equality filters, a descending order and a limit.
Every insert stamps ``id`` and ``created_at``.
"""

from __future__ import annotations

import asyncio
import copy
import uuid
from itertools import count
from typing import Any, Mapping, Protocol, runtime_checkable

from .exceptions import StoreError
from .types import utc_now

Record = dict[str, Any]


@runtime_checkable
class RecordStore(Protocol):
    async def insert(self, table: str, record: Mapping[str, Any]) -> str:
        """Insert *record* into *table* and return the new id."""

    async def query(
        self,
        table: str,
        *,
        filters: Mapping[str, Any] | None = None,
        order_by: str | None = None,
        descending: bool = True,
        limit: int | None = None,
    ) -> list[Record]:
        """Return records of *table* matching every filter."""


def stamp_record(record: Mapping[str, Any]) -> Record:
    """Copy *record* and add ``id``/``created_at`` when missing."""

    stamped = dict(record)
    stamped.setdefault("id", str(uuid.uuid4()))
    stamped.setdefault("created_at", utc_now().isoformat())
    return stamped


def _sort_key(value: Any) -> tuple[int, Any]:
    # Records lacking the order field sort last in descending order.
    return (0, "") if value is None else (1, value)


class InMemoryRecordStore:
    """Dictionary-backed store used for tests and ``store_backend=memory``."""

    def __init__(self) -> None:
        self._tables: dict[str, list[tuple[int, Record]]] = {}
        self._sequence = count()
        self._lock = asyncio.Lock()

    async def insert(self, table: str, record: Mapping[str, Any]) -> str:
        if not table:
            raise StoreError("Table name is required", retryable=False)
        stamped = stamp_record(record)
        async with self._lock:
            rows = self._tables.setdefault(table, [])
            if any(existing["id"] == stamped["id"] for _, existing in rows):
                raise StoreError(
                    f"Duplicate id {stamped['id']!r} in table {table!r}", retryable=False
                )
            rows.append((next(self._sequence), stamped))
        return stamped["id"]

    async def query(
        self,
        table: str,
        *,
        filters: Mapping[str, Any] | None = None,
        order_by: str | None = None,
        descending: bool = True,
        limit: int | None = None,
    ) -> list[Record]:
        async with self._lock:
            rows = list(self._tables.get(table, []))

        if filters:
            rows = [
                (seq, record)
                for seq, record in rows
                if all(record.get(key) == value for key, value in filters.items())
            ]

        if order_by:
            rows.sort(key=lambda row: (_sort_key(row[1].get(order_by)), row[0]), reverse=descending)
        elif descending:
            rows.reverse()

        if limit is not None:
            rows = rows[: max(limit, 0)]
        return [copy.deepcopy(record) for _, record in rows]

    async def count(self, table: str) -> int:
        async with self._lock:
            return len(self._tables.get(table, []))


class ScopedRecordStore:
    """Wrap a store so every record belongs to, and every query is limited to, one user."""

    def __init__(self, inner: RecordStore, user_id: str) -> None:
        if not user_id:
            raise ValueError("user_id is required for a scoped store")
        self._inner = inner
        self.user_id = user_id

    async def insert(self, table: str, record: Mapping[str, Any]) -> str:
        return await self._inner.insert(table, {**record, "user_id": self.user_id})

    async def query(
        self,
        table: str,
        *,
        filters: Mapping[str, Any] | None = None,
        order_by: str | None = None,
        descending: bool = True,
        limit: int | None = None,
    ) -> list[Record]:
        scoped_filters = {**(filters or {}), "user_id": self.user_id}
        return await self._inner.query(
            table,
            filters=scoped_filters,
            order_by=order_by,
            descending=descending,
            limit=limit,
        )
