"""SQLite-backed record store.

All tables share one ``records`` table: each row keeps the logical table name,
the record id and the record itself as JSON. Filters and ordering go through
``json_extract`` with bound parameters.
"""

from __future__ import annotations

import json
import sqlite3
from pathlib import Path
from typing import Any, Mapping

import aiosqlite

from .exceptions import StoreError
from .logging_config import get_logger
from .store import Record, stamp_record

logger = get_logger(__name__)

_SCHEMA = """
PRAGMA journal_mode=WAL;
CREATE TABLE IF NOT EXISTS records(
    seq INTEGER PRIMARY KEY AUTOINCREMENT,
    table_name TEXT NOT NULL,
    id TEXT NOT NULL UNIQUE,
    created_at TEXT NOT NULL,
    data TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_records_table ON records(table_name);
"""


def _json_path(field: str) -> str:
    return f'$."{field}"'


class SqliteRecordStore:
    def __init__(self, path: str) -> None:
        self.path = path

    async def init(self) -> None:
        if self.path != ":memory:":
            Path(self.path).parent.mkdir(parents=True, exist_ok=True)
        try:
            async with aiosqlite.connect(self.path) as db:
                await db.executescript(_SCHEMA)
                await db.commit()
        except sqlite3.Error as exc:
            raise StoreError(f"Unable to initialise database {self.path}: {exc}") from exc
        logger.info("sqlite_store_ready", path=self.path)

    async def insert(self, table: str, record: Mapping[str, Any]) -> str:
        if not table:
            raise StoreError("Table name is required", retryable=False)
        stamped = stamp_record(record)
        try:
            payload = json.dumps(stamped, ensure_ascii=False)
        except (TypeError, ValueError) as exc:
            raise StoreError(
                f"Record for {table!r} is not serialisable: {exc}", retryable=False
            ) from exc

        try:
            async with aiosqlite.connect(self.path) as db:
                await db.execute(
                    "INSERT INTO records(table_name, id, created_at, data) VALUES (?,?,?,?)",
                    (table, stamped["id"], stamped["created_at"], payload),
                )
                await db.commit()
        except sqlite3.IntegrityError as exc:
            raise StoreError(
                f"Constraint violation on {table!r}: {exc}", retryable=False
            ) from exc
        except sqlite3.Error as exc:
            raise StoreError(
                f"Insert into {table!r} failed: {exc}",
                retryable=isinstance(exc, sqlite3.OperationalError),
            ) from exc

        logger.debug("sqlite_record_inserted", table=table, record_id=stamped["id"])
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
        clauses = ["table_name = ?"]
        params: list[Any] = [table]
        for key, value in (filters or {}).items():
            if value is None:
                clauses.append("json_extract(data, ?) IS NULL")
                params.append(_json_path(key))
            else:
                clauses.append("json_extract(data, ?) = ?")
                params.extend([_json_path(key), value])

        direction = "DESC" if descending else "ASC"
        order_terms: list[str] = []
        if order_by:
            order_terms.append(f"json_extract(data, ?) {direction}")
            params.append(_json_path(order_by))
        order_terms.append(f"seq {direction}")

        sql = f"SELECT data FROM records WHERE {' AND '.join(clauses)} ORDER BY {', '.join(order_terms)}"
        if limit is not None:
            sql += " LIMIT ?"
            params.append(max(limit, 0))

        try:
            async with aiosqlite.connect(self.path) as db:
                cursor = await db.execute(sql, tuple(params))
                rows = await cursor.fetchall()
                await cursor.close()
        except sqlite3.Error as exc:
            raise StoreError(
                f"Query on {table!r} failed: {exc}",
                retryable=isinstance(exc, sqlite3.OperationalError),
            ) from exc

        return [json.loads(row[0]) for row in rows]
