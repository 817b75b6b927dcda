"""SQLite database client with explicit transactions."""

import asyncio
import json
import logging
import re
import threading
from collections.abc import AsyncIterator, Iterable, Sequence
from contextlib import asynccontextmanager
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import Any

import aiosqlite

from src.core.config import settings


logger = logging.getLogger(__name__)


class DatabaseError(Exception):
    """Raised when a database operation fails."""


class RecordNotFoundError(DatabaseError, KeyError):
    """Raised when a record lookup by id finds nothing."""


def _validate_collection_name(collection: str) -> None:
    """Validate that a collection name contains only alphanumeric characters and underscores."""
    if not re.match(r"^[a-zA-Z_][a-zA-Z0-9_]*$", collection):
        msg = f"Invalid collection name: {collection}. Only alphanumeric characters and underscores are allowed."
        raise ValueError(msg)


def to_db_value(value: Any) -> Any:
    """Convert a Python value into something SQLite stores losslessly."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime | date):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, dict | list):
        return json.dumps(value)
    return value


def _to_params(params: Sequence[Any]) -> list[Any]:
    return [to_db_value(p) for p in params]


def get_db_path(db_path: str | None = None) -> Path:
    """Get the resolved SQLite database file path."""
    path_str = db_path or settings.sqlite_db_path
    return Path(path_str).resolve()


_db_connections: dict[tuple[int, int, str], aiosqlite.Connection] = {}
_transaction_locks: dict[tuple[int, int, str], asyncio.Lock] = {}
_connect_locks: dict[int, asyncio.Lock] = {}


def _cache_key(db_path: str | None) -> tuple[int, int, str]:
    loop = asyncio.get_running_loop()
    return (threading.get_ident(), id(loop), str(get_db_path(db_path)))


async def get_connection(*, db_path: str | None = None) -> aiosqlite.Connection:
    """Get or create a cached connection for the current thread, loop, and db path."""
    cache_key = _cache_key(db_path)

    if cache_key in _db_connections:
        return _db_connections[cache_key]

    connect_lock = _connect_locks.setdefault(cache_key[1], asyncio.Lock())
    async with connect_lock:
        # Double-check after acquiring lock
        if cache_key in _db_connections:
            return _db_connections[cache_key]

        path = Path(cache_key[2])
        path.parent.mkdir(parents=True, exist_ok=True)

        # isolation_level=None: transactions are opened explicitly by transaction()
        conn = await aiosqlite.connect(str(path), isolation_level=None)
        conn.row_factory = aiosqlite.Row
        await conn.execute("PRAGMA foreign_keys = ON")
        await conn.execute("PRAGMA journal_mode = WAL")

        _db_connections[cache_key] = conn
        _transaction_locks[cache_key] = asyncio.Lock()

        logger.info(
            "Created new SQLite connection",
            extra={"db_path": str(path), "thread_id": cache_key[0], "loop_id": cache_key[1]},
        )
        return conn


async def close_connection(*, db_path: str | None = None) -> None:
    """Close the cached SQLite connection for the current thread, loop, and db path."""
    cache_key = _cache_key(db_path)
    conn = _db_connections.pop(cache_key, None)
    _transaction_locks.pop(cache_key, None)
    if conn is None:
        return

    try:
        await conn.close()
        logger.info("Closed SQLite connection", extra={"db_path": cache_key[2]})
    except Exception as e:
        logger.warning("Error closing SQLite connection", extra={"error": str(e), "db_path": cache_key[2]})


class Transaction:
    """Query handle bound to one open transaction.

    Obtained from ``transaction()``; every statement issued through it is part
    of the same BEGIN ... COMMIT/ROLLBACK unit.
    """

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self._conn = conn

    async def execute(self, query: str, params: Sequence[Any] = ()) -> int:
        """Run a statement and return the number of affected rows."""
        cursor = await self._conn.execute(query, _to_params(params))
        return cursor.rowcount

    async def execute_many(self, query: str, rows: Iterable[Sequence[Any]]) -> int:
        """Run a statement once per parameter row and return the row count."""
        param_rows = [_to_params(row) for row in rows]
        if not param_rows:
            return 0
        await self._conn.executemany(query, param_rows)
        return len(param_rows)

    async def insert(self, *, collection: str, data: dict[str, Any]) -> int:
        """Insert one record and return its id."""
        _validate_collection_name(collection)
        columns = ", ".join(data)
        placeholders = ", ".join("?" for _ in data)
        query = f"INSERT INTO {collection} ({columns}) VALUES ({placeholders})"  # noqa: S608 - collection is validated
        cursor = await self._conn.execute(query, _to_params(list(data.values())))
        return cursor.lastrowid

    async def fetch_one(self, query: str, params: Sequence[Any] = ()) -> dict[str, Any] | None:
        """Return the first row of a query as a dict, or None."""
        cursor = await self._conn.execute(query, _to_params(params))
        row = await cursor.fetchone()
        return dict(row) if row is not None else None

    async def fetch_all(self, query: str, params: Sequence[Any] = ()) -> list[dict[str, Any]]:
        """Return every row of a query as dicts."""
        cursor = await self._conn.execute(query, _to_params(params))
        rows = await cursor.fetchall()
        return [dict(row) for row in rows]


@asynccontextmanager
async def transaction(*, db_path: str | None = None) -> AsyncIterator[Transaction]:
    """Open a write transaction that commits on success and rolls back on any error.

    Transactions on the shared connection are serialised by a per-connection
    lock. Never await a network call inside this block.
    """
    conn = await get_connection(db_path=db_path)
    lock = _transaction_locks[_cache_key(db_path)]

    async with lock:
        await conn.execute("BEGIN IMMEDIATE")
        try:
            yield Transaction(conn)
        except BaseException as e:
            # SQLite may already have rolled back on some errors
            if conn.in_transaction:
                await conn.execute("ROLLBACK")
            logger.warning("transaction_rolled_back", extra={"error": str(e), "error_type": type(e).__name__})
            raise
        else:
            await conn.execute("COMMIT")


async def execute(query: str, params: Sequence[Any] = (), *, db_path: str | None = None) -> int:
    """Run a single autocommit statement and return the number of affected rows."""
    async with transaction(db_path=db_path) as tx:
        return await tx.execute(query, params)


async def fetch_one(query: str, params: Sequence[Any] = (), *, db_path: str | None = None) -> dict[str, Any] | None:
    """Run a read query outside any open transaction and return the first row."""
    conn = await get_connection(db_path=db_path)
    async with _transaction_locks[_cache_key(db_path)]:
        return await Transaction(conn).fetch_one(query, params)


async def fetch_all(query: str, params: Sequence[Any] = (), *, db_path: str | None = None) -> list[dict[str, Any]]:
    """Run a read query outside any open transaction and return every row."""
    conn = await get_connection(db_path=db_path)
    async with _transaction_locks[_cache_key(db_path)]:
        return await Transaction(conn).fetch_all(query, params)


async def init_db(*, db_path: str | None = None) -> None:
    """Initialize the database schema."""
    from src.core import schema

    await schema.init_db(db_path=db_path)


async def create_record(*, collection: str, data: dict[str, Any]) -> dict[str, Any]:
    """Insert a new record and return it with its assigned id."""
    try:
        async with transaction() as tx:
            record_id = await tx.insert(collection=collection, data=data)
        logger.info("Created record", extra={"collection": collection, "record_id": record_id})
        return await get_record(collection=collection, record_id=record_id)
    except (RecordNotFoundError, ValueError):
        raise
    except Exception as e:
        if isinstance(e, aiosqlite.OperationalError) and "no such table" in str(e):
            msg = f"Table '{collection}' does not exist. Call init_db() first."
            logger.error("Table not found", extra={"collection": collection})
            raise DatabaseError(msg) from e
        logger.error("create_record_failed", extra={"collection": collection, "error": str(e)})
        msg = f"Failed to create record in {collection}: {e}"
        raise DatabaseError(msg) from e


async def get_record(*, collection: str, record_id: int) -> dict[str, Any]:
    """Fetch a single record by ID, raising RecordNotFoundError if not found."""
    _validate_collection_name(collection)
    try:
        record = await fetch_one(f"SELECT * FROM {collection} WHERE id = ?", (int(record_id),))  # noqa: S608 - collection is validated
    except Exception as e:
        logger.error("get_record_failed", extra={"collection": collection, "record_id": record_id, "error": str(e)})
        msg = f"Failed to get record from {collection}: {e}"
        raise DatabaseError(msg) from e

    if record is None:
        msg = f"Record not found in {collection}: {record_id}"
        raise RecordNotFoundError(msg)
    return record
