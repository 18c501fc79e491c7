"""
Data Store Access Layer

Defines the narrow capability the validation processors consume from the data
store (one parameterized-statement primitive) and ships a SQLite adapter over the
standard library sqlite3 driver.

The adapter runs each statement in a worker thread through asyncio.to_thread so
the event loop only suspends at data-store I/O boundaries. Statements are
serialized with an asyncio.Lock because a sqlite3 connection must not be used by
two threads at once.

Staging table layout queried by the bundled processors::

    financial_data_staging(
        ou TEXT, account TEXT, department TEXT, period_combo TEXT,
        year INTEGER, month INTEGER, amount REAL
    )
"""

import asyncio
import sqlite3
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional, Protocol, Sequence, runtime_checkable

import structlog

from validation_engine.utils.exceptions import DataStoreQueryError, DataStoreUnavailableError

logger = structlog.get_logger("data.store")

STAGING_TABLE = "financial_data_staging"

Row = Mapping[str, Any]


@dataclass(frozen=True)
class Statement:
    """A parameterized SQL statement with positional ``?`` arguments."""
    sql: str
    args: Sequence[Any] = ()


@dataclass(frozen=True)
class QueryResult:
    """Rows returned by a statement, each keyed by column name in select order."""
    rows: List[Row] = field(default_factory=list)


@runtime_checkable
class DataStore(Protocol):
    """Capability consumed by processors: execute one parameterized statement."""

    async def execute(self, statement: Statement) -> QueryResult:
        ...


class SQLiteDataStore:
    """
    SQLite implementation of the DataStore capability.

    Example:
        store = SQLiteDataStore(":memory:")
        await store.connect()
        result = await store.execute(Statement("SELECT COUNT(*) FROM t"))
        await store.close()
    """

    def __init__(self, path: str = ":memory:"):
        self.path = path
        self._connection: Optional[sqlite3.Connection] = None
        self._lock = asyncio.Lock()

    @property
    def is_connected(self) -> bool:
        return self._connection is not None

    async def connect(self) -> None:
        """Open the connection; calling it on an open store is a no-op."""
        if self._connection is not None:
            return
        self._connection = await asyncio.to_thread(self._open)
        logger.info("Data store connected", path=self.path)

    def _open(self) -> sqlite3.Connection:
        connection = sqlite3.connect(self.path, check_same_thread=False, isolation_level=None)
        connection.row_factory = sqlite3.Row
        return connection

    async def close(self) -> None:
        """Close the connection; calling it on a closed store is a no-op."""
        if self._connection is None:
            return
        async with self._lock:
            connection, self._connection = self._connection, None
            await asyncio.to_thread(connection.close)
        logger.info("Data store closed", path=self.path)

    async def execute(self, statement: Statement) -> QueryResult:
        """
        Execute a statement and return its rows.

        Args:
            statement: SQL text and positional arguments

        Returns:
            QueryResult with one mapping per row (empty for non-queries)

        Raises:
            DataStoreUnavailableError: When the store is not connected
            DataStoreQueryError: When the driver rejects the statement
        """
        if self._connection is None:
            raise DataStoreUnavailableError("Data store is not connected")

        async with self._lock:
            try:
                rows = await asyncio.to_thread(self._run, statement)
            except sqlite3.Error as error:
                logger.error(
                    "Statement failed",
                    error=str(error),
                    sql=statement.sql.strip()[:200],
                )
                raise DataStoreQueryError(
                    f"Query failed: {error}",
                    details={"sql": statement.sql.strip()[:200]},
                ) from error
        return QueryResult(rows=rows)

    def _run(self, statement: Statement) -> List[Row]:
        cursor = self._connection.execute(statement.sql, tuple(statement.args))
        try:
            return [dict(row) for row in cursor.fetchall()]
        finally:
            cursor.close()

    async def execute_many(self, sql: str, rows: Sequence[Sequence[Any]]) -> None:
        """Execute one statement for every argument tuple (bulk inserts)."""
        if self._connection is None:
            raise DataStoreUnavailableError("Data store is not connected")

        async with self._lock:
            try:
                await asyncio.to_thread(self._connection.executemany, sql, [tuple(r) for r in rows])
            except sqlite3.Error as error:
                raise DataStoreQueryError(f"Query failed: {error}") from error


__all__ = [
    "STAGING_TABLE",
    "Row",
    "Statement",
    "QueryResult",
    "DataStore",
    "SQLiteDataStore",
]
