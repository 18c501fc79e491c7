"""Data store capability and adapters."""

from validation_engine.data.store import (
    STAGING_TABLE,
    DataStore,
    QueryResult,
    Row,
    SQLiteDataStore,
    Statement,
)

__all__ = [
    "STAGING_TABLE",
    "DataStore",
    "QueryResult",
    "Row",
    "SQLiteDataStore",
    "Statement",
]
