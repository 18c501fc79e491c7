"""
Test Fixtures Package

Seed data and stub collaborators shared by the unit and integration suites.
"""

from tests.fixtures.caller_fixtures import SENDER_ID, USER_ID
from tests.fixtures.datastore_fixtures import (
    CLEAN_SEED_ROWS,
    DUPLICATE_SEED_ROWS,
    INSERT_STAGING_ROW,
    STAGING_SCHEMA,
    StubDataStore,
    a3_rows,
    create_seeded_store,
)

__all__ = [
    "CLEAN_SEED_ROWS",
    "DUPLICATE_SEED_ROWS",
    "INSERT_STAGING_ROW",
    "SENDER_ID",
    "STAGING_SCHEMA",
    "StubDataStore",
    "USER_ID",
    "a3_rows",
    "create_seeded_store",
]
