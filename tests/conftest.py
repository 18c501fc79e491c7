"""
Global pytest Configuration and Fixtures

Shared fixtures for the validation engine test suite:

- testing_config: TestingConfig with authentication and rate limiting enabled
- duplicate_store / clean_store / empty_store: seeded in-memory SQLite stores
- stub_store: scripted DataStore recording every statement
- registry: ValidationRegistry with the bundled processors over duplicate_store
- engine: initialized ValidationEngine with an authenticated caller
"""

from typing import AsyncGenerator

import pytest
import pytest_asyncio
import structlog

from validation_engine.auth.session import SessionAuthenticator
from validation_engine.config.settings import TestingConfig
from validation_engine.data.store import SQLiteDataStore
from validation_engine.engine import ValidationEngine
from validation_engine.middleware.chain import CallerIdentity
from validation_engine.processors.registry import ValidationRegistry

from tests.fixtures import (
    CLEAN_SEED_ROWS,
    DUPLICATE_SEED_ROWS,
    SENDER_ID,
    USER_ID,
    StubDataStore,
    create_seeded_store,
)


@pytest.fixture(autouse=True)
def clear_log_context():
    """Keep structlog context variables from leaking between tests."""
    structlog.contextvars.clear_contextvars()
    yield
    structlog.contextvars.clear_contextvars()


@pytest.fixture
def testing_config(monkeypatch) -> TestingConfig:
    for key in (
        "AUTH_REQUIRED",
        "RATE_LIMIT_ENABLED",
        "RATE_LIMIT_MAX_REQUESTS",
        "RATE_LIMIT_WINDOW_MS",
        "SLOW_CALL_THRESHOLD_MS",
        "METRICS_ENABLED",
    ):
        monkeypatch.delenv(key, raising=False)
    config = TestingConfig()
    config.METRICS_ENABLED = True
    return config


@pytest_asyncio.fixture
async def duplicate_store() -> AsyncGenerator[SQLiteDataStore, None]:
    store = await create_seeded_store(DUPLICATE_SEED_ROWS)
    yield store
    await store.close()


@pytest_asyncio.fixture
async def clean_store() -> AsyncGenerator[SQLiteDataStore, None]:
    store = await create_seeded_store(CLEAN_SEED_ROWS)
    yield store
    await store.close()


@pytest_asyncio.fixture
async def empty_store() -> AsyncGenerator[SQLiteDataStore, None]:
    store = await create_seeded_store()
    yield store
    await store.close()


@pytest.fixture
def stub_store() -> StubDataStore:
    return StubDataStore()


@pytest.fixture
def registry(duplicate_store) -> ValidationRegistry:
    return ValidationRegistry(store=duplicate_store)


@pytest.fixture
def caller() -> CallerIdentity:
    return CallerIdentity(sender_id=SENDER_ID, user_id=USER_ID)


@pytest_asyncio.fixture
async def engine(testing_config, duplicate_store) -> AsyncGenerator[ValidationEngine, None]:
    authenticator = SessionAuthenticator()
    authenticator.login(SENDER_ID, USER_ID)

    validation_engine = ValidationEngine(
        config=testing_config,
        store=duplicate_store,
        authenticator=authenticator,
        configure_logging=False,
    )
    await validation_engine.init()
    yield validation_engine
    await validation_engine.teardown()
