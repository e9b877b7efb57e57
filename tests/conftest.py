"""Pytest configuration: settings isolation and record store fixtures.

IMPORTANT: WHV_ENV_FILE is pointed at a file that does not exist BEFORE the
package is imported, so a developer's .env never leaks into the test run.
"""

from __future__ import annotations

import os

os.environ["WHV_ENV_FILE"] = ".env.pytest-isolated"

from typing import Generator  # noqa: E402

import pytest  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.engine import Engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from tests.fixtures.verification_gateway import TEST_PROXY_URL  # noqa: E402
from work_history_verification.config.settings import get_settings  # noqa: E402
from work_history_verification.infrastructure.verification.repository import (  # noqa: E402
    SqlRecordStore,
)


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Strip WHV_* variables from the host and pin test defaults."""
    for key in list(os.environ):
        if key.startswith("WHV_") and key != "WHV_ENV_FILE":
            monkeypatch.delenv(key, raising=False)
    monkeypatch.delenv("ENVIRONMENT", raising=False)
    monkeypatch.setenv("WHV_GATEWAY_PROXY_URL", TEST_PROXY_URL)
    monkeypatch.setenv("WHV_DATABASE_URI", "sqlite://")

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def engine() -> Generator[Engine, None, None]:
    """In-memory SQLite shared by every connection of one test."""
    test_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    yield test_engine
    test_engine.dispose()


@pytest.fixture
def store(engine: Engine) -> SqlRecordStore:
    record_store = SqlRecordStore(engine)
    record_store.create_schema()
    return record_store
