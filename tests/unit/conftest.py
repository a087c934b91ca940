"""Shared fixtures for unit tests."""

import os
from collections.abc import Callable, Generator
from datetime import UTC, datetime
from typing import cast

import pytest
from pytest_mock import MockerFixture, MockType
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.config import Settings, get_settings
from src.core.context import RequestContext
from src.core.error_context import _get_sensitive_fields
from src.domain.profiles.models import Profile
from src.infrastructure.storage import get_storage_client


@pytest.fixture
def mock_settings(monkeypatch: pytest.MonkeyPatch) -> Settings:
    """Provide a real Settings object built from test environment values.

    Returns:
        Settings: Settings with test defaults.
    """
    monkeypatch.setenv("APP_NAME", "TestApp")
    monkeypatch.setenv("APP_VERSION", "1.0.0")
    monkeypatch.setenv("ENVIRONMENT", "development")
    monkeypatch.setenv("DEBUG", "false")
    monkeypatch.setenv("API_HOST", "127.0.0.1")
    monkeypatch.setenv("API_PORT", "3000")
    monkeypatch.setenv("OBSERVABILITY_CONFIG__ENABLE_TRACING", "false")

    return Settings()


@pytest.fixture(autouse=True)
def clean_lru_cache() -> Generator[None]:
    """Clear cached settings and clients before and after each test."""
    get_settings.cache_clear()
    get_storage_client.cache_clear()
    _get_sensitive_fields.cache_clear()
    yield
    get_settings.cache_clear()
    get_storage_client.cache_clear()
    _get_sensitive_fields.cache_clear()


@pytest.fixture(autouse=True)
def clean_env(
    monkeypatch: pytest.MonkeyPatch,
) -> Generator[pytest.MonkeyPatch]:
    """Remove application env vars so each test sees the defaults.

    Cloud detection variables are left alone; tests that care about them
    set or delete them explicitly.
    """
    original_env = os.environ.copy()

    env_prefixes = [
        "APP_",
        "API_",
        "ENVIRONMENT",
        "DEBUG",
        "LOG_CONFIG__",
        "OBSERVABILITY_CONFIG__",
        "DATABASE_CONFIG__",
        "STORAGE_CONFIG__",
        "COMPREHEND_CONFIG__",
    ]
    for key in list(os.environ.keys()):
        if any(key.startswith(prefix) for prefix in env_prefixes):
            monkeypatch.delenv(key, raising=False)

    yield monkeypatch

    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture(autouse=True)
def clean_context() -> Generator[None]:
    """Clear the request context before and after each test."""
    RequestContext.clear()
    yield
    RequestContext.clear()



@pytest.fixture
def mock_async_session(mocker: MockerFixture) -> MockType:
    """Mock AsyncSession with the methods repositories call.

    Returns:
        MockType: Session whose ``add`` is sync and everything else awaitable.
    """
    session = mocker.Mock(spec=AsyncSession)
    session.add = mocker.Mock()
    session.execute = mocker.AsyncMock(return_value=mocker.MagicMock())
    session.flush = mocker.AsyncMock()
    session.refresh = mocker.AsyncMock()
    session.get = mocker.AsyncMock()
    session.merge = mocker.AsyncMock()
    session.commit = mocker.AsyncMock()
    session.rollback = mocker.AsyncMock()
    return cast("MockType", session)


@pytest.fixture
def make_profile() -> Callable[..., Profile]:
    """Factory for persisted-looking ``Profile`` instances."""

    def _make(profile_id: int = 1, name: str = "Ada Lovelace", **fields: object) -> Profile:
        timestamp = datetime(2024, 6, 14, 12, 0, tzinfo=UTC)
        profile = Profile(name=name, **fields)
        profile.id = profile_id
        profile.created_at = timestamp
        profile.updated_at = timestamp
        return profile

    return _make
