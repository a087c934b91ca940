"""Fixtures for API tests.

The application is built with tracing disabled and every outbound
dependency (repository, storage, results client) replaced through
``dependency_overrides``. The lifespan is not run, so no database is needed.
"""

from collections.abc import AsyncGenerator
from typing import cast

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from pytest_mock import MockerFixture, MockType

from src.api.main import create_app
from src.core.config import Settings
from src.domain.profiles.repository import ProfileRepository, get_profile_repository
from src.infrastructure.comprehend import ComprehendResultsClient, get_comprehend_client
from src.infrastructure.storage import StorageClient, get_storage_client


@pytest.fixture
def api_settings() -> Settings:
    return Settings(observability_config={"enable_tracing": False})


@pytest.fixture
def mock_repository(mocker: MockerFixture) -> MockType:
    return cast("MockType", mocker.MagicMock(spec=ProfileRepository))


@pytest.fixture
def mock_storage(mocker: MockerFixture) -> MockType:
    return cast("MockType", mocker.MagicMock(spec=StorageClient))


@pytest.fixture
def mock_results_client(mocker: MockerFixture) -> MockType:
    return cast("MockType", mocker.MagicMock(spec=ComprehendResultsClient))


@pytest.fixture
def app(
    api_settings: Settings,
    mock_repository: MockType,
    mock_storage: MockType,
    mock_results_client: MockType,
) -> FastAPI:
    application = create_app(api_settings)
    application.dependency_overrides[get_profile_repository] = lambda: mock_repository
    application.dependency_overrides[get_storage_client] = lambda: mock_storage
    application.dependency_overrides[get_comprehend_client] = (
        lambda: mock_results_client
    )
    return application


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
