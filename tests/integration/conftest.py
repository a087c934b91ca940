"""Shared fixtures for integration tests.

The full application stack runs in-process. Profiles are stored through the
real ``ProfileRepository`` and request-scoped sessions in an in-memory SQLite
database, S3 is a botocore ``Stubber`` on a real client, and the results API
is an ``httpx.MockTransport``.
"""

from collections.abc import AsyncGenerator, Generator

import boto3
import httpx
import pytest
from botocore.stub import Stubber
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from src.api.main import create_app
from src.core.config import ComprehendConfig, Settings, StorageConfig, get_settings
from src.core.context import RequestContext
from src.domain.profiles.models import Profile  # noqa: F401 - registers the table
from src.infrastructure.comprehend import ComprehendResultsClient, get_comprehend_client
from src.infrastructure.database.base import Base
from src.infrastructure.database.session import _db_manager
from src.infrastructure.storage import StorageClient, get_storage_client

RESULTS_BODY = '{"Item": {"id": "42", "Sentiment": "POSITIVE"}}'


@pytest.fixture(autouse=True)
def clear_settings_cache() -> Generator[None]:
    get_settings.cache_clear()
    RequestContext.clear()
    yield
    get_settings.cache_clear()
    RequestContext.clear()


@pytest.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine]:
    """Fresh in-memory database with the schema created from the models.

    ``StaticPool`` keeps the single connection alive, so every session sees
    the same database.
    """
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def database(
    db_engine: AsyncEngine, session_factory: async_sessionmaker[AsyncSession]
) -> Generator[None]:
    """Point the process-wide database manager at the test engine.

    Routes then go through the real ``get_db`` dependency and its
    commit/rollback handling.
    """
    _db_manager._engine = db_engine
    _db_manager._async_session_factory = session_factory
    yield
    _db_manager.reset()


@pytest.fixture
def s3_stubber() -> Generator[Stubber]:
    s3 = boto3.client(
        "s3",
        region_name="us-east-1",
        endpoint_url="http://localhost:9000",
        aws_access_key_id="test",
        aws_secret_access_key="test",
    )
    with Stubber(s3) as stubber:
        yield stubber


@pytest.fixture
def results_requests() -> list[httpx.Request]:
    return []


@pytest.fixture
def app(
    database: None,
    s3_stubber: Stubber,
    results_requests: list[httpx.Request],
) -> FastAPI:
    _ = database  # Ensure fixture runs first

    def results_handler(request: httpx.Request) -> httpx.Response:
        results_requests.append(request)
        if request.url.params.get("id") == "missing":
            return httpx.Response(404, json={"message": "Not Found"})
        return httpx.Response(200, text=RESULTS_BODY)

    storage = StorageClient(
        StorageConfig(endpoint_url="http://localhost:9000"),
        s3_client=s3_stubber.client,
    )
    results_client = ComprehendResultsClient(
        ComprehendConfig(base_uri="https://results.example.com/beta"),
        transport=httpx.MockTransport(results_handler),
    )

    application = create_app(Settings(observability_config={"enable_tracing": False}))
    application.dependency_overrides[get_storage_client] = lambda: storage
    application.dependency_overrides[get_comprehend_client] = lambda: results_client
    return application


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def results_body() -> str:
    return RESULTS_BODY
