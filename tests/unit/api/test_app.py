"""Tests for the application factory, lifespan and monitoring endpoints."""

import pytest
from fastapi import FastAPI
from httpx import AsyncClient
from pytest_mock import MockerFixture

from src.api.main import lifespan


@pytest.mark.unit
class TestMonitoringEndpoints:
    async def test_health(self, client: AsyncClient, mocker: MockerFixture) -> None:
        mocker.patch("src.api.main.check_database_connection", return_value=(True, None))

        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "database": True}

    async def test_health_degraded(
        self, client: AsyncClient, mocker: MockerFixture
    ) -> None:
        mocker.patch(
            "src.api.main.check_database_connection",
            return_value=(False, "connection refused"),
        )

        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "degraded", "database": False}

    async def test_info(self, client: AsyncClient) -> None:
        response = await client.get("/info")

        assert response.status_code == 200
        assert response.json() == {
            "app_name": "Comprehend",
            "version": "0.1.0",
            "environment": "development",
            "debug": True,
        }

    def test_routes_registered(self, app: FastAPI) -> None:
        paths = {getattr(route, "path", None) for route in app.routes}

        assert {
            "/api/profiles",
            "/api/profiles/{profile_id}",
            "/uploadFile",
            "/uploadAudio",
            "/getComprehendResults/",
            "/health",
            "/info",
        } <= paths


@pytest.mark.unit
class TestLifespan:
    async def test_startup_and_shutdown(self, mocker: MockerFixture) -> None:
        mocker.patch("src.api.main.check_database_connection", return_value=(True, None))
        close_client = mocker.patch("src.api.main.close_comprehend_client")
        close_db = mocker.patch("src.api.main.close_database")

        async with lifespan(FastAPI(title="Comprehend")):
            close_db.assert_not_called()

        close_client.assert_awaited_once()
        close_db.assert_awaited_once()

    async def test_startup_fails_without_database(self, mocker: MockerFixture) -> None:
        mocker.patch(
            "src.api.main.check_database_connection",
            return_value=(False, "connection refused"),
        )

        with pytest.raises(RuntimeError, match="connection refused"):
            async with lifespan(FastAPI()):
                pass
