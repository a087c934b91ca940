"""Tests for the /api/profiles endpoints."""

from collections.abc import Callable

import pytest
from httpx import AsyncClient
from pytest_mock import MockType

from src.domain.profiles.models import Profile


@pytest.mark.unit
class TestCreateProfile:
    async def test_created(
        self,
        client: AsyncClient,
        mock_repository: MockType,
        make_profile: Callable[..., Profile],
    ) -> None:
        mock_repository.create.return_value = make_profile(
            1, email="ada@example.com"
        )

        response = await client.post(
            "/api/profiles", json={"name": "Ada Lovelace", "email": "ada@example.com"}
        )

        assert response.status_code == 201
        assert response.headers["location"] == "/api/profiles/1"
        assert response.headers["x-comprehend-alert"] == "comprehend.profile.created"
        assert response.headers["x-comprehend-params"] == "1"
        body = response.json()
        assert body["id"] == 1
        assert body["name"] == "Ada Lovelace"
        assert body["email"] == "ada@example.com"
        assert body["file_url"] is None
        assert "created_at" in body

        stored = mock_repository.create.call_args.args[0]
        assert isinstance(stored, Profile)
        assert stored.id is None
        assert stored.name == "Ada Lovelace"

    @pytest.mark.parametrize("profile_id", [3, 0, -1])
    async def test_rejects_existing_id(
        self, client: AsyncClient, mock_repository: MockType, profile_id: int
    ) -> None:
        response = await client.post(
            "/api/profiles", json={"id": profile_id, "name": "Ada"}
        )

        assert response.status_code == 400
        assert response.headers["x-comprehend-error"] == "error.idexists"
        assert response.headers["x-comprehend-params"] == "profile"
        body = response.json()
        assert body["error_code"] == "ID_EXISTS"
        assert body["message"] == "A new profile cannot already have an ID"
        mock_repository.create.assert_not_called()

    @pytest.mark.parametrize(
        ("payload", "field"),
        [
            ({}, "name"),
            ({"name": ""}, "name"),
            ({"name": "Ada", "nickname": "ada"}, "nickname"),
        ],
    )
    async def test_invalid_body(
        self,
        client: AsyncClient,
        mock_repository: MockType,
        payload: dict[str, object],
        field: str,
    ) -> None:
        response = await client.post("/api/profiles", json=payload)

        assert response.status_code == 422
        body = response.json()
        assert body["error_code"] == "VALIDATION_ERROR"
        assert field in body["details"]["validation_errors"]
        mock_repository.create.assert_not_called()


@pytest.mark.unit
class TestUpdateProfile:
    async def test_replaces_existing(
        self,
        client: AsyncClient,
        mock_repository: MockType,
        make_profile: Callable[..., Profile],
    ) -> None:
        mock_repository.save.return_value = make_profile(
            5, name="Grace Hopper", audio_url="https://s3/a.wav"
        )

        response = await client.put(
            "/api/profiles",
            json={"id": 5, "name": "Grace Hopper", "audio_url": "https://s3/a.wav"},
        )

        assert response.status_code == 200
        assert response.headers["x-comprehend-alert"] == "comprehend.profile.updated"
        assert response.headers["x-comprehend-params"] == "5"
        assert response.json()["audio_url"] == "https://s3/a.wav"
        saved = mock_repository.save.call_args.args[0]
        assert saved.id == 5
        assert saved.email is None

    async def test_unknown_id_reports_generated_id(
        self,
        client: AsyncClient,
        mock_repository: MockType,
        make_profile: Callable[..., Profile],
    ) -> None:
        mock_repository.save.return_value = make_profile(12, name="Grace Hopper")

        response = await client.put(
            "/api/profiles", json={"id": 77, "name": "Grace Hopper"}
        )

        assert response.status_code == 200
        assert response.headers["x-comprehend-params"] == "12"
        assert response.json()["id"] == 12

    async def test_without_id_creates(
        self,
        client: AsyncClient,
        mock_repository: MockType,
        make_profile: Callable[..., Profile],
    ) -> None:
        mock_repository.create.return_value = make_profile(8)

        response = await client.put("/api/profiles", json={"name": "Ada Lovelace"})

        assert response.status_code == 201
        assert response.headers["location"] == "/api/profiles/8"
        assert response.headers["x-comprehend-alert"] == "comprehend.profile.created"
        mock_repository.save.assert_not_called()


@pytest.mark.unit
class TestReadProfiles:
    async def test_list(
        self,
        client: AsyncClient,
        mock_repository: MockType,
        make_profile: Callable[..., Profile],
    ) -> None:
        mock_repository.get_all.return_value = [make_profile(1), make_profile(2, "Grace")]

        response = await client.get("/api/profiles")

        assert response.status_code == 200
        assert [p["id"] for p in response.json()] == [1, 2]
        mock_repository.get_all.assert_awaited_once_with(skip=0, limit=None)

    async def test_list_with_paging(
        self, client: AsyncClient, mock_repository: MockType
    ) -> None:
        mock_repository.get_all.return_value = []

        response = await client.get("/api/profiles", params={"skip": 20, "limit": 10})

        assert response.status_code == 200
        assert response.json() == []
        mock_repository.get_all.assert_awaited_once_with(skip=20, limit=10)

    @pytest.mark.parametrize("params", [{"skip": -1}, {"limit": 0}])
    async def test_list_rejects_bad_paging(
        self, client: AsyncClient, params: dict[str, int]
    ) -> None:
        response = await client.get("/api/profiles", params=params)

        assert response.status_code == 422

    async def test_get_one(
        self,
        client: AsyncClient,
        mock_repository: MockType,
        make_profile: Callable[..., Profile],
    ) -> None:
        mock_repository.get_by_id.return_value = make_profile(4, file_url="https://f")

        response = await client.get("/api/profiles/4")

        assert response.status_code == 200
        assert response.json()["file_url"] == "https://f"
        mock_repository.get_by_id.assert_awaited_once_with(4)

    async def test_get_missing(
        self, client: AsyncClient, mock_repository: MockType
    ) -> None:
        mock_repository.get_by_id.return_value = None

        response = await client.get("/api/profiles/404")

        assert response.status_code == 404
        body = response.json()
        assert body["error_code"] == "NOT_FOUND"
        assert body["details"] == {"entity_name": "profile", "id": 404}

    async def test_get_non_numeric_id(self, client: AsyncClient) -> None:
        response = await client.get("/api/profiles/abc")

        assert response.status_code == 422


@pytest.mark.unit
class TestDeleteProfile:
    async def test_deleted(self, client: AsyncClient, mock_repository: MockType) -> None:
        mock_repository.delete.return_value = True

        response = await client.delete("/api/profiles/6")

        assert response.status_code == 200
        assert response.content == b""
        assert response.headers["x-comprehend-alert"] == "comprehend.profile.deleted"
        assert response.headers["x-comprehend-params"] == "6"
        mock_repository.delete.assert_awaited_once_with(6)

    async def test_delete_missing(
        self, client: AsyncClient, mock_repository: MockType
    ) -> None:
        mock_repository.delete.return_value = False

        response = await client.delete("/api/profiles/6")

        assert response.status_code == 404
        assert "x-comprehend-alert" not in response.headers
