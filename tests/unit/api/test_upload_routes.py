"""Tests for the /uploadFile and /uploadAudio endpoints."""

import pytest
from httpx import AsyncClient
from pytest_mock import MockType

from src.core.exceptions import ExternalServiceError

FILE_URL = "https://s3.us-east-1.amazonaws.com/comprehend-files/1718366400000-notes.txt"
AUDIO_URL = "https://s3.us-east-1.amazonaws.com/comprehend-audio/1718366400000-a.mp3"


@pytest.mark.unit
class TestUploads:
    async def test_upload_file_returns_url_as_text(
        self, client: AsyncClient, mock_storage: MockType
    ) -> None:
        mock_storage.upload_file.return_value = FILE_URL

        response = await client.post(
            "/uploadFile", files={"file": ("notes.txt", b"hello", "text/plain")}
        )

        assert response.status_code == 200
        assert response.text == FILE_URL
        assert response.headers["content-type"].startswith("text/plain")
        upload = mock_storage.upload_file.call_args.args[0]
        assert upload.filename == "notes.txt"
        assert upload.content_type == "text/plain"

    async def test_upload_audio_returns_url_as_text(
        self, client: AsyncClient, mock_storage: MockType
    ) -> None:
        mock_storage.upload_audio.return_value = AUDIO_URL

        response = await client.post(
            "/uploadAudio", files={"audio": ("a.mp3", b"ID3", "audio/mpeg")}
        )

        assert response.status_code == 200
        assert response.text == AUDIO_URL
        mock_storage.upload_file.assert_not_called()

    @pytest.mark.parametrize(
        ("path", "part"),
        [("/uploadFile", "audio"), ("/uploadAudio", "file")],
    )
    async def test_wrong_part_name_is_rejected(
        self, client: AsyncClient, mock_storage: MockType, path: str, part: str
    ) -> None:
        response = await client.post(path, files={part: ("x.bin", b"x")})

        assert response.status_code == 422
        mock_storage.upload_file.assert_not_called()
        mock_storage.upload_audio.assert_not_called()

    async def test_storage_failure_is_bad_gateway(
        self, client: AsyncClient, mock_storage: MockType
    ) -> None:
        mock_storage.upload_file.side_effect = ExternalServiceError(
            "Failed to upload", service="storage", status_code=403
        )

        response = await client.post(
            "/uploadFile", files={"file": ("notes.txt", b"hello", "text/plain")}
        )

        assert response.status_code == 502
        body = response.json()
        assert body["error_code"] == "EXTERNAL_SERVICE_ERROR"
        assert body["details"]["service"] == "storage"
