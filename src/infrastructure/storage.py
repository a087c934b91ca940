"""Object storage client backing the file and audio upload endpoints.

Uploads are stored under ``<epoch millis>-<original name>`` and addressed
as ``<endpoint_url>/<bucket>/<key>``. boto3 is blocking, so every call is
pushed to the threadpool.
"""

import time
from functools import lru_cache
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from fastapi import UploadFile
from loguru import logger
from starlette.concurrency import run_in_threadpool

from src.core.config import StorageConfig, get_settings
from src.core.constants import MILLISECONDS_PER_SECOND
from src.core.exceptions import ExternalServiceError
from src.core.observability import (
    STORAGE_BUCKET_ATTR,
    STORAGE_KEY_ATTR,
    STORAGE_SIZE_ATTR,
    STORAGE_UPLOAD_SPAN,
    trace_operation,
)
from src.infrastructure.constants import DEFAULT_OBJECT_NAME, PUBLIC_READ_ACL

STORAGE_SERVICE = "storage"


def generate_object_name(filename: str | None) -> str:
    """Build the storage key for an uploaded file.

    Examples:
        >>> generate_object_name("my song.mp3")  # doctest: +SKIP
        '1718366400000-my_song.mp3'
    """
    name = (filename or "").strip().replace(" ", "_") or DEFAULT_OBJECT_NAME
    millis = int(time.time() * MILLISECONDS_PER_SECOND)
    return f"{millis}-{name}"


class StorageClient:
    """Thin wrapper over an S3 client.

    Args:
        config: Storage settings (endpoint, buckets, credentials).
        s3_client: Pre-built boto3 S3 client; one is created from ``config``
            when omitted.
    """

    def __init__(self, config: StorageConfig, s3_client: Any = None) -> None:  # noqa: ANN401 - boto3 clients are untyped
        self.config = config
        self._s3 = s3_client or boto3.client(
            "s3",
            endpoint_url=config.endpoint_url,
            region_name=config.region_name,
            aws_access_key_id=config.access_key_id,
            aws_secret_access_key=config.secret_access_key,
        )

    def object_url(self, bucket: str, key: str) -> str:
        """Return the public URL of an object."""
        return f"{self.config.endpoint_url}/{bucket}/{key}"

    async def upload_file(self, upload: UploadFile) -> str:
        """Store a generic file in the files bucket and return its URL."""
        return await self._upload(upload, self.config.files_bucket)

    async def upload_audio(self, upload: UploadFile) -> str:
        """Store an audio file in the audio bucket and return its URL."""
        return await self._upload(upload, self.config.audio_bucket)

    async def _upload(self, upload: UploadFile, bucket: str) -> str:
        key = generate_object_name(upload.filename)
        body = await upload.read()

        put_kwargs: dict[str, Any] = {"Bucket": bucket, "Key": key, "Body": body}
        if upload.content_type:
            put_kwargs["ContentType"] = upload.content_type
        if self.config.public_read:
            put_kwargs["ACL"] = PUBLIC_READ_ACL

        with trace_operation(
            STORAGE_UPLOAD_SPAN,
            {
                STORAGE_BUCKET_ATTR: bucket,
                STORAGE_KEY_ATTR: key,
                STORAGE_SIZE_ATTR: len(body),
            },
        ):
            try:
                await run_in_threadpool(self._s3.put_object, **put_kwargs)
            except (ClientError, BotoCoreError) as e:
                status_code = None
                if isinstance(e, ClientError):
                    status_code = e.response.get("ResponseMetadata", {}).get(
                        "HTTPStatusCode"
                    )
                raise ExternalServiceError(
                    f"Failed to upload '{key}' to bucket '{bucket}'",
                    service=STORAGE_SERVICE,
                    status_code=status_code,
                    context={"bucket": bucket, "key": key},
                    cause=e,
                ) from e

        logger.info(
            "Uploaded {} ({} bytes) to bucket {}",
            key,
            len(body),
            bucket,
            content_type=upload.content_type,
        )
        return self.object_url(bucket, key)


@lru_cache(maxsize=1)
def get_storage_client() -> StorageClient:
    """Return the process-wide storage client."""
    return StorageClient(get_settings().storage_config)
