"""Multipart upload endpoints forwarding files to object storage."""

from typing import Annotated

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import PlainTextResponse
from loguru import logger

from src.infrastructure.storage import StorageClient, get_storage_client

router = APIRouter(tags=["uploads"])

Storage = Annotated[StorageClient, Depends(get_storage_client)]


@router.post("/uploadFile", response_class=PlainTextResponse)
async def upload_file(file: Annotated[UploadFile, File()], storage: Storage) -> str:
    """Store ``file`` in the files bucket and return its URL."""
    logger.debug("REST request to upload file : {}", file.filename)
    return await storage.upload_file(file)


@router.post("/uploadAudio", response_class=PlainTextResponse)
async def upload_audio(audio: Annotated[UploadFile, File()], storage: Storage) -> str:
    """Store ``audio`` in the audio bucket and return its URL."""
    logger.debug("REST request to upload audio : {}", audio.filename)
    return await storage.upload_audio(audio)
