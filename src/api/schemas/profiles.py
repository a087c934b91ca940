"""Request and response models for the profile endpoints."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class ProfileBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255, examples=["Ada Lovelace"])
    email: str | None = Field(
        default=None, max_length=255, examples=["ada@example.com"]
    )
    file_url: str | None = Field(default=None, max_length=1024)
    audio_url: str | None = Field(default=None, max_length=1024)


class ProfileRequest(ProfileBase):
    """Body of ``POST`` and ``PUT /api/profiles``.

    ``id`` must be absent on create; on update it selects the row to replace.
    """

    model_config = ConfigDict(extra="forbid")

    id: int | None = None


class ProfileResponse(ProfileBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    created_at: datetime
    updated_at: datetime
