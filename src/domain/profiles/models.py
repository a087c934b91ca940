"""SQLAlchemy model for the ``profile`` table."""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from src.infrastructure.database.base import BaseModel

ENTITY_NAME = "profile"


class Profile(BaseModel):
    """A profile and the URLs of the file and audio uploaded for it."""

    __tablename__ = "profile"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    file_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    audio_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)
