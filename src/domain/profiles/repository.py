"""Repository for ``Profile``; all operations come from ``BaseRepository``."""

from sqlalchemy.ext.asyncio import AsyncSession

from src.domain.profiles.models import Profile
from src.infrastructure.database.dependencies import DatabaseSession
from src.infrastructure.database.repository import BaseRepository


class ProfileRepository(BaseRepository[Profile]):
    """Generic CRUD bound to the ``profile`` table."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Profile)


async def get_profile_repository(session: DatabaseSession) -> ProfileRepository:
    """FastAPI dependency building a repository on the request session."""
    return ProfileRepository(session)
