"""FastAPI dependency providing a request-scoped database session."""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.infrastructure.database.session import get_async_session


async def get_db() -> AsyncGenerator[AsyncSession]:
    """Yield a session that commits after the handler returns.

    The session is rolled back if the handler raises.

    Yields:
        AsyncGenerator[AsyncSession]: Session bound to the current request.

    Example:
        @router.get("/profiles")
        async def list_profiles(db: DatabaseSession):
            result = await db.execute(select(Profile))
            return result.scalars().all()
    """
    async with get_async_session() as session:
        yield session


DatabaseSession = Annotated[AsyncSession, Depends(get_db)]
