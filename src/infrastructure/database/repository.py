"""Generic async repository implementing CRUD for any ``BaseModel``.

Repositories never commit: they flush so that server-generated values are
available, and leave the transaction to the session owner (see
``get_async_session``).
"""

from collections.abc import Mapping

from loguru import logger
from sqlalchemy import Select, func, select
from sqlalchemy import delete as sql_delete
from sqlalchemy.ext.asyncio import AsyncSession

from src.infrastructure.database.base import BaseModel


class BaseRepository[T: BaseModel]:
    """CRUD operations over one model class.

    Args:
        session: The async SQLAlchemy session to use for operations.
        model_class: The SQLAlchemy model class this repository manages.

    Example:
        class ProfileRepository(BaseRepository[Profile]):
            def __init__(self, session: AsyncSession) -> None:
                super().__init__(session, Profile)
    """

    def __init__(self, session: AsyncSession, model_class: type[T]) -> None:
        self.session = session
        self.model_class = model_class

    @property
    def _name(self) -> str:
        return self.model_class.__name__

    async def get_by_id(self, entity_id: int) -> T | None:
        """Return the instance with the given primary key, or None."""
        logger.debug("Fetching {} by ID: {}", self._name, entity_id)

        stmt = select(self.model_class).where(self.model_class.id == entity_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_all(self, skip: int = 0, limit: int | None = None) -> list[T]:
        """Return instances ordered by ID.

        Args:
            skip: Number of records to skip.
            limit: Maximum number of records to return; None returns all.

        Returns:
            list[T]: List of model instances.
        """
        logger.debug(
            "Fetching all {} - skip: {}, limit: {}", self._name, skip, limit
        )

        stmt = select(self.model_class).order_by(self.model_class.id).offset(skip)
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def create(self, obj: T) -> T:
        """Insert a new instance.

        Args:
            obj: The model instance to create.

        Returns:
            T: The same instance with ID and timestamps populated.
        """
        self.session.add(obj)
        await self.session.flush()
        await self.session.refresh(obj)

        logger.info("Created {} instance with ID: {}", self._name, obj.id)
        return obj

    async def save(self, obj: T) -> T:
        """Fully replace the stored row with ``obj``, or insert it.

        Columns set on ``obj`` overwrite the stored row. When no row has that
        ID, ``obj`` is inserted under a newly generated ID instead: explicit
        IDs would not advance the primary key sequence.

        Args:
            obj: Detached or transient instance, usually with ``id`` set.

        Returns:
            T: The persistent instance, refreshed from the database.
        """
        if obj.id is None or await self.session.get(self.model_class, obj.id) is None:
            logger.debug(
                "{} with ID {} not stored, inserting with a new ID", self._name, obj.id
            )
            obj.id = None  # type: ignore[assignment]
            return await self.create(obj)

        merged = await self.session.merge(obj)
        await self.session.flush()
        await self.session.refresh(merged)

        logger.info("Saved {} instance with ID: {}", self._name, merged.id)
        return merged

    async def update(self, entity_id: int, data: Mapping[str, object]) -> T | None:
        """Apply a partial update to the instance with the given ID.

        Args:
            entity_id: The primary key ID of the model to update.
            data: Fields to update. Unknown fields are skipped with a warning.

        Returns:
            T | None: The updated instance, or None when it does not exist.
        """
        instance = await self.get_by_id(entity_id)
        if instance is None:
            return None

        for key, value in data.items():
            if hasattr(instance, key):
                setattr(instance, key, value)
            else:
                logger.warning(
                    "Attempted to update non-existent field '{}' on {}",
                    key,
                    self._name,
                )

        await self.session.flush()
        await self.session.refresh(instance)

        logger.info(
            "Updated {} instance ID {} - fields: {}",
            self._name,
            entity_id,
            list(data.keys()),
        )
        return instance

    async def delete(self, entity_id: int) -> bool:
        """Delete the instance with the given ID.

        Returns:
            bool: True if a row was deleted, False if none matched.
        """
        stmt = sql_delete(self.model_class).where(self.model_class.id == entity_id)
        result = await self.session.execute(stmt)
        deleted = result.rowcount > 0

        if deleted:
            logger.info("Deleted {} instance with ID: {}", self._name, entity_id)
        else:
            logger.debug(
                "{} instance not found for deletion - ID: {}", self._name, entity_id
            )
        return deleted

    async def count(self) -> int:
        """Count all rows of the model."""
        stmt = select(func.count()).select_from(self.model_class)
        result = await self.session.execute(stmt)
        return result.scalar() or 0

    async def exists(self, entity_id: int) -> bool:
        """Check whether a row with the given ID exists."""
        stmt = (
            select(func.count())
            .select_from(self.model_class)
            .where(self.model_class.id == entity_id)
        )
        result = await self.session.execute(stmt)
        return (result.scalar() or 0) > 0

    def _filtered_select(self, filters: Mapping[str, object]) -> Select[tuple[T]]:
        stmt = select(self.model_class)
        for field, value in filters.items():
            if hasattr(self.model_class, field):
                stmt = stmt.where(getattr(self.model_class, field) == value)
            else:
                logger.warning(
                    "Attempted to filter by non-existent field '{}' on {}",
                    field,
                    self._name,
                )
        return stmt.order_by(self.model_class.id)

    async def filter_by(self, **kwargs: object) -> list[T]:
        """Return all instances whose fields equal the given values."""
        result = await self.session.execute(self._filtered_select(kwargs))
        return list(result.scalars().all())

    async def find_one_by(self, **kwargs: object) -> T | None:
        """Return the first instance (by ID) whose fields equal the given values."""
        result = await self.session.execute(self._filtered_select(kwargs).limit(1))
        return result.scalar_one_or_none()
