"""
Generic async CRUD over one ORM model.

Methods take the caller's AsyncSession and never commit; the caller owns
the transaction. Writes are flushed so generated keys and defaults are
visible immediately.

Dependencies: sqlalchemy
System role: Shared persistence operations for model-specific CRUD classes
"""

from typing import Generic, TypeVar
from uuid import UUID

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from knowledge_center.boundary.db.base import Base

ModelT = TypeVar("ModelT", bound=Base)


class BaseCRUD(Generic[ModelT]):
    """
    Primary-key operations for a model with a UUID id column.

    Attributes:
        model: ORM class the operations act on
    """

    def __init__(self, model: type[ModelT]) -> None:
        self.model = model

    async def create(self, session: AsyncSession, **kwargs) -> ModelT:
        """
        Insert a row and return it with server and default values loaded.

        Args:
            session: Async database session
            **kwargs: Column values

        Returns:
            The new instance
        """
        instance = self.model(**kwargs)
        session.add(instance)
        await session.flush()
        await session.refresh(instance)
        return instance

    async def get_by_id(self, session: AsyncSession, id: UUID) -> ModelT | None:
        """Row with the given id, or None."""
        result = await session.execute(select(self.model).where(self.model.id == id))
        return result.scalar_one_or_none()

    async def update_by_id(self, session: AsyncSession, id: UUID, **kwargs) -> ModelT | None:
        """
        Update columns of one row in a single statement.

        Instances already in the session are refreshed with the new values.

        Args:
            session: Async database session
            id: Row id
            **kwargs: Columns to set

        Returns:
            The updated instance, or None when no row has the id
        """
        stmt = (
            update(self.model)
            .where(self.model.id == id)
            .values(**kwargs)
            .returning(self.model)
            .execution_options(populate_existing=True)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def delete_by_id(self, session: AsyncSession, id: UUID) -> bool:
        """Delete one row; returns False when no row had the id."""
        result = await session.execute(delete(self.model).where(self.model.id == id))
        return result.rowcount > 0
