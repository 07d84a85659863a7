"""
Generic class-based CRUD shared by the ticket repositories.

Writes default to ``commit=False``: services own the transaction boundary
(see core.decorators.transactional_database_operation).
"""
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel

ModelType = TypeVar("ModelType", bound=SQLModel)


class BaseCRUD(Generic[ModelType]):
    """
    Common lookups and writes for one table.

    Usage:
        class SiteCRUD(BaseCRUD[Site]):
            model = Site
    """

    model: Type[ModelType] = None

    @classmethod
    def _apply_filters(cls, stmt, filters: Optional[Dict[str, Any]]):
        for field, value in (filters or {}).items():
            stmt = stmt.where(getattr(cls.model, field) == value)
        return stmt

    @classmethod
    async def find_by_id(cls, db: AsyncSession, id_value: Any) -> Optional[ModelType]:
        """Single record by primary key, or None."""
        result = await db.execute(select(cls.model).where(cls.model.id == id_value))
        return result.scalar_one_or_none()

    @classmethod
    async def find_all(
        cls,
        db: AsyncSession,
        *,
        filters: Optional[Dict[str, Any]] = None,
        order_by: Optional[Any] = None,
        limit: Optional[int] = None,
    ) -> List[ModelType]:
        """
        All records matching equality filters.

        Args:
            db: Database session
            filters: Dictionary of field:value filters
            order_by: Column or tuple of columns to order by
            limit: Maximum number of records
        """
        stmt = cls._apply_filters(select(cls.model), filters)

        if order_by is not None:
            if isinstance(order_by, (list, tuple)):
                stmt = stmt.order_by(*order_by)
            else:
                stmt = stmt.order_by(order_by)

        if limit:
            stmt = stmt.limit(limit)

        result = await db.execute(stmt)
        return list(result.scalars().all())

    @classmethod
    async def count(cls, db: AsyncSession, *, filters: Optional[Dict[str, Any]] = None) -> int:
        stmt = cls._apply_filters(select(func.count(cls.model.id)), filters)
        result = await db.execute(stmt)
        return result.scalar() or 0

    @classmethod
    async def create(
        cls,
        db: AsyncSession,
        *,
        obj_in: Dict[str, Any],
        commit: bool = False,
    ) -> ModelType:
        """
        Insert a record. Without commit the row is flushed so its id is populated.
        """
        db_obj = cls.model(**obj_in)
        db.add(db_obj)

        if commit:
            await db.commit()
        else:
            await db.flush()
        await db.refresh(db_obj)

        return db_obj
