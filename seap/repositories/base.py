"""
Base repository with generic CRUD operations.
"""
import logging
import uuid
from contextlib import asynccontextmanager
from typing import TypeVar, Generic, Type, Optional, List, Any
from datetime import datetime

from sqlmodel import SQLModel, select
from sqlmodel.ext.asyncio.session import AsyncSession
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, OperationalError, TimeoutError as PoolTimeoutError

from seap.core.exceptions import ConflictError, TransientError
from seap.core.pagination import create_paginated_response

logger = logging.getLogger(__name__)

ModelType = TypeVar("ModelType", bound=SQLModel)


@asynccontextmanager
async def store_errors(session: AsyncSession, conflict_message: str = "Resource already exists"):
    """Translate driver failures into the API error taxonomy, rolling back first."""
    try:
        yield
    except IntegrityError as e:
        await session.rollback()
        logger.info(f"Constraint violation: {e.orig}")
        raise ConflictError(conflict_message)
    except (OperationalError, PoolTimeoutError, TimeoutError) as e:
        await session.rollback()
        logger.warning(f"Store unavailable: {e}")
        raise TransientError()


class BaseRepository(Generic[ModelType]):
    """
    Generic repository with CRUD operations.
    Inherit and specify the model class.
    """

    def __init__(self, model: Type[ModelType], session: AsyncSession):
        self.model = model
        self.session = session

    async def commit(self, conflict_message: str = "Resource already exists") -> None:
        async with store_errors(self.session, conflict_message):
            await self.session.commit()

    @asynccontextmanager
    async def transaction(self, conflict_message: str = "Resource already exists"):
        """Group staged writes into one commit; roll everything back on error."""
        async with store_errors(self.session, conflict_message):
            try:
                yield
            except Exception:
                await self.session.rollback()
                raise
            await self.session.commit()

    async def create(self, obj_in: dict) -> ModelType:
        """Create a new record."""
        db_obj = self.model(**obj_in)
        self.session.add(db_obj)
        await self.commit(f"{self.model.__name__} already exists")
        await self.session.refresh(db_obj)
        return db_obj

    async def get(self, id: uuid.UUID) -> Optional[ModelType]:
        """Get a record by ID."""
        return await self.session.get(self.model, id)

    async def get_by_field(self, field: str, value: Any) -> Optional[ModelType]:
        """Get a record by a specific field."""
        query = select(self.model).where(getattr(self.model, field) == value)
        result = await self.session.exec(query)
        return result.first()

    def _filtered(self, query, filters: Optional[dict]):
        if filters:
            for field, value in filters.items():
                if hasattr(self.model, field) and value is not None:
                    query = query.where(getattr(self.model, field) == value)
        return query

    async def list(
        self,
        filters: Optional[dict] = None,
        order_by: str = "created_at",
        order_desc: bool = True
    ) -> List[ModelType]:
        """List all records with optional filters."""
        query = self._filtered(select(self.model), filters)

        if hasattr(self.model, order_by):
            order_column = getattr(self.model, order_by)
            query = query.order_by(order_column.desc() if order_desc else order_column)

        result = await self.session.exec(query)
        return list(result.all())

    async def list_paginated(
        self,
        filters: Optional[dict] = None,
        page: int = 1,
        limit: int = 20,
        order_by: str = "created_at",
        order_desc: bool = True
    ) -> dict:
        """List records with pagination."""
        query = self._filtered(select(self.model), filters)

        count_query = select(func.count()).select_from(query.subquery())
        total = (await self.session.exec(count_query)).one()

        if hasattr(self.model, order_by):
            order_column = getattr(self.model, order_by)
            query = query.order_by(order_column.desc() if order_desc else order_column)

        offset = (page - 1) * limit
        query = query.offset(offset).limit(limit)

        result = await self.session.exec(query)
        return create_paginated_response(list(result.all()), total, page, limit)

    async def update(self, id: uuid.UUID, obj_in: dict, now: Optional[datetime] = None) -> Optional[ModelType]:
        """Update a record. Keys present in obj_in are written as given, None included."""
        db_obj = await self.get(id)
        if not db_obj:
            return None

        for field, value in obj_in.items():
            if hasattr(db_obj, field):
                setattr(db_obj, field, value)

        if hasattr(db_obj, 'updated_at'):
            db_obj.updated_at = now or datetime.utcnow()

        self.session.add(db_obj)
        await self.commit()
        await self.session.refresh(db_obj)
        return db_obj

    async def count(self, filters: Optional[dict] = None) -> int:
        """Count records."""
        query = self._filtered(select(func.count()).select_from(self.model), filters)
        result = await self.session.exec(query)
        return result.one()
