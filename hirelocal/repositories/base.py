"""
Base repository shared by every table.
Writes commit immediately: each repository call is its own unit of work,
so a failure in one step of a multi-step flow never rolls back an earlier one.
"""
import uuid
from typing import TypeVar, Generic, Type, Optional, Any

from sqlmodel import SQLModel, select
from sqlmodel.ext.asyncio.session import AsyncSession
from sqlalchemy import func

from hirelocal.core.pagination import create_paginated_response

ModelType = TypeVar("ModelType", bound=SQLModel)


class BaseRepository(Generic[ModelType]):
    """Generic reads and writes; subclasses add the conditional updates."""

    def __init__(self, model: Type[ModelType], session: AsyncSession):
        self.model = model
        self.session = session

    @property
    def dialect(self) -> str:
        """Dialect name: postgresql in production, sqlite under test."""
        return self.session.bind.dialect.name

    async def create(self, obj_in: dict) -> ModelType:
        row = self.model(**obj_in)
        self.session.add(row)
        await self.session.commit()
        await self.session.refresh(row)
        return row

    async def get(self, id: uuid.UUID, fresh: bool = False) -> Optional[ModelType]:
        """Fetch by primary key. fresh=True re-reads a row already in the identity map."""
        return await self.session.get(self.model, id, populate_existing=fresh)

    async def get_by_field(self, field: str, value: Any) -> Optional[ModelType]:
        result = await self.session.exec(
            select(self.model).where(getattr(self.model, field) == value)
        )
        return result.first()

    async def list_paginated(
        self,
        filters: Optional[dict] = None,
        page: int = 1,
        limit: int = 20,
        order_by: str = "created_at",
        order_desc: bool = True
    ) -> dict:
        """
        One page of rows matching equality filters. None-valued filters are
        ignored, so callers can pass optional query parameters straight in.
        """
        query = select(self.model)
        for field, value in (filters or {}).items():
            if value is not None:
                query = query.where(getattr(self.model, field) == value)

        total = (await self.session.exec(
            select(func.count()).select_from(query.subquery())
        )).one()

        column = getattr(self.model, order_by)
        query = query.order_by(column.desc() if order_desc else column)
        query = query.offset((page - 1) * limit).limit(limit)
        items = (await self.session.exec(query)).all()

        return create_paginated_response(items, total, page, limit)

    async def delete(self, id: uuid.UUID) -> bool:
        row = await self.get(id)
        if not row:
            return False
        await self.session.delete(row)
        await self.session.commit()
        return True
