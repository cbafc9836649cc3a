"""
Subscription repository (read-only from the core's point of view).
"""
import uuid
from typing import Optional, List
from datetime import datetime

from sqlmodel import select, func
from sqlmodel.ext.asyncio.session import AsyncSession

from hirelocal.models.subscription import Subscription, SubscriptionStatus
from hirelocal.repositories.base import BaseRepository


class SubscriptionRepository(BaseRepository[Subscription]):
    """Repository for Subscription operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(Subscription, session)

    def _active_query(self, query, freelancer_id: uuid.UUID, now: datetime, type: Optional[str]):
        # status may lag behind end_date, so both are checked
        query = query.where(
            Subscription.freelancer_id == freelancer_id,
            Subscription.status == SubscriptionStatus.ACTIVE,
            Subscription.end_date > now
        )
        if type:
            query = query.where(Subscription.type == type)
        return query

    async def count_active(
        self,
        freelancer_id: uuid.UUID,
        now: datetime,
        type: Optional[str] = None
    ) -> int:
        query = self._active_query(
            select(func.count()).select_from(Subscription), freelancer_id, now, type
        )
        result = await self.session.exec(query)
        return result.one()

    async def list_active(
        self,
        freelancer_id: uuid.UUID,
        now: datetime,
        type: Optional[str] = None
    ) -> List[Subscription]:
        query = self._active_query(select(Subscription), freelancer_id, now, type)
        result = await self.session.exec(query.order_by(Subscription.end_date.desc()))
        return result.all()
