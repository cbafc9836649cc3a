"""
Notification repository - the polling read path.
"""
import uuid
from typing import Optional, List
from datetime import datetime

from sqlmodel import select, func
from sqlmodel.ext.asyncio.session import AsyncSession
from sqlalchemy import update

from hirelocal.models.notification import Notification
from hirelocal.repositories.base import BaseRepository


class NotificationRepository(BaseRepository[Notification]):
    """Repository for Notification operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(Notification, session)

    async def list_for_user(
        self,
        user_id: uuid.UUID,
        limit: int = 50,
        since: Optional[datetime] = None,
        unread_only: bool = False
    ) -> List[Notification]:
        """Newest notifications first. `since` is exclusive."""
        query = select(Notification).where(Notification.user_id == user_id)
        if since:
            query = query.where(Notification.created_at > since)
        if unread_only:
            query = query.where(Notification.is_read.is_(False))

        query = query.order_by(Notification.created_at.desc()).limit(limit)
        result = await self.session.exec(query.execution_options(populate_existing=True))
        return result.all()

    async def unread_count(self, user_id: uuid.UUID) -> int:
        query = select(func.count()).select_from(Notification).where(
            Notification.user_id == user_id,
            Notification.is_read.is_(False)
        )
        result = await self.session.exec(query)
        return result.one()

    async def mark_read(self, user_id: uuid.UUID, notification_id: uuid.UUID, now: datetime) -> bool:
        """Mark one of the user's notifications read. False if not theirs or missing."""
        stmt = (
            update(Notification)
            .where(Notification.id == notification_id, Notification.user_id == user_id)
            .values(is_read=True, updated_at=now)
        )
        result = await self.session.exec(stmt)
        await self.session.commit()
        return result.rowcount == 1

    async def mark_all_read(self, user_id: uuid.UUID, now: datetime) -> int:
        stmt = (
            update(Notification)
            .where(Notification.user_id == user_id, Notification.is_read.is_(False))
            .values(is_read=True, updated_at=now)
        )
        result = await self.session.exec(stmt)
        await self.session.commit()
        return result.rowcount
