"""
Notification dispatcher - durable record plus best-effort live push.
"""
import uuid
import logging
from dataclasses import dataclass
from typing import Optional, List
from datetime import datetime

from fastapi.encoders import jsonable_encoder
from sqlmodel.ext.asyncio.session import AsyncSession

from hirelocal.core.exceptions import NotFoundError, DeliveryError
from hirelocal.models.notification import Notification
from hirelocal.repositories.notification_repo import NotificationRepository
from hirelocal.schemas.notification import NotificationPayload
from hirelocal.services.integrations.base import LiveChannel

logger = logging.getLogger(__name__)


@dataclass
class DeliveryResult:
    live_delivered: bool
    notification: Notification


class NotificationDispatcher:
    """
    Delivers a payload to one user.

    The Notification row is always written first, so a user who was offline
    sees the message on their next poll. The live push is a single attempt;
    its failure is logged and reported, never raised.
    """

    def __init__(
        self,
        session: AsyncSession,
        channel: Optional[LiveChannel] = None,
        poll_limit: int = 50
    ):
        self.session = session
        self.channel = channel
        self.poll_limit = poll_limit
        self.notification_repo = NotificationRepository(session)

    async def deliver(self, user_id: uuid.UUID, payload: NotificationPayload) -> DeliveryResult:
        """
        Store a notification, then push it live if a channel is attached.

        Args:
            user_id: Recipient
            payload: Type, text and the extra data merged into the live message

        Returns:
            DeliveryResult; live_delivered is False when nobody is connected
            or the push failed. A failed push is logged, never raised.
        """
        notification = await self.notification_repo.create({
            "user_id": user_id,
            "type": payload.type,
            "title": payload.title,
            "message": payload.message,
            "link": payload.link,
        })

        live_delivered = False
        if self.channel is not None:
            message = jsonable_encoder({
                **payload.data,
                "type": payload.type,
                "notification_id": notification.id,
                "title": payload.title,
                "message": payload.message,
                "link": payload.link,
                "created_at": notification.created_at,
            })
            try:
                live_delivered = await self.channel.send(user_id, message)
            except Exception as e:
                logger.error(DeliveryError(str(user_id), str(e)).message)

        return DeliveryResult(live_delivered=live_delivered, notification=notification)

    # Polling read path

    async def list_for_user(
        self,
        user_id: uuid.UUID,
        limit: Optional[int] = None,
        since: Optional[datetime] = None,
        unread_only: bool = False
    ) -> List[Notification]:
        """Newest first, capped at the poll limit."""
        return await self.notification_repo.list_for_user(
            user_id, limit or self.poll_limit, since, unread_only
        )

    async def unread_count(self, user_id: uuid.UUID) -> int:
        return await self.notification_repo.unread_count(user_id)

    async def mark_read(self, user_id: uuid.UUID, notification_id: uuid.UUID) -> Notification:
        """Mark one notification read. Other users' notifications are NotFound."""
        updated = await self.notification_repo.mark_read(user_id, notification_id, datetime.utcnow())
        if not updated:
            raise NotFoundError("Notification", str(notification_id))
        return await self.notification_repo.get(notification_id, fresh=True)

    async def mark_all_read(self, user_id: uuid.UUID) -> int:
        """Returns how many were updated."""
        return await self.notification_repo.mark_all_read(user_id, datetime.utcnow())

    async def delete(self, user_id: uuid.UUID, notification_id: uuid.UUID) -> None:
        """Delete a notification owned by the user."""
        notification = await self.notification_repo.get(notification_id)
        if not notification or notification.user_id != user_id:
            raise NotFoundError("Notification", str(notification_id))
        await self.notification_repo.delete(notification_id)
