"""
Notification routes - the polling path for users without a live socket.
"""
import uuid
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlmodel.ext.asyncio.session import AsyncSession

from hirelocal.database import get_session
from hirelocal.api.deps import get_current_user
from hirelocal.config import settings
from hirelocal.models.user import User
from hirelocal.schemas.common import MessageResponse
from hirelocal.schemas.notification import NotificationResponse, UnreadCountResponse, MarkAllReadResponse
from hirelocal.services.notification_service import NotificationDispatcher

router = APIRouter(prefix=f"{settings.API_PREFIX}/notifications", tags=["notifications"])


def _dispatcher(session: AsyncSession) -> NotificationDispatcher:
    return NotificationDispatcher(session, poll_limit=settings.NOTIFICATION_POLL_LIMIT)


@router.get("", response_model=List[NotificationResponse])
async def list_notifications(
    limit: Optional[int] = Query(None, ge=1, le=200),
    since: Optional[datetime] = None,
    unread_only: bool = False,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """Newest first. Pass the newest created_at you hold as `since` to poll for new ones."""
    return await _dispatcher(session).list_for_user(current_user.id, limit, since, unread_only)


@router.get("/unread-count", response_model=UnreadCountResponse)
async def unread_count(
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    return {"count": await _dispatcher(session).unread_count(current_user.id)}


@router.patch("/{notification_id}/read", response_model=NotificationResponse)
async def mark_read(
    notification_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    return await _dispatcher(session).mark_read(current_user.id, notification_id)


@router.post("/read-all", response_model=MarkAllReadResponse)
async def mark_all_read(
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    return {"updated": await _dispatcher(session).mark_all_read(current_user.id)}


@router.delete("/{notification_id}", response_model=MessageResponse)
async def delete_notification(
    notification_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    await _dispatcher(session).delete(current_user.id, notification_id)
    return {"message": "Notification deleted"}
