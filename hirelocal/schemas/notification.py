"""
Notification schemas.
"""
import uuid
from typing import Optional, Dict, Any
from datetime import datetime
from pydantic import BaseModel


class NotificationPayload(BaseModel):
    """What gets persisted and pushed for one delivery."""
    type: str
    title: str
    message: str
    link: Optional[str] = None
    data: Dict[str, Any] = {}  # Extra fields for the live push only


class NotificationResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    type: str
    title: str
    message: str
    link: Optional[str]
    is_read: bool
    created_at: datetime

    class Config:
        from_attributes = True


class UnreadCountResponse(BaseModel):
    count: int


class MarkAllReadResponse(BaseModel):
    updated: int
