"""
Notification model - durable half of every delivery.
The live push is best-effort; this row is what the polling client reads.
"""
import uuid
from datetime import datetime
from typing import Optional

from sqlmodel import SQLModel, Field


class Notification(SQLModel, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    user_id: uuid.UUID = Field(foreign_key="user.id", index=True)

    type: str = Field(index=True)  # new_lead, lead_accepted, system
    title: str
    message: str
    link: Optional[str] = None  # URL to open when clicked

    is_read: bool = Field(default=False, index=True)

    created_at: datetime = Field(default_factory=datetime.utcnow, index=True)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class NotificationTypes:
    NEW_LEAD = "new_lead"
    LEAD_ACCEPTED = "lead_accepted"
    SYSTEM = "system"
