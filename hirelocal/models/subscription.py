"""
Subscription model - paid plans bought by freelancers.
Rows are created by the payment flow; the core only reads them.
"""
import uuid
from datetime import datetime
from typing import Optional

from sqlmodel import SQLModel, Field


class Subscription(SQLModel, table=True):
    """
    A paid plan. It counts only while status is active and end_date is
    still in the future; a stale status alone never grants access.
    """
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    freelancer_id: uuid.UUID = Field(foreign_key="freelancer_profile.id", index=True)

    type: str = Field(index=True)  # lead, position, badge
    status: str = Field(default="active", index=True)  # active, expired, cancelled
    amount: int = Field(default=0)

    start_date: datetime = Field(default_factory=datetime.utcnow)
    end_date: datetime = Field(index=True)

    # Position plans
    category_id: Optional[uuid.UUID] = None
    area: Optional[str] = None
    position: Optional[int] = None  # 1, 2 or 3

    # Badge plans
    badge_type: Optional[str] = None  # verified, trusted

    created_at: datetime = Field(default_factory=datetime.utcnow)


class SubscriptionType:
    LEAD = "lead"
    POSITION = "position"
    BADGE = "badge"


class SubscriptionStatus:
    ACTIVE = "active"
    EXPIRED = "expired"
    CANCELLED = "cancelled"
