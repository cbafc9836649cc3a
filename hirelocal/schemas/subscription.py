"""
Subscription schemas.
"""
import uuid
from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel


class SubscriptionResponse(BaseModel):
    id: uuid.UUID
    freelancer_id: uuid.UUID
    type: str
    status: str
    amount: int
    start_date: datetime
    end_date: datetime
    category_id: Optional[uuid.UUID]
    area: Optional[str]
    position: Optional[int]
    badge_type: Optional[str]

    class Config:
        from_attributes = True


class ActiveSubscriptionsResponse(BaseModel):
    has_active_lead_plan: bool
    subscriptions: List[SubscriptionResponse]
