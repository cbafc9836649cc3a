"""
Lead model - a customer-posted service requirement.
Leads are never hard-deleted; they only move through LEAD_TRANSITIONS.
"""
import uuid
from datetime import datetime
from typing import Optional

from sqlmodel import SQLModel, Field


class Lead(SQLModel, table=True):
    """
    Lead entity. accepted_by is set iff status is accepted or completed,
    and only one freelancer can ever set it.
    """
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    customer_id: uuid.UUID = Field(foreign_key="user.id", index=True)
    category_id: uuid.UUID = Field(index=True)

    # Requirement
    title: str
    description: str
    budget_min: Optional[int] = None
    budget_max: Optional[int] = None

    # Location and contact
    location: str = Field(index=True)  # Free-text area name
    mobile_number: str
    pincode: Optional[str] = None
    preferred_time: Optional[str] = None

    # Lifecycle
    status: str = Field(default="pending", index=True)
    accepted_by: Optional[uuid.UUID] = Field(default=None, foreign_key="freelancer_profile.id", index=True)
    accepted_at: Optional[datetime] = None

    # Timestamps
    created_at: datetime = Field(default_factory=datetime.utcnow, index=True)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class LeadStatus:
    PENDING = "pending"
    ACCEPTED = "accepted"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    MISSED = "missed"
    IGNORED = "ignored"

    ALL = (PENDING, ACCEPTED, COMPLETED, CANCELLED, MISSED, IGNORED)


# Allowed status changes: current status -> statuses it may move to
LEAD_TRANSITIONS = {
    LeadStatus.PENDING: (LeadStatus.ACCEPTED, LeadStatus.CANCELLED, LeadStatus.MISSED, LeadStatus.IGNORED),
    LeadStatus.ACCEPTED: (LeadStatus.COMPLETED, LeadStatus.CANCELLED),
}


def allowed_predecessors(target: str) -> tuple:
    """Statuses from which a lead may move to `target`."""
    return tuple(
        source for source, targets in LEAD_TRANSITIONS.items()
        if target in targets
    )
