"""
Freelancer-lead interaction model - audit trail per (freelancer, lead) pair.
Separates "never got the chance" from "got it and didn't act".
"""
import uuid
from datetime import datetime
from typing import Optional

from sqlmodel import SQLModel, Field
from sqlalchemy import UniqueConstraint


class FreelancerLeadInteraction(SQLModel, table=True):
    """
    One row per (freelancer, lead), created when the freelancer is notified.
    Updated at most twice more (view, response); never deleted.
    """
    __tablename__ = "freelancer_lead_interaction"
    __table_args__ = (
        UniqueConstraint("freelancer_id", "lead_id", name="uq_interaction_freelancer_lead"),
    )

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    freelancer_id: uuid.UUID = Field(foreign_key="freelancer_profile.id", index=True)
    lead_id: uuid.UUID = Field(foreign_key="lead.id", index=True)

    status: str = Field(default="notified", index=True)  # notified, viewed, accepted, missed, ignored
    missed_reason: Optional[str] = None  # expired, no_response, busy, not_interested
    notes: Optional[str] = None

    notified_at: datetime = Field(default_factory=datetime.utcnow)
    viewed_at: Optional[datetime] = None
    responded_at: Optional[datetime] = None

    # Timestamps
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class InteractionStatus:
    NOTIFIED = "notified"
    VIEWED = "viewed"
    ACCEPTED = "accepted"
    MISSED = "missed"
    IGNORED = "ignored"

    # Terminal outcomes recorded by record_responded
    OUTCOMES = (ACCEPTED, MISSED, IGNORED)


class MissedReasons:
    EXPIRED = "expired"
    NO_RESPONSE = "no_response"
    BUSY = "busy"
    NOT_INTERESTED = "not_interested"

    ALL = (EXPIRED, NO_RESPONSE, BUSY, NOT_INTERESTED)
