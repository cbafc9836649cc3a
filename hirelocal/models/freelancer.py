"""
Freelancer profile model.
"""
import uuid
from datetime import datetime
from typing import Optional

from sqlmodel import SQLModel, Field


class FreelancerProfile(SQLModel, table=True):
    """
    Service provider profile, one per freelancer user.
    Matched to leads by category and area.
    """
    __tablename__ = "freelancer_profile"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    user_id: uuid.UUID = Field(foreign_key="user.id", unique=True, index=True)
    category_id: Optional[uuid.UUID] = Field(default=None, index=True)

    # Profile
    full_name: str
    professional_title: Optional[str] = None
    area: Optional[str] = Field(default=None, index=True)  # Primary working area
    bio: Optional[str] = None
    hourly_rate: Optional[str] = None

    # Matching flags
    verification_status: str = Field(default="pending", index=True)  # pending, approved, rejected
    is_available: bool = Field(default=True, index=True)

    # Stats
    rating: float = Field(default=0.0)
    total_jobs: int = Field(default=0)

    # Timestamps
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class VerificationStatus:
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
