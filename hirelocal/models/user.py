"""
User model.
Projection of the identity provider's user record; the core reads it to
resolve roles and to address notifications.
"""
import uuid
from datetime import datetime
from typing import Optional

from sqlmodel import SQLModel, Field


class User(SQLModel, table=True):
    """
    Marketplace user. A user with role "freelancer" owns at most one
    FreelancerProfile.
    """
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)

    email: Optional[str] = Field(default=None, unique=True, index=True)
    full_name: Optional[str] = None
    phone: Optional[str] = None

    role: str = Field(default="customer", index=True)  # customer, freelancer, admin
    area: Optional[str] = None  # Customer's area/location

    is_active: bool = Field(default=True)

    # Timestamps
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class Roles:
    CUSTOMER = "customer"
    FREELANCER = "freelancer"
    ADMIN = "admin"
