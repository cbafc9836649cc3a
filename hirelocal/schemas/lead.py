"""
Lead schemas.
"""
import uuid
from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel, Field, field_validator, model_validator


class LeadCreate(BaseModel):
    """Post a new service requirement."""
    category_id: uuid.UUID
    title: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=1)
    budget_min: Optional[int] = Field(default=None, ge=0)
    budget_max: Optional[int] = Field(default=None, ge=0)
    location: str = Field(min_length=1)
    mobile_number: str = Field(min_length=6, max_length=20)
    pincode: Optional[str] = None
    preferred_time: Optional[str] = None

    @field_validator("title", "location")
    @classmethod
    def not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value.strip()

    @model_validator(mode="after")
    def budget_range(self):
        if self.budget_min is not None and self.budget_max is not None and self.budget_min > self.budget_max:
            raise ValueError("budget_min must not exceed budget_max")
        return self

    class Config:
        json_schema_extra = {
            "example": {
                "category_id": "6f1c2a7e-1d8b-4c55-9b3e-0a4a3e2f9c11",
                "title": "Fix leaking kitchen tap",
                "description": "Tap leaks constantly, needs washer or replacement",
                "budget_min": 300,
                "budget_max": 800,
                "location": "Malviya Nagar",
                "mobile_number": "+919876543210"
            }
        }


class LeadResponse(BaseModel):
    """Lead response."""
    id: uuid.UUID
    customer_id: uuid.UUID
    category_id: uuid.UUID
    title: str
    description: str
    budget_min: Optional[int]
    budget_max: Optional[int]
    location: str
    mobile_number: str
    pincode: Optional[str]
    preferred_time: Optional[str]
    status: str
    accepted_by: Optional[uuid.UUID]
    accepted_at: Optional[datetime]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class DeliveryFailureResponse(BaseModel):
    freelancer_id: uuid.UUID
    error: str


class DeliveryReportResponse(BaseModel):
    """Outcome of notifying matched freelancers about a new lead."""
    lead_id: uuid.UUID
    matched: int
    notified: int
    live_delivered: int
    failures: List[DeliveryFailureResponse] = []


class LeadCreateResponse(BaseModel):
    lead: LeadResponse
    delivery: DeliveryReportResponse


class LeadAcceptResponse(BaseModel):
    success: bool = True
    lead: LeadResponse


class LeadStatusUpdate(BaseModel):
    """Administrative status correction."""
    status: str


class LeadMissRequest(BaseModel):
    reason: str = "not_interested"  # expired, no_response, busy, not_interested
    notes: Optional[str] = None


class LeadIgnoreRequest(BaseModel):
    notes: Optional[str] = None


class InteractionResponse(BaseModel):
    id: uuid.UUID
    freelancer_id: uuid.UUID
    lead_id: uuid.UUID
    status: str
    missed_reason: Optional[str]
    notes: Optional[str]
    notified_at: datetime
    viewed_at: Optional[datetime]
    responded_at: Optional[datetime]

    class Config:
        from_attributes = True


class LeadHistoryItem(BaseModel):
    """A lead as seen from one freelancer's interaction history."""
    lead: LeadResponse
    interaction: Optional[InteractionResponse]
    final_status: str


class SweepReportResponse(BaseModel):
    leads_missed: int
    interactions_closed: int
    lead_ids: List[uuid.UUID] = []
