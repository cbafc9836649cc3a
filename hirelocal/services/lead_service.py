"""
Lead store - lead records and their status transitions.
"""
import uuid
import logging
from dataclasses import dataclass
from typing import Optional, List
from datetime import datetime, timedelta

from sqlmodel.ext.asyncio.session import AsyncSession

from hirelocal.core.exceptions import NotFoundError, ConflictError, ValidationError
from hirelocal.models.freelancer import FreelancerProfile
from hirelocal.models.lead import Lead, LeadStatus, allowed_predecessors
from hirelocal.repositories.lead_repo import LeadRepository
from hirelocal.schemas.lead import LeadCreate

logger = logging.getLogger(__name__)


class AcceptFailure:
    ALREADY_ACCEPTED = "already_accepted"
    NOT_FOUND = "not_found"
    NOT_PENDING = "not_pending"


@dataclass
class AcceptOutcome:
    accepted: bool
    reason: Optional[str] = None
    lead: Optional[Lead] = None


class LeadStore:
    """Owns lead records. Status changes go through conditional updates only."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.lead_repo = LeadRepository(session)

    async def create(self, customer_id: uuid.UUID, lead_data: LeadCreate) -> Lead:
        """Create a pending lead."""
        data = lead_data.model_dump()
        data["customer_id"] = customer_id
        data["status"] = LeadStatus.PENDING

        lead = await self.lead_repo.create(data)
        logger.info(f"Lead {lead.id} created by customer {customer_id} in category {lead.category_id}")
        return lead

    async def get_by_id(self, lead_id: uuid.UUID) -> Lead:
        """Fresh read of a lead, NotFoundError if missing."""
        lead = await self.lead_repo.get(lead_id, fresh=True)
        if not lead:
            raise NotFoundError("Lead", str(lead_id))
        return lead

    async def list_by_status(self, status: Optional[str] = None, page: int = 1, limit: int = 20) -> dict:
        """Paginated leads, optionally filtered by status."""
        if status and status not in LeadStatus.ALL:
            raise ValidationError(f"Unknown lead status '{status}'", field="status")
        return await self.lead_repo.list_paginated({"status": status}, page, limit)

    async def try_accept(
        self,
        lead_id: uuid.UUID,
        freelancer_id: uuid.UUID,
        now: Optional[datetime] = None
    ) -> AcceptOutcome:
        """
        Atomically hand a pending lead to one freelancer.

        Exactly one of any number of concurrent callers gets accepted=True.
        The others get reason already_accepted, not_pending or not_found.

        Args:
            lead_id: Lead to accept
            freelancer_id: Profile id recorded as accepted_by
            now: Acceptance time, defaults to utcnow

        Returns:
            AcceptOutcome carrying the re-read lead when it exists
        """
        won = await self.lead_repo.try_accept(lead_id, freelancer_id, now or datetime.utcnow())
        lead = await self.lead_repo.get(lead_id, fresh=True)

        if won:
            return AcceptOutcome(accepted=True, lead=lead)
        if lead is None:
            return AcceptOutcome(accepted=False, reason=AcceptFailure.NOT_FOUND)
        if lead.status in (LeadStatus.ACCEPTED, LeadStatus.COMPLETED):
            return AcceptOutcome(accepted=False, reason=AcceptFailure.ALREADY_ACCEPTED, lead=lead)
        return AcceptOutcome(accepted=False, reason=AcceptFailure.NOT_PENDING, lead=lead)

    async def transition(self, lead_id: uuid.UUID, target: str, now: Optional[datetime] = None) -> Lead:
        """
        Move a lead along the state machine, rejecting anything else.

        Raises:
            ValidationError: unknown target, or accepted (use try_accept)
            ConflictError: the current status may not move to target
        """
        if target not in LeadStatus.ALL:
            raise ValidationError(f"Unknown lead status '{target}'", field="status")
        if target == LeadStatus.ACCEPTED:
            raise ValidationError("Leads can only be accepted by a freelancer", field="status")

        moved = await self.lead_repo.transition(
            lead_id, target, allowed_predecessors(target), now or datetime.utcnow()
        )
        lead = await self.get_by_id(lead_id)
        if not moved:
            raise ConflictError(
                f"Cannot move lead from '{lead.status}' to '{target}'",
                code="invalid_transition"
            )

        logger.info(f"Lead {lead_id} moved to {target}")
        return lead

    async def cancel_by_customer(self, customer_id: uuid.UUID, lead_id: uuid.UUID) -> Lead:
        """Cancel a lead the customer owns; anyone else gets NotFound."""
        lead = await self.get_by_id(lead_id)
        if lead.customer_id != customer_id:
            raise NotFoundError("Lead", str(lead_id))
        return await self.transition(lead_id, LeadStatus.CANCELLED)

    async def list_by_customer(self, customer_id: uuid.UUID) -> List[Lead]:
        """Leads posted by a customer, newest first."""
        return await self.lead_repo.list_by_customer(customer_id)

    async def list_accepted_by(self, freelancer_id: uuid.UUID) -> List[Lead]:
        return await self.lead_repo.list_accepted_by(freelancer_id)

    async def list_available_for(self, profile: FreelancerProfile) -> List[Lead]:
        """
        Pending leads a freelancer may look at. Visibility needs no plan.
        Only leads whose location mentions the freelancer's area are shown,
        unless there are none, in which case the whole category is.
        """
        if not profile.category_id:
            return []

        area = (profile.area or "").strip()
        if area:
            leads = await self.lead_repo.list_pending_in_category(profile.category_id, area)
            if leads:
                return leads
        return await self.lead_repo.list_pending_in_category(profile.category_id)

    async def list_stale_pending(self, older_than: timedelta, now: Optional[datetime] = None) -> List[Lead]:
        """Pending leads created more than older_than before now."""
        cutoff = (now or datetime.utcnow()) - older_than
        return await self.lead_repo.list_stale_pending(cutoff)
