"""
Interaction recorder - per (freelancer, lead) audit trail.
"""
import uuid
import logging
from dataclasses import dataclass
from typing import Optional, List
from datetime import datetime

from sqlmodel.ext.asyncio.session import AsyncSession

from hirelocal.core.exceptions import ConflictError, ValidationError
from hirelocal.models.interaction import FreelancerLeadInteraction, InteractionStatus, MissedReasons
from hirelocal.models.lead import Lead
from hirelocal.repositories.interaction_repo import InteractionRepository

logger = logging.getLogger(__name__)


@dataclass
class LeadHistoryEntry:
    lead: Lead
    interaction: Optional[FreelancerLeadInteraction]
    final_status: str


class InteractionRecorder:
    """
    Records notified / viewed / responded for each (freelancer, lead) pair.

    - record_notified is idempotent: redelivery never adds a second row.
    - A pair gets exactly one response; a second one raises ConflictError
      instead of overwriting the first.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.interaction_repo = InteractionRepository(session)

    async def record_notified(
        self,
        freelancer_id: uuid.UUID,
        lead_id: uuid.UUID,
        now: Optional[datetime] = None
    ) -> bool:
        """Create the pair's row. Returns False if it already existed."""
        return await self.interaction_repo.insert_if_absent(
            freelancer_id, lead_id, InteractionStatus.NOTIFIED, now or datetime.utcnow()
        )

    async def record_viewed(
        self,
        freelancer_id: uuid.UUID,
        lead_id: uuid.UUID,
        now: Optional[datetime] = None
    ) -> FreelancerLeadInteraction:
        now = now or datetime.utcnow()
        created = await self.interaction_repo.insert_if_absent(
            freelancer_id, lead_id, InteractionStatus.VIEWED, now, viewed_at=now
        )
        if not created:
            await self.interaction_repo.mark_viewed(freelancer_id, lead_id, now)
        return await self.interaction_repo.get_pair(freelancer_id, lead_id)

    async def record_responded(
        self,
        freelancer_id: uuid.UUID,
        lead_id: uuid.UUID,
        outcome: str,
        missed_reason: Optional[str] = None,
        notes: Optional[str] = None,
        now: Optional[datetime] = None
    ) -> FreelancerLeadInteraction:
        """
        Record the freelancer's single response to a lead.

        Args:
            outcome: accepted, missed or ignored
            missed_reason: required for missed, ignored otherwise

        Raises:
            ConflictError: the pair already has a response
        """
        if outcome not in InteractionStatus.OUTCOMES:
            raise ValidationError(f"Unknown outcome '{outcome}'", field="outcome")
        if outcome == InteractionStatus.MISSED:
            if missed_reason not in MissedReasons.ALL:
                raise ValidationError(f"Unknown missed reason '{missed_reason}'", field="reason")
        else:
            missed_reason = None

        now = now or datetime.utcnow()
        args = (freelancer_id, lead_id, outcome, now, missed_reason, notes)

        if await self.interaction_repo.mark_responded(*args):
            return await self.interaction_repo.get_pair(freelancer_id, lead_id)

        created = await self.interaction_repo.insert_if_absent(
            freelancer_id, lead_id, outcome, now,
            responded_at=now, missed_reason=missed_reason, notes=notes
        )
        # Lost an insert race to record_notified: the row exists but is still open
        if created or await self.interaction_repo.mark_responded(*args):
            return await self.interaction_repo.get_pair(freelancer_id, lead_id)

        existing = await self.interaction_repo.get_pair(freelancer_id, lead_id)
        logger.warning(
            f"Rejected second response '{outcome}' from freelancer {freelancer_id} "
            f"on lead {lead_id}, already '{existing.status}'"
        )
        raise ConflictError(
            f"Response to this lead was already recorded as '{existing.status}'",
            code="already_responded"
        )

    async def mark_missed(
        self,
        freelancer_id: uuid.UUID,
        lead_id: uuid.UUID,
        reason: str,
        notes: Optional[str] = None
    ) -> FreelancerLeadInteraction:
        return await self.record_responded(
            freelancer_id, lead_id, InteractionStatus.MISSED, missed_reason=reason, notes=notes
        )

    async def mark_ignored(
        self,
        freelancer_id: uuid.UUID,
        lead_id: uuid.UUID,
        notes: Optional[str] = None
    ) -> FreelancerLeadInteraction:
        return await self.record_responded(
            freelancer_id, lead_id, InteractionStatus.IGNORED, notes=notes
        )

    async def get(self, freelancer_id: uuid.UUID, lead_id: uuid.UUID) -> Optional[FreelancerLeadInteraction]:
        return await self.interaction_repo.get_pair(freelancer_id, lead_id)

    async def list_for_lead(self, lead_id: uuid.UUID) -> List[FreelancerLeadInteraction]:
        return await self.interaction_repo.list_for_lead(lead_id)

    async def history(self, freelancer_id: uuid.UUID) -> List[LeadHistoryEntry]:
        """Every lead the freelancer was told about or won."""
        rows = await self.interaction_repo.history_for_freelancer(freelancer_id)

        entries = []
        for lead, interaction in rows:
            if lead.accepted_by == freelancer_id:
                final_status = InteractionStatus.ACCEPTED
            elif interaction is not None:
                final_status = interaction.status
            else:
                final_status = InteractionStatus.NOTIFIED
            entries.append(LeadHistoryEntry(lead=lead, interaction=interaction, final_status=final_status))
        return entries

    async def expire_open(self, lead_id: uuid.UUID, now: Optional[datetime] = None) -> int:
        """Close every unanswered interaction on a lead as missed/expired."""
        return await self.interaction_repo.close_open_for_lead(
            lead_id, InteractionStatus.MISSED, now or datetime.utcnow(), MissedReasons.EXPIRED
        )
