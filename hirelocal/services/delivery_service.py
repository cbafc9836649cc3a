"""
Lead delivery pipeline - fan a new lead out to matched freelancers.
"""
import uuid
import logging
from dataclasses import dataclass, field
from typing import Optional, List, Tuple

from sqlmodel.ext.asyncio.session import AsyncSession

from hirelocal.models.freelancer import FreelancerProfile
from hirelocal.models.lead import Lead
from hirelocal.models.notification import NotificationTypes
from hirelocal.schemas.lead import LeadCreate
from hirelocal.schemas.notification import NotificationPayload
from hirelocal.services.integrations.base import LiveChannel
from hirelocal.services.interaction_service import InteractionRecorder
from hirelocal.services.lead_service import LeadStore
from hirelocal.services.matching_service import FreelancerMatcher
from hirelocal.services.notification_service import NotificationDispatcher

logger = logging.getLogger(__name__)


@dataclass
class DeliveryFailure:
    freelancer_id: uuid.UUID
    error: str


@dataclass
class DeliveryReport:
    lead_id: uuid.UUID
    matched: int = 0
    notified: int = 0
    live_delivered: int = 0
    failures: List[DeliveryFailure] = field(default_factory=list)


def new_lead_payload(lead: Lead) -> NotificationPayload:
    return NotificationPayload(
        type=NotificationTypes.NEW_LEAD,
        title="New lead in your area",
        message=f"{lead.title} - {lead.location}",
        link=f"/freelancer/leads/{lead.id}",
        data={
            "lead_id": lead.id,
            "category_id": lead.category_id,
            "location": lead.location,
            "budget_min": lead.budget_min,
            "budget_max": lead.budget_max,
        },
    )


class LeadDeliveryPipeline:
    """
    Match -> record_notified -> deliver, for every candidate.

    Matching runs before the lead is written, so a storage failure there
    leaves nothing behind. Once the lead exists, one candidate's failure is
    logged and collected in the report; the remaining candidates are still
    served and nothing is raised.
    """

    def __init__(
        self,
        session: AsyncSession,
        channel: Optional[LiveChannel] = None,
        poll_limit: int = 50
    ):
        self.session = session
        self.lead_store = LeadStore(session)
        self.matcher = FreelancerMatcher(session)
        self.recorder = InteractionRecorder(session)
        self.dispatcher = NotificationDispatcher(session, channel, poll_limit)

    async def create_and_deliver(
        self,
        customer_id: uuid.UUID,
        lead_data: LeadCreate
    ) -> Tuple[Lead, DeliveryReport]:
        """
        Post a lead and notify every matching freelancer.

        Args:
            customer_id: Customer posting the requirement
            lead_data: Validated requirement

        Returns:
            The stored lead (re-read after fan-out) and the delivery report

        Raises:
            SQLAlchemyError: matching or the lead insert failed; no lead is stored
        """
        candidates = await self.matcher.match(lead_data.category_id, lead_data.location)
        lead = await self.lead_store.create(customer_id, lead_data)
        lead_id = lead.id

        report = await self.fan_out(lead, candidates)
        return await self.lead_store.get_by_id(lead_id), report

    async def deliver(self, lead: Lead) -> DeliveryReport:
        """Re-run matching and fan-out for an existing lead. Safe to repeat."""
        candidates = await self.matcher.match(lead.category_id, lead.location)
        return await self.fan_out(lead, candidates)

    async def fan_out(self, lead: Lead, candidates: List[FreelancerProfile]) -> DeliveryReport:
        """
        Record and notify each candidate in turn.

        Args:
            lead: A stored lead
            candidates: Output of FreelancerMatcher.match

        Returns:
            DeliveryReport with per-candidate failures; never raises for them
        """
        lead_id = lead.id
        report = DeliveryReport(lead_id=lead_id, matched=len(candidates))

        if not candidates:
            logger.info(f"No freelancers matched lead {lead_id}")
            return report

        payload = new_lead_payload(lead)
        # Plain ids survive a rollback that expires ORM instances
        targets = [(f.id, f.user_id) for f in candidates]

        for freelancer_id, user_id in targets:
            try:
                await self.recorder.record_notified(freelancer_id, lead_id)
                result = await self.dispatcher.deliver(user_id, payload)
            except Exception as e:
                await self.session.rollback()
                logger.error(f"Delivering lead {lead_id} to freelancer {freelancer_id} failed: {e}")
                report.failures.append(DeliveryFailure(freelancer_id=freelancer_id, error=str(e)))
                continue

            report.notified += 1
            if result.live_delivered:
                report.live_delivered += 1

        logger.info(
            f"Lead {lead_id}: matched {report.matched}, notified {report.notified}, "
            f"live {report.live_delivered}, failed {len(report.failures)}"
        )
        return report
