"""
Acceptance coordinator - entitlement check, atomic accept, customer notice.
"""
import uuid
import asyncio
import logging
from typing import Optional

from sqlmodel.ext.asyncio.session import AsyncSession

from hirelocal.core.exceptions import (
    NotFoundError, ForbiddenError, NotEligibleError, ConflictError, OperationTimeoutError
)
from hirelocal.models.freelancer import FreelancerProfile, VerificationStatus
from hirelocal.models.interaction import InteractionStatus
from hirelocal.models.lead import Lead, LeadStatus
from hirelocal.models.notification import NotificationTypes
from hirelocal.repositories.freelancer_repo import FreelancerRepository
from hirelocal.schemas.notification import NotificationPayload
from hirelocal.services.entitlement_service import EntitlementChecker
from hirelocal.services.integrations.base import LiveChannel
from hirelocal.services.interaction_service import InteractionRecorder
from hirelocal.services.lead_service import LeadStore, AcceptFailure
from hirelocal.services.notification_service import NotificationDispatcher

logger = logging.getLogger(__name__)


def lead_accepted_payload(lead: Lead, profile: FreelancerProfile) -> NotificationPayload:
    return NotificationPayload(
        type=NotificationTypes.LEAD_ACCEPTED,
        title="Your request was accepted",
        message=f"{profile.full_name} accepted \"{lead.title}\"",
        link=f"/customer/requests/{lead.id}",
        data={
            "lead_id": lead.id,
            "freelancer": {
                "id": profile.id,
                "full_name": profile.full_name,
                "professional_title": profile.professional_title,
                "rating": profile.rating,
            },
        },
    )


class AcceptanceCoordinator:
    """
    Handles a freelancer's request to accept a lead.

    Order matters: profile checks, then lead availability (a lead that is
    already gone is a ConflictError whatever the plan), then entitlement
    (NotEligibleError leaves the lead untouched), then the atomic accept
    (ConflictError if someone else won), then the audit row and the customer
    notice. The last two never undo a successful accept.
    """

    def __init__(
        self,
        session: AsyncSession,
        channel: Optional[LiveChannel] = None,
        timeout: Optional[float] = None
    ):
        self.session = session
        self.timeout = timeout
        self.freelancer_repo = FreelancerRepository(session)
        self.entitlements = EntitlementChecker(session)
        self.lead_store = LeadStore(session)
        self.recorder = InteractionRecorder(session)
        self.dispatcher = NotificationDispatcher(session, channel)

    async def accept(self, user_id: uuid.UUID, lead_id: uuid.UUID) -> Lead:
        """
        Accept a lead on behalf of a freelancer user.

        Args:
            user_id: Freelancer's user id
            lead_id: Lead to accept

        Returns:
            The lead, now accepted by this freelancer

        Raises:
            NotFoundError: no freelancer profile or no such lead
            ForbiddenError: profile not approved or marked unavailable
            ConflictError: lead no longer pending, or already declined by this freelancer
            NotEligibleError: no active lead plan
            OperationTimeoutError: the configured timeout elapsed
        """
        if not self.timeout:
            return await self._accept(user_id, lead_id)
        try:
            return await asyncio.wait_for(self._accept(user_id, lead_id), self.timeout)
        except asyncio.TimeoutError:
            logger.error(f"Accepting lead {lead_id} for user {user_id} timed out after {self.timeout}s")
            raise OperationTimeoutError("Lead acceptance")

    async def _accept(self, user_id: uuid.UUID, lead_id: uuid.UUID) -> Lead:
        profile = await self.freelancer_repo.get_by_user_id(user_id)
        if not profile:
            raise NotFoundError("Freelancer profile")
        if profile.verification_status != VerificationStatus.APPROVED:
            raise ForbiddenError("Freelancer profile is not approved yet")
        if not profile.is_available:
            raise ForbiddenError("Freelancer is marked unavailable")

        freelancer_id = profile.id

        lead = await self.lead_store.get_by_id(lead_id)
        if lead.status != LeadStatus.PENDING:
            logger.info(f"Freelancer {freelancer_id} tried lead {lead_id} which is already {lead.status}")
            raise ConflictError()

        if not await self.entitlements.has_active_lead_plan(freelancer_id):
            logger.warning(f"Freelancer {freelancer_id} tried to accept lead {lead_id} without a lead plan")
            raise NotEligibleError()

        previous = await self.recorder.get(freelancer_id, lead_id)
        if previous and previous.responded_at and previous.status != InteractionStatus.ACCEPTED:
            raise ConflictError(
                f"You already marked this lead as {previous.status}",
                code="already_responded"
            )

        # A decline recorded between the check above and try_accept does not
        # undo the accept. History reports accepted from accepted_by.
        outcome = await self.lead_store.try_accept(lead_id, freelancer_id)
        if not outcome.accepted:
            if outcome.reason == AcceptFailure.NOT_FOUND:
                raise NotFoundError("Lead", str(lead_id))
            logger.warning(f"Freelancer {freelancer_id} lost lead {lead_id}: {outcome.reason}")
            raise ConflictError()

        lead = outcome.lead
        logger.info(f"Lead {lead_id} accepted by freelancer {freelancer_id}")

        try:
            await self.recorder.record_responded(freelancer_id, lead_id, InteractionStatus.ACCEPTED)
        except ConflictError as e:
            logger.warning(
                f"Lead {lead_id} accepted by freelancer {freelancer_id}, who also declined it "
                f"concurrently; the accept stands: {e.message}"
            )

        await self._notify_customer(lead, profile)
        return await self.lead_store.get_by_id(lead_id)

    async def _notify_customer(self, lead: Lead, profile: FreelancerProfile) -> None:
        lead_id, customer_id = lead.id, lead.customer_id
        payload = lead_accepted_payload(lead, profile)
        try:
            await self.dispatcher.deliver(customer_id, payload)
        except Exception as e:
            await self.session.rollback()
            logger.error(f"Notifying customer {customer_id} about lead {lead_id} failed: {e}")
