"""
Missed-lead sweep. Run from a scheduler or the admin endpoint; the request
paths never depend on it.
"""
import uuid
import logging
from dataclasses import dataclass, field
from typing import Optional, List
from datetime import datetime, timedelta

from sqlmodel.ext.asyncio.session import AsyncSession

from hirelocal.core.exceptions import ConflictError
from hirelocal.models.lead import LeadStatus
from hirelocal.services.interaction_service import InteractionRecorder
from hirelocal.services.lead_service import LeadStore

logger = logging.getLogger(__name__)


@dataclass
class SweepReport:
    leads_missed: int = 0
    interactions_closed: int = 0
    lead_ids: List[uuid.UUID] = field(default_factory=list)


class MissedLeadSweeper:
    """Moves leads nobody accepted in time to missed, closing open interactions."""

    def __init__(self, session: AsyncSession, expiry: timedelta):
        self.session = session
        self.expiry = expiry
        self.lead_store = LeadStore(session)
        self.recorder = InteractionRecorder(session)

    async def sweep(self, now: Optional[datetime] = None) -> SweepReport:
        """
        Move every pending lead older than the expiry window to missed and
        close its unanswered interactions. A lead that changed status since
        it was listed is skipped.

        Returns:
            SweepReport with the ids moved and the interactions closed
        """
        now = now or datetime.utcnow()
        report = SweepReport()

        stale = await self.lead_store.list_stale_pending(self.expiry, now)
        for lead_id in [lead.id for lead in stale]:
            try:
                await self.lead_store.transition(lead_id, LeadStatus.MISSED, now)
            except ConflictError:
                # Accepted or cancelled since the listing
                continue

            report.leads_missed += 1
            report.lead_ids.append(lead_id)
            report.interactions_closed += await self.recorder.expire_open(lead_id, now)

        logger.info(
            f"Missed-lead sweep: {report.leads_missed} leads, "
            f"{report.interactions_closed} interactions closed"
        )
        return report
