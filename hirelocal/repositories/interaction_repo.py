"""
Freelancer-lead interaction repository.
Rows are inserted with ON CONFLICT DO NOTHING and updated conditionally,
so redelivery never duplicates a row and a response is never overwritten.
"""
import uuid
from typing import Optional, List, Tuple
from datetime import datetime

from sqlmodel import select, or_, and_, func
from sqlmodel.ext.asyncio.session import AsyncSession
from sqlalchemy import update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert

from hirelocal.models.interaction import FreelancerLeadInteraction, InteractionStatus
from hirelocal.models.lead import Lead
from hirelocal.repositories.base import BaseRepository


class InteractionRepository(BaseRepository[FreelancerLeadInteraction]):
    """Repository for FreelancerLeadInteraction operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(FreelancerLeadInteraction, session)

    def _pair(self, freelancer_id: uuid.UUID, lead_id: uuid.UUID):
        return and_(
            FreelancerLeadInteraction.freelancer_id == freelancer_id,
            FreelancerLeadInteraction.lead_id == lead_id
        )

    async def insert_if_absent(
        self,
        freelancer_id: uuid.UUID,
        lead_id: uuid.UUID,
        status: str,
        now: datetime,
        viewed_at: Optional[datetime] = None,
        responded_at: Optional[datetime] = None,
        missed_reason: Optional[str] = None,
        notes: Optional[str] = None
    ) -> bool:
        """Insert the pair's row unless it exists. True if this call created it."""
        insert = pg_insert if self.dialect == "postgresql" else sqlite_insert
        stmt = insert(FreelancerLeadInteraction.__table__).values(
            id=uuid.uuid4(),
            freelancer_id=freelancer_id,
            lead_id=lead_id,
            status=status,
            missed_reason=missed_reason,
            notes=notes,
            notified_at=now,
            viewed_at=viewed_at,
            responded_at=responded_at,
            created_at=now,
            updated_at=now,
        ).on_conflict_do_nothing(index_elements=["freelancer_id", "lead_id"])

        result = await self.session.exec(stmt)
        await self.session.commit()
        return result.rowcount == 1

    async def get_pair(
        self,
        freelancer_id: uuid.UUID,
        lead_id: uuid.UUID
    ) -> Optional[FreelancerLeadInteraction]:
        query = select(FreelancerLeadInteraction).where(
            self._pair(freelancer_id, lead_id)
        ).execution_options(populate_existing=True)
        result = await self.session.exec(query)
        return result.first()

    async def mark_viewed(self, freelancer_id: uuid.UUID, lead_id: uuid.UUID, now: datetime) -> bool:
        """notified -> viewed. Any other status is left alone."""
        stmt = (
            update(FreelancerLeadInteraction)
            .where(
                self._pair(freelancer_id, lead_id),
                FreelancerLeadInteraction.status == InteractionStatus.NOTIFIED
            )
            .values(status=InteractionStatus.VIEWED, viewed_at=now, updated_at=now)
        )
        result = await self.session.exec(stmt)
        await self.session.commit()
        return result.rowcount == 1

    async def mark_responded(
        self,
        freelancer_id: uuid.UUID,
        lead_id: uuid.UUID,
        outcome: str,
        now: datetime,
        missed_reason: Optional[str] = None,
        notes: Optional[str] = None
    ) -> bool:
        """Record the pair's single response. False if already responded or absent."""
        values = {
            "status": outcome,
            "responded_at": now,
            "updated_at": now,
            "missed_reason": missed_reason,
        }
        if notes is not None:
            values["notes"] = notes

        stmt = (
            update(FreelancerLeadInteraction)
            .where(
                self._pair(freelancer_id, lead_id),
                FreelancerLeadInteraction.responded_at.is_(None)
            )
            .values(**values)
        )
        result = await self.session.exec(stmt)
        await self.session.commit()
        return result.rowcount == 1

    async def close_open_for_lead(
        self,
        lead_id: uuid.UUID,
        outcome: str,
        now: datetime,
        missed_reason: Optional[str] = None
    ) -> int:
        """Respond on behalf of every freelancer who has not answered yet."""
        stmt = (
            update(FreelancerLeadInteraction)
            .where(
                FreelancerLeadInteraction.lead_id == lead_id,
                FreelancerLeadInteraction.responded_at.is_(None)
            )
            .values(status=outcome, missed_reason=missed_reason, responded_at=now, updated_at=now)
        )
        result = await self.session.exec(stmt)
        await self.session.commit()
        return result.rowcount

    async def list_for_lead(self, lead_id: uuid.UUID) -> List[FreelancerLeadInteraction]:
        query = select(FreelancerLeadInteraction).where(
            FreelancerLeadInteraction.lead_id == lead_id
        ).order_by(FreelancerLeadInteraction.notified_at)
        result = await self.session.exec(query.execution_options(populate_existing=True))
        return result.all()

    async def history_for_freelancer(
        self,
        freelancer_id: uuid.UUID
    ) -> List[Tuple[Lead, Optional[FreelancerLeadInteraction]]]:
        """Leads the freelancer was notified about or won, newest activity first."""
        query = (
            select(Lead, FreelancerLeadInteraction)
            .outerjoin(
                FreelancerLeadInteraction,
                and_(
                    FreelancerLeadInteraction.lead_id == Lead.id,
                    FreelancerLeadInteraction.freelancer_id == freelancer_id
                )
            )
            .where(or_(
                FreelancerLeadInteraction.freelancer_id == freelancer_id,
                Lead.accepted_by == freelancer_id
            ))
            .order_by(func.coalesce(
                FreelancerLeadInteraction.notified_at, Lead.accepted_at, Lead.created_at
            ).desc())
        )
        result = await self.session.exec(query.execution_options(populate_existing=True))
        return result.all()
