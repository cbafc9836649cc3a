"""
Lead repository.
Every status change is a single conditional UPDATE so concurrent callers
are arbitrated by the database, never by a read followed by a write.
"""
import uuid
from typing import Optional, List, Sequence
from datetime import datetime

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from sqlalchemy import update

from hirelocal.models.lead import Lead, LeadStatus
from hirelocal.repositories.base import BaseRepository


class LeadRepository(BaseRepository[Lead]):
    """Repository for Lead operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(Lead, session)

    async def try_accept(self, lead_id: uuid.UUID, freelancer_id: uuid.UUID, now: datetime) -> bool:
        """Move a pending lead to accepted. True only for the caller that won."""
        stmt = (
            update(Lead)
            .where(Lead.id == lead_id, Lead.status == LeadStatus.PENDING)
            .values(
                status=LeadStatus.ACCEPTED,
                accepted_by=freelancer_id,
                accepted_at=now,
                updated_at=now,
            )
        )
        result = await self.session.exec(stmt)
        await self.session.commit()
        return result.rowcount == 1

    async def transition(
        self,
        lead_id: uuid.UUID,
        target: str,
        from_statuses: Sequence[str],
        now: datetime
    ) -> bool:
        """Set status to `target` if the current status is one of `from_statuses`."""
        if not from_statuses:
            return False

        values = {"status": target, "updated_at": now}
        if target not in (LeadStatus.ACCEPTED, LeadStatus.COMPLETED):
            values["accepted_by"] = None
            values["accepted_at"] = None

        stmt = (
            update(Lead)
            .where(Lead.id == lead_id, Lead.status.in_(tuple(from_statuses)))
            .values(**values)
        )
        result = await self.session.exec(stmt)
        await self.session.commit()
        return result.rowcount == 1

    async def list_by_customer(self, customer_id: uuid.UUID) -> List[Lead]:
        query = select(Lead).where(
            Lead.customer_id == customer_id
        ).order_by(Lead.created_at.desc())
        result = await self.session.exec(query)
        return result.all()

    async def list_accepted_by(self, freelancer_id: uuid.UUID) -> List[Lead]:
        """Leads won by a freelancer, most recent first."""
        query = select(Lead).where(
            Lead.accepted_by == freelancer_id,
            Lead.status.in_((LeadStatus.ACCEPTED, LeadStatus.COMPLETED))
        ).order_by(Lead.accepted_at.desc())
        result = await self.session.exec(query)
        return result.all()

    async def list_pending_in_category(
        self,
        category_id: uuid.UUID,
        location_contains: Optional[str] = None
    ) -> List[Lead]:
        """Pending leads of a category, optionally narrowed by location substring."""
        query = select(Lead).where(
            Lead.status == LeadStatus.PENDING,
            Lead.category_id == category_id
        )
        if location_contains:
            query = query.where(Lead.location.ilike(f"%{location_contains}%"))

        result = await self.session.exec(query.order_by(Lead.created_at.desc()))
        return result.all()

    async def list_stale_pending(self, created_before: datetime) -> List[Lead]:
        """Pending leads created before the cutoff."""
        query = select(Lead).where(
            Lead.status == LeadStatus.PENDING,
            Lead.created_at < created_before
        ).order_by(Lead.created_at)
        result = await self.session.exec(query)
        return result.all()
