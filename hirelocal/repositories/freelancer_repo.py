"""
Freelancer profile repository.
"""
import uuid
from typing import Optional, List

from sqlmodel import select, func
from sqlmodel.ext.asyncio.session import AsyncSession

from hirelocal.models.freelancer import FreelancerProfile, VerificationStatus
from hirelocal.repositories.base import BaseRepository


class FreelancerRepository(BaseRepository[FreelancerProfile]):
    """Repository for FreelancerProfile operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(FreelancerProfile, session)

    async def get_by_user_id(self, user_id: uuid.UUID) -> Optional[FreelancerProfile]:
        return await self.get_by_field("user_id", user_id)

    async def find_eligible(
        self,
        category_id: uuid.UUID,
        normalized_area: Optional[str] = None
    ) -> List[FreelancerProfile]:
        """
        Approved, available freelancers of a category.

        Args:
            category_id: Category the lead was posted in
            normalized_area: Trimmed, lower-cased area; None skips area filtering
        """
        query = select(FreelancerProfile).where(
            FreelancerProfile.category_id == category_id,
            FreelancerProfile.verification_status == VerificationStatus.APPROVED,
            FreelancerProfile.is_available.is_(True)
        )
        if normalized_area:
            query = query.where(
                func.lower(func.trim(FreelancerProfile.area)) == normalized_area
            )

        result = await self.session.exec(query.order_by(FreelancerProfile.rating.desc()))
        return result.all()
