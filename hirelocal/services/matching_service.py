"""
Freelancer matching - who should hear about a lead.
"""
import uuid
from typing import Optional, List

from sqlmodel.ext.asyncio.session import AsyncSession

from hirelocal.core.exceptions import ValidationError
from hirelocal.models.freelancer import FreelancerProfile
from hirelocal.repositories.freelancer_repo import FreelancerRepository


def normalize_area(area: Optional[str]) -> Optional[str]:
    """Trim and lower-case an area name; blank areas become None."""
    if area is None:
        return None
    normalized = area.strip().lower()
    return normalized or None


class FreelancerMatcher:
    """
    Resolves the eligible freelancers for a category and area.
    Eligible means approved, available, same category and, unless the area
    is blank, the same area ignoring case and surrounding whitespace.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.freelancer_repo = FreelancerRepository(session)

    async def match(self, category_id: uuid.UUID, area: Optional[str] = None) -> List[FreelancerProfile]:
        if not category_id:
            raise ValidationError("Category is required for matching", field="category_id")

        return await self.freelancer_repo.find_eligible(category_id, normalize_area(area))
