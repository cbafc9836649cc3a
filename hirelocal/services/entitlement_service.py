"""
Entitlement checks for paid plans.
"""
import uuid
from typing import Optional, List
from datetime import datetime

from sqlmodel.ext.asyncio.session import AsyncSession

from hirelocal.models.subscription import Subscription, SubscriptionType
from hirelocal.repositories.subscription_repo import SubscriptionRepository


class EntitlementChecker:
    """
    Answers "may this freelancer accept leads right now?".

    A subscription counts only if its status is active AND its end_date is
    still in the future. Results are never cached.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.subscription_repo = SubscriptionRepository(session)

    async def has_active_lead_plan(self, freelancer_id: uuid.UUID, now: Optional[datetime] = None) -> bool:
        count = await self.subscription_repo.count_active(
            freelancer_id,
            now or datetime.utcnow(),
            type=SubscriptionType.LEAD
        )
        return count > 0

    async def active_subscriptions(
        self,
        freelancer_id: uuid.UUID,
        now: Optional[datetime] = None
    ) -> List[Subscription]:
        """All plans currently in force, any type."""
        return await self.subscription_repo.list_active(freelancer_id, now or datetime.utcnow())
