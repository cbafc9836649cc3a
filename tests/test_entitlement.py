# tests/test_entitlement.py
"""
EntitlementChecker: status active AND end_date in the future, both required.
"""
from datetime import datetime, timedelta

import pytest

from hirelocal.models.subscription import SubscriptionType, SubscriptionStatus
from hirelocal.services.entitlement_service import EntitlementChecker


class TestHasActiveLeadPlan:

    @pytest.mark.asyncio
    async def test_active_plan(self, session, factory):
        f = await factory.freelancer()
        await factory.subscription(f.id)

        assert await EntitlementChecker(session).has_active_lead_plan(f.id) is True

    @pytest.mark.asyncio
    async def test_no_subscription(self, session, factory):
        f = await factory.freelancer()

        assert await EntitlementChecker(session).has_active_lead_plan(f.id) is False

    @pytest.mark.asyncio
    async def test_end_date_boundary(self, session, factory):
        f = await factory.freelancer()
        now = datetime(2026, 3, 1, 12, 0, 0)
        await factory.subscription(f.id, end_date=now)
        checker = EntitlementChecker(session)

        assert await checker.has_active_lead_plan(f.id, now=now - timedelta(seconds=1)) is True
        assert await checker.has_active_lead_plan(f.id, now=now) is False
        assert await checker.has_active_lead_plan(f.id, now=now + timedelta(seconds=1)) is False

    @pytest.mark.asyncio
    async def test_end_date_reads_back_as_naive_utc(self, session, factory):
        f = await factory.freelancer()
        freelancer_id = f.id
        end_date = datetime(2026, 3, 1, 12, 0, 0)
        await factory.subscription(freelancer_id, end_date=end_date)
        session.expire_all()

        plans = await EntitlementChecker(session).active_subscriptions(freelancer_id, now=end_date - timedelta(days=1))

        assert [p.end_date for p in plans] == [end_date]
        assert plans[0].end_date.tzinfo is None
        assert plans[0].end_date > end_date - timedelta(days=1)

    @pytest.mark.asyncio
    async def test_status_still_active_but_expired(self, session, factory):
        f = await factory.freelancer()
        await factory.subscription(f.id, end_date=datetime.utcnow() - timedelta(minutes=1))

        assert await EntitlementChecker(session).has_active_lead_plan(f.id) is False

    @pytest.mark.asyncio
    async def test_cancelled_with_future_end_date(self, session, factory):
        f = await factory.freelancer()
        await factory.subscription(f.id, status=SubscriptionStatus.CANCELLED)

        assert await EntitlementChecker(session).has_active_lead_plan(f.id) is False

    @pytest.mark.asyncio
    async def test_other_plan_types_do_not_count(self, session, factory):
        f = await factory.freelancer()
        await factory.subscription(f.id, type=SubscriptionType.BADGE)
        await factory.subscription(f.id, type=SubscriptionType.POSITION)
        checker = EntitlementChecker(session)

        assert await checker.has_active_lead_plan(f.id) is False
        assert len(await checker.active_subscriptions(f.id)) == 2

    @pytest.mark.asyncio
    async def test_expiry_seen_on_next_call(self, session, factory):
        f = await factory.freelancer()
        end = datetime.utcnow() + timedelta(hours=1)
        await factory.subscription(f.id, end_date=end)
        checker = EntitlementChecker(session)

        assert await checker.has_active_lead_plan(f.id) is True
        assert await checker.has_active_lead_plan(f.id, now=end + timedelta(seconds=1)) is False
