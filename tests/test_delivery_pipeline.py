# tests/test_delivery_pipeline.py
"""
LeadDeliveryPipeline: match, record, deliver; one failure never stops the rest.
"""
from unittest.mock import AsyncMock

import pytest
from sqlalchemy.exc import OperationalError

from conftest import CATEGORY_ELECTRICAL, CATEGORY_PLUMBING
from hirelocal.core.exceptions import StorageError
from hirelocal.models.interaction import InteractionStatus
from hirelocal.models.lead import LeadStatus
from hirelocal.models.notification import NotificationTypes
from hirelocal.schemas.lead import LeadCreate
from hirelocal.services.delivery_service import LeadDeliveryPipeline
from hirelocal.services.interaction_service import InteractionRecorder
from hirelocal.services.lead_service import LeadStore
from hirelocal.services.notification_service import NotificationDispatcher


class TestLeadDeliveryPipeline:

    @pytest.mark.asyncio
    async def test_notifies_every_match(self, session, factory, live_channel):
        customer = await factory.user()
        f1 = await factory.freelancer(area="Malviya Nagar")
        f2 = await factory.freelancer(area=" malviya nagar")
        await factory.freelancer(area="Vaishali Nagar")
        lead = await factory.lead(customer.id, location="Malviya Nagar")

        report = await LeadDeliveryPipeline(session, live_channel).deliver(lead)

        assert report.matched == 2
        assert report.notified == 2
        assert report.live_delivered == 2
        assert report.failures == []
        rows = await InteractionRecorder(session).list_for_lead(lead.id)
        assert {r.freelancer_id for r in rows} == {f1.id, f2.id}
        assert all(r.status == InteractionStatus.NOTIFIED for r in rows)
        pushed_to = {call.args[0] for call in live_channel.send.await_args_list}
        assert pushed_to == {f1.user_id, f2.user_id}

    @pytest.mark.asyncio
    async def test_no_match_is_not_an_error(self, session, factory, live_channel):
        customer = await factory.user()
        await factory.freelancer(category_id=CATEGORY_ELECTRICAL)
        lead = await factory.lead(customer.id)

        report = await LeadDeliveryPipeline(session, live_channel).deliver(lead)

        assert report.matched == 0
        assert report.notified == 0
        live_channel.send.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_offline_freelancers_still_get_durable_record(self, session, factory, live_channel):
        customer = await factory.user()
        f = await factory.freelancer()
        lead = await factory.lead(customer.id)
        live_channel.send = AsyncMock(return_value=False)

        report = await LeadDeliveryPipeline(session, live_channel).deliver(lead)

        assert report.notified == 1
        assert report.live_delivered == 0
        polled = await NotificationDispatcher(session).list_for_user(f.user_id)
        assert [n.type for n in polled] == [NotificationTypes.NEW_LEAD]

    @pytest.mark.asyncio
    async def test_one_failure_does_not_stop_the_rest(self, session, factory, live_channel):
        customer = await factory.user()
        good_a = await factory.freelancer(rating=5.0)
        bad = await factory.freelancer(rating=4.0)
        good_b = await factory.freelancer(rating=3.0)
        lead = await factory.lead(customer.id)
        # The failure rolls the session back and expires these instances
        bad_id, bad_user_id = bad.id, bad.user_id
        good_user_ids = {good_a.user_id, good_b.user_id}

        pipeline = LeadDeliveryPipeline(session, live_channel)
        real_deliver = pipeline.dispatcher.deliver

        async def flaky(user_id, payload):
            if user_id == bad_user_id:
                raise StorageError("notification table locked")
            return await real_deliver(user_id, payload)

        pipeline.dispatcher.deliver = AsyncMock(side_effect=flaky)

        report = await pipeline.deliver(lead)

        assert report.matched == 3
        assert report.notified == 2
        assert [f.freelancer_id for f in report.failures] == [bad_id]
        assert "notification table locked" in report.failures[0].error
        pushed_to = {call.args[0] for call in live_channel.send.await_args_list}
        assert pushed_to == good_user_ids

    @pytest.mark.asyncio
    async def test_redelivery_does_not_duplicate_interactions(self, session, factory, live_channel):
        customer = await factory.user()
        await factory.freelancer()
        lead = await factory.lead(customer.id)
        pipeline = LeadDeliveryPipeline(session, live_channel)

        await pipeline.deliver(lead)
        await pipeline.deliver(lead)

        assert len(await InteractionRecorder(session).list_for_lead(lead.id)) == 1


def requirement(location: str = "Malviya Nagar") -> LeadCreate:
    return LeadCreate(
        category_id=CATEGORY_PLUMBING,
        title="Fix leaking kitchen tap",
        description="Tap leaks constantly",
        location=location,
        mobile_number="+919876543210",
    )


class TestCreateAndDeliver:

    @pytest.mark.asyncio
    async def test_posts_and_notifies(self, session, factory, live_channel):
        customer = await factory.user()
        f = await factory.freelancer(area="Malviya Nagar")
        freelancer_id = f.id

        lead, report = await LeadDeliveryPipeline(session, live_channel).create_and_deliver(
            customer.id, requirement()
        )

        assert lead.status == LeadStatus.PENDING
        assert lead.customer_id == customer.id
        assert report.lead_id == lead.id
        assert report.notified == 1
        rows = await InteractionRecorder(session).list_for_lead(lead.id)
        assert [r.freelancer_id for r in rows] == [freelancer_id]

    @pytest.mark.asyncio
    async def test_matching_failure_stores_no_lead(self, session, factory, live_channel):
        customer = await factory.user()
        customer_id = customer.id
        await factory.freelancer(area="Malviya Nagar")
        pipeline = LeadDeliveryPipeline(session, live_channel)
        pipeline.matcher.match = AsyncMock(
            side_effect=OperationalError("SELECT", {}, Exception("database is locked"))
        )

        with pytest.raises(OperationalError):
            await pipeline.create_and_deliver(customer_id, requirement())

        await session.rollback()
        assert await LeadStore(session).list_by_customer(customer_id) == []
        live_channel.send.assert_not_awaited()
