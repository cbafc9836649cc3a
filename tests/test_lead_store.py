# tests/test_lead_store.py
"""
LeadStore: creation, atomic accept, state machine.
"""
import asyncio
import uuid
from datetime import datetime, timedelta

import pytest

from conftest import CATEGORY_PLUMBING, CATEGORY_ELECTRICAL
from hirelocal.core.exceptions import NotFoundError, ConflictError, ValidationError
from hirelocal.models.lead import LeadStatus
from hirelocal.schemas.lead import LeadCreate
from hirelocal.services.lead_service import LeadStore, AcceptFailure


def lead_payload(**overrides) -> LeadCreate:
    data = {
        "category_id": CATEGORY_PLUMBING,
        "title": "Fix leaking kitchen tap",
        "description": "Tap leaks constantly",
        "budget_min": 300,
        "budget_max": 800,
        "location": "Malviya Nagar",
        "mobile_number": "+919876543210",
    }
    data.update(overrides)
    return LeadCreate(**data)


class TestCreate:

    @pytest.mark.asyncio
    async def test_create_is_pending(self, session, factory):
        customer = await factory.user()

        lead = await LeadStore(session).create(customer.id, lead_payload())

        assert lead.status == LeadStatus.PENDING
        assert lead.customer_id == customer.id
        assert lead.accepted_by is None

    def test_budget_range_validated(self):
        with pytest.raises(ValueError):
            lead_payload(budget_min=900, budget_max=100)

    def test_blank_location_rejected(self):
        with pytest.raises(ValueError):
            lead_payload(location="   ")

    @pytest.mark.asyncio
    async def test_get_unknown(self, session):
        with pytest.raises(NotFoundError):
            await LeadStore(session).get_by_id(uuid.uuid4())


class TestTryAccept:

    @pytest.mark.asyncio
    async def test_first_accept_wins(self, session, factory):
        customer = await factory.user()
        f1 = await factory.freelancer()
        f2 = await factory.freelancer()
        lead = await factory.lead(customer.id)
        store = LeadStore(session)

        first = await store.try_accept(lead.id, f1.id)
        second = await store.try_accept(lead.id, f2.id)

        assert first.accepted is True
        assert first.lead.accepted_by == f1.id
        assert first.lead.accepted_at is not None
        assert second.accepted is False
        assert second.reason == AcceptFailure.ALREADY_ACCEPTED
        assert (await store.get_by_id(lead.id)).accepted_by == f1.id

    @pytest.mark.asyncio
    async def test_unknown_lead(self, session, factory):
        f = await factory.freelancer()

        outcome = await LeadStore(session).try_accept(uuid.uuid4(), f.id)

        assert outcome.accepted is False
        assert outcome.reason == AcceptFailure.NOT_FOUND

    @pytest.mark.asyncio
    async def test_cancelled_lead_not_pending(self, session, factory):
        customer = await factory.user()
        f = await factory.freelancer()
        lead = await factory.lead(customer.id, status=LeadStatus.CANCELLED)

        outcome = await LeadStore(session).try_accept(lead.id, f.id)

        assert outcome.accepted is False
        assert outcome.reason == AcceptFailure.NOT_PENDING

    @pytest.mark.asyncio
    async def test_concurrent_accepts_single_winner(self, session_factory, factory):
        customer = await factory.user()
        freelancers = [await factory.freelancer() for _ in range(5)]
        lead = await factory.lead(customer.id)

        async def attempt(freelancer_id):
            async with session_factory() as s:
                outcome = await LeadStore(s).try_accept(lead.id, freelancer_id)
                return freelancer_id, outcome.accepted

        results = await asyncio.gather(*(attempt(f.id) for f in freelancers))

        winners = [fid for fid, accepted in results if accepted]
        assert len(winners) == 1
        async with session_factory() as s:
            stored = await LeadStore(s).get_by_id(lead.id)
        assert stored.status == LeadStatus.ACCEPTED
        assert stored.accepted_by == winners[0]


class TestTransition:

    @pytest.mark.asyncio
    async def test_pending_to_cancelled(self, session, factory):
        customer = await factory.user()
        lead = await factory.lead(customer.id)

        moved = await LeadStore(session).transition(lead.id, LeadStatus.CANCELLED)

        assert moved.status == LeadStatus.CANCELLED

    @pytest.mark.asyncio
    async def test_accepted_to_completed_keeps_winner(self, session, factory):
        customer = await factory.user()
        f = await factory.freelancer()
        lead = await factory.lead(customer.id)
        store = LeadStore(session)
        await store.try_accept(lead.id, f.id)

        done = await store.transition(lead.id, LeadStatus.COMPLETED)

        assert done.status == LeadStatus.COMPLETED
        assert done.accepted_by == f.id

    @pytest.mark.asyncio
    async def test_cancelling_accepted_clears_winner(self, session, factory):
        customer = await factory.user()
        f = await factory.freelancer()
        lead = await factory.lead(customer.id)
        store = LeadStore(session)
        await store.try_accept(lead.id, f.id)

        cancelled = await store.transition(lead.id, LeadStatus.CANCELLED)

        assert cancelled.accepted_by is None
        assert cancelled.accepted_at is None

    @pytest.mark.asyncio
    async def test_terminal_status_cannot_move(self, session, factory):
        customer = await factory.user()
        lead = await factory.lead(customer.id, status=LeadStatus.MISSED)

        with pytest.raises(ConflictError) as exc_info:
            await LeadStore(session).transition(lead.id, LeadStatus.CANCELLED)
        assert exc_info.value.code == "invalid_transition"

    @pytest.mark.asyncio
    async def test_pending_cannot_complete(self, session, factory):
        customer = await factory.user()
        lead = await factory.lead(customer.id)

        with pytest.raises(ConflictError):
            await LeadStore(session).transition(lead.id, LeadStatus.COMPLETED)

    @pytest.mark.asyncio
    async def test_accept_only_through_try_accept(self, session, factory):
        customer = await factory.user()
        lead = await factory.lead(customer.id)

        with pytest.raises(ValidationError):
            await LeadStore(session).transition(lead.id, LeadStatus.ACCEPTED)

    @pytest.mark.asyncio
    async def test_unknown_status(self, session, factory):
        customer = await factory.user()
        lead = await factory.lead(customer.id)

        with pytest.raises(ValidationError):
            await LeadStore(session).transition(lead.id, "archived")

    @pytest.mark.asyncio
    async def test_customer_cannot_cancel_someone_elses_lead(self, session, factory):
        owner = await factory.user()
        other = await factory.user()
        lead = await factory.lead(owner.id)

        with pytest.raises(NotFoundError):
            await LeadStore(session).cancel_by_customer(other.id, lead.id)


class TestListing:

    @pytest.mark.asyncio
    async def test_available_prefers_area_then_category(self, session, factory):
        customer = await factory.user()
        f = await factory.freelancer(area="Malviya Nagar")
        near = await factory.lead(customer.id, location="Malviya Nagar, Jaipur")
        await factory.lead(customer.id, location="Vaishali Nagar")
        await factory.lead(customer.id, category_id=CATEGORY_ELECTRICAL)
        store = LeadStore(session)

        assert [l.id for l in await store.list_available_for(f)] == [near.id]

        elsewhere = await factory.freelancer(area="Jagatpura")
        assert len(await store.list_available_for(elsewhere)) == 2

    @pytest.mark.asyncio
    async def test_available_excludes_non_pending(self, session, factory):
        customer = await factory.user()
        f = await factory.freelancer()
        await factory.lead(customer.id, status=LeadStatus.CANCELLED)

        assert await LeadStore(session).list_available_for(f) == []

    @pytest.mark.asyncio
    async def test_list_by_status_paginates(self, session, factory):
        customer = await factory.user()
        for _ in range(3):
            await factory.lead(customer.id)
        await factory.lead(customer.id, status=LeadStatus.CANCELLED)

        page = await LeadStore(session).list_by_status(LeadStatus.PENDING, page=1, limit=2)

        assert page["total"] == 3
        assert len(page["items"]) == 2
        assert page["has_next"] is True

    @pytest.mark.asyncio
    async def test_list_stale_pending(self, session, factory):
        customer = await factory.user()
        now = datetime.utcnow()
        old = await factory.lead(customer.id, created_at=now - timedelta(hours=30))
        await factory.lead(customer.id, created_at=now - timedelta(hours=2))

        stale = await LeadStore(session).list_stale_pending(timedelta(hours=24), now)

        assert [l.id for l in stale] == [old.id]
