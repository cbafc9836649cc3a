"""
Freelancer lead routes: browse, view, accept, decline.
"""
import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlmodel.ext.asyncio.session import AsyncSession

from hirelocal.database import get_session
from hirelocal.api.deps import get_current_freelancer, get_live_channel, require_role
from hirelocal.config import settings
from hirelocal.models.freelancer import FreelancerProfile
from hirelocal.models.user import User, Roles
from hirelocal.schemas.common import ErrorResponse
from hirelocal.schemas.lead import (
    LeadResponse, LeadAcceptResponse, LeadMissRequest, LeadIgnoreRequest,
    InteractionResponse, LeadHistoryItem
)
from hirelocal.schemas.subscription import ActiveSubscriptionsResponse
from hirelocal.services.acceptance_service import AcceptanceCoordinator
from hirelocal.services.entitlement_service import EntitlementChecker
from hirelocal.services.integrations.base import LiveChannel
from hirelocal.services.interaction_service import InteractionRecorder
from hirelocal.services.lead_service import LeadStore

router = APIRouter(prefix=f"{settings.API_PREFIX}/freelancer", tags=["freelancer"])


@router.get("/leads/available", response_model=List[LeadResponse])
async def list_available_leads(
    profile: FreelancerProfile = Depends(get_current_freelancer),
    session: AsyncSession = Depends(get_session)
):
    """Pending leads in the freelancer's category and area. No plan needed to look."""
    return await LeadStore(session).list_available_for(profile)


@router.get("/leads/accepted", response_model=List[LeadResponse])
async def list_accepted_leads(
    profile: FreelancerProfile = Depends(get_current_freelancer),
    session: AsyncSession = Depends(get_session)
):
    return await LeadStore(session).list_accepted_by(profile.id)


@router.get("/leads/history", response_model=List[LeadHistoryItem])
async def lead_history(
    profile: FreelancerProfile = Depends(get_current_freelancer),
    session: AsyncSession = Depends(get_session)
):
    entries = await InteractionRecorder(session).history(profile.id)
    return [
        {"lead": e.lead, "interaction": e.interaction, "final_status": e.final_status}
        for e in entries
    ]


@router.post("/leads/{lead_id}/view", response_model=InteractionResponse)
async def view_lead(
    lead_id: uuid.UUID,
    profile: FreelancerProfile = Depends(get_current_freelancer),
    session: AsyncSession = Depends(get_session)
):
    await LeadStore(session).get_by_id(lead_id)
    return await InteractionRecorder(session).record_viewed(profile.id, lead_id)


@router.post(
    "/leads/{lead_id}/accept",
    response_model=LeadAcceptResponse,
    responses={
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        504: {"model": ErrorResponse},
    }
)
async def accept_lead(
    lead_id: uuid.UUID,
    current_user: User = Depends(require_role(Roles.FREELANCER)),
    session: AsyncSession = Depends(get_session),
    channel: Optional[LiveChannel] = Depends(get_live_channel)
):
    """
    Accept a lead.

    - 403 upgrade_required without an active lead plan
    - 409 lead_unavailable when another freelancer got there first
    """
    coordinator = AcceptanceCoordinator(session, channel, timeout=settings.ACCEPT_TIMEOUT_SECONDS)
    lead = await coordinator.accept(current_user.id, lead_id)
    return {"success": True, "lead": lead}


@router.post("/leads/{lead_id}/miss", response_model=InteractionResponse)
async def miss_lead(
    lead_id: uuid.UUID,
    body: LeadMissRequest,
    profile: FreelancerProfile = Depends(get_current_freelancer),
    session: AsyncSession = Depends(get_session)
):
    await LeadStore(session).get_by_id(lead_id)
    return await InteractionRecorder(session).mark_missed(profile.id, lead_id, body.reason, body.notes)


@router.post("/leads/{lead_id}/ignore", response_model=InteractionResponse)
async def ignore_lead(
    lead_id: uuid.UUID,
    body: LeadIgnoreRequest,
    profile: FreelancerProfile = Depends(get_current_freelancer),
    session: AsyncSession = Depends(get_session)
):
    await LeadStore(session).get_by_id(lead_id)
    return await InteractionRecorder(session).mark_ignored(profile.id, lead_id, body.notes)


@router.get("/subscriptions/active", response_model=ActiveSubscriptionsResponse)
async def active_subscriptions(
    profile: FreelancerProfile = Depends(get_current_freelancer),
    session: AsyncSession = Depends(get_session)
):
    checker = EntitlementChecker(session)
    return {
        "has_active_lead_plan": await checker.has_active_lead_plan(profile.id),
        "subscriptions": await checker.active_subscriptions(profile.id),
    }
