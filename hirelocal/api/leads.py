"""
Customer lead routes: post a requirement, follow it, cancel it.
"""
import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlmodel.ext.asyncio.session import AsyncSession

from hirelocal.database import get_session
from hirelocal.api.deps import get_current_customer, get_live_channel
from hirelocal.config import settings
from hirelocal.models.user import User
from hirelocal.schemas.lead import LeadCreate, LeadResponse, LeadCreateResponse
from hirelocal.services.delivery_service import LeadDeliveryPipeline
from hirelocal.services.integrations.base import LiveChannel
from hirelocal.services.lead_service import LeadStore

router = APIRouter(prefix=f"{settings.API_PREFIX}/leads", tags=["leads"])


@router.post("", response_model=LeadCreateResponse, status_code=201)
async def create_lead(
    lead_data: LeadCreate,
    current_user: User = Depends(get_current_customer),
    session: AsyncSession = Depends(get_session),
    channel: Optional[LiveChannel] = Depends(get_live_channel)
):
    """
    Post a service requirement and notify matching freelancers.
    The lead is created even when nobody matches or every delivery fails,
    but not when matching itself cannot run.
    """
    pipeline = LeadDeliveryPipeline(session, channel, settings.NOTIFICATION_POLL_LIMIT)
    lead, report = await pipeline.create_and_deliver(current_user.id, lead_data)
    return {"lead": lead, "delivery": report}


@router.get("/mine", response_model=List[LeadResponse])
async def list_my_leads(
    current_user: User = Depends(get_current_customer),
    session: AsyncSession = Depends(get_session)
):
    """Leads posted by the current customer, newest first."""
    return await LeadStore(session).list_by_customer(current_user.id)


@router.post("/{lead_id}/cancel", response_model=LeadResponse)
async def cancel_lead(
    lead_id: uuid.UUID,
    current_user: User = Depends(get_current_customer),
    session: AsyncSession = Depends(get_session)
):
    return await LeadStore(session).cancel_by_customer(current_user.id, lead_id)
