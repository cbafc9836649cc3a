"""
Administrative lead routes.
"""
import uuid
from typing import Optional
from datetime import timedelta

from fastapi import APIRouter, Depends, Query
from sqlmodel.ext.asyncio.session import AsyncSession

from hirelocal.database import get_session
from hirelocal.api.deps import get_current_admin
from hirelocal.config import settings
from hirelocal.core.pagination import PaginatedResponse
from hirelocal.models.user import User
from hirelocal.schemas.lead import LeadResponse, LeadStatusUpdate, SweepReportResponse
from hirelocal.services.lead_service import LeadStore
from hirelocal.services.missed_lead_service import MissedLeadSweeper

router = APIRouter(prefix=f"{settings.API_PREFIX}/admin", tags=["admin"])


@router.get("/leads", response_model=PaginatedResponse[LeadResponse])
async def list_leads(
    status: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    current_user: User = Depends(get_current_admin),
    session: AsyncSession = Depends(get_session)
):
    return await LeadStore(session).list_by_status(status, page, limit)


@router.patch("/leads/{lead_id}/status", response_model=LeadResponse)
async def update_lead_status(
    lead_id: uuid.UUID,
    body: LeadStatusUpdate,
    current_user: User = Depends(get_current_admin),
    session: AsyncSession = Depends(get_session)
):
    """Status correction. Only moves the state machine allows; accept goes through freelancers."""
    return await LeadStore(session).transition(lead_id, body.status)


@router.post("/leads/check-missed", response_model=SweepReportResponse)
async def check_missed_leads(
    current_user: User = Depends(get_current_admin),
    session: AsyncSession = Depends(get_session)
):
    sweeper = MissedLeadSweeper(session, timedelta(hours=settings.LEAD_EXPIRY_HOURS))
    return await sweeper.sweep()
