# tests/conftest.py
"""
Shared fixtures. Every test gets its own SQLite file through aiosqlite, so
conditional updates and ON CONFLICT inserts run against a real database.
"""
import uuid
from datetime import datetime, timedelta
from typing import Optional
from unittest.mock import AsyncMock, Mock

import pytest
import pytest_asyncio

from hirelocal.database import create_engine, create_session_factory, init_db
from hirelocal.core.security import create_access_token
from hirelocal.models import User, FreelancerProfile, Lead, Subscription
from hirelocal.models.freelancer import VerificationStatus
from hirelocal.models.lead import LeadStatus
from hirelocal.models.subscription import SubscriptionType, SubscriptionStatus
from hirelocal.models.user import Roles
from hirelocal.services.integrations.base import LiveChannel

CATEGORY_PLUMBING = uuid.UUID("6f1c2a7e-1d8b-4c55-9b3e-0a4a3e2f9c11")
CATEGORY_ELECTRICAL = uuid.UUID("0b7d4e52-93a1-4f0e-8c2d-5e6f7a8b9c01")


# ============================================================================
# DATABASE
# ============================================================================

@pytest.fixture
def database_url(tmp_path):
    return f"sqlite+aiosqlite:///{tmp_path / 'hirelocal.db'}"


@pytest_asyncio.fixture
async def engine(database_url):
    engine = create_engine(database_url, echo=False)
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest_asyncio.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


# ============================================================================
# SEED DATA
# ============================================================================

class Factory:
    """Creates committed rows for tests."""

    def __init__(self, session):
        self.session = session

    async def _save(self, obj):
        self.session.add(obj)
        await self.session.commit()
        await self.session.refresh(obj)
        return obj

    async def user(self, role: str = Roles.CUSTOMER, **kwargs) -> User:
        kwargs.setdefault("email", f"{uuid.uuid4().hex[:8]}@example.com")
        kwargs.setdefault("full_name", "Test User")
        return await self._save(User(role=role, **kwargs))

    async def freelancer(
        self,
        category_id: Optional[uuid.UUID] = CATEGORY_PLUMBING,
        area: Optional[str] = "Malviya Nagar",
        verification_status: str = VerificationStatus.APPROVED,
        is_available: bool = True,
        rating: float = 4.0,
        full_name: str = "Ravi Kumar",
    ) -> FreelancerProfile:
        user = await self.user(role=Roles.FREELANCER, full_name=full_name)
        return await self._save(FreelancerProfile(
            user_id=user.id,
            category_id=category_id,
            full_name=full_name,
            professional_title="Plumber",
            area=area,
            verification_status=verification_status,
            is_available=is_available,
            rating=rating,
        ))

    async def subscription(
        self,
        freelancer_id: uuid.UUID,
        end_date: Optional[datetime] = None,
        status: str = SubscriptionStatus.ACTIVE,
        type: str = SubscriptionType.LEAD,
    ) -> Subscription:
        return await self._save(Subscription(
            freelancer_id=freelancer_id,
            type=type,
            status=status,
            amount=499,
            start_date=datetime.utcnow() - timedelta(days=1),
            end_date=end_date or datetime.utcnow() + timedelta(days=30),
        ))

    async def lead(
        self,
        customer_id: uuid.UUID,
        category_id: uuid.UUID = CATEGORY_PLUMBING,
        location: str = "Malviya Nagar",
        status: str = LeadStatus.PENDING,
        created_at: Optional[datetime] = None,
        **kwargs
    ) -> Lead:
        now = created_at or datetime.utcnow()
        return await self._save(Lead(
            customer_id=customer_id,
            category_id=category_id,
            title=kwargs.pop("title", "Fix leaking kitchen tap"),
            description=kwargs.pop("description", "Tap leaks constantly"),
            location=location,
            mobile_number=kwargs.pop("mobile_number", "+919876543210"),
            status=status,
            created_at=now,
            updated_at=now,
            **kwargs
        ))


@pytest.fixture
def factory(session):
    return Factory(session)


def token_for(user: User) -> str:
    return create_access_token({"user_id": str(user.id)})


# ============================================================================
# LIVE CHANNEL
# ============================================================================

@pytest.fixture
def live_channel():
    """Live channel that reports every push as delivered."""
    channel = Mock(spec=LiveChannel)
    channel.send = AsyncMock(return_value=True)
    channel.is_connected = Mock(return_value=True)
    return channel
