"""
API dependencies - shared across all routes.
"""
import uuid
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from sqlmodel.ext.asyncio.session import AsyncSession

from hirelocal.database import get_session
from hirelocal.config import settings
from hirelocal.core.security import verify_token
from hirelocal.core.exceptions import UnauthorizedError, ForbiddenError, NotFoundError
from hirelocal.models.freelancer import FreelancerProfile
from hirelocal.models.user import User, Roles
from hirelocal.repositories.freelancer_repo import FreelancerRepository
from hirelocal.repositories.user_repo import UserRepository
from hirelocal.services.integrations.base import LiveChannel


oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_PREFIX}/auth/login")


async def resolve_user(token: Optional[str], session: AsyncSession) -> User:
    """Turn a bearer token into an active User or raise UnauthorizedError."""
    payload = verify_token(token, "access") if token else None
    if not payload:
        raise UnauthorizedError()

    user_id = payload.get("user_id")
    if not user_id:
        raise UnauthorizedError()

    try:
        user_uuid = uuid.UUID(user_id)
    except ValueError:
        raise UnauthorizedError()

    user = await UserRepository(session).get(user_uuid)
    if not user:
        raise UnauthorizedError("User not found")
    if not user.is_active:
        raise UnauthorizedError("User account is deactivated")
    return user


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    session: AsyncSession = Depends(get_session)
) -> User:
    """Get current authenticated user from JWT token."""
    return await resolve_user(token, session)


def require_role(*roles: str):
    """Dependency factory: the current user must hold one of `roles`."""
    async def checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in roles:
            raise ForbiddenError(f"This action requires role: {', '.join(roles)}")
        return current_user
    return checker


get_current_customer = require_role(Roles.CUSTOMER, Roles.ADMIN)
get_current_admin = require_role(Roles.ADMIN)


async def get_current_freelancer(
    current_user: User = Depends(require_role(Roles.FREELANCER)),
    session: AsyncSession = Depends(get_session)
) -> FreelancerProfile:
    """The calling freelancer's profile."""
    profile = await FreelancerRepository(session).get_by_user_id(current_user.id)
    if not profile:
        raise NotFoundError("Freelancer profile")
    return profile


def get_live_channel(request: Request) -> Optional[LiveChannel]:
    return getattr(request.app.state, "live_channel", None)
