"""
Database engine and session management.
The engine is built and disposed by the host process (see main.lifespan)
and handed to request handlers through app.state.
"""
from typing import Optional

from fastapi import Request
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.orm import sessionmaker

from hirelocal.config import settings


def create_engine(url: Optional[str] = None, echo: Optional[bool] = None) -> AsyncEngine:
    """Create the async engine for the configured database."""
    database_url = (url or settings.DATABASE_URL).replace(
        "postgresql://", "postgresql+asyncpg://"
    )
    if echo is None:
        echo = settings.DATABASE_ECHO
    return create_async_engine(database_url, echo=echo, future=True, pool_pre_ping=True)


def create_session_factory(engine: AsyncEngine) -> sessionmaker:
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def init_db(engine: AsyncEngine):
    # Register all tables with SQLModel metadata
    import hirelocal.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


async def get_session(request: Request) -> AsyncSession:
    session_factory = request.app.state.session_factory
    async with session_factory() as session:
        yield session
