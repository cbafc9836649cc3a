"""
HireLocal Backend - FastAPI Application
Main entry point with all routes configured.
"""
import logging
from typing import Optional
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from hirelocal.config import settings
from hirelocal.database import create_engine, create_session_factory, init_db
from hirelocal.core.exceptions import (
    HireLocalException, hirelocal_exception_handler, storage_exception_handler
)
from hirelocal.schemas.common import HealthResponse
from hirelocal.services.integrations.websocket import ConnectionManager

# Import all API routers
from hirelocal.api import leads, freelancer, notifications, admin, ws

VERSION = "1.0.0"

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)


def create_app(database_url: Optional[str] = None) -> FastAPI:
    """Build the application. Tests pass their own database_url."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Startup and shutdown events."""
        engine = create_engine(database_url)
        app.state.engine = engine
        app.state.session_factory = create_session_factory(engine)
        app.state.live_channel = ConnectionManager()
        await init_db(engine)
        logger.info("HireLocal API started")
        yield
        await engine.dispose()
        logger.info("HireLocal API stopped")

    app = FastAPI(
        title="HireLocal API",
        description="Local services marketplace: lead matching, delivery and acceptance",
        version=VERSION,
        lifespan=lifespan
    )

    # CORS Configuration
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(HireLocalException, hirelocal_exception_handler)
    app.add_exception_handler(SQLAlchemyError, storage_exception_handler)

    app.include_router(leads.router)
    app.include_router(freelancer.router)
    app.include_router(notifications.router)
    app.include_router(admin.router)
    app.include_router(ws.router)

    @app.get("/")
    async def root():
        return {
            "message": "HireLocal API is running",
            "version": VERSION,
            "docs": "/docs"
        }

    @app.get("/health", response_model=HealthResponse)
    async def health():
        """Detailed health check."""
        return {
            "status": "healthy",
            "version": VERSION,
            "live_connections": app.state.live_channel.stats()["total_connections"]
        }

    return app


app = create_app()
