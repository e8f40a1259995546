"""FastAPI application entry point."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from interview_scheduler import __version__
from interview_scheduler.api.auth import get_current_user
from interview_scheduler.api.deps import Services, build_services
from interview_scheduler.api.routes import applications, calendar, interviews
from interview_scheduler.config import load_config

log = logging.getLogger(__name__)


def create_app(services: Services | None = None) -> FastAPI:
    """Build the API. Tests pass prepared services; otherwise config comes from the env."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = services is None
        app.state.services = services or build_services(load_config())
        log.info("Interview scheduler API started (timezone %s)", app.state.services.config.timezone)

        yield

        if owned:
            app.state.services.db.close()

    app = FastAPI(title="Interview Scheduler API", version=__version__, lifespan=lifespan)
    if services is not None:
        app.state.services = services

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _staff_only = [Depends(get_current_user)]

    app.include_router(calendar.router, prefix="/api/calendar", tags=["calendar"])
    app.include_router(applications.router, prefix="/api/applications", tags=["applications"], dependencies=_staff_only)
    app.include_router(interviews.router, prefix="/api/interviews", tags=["interviews"], dependencies=_staff_only)

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    return app
