"""Calendar routes: connection status, OAuth connect flow, day availability."""

from __future__ import annotations

import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import HTMLResponse

from interview_scheduler.api.auth import get_current_user
from interview_scheduler.api.deps import Services, get_services
from interview_scheduler.errors import IntegrationWarning, ValidationError

router = APIRouter()
log = logging.getLogger(__name__)


@router.get("/connection")
async def connection(
    services: Services = Depends(get_services),
    user: dict = Depends(get_current_user),
):
    if services.calendar is None:
        return {"connected": False, "configured": False}
    return await services.calendar.check_connection(user["id"])


@router.get("/auth-url")
async def auth_url(
    services: Services = Depends(get_services),
    user: dict = Depends(get_current_user),
):
    if services.calendar is None:
        raise HTTPException(status_code=400, detail="Google Calendar is not configured")
    return {"url": services.calendar.authorization_url(user["id"])}


@router.get("/oauth/callback", response_class=HTMLResponse)
async def oauth_callback(
    code: str | None = Query(None),
    state: str | None = Query(None),
    error: str | None = Query(None),
    services: Services = Depends(get_services),
):
    """Redirect target of the Google consent screen; ``state`` is the user id."""
    if error:
        log.error("OAuth error: %s", error)
        return HTMLResponse(f"<html><body>Error: {error}</body></html>", status_code=400)
    if not code or not state:
        raise HTTPException(status_code=400, detail="Missing code or state")
    if services.calendar is None:
        raise HTTPException(status_code=400, detail="Google Calendar is not configured")

    try:
        await services.calendar.exchange_code(code, state)
    except IntegrationWarning as e:
        return HTMLResponse(f"<html><body>Error: {e.message}</body></html>", status_code=400)
    return HTMLResponse("<html><body>Google Calendar connected. You can close this window.</body></html>")


@router.get("/availability")
async def availability(
    day: date = Query(..., alias="date"),
    duration: int | None = Query(None),
    selected: str | None = Query(None),
    services: Services = Depends(get_services),
    user: dict = Depends(get_current_user),
):
    try:
        options = await services.scheduler.slot_options(user["id"], day, duration, current_time=selected)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return options.model_dump(mode="json")
