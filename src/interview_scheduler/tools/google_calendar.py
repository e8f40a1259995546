"""Google Calendar integration: OAuth tokens, free/busy lookup, Meet events."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timedelta, timezone
from urllib.parse import urlencode

import httpx

from interview_scheduler.config import Config
from interview_scheduler.database import Database
from interview_scheduler.errors import CalendarNotConnected, IntegrationWarning
from interview_scheduler.schemas import CalendarToken, MeetingRequest, MeetingResult, TimeInterval

log = logging.getLogger(__name__)

GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
CALENDAR_API = "https://www.googleapis.com/calendar/v3"
SCOPES = [
    "https://www.googleapis.com/auth/calendar.readonly",
    "https://www.googleapis.com/auth/calendar.events",
]


def parse_rfc3339(value: str) -> datetime:
    """Parse the timestamps Google returns ("2026-01-05T10:00:00Z")."""
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


def _token_payload(resp: httpx.Response) -> tuple[str, str, datetime]:
    """Access token, refresh token and expiry from a token endpoint reply."""
    try:
        data = resp.json()
        access_token = data["access_token"]
        if not isinstance(access_token, str) or not access_token:
            raise ValueError("empty access_token")
        expires_in = int(data.get("expires_in", 3600))
        refresh_token = data.get("refresh_token") or ""
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise IntegrationWarning("calendar", f"Malformed token response: {e}") from e
    return access_token, refresh_token, datetime.now(timezone.utc) + timedelta(seconds=expires_in)


def _calendar_ids(resp: httpx.Response) -> list[dict]:
    """Calendars to query; ``primary`` when the list is unavailable or empty."""
    if resp.status_code != 200:
        return [{"id": "primary"}]
    try:
        items = resp.json().get("items") or []
        ids = [{"id": c["id"]} for c in items]
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise IntegrationWarning("availability", f"Malformed calendar list: {e}") from e
    return ids or [{"id": "primary"}]


class GoogleCalendarClient:
    """Per-user access to the connected Google Calendar.

    Tokens live in the ``calendar_tokens`` table and are refreshed on demand.
    A refresh that Google rejects removes the stored token, so the user shows
    up as disconnected and has to reconnect.
    """

    def __init__(
        self,
        config: Config,
        db: Database,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self.db = db
        self._transport = transport

    def _http(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.config.http_timeout, transport=self._transport)

    # OAuth

    def authorization_url(self, user_id: str) -> str:
        params = {
            "client_id": self.config.google_client_id,
            "redirect_uri": self.config.google_redirect_uri,
            "response_type": "code",
            "scope": " ".join(SCOPES),
            "access_type": "offline",
            "prompt": "consent",
            "state": user_id,
        }
        return f"{GOOGLE_AUTH_URL}?{urlencode(params)}"

    async def exchange_code(self, code: str, user_id: str) -> CalendarToken:
        """Trade the consent-screen code for tokens and store them."""
        if not self.config.google_configured:
            raise IntegrationWarning("calendar", "OAuth not configured")
        try:
            async with self._http() as client:
                resp = await client.post(GOOGLE_TOKEN_URL, data={
                    "code": code,
                    "client_id": self.config.google_client_id,
                    "client_secret": self.config.google_client_secret,
                    "redirect_uri": self.config.google_redirect_uri,
                    "grant_type": "authorization_code",
                })
        except httpx.HTTPError as e:
            raise IntegrationWarning("calendar", f"Token exchange failed: {e}") from e
        if resp.status_code != 200:
            log.error("Token exchange failed: %s", resp.text)
            raise IntegrationWarning("calendar", "Token exchange failed")

        access_token, refresh_token, expiry = _token_payload(resp)
        token = CalendarToken(
            user_id=user_id,
            access_token=access_token,
            refresh_token=refresh_token,
            token_expiry=expiry,
        )
        self.db.save_calendar_token(token)
        log.info("Stored Google Calendar tokens for user %s", user_id)
        return token

    async def check_connection(self, user_id: str) -> dict:
        return {
            "connected": self.db.get_calendar_token(user_id) is not None,
            "configured": self.config.google_configured,
        }

    async def _access_token(self, user_id: str) -> str:
        token = self.db.get_calendar_token(user_id)
        if token is None:
            raise CalendarNotConnected()
        if token.token_expiry > datetime.now(timezone.utc):
            return token.access_token

        log.info("Access token for user %s expired, refreshing", user_id)
        if not self.config.google_configured:
            raise IntegrationWarning("calendar", "OAuth not configured")
        try:
            async with self._http() as client:
                resp = await client.post(GOOGLE_TOKEN_URL, data={
                    "client_id": self.config.google_client_id,
                    "client_secret": self.config.google_client_secret,
                    "refresh_token": token.refresh_token,
                    "grant_type": "refresh_token",
                })
        except httpx.HTTPError as e:
            raise IntegrationWarning("calendar", f"Token refresh failed: {e}") from e

        if resp.status_code != 200:
            log.warning("Token refresh failed for user %s: %s", user_id, resp.text)
            self.db.delete_calendar_token(user_id)
            raise CalendarNotConnected("Token expired, please reconnect Google Calendar")

        token.access_token, _, token.token_expiry = _token_payload(resp)
        self.db.save_calendar_token(token)
        return token.access_token

    # Free / busy

    async def free_busy(self, user_id: str, time_min: datetime, time_max: datetime) -> list[TimeInterval]:
        """Busy periods of every calendar on the account between two instants.

        Raises CalendarNotConnected when the user has no usable credential and
        IntegrationWarning on any upstream failure.
        """
        access_token = await self._access_token(user_id)
        headers = {"Authorization": f"Bearer {access_token}"}
        tz = self.config.tzinfo

        try:
            async with self._http() as client:
                cal_resp = await client.get(f"{CALENDAR_API}/users/me/calendarList", headers=headers)
                calendar_ids = _calendar_ids(cal_resp)

                resp = await client.post(
                    f"{CALENDAR_API}/freeBusy",
                    headers=headers,
                    json={
                        "timeMin": time_min.isoformat(),
                        "timeMax": time_max.isoformat(),
                        "items": calendar_ids,
                    },
                )
        except httpx.HTTPError as e:
            raise IntegrationWarning("availability", f"Free/busy request failed: {e}") from e

        if resp.status_code != 200:
            log.error("Free/busy request failed: %s", resp.text)
            raise IntegrationWarning("availability", "Failed to get calendar availability")

        busy: list[TimeInterval] = []
        try:
            for calendar in (resp.json().get("calendars") or {}).values():
                for period in calendar.get("busy") or []:
                    busy.append(TimeInterval(
                        start=parse_rfc3339(period["start"]).astimezone(tz),
                        end=parse_rfc3339(period["end"]).astimezone(tz),
                    ))
        except (KeyError, TypeError, ValueError) as e:
            raise IntegrationWarning("availability", f"Malformed free/busy payload: {e}") from e
        return busy

    # Events

    async def create_meeting(self, request: MeetingRequest) -> MeetingResult:
        """Create a calendar event, with a Google Meet link when requested."""
        try:
            access_token = await self._access_token(request.organizer_id)
        except IntegrationWarning as e:
            raise IntegrationWarning("meeting", e.message) from e

        event: dict = {
            "summary": request.title,
            "description": request.description,
            "start": {"dateTime": request.start.isoformat(), "timeZone": self.config.timezone},
            "end": {"dateTime": request.end.isoformat(), "timeZone": self.config.timezone},
        }
        if request.attendees:
            event["attendees"] = [{"email": e} for e in request.attendees]
        params = {}
        if request.want_video_link:
            event["conferenceData"] = {
                "createRequest": {
                    "requestId": uuid.uuid4().hex,
                    "conferenceSolutionKey": {"type": "hangoutsMeet"},
                },
            }
            params["conferenceDataVersion"] = 1

        try:
            async with self._http() as client:
                resp = await client.post(
                    f"{CALENDAR_API}/calendars/primary/events",
                    headers={"Authorization": f"Bearer {access_token}"},
                    params=params,
                    json=event,
                )
        except httpx.HTTPError as e:
            raise IntegrationWarning("meeting", f"Calendar event creation failed: {e}") from e

        if resp.status_code not in (200, 201):
            log.error("Event creation failed: %s", resp.text)
            raise IntegrationWarning("meeting", "Failed to create calendar event")

        try:
            created = resp.json()
            entry_points = (created.get("conferenceData") or {}).get("entryPoints") or []
            join_url = next(
                (e.get("uri") for e in entry_points if e.get("entryPointType") == "video"), None
            )
        except (TypeError, ValueError, AttributeError) as e:
            raise IntegrationWarning("meeting", f"Malformed event response: {e}") from e
        return MeetingResult(meeting_id=created.get("id"), join_url=join_url)
