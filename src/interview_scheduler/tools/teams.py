"""Microsoft Teams online meetings (fallback when no calendar link exists)."""

from __future__ import annotations

import logging

import httpx

from interview_scheduler.config import Config
from interview_scheduler.errors import IntegrationWarning
from interview_scheduler.schemas import MeetingRequest, MeetingResult

log = logging.getLogger(__name__)

GRAPH_API = "https://graph.microsoft.com/v1.0"


class TeamsMeetingClient:
    def __init__(self, config: Config, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self.config = config
        self._transport = transport

    async def create_meeting(self, request: MeetingRequest) -> MeetingResult:
        cfg = self.config
        token_url = f"https://login.microsoftonline.com/{cfg.ms_tenant_id}/oauth2/v2.0/token"
        try:
            async with httpx.AsyncClient(timeout=cfg.http_timeout, transport=self._transport) as client:
                token_resp = await client.post(token_url, data={
                    "client_id": cfg.ms_client_id,
                    "client_secret": cfg.ms_client_secret,
                    "scope": "https://graph.microsoft.com/.default",
                    "grant_type": "client_credentials",
                })
                if token_resp.status_code != 200:
                    raise IntegrationWarning("meeting", "Microsoft token request failed")

                resp = await client.post(
                    f"{GRAPH_API}/users/me/onlineMeetings",
                    headers={"Authorization": f"Bearer {token_resp.json()['access_token']}"},
                    json={
                        "startDateTime": request.start.isoformat(),
                        "endDateTime": request.end.isoformat(),
                        "subject": request.title,
                    },
                )
        except httpx.HTTPError as e:
            raise IntegrationWarning("meeting", f"Teams request failed: {e}") from e

        if resp.status_code not in (200, 201):
            log.error("Teams meeting creation failed: %s", resp.text)
            raise IntegrationWarning("meeting", "Failed to create Teams meeting")

        data = resp.json()
        log.info("Teams meeting created")
        return MeetingResult(meeting_id=data.get("id"), join_url=data.get("joinWebUrl"))
