"""Slack incoming-webhook notifications for scheduled interviews."""

from __future__ import annotations

import asyncio
import logging

from slack_sdk.webhook import WebhookClient

from interview_scheduler.errors import IntegrationWarning

log = logging.getLogger(__name__)


class SlackNotifier:
    """Posts Block Kit messages to a channel's incoming webhook.

    Without a webhook URL every call is a logged no-op.
    """

    def __init__(self, webhook_url: str = "", client: WebhookClient | None = None) -> None:
        self.webhook_url = webhook_url
        self._client = client or (WebhookClient(webhook_url) if webhook_url else None)

    @property
    def configured(self) -> bool:
        return self._client is not None

    async def interview_scheduled(
        self,
        candidate_name: str,
        job_title: str,
        details: dict[str, str],
    ) -> bool:
        """Announce a scheduled interview. Returns False when not configured."""
        if self._client is None:
            log.info("Slack webhook not configured, skipping notification")
            return False

        blocks = build_interview_blocks(candidate_name, job_title, details)
        fallback = f"Interview scheduled: {candidate_name} - {job_title}"
        try:
            response = await asyncio.to_thread(self._client.send, text=fallback, blocks=blocks)
        except OSError as e:
            raise IntegrationWarning("chat", f"Slack webhook unreachable: {e}") from e
        if response.status_code != 200:
            raise IntegrationWarning("chat", f"Slack webhook returned {response.status_code}: {response.body}")
        log.info("Slack notification sent")
        return True


def build_interview_blocks(candidate_name: str, job_title: str, details: dict[str, str]) -> list[dict]:
    """Build Slack Block Kit blocks for an interview announcement."""
    blocks: list[dict] = [
        {
            "type": "header",
            "text": {"type": "plain_text", "text": "Interview Scheduled", "emoji": True},
        },
        {
            "type": "section",
            "fields": [
                {"type": "mrkdwn", "text": f"*Candidate:*\n{candidate_name or 'Unknown'}"},
                {"type": "mrkdwn", "text": f"*Position:*\n{job_title or 'Unknown'}"},
            ],
        },
    ]
    if details:
        blocks.append({
            "type": "section",
            "fields": [{"type": "mrkdwn", "text": f"*{k}:*\n{v}"} for k, v in details.items()],
        })

    meeting_url = details.get("Meeting")
    if meeting_url and meeting_url.startswith("http"):
        blocks.append({
            "type": "actions",
            "elements": [{
                "type": "button",
                "text": {"type": "plain_text", "text": "Join Meeting", "emoji": True},
                "url": meeting_url,
                "style": "primary",
            }],
        })
    return blocks
