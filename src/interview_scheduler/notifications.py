"""Interview confirmation content and the e-mail notifier."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from html import escape

from interview_scheduler.config import Config
from interview_scheduler.database import Database
from interview_scheduler.errors import IntegrationWarning
from interview_scheduler.schemas import EmailLog, Interview, OutgoingEmail
from interview_scheduler.tools.email import send_email

log = logging.getLogger(__name__)

INTERVIEW_TIPS = [
    "Test your audio and video 10 minutes before",
    "Find a quiet, well-lit space",
    "Have a copy of your resume ready",
    "Prepare questions about the role",
]


def format_date(value: datetime) -> str:
    """e.g. "Monday, January 5, 2026"."""
    return f"{value:%A, %B} {value.day}, {value:%Y}"


def format_time(value: datetime) -> str:
    """e.g. "10:00 AM UTC"."""
    return f"{value:%I:%M %p} {value.tzname() or ''}".strip()


def interview_details(interview: Interview, local_start: datetime) -> dict[str, str]:
    return {
        "Date": format_date(local_start),
        "Time": format_time(local_start),
        "Duration": f"{interview.duration_minutes} min",
        "Type": interview.interview_type.value,
        "Meeting": interview.meeting_url or "TBD",
    }


def build_confirmation_email(
    config: Config,
    interview: Interview,
    candidate_name: str,
    candidate_email: str,
    job_title: str,
    candidate_id: str = "",
) -> OutgoingEmail:
    local_start = interview.scheduled_at.astimezone(config.tzinfo)
    date_str = format_date(local_start)
    time_str = format_time(local_start)
    meeting_url = interview.meeting_url

    text_lines = [
        f"Dear {candidate_name},",
        "",
        f"Your interview for the {job_title} position has been scheduled.",
        "",
        f"  Date:     {date_str}",
        f"  Time:     {time_str}",
        f"  Duration: {interview.duration_minutes} minutes",
        f"  Type:     {interview.interview_type.value}",
        "",
    ]
    if meeting_url:
        text_lines.append(f"Join the video meeting: {meeting_url}")
    else:
        text_lines.append("Meeting details will be shared separately by the hiring team.")
    text_lines += ["", "Tips for your interview:"]
    text_lines += [f"  - {tip}" for tip in INTERVIEW_TIPS]
    text_lines += ["", "Best of luck!", f"The {config.company_name} Team"]

    if meeting_url:
        link_html = (
            f'<p><a href="{escape(meeting_url)}">Join Video Meeting</a></p>'
            f'<p style="font-size:12px">Or copy this link: {escape(meeting_url)}</p>'
        )
    else:
        link_html = "<p>Meeting details will be shared separately by the hiring team.</p>"
    rows = "".join(
        f"<tr><td>{label}</td><td><strong>{escape(value)}</strong></td></tr>"
        for label, value in (
            ("Date", date_str),
            ("Time", time_str),
            ("Duration", f"{interview.duration_minutes} minutes"),
            ("Type", interview.interview_type.value),
        )
    )
    tips = "".join(f"<li>{tip}</li>" for tip in INTERVIEW_TIPS)
    html = (
        "<!DOCTYPE html><html><body style=\"font-family: sans-serif; max-width: 600px; margin: 0 auto;\">"
        "<h1>Interview Scheduled!</h1>"
        f"<p>Dear <strong>{escape(candidate_name)}</strong>,</p>"
        f"<p>Your interview for the <strong>{escape(job_title)}</strong> position has been scheduled.</p>"
        f"<table>{rows}</table>"
        f"{link_html}"
        f"<h3>Tips for your interview:</h3><ul>{tips}</ul>"
        f"<p>Best of luck!</p><p><strong>The {escape(config.company_name)} Team</strong></p>"
        f"<p style=\"font-size:12px\">This is an automated message from {escape(config.company_name)}</p>"
        "</body></html>"
    )

    return OutgoingEmail(
        to=candidate_email,
        subject=f"Interview Confirmed: {job_title} - {date_str}",
        text="\n".join(text_lines),
        html=html,
        email_type="interview_scheduled",
        candidate_id=candidate_id,
    )


class EmailNotifier:
    """Sends through the configured backend and records every attempt."""

    def __init__(self, config: Config, db: Database) -> None:
        self.config = config
        self.db = db

    async def send(self, email: OutgoingEmail) -> None:
        if not email.to:
            raise IntegrationWarning("email", "Candidate has no e-mail address")

        sent = await asyncio.to_thread(send_email, self.config, email)
        self.db.log_email(EmailLog(
            recipient_email=email.to,
            subject=email.subject,
            email_type=email.email_type,
            candidate_id=email.candidate_id,
            status="sent" if sent else "failed",
        ))
        if not sent:
            raise IntegrationWarning("email", f"Could not deliver {email.email_type} e-mail to {email.to}")
        log.info("Sent %s e-mail to %s", email.email_type, email.to)
