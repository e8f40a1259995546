"""Service wiring shared by the API and the CLI."""

from __future__ import annotations

from dataclasses import dataclass

import httpx
from fastapi import Request

from interview_scheduler.availability import CalendarAvailability, NullAvailability
from interview_scheduler.config import Config
from interview_scheduler.database import Database
from interview_scheduler.notifications import EmailNotifier
from interview_scheduler.scheduler import InterviewScheduler
from interview_scheduler.tools.google_calendar import GoogleCalendarClient
from interview_scheduler.tools.slack import SlackNotifier
from interview_scheduler.tools.teams import TeamsMeetingClient


@dataclass
class Services:
    config: Config
    db: Database
    calendar: GoogleCalendarClient | None
    scheduler: InterviewScheduler


def build_services(
    config: Config,
    db: Database | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    chat: SlackNotifier | None = None,
) -> Services:
    """Assemble the scheduler and its integrations from configuration.

    Google Calendar is wired only when OAuth credentials exist; without it
    availability falls back to the null oracle.
    """
    db = db or Database(config.db_path, unique_interview_slots=config.unique_interview_slots)

    calendar = GoogleCalendarClient(config, db, transport=transport) if config.google_configured else None
    availability = CalendarAvailability(calendar) if calendar else NullAvailability()
    teams = TeamsMeetingClient(config, transport=transport) if config.teams_configured else None

    scheduler = InterviewScheduler(
        config,
        db,
        availability=availability,
        calendar=calendar,
        teams=teams,
        email=EmailNotifier(config, db),
        chat=chat or SlackNotifier(config.slack_webhook_url),
    )
    return Services(config=config, db=db, calendar=calendar, scheduler=scheduler)


def get_services(request: Request) -> Services:
    return request.app.state.services
