"""Configuration loading from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from zoneinfo import ZoneInfo

from dotenv import load_dotenv

_TRUE = {"1", "true", "yes", "on"}


@dataclass
class Config:
    db_path: Path = field(default_factory=lambda: Path("interview_scheduler.db"))

    # Scheduling window, expressed in the organisation's timezone
    timezone: str = "UTC"
    business_day_start: str = "09:00"
    business_day_end: str = "17:00"
    slot_step_minutes: int = 30
    default_duration_minutes: int = 60
    unique_interview_slots: bool = False

    # Google Calendar (availability + Meet links)
    google_client_id: str = ""
    google_client_secret: str = ""
    google_redirect_uri: str = "http://localhost:8000/api/calendar/oauth/callback"

    # Microsoft Teams fallback for meeting links
    ms_tenant_id: str = ""
    ms_client_id: str = ""
    ms_client_secret: str = ""

    slack_webhook_url: str = ""

    email_backend: str = "console"
    email_from: str = "recruiting@example.com"
    company_name: str = "CortexHR"
    sendgrid_api_key: str = ""
    smtp_host: str = ""
    smtp_port: int = 587
    smtp_username: str = ""
    smtp_password: str = ""

    jwt_secret: str = "interview-scheduler-dev-secret-change-me"
    http_timeout: float = 15.0

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    @property
    def google_configured(self) -> bool:
        return bool(self.google_client_id and self.google_client_secret)

    @property
    def teams_configured(self) -> bool:
        return bool(self.ms_tenant_id and self.ms_client_id and self.ms_client_secret)


def load_config(env_file: str | None = None) -> Config:
    """Load configuration from .env file and environment variables."""
    if env_file:
        load_dotenv(env_file)
    else:
        load_dotenv()

    return Config(
        db_path=Path(os.getenv("DB_PATH", "interview_scheduler.db")),
        timezone=os.getenv("SCHEDULER_TIMEZONE", "UTC"),
        business_day_start=os.getenv("BUSINESS_DAY_START", "09:00"),
        business_day_end=os.getenv("BUSINESS_DAY_END", "17:00"),
        slot_step_minutes=int(os.getenv("SLOT_STEP_MINUTES", "30")),
        default_duration_minutes=int(os.getenv("DEFAULT_DURATION_MINUTES", "60")),
        unique_interview_slots=os.getenv("UNIQUE_INTERVIEW_SLOTS", "").lower() in _TRUE,
        google_client_id=os.getenv("GOOGLE_CLIENT_ID", ""),
        google_client_secret=os.getenv("GOOGLE_CLIENT_SECRET", ""),
        google_redirect_uri=os.getenv(
            "GOOGLE_REDIRECT_URI", "http://localhost:8000/api/calendar/oauth/callback"
        ),
        ms_tenant_id=os.getenv("MS_TENANT_ID", ""),
        ms_client_id=os.getenv("MS_CLIENT_ID", ""),
        ms_client_secret=os.getenv("MS_CLIENT_SECRET", ""),
        slack_webhook_url=os.getenv("SLACK_WEBHOOK_URL", ""),
        email_backend=os.getenv("EMAIL_BACKEND", "console"),
        email_from=os.getenv("EMAIL_FROM", "recruiting@example.com"),
        company_name=os.getenv("COMPANY_NAME", "CortexHR"),
        sendgrid_api_key=os.getenv("SENDGRID_API_KEY", ""),
        smtp_host=os.getenv("SMTP_HOST", ""),
        smtp_port=int(os.getenv("SMTP_PORT", "587")),
        smtp_username=os.getenv("SMTP_USERNAME", ""),
        smtp_password=os.getenv("SMTP_PASSWORD", ""),
        jwt_secret=os.getenv("JWT_SECRET", "interview-scheduler-dev-secret-change-me"),
        http_timeout=float(os.getenv("HTTP_TIMEOUT", "15")),
    )
