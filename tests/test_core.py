"""Basic tests for configuration, schemas and the database."""

from __future__ import annotations

import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from interview_scheduler.config import Config, load_config
from interview_scheduler.database import Database
from interview_scheduler.errors import DuplicateInterviewError
from interview_scheduler.schemas import (
    Application,
    ApplicationStatus,
    CalendarToken,
    EmailLog,
    Interview,
    InterviewStatus,
    InterviewType,
    TimeInterval,
)


# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------

def test_config_defaults():
    cfg = Config()
    assert cfg.timezone == "UTC"
    assert cfg.business_day_start == "09:00"
    assert cfg.business_day_end == "17:00"
    assert cfg.slot_step_minutes == 30
    assert cfg.email_backend == "console"
    assert cfg.unique_interview_slots is False
    assert not cfg.google_configured
    assert not cfg.teams_configured


def test_load_config_from_env(monkeypatch):
    monkeypatch.setenv("SCHEDULER_TIMEZONE", "Europe/Berlin")
    monkeypatch.setenv("UNIQUE_INTERVIEW_SLOTS", "true")
    monkeypatch.setenv("GOOGLE_CLIENT_ID", "cid")
    monkeypatch.setenv("GOOGLE_CLIENT_SECRET", "secret")
    cfg = load_config(env_file="/nonexistent/.env")
    assert cfg.timezone == "Europe/Berlin"
    assert cfg.tzinfo.key == "Europe/Berlin"
    assert cfg.unique_interview_slots is True
    assert cfg.google_configured


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------

def test_time_interval_requires_start_before_end():
    now = datetime(2026, 1, 5, 10, tzinfo=timezone.utc)
    with pytest.raises(ValueError):
        TimeInterval(start=now, end=now)
    with pytest.raises(ValueError):
        TimeInterval(start=now, end=now - timedelta(minutes=1))


def test_interview_defaults():
    i = Interview(application_id="app1", scheduled_at=datetime(2026, 1, 5, 10, tzinfo=timezone.utc))
    assert i.status == InterviewStatus.SCHEDULED
    assert i.interview_type == InterviewType.TECHNICAL
    assert i.meeting_url is None
    assert len(i.id) == 8


def test_interview_type_values():
    assert [t.value for t in InterviewType] == ["HR Screen", "Technical", "Behavioral", "Final"]


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------

def test_get_application_joins_candidate_and_job(db: Database, application: Application):
    loaded = db.get_application(application.id)
    assert loaded is not None
    assert loaded.candidate_name == "Alice Smith"
    assert loaded.candidate_email == "alice@example.com"
    assert loaded.job_title == "Backend Engineer"
    assert loaded.status == ApplicationStatus.SCREENING


def test_get_missing_application(db: Database):
    assert db.get_application("nope") is None


def test_list_schedulable_applications(db: Database, application: Application):
    hired = Application(candidate_id="c2", job_id="j2", status=ApplicationStatus.HIRED)
    db.save_application(hired)

    schedulable = db.list_schedulable_applications()
    assert [a.id for a in schedulable] == [application.id]
    assert schedulable[0].candidate_name == "Alice Smith"


def test_application_without_candidate_uses_placeholders(db: Database):
    app = Application(candidate_id="ghost", job_id="ghost")
    db.save_application(app)
    loaded = db.get_application(app.id)
    assert loaded.candidate_name == "Unknown"
    assert loaded.job_title == "Unknown Position"


def test_update_application_status(db: Database, application: Application):
    assert db.update_application_status(application.id, ApplicationStatus.INTERVIEW)
    assert db.get_application(application.id).status == ApplicationStatus.INTERVIEW
    assert not db.update_application_status("missing", ApplicationStatus.INTERVIEW)


def test_insert_and_get_interview(db: Database):
    at = datetime(2026, 1, 5, 10, tzinfo=timezone.utc)
    i = Interview(application_id="app1", scheduled_at=at, duration_minutes=45, meeting_url="https://meet/x")
    db.insert_interview(i)

    loaded = db.get_interview(i.id)
    assert loaded is not None
    assert loaded.scheduled_at == at
    assert loaded.duration_minutes == 45
    assert loaded.meeting_url == "https://meet/x"


def test_cancel_and_attach_meeting(db: Database):
    i = Interview(application_id="app1", scheduled_at=datetime(2026, 1, 5, 10, tzinfo=timezone.utc))
    db.insert_interview(i)

    assert db.attach_meeting(i.id, "https://teams/abc", "abc")
    assert db.update_interview_status(i.id, InterviewStatus.CANCELLED)

    loaded = db.get_interview(i.id)
    assert loaded.status == InterviewStatus.CANCELLED
    assert loaded.meeting_url == "https://teams/abc"
    assert loaded.meeting_id == "abc"
    assert not db.update_interview_status("missing", InterviewStatus.CANCELLED)


def test_list_interviews_filters(db: Database):
    at = datetime(2026, 1, 5, 10, tzinfo=timezone.utc)
    a = Interview(application_id="app1", scheduled_at=at)
    b = Interview(application_id="app2", scheduled_at=at + timedelta(hours=1))
    db.insert_interview(a)
    db.insert_interview(b)
    db.update_interview_status(b.id, InterviewStatus.CANCELLED)

    assert [i.id for i in db.list_interviews()] == [a.id, b.id]
    assert [i.id for i in db.list_interviews(application_id="app2")] == [b.id]
    assert [i.id for i in db.list_interviews(status=InterviewStatus.SCHEDULED)] == [a.id]


def test_duplicate_interviews_allowed_by_default(db: Database):
    at = datetime(2026, 1, 5, 10, tzinfo=timezone.utc)
    db.insert_interview(Interview(application_id="app1", scheduled_at=at))
    db.insert_interview(Interview(application_id="app1", scheduled_at=at))
    assert len(db.list_interviews(application_id="app1")) == 2


def test_unique_slots_reject_duplicates():
    with tempfile.TemporaryDirectory() as tmpdir:
        database = Database(Path(tmpdir) / "test.db", unique_interview_slots=True)
        at = datetime(2026, 1, 5, 10, tzinfo=timezone.utc)
        first = database.insert_interview(Interview(application_id="app1", scheduled_at=at))

        with pytest.raises(DuplicateInterviewError):
            database.insert_interview(Interview(application_id="app1", scheduled_at=at))

        # a cancelled interview frees the slot
        database.update_interview_status(first.id, InterviewStatus.CANCELLED)
        database.insert_interview(Interview(application_id="app1", scheduled_at=at))
        assert len(database.list_interviews(application_id="app1")) == 2
        database.close()


def test_calendar_token_upsert_keeps_refresh_token(db: Database):
    expiry = datetime(2026, 1, 5, 10, tzinfo=timezone.utc)
    db.save_calendar_token(CalendarToken(user_id="u1", access_token="a1", refresh_token="r1", token_expiry=expiry))
    db.save_calendar_token(CalendarToken(user_id="u1", access_token="a2", token_expiry=expiry + timedelta(hours=1)))

    token = db.get_calendar_token("u1")
    assert token.access_token == "a2"
    assert token.refresh_token == "r1"
    assert token.token_expiry == expiry + timedelta(hours=1)

    db.delete_calendar_token("u1")
    assert db.get_calendar_token("u1") is None


def test_email_log(db: Database):
    db.log_email(EmailLog(recipient_email="bob@example.com", subject="Hi", candidate_id="c1"))
    db.log_email(EmailLog(recipient_email="eve@example.com", subject="Yo", status="failed"))

    assert len(db.list_email_logs()) == 2
    logs = db.list_email_logs(candidate_id="c1")
    assert len(logs) == 1
    assert logs[0].status == "sent"
