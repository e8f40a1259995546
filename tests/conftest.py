"""Shared fixtures and fakes."""

from __future__ import annotations

import tempfile
from pathlib import Path
from types import SimpleNamespace

import pytest

from interview_scheduler.config import Config
from interview_scheduler.database import Database
from interview_scheduler.errors import IntegrationWarning
from interview_scheduler.schemas import (
    Application,
    ApplicationStatus,
    AvailabilityResult,
    Candidate,
    Job,
    MeetingResult,
)


@pytest.fixture
def config(tmp_path: Path) -> Config:
    return Config(db_path=tmp_path / "test.db", timezone="UTC")


@pytest.fixture
def db():
    with tempfile.TemporaryDirectory() as tmpdir:
        database = Database(Path(tmpdir) / "test.db")
        yield database
        database.close()


@pytest.fixture
def application(db: Database) -> Application:
    candidate = Candidate(full_name="Alice Smith", email="alice@example.com")
    job = Job(title="Backend Engineer")
    db.save_candidate(candidate)
    db.save_job(job)
    app = Application(candidate_id=candidate.id, job_id=job.id, status=ApplicationStatus.SCREENING)
    db.save_application(app)
    return app


class FakeAvailability:
    def __init__(self, connected: bool = True, busy=None) -> None:
        self.connected = connected
        self.busy = busy or []

    async def is_connected(self, user_id: str) -> bool:
        return self.connected

    async def busy_for_day(self, user_id, day) -> AvailabilityResult:
        return AvailabilityResult(connected=self.connected, busy=self.busy)


class FakeMeetings:
    def __init__(self, result: MeetingResult | None = None, error: Exception | None = None) -> None:
        self.result = result
        self.error = error
        self.requests = []

    async def create_meeting(self, request):
        self.requests.append(request)
        if self.error:
            raise self.error
        return self.result


class FakeEmail:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.sent = []

    async def send(self, email) -> None:
        self.sent.append(email)
        if self.fail:
            raise IntegrationWarning("email", "smtp down")


class FakeChat:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.calls = []

    async def interview_scheduled(self, candidate_name, job_title, details) -> bool:
        self.calls.append((candidate_name, job_title, details))
        if self.fail:
            raise IntegrationWarning("chat", "webhook returned 500")
        return True


class FakeWebhook:
    """Stands in for slack_sdk's WebhookClient."""

    def __init__(self, status_code: int = 200) -> None:
        self.status_code = status_code
        self.payloads = []

    def send(self, **kwargs):
        self.payloads.append(kwargs)
        return SimpleNamespace(status_code=self.status_code, body="ok" if self.status_code == 200 else "error")


@pytest.fixture
def fake_availability() -> FakeAvailability:
    return FakeAvailability()
