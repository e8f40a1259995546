"""HTTP API tests with FastAPI's TestClient."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import jwt
import pytest
from fastapi.testclient import TestClient

from conftest import FakeChat
from interview_scheduler.api import create_app
from interview_scheduler.api.deps import build_services
from interview_scheduler.database import Database
from interview_scheduler.schemas import Application, ApplicationStatus, Candidate, Job


def _token(config, sub: str = "u1", **extra) -> str:
    return jwt.encode({"sub": sub, **extra}, config.jwt_secret, algorithm="HS256")


@pytest.fixture
def client(config, db):
    app = create_app(build_services(config, db=db, chat=FakeChat()))
    return TestClient(app, headers={"Authorization": f"Bearer {_token(config)}"})


def _schedule_body(application_id: str, **overrides) -> dict:
    body = {"application_id": application_id, "day": "2026-01-05", "time": "10:00", "duration_minutes": 60}
    body.update(overrides)
    return body


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------

def test_missing_token_is_rejected(config, db):
    anonymous = TestClient(create_app(build_services(config, db=db, chat=FakeChat())))
    resp = anonymous.get("/api/interviews")
    assert resp.status_code in (401, 403)


def test_invalid_token_is_rejected(client):
    resp = client.get("/api/interviews", headers={"Authorization": "Bearer not-a-jwt"})
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Invalid token"


def test_expired_token_is_rejected(client, config):
    expired = _token(config, exp=datetime.now(timezone.utc) - timedelta(minutes=5))
    resp = client.get("/api/interviews", headers={"Authorization": f"Bearer {expired}"})
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Token expired"


def test_token_signed_with_other_secret_is_rejected(client):
    forged = jwt.encode({"sub": "u1"}, "some-other-secret-that-is-long-enough", algorithm="HS256")
    resp = client.get("/api/interviews", headers={"Authorization": f"Bearer {forged}"})
    assert resp.status_code == 401


# ---------------------------------------------------------------------------
# Applications
# ---------------------------------------------------------------------------

def test_schedulable_applications(client, db, application):
    db.save_application(Application(candidate_id="c9", job_id="j9", status=ApplicationStatus.REJECTED))
    data = client.get("/api/applications/schedulable").json()
    assert [a["id"] for a in data] == [application.id]
    assert data[0]["candidate_name"] == "Alice Smith"
    assert data[0]["job_title"] == "Backend Engineer"


# ---------------------------------------------------------------------------
# Interviews
# ---------------------------------------------------------------------------

def test_schedule_interview(client, db, application):
    resp = client.post("/api/interviews", json=_schedule_body(application.id))
    assert resp.status_code == 201

    data = resp.json()
    assert data["message"] == "Interview scheduled (add meeting link manually)"
    assert data["meeting_url"] is None
    assert data["state"] == "done"
    assert data["interview"]["application_id"] == application.id
    assert data["interview"]["created_by"] == "u1"
    assert data["warnings"] == []

    assert db.get_application(application.id).status == ApplicationStatus.INTERVIEW
    assert db.list_email_logs()[0].recipient_email == "alice@example.com"


def test_schedule_interview_missing_selection(client, db, application):
    resp = client.post("/api/interviews", json=_schedule_body(application.id, time=""))
    assert resp.status_code == 422
    assert resp.json()["detail"] == "Please select a candidate, date and time"
    assert db.list_interviews() == []


def test_schedule_interview_unknown_application(client):
    resp = client.post("/api/interviews", json=_schedule_body("missing"))
    assert resp.status_code == 422
    assert resp.json()["detail"] == "Application not found"


def test_schedule_interview_duplicate_conflict(tmp_path, config):
    database = Database(tmp_path / "unique.db", unique_interview_slots=True)
    candidate = Candidate(full_name="Bob", email="bob@example.com")
    job = Job(title="Designer")
    database.save_candidate(candidate)
    database.save_job(job)
    app = Application(candidate_id=candidate.id, job_id=job.id)
    database.save_application(app)

    api = TestClient(
        create_app(build_services(config, db=database, chat=FakeChat())),
        headers={"Authorization": f"Bearer {_token(config)}"},
    )
    assert api.post("/api/interviews", json=_schedule_body(app.id)).status_code == 201
    resp = api.post("/api/interviews", json=_schedule_body(app.id))
    assert resp.status_code == 409
    database.close()


def test_list_get_cancel_and_attach(client, application):
    created = client.post("/api/interviews", json=_schedule_body(application.id)).json()["interview"]
    interview_id = created["id"]

    listed = client.get("/api/interviews", params={"application_id": application.id}).json()
    assert [i["id"] for i in listed] == [interview_id]

    assert client.get(f"/api/interviews/{interview_id}").json()["status"] == "scheduled"

    attached = client.put(
        f"/api/interviews/{interview_id}/meeting",
        json={"meeting_url": "https://teams.microsoft.com/l/meetup/9", "meeting_id": "m9"},
    ).json()
    assert attached["meeting_url"] == "https://teams.microsoft.com/l/meetup/9"

    cancelled = client.post(f"/api/interviews/{interview_id}/cancel").json()
    assert cancelled["status"] == "cancelled"
    assert client.get("/api/interviews", params={"status": "scheduled"}).json() == []


def test_unknown_interview_is_404(client):
    assert client.get("/api/interviews/nope").status_code == 404
    assert client.post("/api/interviews/nope/cancel").status_code == 404
    assert client.put("/api/interviews/nope/meeting", json={"meeting_url": "https://x"}).status_code == 404


# ---------------------------------------------------------------------------
# Calendar
# ---------------------------------------------------------------------------

def test_connection_when_not_configured(client):
    assert client.get("/api/calendar/connection").json() == {"connected": False, "configured": False}


def test_auth_url_when_not_configured(client):
    assert client.get("/api/calendar/auth-url").status_code == 400


def test_availability_without_calendar(client):
    data = client.get("/api/calendar/availability", params={"date": "2026-01-05", "duration": 30}).json()
    assert data["connected"] is False
    assert data["duration_minutes"] == 30
    assert len(data["slots"]) == 17
    assert not any(s["busy"] for s in data["slots"])
    assert data["default_time"] == "09:00"


def test_availability_keeps_selected_time(client):
    data = client.get(
        "/api/calendar/availability", params={"date": "2026-01-05", "selected": "13:30"},
    ).json()
    assert data["default_time"] == "13:30"


@pytest.mark.parametrize("duration", [0, -10])
def test_availability_rejects_bad_duration(client, duration):
    resp = client.get("/api/calendar/availability", params={"date": "2026-01-05", "duration": duration})
    assert resp.status_code == 422


def test_availability_rejects_malformed_selected_time(client):
    resp = client.get("/api/calendar/availability", params={"date": "2026-01-05", "selected": "garbage"})
    assert resp.status_code == 422
    assert "Invalid time" in resp.json()["detail"]


def test_oauth_callback_errors(client):
    assert client.get("/api/calendar/oauth/callback", params={"error": "access_denied"}).status_code == 400
    assert client.get("/api/calendar/oauth/callback").status_code == 400
