"""Data models for interview scheduling."""

from __future__ import annotations

import uuid
from datetime import date, datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field, model_validator


def _now() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class ApplicationStatus(str, Enum):
    APPLIED = "applied"
    SCREENING = "screening"
    INTERVIEW = "interview"
    OFFER = "offer"
    HIRED = "hired"
    REJECTED = "rejected"


SCHEDULABLE_STATUSES = (ApplicationStatus.APPLIED, ApplicationStatus.SCREENING)


class InterviewType(str, Enum):
    HR_SCREEN = "HR Screen"
    TECHNICAL = "Technical"
    BEHAVIORAL = "Behavioral"
    FINAL = "Final"


class InterviewStatus(str, Enum):
    SCHEDULED = "scheduled"
    CANCELLED = "cancelled"


class SchedulerState(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    CREATING_MEETING = "creating-meeting"
    PERSISTING = "persisting"
    NOTIFYING = "notifying"
    DONE = "done"
    ERROR = "error"


# ---------------------------------------------------------------------------
# Time
# ---------------------------------------------------------------------------

class TimeInterval(BaseModel):
    start: datetime
    end: datetime

    @model_validator(mode="after")
    def _check_order(self) -> TimeInterval:
        if self.start >= self.end:
            raise ValueError("interval start must be before its end")
        return self


class SlotStatus(BaseModel):
    time: str          # "HH:MM"
    start: datetime
    end: datetime
    busy: bool = False


class AvailabilityResult(BaseModel):
    connected: bool = False
    degraded: bool = False   # upstream failed, answer is "no known conflicts"
    busy: list[TimeInterval] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Pipeline entities
# ---------------------------------------------------------------------------

class Candidate(BaseModel):
    id: str = Field(default_factory=lambda: uuid.uuid4().hex[:8])
    full_name: str = ""
    email: str = ""
    created_at: datetime = Field(default_factory=_now)


class Job(BaseModel):
    id: str = Field(default_factory=lambda: uuid.uuid4().hex[:8])
    title: str = ""
    created_at: datetime = Field(default_factory=_now)


class Application(BaseModel):
    id: str = Field(default_factory=lambda: uuid.uuid4().hex[:8])
    candidate_id: str
    job_id: str
    status: ApplicationStatus = ApplicationStatus.APPLIED
    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime = Field(default_factory=_now)


class ApplicationDetail(BaseModel):
    """An application joined with the candidate and job it refers to."""

    id: str
    status: ApplicationStatus
    candidate_id: str
    candidate_name: str = "Unknown"
    candidate_email: str = ""
    job_id: str
    job_title: str = "Unknown Position"


class Interview(BaseModel):
    id: str = Field(default_factory=lambda: uuid.uuid4().hex[:8])
    application_id: str
    scheduled_at: datetime
    duration_minutes: int = 60
    interview_type: InterviewType = InterviewType.TECHNICAL
    status: InterviewStatus = InterviewStatus.SCHEDULED
    meeting_url: str | None = None
    meeting_id: str | None = None
    notes: str = ""
    created_by: str = ""
    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime = Field(default_factory=_now)


class CalendarToken(BaseModel):
    user_id: str
    access_token: str
    refresh_token: str = ""
    token_expiry: datetime


class EmailLog(BaseModel):
    id: str = Field(default_factory=lambda: uuid.uuid4().hex[:8])
    recipient_email: str
    subject: str
    email_type: str = "interview_scheduled"
    candidate_id: str = ""
    status: str = "sent"   # sent / failed
    sent_at: datetime = Field(default_factory=_now)


# ---------------------------------------------------------------------------
# Requests / results
# ---------------------------------------------------------------------------

class ScheduleRequest(BaseModel):
    application_id: str = ""
    day: date | None = None
    time: str = ""                                   # "HH:MM"
    duration_minutes: int = 60
    interview_type: InterviewType = InterviewType.TECHNICAL
    create_meet_link: bool = True
    notes: str = ""


class MeetingRequest(BaseModel):
    title: str
    description: str = ""
    start: datetime
    end: datetime
    attendees: list[str] = Field(default_factory=list)
    want_video_link: bool = True
    organizer_id: str = ""           # staff user whose calendar hosts the event


class MeetingResult(BaseModel):
    meeting_id: str | None = None
    join_url: str | None = None


class ScheduleResult(BaseModel):
    interview: Interview
    meeting_url: str | None = None
    warnings: list[str] = Field(default_factory=list)
    message: str = ""
    state: SchedulerState = SchedulerState.DONE


class MeetingLinkUpdate(BaseModel):
    meeting_url: str
    meeting_id: str | None = None


class OutgoingEmail(BaseModel):
    to: str
    subject: str
    text: str
    html: str = ""
    email_type: str = "interview_scheduled"
    candidate_id: str = ""


class SlotOptions(BaseModel):
    """Everything the scheduling form needs to render one day's time picker."""

    day: date
    duration_minutes: int
    connected: bool = False
    degraded: bool = False
    bookable: bool = True
    busy: list[TimeInterval] = Field(default_factory=list)
    slots: list[SlotStatus] = Field(default_factory=list)
    default_time: str | None = None
