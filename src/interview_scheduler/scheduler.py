"""Interview scheduler: validates, books and announces interviews.

One scheduling attempt is a fixed sequence of steps run by ``StepRunner``:

    validating        required     selection present, application exists
    creating-meeting  best effort  Google Meet event, then Teams fallback
    persisting        required     interview row written
    notifying         best effort  confirmation e-mail, Slack message
    done              best effort  application moved to "interview"

A failing meeting or notification never fails the attempt; a failing write
stops it before anything is announced. Duplicate bookings are allowed
unless the database enforces unique slots.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone

from interview_scheduler.availability import AvailabilityOracle, NullAvailability
from interview_scheduler.config import Config
from interview_scheduler.conflicts import classify_slots, select_default_slot
from interview_scheduler.database import Database
from interview_scheduler.errors import IntegrationWarning, ValidationError
from interview_scheduler.notifications import (
    EmailNotifier,
    build_confirmation_email,
    interview_details,
)
from interview_scheduler.pipeline import Step, StepPolicy, StepRunner
from interview_scheduler.schemas import (
    ApplicationDetail,
    ApplicationStatus,
    Interview,
    MeetingRequest,
    MeetingResult,
    ScheduleRequest,
    ScheduleResult,
    SchedulerState,
    SlotOptions,
)
from interview_scheduler.slots import (
    generate_time_slots,
    is_bookable_date,
    parse_time_of_day,
    slot_interval,
)
from interview_scheduler.tools.google_calendar import GoogleCalendarClient
from interview_scheduler.tools.slack import SlackNotifier
from interview_scheduler.tools.teams import TeamsMeetingClient

log = logging.getLogger(__name__)


@dataclass
class _Attempt:
    request: ScheduleRequest
    user_id: str
    application: ApplicationDetail | None = None
    scheduled_at: datetime | None = None
    ends_at: datetime | None = None
    meeting: MeetingResult = field(default_factory=MeetingResult)
    interview: Interview | None = None


class InterviewScheduler:
    def __init__(
        self,
        config: Config,
        db: Database,
        availability: AvailabilityOracle | None = None,
        calendar: GoogleCalendarClient | None = None,
        teams: TeamsMeetingClient | None = None,
        email: EmailNotifier | None = None,
        chat: SlackNotifier | None = None,
    ) -> None:
        self.config = config
        self.db = db
        self.availability = availability or NullAvailability()
        self.calendar = calendar
        self.teams = teams
        self.email = email
        self.chat = chat

    # ------------------------------------------------------------------
    # Slot picker
    # ------------------------------------------------------------------

    async def slot_options(
        self,
        user_id: str,
        day: date,
        duration_minutes: int | None = None,
        current_time: str | None = None,
    ) -> SlotOptions:
        """Busy/free grid for one day plus the time to pre-select."""
        duration = duration_minutes if duration_minutes is not None else self.config.default_duration_minutes
        if duration <= 0:
            raise ValidationError("Duration must be a positive number of minutes")
        if current_time:
            try:
                parse_time_of_day(current_time)
            except ValueError as e:
                raise ValidationError(f"Invalid time {current_time!r}: {e}") from e

        tz = self.config.tzinfo
        grid = generate_time_slots(
            self.config.business_day_start,
            self.config.business_day_end,
            self.config.slot_step_minutes,
        )
        result = await self.availability.busy_for_day(user_id, day)
        classified = classify_slots(day, grid, duration, result.busy, tz)
        return SlotOptions(
            day=day,
            duration_minutes=duration,
            connected=result.connected,
            degraded=result.degraded,
            bookable=is_bookable_date(day, datetime.now(tz).date()),
            busy=result.busy,
            slots=classified,
            default_time=select_default_slot(classified, current=current_time),
        )

    # ------------------------------------------------------------------
    # Scheduling
    # ------------------------------------------------------------------

    async def schedule(
        self,
        request: ScheduleRequest,
        user_id: str = "",
        runner: StepRunner | None = None,
    ) -> ScheduleResult:
        """Book one interview.

        Raises ValidationError or PersistenceError; integration failures are
        returned as warnings on the result instead.
        """
        runner = runner or StepRunner()
        attempt = _Attempt(request=request, user_id=user_id)

        steps = [
            Step("validate", SchedulerState.VALIDATING, StepPolicy.REQUIRED,
                 lambda: self._validate(attempt)),
            Step("calendar-meeting", SchedulerState.CREATING_MEETING, StepPolicy.BEST_EFFORT,
                 lambda: self._create_calendar_meeting(attempt)),
            Step("teams-meeting", SchedulerState.CREATING_MEETING, StepPolicy.BEST_EFFORT,
                 lambda: self._create_teams_meeting(attempt)),
            Step("persist", SchedulerState.PERSISTING, StepPolicy.REQUIRED,
                 lambda: self._persist(attempt)),
            Step("email", SchedulerState.NOTIFYING, StepPolicy.BEST_EFFORT,
                 lambda: self._send_confirmation(attempt)),
            Step("chat", SchedulerState.NOTIFYING, StepPolicy.BEST_EFFORT,
                 lambda: self._post_chat(attempt)),
            Step("application-status", SchedulerState.DONE, StepPolicy.BEST_EFFORT,
                 lambda: self._advance_application(attempt)),
        ]
        await runner.run(steps)

        interview = attempt.interview
        meeting_url = interview.meeting_url
        log.info("Interview %s scheduled for application %s", interview.id, interview.application_id)
        return ScheduleResult(
            interview=interview,
            meeting_url=meeting_url,
            warnings=[str(w) for w in runner.warnings],
            message=(
                "Interview scheduled with video meeting link"
                if meeting_url
                else "Interview scheduled (add meeting link manually)"
            ),
            state=runner.state,
        )

    async def _validate(self, attempt: _Attempt) -> None:
        req = attempt.request
        if not req.application_id or not req.day or not req.time:
            raise ValidationError("Please select a candidate, date and time")
        if req.duration_minutes <= 0:
            raise ValidationError("Duration must be a positive number of minutes")
        try:
            interval = slot_interval(req.day, req.time, req.duration_minutes, self.config.tzinfo)
        except ValueError as e:
            raise ValidationError(f"Invalid time {req.time!r}: {e}") from e

        application = self.db.get_application(req.application_id)
        if application is None:
            raise ValidationError("Application not found")

        attempt.application = application
        attempt.scheduled_at = interval.start
        attempt.ends_at = interval.end

    def _meeting_request(self, attempt: _Attempt) -> MeetingRequest:
        app = attempt.application
        req = attempt.request
        return MeetingRequest(
            title=f"Interview: {app.candidate_name} - {app.job_title}",
            description=(
                f"{req.interview_type.value} interview with {app.candidate_name} "
                f"for {app.job_title} position."
            ),
            start=attempt.scheduled_at,
            end=attempt.ends_at,
            attendees=[app.candidate_email] if app.candidate_email else [],
            want_video_link=True,
            organizer_id=attempt.user_id,
        )

    async def _create_calendar_meeting(self, attempt: _Attempt) -> None:
        if not attempt.request.create_meet_link or self.calendar is None:
            return
        if not await self.availability.is_connected(attempt.user_id):
            return
        attempt.meeting = await self.calendar.create_meeting(self._meeting_request(attempt))
        if not attempt.meeting.join_url:
            raise IntegrationWarning("meeting", "Calendar event created without a video link")

    async def _create_teams_meeting(self, attempt: _Attempt) -> None:
        if attempt.meeting.join_url or self.teams is None or not self.config.teams_configured:
            return
        attempt.meeting = await self.teams.create_meeting(self._meeting_request(attempt))

    async def _persist(self, attempt: _Attempt) -> None:
        req = attempt.request
        interview = Interview(
            application_id=req.application_id,
            scheduled_at=attempt.scheduled_at,
            duration_minutes=req.duration_minutes,
            interview_type=req.interview_type,
            meeting_url=attempt.meeting.join_url,
            meeting_id=attempt.meeting.meeting_id,
            notes=req.notes,
            created_by=attempt.user_id,
        )
        attempt.interview = self.db.insert_interview(interview)

    async def _send_confirmation(self, attempt: _Attempt) -> None:
        if self.email is None:
            return
        app = attempt.application
        message = build_confirmation_email(
            self.config,
            attempt.interview,
            candidate_name=app.candidate_name,
            candidate_email=app.candidate_email,
            job_title=app.job_title,
            candidate_id=app.candidate_id,
        )
        await self.email.send(message)

    async def _post_chat(self, attempt: _Attempt) -> None:
        if self.chat is None:
            return
        app = attempt.application
        local_start = attempt.interview.scheduled_at.astimezone(self.config.tzinfo)
        await self.chat.interview_scheduled(
            app.candidate_name,
            app.job_title,
            interview_details(attempt.interview, local_start),
        )

    async def _advance_application(self, attempt: _Attempt) -> None:
        if not self.db.update_application_status(attempt.request.application_id, ApplicationStatus.INTERVIEW):
            raise IntegrationWarning("status", f"Application {attempt.request.application_id} not updated")


def interview_end(interview: Interview) -> datetime:
    return interview.scheduled_at + timedelta(minutes=interview.duration_minutes)


def is_upcoming(interview: Interview, now: datetime | None = None) -> bool:
    now = now or datetime.now(timezone.utc)
    return interview_end(interview) > now
