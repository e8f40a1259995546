"""Interview routes: schedule, list, cancel, attach meeting links."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from interview_scheduler.api.auth import get_current_user
from interview_scheduler.api.deps import Services, get_services
from interview_scheduler.errors import DuplicateInterviewError, PersistenceError, ValidationError
from interview_scheduler.schemas import InterviewStatus, MeetingLinkUpdate, ScheduleRequest

router = APIRouter()


@router.post("", status_code=201)
async def schedule_interview(
    req: ScheduleRequest,
    services: Services = Depends(get_services),
    user: dict = Depends(get_current_user),
):
    try:
        result = await services.scheduler.schedule(req, user_id=user["id"])
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except DuplicateInterviewError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except PersistenceError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return result.model_dump(mode="json")


@router.get("")
async def list_interviews(
    application_id: str | None = Query(None),
    status: InterviewStatus | None = Query(None),
    services: Services = Depends(get_services),
):
    return [
        i.model_dump(mode="json")
        for i in services.db.list_interviews(application_id=application_id, status=status)
    ]


@router.get("/{interview_id}")
async def get_interview(interview_id: str, services: Services = Depends(get_services)):
    interview = services.db.get_interview(interview_id)
    if not interview:
        raise HTTPException(status_code=404, detail="Interview not found")
    return interview.model_dump(mode="json")


@router.post("/{interview_id}/cancel")
async def cancel_interview(interview_id: str, services: Services = Depends(get_services)):
    if not services.db.update_interview_status(interview_id, InterviewStatus.CANCELLED):
        raise HTTPException(status_code=404, detail="Interview not found")
    return services.db.get_interview(interview_id).model_dump(mode="json")


@router.put("/{interview_id}/meeting")
async def attach_meeting(
    interview_id: str,
    req: MeetingLinkUpdate,
    services: Services = Depends(get_services),
):
    if not services.db.attach_meeting(interview_id, req.meeting_url, req.meeting_id):
        raise HTTPException(status_code=404, detail="Interview not found")
    return services.db.get_interview(interview_id).model_dump(mode="json")
