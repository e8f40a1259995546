"""Application routes: the pick list of the scheduling form."""

from fastapi import APIRouter, Depends

from interview_scheduler.api.deps import Services, get_services

router = APIRouter()


@router.get("/schedulable")
async def schedulable_applications(services: Services = Depends(get_services)):
    return [a.model_dump(mode="json") for a in services.db.list_schedulable_applications()]
