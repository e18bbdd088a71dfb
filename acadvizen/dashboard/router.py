"""Student dashboard API endpoints."""

from fastapi import APIRouter, status

from acadvizen.auth.dependencies import CurrentUserId
from acadvizen.container import ServicesDep
from acadvizen.dashboard.schemas import AccessResponse, StudentDashboard
from acadvizen.store.records import Enrollment, Notification


router = APIRouter(prefix="/api/v1/dashboard", tags=["dashboard"])


@router.get("")
async def get_dashboard(user_id: CurrentUserId, services: ServicesDep) -> StudentDashboard:
    return (await services.dashboard.dashboard(user_id)).unwrap()


@router.get("/access")
async def check_access(user_id: CurrentUserId, services: ServicesDep) -> AccessResponse:
    decision = await services.access.check_access(user_id)
    return AccessResponse(has_access=decision.has_access, reason=decision.reason)


@router.post("/notifications/{notification_id}/read")
async def mark_notification_read(
    notification_id: str, user_id: CurrentUserId, services: ServicesDep
) -> Notification:
    return (await services.dashboard.mark_notification_read(notification_id, user_id)).unwrap()


@router.post("/courses/{course_id}/enroll", status_code=status.HTTP_201_CREATED)
async def enroll(course_id: str, user_id: CurrentUserId, services: ServicesDep) -> Enrollment:
    return (await services.dashboard.enroll(user_id, course_id)).unwrap()
