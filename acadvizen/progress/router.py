"""Progress tracking API endpoints."""

from fastapi import APIRouter

from acadvizen.auth.dependencies import CurrentUserId
from acadvizen.container import ServicesDep
from acadvizen.progress.schemas import CourseProgress, ProgressUpdate, ProgressUpsertRequest
from acadvizen.store.records import Progress


router = APIRouter(prefix="/api/v1/progress", tags=["progress"])


@router.get("/courses/{course_id}")
async def get_course_progress(course_id: str, user_id: CurrentUserId, services: ServicesDep) -> CourseProgress:
    return (await services.progress.course_progress(user_id, course_id)).unwrap()


@router.put("")
async def update_progress(data: ProgressUpsertRequest, user_id: CurrentUserId, services: ServicesDep) -> Progress:
    """Record watch position or completion for one video or PDF."""
    update = ProgressUpdate.model_validate(data.model_dump(include=set(ProgressUpdate.model_fields)))
    result = await services.progress.upsert_progress(
        user_id, data.module_id, data.content_id, data.content_type, update
    )
    return result.unwrap()
