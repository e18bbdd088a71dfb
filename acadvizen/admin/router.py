"""Admin back office API endpoints."""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, BackgroundTasks, Body, Query, status

from acadvizen.admin.schemas import CourseWithContent, StudentStats
from acadvizen.admin.service import resolve_kind
from acadvizen.auth.dependencies import AdminUserId
from acadvizen.container import ServicesDep
from acadvizen.sheets.service import SyncSummary
from acadvizen.store.gateway import ListOptions
from acadvizen.store.records import Certificate


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/admin", tags=["admin"])

MAX_PAGE_SIZE = 500


@router.get("/stats")
async def student_stats(_admin_id: AdminUserId, services: ServicesDep) -> StudentStats:
    return (await services.admin.student_stats()).unwrap()


@router.post("/sheets/sync")
async def sync_sheet(_admin_id: AdminUserId, services: ServicesDep) -> SyncSummary:
    """Push every registration not yet mirrored to the sheet."""
    return (await services.sheets.sync_all_pending()).unwrap()


@router.get("/sheets/confirmed")
async def sheet_confirmed_emails(_admin_id: AdminUserId, services: ServicesDep) -> list[str]:
    return (await services.sheets.get_confirmed_emails()).unwrap()


@router.get("/courses/{course_id}/content")
async def course_content(course_id: str, _admin_id: AdminUserId, services: ServicesDep) -> CourseWithContent:
    return (await services.admin.course_with_content(course_id)).unwrap()


@router.get("/{kind}")
async def list_entities(
    kind: str,
    _admin_id: AdminUserId,
    services: ServicesDep,
    order_by: str = "created_at",
    ascending: bool = False,
    limit: Annotated[int | None, Query(ge=1, le=MAX_PAGE_SIZE)] = None,
) -> list[dict[str, Any]]:
    record_kind = resolve_kind(kind)
    options = ListOptions(order_by=order_by, ascending=ascending, limit=limit)
    records = (await services.admin.list(record_kind, options)).unwrap()
    return [record.model_dump(mode="json") for record in records]


@router.post("/{kind}", status_code=status.HTTP_201_CREATED)
async def create_entity(
    kind: str,
    data: Annotated[dict[str, Any], Body()],
    admin_id: AdminUserId,
    services: ServicesDep,
    background_tasks: BackgroundTasks,
) -> dict[str, Any]:
    record_kind = resolve_kind(kind)
    record = (await services.admin.create(record_kind, data)).unwrap()
    logger.info(f"Admin {admin_id} created {kind} {record.id}")
    if isinstance(record, Certificate):
        background_tasks.add_task(services.notifications.certificate_issued, record)
    return record.model_dump(mode="json")


@router.get("/{kind}/{record_id}")
async def get_entity(kind: str, record_id: str, _admin_id: AdminUserId, services: ServicesDep) -> dict[str, Any]:
    record = (await services.admin.get(resolve_kind(kind), record_id)).unwrap()
    return record.model_dump(mode="json")


@router.patch("/{kind}/{record_id}")
async def update_entity(
    kind: str,
    record_id: str,
    data: Annotated[dict[str, Any], Body()],
    admin_id: AdminUserId,
    services: ServicesDep,
) -> dict[str, Any]:
    record = (await services.admin.update(resolve_kind(kind), record_id, data)).unwrap()
    logger.info(f"Admin {admin_id} updated {kind} {record_id}")
    return record.model_dump(mode="json")


@router.delete("/{kind}/{record_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_entity(kind: str, record_id: str, admin_id: AdminUserId, services: ServicesDep) -> None:
    (await services.admin.delete(resolve_kind(kind), record_id)).unwrap()
    logger.info(f"Admin {admin_id} deleted {kind} {record_id}")
