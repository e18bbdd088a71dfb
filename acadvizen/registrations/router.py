"""Registration API endpoints."""

import logging
from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, Query, Request, status

from acadvizen.auth.dependencies import AdminUserId
from acadvizen.container import ServicesDep
from acadvizen.middleware.security import registration_rate_limit
from acadvizen.registrations.schemas import ConfirmationResponse, RegistrationRequest
from acadvizen.store.records import Registration, RegistrationStatus


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/registrations", tags=["registrations"])


@router.post("", status_code=status.HTTP_201_CREATED)
@registration_rate_limit
async def submit_registration(
    request: Request,  # noqa: ARG001
    data: RegistrationRequest,
    services: ServicesDep,
    background_tasks: BackgroundTasks,
) -> Registration:
    """Public registration form; an admin confirms it later."""
    registration = (await services.registrations.create(data)).unwrap()
    background_tasks.add_task(services.notifications.registration_received, registration)
    return registration


@router.get("")
async def list_registrations(
    _admin_id: AdminUserId,
    services: ServicesDep,
    registration_status: Annotated[RegistrationStatus | None, Query(alias="status")] = None,
) -> list[Registration]:
    return (await services.registrations.list(registration_status)).unwrap()


@router.post("/{registration_id}/confirm")
async def confirm_registration(
    registration_id: str,
    admin_id: AdminUserId,
    services: ServicesDep,
    background_tasks: BackgroundTasks,
) -> ConfirmationResponse:
    """Create the student's account; the welcome email goes out in the background."""
    confirmation = (await services.registrations.confirm(registration_id, admin_id)).unwrap()
    background_tasks.add_task(services.notifications.registration_confirmed, confirmation)
    return ConfirmationResponse(
        student_id=confirmation.student_id,
        temporary_password=confirmation.temporary_password,
        registration=confirmation.registration,
    )
