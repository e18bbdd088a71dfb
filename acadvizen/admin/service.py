"""Admin back office: generic content CRUD, course trees and headline numbers."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from typing import Any

from acadvizen.admin.schemas import CourseWithContent, ModuleWithContent, StudentStats
from acadvizen.core.result import OperationResult, service_operation
from acadvizen.exceptions import ErrorCode, ResourceNotFoundError, ValidationError
from acadvizen.store.gateway import EntityStore, ListOptions
from acadvizen.store.records import (
    Certificate,
    Course,
    Enrollment,
    EnrollmentStatus,
    Module,
    Payment,
    PaymentStatus,
    Pdf,
    Profile,
    Record,
    Registration,
    RegistrationStatus,
    Role,
    Tool,
    Video,
)


logger = logging.getLogger(__name__)

ADMIN_KINDS: dict[str, type[Record]] = {
    kind.table: kind
    for kind in (Course, Module, Video, Pdf, Tool, Profile, Enrollment, Payment, Certificate)
}
_READ_ONLY_FIELDS = frozenset({"id", "created_at", "updated_at"})
# Owned by the payment workflow, which applies the enrollment and profile updates with them
_WORKFLOW_FIELDS: dict[type[Record], frozenset[str]] = {
    Payment: frozenset({"status", "razorpay_payment_id", "razorpay_signature"}),
    Enrollment: frozenset({"status"}),
}


def resolve_kind(name: str) -> type[Record]:
    kind = ADMIN_KINDS.get(name)
    if kind is None:
        msg = f"Unknown collection: {name}"
        raise ResourceNotFoundError(msg, "Collection", name)
    return kind


def _writable(kind: type[Record], data: Mapping[str, Any], *, allow_id: bool = False) -> dict[str, Any]:
    read_only = (_READ_ONLY_FIELDS - ({"id"} if allow_id else set())) | _WORKFLOW_FIELDS.get(kind, frozenset())
    allowed = set(kind.model_fields) - read_only
    unknown = sorted(set(data) - allowed)
    if unknown:
        msg = f"Unknown or read-only fields for {kind.table}: {', '.join(unknown)}"
        raise ValidationError(msg, {field: "not writable" for field in unknown})
    return dict(data)


def _missing_required(kind: type[Record], data: Mapping[str, Any]) -> None:
    missing = sorted(
        name for name, info in kind.model_fields.items() if info.is_required() and name != "id" and name not in data
    )
    if missing:
        msg = f"Missing required fields for {kind.table}: {', '.join(missing)}"
        raise ValidationError(msg, {field: "required" for field in missing})


class AdminService:
    def __init__(self, store: EntityStore) -> None:
        self.store = store

    @service_operation("Create entity")
    async def create(self, kind: type[Record], data: Mapping[str, Any]) -> Record:
        _missing_required(kind, data)
        # Profiles are keyed by the identity id, so admins may set it there
        return (await self.store.create(kind, _writable(kind, data, allow_id=kind is Profile))).unwrap()

    @service_operation("Update entity")
    async def update(self, kind: type[Record], record_id: str, data: Mapping[str, Any]) -> Record:
        return (await self.store.update(kind, record_id, _writable(kind, data))).unwrap()

    @service_operation("Delete entity")
    async def delete(self, kind: type[Record], record_id: str) -> None:
        (await self.store.delete(kind, record_id)).unwrap()

    @service_operation("Fetch entities")
    async def list(self, kind: type[Record], options: ListOptions | None = None) -> list[Record]:
        if options and options.order_by and options.order_by not in kind.model_fields:
            msg = f"Cannot order {kind.table} by {options.order_by}"
            raise ValidationError(msg, {"order_by": msg})
        return (await self.store.list(kind, options)).unwrap()

    @service_operation("Fetch entity")
    async def get(self, kind: type[Record], record_id: str) -> Record:
        return (await self.store.get_by_id(kind, record_id)).unwrap()

    @service_operation("Get course with content")
    async def course_with_content(self, course_id: str) -> CourseWithContent:
        """Course with its modules in order, each carrying its videos, PDFs and tools."""
        found = await self.store.get_by_id(Course, course_id)
        if found.code == ErrorCode.NOT_FOUND:
            raise ResourceNotFoundError("Course not found", "Course", course_id)
        course = found.unwrap()

        modules = (
            await self.store.list(
                Module, ListOptions(filters={"course_id": course_id}, order_by="order_index", ascending=True)
            )
        ).unwrap()
        with_content = await asyncio.gather(*(self._module_content(module) for module in modules))
        return CourseWithContent(**course.model_dump(), modules=list(with_content))

    async def _module_content(self, module: Module) -> ModuleWithContent:
        own = {"module_id": module.id}
        videos, pdfs, tools = await asyncio.gather(
            self.store.list(Video, ListOptions(filters=own, order_by="order_index", ascending=True)),
            self.store.list(Pdf, ListOptions(filters=own, order_by="order_index", ascending=True)),
            self.store.list(Tool, ListOptions(filters=own)),
        )
        return ModuleWithContent(
            **module.model_dump(),
            videos=videos.unwrap(),
            pdfs=pdfs.unwrap(),
            tools=tools.unwrap(),
        )

    @service_operation("Get student stats")
    async def student_stats(self) -> StudentStats:
        students, registrations, enrollments, payments = await asyncio.gather(
            self.store.list(Profile, ListOptions(filters={"role": Role.STUDENT})),
            self.store.list(Registration, ListOptions(filters={"status": RegistrationStatus.PENDING})),
            self.store.list(Enrollment),
            self.store.list(Payment),
        )
        return _stats(students, registrations, enrollments, payments)


def _stats(
    students: OperationResult[list[Profile]],
    registrations: OperationResult[list[Registration]],
    enrollments: OperationResult[list[Enrollment]],
    payments: OperationResult[list[Payment]],
) -> StudentStats:
    profiles = students.unwrap()
    enrollment_rows = enrollments.unwrap()
    payment_rows = payments.unwrap()
    return StudentStats(
        total_students=len(profiles),
        confirmed_students=sum(1 for p in profiles if p.is_confirmed),
        pending_registrations=len(registrations.unwrap()),
        total_enrollments=len(enrollment_rows),
        active_enrollments=sum(1 for e in enrollment_rows if e.status == EnrollmentStatus.ACTIVE),
        total_payments=len(payment_rows),
        completed_payments=sum(1 for p in payment_rows if p.status == PaymentStatus.COMPLETED),
    )
