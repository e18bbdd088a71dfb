"""Student dashboard read model plus the small student-side mutations next to it."""

import asyncio
import logging

from acadvizen.access.guard import AccessGuard
from acadvizen.core.result import service_operation
from acadvizen.dashboard.schemas import EnrollmentWithCourse, StudentDashboard
from acadvizen.exceptions import AccessDeniedError, ConflictError, DependencyFailure, ErrorCode, ResourceNotFoundError
from acadvizen.store.gateway import EntityStore, ListOptions
from acadvizen.store.records import (
    Certificate,
    Course,
    Enrollment,
    EnrollmentStatus,
    Notification,
    Profile,
    Progress,
)


logger = logging.getLogger(__name__)

RECENT_PROGRESS_LIMIT = 10
NOTIFICATION_LIMIT = 20


class DashboardService:
    def __init__(self, store: EntityStore, access: AccessGuard) -> None:
        self.store = store
        self.access = access

    @service_operation("Get student dashboard")
    async def dashboard(self, student_id: str) -> StudentDashboard:
        """Profile, enrollments with their courses, certificates, recent progress and notifications."""
        found = await self.store.get_by_id(Profile, student_id)
        if not found.success:
            msg = "Failed to fetch profile"
            raise DependencyFailure(msg)
        profile = found.unwrap()
        if not profile.is_confirmed:
            msg = "Account not confirmed. Please wait for admin approval."
            raise AccessDeniedError(msg)

        own = {"student_id": student_id}
        enrollments_res, certificates_res, progress_res, notifications_res = await asyncio.gather(
            self.store.list(Enrollment, ListOptions(filters=own, order_by="enrolled_at")),
            self.store.list(Certificate, ListOptions(filters=own, order_by="issued_at")),
            self.store.list(Progress, ListOptions(filters=own, order_by="updated_at", limit=RECENT_PROGRESS_LIMIT)),
            self.store.list(
                Notification,
                ListOptions(filters={"user_id": student_id}, order_by="created_at", limit=NOTIFICATION_LIMIT),
            ),
        )
        enrollments = enrollments_res.unwrap()

        course_ids = sorted({enrollment.course_id for enrollment in enrollments})
        courses: dict[str, Course] = {}
        if course_ids:
            found_courses = (await self.store.list(Course, ListOptions(within={"id": course_ids}))).unwrap()
            courses = {course.id: course for course in found_courses}

        return StudentDashboard(
            profile=profile,
            enrollments=[
                EnrollmentWithCourse(**enrollment.model_dump(), course=courses.get(enrollment.course_id))
                for enrollment in enrollments
            ],
            certificates=certificates_res.unwrap(),
            recent_progress=progress_res.unwrap(),
            notifications=notifications_res.unwrap(),
        )

    @service_operation("Mark notification read")
    async def mark_notification_read(self, notification_id: str, user_id: str) -> Notification:
        """Only the notification's owner can mark it read."""
        result = await self.store.update(
            Notification, notification_id, {"is_read": True}, where={"user_id": user_id}
        )
        if result.code == ErrorCode.NOT_FOUND:
            raise ResourceNotFoundError("Notification not found", "Notification", notification_id)
        return result.unwrap()

    @service_operation("Enroll in course")
    async def enroll(self, student_id: str, course_id: str) -> Enrollment:
        """Create a pending enrollment; payment completion activates it."""
        await self.access.require_access(student_id)

        course = await self.store.get_by_id(Course, course_id)
        if course.code == ErrorCode.NOT_FOUND:
            raise ResourceNotFoundError("Course not found", "Course", course_id)
        course.unwrap()

        existing = (
            await self.store.find_one(Enrollment, {"student_id": student_id, "course_id": course_id})
        ).unwrap()
        if existing is not None:
            msg = "Already enrolled in this course"
            raise ConflictError(msg)

        enrollment = (
            await self.store.create(
                Enrollment,
                {"student_id": student_id, "course_id": course_id, "status": EnrollmentStatus.PENDING},
            )
        ).unwrap()
        logger.info(f"Student {student_id} enrolled in course {course_id}")
        return enrollment
