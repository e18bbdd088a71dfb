"""Post-workflow notifications: emails plus in-app notification rows.

Routers schedule these with `BackgroundTasks` after a workflow succeeds, so a
delivery problem is logged here and never changes the workflow's response.
"""

import logging

from acadvizen.notifications.emails import EmailService
from acadvizen.registrations.service import ConfirmationResult
from acadvizen.store.gateway import EntityStore
from acadvizen.store.records import (
    Certificate,
    Course,
    Enrollment,
    Notification,
    NotificationType,
    Payment,
    Profile,
    Registration,
)


logger = logging.getLogger(__name__)


class NotificationDispatcher:
    def __init__(self, store: EntityStore, emails: EmailService, login_url: str) -> None:
        self.store = store
        self.emails = emails
        self.login_url = login_url

    async def registration_received(self, registration: Registration) -> None:
        result = await self.emails.send_registration_pending(name=registration.name, email=registration.email)
        if not result.success:
            logger.warning(f"Registration pending email failed for {registration.email}: {result.error}")

    async def registration_confirmed(self, confirmation: ConfirmationResult) -> None:
        profile = confirmation.profile
        result = await self.emails.send_welcome(
            name=profile.name,
            email=profile.email,
            student_id=confirmation.student_id,
            password=confirmation.temporary_password,
            login_url=self.login_url,
        )
        if not result.success:
            logger.warning(f"Welcome email failed for {profile.email}: {result.error}")

        await self._notify(
            profile.id,
            NotificationType.SUCCESS,
            "Welcome to AcadVizen Digital Hub!",
            f"Your registration has been confirmed. Your student ID is {confirmation.student_id}.",
            action_url="/dashboard",
        )

    async def payment_completed(self, payment: Payment) -> None:
        found = await self.store.get_by_id(Profile, payment.student_id)
        if not found.success or found.data is None:
            logger.warning(f"Skipping payment notification, profile {payment.student_id}: {found.error}")
            return
        profile = found.data

        course_name = await self._course_name_for(payment.enrollment_id)
        result = await self.emails.send_payment_confirmation(
            name=profile.name,
            email=profile.email,
            amount=payment.amount,
            transaction_id=payment.transaction_id or payment.id,
            course_name=course_name,
        )
        if not result.success:
            logger.warning(f"Payment confirmation email failed for {profile.email}: {result.error}")

        await self._notify(
            profile.id,
            NotificationType.PAYMENT,
            "Payment received",
            f"We received your payment of {payment.currency} {payment.amount:g}.",
            action_url="/dashboard",
        )

    async def certificate_issued(self, certificate: Certificate) -> None:
        found = await self.store.get_by_id(Profile, certificate.student_id)
        if not found.success or found.data is None:
            logger.warning(f"Skipping certificate notification, profile {certificate.student_id}: {found.error}")
            return
        profile = found.data

        course = await self.store.get_by_id(Course, certificate.course_id)
        course_name = course.data.title if course.success and course.data else "your course"
        result = await self.emails.send_certificate(
            name=profile.name,
            email=profile.email,
            course_name=course_name,
            certificate_number=certificate.certificate_number,
            certificate_url=certificate.certificate_url or "",
        )
        if not result.success:
            logger.warning(f"Certificate email failed for {profile.email}: {result.error}")

        await self._notify(
            profile.id,
            NotificationType.CERTIFICATE,
            "Certificate issued",
            f"Your certificate for {course_name} is ready.",
            action_url=certificate.certificate_url,
        )

    async def _course_name_for(self, enrollment_id: str | None) -> str | None:
        if not enrollment_id:
            return None
        enrollment = await self.store.get_by_id(Enrollment, enrollment_id)
        if not enrollment.success or enrollment.data is None:
            return None
        course = await self.store.get_by_id(Course, enrollment.data.course_id)
        return course.data.title if course.success and course.data else None

    async def _notify(
        self,
        user_id: str,
        kind: NotificationType,
        title: str,
        message: str,
        action_url: str | None = None,
    ) -> None:
        result = await self.store.create(
            Notification,
            {"user_id": user_id, "type": kind, "title": title, "message": message, "action_url": action_url},
        )
        if not result.success:
            logger.error(f"Failed to create notification for {user_id}: {result.error}")
