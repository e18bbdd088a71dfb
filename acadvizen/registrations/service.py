"""Registration workflow: public submission, admin confirmation, listing."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from acadvizen.auth.identity import AuthIdentity, IdentityProvider, IdentityProviderError
from acadvizen.core.result import service_operation
from acadvizen.exceptions import (
    ConflictError,
    DependencyFailure,
    ErrorCode,
    ResourceNotFoundError,
    StateError,
    ValidationError,
)
from acadvizen.registrations.credentials import generate_student_id, generate_temporary_password
from acadvizen.registrations.schemas import RegistrationRequest
from acadvizen.registrations.validation import validate_registration
from acadvizen.store.gateway import EntityStore, ListOptions
from acadvizen.store.records import (
    AccountPaymentStatus,
    Profile,
    Registration,
    RegistrationStatus,
    Role,
)


logger = logging.getLogger(__name__)

SUBMISSION_SOURCE = "website"
NOT_PENDING = "Registration is not in pending status"


@dataclass(frozen=True)
class ConfirmationResult:
    """What the caller needs to send the welcome email."""

    student_id: str
    temporary_password: str
    registration: Registration
    profile: Profile


class RegistrationService:
    def __init__(self, store: EntityStore, identity: IdentityProvider) -> None:
        self.store = store
        self.identity = identity

    def validate(self, data: RegistrationRequest) -> dict[str, str]:
        return validate_registration(data)

    @service_operation("Create registration")
    async def create(self, data: RegistrationRequest) -> Registration:
        """Insert a pending registration unless the email is pending or confirmed already."""
        errors = validate_registration(data)
        if errors:
            raise ValidationError(", ".join(errors.values()), errors)

        email = data.email.strip().lower()
        existing = (await self.store.list(Registration, ListOptions(filters={"email": email}))).unwrap()
        statuses = {registration.status for registration in existing}
        if RegistrationStatus.PENDING in statuses:
            msg = "A registration with this email is already pending"
            raise ConflictError(msg)
        if RegistrationStatus.CONFIRMED in statuses:
            msg = "This email is already registered. Please login."
            raise ConflictError(msg)

        registration = (
            await self.store.create(
                Registration,
                {
                    "name": data.name.strip(),
                    "email": email,
                    "phone": data.phone.strip(),
                    "mode": data.mode,
                    "status": RegistrationStatus.PENDING,
                    "source": SUBMISSION_SOURCE,
                    "google_sheet_synced": False,
                },
            )
        ).unwrap()
        logger.info(f"Registration {registration.id} received for {email}")
        return registration

    @service_operation("Confirm registration")
    async def confirm(self, registration_id: str, admin_id: str) -> ConfirmationResult:
        """Provision the identity and profile, then flip the registration to confirmed.

        Steps run in order and stop at the first failure without undoing the
        earlier ones. A retry picks up the identity left by the failed attempt
        and resets its password, so it reconciles instead of failing on the
        duplicate email.
        """
        found = await self.store.get_by_id(Registration, registration_id)
        if found.code == ErrorCode.NOT_FOUND:
            raise ResourceNotFoundError("Registration not found", "Registration", registration_id)
        registration = found.unwrap()
        if registration.status != RegistrationStatus.PENDING:
            raise StateError(NOT_PENDING)

        student_id = generate_student_id()
        temporary_password = generate_temporary_password(registration.name)
        metadata = {"name": registration.name, "phone": registration.phone, "student_id": student_id}
        identity = await self._provision_identity(registration.email, temporary_password, metadata)

        profile = (
            await self.store.upsert(
                Profile,
                {
                    "id": identity.id,
                    "email": registration.email,
                    "name": registration.name,
                    "phone": registration.phone,
                    "role": Role.STUDENT,
                    "student_id": student_id,
                    "mode": registration.mode,
                    "is_confirmed": True,
                    "payment_status": AccountPaymentStatus.PENDING,
                },
            )
        ).unwrap()

        updated = await self.store.update(
            Registration,
            registration_id,
            {
                "status": RegistrationStatus.CONFIRMED,
                "confirmed_at": datetime.now(UTC),
                "confirmed_by": admin_id,
            },
            where={"status": RegistrationStatus.PENDING},
        )
        if updated.code == ErrorCode.NOT_FOUND:
            # Lost a race with another confirmation
            raise StateError(NOT_PENDING)

        logger.info(f"Registration {registration_id} confirmed by {admin_id} as {student_id}")
        return ConfirmationResult(
            student_id=student_id,
            temporary_password=temporary_password,
            registration=updated.unwrap(),
            profile=profile,
        )

    async def _provision_identity(self, email: str, password: str, metadata: dict[str, Any]) -> AuthIdentity:
        try:
            return await self.identity.create_user(email, password, metadata)
        except IdentityProviderError as e:
            logger.warning(f"Admin user creation failed for {email}, falling back to sign-up: {e}")

        reclaimed = await self._reclaim_identity(email, password, metadata)
        if reclaimed is not None:
            return reclaimed

        try:
            return await self.identity.sign_up(email, password, metadata)
        except IdentityProviderError as e:
            logger.error(f"Sign-up fallback failed for {email}: {e}")
            msg = "Failed to create user account"
            raise DependencyFailure(msg) from e

    async def _reclaim_identity(self, email: str, password: str, metadata: dict[str, Any]) -> AuthIdentity | None:
        """Reuse the identity an earlier, partially failed confirmation left behind."""
        try:
            existing = await self.identity.find_user(email)
        except IdentityProviderError as e:
            logger.warning(f"Identity lookup failed for {email}: {e}")
            return None
        if existing is None:
            return None

        found = await self.store.get_by_id(Profile, existing.id)
        if found.code != ErrorCode.NOT_FOUND and found.unwrap().role != Role.STUDENT:
            msg = "This email belongs to a staff account"
            raise ConflictError(msg)

        try:
            identity = await self.identity.update_user(existing.id, password, metadata)
        except IdentityProviderError as e:
            logger.error(f"Could not reset existing identity for {email}: {e}")
            msg = "Failed to create user account"
            raise DependencyFailure(msg) from e
        logger.info(f"Reusing identity {identity.id} for {email}")
        return identity

    @service_operation("Fetch registrations")
    async def list(self, status: RegistrationStatus | None = None) -> list[Registration]:
        """Newest first, optionally restricted to one status."""
        filters = {"status": status} if status else {}
        return (await self.store.list(Registration, ListOptions(filters=filters, order_by="created_at"))).unwrap()
