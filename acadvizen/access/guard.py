"""Confirmation gate evaluated before student-only operations."""

import logging
from dataclasses import dataclass

from acadvizen.exceptions import AccessDeniedError
from acadvizen.store.gateway import EntityStore
from acadvizen.store.records import Profile, Role


logger = logging.getLogger(__name__)

PROFILE_NOT_FOUND = "Profile not found"
NOT_CONFIRMED = "Account not confirmed by admin"


@dataclass(frozen=True)
class AccessDecision:
    has_access: bool
    reason: str | None = None


class AccessGuard:
    """Students need an admin-confirmed profile; other roles always pass."""

    def __init__(self, store: EntityStore) -> None:
        self.store = store

    async def check_access(self, student_id: str) -> AccessDecision:
        result = await self.store.get_by_id(Profile, student_id)
        if not result.success or result.data is None:
            return AccessDecision(has_access=False, reason=PROFILE_NOT_FOUND)

        profile = result.data
        if profile.role != Role.STUDENT:
            return AccessDecision(has_access=True)
        if not profile.is_confirmed:
            return AccessDecision(has_access=False, reason=NOT_CONFIRMED)
        return AccessDecision(has_access=True)

    async def require_access(self, student_id: str) -> None:
        """Raise `AccessDeniedError` unless `check_access` lets the user through."""
        decision = await self.check_access(student_id)
        if not decision.has_access:
            logger.info(f"Access denied for {student_id}: {decision.reason}")
            raise AccessDeniedError(decision.reason or NOT_CONFIRMED)
