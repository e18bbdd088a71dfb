"""FastAPI authentication dependencies.

Usage::

    async def my_route(user_id: CurrentUserId) -> ...
    async def admin_route(admin_id: AdminUserId) -> ...
"""

from typing import Annotated

from fastapi import Depends, Request

from acadvizen.auth.exceptions import AuthenticationError, AuthorizationError, InvalidTokenError
from acadvizen.container import ServicesDep
from acadvizen.store.records import Profile, Role


def _bearer_token(request: Request) -> str | None:
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        return None
    return auth_header.split(" ", 1)[1].strip() or None


async def get_current_user_id(request: Request, services: ServicesDep) -> str:
    """Verify the bearer token with the configured identity provider."""
    token = _bearer_token(request)
    if token is None:
        raise AuthenticationError

    user_id = await services.identity.verify_token(token)
    if user_id is None:
        raise InvalidTokenError

    request.state.user_id = user_id
    return user_id


CurrentUserId = Annotated[str, Depends(get_current_user_id)]


async def require_admin(user_id: CurrentUserId, services: ServicesDep) -> str:
    """Only profiles with the admin role get through."""
    profile = await services.store.get_by_id(Profile, user_id)
    if not profile.success or profile.data is None or profile.data.role != Role.ADMIN:
        raise AuthorizationError
    return user_id


AdminUserId = Annotated[str, Depends(require_admin)]
