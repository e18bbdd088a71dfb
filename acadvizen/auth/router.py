"""Login route for the local identity provider (Supabase clients log in with Supabase)."""

import logging

from fastapi import APIRouter, Request
from pydantic import BaseModel

from acadvizen.auth.exceptions import AuthProviderNotConfiguredError, InvalidCredentialsError
from acadvizen.auth.local import LocalIdentityProvider
from acadvizen.container import ServicesDep
from acadvizen.middleware.security import auth_rate_limit


router = APIRouter(prefix="/api/v1/auth", tags=["auth"])
logger = logging.getLogger(__name__)


class LoginRequest(BaseModel):
    email: str
    password: str


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: str


@router.post("/login")
@auth_rate_limit
async def login(request: Request, data: LoginRequest, services: ServicesDep) -> Token:  # noqa: ARG001
    """Exchange email and password for a bearer token."""
    provider = services.identity
    if not isinstance(provider, LocalIdentityProvider):
        raise AuthProviderNotConfiguredError("local")

    identity = await provider.authenticate(data.email, data.password)
    if identity is None:
        logger.info(f"Failed login for {data.email}")
        raise InvalidCredentialsError

    logger.info(f"User {identity.id} logged in")
    return Token(access_token=provider.issue_token(identity), user_id=identity.id)
