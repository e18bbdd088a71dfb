"""Supabase Auth identity provider (service-role client)."""

import logging
from collections.abc import Mapping
from typing import Any

import httpx
from supabase import AsyncClient, AuthError

from acadvizen.auth.identity import AuthIdentity, IdentityProviderError


logger = logging.getLogger(__name__)

USERS_PAGE_SIZE = 1000


class SupabaseIdentityProvider:
    """Create and verify users with Supabase's built-in auth."""

    def __init__(self, client: AsyncClient) -> None:
        self.client = client

    async def create_user(self, email: str, password: str, metadata: Mapping[str, Any]) -> AuthIdentity:
        try:
            response = await self.client.auth.admin.create_user(
                {
                    "email": email,
                    "password": password,
                    "email_confirm": True,
                    "user_metadata": dict(metadata),
                }
            )
        except (AuthError, httpx.HTTPError) as e:
            msg = f"Admin user creation failed: {e}"
            raise IdentityProviderError(msg) from e

        if not response or not response.user:
            msg = "Admin user creation returned no user"
            raise IdentityProviderError(msg)
        return AuthIdentity(id=str(response.user.id), email=response.user.email or email)

    async def sign_up(self, email: str, password: str, metadata: Mapping[str, Any]) -> AuthIdentity:
        try:
            response = await self.client.auth.sign_up(
                {"email": email, "password": password, "options": {"data": dict(metadata)}}
            )
        except (AuthError, httpx.HTTPError) as e:
            msg = f"Sign-up failed: {e}"
            raise IdentityProviderError(msg) from e

        if not response or not response.user:
            msg = "Sign-up returned no user"
            raise IdentityProviderError(msg)
        return AuthIdentity(id=str(response.user.id), email=response.user.email or email)

    async def find_user(self, email: str) -> AuthIdentity | None:
        """Page through the admin user list; the admin API has no lookup by email."""
        email = email.strip().lower()
        page = 1
        while True:
            try:
                users = await self.client.auth.admin.list_users(page=page, per_page=USERS_PAGE_SIZE)
            except (AuthError, httpx.HTTPError) as e:
                msg = f"User lookup failed: {e}"
                raise IdentityProviderError(msg) from e

            for user in users:
                if (user.email or "").lower() == email:
                    return AuthIdentity(id=str(user.id), email=user.email or email)
            if len(users) < USERS_PAGE_SIZE:
                return None
            page += 1

    async def update_user(self, user_id: str, password: str, metadata: Mapping[str, Any]) -> AuthIdentity:
        try:
            response = await self.client.auth.admin.update_user_by_id(
                user_id, {"password": password, "user_metadata": dict(metadata)}
            )
        except (AuthError, httpx.HTTPError) as e:
            msg = f"User update failed: {e}"
            raise IdentityProviderError(msg) from e

        if not response or not response.user:
            msg = "User update returned no user"
            raise IdentityProviderError(msg)
        return AuthIdentity(id=str(response.user.id), email=response.user.email or "")

    async def verify_token(self, token: str) -> str | None:
        try:
            user_response = await self.client.auth.get_user(token)
        except (AuthError, httpx.HTTPError):
            logger.exception("Token verification failed")
            return None

        if not user_response or not user_response.user:
            return None
        return str(user_response.user.id)
