"""Identity provider backed by the `identities` collection."""

import logging
from collections.abc import Mapping
from datetime import timedelta
from typing import Any

from acadvizen.auth.identity import AuthIdentity, IdentityProviderError
from acadvizen.auth.security import create_access_token, decode_access_token, get_password_hash, verify_password
from acadvizen.store.gateway import EntityStore
from acadvizen.store.records import Identity


logger = logging.getLogger(__name__)


class LocalIdentityProvider:
    """Argon2 password hashes and HS256 bearer tokens, no external auth service."""

    def __init__(self, store: EntityStore, secret_key: str, token_ttl: timedelta = timedelta(days=1)) -> None:
        self.store = store
        self.secret_key = secret_key
        self.token_ttl = token_ttl

    async def create_user(self, email: str, password: str, metadata: Mapping[str, Any]) -> AuthIdentity:
        email = email.strip().lower()
        existing = await self.store.find_one(Identity, {"email": email})
        if not existing.success:
            raise IdentityProviderError(existing.error or "Failed to look up identity")
        if existing.data is not None:
            msg = "User already registered"
            raise IdentityProviderError(msg)

        created = await self.store.create(
            Identity,
            {"email": email, "password_hash": get_password_hash(password), "user_metadata": dict(metadata)},
        )
        if not created.success or created.data is None:
            raise IdentityProviderError(created.error or "Failed to create identity")

        logger.info(f"Created local identity {created.data.id} for {email}")
        return AuthIdentity(id=created.data.id, email=email)

    async def sign_up(self, email: str, password: str, metadata: Mapping[str, Any]) -> AuthIdentity:
        # No email confirmation step locally: both paths create the same identity
        return await self.create_user(email, password, metadata)

    async def find_user(self, email: str) -> AuthIdentity | None:
        found = await self.store.find_one(Identity, {"email": email.strip().lower()})
        if not found.success:
            raise IdentityProviderError(found.error or "Failed to look up identity")
        if found.data is None:
            return None
        return AuthIdentity(id=found.data.id, email=found.data.email)

    async def update_user(self, user_id: str, password: str, metadata: Mapping[str, Any]) -> AuthIdentity:
        updated = await self.store.update(
            Identity, user_id, {"password_hash": get_password_hash(password), "user_metadata": dict(metadata)}
        )
        if not updated.success or updated.data is None:
            raise IdentityProviderError(updated.error or "Failed to update identity")
        return AuthIdentity(id=updated.data.id, email=updated.data.email)

    async def authenticate(self, email: str, password: str) -> AuthIdentity | None:
        """Return the identity when the password matches."""
        found = await self.store.find_one(Identity, {"email": email.strip().lower()})
        identity = found.data if found.success else None
        if identity is None or not verify_password(password, identity.password_hash):
            return None
        return AuthIdentity(id=identity.id, email=identity.email)

    def issue_token(self, identity: AuthIdentity) -> str:
        return create_access_token(identity.id, self.secret_key, self.token_ttl)

    async def verify_token(self, token: str) -> str | None:
        return decode_access_token(token, self.secret_key)
