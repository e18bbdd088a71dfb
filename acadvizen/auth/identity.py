"""Identity provider contract used by registration confirmation and request auth."""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Protocol


@dataclass(frozen=True)
class AuthIdentity:
    """Login identity as reported by the provider."""

    id: str
    email: str


class IdentityProviderError(Exception):
    """Identity service refused or failed to create an identity."""


class IdentityProvider(Protocol):
    async def create_user(self, email: str, password: str, metadata: Mapping[str, Any]) -> AuthIdentity:
        """Create a confirmed identity through the privileged path."""
        ...

    async def sign_up(self, email: str, password: str, metadata: Mapping[str, Any]) -> AuthIdentity:
        """Create an identity through the self-service path."""
        ...

    async def find_user(self, email: str) -> AuthIdentity | None:
        """Look up an existing identity by email."""
        ...

    async def update_user(self, user_id: str, password: str, metadata: Mapping[str, Any]) -> AuthIdentity:
        """Replace the password and metadata of an existing identity."""
        ...

    async def verify_token(self, token: str) -> str | None:
        """Return the user id the bearer token belongs to, or None."""
        ...
