"""Authentication module exports."""

from acadvizen.auth.identity import AuthIdentity, IdentityProvider, IdentityProviderError


__all__ = ["AuthIdentity", "IdentityProvider", "IdentityProviderError"]
