"""Security primitives for local auth (password hashing + JWT)."""

from __future__ import annotations

import hashlib
import hmac
from datetime import UTC, datetime, timedelta

import jwt
from pwdlib import PasswordHash
from pwdlib.hashers.argon2 import Argon2Hasher


password_hash = PasswordHash((Argon2Hasher(),))
ALGORITHM = "HS256"
_JWT_KEY_PURPOSE = "jwt"


def derive_signing_key(secret_key: str, purpose: str = _JWT_KEY_PURPOSE) -> str:
    """Derive a deterministic sub-key for one auth context from a shared secret."""
    return hmac.new(secret_key.encode("utf-8"), purpose.encode("utf-8"), hashlib.sha256).hexdigest()


def create_access_token(subject: str, secret_key: str, expires_delta: timedelta) -> str:
    """Create a signed bearer token for `subject`."""
    now = datetime.now(UTC)
    to_encode = {"exp": now + expires_delta, "iat": now, "nbf": now, "sub": str(subject)}
    return jwt.encode(to_encode, derive_signing_key(secret_key), algorithm=ALGORITHM)


def decode_access_token(token: str, secret_key: str) -> str | None:
    """Return the token subject, or None when the token is invalid or expired."""
    try:
        payload = jwt.decode(token, derive_signing_key(secret_key), algorithms=[ALGORITHM])
        return str(payload["sub"])
    except (jwt.InvalidTokenError, KeyError):
        return None


def verify_password(plain: str, hashed: str) -> bool:
    return password_hash.verify(plain, hashed)


def get_password_hash(password: str) -> str:
    """Hash password for storage."""
    return password_hash.hash(password)
