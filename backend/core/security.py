"""Password hashing and JWT signing primitives."""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from typing import Any

import bcrypt
import jwt

from .config import settings

# bcrypt refuses input longer than this many bytes.
MAX_PASSWORD_BYTES = 72


def password_fits(password: str) -> bool:
    return len(password.encode("utf-8")) <= MAX_PASSWORD_BYTES


def hash_password(password: str, *, rounds: int | None = None) -> str:
    """Return a bcrypt digest of ``password`` using the configured work factor.

    Raises ``ValueError`` when the UTF-8 encoded password is longer than
    ``MAX_PASSWORD_BYTES``.
    """
    if not password_fits(password):
        raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
    salt = bcrypt.gensalt(rounds=rounds or settings.bcrypt_rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed or non-bcrypt digest.
        return False


def sign_token(
    claims: dict[str, Any],
    secret: str,
    ttl_seconds: int,
    *,
    algorithm: str | None = None,
) -> str:
    """Sign ``claims`` into a JWT that expires after ``ttl_seconds``."""
    issued_at = datetime.now(timezone.utc)
    payload = {
        **claims,
        "jti": uuid.uuid4().hex,
        "iat": int(issued_at.timestamp()),
        "exp": int((issued_at + timedelta(seconds=ttl_seconds)).timestamp()),
    }
    return jwt.encode(payload, secret, algorithm=algorithm or settings.jwt_algorithm)


def verify_token(token: str, secret: str, *, algorithm: str | None = None) -> dict[str, Any]:
    """Decode a JWT, raising ``ValueError`` when the signature or expiry is invalid."""
    try:
        return jwt.decode(
            token,
            secret,
            algorithms=[algorithm or settings.jwt_algorithm],
            options={"require": ["exp", "iat"]},
        )
    except jwt.ExpiredSignatureError as exc:
        raise ValueError("Token expired") from exc
    except jwt.InvalidTokenError as exc:
        raise ValueError("Invalid token") from exc
