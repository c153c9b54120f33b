"""Access/refresh token signing."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

from core import Settings, settings as default_settings, sign_token, verify_token

from .errors import InvalidTokenError

TokenType = Literal["access", "refresh"]


@dataclass(frozen=True)
class TokenPayload:
    """Claims shared by both token classes."""

    user_id: str
    email: str

    def to_claims(self) -> dict[str, Any]:
        return {"sub": self.user_id, "user_id": self.user_id, "email": self.email}


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str


class TokenSigner:
    """Signs and verifies the two token classes with independent secrets and TTLs.

    Access tokens use the service's default secret and the short lifetime;
    refresh tokens use ``JWT_SECRET`` and the long lifetime. Neither secret is
    ever logged or exposed.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or default_settings

    @property
    def access_ttl(self) -> int:
        return self._settings.access_token_expires_in

    @property
    def refresh_ttl(self) -> int:
        return self._settings.refresh_token_expires_in

    def sign_tokens(self, payload: TokenPayload) -> TokenPair:
        claims = payload.to_claims()
        algorithm = self._settings.jwt_algorithm
        return TokenPair(
            access_token=sign_token(
                {**claims, "type": "access"},
                self._settings.jwt_access_secret,
                self.access_ttl,
                algorithm=algorithm,
            ),
            refresh_token=sign_token(
                {**claims, "type": "refresh"},
                self._settings.jwt_secret,
                self.refresh_ttl,
                algorithm=algorithm,
            ),
        )

    def verify_access_token(self, token: str) -> TokenPayload:
        return self._verify(token, self._settings.jwt_access_secret, "access")

    def verify_refresh_token(self, token: str) -> TokenPayload:
        return self._verify(token, self._settings.jwt_secret, "refresh")

    def _verify(self, token: str, secret: str, expected_type: TokenType) -> TokenPayload:
        try:
            claims = verify_token(token, secret, algorithm=self._settings.jwt_algorithm)
        except ValueError as exc:
            raise InvalidTokenError() from exc

        if claims.get("type") != expected_type:
            raise InvalidTokenError()

        user_id = claims.get("user_id")
        email = claims.get("email")
        if not isinstance(user_id, str) or not isinstance(email, str):
            raise InvalidTokenError()
        return TokenPayload(user_id=user_id, email=email)
