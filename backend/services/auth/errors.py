"""Domain errors raised by the authentication services."""

from __future__ import annotations

from enum import Enum


class ErrMessage(str, Enum):
    ALREADY_EXIST_EMAIL = "Email is already registered"
    INVALID_EMAIL_OR_PASSWORD = "Invalid email or password"
    INVALID_TOKEN = "Invalid token"


class AuthError(Exception):
    """Base class for client-facing authentication rejections."""

    message: ErrMessage

    def __init__(self, message: ErrMessage | None = None) -> None:
        if message is not None:
            self.message = message
        super().__init__(self.message.value)


class AlreadyExistsError(AuthError):
    message = ErrMessage.ALREADY_EXIST_EMAIL


class InvalidCredentialsError(AuthError):
    # Shared by "no such user" and "wrong password" so callers cannot tell them apart.
    message = ErrMessage.INVALID_EMAIL_OR_PASSWORD


class InvalidTokenError(AuthError):
    message = ErrMessage.INVALID_TOKEN


class DuplicateEmailError(Exception):
    """Raised by a credential store when its uniqueness constraint rejects an email."""
