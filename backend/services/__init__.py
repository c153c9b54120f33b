"""Business logic services."""

from .auth import (
    AlreadyExistsError,
    AuthService,
    InvalidCredentialsError,
    InvalidTokenError,
    RedisCacheStore,
    SqlCredentialStore,
    TokenSigner,
)

__all__ = [
    "AuthService",
    "TokenSigner",
    "SqlCredentialStore",
    "RedisCacheStore",
    "AlreadyExistsError",
    "InvalidCredentialsError",
    "InvalidTokenError",
]
