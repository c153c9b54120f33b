"""Authentication domain services."""

from .credential_store import (
    CredentialStore,
    NewUser,
    SqlCredentialStore,
    normalize_email,
)
from .errors import (
    AlreadyExistsError,
    AuthError,
    DuplicateEmailError,
    ErrMessage,
    InvalidCredentialsError,
    InvalidTokenError,
)
from .service import AuthService, SignupData
from .token_store import CacheStore, RedisCacheStore, refresh_token_key
from .tokens import TokenPair, TokenPayload, TokenSigner

__all__ = [
    "AuthService",
    "SignupData",
    "CredentialStore",
    "SqlCredentialStore",
    "NewUser",
    "normalize_email",
    "CacheStore",
    "RedisCacheStore",
    "refresh_token_key",
    "TokenSigner",
    "TokenPayload",
    "TokenPair",
    "ErrMessage",
    "AuthError",
    "AlreadyExistsError",
    "InvalidCredentialsError",
    "InvalidTokenError",
    "DuplicateEmailError",
]
