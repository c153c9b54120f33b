"""Core configuration and security primitives."""

from .config import Settings, get_settings, settings
from .logging import configure_logging
from .security import (
    MAX_PASSWORD_BYTES,
    hash_password,
    password_fits,
    sign_token,
    verify_password,
    verify_token,
)

__all__ = [
    "Settings",
    "get_settings",
    "settings",
    "configure_logging",
    "MAX_PASSWORD_BYTES",
    "hash_password",
    "password_fits",
    "verify_password",
    "sign_token",
    "verify_token",
]
