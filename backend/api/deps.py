"""Shared FastAPI dependencies."""

from __future__ import annotations

from collections.abc import AsyncIterator
from dataclasses import dataclass
from typing import NoReturn

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from core import settings
from db.session import AsyncSessionMaker
from services.auth import (
    AuthService,
    CacheStore,
    ErrMessage,
    InvalidTokenError,
    SqlCredentialStore,
    TokenPayload,
    TokenSigner,
)

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class TokenContext:
    """A verified bearer token together with its claims."""

    payload: TokenPayload
    token: str


async def get_db() -> AsyncIterator[AsyncSession]:
    async with AsyncSessionMaker() as session:
        yield session


def get_cache_store(request: Request) -> CacheStore:
    return request.app.state.cache_store


def get_token_signer() -> TokenSigner:
    return TokenSigner(settings)


def get_auth_service(
    session: AsyncSession = Depends(get_db),
    cache: CacheStore = Depends(get_cache_store),
    signer: TokenSigner = Depends(get_token_signer),
) -> AuthService:
    return AuthService(SqlCredentialStore(session), cache, signer, settings=settings)


def _raise_invalid_token() -> NoReturn:
    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=ErrMessage.INVALID_TOKEN.value,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _bearer_token(credentials: HTTPAuthorizationCredentials | None) -> str:
    if credentials is None or credentials.scheme.lower() != "bearer":
        _raise_invalid_token()
    token = credentials.credentials.strip()
    if not token:
        _raise_invalid_token()
    return token


async def get_access_context(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    signer: TokenSigner = Depends(get_token_signer),
    auth_service: AuthService = Depends(get_auth_service),
) -> TokenContext:
    """Require a valid, non-revoked access token."""
    token = _bearer_token(credentials)
    try:
        payload = signer.verify_access_token(token)
    except InvalidTokenError:
        _raise_invalid_token()
    if await auth_service.is_access_token_revoked(token):
        _raise_invalid_token()
    return TokenContext(payload=payload, token=token)


async def get_refresh_context(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    signer: TokenSigner = Depends(get_token_signer),
) -> TokenContext:
    """Require a refresh token whose signature verifies."""
    token = _bearer_token(credentials)
    try:
        payload = signer.verify_refresh_token(token)
    except InvalidTokenError:
        _raise_invalid_token()
    return TokenContext(payload=payload, token=token)
