"""Authentication endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, EmailStr, Field, field_validator

from api.deps import TokenContext, get_access_context, get_auth_service, get_refresh_context
from core import MAX_PASSWORD_BYTES, password_fits
from services.auth import (
    AlreadyExistsError,
    AuthService,
    InvalidCredentialsError,
    InvalidTokenError,
    SignupData,
    TokenPair,
)

router = APIRouter(prefix="/auth", tags=["auth"])


def _check_password_bytes(value: str) -> str:
    if not password_fits(value):
        raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
    return value


class SignupRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)
    nickname: str | None = Field(default=None, max_length=50)

    @field_validator("password")
    @classmethod
    def check_password_bytes(cls, value: str) -> str:
        return _check_password_bytes(value)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)

    @field_validator("password")
    @classmethod
    def check_password_bytes(cls, value: str) -> str:
        return _check_password_bytes(value)


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"

    @classmethod
    def from_pair(cls, tokens: TokenPair) -> TokenResponse:
        return cls(access_token=tokens.access_token, refresh_token=tokens.refresh_token)


class MeResponse(BaseModel):
    user_id: str
    email: str


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


@router.post("/signup", status_code=status.HTTP_201_CREATED)
async def signup(
    payload: SignupRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> dict[str, Any]:
    try:
        await auth_service.signup(
            SignupData(
                email=str(payload.email),
                password=payload.password,
                nickname=payload.nickname,
            )
        )
    except AlreadyExistsError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=exc.message.value,
        ) from exc
    return {"detail": "Signed up"}


@router.post("/login", response_model=TokenResponse)
async def login(
    payload: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> TokenResponse:
    try:
        tokens = await auth_service.login(str(payload.email), payload.password)
    except InvalidCredentialsError as exc:
        raise _unauthorized(exc.message.value) from exc
    return TokenResponse.from_pair(tokens)


@router.post("/reissue", response_model=TokenResponse)
async def reissue(
    context: TokenContext = Depends(get_refresh_context),
    auth_service: AuthService = Depends(get_auth_service),
) -> TokenResponse:
    try:
        tokens = await auth_service.reissue_tokens(context.payload, context.token)
    except InvalidTokenError as exc:
        raise _unauthorized(exc.message.value) from exc
    return TokenResponse.from_pair(tokens)


@router.post("/logout", status_code=status.HTTP_200_OK)
async def logout(
    context: TokenContext = Depends(get_access_context),
    auth_service: AuthService = Depends(get_auth_service),
) -> dict[str, Any]:
    await auth_service.logout(context.payload, context.token)
    return {"detail": "Logged out"}


@router.get("/me", response_model=MeResponse)
async def me(context: TokenContext = Depends(get_access_context)) -> MeResponse:
    return MeResponse(user_id=context.payload.user_id, email=context.payload.email)
