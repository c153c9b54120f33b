"""Tests for token signing and verification."""

import jwt
import pytest

from core import Settings, verify_token
from services.auth import InvalidTokenError, TokenPayload, TokenSigner


@pytest.fixture()
def signer_settings() -> Settings:
    return Settings(
        jwt_access_secret="access-secret",
        jwt_secret="refresh-secret",
        access_token_expires_in=60,
        refresh_token_expires_in=3600,
    )


@pytest.fixture()
def signer(signer_settings: Settings) -> TokenSigner:
    return TokenSigner(signer_settings)


PAYLOAD = TokenPayload(user_id="user-1", email="a@x.com")


def test_tokens_use_independent_secrets_and_lifetimes(signer: TokenSigner):
    tokens = signer.sign_tokens(PAYLOAD)

    access = verify_token(tokens.access_token, "access-secret")
    refresh = verify_token(tokens.refresh_token, "refresh-secret")
    assert access["exp"] - access["iat"] == 60
    assert refresh["exp"] - refresh["iat"] == 3600
    assert access["sub"] == refresh["sub"] == "user-1"

    with pytest.raises(ValueError):
        verify_token(tokens.access_token, "refresh-secret")
    with pytest.raises(ValueError):
        verify_token(tokens.refresh_token, "access-secret")


def test_verify_round_trips_payload(signer: TokenSigner):
    tokens = signer.sign_tokens(PAYLOAD)

    assert signer.verify_access_token(tokens.access_token) == PAYLOAD
    assert signer.verify_refresh_token(tokens.refresh_token) == PAYLOAD


def test_each_issuance_is_unique(signer: TokenSigner):
    assert signer.sign_tokens(PAYLOAD) != signer.sign_tokens(PAYLOAD)


def test_token_classes_are_not_interchangeable(signer: TokenSigner):
    tokens = signer.sign_tokens(PAYLOAD)

    with pytest.raises(InvalidTokenError):
        signer.verify_access_token(tokens.refresh_token)
    with pytest.raises(InvalidTokenError):
        signer.verify_refresh_token(tokens.access_token)


def test_rejects_token_with_wrong_type_claim(signer: TokenSigner):
    forged = verify_token(signer.sign_tokens(PAYLOAD).access_token, "access-secret")
    forged["type"] = "refresh"
    token = jwt.encode(forged, "access-secret", algorithm="HS256")

    with pytest.raises(InvalidTokenError):
        signer.verify_access_token(token)


def test_rejects_token_missing_claims(signer: TokenSigner):
    claims = verify_token(signer.sign_tokens(PAYLOAD).access_token, "access-secret")
    del claims["email"]
    token = jwt.encode(claims, "access-secret", algorithm="HS256")

    with pytest.raises(InvalidTokenError):
        signer.verify_access_token(token)


def test_rejects_expired_token(signer: TokenSigner):
    claims = verify_token(signer.sign_tokens(PAYLOAD).access_token, "access-secret")
    claims["iat"] -= 120
    claims["exp"] -= 120
    token = jwt.encode(claims, "access-secret", algorithm="HS256")

    with pytest.raises(InvalidTokenError):
        signer.verify_access_token(token)


def test_rejects_garbage(signer: TokenSigner):
    with pytest.raises(InvalidTokenError):
        signer.verify_access_token("not-a-jwt")
