"""Signup, login, token reissue and logout protocols."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from functools import lru_cache

from core import Settings, hash_password, settings as default_settings, verify_password

from .credential_store import CredentialStore, NewUser, normalize_email
from .errors import (
    AlreadyExistsError,
    DuplicateEmailError,
    InvalidCredentialsError,
    InvalidTokenError,
)
from .token_store import CacheStore, refresh_token_key
from .tokens import TokenPair, TokenPayload, TokenSigner

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SignupData:
    email: str
    password: str
    nickname: str | None = None


@lru_cache
def _dummy_password_hash(rounds: int) -> str:
    return hash_password("not-a-real-password", rounds=rounds)


class AuthService:
    """Coordinates the credential store, the cache store and the token signer.

    The cache store is the source of truth for token validity:

    * ``<refresh_token_key>:<user_id>`` holds the single refresh token a user
      may currently present. Login and reissue overwrite it, so any earlier
      refresh token stops working even though its signature still verifies.
    * ``<jwt_blacklist_key>`` holds revoked access tokens, each kept only for
      the access-token lifetime.
    """

    def __init__(
        self,
        credentials: CredentialStore,
        cache: CacheStore,
        signer: TokenSigner | None = None,
        *,
        settings: Settings | None = None,
    ) -> None:
        self.credentials = credentials
        self.cache = cache
        self.settings = settings or default_settings
        self.signer = signer or TokenSigner(self.settings)

    async def signup(self, data: SignupData) -> str:
        email = normalize_email(data.email)
        if not await self.credentials.email_available(email):
            logger.info("Rejected signup for registered email")
            raise AlreadyExistsError()

        password_hash = await asyncio.to_thread(
            hash_password, data.password, rounds=self.settings.bcrypt_rounds
        )
        try:
            user_id = await self.credentials.create_user(
                NewUser(email=email, password_hash=password_hash, nickname=data.nickname)
            )
        except DuplicateEmailError as exc:
            # Lost a race against a concurrent signup for the same email.
            logger.info("Rejected signup for registered email")
            raise AlreadyExistsError() from exc

        logger.info("User signed up", extra={"user_id": user_id})
        return user_id

    async def validate_user(self, email: str, password: str) -> bool:
        await self._authenticate(email, password)
        return True

    async def login(self, email: str, password: str) -> TokenPair:
        user_id, normalized_email = await self._authenticate(email, password)
        tokens = self.signer.sign_tokens(TokenPayload(user_id=user_id, email=normalized_email))
        await self._store_refresh_token(user_id, tokens.refresh_token)
        logger.info("User logged in", extra={"user_id": user_id})
        return tokens

    async def reissue_tokens(self, payload: TokenPayload, refresh_token: str) -> TokenPair:
        """Mint a new token pair for a verified refresh token.

        The presented token must be the one currently stored for the user; the
        freshly minted refresh token replaces it.
        """
        user_id = payload.user_id
        if not user_id:
            raise InvalidTokenError()

        stored = await self.cache.get(self._refresh_key(user_id))
        if stored is None or stored != refresh_token:
            logger.info("Rejected refresh token", extra={"user_id": user_id})
            raise InvalidTokenError()

        email = await self.credentials.find_email(user_id)
        if email is None:
            raise InvalidTokenError()

        tokens = self.signer.sign_tokens(TokenPayload(user_id=user_id, email=email))
        await self._store_refresh_token(user_id, tokens.refresh_token)
        logger.info("Tokens reissued", extra={"user_id": user_id})
        return tokens

    async def logout(self, payload: TokenPayload, access_token: str) -> None:
        await self.cache.add_to_set(
            self.settings.jwt_blacklist_key,
            access_token,
            self.settings.access_token_expires_in,
        )
        if payload.user_id:
            await self.cache.delete(self._refresh_key(payload.user_id))
        logger.info("User logged out", extra={"user_id": payload.user_id})

    async def is_access_token_revoked(self, access_token: str) -> bool:
        return await self.cache.is_member(self.settings.jwt_blacklist_key, access_token)

    async def _authenticate(self, email: str, password: str) -> tuple[str, str]:
        normalized_email = normalize_email(email)
        user_id = await self.credentials.find_user_id(normalized_email)
        digest = (
            await self.credentials.find_password_digest(normalized_email)
            if user_id is not None
            else None
        )
        # Unknown users still pay for a bcrypt comparison.
        candidate = digest or _dummy_password_hash(self.settings.bcrypt_rounds)
        password_ok = await asyncio.to_thread(verify_password, password, candidate)

        if user_id is None or digest is None or not password_ok:
            logger.info("Rejected credentials")
            raise InvalidCredentialsError()
        return user_id, normalized_email

    async def _store_refresh_token(self, user_id: str, refresh_token: str) -> None:
        await self.cache.set(
            self._refresh_key(user_id),
            refresh_token,
            self.settings.refresh_token_expires_in,
        )

    def _refresh_key(self, user_id: str) -> str:
        return refresh_token_key(user_id, prefix=self.settings.refresh_token_key)
