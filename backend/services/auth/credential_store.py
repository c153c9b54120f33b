"""User credential persistence."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, cast

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import ColumnElement

from db.errors import is_unique_violation
from models import User

from .errors import DuplicateEmailError


def _eq(column: Any, value: Any) -> ColumnElement[bool]:
    return cast(ColumnElement[bool], column == value)


def normalize_email(value: str) -> str:
    return value.strip().lower()


@dataclass(frozen=True)
class NewUser:
    email: str
    password_hash: str
    nickname: str | None = None


class CredentialStore(Protocol):
    async def email_available(self, email: str) -> bool: ...

    async def create_user(self, new_user: NewUser) -> str: ...

    async def find_user_id(self, email: str) -> str | None: ...

    async def find_email(self, user_id: str) -> str | None: ...

    async def find_password_digest(self, email: str) -> str | None: ...


class SqlCredentialStore:
    """CredentialStore backed by the ``users`` table."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def email_available(self, email: str) -> bool:
        return await self.find_user_id(email) is None

    async def create_user(self, new_user: NewUser) -> str:
        user = User(
            email=new_user.email,
            password_hash=new_user.password_hash,
            nickname=new_user.nickname,
        )
        self.session.add(user)
        try:
            await self.session.commit()
        except IntegrityError as exc:
            await self.session.rollback()
            if is_unique_violation(exc, column="email"):
                raise DuplicateEmailError(new_user.email) from exc
            raise
        return user.id

    async def find_user_id(self, email: str) -> str | None:
        result = await self.session.execute(
            select(User.id).where(_eq(User.email, email)).limit(1)
        )
        return result.scalar_one_or_none()

    async def find_email(self, user_id: str) -> str | None:
        result = await self.session.execute(
            select(User.email).where(_eq(User.id, user_id)).limit(1)
        )
        return result.scalar_one_or_none()

    async def find_password_digest(self, email: str) -> str | None:
        result = await self.session.execute(
            select(User.password_hash).where(_eq(User.email, email)).limit(1)
        )
        return result.scalar_one_or_none()
