"""Database seed script for local development.

Usage:
    uv run python scripts/seed.py

Environment overrides:
    SEED_PASSWORD=Sup3rSecret!
    SEED_EMAILS=alex@example.com,sam@example.com
"""

from __future__ import annotations

import asyncio
import os
import sys
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.append(str(ROOT_DIR))

from core import settings  # noqa: E402
from core.security import hash_password  # noqa: E402
from db.session import AsyncSessionMaker  # noqa: E402
from services.auth import NewUser, SqlCredentialStore, normalize_email  # noqa: E402

PASSWORD_ENV = "SEED_PASSWORD"
EMAILS_ENV = "SEED_EMAILS"
DEFAULT_PASSWORD = "password123"
DEFAULT_EMAILS: Sequence[str] = (
    "alex@example.com",
    "sam@example.com",
    "riley@example.com",
)


@dataclass(frozen=True)
class SeedUser:
    email: str
    nickname: str


def _parse_emails(raw_value: str | None) -> list[str]:
    if raw_value is None or raw_value.strip() == "":
        return list(DEFAULT_EMAILS)
    emails: list[str] = []
    for candidate in raw_value.split(","):
        normalized = normalize_email(candidate)
        if not normalized:
            continue
        if "@" not in normalized:
            raise ValueError(f"{EMAILS_ENV} entry is not an email: {candidate!r}")
        if normalized not in emails:
            emails.append(normalized)
    return emails


def build_seed_users(emails: Sequence[str]) -> list[SeedUser]:
    return [SeedUser(email=email, nickname=email.split("@", 1)[0]) for email in emails]


async def seed() -> None:
    password = os.getenv(PASSWORD_ENV) or DEFAULT_PASSWORD
    users = build_seed_users(_parse_emails(os.getenv(EMAILS_ENV)))
    password_hash = hash_password(password, rounds=settings.bcrypt_rounds)

    created: list[str] = []
    async with AsyncSessionMaker() as session:
        store = SqlCredentialStore(session)
        for user in users:
            if not await store.email_available(user.email):
                continue
            await store.create_user(
                NewUser(email=user.email, password_hash=password_hash, nickname=user.nickname)
            )
            created.append(user.email)

    print("Seed users ready:", ", ".join(user.email for user in users))
    print("   Newly created:", len(created))
    print("   Password:", password)


if __name__ == "__main__":
    asyncio.run(seed())
