"""FastAPI application factory."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from redis.asyncio import Redis

from api.v1.auth import router as auth_router
from core import configure_logging, settings
from services.auth import CacheStore, RedisCacheStore

API_PREFIX = "/api/v1"


def create_app(*, cache_store: CacheStore | None = None) -> FastAPI:
    """Build the application.

    ``cache_store`` replaces the Redis-backed store, which is otherwise
    created from ``REDIS_URL`` and closed on shutdown.
    """
    configure_logging(settings.log_level)

    redis_client: Redis | None = None
    if cache_store is None:
        redis_client = Redis.from_url(settings.redis_url, decode_responses=True)
        cache_store = RedisCacheStore(redis_client)

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        yield
        if redis_client is not None:
            await redis_client.aclose()

    app = FastAPI(title="Auth Service", lifespan=lifespan)
    app.state.cache_store = cache_store

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[origin.strip() for origin in settings.cors_origins.split(",") if origin.strip()],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(auth_router, prefix=API_PREFIX)

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    return app
