"""Backend HTTP client construction and dependency helpers."""

from __future__ import annotations

from collections.abc import AsyncGenerator

import httpx

from app.core.config import Settings, get_settings


def create_backend_client(settings: Settings | None = None) -> httpx.AsyncClient:
    """Return an async client bound to the blog backend."""

    settings = settings or get_settings()
    return httpx.AsyncClient(
        base_url=settings.blog_api_url,
        timeout=httpx.Timeout(settings.blog_api_timeout),
        headers={"accept": "application/json"},
    )


async def get_backend_client() -> AsyncGenerator[httpx.AsyncClient, None]:
    """Yield a backend client for the lifetime of one request."""

    async with create_backend_client() as client:
        yield client
