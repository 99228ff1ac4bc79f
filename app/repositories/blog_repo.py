"""Backend access helpers for blog posts."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any, TypeVar
from urllib.parse import quote

import httpx
from pydantic import BaseModel, ValidationError

from app.core.constants import BlogStatus
from app.models.blog import Blog, BlogDetailResponse, BlogListResponse, UploadResult

logger = logging.getLogger(__name__)

BLOGS_PATH = "/api/blogs"
UPLOAD_PATH = "/api/upload"

TModel = TypeVar("TModel", bound=BaseModel)


class BackendError(Exception):
    """Raised when the blog backend cannot fulfil a request."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


async def list_blogs(
    client: httpx.AsyncClient,
    *,
    search: str | None = None,
    status: BlogStatus | None = None,
) -> Sequence[Blog]:
    """Return posts matching the optional search term and status."""

    params: dict[str, str] = {}
    if search:
        params["search"] = search
    if status:
        params["status"] = str(status)

    response = await _send(client, "GET", BLOGS_PATH, "Failed to fetch blogs", params=params)
    return _parse(BlogListResponse, response, "Failed to fetch blogs").blogs


async def get_blog(client: httpx.AsyncClient, blog_id: str) -> Blog:
    """Return a single post by identifier."""

    response = await _send(client, "GET", _blog_path(blog_id), "Failed to fetch blog")
    return _parse(BlogDetailResponse, response, "Failed to fetch blog").blog


async def delete_blog(client: httpx.AsyncClient, blog_id: str) -> None:
    """Hard-delete a post."""

    await _send(client, "DELETE", _blog_path(blog_id), "Failed to delete blog")


async def save_blog(client: httpx.AsyncClient, payload: dict[str, Any]) -> dict[str, Any]:
    """Create or update a post and return the backend's record."""

    response = await _send(client, "PUT", BLOGS_PATH, "Failed to update blog", json=payload)
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


async def upload_image(
    client: httpx.AsyncClient,
    *,
    filename: str,
    content: bytes,
    content_type: str | None = None,
) -> str:
    """Upload an image file and return its hosted URL."""

    files = {"file": (filename, content, content_type or "application/octet-stream")}
    response = await _send(client, "POST", UPLOAD_PATH, "Failed to upload image", files=files)
    return _parse(UploadResult, response, "Failed to upload image").secure_url


async def _send(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    failure_message: str,
    **kwargs: Any,
) -> httpx.Response:
    try:
        response = await client.request(method, url, **kwargs)
    except httpx.HTTPError as exc:
        logger.error("%s %s failed: %s", method, url, exc)
        raise BackendError(failure_message) from exc

    if response.is_success:
        return response

    logger.warning("%s %s returned %s", method, url, response.status_code)
    raise BackendError(_error_message(response) or failure_message, response.status_code)


def _parse(
    model_class: type[TModel],
    response: httpx.Response,
    failure_message: str,
) -> TModel:
    try:
        return model_class.model_validate(response.json())
    except (ValueError, ValidationError) as exc:
        logger.error("Unexpected payload from %s: %s", response.request.url, exc)
        raise BackendError(failure_message, response.status_code) from exc


def _error_message(response: httpx.Response) -> str | None:
    try:
        data = response.json()
    except ValueError:
        return None
    if isinstance(data, dict) and isinstance(data.get("error"), str) and data["error"]:
        return data["error"]
    return None


def _blog_path(blog_id: str) -> str:
    return f"{BLOGS_PATH}/{quote(blog_id, safe='')}"
