"""Blog records returned by the backend."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.core.constants import BlogStatus


class BackendRecord(BaseModel):
    """Base for camelCase backend JSON records."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class Author(BackendRecord):
    """Post author reference."""

    id: str = Field(alias="_id")
    name: str = ""
    email: str = ""


class Blog(BackendRecord):
    """Blog post as owned by the backend."""

    id: str = Field(alias="_id")
    title: str
    slug: str = ""
    status: BlogStatus = BlogStatus.DRAFT
    excerpt: str = ""
    content: Any = None
    cover_image: str = ""
    author: Author | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class BlogListResponse(BackendRecord):
    """Payload of ``GET /api/blogs``."""

    blogs: list[Blog] = Field(default_factory=list)


class BlogDetailResponse(BackendRecord):
    """Payload of ``GET /api/blogs/{id}``."""

    blog: Blog


class UploadResult(BaseModel):
    """Payload of ``POST /api/upload``."""

    secure_url: str = Field(min_length=1)
