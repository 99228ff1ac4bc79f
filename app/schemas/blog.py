"""Blog form schemas."""

from __future__ import annotations

import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic_core import PydanticCustomError

from app.core.constants import SLUG_PATTERN, BlogStatus

_SLUG_RE = re.compile(SLUG_PATTERN)

TITLE_MIN_LENGTH = 5
SLUG_MIN_LENGTH = 5
EXCERPT_MIN_LENGTH = 10


class BlogFormInput(BaseModel):
    """Validated blog form payload sent to the backend."""

    id: str | None = Field(default=None, alias="_id")
    title: str
    slug: str
    excerpt: str
    content: Any = ""
    cover_image: str = Field(alias="coverImage")
    status: BlogStatus = BlogStatus.DRAFT

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("slug", "cover_image", mode="before")
    @classmethod
    def _strip_identifiers(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("title")
    @classmethod
    def _check_title(cls, value: str) -> str:
        if len(value) < TITLE_MIN_LENGTH:
            raise PydanticCustomError(
                "title_too_short", "Title must be at least 5 characters"
            )
        return value

    @field_validator("slug")
    @classmethod
    def _check_slug(cls, value: str) -> str:
        if len(value) < SLUG_MIN_LENGTH:
            raise PydanticCustomError("slug_too_short", "Slug must be at least 5 characters")
        if _SLUG_RE.fullmatch(value) is None:
            raise PydanticCustomError(
                "slug_pattern",
                "Slug must contain only lowercase letters, numbers, and hyphens",
            )
        return value

    @field_validator("excerpt")
    @classmethod
    def _check_excerpt(cls, value: str) -> str:
        if len(value) < EXCERPT_MIN_LENGTH:
            raise PydanticCustomError(
                "excerpt_too_short", "Excerpt must be at least 10 characters"
            )
        return value

    @field_validator("cover_image")
    @classmethod
    def _check_cover_image(cls, value: str) -> str:
        if not value:
            raise PydanticCustomError("cover_image_required", "Cover image is required")
        return value

    def to_payload(self) -> dict[str, Any]:
        """Return the camelCase JSON body for ``PUT /api/blogs``."""

        exclude = {"id"} if self.id is None else set()
        return self.model_dump(mode="json", by_alias=True, exclude=exclude)


def is_valid_slug(slug: str) -> bool:
    """Return whether ``slug`` satisfies the slug rules."""

    return len(slug) >= SLUG_MIN_LENGTH and _SLUG_RE.fullmatch(slug) is not None


def collect_field_errors(error: ValidationError) -> dict[str, str]:
    """Map a validation error to the first message per form field."""

    field_errors: dict[str, str] = {}
    for item in error.errors():
        location = item.get("loc") or ("__root__",)
        field_name = str(location[0])
        if field_name == "coverImage":
            field_name = "cover_image"
        field_errors.setdefault(field_name, item["msg"])
    return field_errors
