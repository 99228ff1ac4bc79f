"""Application-wide constants and shared values."""

from __future__ import annotations

from enum import StrEnum
from urllib.parse import quote

SLUG_PATTERN = r"^[a-z0-9]+(?:-[a-z0-9]+)*$"

BLOGS_PAGE_PATH = "/dashboard/blogs"
NEW_BLOG_PAGE_PATH = "/dashboard/blogs/new"
LOGIN_PAGE_PATH = "/dashboard/login"


class BlogStatus(StrEnum):
    """Publication status of a blog post."""

    DRAFT = "draft"
    PUBLISHED = "published"


class NotificationVariant(StrEnum):
    """Visual variant of a dashboard notification."""

    DEFAULT = "default"
    DESTRUCTIVE = "destructive"


STATUS_BADGE_CLASSES = {
    BlogStatus.PUBLISHED: "badge-published",
    BlogStatus.DRAFT: "badge-draft",
}


def status_label(status: str | None) -> str:
    """Return the capitalized display label of a status value."""

    if not status:
        return "All"
    return status[:1].upper() + status[1:]


def blog_page_path(blog_id: str, action: str | None = None) -> str:
    """Return the dashboard path of a post, with its id escaped as one segment."""

    path = f"{BLOGS_PAGE_PATH}/{quote(blog_id, safe='')}"
    return f"{path}/{action}" if action else path
