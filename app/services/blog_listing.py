"""Blog listing view state and operations."""

from __future__ import annotations

import logging
from datetime import datetime

import httpx

from app.core.constants import STATUS_BADGE_CLASSES, BlogStatus, status_label
from app.models.blog import Blog
from app.repositories import blog_repo
from app.repositories.blog_repo import BackendError
from app.services.flash_service import Notification

logger = logging.getLogger(__name__)

LOAD_FAILED_MESSAGE = "Failed to load blogs. Please try again."
DELETE_FAILED_MESSAGE = "Failed to delete blog. Please try again."
DELETE_SUCCEEDED_MESSAGE = "Blog deleted successfully"

_MONTH_ABBREVIATIONS = (
    "Jan",
    "Feb",
    "Mar",
    "Apr",
    "May",
    "Jun",
    "Jul",
    "Aug",
    "Sep",
    "Oct",
    "Nov",
    "Dec",
)


class BlogListingView:
    """State of the blog listing page.

    A status change reloads the collection; the free-text search only reloads
    through an explicit :meth:`search`. Loads are numbered and a response that
    arrives after a newer load was issued is discarded.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        search_term: str = "",
        status_filter: BlogStatus | None = None,
    ) -> None:
        self.client = client
        self.blogs: list[Blog] = []
        self.loading = True
        self.search_term = search_term
        self.status_filter = status_filter
        self.delete_dialog_open = False
        self.blog_to_delete: str | None = None
        self.notifications: list[Notification] = []
        self._load_generation = 0

    @property
    def has_filters(self) -> bool:
        return bool(self.search_term or self.status_filter)

    @property
    def status_filter_label(self) -> str:
        return status_label(self.status_filter)

    async def mount(self) -> None:
        await self.load()

    async def load(self) -> None:
        self._load_generation += 1
        generation = self._load_generation
        self.loading = True
        try:
            blogs = await blog_repo.list_blogs(
                self.client,
                search=self.search_term or None,
                status=self.status_filter,
            )
        except BackendError:
            logger.exception("Error fetching blogs")
            if generation == self._load_generation:
                self.notifications.append(Notification.error(LOAD_FAILED_MESSAGE))
        else:
            if generation == self._load_generation:
                self.blogs = list(blogs)
            else:
                logger.debug("Discarding superseded blog list response %s", generation)
        finally:
            if generation == self._load_generation:
                self.loading = False

    def set_search_term(self, search_term: str) -> None:
        self.search_term = search_term

    async def search(self) -> None:
        await self.load()

    async def set_status_filter(self, status_filter: BlogStatus | None) -> None:
        if status_filter == self.status_filter:
            return
        self.status_filter = status_filter
        await self.load()

    async def clear_filters(self) -> None:
        self.search_term = ""
        await self.set_status_filter(None)

    def confirm_delete(self, blog_id: str) -> None:
        self.blog_to_delete = blog_id
        self.delete_dialog_open = True

    def cancel_delete(self) -> None:
        self.delete_dialog_open = False
        self.blog_to_delete = None

    @property
    def pending_delete(self) -> Blog | None:
        """Return the held post targeted by the open dialog, if loaded."""

        if self.blog_to_delete is None:
            return None
        return next((blog for blog in self.blogs if blog.id == self.blog_to_delete), None)

    async def delete(self) -> bool:
        """Delete the pending target and return whether the backend accepted it."""

        blog_id = self.blog_to_delete
        if not blog_id:
            return False

        try:
            await blog_repo.delete_blog(self.client, blog_id)
        except BackendError:
            logger.exception("Error deleting blog %s", blog_id)
            self.notifications.append(Notification.error(DELETE_FAILED_MESSAGE))
            return False
        else:
            self.blogs = [blog for blog in self.blogs if blog.id != blog_id]
            self.notifications.append(Notification.success(DELETE_SUCCEEDED_MESSAGE))
            return True
        finally:
            self.cancel_delete()


def format_date(value: datetime | str | None) -> str:
    """Format a timestamp as ``Jan 5, 2025``."""

    if value is None or value == "":
        return ""
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    return f"{_MONTH_ABBREVIATIONS[value.month - 1]} {value.day}, {value.year}"


def status_badge_class(status: str | None) -> str:
    """Return the badge CSS class for a status value."""

    try:
        return STATUS_BADGE_CLASSES[BlogStatus(status)]
    except ValueError:
        return STATUS_BADGE_CLASSES[BlogStatus.DRAFT]
