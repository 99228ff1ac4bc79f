"""Blog create/edit form state and operations."""

from __future__ import annotations

import asyncio
import logging
import re
from collections.abc import Callable
from typing import Any

import httpx
from pydantic import ValidationError

from app.core.constants import BlogStatus
from app.models.blog import Blog
from app.repositories import blog_repo
from app.repositories.blog_repo import BackendError
from app.schemas.blog import BlogFormInput, collect_field_errors
from app.services.flash_service import Notification

logger = logging.getLogger(__name__)

UPLOAD_FAILED_MESSAGE = "Failed to upload image. Please try again."
SUBMIT_FAILED_MESSAGE = "Failed to update blog"

_NON_SLUG_CHARS_RE = re.compile(r"[^a-z0-9]+")


def slugify(title: str) -> str:
    """Derive a URL slug from a title."""

    return _NON_SLUG_CHARS_RE.sub("-", title.lower()).strip("-")


def submit_success_message(status: BlogStatus) -> str:
    if status == BlogStatus.PUBLISHED:
        return "Blog updated & published successfully"
    return "Blog updated as draft successfully"


class SubmissionInProgress(Exception):
    """Raised when a submit starts while another one is pending."""

    def __init__(self, pending_status: BlogStatus) -> None:
        super().__init__(f"A {pending_status} submission is already in progress")
        self.pending_status = pending_status


class Debouncer:
    """Run a callback once, ``delay`` seconds after the last trigger."""

    def __init__(self, delay: float, callback: Callable[[], None]) -> None:
        self.delay = delay
        self.callback = callback
        self._handle: asyncio.TimerHandle | None = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def trigger(self) -> None:
        self.cancel()
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self.delay, self._fire)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def flush(self) -> None:
        """Run a pending callback now."""

        if self._handle is not None:
            self.cancel()
            self.callback()

    def _fire(self) -> None:
        self._handle = None
        self.callback()


class BlogFormState:
    """Values, errors and submission state of the blog form.

    ``slug_is_derived`` tracks whether the slug still follows the title. It is
    cleared by a manual slug edit that differs from the derived value, and set
    again by :meth:`generate_slug` or by clearing the slug.
    """

    def __init__(
        self,
        *,
        blog_id: str | None = None,
        title: str = "",
        slug: str = "",
        excerpt: str = "",
        content: Any = "",
        cover_image: str = "",
        status: BlogStatus = BlogStatus.DRAFT,
        slug_is_derived: bool = True,
        debounce_seconds: float = 0.3,
    ) -> None:
        self.blog_id = blog_id
        self.title = title
        self.slug = slug
        self.excerpt = excerpt
        self.content = content
        self.cover_image = cover_image
        self.status = status
        self.slug_is_derived = slug_is_derived
        self.errors: dict[str, str] = {}
        self.notifications: list[Notification] = []
        self.pending_status: BlogStatus | None = None
        self._slug_debouncer = Debouncer(debounce_seconds, self._regenerate_derived_slug)

    @classmethod
    def from_blog(cls, blog: Blog, **kwargs: Any) -> BlogFormState:
        return cls(
            blog_id=blog.id,
            title=blog.title,
            slug=blog.slug,
            excerpt=blog.excerpt,
            content=blog.content if blog.content is not None else "",
            cover_image=blog.cover_image,
            status=blog.status,
            slug_is_derived=False,
            **kwargs,
        )

    @classmethod
    def from_submission(
        cls,
        *,
        blog_id: str | None,
        title: str,
        slug: str,
        excerpt: str,
        content: str,
        cover_image: str,
        slug_is_derived: bool,
        **kwargs: Any,
    ) -> BlogFormState:
        """Rebuild the state from posted fields, settling any pending derivation."""

        state = cls(
            blog_id=blog_id,
            slug=slug.strip(),
            excerpt=excerpt,
            content=content,
            cover_image=cover_image.strip(),
            slug_is_derived=slug_is_derived,
            **kwargs,
        )
        # The browser may post before its own debounce fired.
        state.set_title(title)
        state.flush_pending_slug()
        return state

    @property
    def is_editing(self) -> bool:
        return self.blog_id is not None

    @property
    def is_submitting(self) -> bool:
        return self.pending_status is not None

    @property
    def slug_generation_pending(self) -> bool:
        return self._slug_debouncer.pending

    def set_title(self, title: str) -> None:
        self.title = title
        if not self.slug_is_derived:
            return
        try:
            self._slug_debouncer.trigger()
        except RuntimeError:
            # no running event loop
            self._regenerate_derived_slug()

    def set_slug(self, slug: str) -> None:
        self.slug = slug
        self.slug_is_derived = not slug or slug == slugify(self.title)
        self._slug_debouncer.cancel()

    def generate_slug(self) -> None:
        if not self.title:
            return
        self._slug_debouncer.cancel()
        self.slug = slugify(self.title)
        self.slug_is_derived = True
        self._validate_fields("slug")

    def flush_pending_slug(self) -> None:
        self._slug_debouncer.flush()

    def _regenerate_derived_slug(self) -> None:
        if self.slug_is_derived and self.title:
            self.slug = slugify(self.title)
            if "slug" in self.errors:
                self._validate_fields("slug")

    def to_input_data(self) -> dict[str, Any]:
        return {
            "_id": self.blog_id,
            "title": self.title,
            "slug": self.slug,
            "excerpt": self.excerpt,
            "content": self.content,
            "coverImage": self.cover_image,
            "status": self.status,
        }

    def validate(self) -> BlogFormInput | None:
        """Validate every field and return the payload model, or ``None``."""

        try:
            form_input = BlogFormInput.model_validate(self.to_input_data())
        except ValidationError as exc:
            self.errors = collect_field_errors(exc)
            return None
        self.errors = {}
        return form_input

    def _validate_fields(self, *field_names: str) -> None:
        try:
            BlogFormInput.model_validate(self.to_input_data())
        except ValidationError as exc:
            field_errors = collect_field_errors(exc)
        else:
            field_errors = {}
        for field_name in field_names:
            if field_name in field_errors:
                self.errors[field_name] = field_errors[field_name]
            else:
                self.errors.pop(field_name, None)

    async def upload_cover_image(
        self,
        client: httpx.AsyncClient,
        *,
        filename: str,
        content: bytes,
        content_type: str | None = None,
    ) -> str:
        """Upload the cover image and store its hosted URL in the form."""

        try:
            secure_url = await blog_repo.upload_image(
                client,
                filename=filename,
                content=content,
                content_type=content_type,
            )
        except BackendError:
            logger.exception("Error uploading image %s", filename)
            self.notifications.append(Notification.error(UPLOAD_FAILED_MESSAGE))
            raise

        self.cover_image = secure_url
        self._validate_fields("cover_image")
        return secure_url

    async def submit(self, client: httpx.AsyncClient, status: BlogStatus) -> bool:
        """Save the form with ``status`` and return whether the backend accepted it."""

        if self.pending_status is not None:
            raise SubmissionInProgress(self.pending_status)

        self.status = BlogStatus(status)
        self.flush_pending_slug()
        form_input = self.validate()
        if form_input is None:
            return False

        self.pending_status = self.status
        try:
            await blog_repo.save_blog(client, form_input.to_payload())
        except BackendError as exc:
            logger.exception("Error updating blog")
            self.notifications.append(Notification.error(exc.message or SUBMIT_FAILED_MESSAGE))
            return False
        finally:
            self.pending_status = None

        self.notifications.append(Notification.success(submit_success_message(self.status)))
        return True
