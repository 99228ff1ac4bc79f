"""Rich-text editor configuration and inline image embedding."""

from __future__ import annotations

import base64
import logging
import mimetypes
from typing import Any

from fastapi import UploadFile

from app.core.config import Settings

logger = logging.getLogger(__name__)

EMBED_ERROR_MESSAGE = "error while uploading"

EDITOR_SCRIPT_URL = "https://cdn.tiny.cloud/1/{api_key}/tinymce/7/tinymce.min.js"

EDITOR_PLUGINS = (
    "advlist",
    "autolink",
    "lists",
    "link",
    "image",
    "charmap",
    "preview",
    "anchor",
    "searchreplace",
    "visualblocks",
    "code",
    "fullscreen",
    "insertdatetime",
    "media",
    "table",
    "help",
    "wordcount",
)

EDITOR_TOOLBAR = (
    "undo redo | blocks | "
    "bold italic forecolor | alignleft aligncenter "
    "alignright alignjustify | bullist numlist outdent indent | "
    "removeformat | help"
)

EDITOR_CONTENT_STYLE = "body { font-family:Helvetica,Arial,sans-serif; font-size:14px }"


class ImageEmbedError(Exception):
    """Raised when an inserted image cannot be turned into a data URL."""

    def __init__(self, message: str = EMBED_ERROR_MESSAGE) -> None:
        super().__init__(message)
        self.message = message


def build_editor_config(
    settings: Settings,
    *,
    upload_url: str,
    height: int | None = None,
) -> dict[str, Any]:
    """Return the widget init options."""

    return {
        "height": height or settings.editor_height,
        "menubar": True,
        "plugins": list(EDITOR_PLUGINS),
        "toolbar": EDITOR_TOOLBAR,
        "content_style": EDITOR_CONTENT_STYLE,
        "branding": False,
        "promotion": False,
        "image_title": True,
        "automatic_uploads": True,
        "file_picker_types": "image",
        "images_upload_url": upload_url,
    }


def editor_script_url(settings: Settings) -> str:
    return EDITOR_SCRIPT_URL.format(api_key=settings.tinymce_api_key)


def to_data_url(content: bytes, content_type: str) -> str:
    encoded = base64.b64encode(content).decode("ascii")
    return f"data:{content_type};base64,{encoded}"


async def read_image_as_data_url(upload: UploadFile) -> str:
    """Read an inserted image blob and return it as an inline data URL."""

    try:
        content = await upload.read()
    except (OSError, RuntimeError) as exc:
        logger.error("Could not read embedded image %s: %s", upload.filename, exc)
        raise ImageEmbedError() from exc

    if not content:
        logger.warning("Embedded image %s is empty", upload.filename)
        raise ImageEmbedError()

    content_type = upload.content_type or _guess_content_type(upload.filename)
    return to_data_url(content, content_type)


def _guess_content_type(filename: str | None) -> str:
    if filename:
        guessed, _ = mimetypes.guess_type(filename)
        if guessed:
            return guessed
    return "application/octet-stream"
