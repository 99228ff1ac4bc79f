"""Rich-text editor support routes."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, File, UploadFile, status
from fastapi.responses import JSONResponse

from app.services.editor_service import ImageEmbedError, read_image_as_data_url

router = APIRouter(prefix="/dashboard/editor")


@router.post("/images", name="embed_editor_image")
async def embed_editor_image(file: Annotated[UploadFile, File()]):
    """Return an inserted image as an inline data URL for the editor widget."""

    try:
        data_url = await read_image_as_data_url(file)
    except ImageEmbedError as exc:
        return JSONResponse({"error": exc.message}, status_code=status.HTTP_400_BAD_REQUEST)
    return {"location": data_url}
