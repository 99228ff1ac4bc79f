"""Dashboard blog routes."""

from __future__ import annotations

import logging
from typing import Annotated, cast
from urllib.parse import urlencode

import httpx
from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, Request, UploadFile, status
from fastapi.responses import JSONResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from app.backend.session import get_backend_client
from app.core.config import get_settings
from app.core.constants import BLOGS_PAGE_PATH, NEW_BLOG_PAGE_PATH, BlogStatus, blog_page_path
from app.repositories import blog_repo
from app.repositories.blog_repo import BackendError
from app.services.auth_service import get_or_create_csrf_token, validate_or_raise_csrf
from app.services.blog_form import UPLOAD_FAILED_MESSAGE, BlogFormState, slugify
from app.services.blog_listing import BlogListingView
from app.services.editor_service import build_editor_config, editor_script_url
from app.services.flash_service import Notification, pop_notifications, push_notifications

logger = logging.getLogger(__name__)

router = APIRouter(prefix=BLOGS_PAGE_PATH)

BackendClient = Annotated[httpx.AsyncClient, Depends(get_backend_client)]

LOAD_BLOG_FAILED_MESSAGE = "Failed to load blog. Please try again."
_FORM_ACTION_GENERATE = "generate"


def _templates(request: Request) -> Jinja2Templates:
    return cast(Jinja2Templates, request.app.state.templates)


def _parse_status_filter(raw_status: str | None) -> BlogStatus | None:
    if not raw_status:
        return None
    try:
        return BlogStatus(raw_status.strip().lower())
    except ValueError:
        return None


def _listing_url(search: str = "", status_filter: BlogStatus | None = None, **extra: str) -> str:
    params = {"search": search, "status": str(status_filter) if status_filter else "", **extra}
    query = urlencode({key: value for key, value in params.items() if value})
    return f"{BLOGS_PAGE_PATH}?{query}" if query else BLOGS_PAGE_PATH


def _redirect_to_listing(**kwargs) -> RedirectResponse:
    return RedirectResponse(url=_listing_url(**kwargs), status_code=status.HTTP_303_SEE_OTHER)


@router.get("")
async def blogs_page(
    request: Request,
    client: BackendClient,
    search: str = "",
    status_filter: Annotated[str, Query(alias="status")] = "",
    confirm_delete: str | None = None,
):
    view = BlogListingView(
        client,
        search_term=search.strip(),
        status_filter=_parse_status_filter(status_filter),
    )
    await view.mount()
    if confirm_delete:
        view.confirm_delete(confirm_delete)
    return _render_blogs_page(request, view)


@router.post("/{blog_id}/delete")
async def delete_blog(
    request: Request,
    blog_id: str,
    client: BackendClient,
    csrf_token: Annotated[str, Form()] = "",
    search: Annotated[str, Form()] = "",
    status_filter: Annotated[str, Form(alias="status")] = "",
):
    validate_or_raise_csrf(request, csrf_token)

    view = BlogListingView(
        client,
        search_term=search.strip(),
        status_filter=_parse_status_filter(status_filter),
    )
    view.confirm_delete(blog_id)
    await view.delete()
    push_notifications(request, view.notifications)
    return _redirect_to_listing(search=view.search_term, status_filter=view.status_filter)


@router.get("/new")
def new_blog_page(request: Request):
    state = BlogFormState(debounce_seconds=get_settings().slug_debounce_seconds)
    return _render_form_page(request, state)


@router.post("/new")
async def create_blog(
    request: Request,
    client: BackendClient,
    title: Annotated[str, Form()] = "",
    slug: Annotated[str, Form()] = "",
    excerpt: Annotated[str, Form()] = "",
    content: Annotated[str, Form()] = "",
    cover_image: Annotated[str, Form()] = "",
    slug_is_derived: Annotated[str, Form()] = "true",
    action: Annotated[str, Form()] = BlogStatus.DRAFT,
    csrf_token: Annotated[str, Form()] = "",
    cover_image_file: Annotated[UploadFile | None, File()] = None,
):
    validate_or_raise_csrf(request, csrf_token)

    state = BlogFormState.from_submission(
        blog_id=None,
        title=title,
        slug=slug,
        excerpt=excerpt,
        content=content,
        cover_image=cover_image,
        slug_is_derived=_parse_flag(slug_is_derived),
        debounce_seconds=get_settings().slug_debounce_seconds,
    )
    return await _handle_form_action(request, client, state, action, cover_image_file)


@router.get("/slug")
def derive_slug(title: str = ""):
    return {"slug": slugify(title)}


@router.post("/upload")
async def upload_cover_image(
    request: Request,
    client: BackendClient,
    file: Annotated[UploadFile, File()],
    csrf_token: Annotated[str, Form()] = "",
):
    validate_or_raise_csrf(request, csrf_token)

    content = await file.read()
    if not content:
        return JSONResponse({"error": UPLOAD_FAILED_MESSAGE}, status_code=status.HTTP_400_BAD_REQUEST)

    try:
        secure_url = await blog_repo.upload_image(
            client,
            filename=file.filename or "upload",
            content=content,
            content_type=file.content_type,
        )
    except BackendError:
        logger.exception("Error uploading image %s", file.filename)
        return JSONResponse({"error": UPLOAD_FAILED_MESSAGE}, status_code=status.HTTP_502_BAD_GATEWAY)

    return {"secure_url": secure_url}


@router.get("/{blog_id}")
async def blog_detail_page(request: Request, blog_id: str, client: BackendClient):
    try:
        blog = await blog_repo.get_blog(client, blog_id)
    except BackendError:
        logger.exception("Error fetching blog %s", blog_id)
        push_notifications(request, [Notification.error(LOAD_BLOG_FAILED_MESSAGE)])
        return _redirect_to_listing()

    return _templates(request).TemplateResponse(
        request,
        "dashboard/blog_detail.html",
        {
            "request": request,
            "csrf_token": get_or_create_csrf_token(request),
            "notifications": pop_notifications(request),
            "blog": blog,
        },
    )


@router.get("/{blog_id}/edit")
async def edit_blog_page(request: Request, blog_id: str, client: BackendClient):
    try:
        blog = await blog_repo.get_blog(client, blog_id)
    except BackendError:
        logger.exception("Error fetching blog %s", blog_id)
        push_notifications(request, [Notification.error(LOAD_BLOG_FAILED_MESSAGE)])
        return _redirect_to_listing()

    state = BlogFormState.from_blog(blog, debounce_seconds=get_settings().slug_debounce_seconds)
    return _render_form_page(request, state)


@router.post("/{blog_id}/edit")
async def update_blog(
    request: Request,
    blog_id: str,
    client: BackendClient,
    title: Annotated[str, Form()] = "",
    slug: Annotated[str, Form()] = "",
    excerpt: Annotated[str, Form()] = "",
    content: Annotated[str, Form()] = "",
    cover_image: Annotated[str, Form()] = "",
    slug_is_derived: Annotated[str, Form()] = "false",
    action: Annotated[str, Form()] = BlogStatus.DRAFT,
    csrf_token: Annotated[str, Form()] = "",
    cover_image_file: Annotated[UploadFile | None, File()] = None,
):
    validate_or_raise_csrf(request, csrf_token)

    state = BlogFormState.from_submission(
        blog_id=blog_id,
        title=title,
        slug=slug,
        excerpt=excerpt,
        content=content,
        cover_image=cover_image,
        slug_is_derived=_parse_flag(slug_is_derived),
        debounce_seconds=get_settings().slug_debounce_seconds,
    )
    return await _handle_form_action(request, client, state, action, cover_image_file)


async def _handle_form_action(
    request: Request,
    client: httpx.AsyncClient,
    state: BlogFormState,
    action: str,
    cover_image_file: UploadFile | None,
):
    if action == _FORM_ACTION_GENERATE:
        state.generate_slug()
        return _render_form_page(request, state)

    try:
        submit_status = BlogStatus(action)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Unknown form action") from None
    state.status = submit_status

    if cover_image_file is not None and cover_image_file.filename:
        file_content = await cover_image_file.read()
        if file_content:
            try:
                await state.upload_cover_image(
                    client,
                    filename=cover_image_file.filename,
                    content=file_content,
                    content_type=cover_image_file.content_type,
                )
            except BackendError:
                return _render_form_page(
                    request, state, status_code=status.HTTP_502_BAD_GATEWAY
                )

    if await state.submit(client, submit_status):
        push_notifications(request, state.notifications)
        return _redirect_to_listing()

    failure_status = (
        status.HTTP_400_BAD_REQUEST if state.errors else status.HTTP_502_BAD_GATEWAY
    )
    return _render_form_page(request, state, status_code=failure_status)


def _parse_flag(raw_value: str) -> bool:
    return raw_value.strip().lower() in {"1", "true", "on", "yes"}


def _render_blogs_page(
    request: Request,
    view: BlogListingView,
    *,
    status_code: int = status.HTTP_200_OK,
):
    csrf_token = get_or_create_csrf_token(request)
    notifications = [*pop_notifications(request), *view.notifications]
    return _templates(request).TemplateResponse(
        request,
        "dashboard/blogs.html",
        {
            "request": request,
            "csrf_token": csrf_token,
            "notifications": notifications,
            "view": view,
            "statuses": list(BlogStatus),
            "listing_url": _listing_url,
        },
        status_code=status_code,
    )


def _render_form_page(
    request: Request,
    state: BlogFormState,
    *,
    status_code: int = status.HTTP_200_OK,
):
    settings = get_settings()
    csrf_token = get_or_create_csrf_token(request)
    notifications = [*pop_notifications(request), *state.notifications]
    return _templates(request).TemplateResponse(
        request,
        "dashboard/blog_form.html",
        {
            "request": request,
            "csrf_token": csrf_token,
            "notifications": notifications,
            "form": state,
            "page_title": "Edit Blog" if state.is_editing else "New Blog",
            "form_action": (
                blog_page_path(state.blog_id, "edit") if state.is_editing else NEW_BLOG_PAGE_PATH
            ),
            "editor_config": build_editor_config(
                settings,
                upload_url=request.url_for("embed_editor_image").path,
            ),
            "editor_script_url": editor_script_url(settings),
            "slug_debounce_ms": int(settings.slug_debounce_seconds * 1000),
        },
        status_code=status_code,
    )
