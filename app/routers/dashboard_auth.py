"""Dashboard authentication routes."""

from __future__ import annotations

from typing import Annotated, cast

from fastapi import APIRouter, Form, Request, status
from fastapi.responses import RedirectResponse
from fastapi.templating import Jinja2Templates

from app.core.constants import BLOGS_PAGE_PATH, LOGIN_PAGE_PATH
from app.services.auth_service import (
    authenticate_admin,
    get_authenticated_admin,
    get_or_create_csrf_token,
    login_admin,
    logout_admin,
    parse_login_input,
    validate_or_raise_csrf,
)

router = APIRouter(prefix="/dashboard")


def _templates(request: Request) -> Jinja2Templates:
    return cast(Jinja2Templates, request.app.state.templates)


def _render_login_page(request: Request, error_message: str | None = None, status_code: int = 200):
    csrf_token = get_or_create_csrf_token(request)
    return _templates(request).TemplateResponse(
        request,
        "dashboard/login.html",
        {
            "request": request,
            "csrf_token": csrf_token,
            "error_message": error_message,
        },
        status_code=status_code,
    )


@router.get("")
def dashboard(request: Request):
    return RedirectResponse(url=BLOGS_PAGE_PATH, status_code=status.HTTP_303_SEE_OTHER)


@router.get("/login")
def login_page(request: Request):
    if get_authenticated_admin(request) is not None:
        return RedirectResponse(url=BLOGS_PAGE_PATH, status_code=status.HTTP_303_SEE_OTHER)
    return _render_login_page(request)


@router.post("/login")
def login(
    request: Request,
    username: Annotated[str, Form()],
    password: Annotated[str, Form()],
    csrf_token: Annotated[str, Form()],
):
    validate_or_raise_csrf(request, csrf_token)

    login_input = parse_login_input(username=username, password=password, csrf_token=csrf_token)
    if login_input is None:
        return _render_login_page(
            request,
            error_message="Please check your username and password.",
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    if not authenticate_admin(login_input.username, login_input.password):
        return _render_login_page(
            request,
            error_message="Invalid username or password.",
            status_code=status.HTTP_401_UNAUTHORIZED,
        )

    login_admin(request, login_input.username)
    return RedirectResponse(url=BLOGS_PAGE_PATH, status_code=status.HTTP_303_SEE_OTHER)


@router.post("/logout")
def logout(request: Request, csrf_token: Annotated[str, Form()]):
    validate_or_raise_csrf(request, csrf_token)
    logout_admin(request)
    return RedirectResponse(url=LOGIN_PAGE_PATH, status_code=status.HTTP_303_SEE_OTHER)
