import logging
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.responses import RedirectResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates

from app.core.config import get_settings
from app.core.constants import LOGIN_PAGE_PATH, blog_page_path, status_label
from app.routers.dashboard_auth import router as dashboard_auth_router
from app.routers.dashboard_blogs import router as dashboard_blogs_router
from app.routers.dashboard_editor import router as dashboard_editor_router
from app.services.auth_service import (
    SESSION_ADMIN_USERNAME_KEY,
    decode_session_cookie,
    encode_session_cookie,
)
from app.services.blog_listing import format_date, status_badge_class

BASE_DIR = Path(__file__).resolve().parent
STATIC_DIR = BASE_DIR / "static"
TEMPLATES_DIR = BASE_DIR / "templates"
SESSION_COOKIE_NAME = "blog_dashboard_session"

logger = logging.getLogger(__name__)


def _is_dashboard_path(path: str) -> bool:
    return path == "/dashboard" or path.startswith("/dashboard/")


def _is_login_path(path: str) -> bool:
    return path == LOGIN_PAGE_PATH or path.startswith(f"{LOGIN_PAGE_PATH}/")


def _configure_logging(level_name: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level_name.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def _create_templates() -> Jinja2Templates:
    templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
    templates.env.filters["format_date"] = format_date
    templates.env.filters["status_label"] = status_label
    templates.env.filters["status_badge_class"] = status_badge_class
    templates.env.globals["blog_page_path"] = blog_page_path
    return templates


def create_app() -> FastAPI:
    settings = get_settings()
    _configure_logging(settings.log_level)
    app = FastAPI(title=settings.app_name, debug=settings.app_debug)

    @app.middleware("http")
    async def session_and_dashboard_guard(request: Request, call_next):
        request.scope["session"] = decode_session_cookie(
            settings.secret_key,
            request.cookies.get(SESSION_COOKIE_NAME),
        )

        path = request.url.path
        if _is_dashboard_path(path) and not _is_login_path(path):
            if not request.session.get(SESSION_ADMIN_USERNAME_KEY):
                logger.info("Unauthenticated request to %s redirected to login", path)
                return RedirectResponse(url=LOGIN_PAGE_PATH, status_code=303)

        response = await call_next(request)
        session_data = request.scope.get("session")
        if isinstance(session_data, dict) and session_data:
            response.set_cookie(
                key=SESSION_COOKIE_NAME,
                value=encode_session_cookie(settings.secret_key, session_data),
                httponly=True,
                samesite="lax",
                secure=settings.is_production,
                path="/",
            )
        else:
            response.delete_cookie(
                key=SESSION_COOKIE_NAME,
                httponly=True,
                samesite="lax",
                secure=settings.is_production,
                path="/",
            )
        return response

    @app.get("/")
    def root():
        return RedirectResponse(url="/dashboard", status_code=303)

    app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")
    app.state.templates = _create_templates()
    app.include_router(dashboard_auth_router)
    app.include_router(dashboard_editor_router)
    app.include_router(dashboard_blogs_router)
    return app


app = create_app()
