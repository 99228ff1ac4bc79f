"""Authentication, session cookie and CSRF helper services."""

from __future__ import annotations

import base64
import hashlib
import hmac
import json
import logging
import secrets
from hmac import compare_digest
from typing import Any

from fastapi import HTTPException, Request, status
from pydantic import ValidationError

from app.core.config import get_settings
from app.core.security import get_admin_password_hash, verify_password
from app.schemas.auth import CsrfInput, DashboardLoginInput

logger = logging.getLogger(__name__)

SESSION_ADMIN_USERNAME_KEY = "admin_username"
SESSION_CSRF_TOKEN_KEY = "csrf_token"


def decode_session_cookie(secret_key: str, raw_cookie: str | None) -> dict[str, Any]:
    """Decode and validate signed session cookie payload."""

    if raw_cookie is None or "." not in raw_cookie:
        return {}
    encoded_payload, signature = raw_cookie.rsplit(".", 1)
    if not compare_digest(_sign_payload(secret_key, encoded_payload), signature):
        return {}
    try:
        padding = "=" * (-len(encoded_payload) % 4)
        payload = base64.urlsafe_b64decode(f"{encoded_payload}{padding}".encode())
        data = json.loads(payload.decode("utf-8"))
    except (ValueError, json.JSONDecodeError):
        return {}
    if not isinstance(data, dict):
        return {}
    return {str(key): value for key, value in data.items()}


def encode_session_cookie(secret_key: str, session_data: dict[str, Any]) -> str:
    """Encode session dict and sign it for cookie storage."""

    raw_payload = json.dumps(session_data, separators=(",", ":"), sort_keys=True).encode("utf-8")
    encoded_payload = base64.urlsafe_b64encode(raw_payload).decode("utf-8").rstrip("=")
    signature = _sign_payload(secret_key, encoded_payload)
    return f"{encoded_payload}.{signature}"


def parse_login_input(username: str, password: str, csrf_token: str) -> DashboardLoginInput | None:
    """Return validated login input or ``None`` for invalid payload."""

    try:
        return DashboardLoginInput(username=username, password=password, csrf_token=csrf_token)
    except ValidationError:
        return None


def authenticate_admin(username: str, password: str) -> bool:
    """Check credentials against the configured dashboard admin."""

    settings = get_settings()
    if not compare_digest(username.encode("utf-8"), settings.admin_username.encode("utf-8")):
        return False
    return verify_password(password, get_admin_password_hash())


def get_authenticated_admin(request: Request) -> str | None:
    """Return the username stored in the session, if any."""

    username = request.session.get(SESSION_ADMIN_USERNAME_KEY)
    if not isinstance(username, str) or not username:
        return None
    return username


def login_admin(request: Request, username: str) -> None:
    """Persist admin login state in session."""

    request.session[SESSION_ADMIN_USERNAME_KEY] = username
    rotate_csrf_token(request)
    logger.info("Dashboard login for %s", username)


def logout_admin(request: Request) -> None:
    """Clear the session for logout."""

    request.session.clear()


def get_or_create_csrf_token(request: Request) -> str:
    """Return existing CSRF token or issue a new one."""

    csrf_token = request.session.get(SESSION_CSRF_TOKEN_KEY)
    if isinstance(csrf_token, str) and csrf_token:
        return csrf_token
    return rotate_csrf_token(request)


def rotate_csrf_token(request: Request) -> str:
    """Generate and store a fresh CSRF token."""

    csrf_token = secrets.token_urlsafe(32)
    request.session[SESSION_CSRF_TOKEN_KEY] = csrf_token
    return csrf_token


def validate_or_raise_csrf(request: Request, csrf_token: str) -> None:
    """Reject the request with 403 unless the posted token matches the session."""

    session_token = request.session.get(SESSION_CSRF_TOKEN_KEY)
    try:
        posted_token = CsrfInput(csrf_token=csrf_token).csrf_token
    except ValidationError:
        posted_token = ""
    if (
        not isinstance(session_token, str)
        or not posted_token
        or not compare_digest(session_token.encode("utf-8"), posted_token.encode("utf-8"))
    ):
        logger.warning("Rejected form post to %s: invalid CSRF token", request.url.path)
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid CSRF token")


def _sign_payload(secret_key: str, payload: str) -> str:
    digest = hmac.new(secret_key.encode("utf-8"), payload.encode("utf-8"), hashlib.sha256)
    return digest.hexdigest()
