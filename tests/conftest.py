from __future__ import annotations

import asyncio
import json
import re
from http.cookies import SimpleCookie
from typing import Any
from urllib.parse import urlencode
from uuid import uuid4

import httpx
import pytest
from fastapi import FastAPI
from starlette.types import Message, Receive, Scope, Send

from app.backend.session import get_backend_client
from app.main import create_app

ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "change-me-now"
SESSION_COOKIE = "blog_dashboard_session"


def make_blog(blog_id: str, title: str, *, status: str = "draft", **overrides: Any) -> dict[str, Any]:
    blog = {
        "_id": blog_id,
        "title": title,
        "slug": title.lower().replace(" ", "-"),
        "status": status,
        "excerpt": "A short summary of the post",
        "content": "<p>Body</p>",
        "coverImage": "https://cdn.example.com/cover.png",
        "author": {"_id": "author-1", "name": "Ada Writer", "email": "ada@example.com"},
        "createdAt": "2025-01-05T10:00:00.000Z",
        "updatedAt": "2025-01-06T10:00:00.000Z",
    }
    blog.update(overrides)
    return blog


class FakeBackend:
    """In-memory stand-in for the blog REST backend."""

    def __init__(self, blogs: list[dict[str, Any]] | None = None):
        self.blogs = list(blogs or [])
        self.requests: list[httpx.Request] = []
        self.saved_payloads: list[dict[str, Any]] = []
        self.fail_list = False
        self.fail_get = False
        self.fail_delete = False
        self.fail_upload = False
        self.put_error: str | None = None
        self.upload_url = "https://cdn.example.com/uploads/cover.png"

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handle), base_url="http://backend")

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if path == "/api/blogs" and request.method == "GET":
            if self.fail_list:
                return httpx.Response(500, json={"error": "boom"})
            blogs = self.blogs
            status = request.url.params.get("status")
            search = request.url.params.get("search")
            if status:
                blogs = [blog for blog in blogs if blog["status"] == status]
            if search:
                blogs = [blog for blog in blogs if search.lower() in blog["title"].lower()]
            return httpx.Response(200, json={"blogs": blogs})

        if path == "/api/blogs" and request.method == "PUT":
            if self.put_error is not None:
                return httpx.Response(400, json={"error": self.put_error})
            payload = json.loads(request.content)
            self.saved_payloads.append(payload)
            return httpx.Response(200, json={"blog": {"_id": "new-id", **payload}})

        if path.startswith("/api/blogs/"):
            blog_id = path.removeprefix("/api/blogs/")
            blog = next((item for item in self.blogs if item["_id"] == blog_id), None)
            if request.method == "GET":
                if self.fail_get or blog is None:
                    return httpx.Response(404, json={"error": "Blog not found"})
                return httpx.Response(200, json={"blog": blog})
            if request.method == "DELETE":
                if self.fail_delete or blog is None:
                    return httpx.Response(500, json={"error": "Failed to delete"})
                self.blogs.remove(blog)
                return httpx.Response(200, json={"success": True})

        if path == "/api/upload" and request.method == "POST":
            if self.fail_upload:
                return httpx.Response(500, json={"error": "upload failed"})
            return httpx.Response(200, json={"secure_url": self.upload_url})

        return httpx.Response(404, json={"error": "not found"})

    def requests_for(self, method: str, path: str) -> list[httpx.Request]:
        return [
            request
            for request in self.requests
            if request.method == method and request.url.path == path
        ]


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend(
        [
            make_blog("b1", "First Post", status="published"),
            make_blog("b2", "Second Post", status="draft"),
            make_blog("b3", "Third Post", status="published", createdAt="2024-12-31T23:00:00Z"),
        ]
    )


@pytest.fixture
def app(backend: FakeBackend) -> FastAPI:
    app = create_app()

    async def override_get_backend_client():
        async with backend.client() as client:
            yield client

    app.dependency_overrides[get_backend_client] = override_get_backend_client
    return app


def header_value(headers: list[tuple[str, str]], name: str) -> str | None:
    for key, value in headers:
        if key.lower() == name.lower():
            return value
    return None


def update_cookie_jar(cookie_jar: dict[str, str], headers: list[tuple[str, str]]) -> None:
    for key, value in headers:
        if key.lower() != "set-cookie":
            continue
        parsed_cookie = SimpleCookie()
        parsed_cookie.load(value)
        for morsel in parsed_cookie.values():
            cookie_jar[morsel.key] = morsel.value


def extract_csrf_token(body: str) -> str:
    match = re.search(r'name="csrf_token" value="([^"]+)"', body)
    assert match is not None
    return match.group(1)


def _encode_multipart(
    form: dict[str, str],
    files: dict[str, tuple[str, bytes, str]],
) -> tuple[bytes, str]:
    boundary = uuid4().hex
    parts: list[bytes] = []
    for name, value in form.items():
        parts.append(
            f'--{boundary}\r\nContent-Disposition: form-data; name="{name}"\r\n\r\n'.encode()
            + value.encode("utf-8")
            + b"\r\n"
        )
    for name, (filename, content, content_type) in files.items():
        parts.append(
            (
                f"--{boundary}\r\n"
                f'Content-Disposition: form-data; name="{name}"; filename="{filename}"\r\n'
                f"Content-Type: {content_type}\r\n\r\n"
            ).encode()
            + content
            + b"\r\n"
        )
    parts.append(f"--{boundary}--\r\n".encode())
    return b"".join(parts), f"multipart/form-data; boundary={boundary}"


def asgi_request(
    app: FastAPI,
    method: str,
    path: str,
    *,
    form: dict[str, str] | None = None,
    files: dict[str, tuple[str, bytes, str]] | None = None,
    cookies: dict[str, str] | None = None,
) -> tuple[int, list[tuple[str, str]], str]:
    headers: list[tuple[bytes, bytes]] = [(b"host", b"testserver")]
    request_body = b""
    path, _, query_string = path.partition("?")

    if cookies:
        cookie_header = "; ".join(f"{name}={value}" for name, value in cookies.items())
        headers.append((b"cookie", cookie_header.encode("utf-8")))

    if files:
        request_body, content_type = _encode_multipart(form or {}, files)
        headers.append((b"content-type", content_type.encode("utf-8")))
    elif form is not None:
        request_body = urlencode(form).encode("utf-8")
        headers.append((b"content-type", b"application/x-www-form-urlencoded"))
    headers.append((b"content-length", str(len(request_body)).encode("utf-8")))

    scope: Scope = {
        "type": "http",
        "asgi": {"version": "3.0", "spec_version": "2.3"},
        "http_version": "1.1",
        "method": method.upper(),
        "scheme": "http",
        "path": path,
        "raw_path": path.encode("utf-8"),
        "query_string": query_string.encode("utf-8"),
        "headers": headers,
        "client": ("testclient", 50000),
        "server": ("testserver", 80),
        "root_path": "",
    }

    sent = False

    async def receive() -> Message:
        nonlocal sent
        if sent:
            return {"type": "http.request", "body": b"", "more_body": False}
        sent = True
        return {"type": "http.request", "body": request_body, "more_body": False}

    messages: list[Message] = []

    async def send(message: Message) -> None:
        messages.append(message)

    receive_fn: Receive = receive
    send_fn: Send = send
    asyncio.run(app(scope, receive_fn, send_fn))

    status_code = 500
    response_headers: list[tuple[str, str]] = []
    body = b""
    for message in messages:
        if message["type"] == "http.response.start":
            status_code = message["status"]
            response_headers = [
                (key.decode("latin-1"), value.decode("latin-1"))
                for key, value in message.get("headers", [])
            ]
        if message["type"] == "http.response.body":
            body += message.get("body", b"")

    return status_code, response_headers, body.decode("utf-8", errors="ignore")


def login(
    app: FastAPI,
    cookie_jar: dict[str, str],
    *,
    password: str = ADMIN_PASSWORD,
) -> tuple[int, list[tuple[str, str]], str]:
    status_code, headers, login_body = asgi_request(app, "GET", "/dashboard/login")
    update_cookie_jar(cookie_jar, headers)
    assert status_code == 200

    status_code, headers, body = asgi_request(
        app,
        "POST",
        "/dashboard/login",
        form={
            "username": ADMIN_USERNAME,
            "password": password,
            "csrf_token": extract_csrf_token(login_body),
        },
        cookies=cookie_jar,
    )
    update_cookie_jar(cookie_jar, headers)
    return status_code, headers, body
