"""
Supabase provider tests, run against httpx.MockTransport
"""
import json
import time

import httpx
import pytest
from fastapi.testclient import TestClient
from jose import jwt

from interior_tracker.backends.supabase import create_supabase_backend, error_message
from interior_tracker.errors import AuthenticationFailed, RemoteServiceError
from interior_tracker.main import app
from interior_tracker.schemas.auth import AuthSession

URL = "https://demo.supabase.co"
ANON_KEY = "anon-key"
BUCKET = "interior-images"


class FakeSupabase:
    """Records every request and answers with a queued or routed response."""

    def __init__(self):
        self.requests = []
        self.routes = {}

    def route(self, method, path, response):
        self.routes[(method, path)] = response

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self.routes.get((request.method, request.url.path))
        if response is None:
            return httpx.Response(404, json={"message": f"no route {request.url.path}"})
        if isinstance(response, Exception):
            raise response
        return response

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def fake():
    return FakeSupabase()


@pytest.fixture
def backend(fake):
    return create_supabase_backend(URL, ANON_KEY, BUCKET, transport=httpx.MockTransport(fake))


def test_requires_url_and_key():
    with pytest.raises(ValueError):
        create_supabase_backend("", ANON_KEY, BUCKET)
    with pytest.raises(ValueError):
        create_supabase_backend(URL, "", BUCKET)


@pytest.mark.parametrize("body,expected", [
    ({"msg": "User already registered"}, "User already registered"),
    ({"message": "duplicate key"}, "duplicate key"),
    ({"error": "invalid_grant", "error_description": "Invalid login credentials"}, "Invalid login credentials"),
    ({"error": "invalid_grant"}, "invalid_grant"),
])
def test_error_message(body, expected):
    assert error_message(httpx.Response(400, json=body)) == expected


def test_error_message_without_body():
    assert error_message(httpx.Response(503)) == "Request failed with status 503"


# ============================================================
# Records
# ============================================================

async def test_insert(backend, fake):
    row = {"id": "p1", "name": "Lakeview Remodel", "floors": 2, "created_at": "2024-05-01T10:00:00+00:00"}
    fake.route("POST", "/rest/v1/projects", httpx.Response(201, json=[row]))

    result = await backend.records.insert("projects", {"name": "Lakeview Remodel", "floors": 2})

    assert result == row
    request = fake.last
    assert json.loads(request.content) == [{"name": "Lakeview Remodel", "floors": 2}]
    assert request.headers["Prefer"] == "return=representation"
    assert request.headers["apikey"] == ANON_KEY
    assert request.headers["Authorization"] == f"Bearer {ANON_KEY}"


async def test_select_filters_and_order(backend, fake):
    fake.route("GET", "/rest/v1/images", httpx.Response(200, json=[{"id": "i1"}]))

    rows = await backend.records.select("images", {"project_id": "p1"}, order_by="created_at", descending=True)

    assert rows == [{"id": "i1"}]
    params = fake.last.url.params
    assert params["select"] == "*"
    assert params["project_id"] == "eq.p1"
    assert params["order"] == "created_at.desc"


async def test_select_ascending(backend, fake):
    fake.route("GET", "/rest/v1/pins", httpx.Response(200, json=[]))

    assert await backend.records.select("pins", {"image_id": "i1"}, order_by="created_at") == []
    assert fake.last.url.params["order"] == "created_at.asc"


async def test_update(backend, fake):
    fake.route("PATCH", "/rest/v1/pins", httpx.Response(204))

    await backend.records.update("pins", "pin-1", {"metadata": {"countertop": "quartz"}})

    request = fake.last
    assert request.url.params["id"] == "eq.pin-1"
    assert json.loads(request.content) == {"metadata": {"countertop": "quartz"}}


async def test_record_error_is_verbatim(backend, fake):
    fake.route("POST", "/rest/v1/projects", httpx.Response(
        403, json={"message": 'new row violates row-level security policy for table "projects"'}
    ))

    with pytest.raises(RemoteServiceError, match="row-level security"):
        await backend.records.insert("projects", {"name": "x"})


async def test_network_error(backend, fake):
    fake.route("GET", "/rest/v1/projects", httpx.ConnectError("connection refused"))

    with pytest.raises(RemoteServiceError, match="connection refused"):
        await backend.records.select("projects")


# ============================================================
# Blobs
# ============================================================

async def test_upload(backend, fake):
    path = f"/storage/v1/object/{BUCKET}/p1/abc.jpg"
    fake.route("POST", path, httpx.Response(200, json={"Key": f"{BUCKET}/p1/abc.jpg"}))

    await backend.blobs.upload("p1/abc.jpg", b"jpeg", "image/jpeg")

    request = fake.last
    assert request.content == b"jpeg"
    assert request.headers["Content-Type"] == "image/jpeg"
    assert request.headers["x-upsert"] == "false"


async def test_upload_conflict(backend, fake):
    fake.route("POST", f"/storage/v1/object/{BUCKET}/p1/abc.jpg", httpx.Response(
        409, json={"error": "Duplicate", "message": "The resource already exists"}
    ))

    with pytest.raises(RemoteServiceError, match="The resource already exists"):
        await backend.blobs.upload("p1/abc.jpg", b"jpeg")


def test_public_url(backend):
    assert backend.blobs.public_url("p1/abc.jpg") == (
        f"{URL}/storage/v1/object/public/{BUCKET}/p1/abc.jpg"
    )


# ============================================================
# Sessions
# ============================================================

async def test_sign_up(backend, fake):
    fake.route("POST", "/auth/v1/signup", httpx.Response(200, json={"id": "u1", "email": "a@b.co"}))

    assert await backend.auth.sign_up("a@b.co", "secret123") is None
    assert json.loads(fake.last.content) == {"email": "a@b.co", "password": "secret123"}


async def test_sign_in(backend, fake):
    fake.route("POST", "/auth/v1/token", httpx.Response(200, json={
        "access_token": "tok",
        "expires_in": 3600,
        "user": {"id": "u1", "email": "a@b.co"},
    }))

    before = int(time.time())
    session = await backend.auth.sign_in("a@b.co", "secret123")

    assert fake.last.url.params["grant_type"] == "password"
    assert session.access_token == "tok"
    assert session.user_id == "u1"
    assert session.email == "a@b.co"
    assert before + 3600 <= session.expires_at <= int(time.time()) + 3600


async def test_sign_in_failure_is_verbatim(backend, fake):
    fake.route("POST", "/auth/v1/token", httpx.Response(400, json={
        "error": "invalid_grant",
        "error_description": "Invalid login credentials",
    }))

    with pytest.raises(AuthenticationFailed, match="Invalid login credentials"):
        await backend.auth.sign_in("a@b.co", "wrong")


async def test_sign_out_uses_session_token(backend, fake):
    fake.route("POST", "/auth/v1/logout", httpx.Response(204))

    await backend.auth.sign_out(AuthSession(access_token="user-token", user_id="u1"))

    assert fake.last.headers["Authorization"] == "Bearer user-token"


async def test_current_user(backend, fake):
    token = jwt.encode({"sub": "u1", "exp": 2000000000}, "irrelevant", algorithm="HS256")
    fake.route("GET", "/auth/v1/user", httpx.Response(200, json={"id": "u1", "email": "a@b.co"}))

    session = await backend.auth.current_user(token)

    assert session.user_id == "u1"
    assert session.expires_at == 2000000000
    assert fake.last.headers["Authorization"] == f"Bearer {token}"


async def test_current_user_rejected_token(backend, fake):
    fake.route("GET", "/auth/v1/user", httpx.Response(401, json={"msg": "invalid JWT"}))

    assert await backend.auth.current_user("bad-token") is None


async def test_current_user_network_error(backend, fake):
    fake.route("GET", "/auth/v1/user", httpx.ConnectError("connection refused"))

    with pytest.raises(RemoteServiceError):
        await backend.auth.current_user("tok")


async def test_bound_backend_sends_user_token(backend, fake):
    fake.route("GET", "/rest/v1/projects", httpx.Response(200, json=[]))

    bound = backend.bind(AuthSession(access_token="user-token", user_id="u1"))
    await bound.records.select("projects", {"user_id": "u1"})

    assert fake.last.headers["Authorization"] == "Bearer user-token"
    assert fake.last.headers["apikey"] == ANON_KEY


# ============================================================
# Health
# ============================================================

async def test_health_check_reports_healthy(backend, fake):
    fake.route("GET", "/auth/v1/health", httpx.Response(200, json={"name": "GoTrue"}))

    assert await backend.health() == {"supabase": "healthy"}
    assert fake.last.headers["apikey"] == ANON_KEY


async def test_health_check_reports_error(backend, fake):
    fake.route("GET", "/auth/v1/health", httpx.Response(503, json={"message": "upstream unavailable"}))

    assert await backend.health() == {"supabase": "error: upstream unavailable"}


def test_detailed_health_endpoint(backend, fake):
    fake.route("GET", "/auth/v1/health", httpx.Response(200, json={"name": "GoTrue"}))
    app.state.backend = backend

    body = TestClient(app).get("/api/health/detailed").json()

    assert body == {"status": "healthy", "services": {"api": "healthy", "supabase": "healthy"}}
    assert fake.last.url.path == "/auth/v1/health"


def test_detailed_health_endpoint_unreachable(backend, fake):
    fake.route("GET", "/auth/v1/health", httpx.ConnectError("connection refused"))
    app.state.backend = backend

    body = TestClient(app).get("/api/health/detailed").json()

    assert body["status"] == "degraded"
    assert body["services"]["supabase"] == "error: connection refused"
