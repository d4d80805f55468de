"""
Interior Tracker - Supabase Provider
Records (PostgREST), blobs (Storage) and sessions (GoTrue) over HTTP

API Reference:
- POST /auth/v1/signup, POST /auth/v1/token?grant_type=password
- POST /auth/v1/logout, GET /auth/v1/user
- GET|POST|PATCH /rest/v1/{table}
- POST /storage/v1/object/{bucket}/{path}
- GET  /storage/v1/object/public/{bucket}/{path} (public URL)
"""
import time
import logging
from typing import Any, Dict, List, Optional, Tuple, Type

import httpx
from jose import JWTError, jwt

from interior_tracker.backends.base import Backend, Record
from interior_tracker.errors import AuthenticationFailed, RemoteServiceError
from interior_tracker.schemas.auth import AuthSession

logger = logging.getLogger(__name__)


def error_message(response: httpx.Response) -> str:
    """Pull the human-readable message out of an error response."""
    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict):
        for key in ("msg", "message", "error_description", "error"):
            if body.get(key):
                return str(body[key])

    text = response.text.strip()
    return text or f"Request failed with status {response.status_code}"


class SupabaseClient:
    """
    Thin HTTP client for one Supabase project.

    Requests carry the anon key as `apikey` and, once bound to a session,
    the user's access token as Bearer so row-level security applies.
    """

    def __init__(
        self,
        url: str,
        anon_key: str,
        access_token: Optional[str] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.url = url.rstrip("/")
        self.anon_key = anon_key
        self.access_token = access_token
        self.timeout = timeout
        self.transport = transport

    def with_token(self, access_token: str) -> "SupabaseClient":
        return SupabaseClient(
            self.url,
            self.anon_key,
            access_token=access_token,
            timeout=self.timeout,
            transport=self.transport,
        )

    def _headers(self, token: Optional[str] = None, extra: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        headers = {
            "apikey": self.anon_key,
            "Authorization": f"Bearer {token or self.access_token or self.anon_key}",
        }
        if extra:
            headers.update(extra)
        return headers

    async def request(
        self,
        method: str,
        path: str,
        *,
        token: Optional[str] = None,
        error_class: Type[RemoteServiceError] = RemoteServiceError,
        allow_status: Tuple[int, ...] = (),
        headers: Optional[Dict[str, str]] = None,
        **kwargs: Any,
    ) -> httpx.Response:
        """
        Send one request; any transport or HTTP error becomes error_class.

        Statuses listed in allow_status are returned to the caller instead.
        """
        try:
            async with httpx.AsyncClient(
                base_url=self.url,
                timeout=self.timeout,
                transport=self.transport,
            ) as client:
                response = await client.request(
                    method,
                    path,
                    headers=self._headers(token, headers),
                    **kwargs
                )
        except httpx.HTTPError as e:
            logger.error(f"Supabase request {method} {path} failed: {e}")
            raise error_class(str(e) or e.__class__.__name__) from e

        if response.status_code >= 400 and response.status_code not in allow_status:
            message = error_message(response)
            logger.warning(f"Supabase {method} {path} -> {response.status_code}: {message}")
            raise error_class(message)

        return response

    async def health(self) -> Dict[str, str]:
        """Check the auth service's health endpoint."""
        try:
            await self.request("GET", "/auth/v1/health")
        except RemoteServiceError as e:
            return {"supabase": f"error: {e.message}"}
        return {"supabase": "healthy"}


class SupabaseRecordStore:
    """RecordStore over PostgREST."""

    def __init__(self, client: SupabaseClient):
        self.client = client

    async def insert(self, table: str, record: Record) -> Record:
        response = await self.client.request(
            "POST",
            f"/rest/v1/{table}",
            json=[record],
            headers={"Prefer": "return=representation"},
        )
        rows = response.json()
        if not rows:
            raise RemoteServiceError(f"Insert into {table} returned no row")
        return rows[0]

    async def select(
        self,
        table: str,
        filters: Optional[Dict[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> List[Record]:
        params: Dict[str, str] = {"select": "*"}
        for column, value in (filters or {}).items():
            params[column] = f"eq.{value}"
        if order_by:
            params["order"] = f"{order_by}.{'desc' if descending else 'asc'}"

        response = await self.client.request("GET", f"/rest/v1/{table}", params=params)
        return response.json() or []

    async def update(self, table: str, record_id: str, changes: Record) -> None:
        await self.client.request(
            "PATCH",
            f"/rest/v1/{table}",
            params={"id": f"eq.{record_id}"},
            json=changes,
        )


class SupabaseBlobStore:
    """BlobStore over Supabase Storage, bound to one bucket."""

    def __init__(self, client: SupabaseClient, bucket: str):
        self.client = client
        self.bucket = bucket

    async def upload(self, path: str, content: bytes, content_type: Optional[str] = None) -> None:
        await self.client.request(
            "POST",
            f"/storage/v1/object/{self.bucket}/{path}",
            content=content,
            headers={
                "Content-Type": content_type or "application/octet-stream",
                "x-upsert": "false",
            },
        )

    def public_url(self, path: str) -> str:
        return f"{self.client.url}/storage/v1/object/public/{self.bucket}/{path}"


class SupabaseAuth:
    """SessionProvider over GoTrue."""

    def __init__(self, client: SupabaseClient):
        self.client = client

    async def sign_up(self, email: str, password: str) -> None:
        # With email confirmation enabled no session comes back; the user confirms first
        await self.client.request(
            "POST",
            "/auth/v1/signup",
            json={"email": email, "password": password},
        )
        logger.info(f"Sign-up requested for {email}")

    async def sign_in(self, email: str, password: str) -> AuthSession:
        response = await self.client.request(
            "POST",
            "/auth/v1/token",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
            error_class=AuthenticationFailed,
        )
        data = response.json()
        user = data.get("user") or {}

        expires_at = data.get("expires_at")
        if expires_at is None and data.get("expires_in"):
            expires_at = int(time.time()) + int(data["expires_in"])

        logger.info(f"User signed in: {email}")
        return AuthSession(
            access_token=data["access_token"],
            user_id=str(user.get("id", "")),
            email=user.get("email", email),
            expires_at=expires_at,
        )

    async def sign_out(self, session: AuthSession) -> None:
        await self.client.request("POST", "/auth/v1/logout", token=session.access_token)
        logger.info(f"User signed out: {session.email}")

    async def current_user(self, access_token: str) -> Optional[AuthSession]:
        response = await self.client.request(
            "GET",
            "/auth/v1/user",
            token=access_token,
            allow_status=(401, 403),
        )
        if response.status_code in (401, 403):
            return None

        user = response.json()
        try:
            expires_at = jwt.get_unverified_claims(access_token).get("exp")
        except JWTError:
            expires_at = None

        return AuthSession(
            access_token=access_token,
            user_id=str(user.get("id", "")),
            email=user.get("email"),
            expires_at=expires_at,
        )


def create_supabase_backend(
    url: str,
    anon_key: str,
    bucket: str,
    timeout: float = 30.0,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Backend:
    if not url or not anon_key:
        raise ValueError("supabase_url and supabase_anon_key are required for the supabase backend")

    client = SupabaseClient(url, anon_key, timeout=timeout, transport=transport)

    def bind(session: AuthSession) -> Backend:
        scoped = client.with_token(session.access_token)
        return Backend(
            name="supabase",
            records=SupabaseRecordStore(scoped),
            blobs=SupabaseBlobStore(scoped, bucket),
            auth=SupabaseAuth(scoped),
        )

    return Backend(
        name="supabase",
        records=SupabaseRecordStore(client),
        blobs=SupabaseBlobStore(client, bucket),
        auth=SupabaseAuth(client),
        binder=bind,
        health=client.health,
    )
