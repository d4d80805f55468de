"""
Interior Tracker - Backend Capability Interfaces

Components only see these three narrow interfaces. Any object with the right
methods satisfies them; providers do not inherit from anything.
"""
from dataclasses import dataclass, replace
from typing import Any, Awaitable, Callable, Dict, List, Optional, Protocol

from interior_tracker.schemas.auth import AuthSession

Record = Dict[str, Any]


class RecordStore(Protocol):
    """Table-like persistence: projects, images, pins."""

    async def insert(self, table: str, record: Record) -> Record:
        """Store a record and return it with its generated id and created_at."""
        ...

    async def select(
        self,
        table: str,
        filters: Optional[Dict[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> List[Record]:
        """Return records whose columns equal every value in filters."""
        ...

    async def update(self, table: str, record_id: str, changes: Record) -> None:
        ...


class BlobStore(Protocol):
    """Binary object storage bound to one bucket."""

    async def upload(self, path: str, content: bytes, content_type: Optional[str] = None) -> None:
        ...

    def public_url(self, path: str) -> str:
        ...


class SessionProvider(Protocol):
    """Credential checks; the provider owns accounts and tokens."""

    async def sign_up(self, email: str, password: str) -> None:
        ...

    async def sign_in(self, email: str, password: str) -> AuthSession:
        ...

    async def sign_out(self, session: AuthSession) -> None:
        ...

    async def current_user(self, access_token: str) -> Optional[AuthSession]:
        """Resolve a token to its session, or None when it is not valid."""
        ...


@dataclass(frozen=True)
class Backend:
    """
    The capability set handed to components.

    `binder` produces stores acting on behalf of a signed-in session (the
    hosted backend enforces row-level security with the user's token).
    `health` checks the provider and reports one status per service.
    """
    name: str
    records: RecordStore
    blobs: BlobStore
    auth: SessionProvider
    binder: Optional[Callable[[AuthSession], "Backend"]] = None
    health: Optional[Callable[[], Awaitable[Dict[str, str]]]] = None

    def bind(self, session: AuthSession) -> "Backend":
        if self.binder is None:
            return self
        bound = self.binder(session)
        return replace(bound, binder=None, health=self.health)
