"""
Pytest configuration

Each test gets its own SQLite database and storage directory, wired into
the local provider.
"""
from typing import Any, Dict, List, Optional, Set, Tuple

import pytest
from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import NullPool

from interior_tracker import models  # noqa: F401
from interior_tracker.backends.local import create_local_backend
from interior_tracker.database import Base, build_session_maker
from interior_tracker.errors import RemoteServiceError

BUCKET = "interior-images"


@pytest.fixture
def engine(tmp_path):
    """SQLite engine without pooling, so no connection outlives its event loop."""
    db_path = tmp_path / "test.db"

    # Tables are created through a plain sync engine; no event loop is involved
    sync_engine = create_engine(f"sqlite:///{db_path}")
    Base.metadata.create_all(sync_engine)
    sync_engine.dispose()

    return create_async_engine(f"sqlite+aiosqlite:///{db_path}", poolclass=NullPool)


@pytest.fixture
def storage_dir(tmp_path):
    path = tmp_path / "storage"
    path.mkdir()
    return path


@pytest.fixture
def backend(engine, storage_dir):
    return create_local_backend(
        build_session_maker(engine),
        str(storage_dir),
        BUCKET,
        secret_key="test-secret",
        expire_minutes=60,
    )


class RecordingStore:
    """Wraps a RecordStore, counts calls and can fail chosen operations."""

    def __init__(self, inner, fail_on: Optional[Set[Tuple[str, str]]] = None):
        self.inner = inner
        self.fail_on = fail_on or set()
        self.calls: List[Tuple[str, str]] = []

    def _check(self, operation: str, table: str) -> None:
        self.calls.append((operation, table))
        if (operation, table) in self.fail_on:
            raise RemoteServiceError(f"{operation} on {table} failed")

    async def insert(self, table: str, record: Dict[str, Any]) -> Dict[str, Any]:
        self._check("insert", table)
        return await self.inner.insert(table, record)

    async def select(self, table, filters=None, order_by=None, descending=False):
        self._check("select", table)
        return await self.inner.select(table, filters, order_by, descending)

    async def update(self, table: str, record_id: str, changes: Dict[str, Any]) -> None:
        self._check("update", table)
        await self.inner.update(table, record_id, changes)

    def count(self, operation: str, table: str) -> int:
        return self.calls.count((operation, table))


@pytest.fixture
def recording(backend):
    return RecordingStore(backend.records)
