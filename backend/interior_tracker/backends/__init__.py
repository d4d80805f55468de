"""
Interior Tracker - Backend Providers
"""
import logging

from interior_tracker.backends.base import Backend, BlobStore, RecordStore, SessionProvider
from interior_tracker.config import Settings

logger = logging.getLogger(__name__)


def create_backend(settings: Settings) -> Backend:
    """Build the capability set selected by `settings.backend`."""
    if settings.backend == "supabase":
        from interior_tracker.backends.supabase import create_supabase_backend

        logger.info(f"Using Supabase backend at {settings.supabase_url}")
        return create_supabase_backend(
            settings.supabase_url,
            settings.supabase_anon_key,
            settings.storage_bucket,
            timeout=settings.http_timeout,
        )

    if settings.backend == "local":
        from interior_tracker.backends.local import create_local_backend
        from interior_tracker.database import async_session_maker

        logger.info(f"Using local backend (storage: {settings.storage_path})")
        return create_local_backend(
            async_session_maker,
            settings.storage_path,
            settings.storage_bucket,
            settings.jwt_secret_key,
            settings.jwt_expire_minutes,
        )

    raise ValueError(f"Unknown backend '{settings.backend}', expected 'local' or 'supabase'")


__all__ = ["Backend", "BlobStore", "RecordStore", "SessionProvider", "create_backend"]
