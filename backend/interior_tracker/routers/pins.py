"""
Interior Tracker - Pins Router
"""
import logging

from fastapi import APIRouter, Depends

from interior_tracker.backends.base import Backend
from interior_tracker.schemas.pin import MetadataEntry, Pin
from interior_tracker.services.auth import get_session_backend
from interior_tracker.services.pins import add_pin_metadata, get_pin

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/pins", tags=["pins"])


@router.get("/{pin_id}", response_model=Pin)
async def get_single_pin(
    pin_id: str,
    backend: Backend = Depends(get_session_backend)
):
    """Get a single pin."""
    return await get_pin(backend.records, pin_id)


@router.patch("/{pin_id}/metadata", response_model=Pin)
async def add_metadata(
    entry: MetadataEntry,
    pin_id: str,
    backend: Backend = Depends(get_session_backend)
):
    """
    Set one metadata entry on a pin.

    An existing value under the same key (exact, case-sensitive match)
    is overwritten; the full mapping is stored.
    """
    pin = await get_pin(backend.records, pin_id)
    return await add_pin_metadata(backend.records, pin, entry.key, entry.value)
