"""
Interior Tracker - Images Router
"""
import logging
from typing import List

from fastapi import APIRouter, Depends, status

from interior_tracker.backends.base import Backend
from interior_tracker.schemas.image import Image
from interior_tracker.schemas.pin import Pin, PinCreate
from interior_tracker.services.auth import get_session_backend
from interior_tracker.services.images import fetch_image
from interior_tracker.services.pins import create_pin, list_pins

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/images", tags=["images"])


@router.get("/{image_id}", response_model=Image)
async def get_image(
    image_id: str,
    backend: Backend = Depends(get_session_backend)
):
    """Get a single image."""
    return await fetch_image(backend.records, image_id)


@router.get("/{image_id}/pins", response_model=List[Pin])
async def get_image_pins(
    image_id: str,
    backend: Backend = Depends(get_session_backend)
):
    """List the pins placed on an image, oldest first."""
    return await list_pins(backend.records, image_id)


@router.post("/{image_id}/pins", response_model=Pin, status_code=status.HTTP_201_CREATED)
async def place_pin(
    image_id: str,
    position: PinCreate,
    backend: Backend = Depends(get_session_backend)
):
    """
    Place a pin with empty metadata.

    - **x**: Horizontal position as a fraction of the image width (0-1)
    - **y**: Vertical position as a fraction of the image height (0-1)
    """
    await fetch_image(backend.records, image_id)
    return await create_pin(backend.records, image_id, position.x, position.y)
