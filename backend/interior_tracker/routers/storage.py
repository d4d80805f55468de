"""
Interior Tracker - Storage Router
Serves blobs written by the local provider (the hosted backend serves its own)
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import FileResponse

from interior_tracker.backends.base import Backend
from interior_tracker.errors import RemoteServiceError
from interior_tracker.services.auth import get_backend

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/storage", tags=["storage"])


@router.get("/{bucket}/{path:path}")
async def get_blob(
    bucket: str,
    path: str,
    backend: Backend = Depends(get_backend)
):
    """Serve an uploaded image file."""
    blobs = backend.blobs
    if not hasattr(blobs, "resolve") or getattr(blobs, "bucket", None) != bucket:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Image not found")

    try:
        file_path = blobs.resolve(path)
    except RemoteServiceError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Image not found")

    if not file_path.is_file():
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Image not found"
        )

    return FileResponse(file_path)
