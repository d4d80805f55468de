"""
Interior Tracker - Projects Router
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Response, UploadFile, status

from interior_tracker.backends.base import Backend
from interior_tracker.config import get_settings
from interior_tracker.schemas.auth import AuthSession
from interior_tracker.schemas.image import Image
from interior_tracker.schemas.project import Project, ProjectCreate
from interior_tracker.services.auth import get_current_session_required, get_session_backend
from interior_tracker.services.images import ImageFile, ImageRegistry
from interior_tracker.services.projects import ProjectRegistry

logger = logging.getLogger(__name__)
settings = get_settings()

router = APIRouter(prefix="/projects", tags=["projects"])


async def read_upload(upload: Optional[UploadFile]) -> Optional[ImageFile]:
    """Turn a multipart upload into an ImageFile; nothing selected gives None."""
    if upload is None or not upload.filename:
        return None
    content = await upload.read()
    return ImageFile(filename=upload.filename, content=content, content_type=upload.content_type)


@router.get("/", response_model=List[Project])
async def list_projects(
    current_session: AuthSession = Depends(get_current_session_required),
    backend: Backend = Depends(get_session_backend)
):
    """List the caller's projects, newest first."""
    registry = ProjectRegistry(backend.records, owner_id=current_session.user_id)
    return await registry.list_projects()


@router.post("/", response_model=Project, status_code=status.HTTP_201_CREATED)
async def create_project(
    data: ProjectCreate,
    current_session: AuthSession = Depends(get_current_session_required),
    backend: Backend = Depends(get_session_backend)
):
    """
    Create a project.

    - **name**: Project name (required)
    - **description**: Optional description
    - **floors**: Number of floors, at least 1; cannot change later
    """
    registry = ProjectRegistry(backend.records, owner_id=current_session.user_id)
    return await registry.create_project(data.name, data.description, data.floors)


@router.get("/{project_id}", response_model=Project)
async def get_project(
    project_id: str,
    backend: Backend = Depends(get_session_backend)
):
    """Get a single project."""
    return await ProjectRegistry(backend.records).get_project(project_id)


@router.get("/{project_id}/images", response_model=List[Image])
async def list_project_images(
    project_id: str,
    backend: Backend = Depends(get_session_backend)
):
    """List a project's images, newest first."""
    registry = ImageRegistry(backend.records, backend.blobs)
    return await registry.list_images(project_id)


@router.post(
    "/{project_id}/images",
    response_model=Image,
    status_code=status.HTTP_201_CREATED,
    responses={204: {"description": "No file selected, nothing uploaded"}}
)
async def upload_project_image(
    project_id: str,
    file: Optional[UploadFile] = File(None),
    backend: Backend = Depends(get_session_backend)
):
    """
    Upload a room photo.

    The file is stored first and the image row inserted after; a failed
    insert leaves the stored file in place.
    """
    registry = ImageRegistry(backend.records, backend.blobs, settings.max_upload_bytes)
    image = await registry.upload_image(project_id, await read_upload(file))

    if image is None:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    return image
