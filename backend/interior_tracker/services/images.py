"""
Interior Tracker - Image Registry
Room photos: blob upload first, then the database row
"""
import uuid
import logging
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import List, Optional

from interior_tracker.backends.base import BlobStore, RecordStore
from interior_tracker.errors import NotFound, ValidationFailed
from interior_tracker.schemas.image import Image

logger = logging.getLogger(__name__)

TABLE = "images"


@dataclass
class ImageFile:
    """A file picked in the browser."""
    filename: Optional[str]
    content: bytes = b""
    content_type: Optional[str] = None


def storage_filename(original: str) -> str:
    """
    Random name that keeps the original extension, e.g. kitchen.jpg -> 3f2a...c1.jpg

    The extension is everything after the last dot of the base name, so a
    dotfile such as ".jpg" keeps ".jpg"; a name without a dot gets none.
    """
    name = PurePosixPath(original.replace("\\", "/")).name
    suffix = f".{name.rsplit('.', 1)[1]}" if "." in name else ""
    return f"{uuid.uuid4().hex}{suffix}"


def storage_path(project_id: str, original: str) -> str:
    return f"{project_id}/{storage_filename(original)}"


async def fetch_image(records: RecordStore, image_id: str) -> Image:
    rows = await records.select(TABLE, {"id": image_id})
    if not rows:
        raise NotFound(f"Image with id {image_id} not found")
    return Image.model_validate(rows[0])


class ImageRegistry:
    """Upload and list the photos of a project."""

    def __init__(self, records: RecordStore, blobs: BlobStore, max_upload_bytes: Optional[int] = None):
        self.records = records
        self.blobs = blobs
        self.max_upload_bytes = max_upload_bytes

    async def list_images(self, project_id: str) -> List[Image]:
        rows = await self.records.select(
            TABLE,
            {"project_id": project_id},
            order_by="created_at",
            descending=True
        )
        return [Image.model_validate(row) for row in rows]

    async def get_image(self, image_id: str) -> Image:
        return await fetch_image(self.records, image_id)

    async def upload_image(self, project_id: str, file: Optional[ImageFile]) -> Optional[Image]:
        """
        Store the file, resolve its public URL, then insert the row.

        The steps are not transactional: if the insert fails the blob stays
        behind with no row pointing at it. No file selected returns None.
        """
        if file is None or not file.filename:
            return None

        if self.max_upload_bytes is not None and len(file.content) > self.max_upload_bytes:
            raise ValidationFailed(
                f"File too large. Maximum size: {self.max_upload_bytes // (1024 * 1024)}MB"
            )

        path = storage_path(project_id, file.filename)
        await self.blobs.upload(path, file.content, file.content_type)
        url = self.blobs.public_url(path)

        row = await self.records.insert(TABLE, {"project_id": project_id, "url": url})
        image = Image.model_validate(row)

        logger.info(f"Image uploaded for project {project_id}: {path}")
        return image
