"""
Image Registry tests
"""
import re

import pytest

from interior_tracker.errors import RemoteServiceError, ValidationFailed
from interior_tracker.services.images import ImageFile, ImageRegistry, storage_filename, storage_path
from interior_tracker.services.projects import ProjectRegistry
from conftest import BUCKET, RecordingStore

JPEG = b"\xff\xd8\xff\xe0fake-jpeg-bytes"


@pytest.mark.parametrize("original,suffix", [
    ("kitchen.jpg", ".jpg"),
    ("Living Room.PNG", ".PNG"),
    ("archive.tar.gz", ".gz"),
    ("C:\\Users\\me\\bath.heic", ".heic"),
    ("noextension", ""),
    (".jpg", ".jpg"),
    ("photos/.hidden.png", ".png"),
    ("draft.", "."),
    ("my.folder/scan", ""),
])
def test_storage_filename_keeps_extension(original, suffix):
    name = storage_filename(original)
    assert re.fullmatch(r"[0-9a-f]{32}" + re.escape(suffix), name)


def test_storage_filename_is_unique():
    names = {storage_filename("kitchen.jpg") for _ in range(200)}
    assert len(names) == 200


def test_storage_path_under_project():
    path = storage_path("project-1", "kitchen.jpg")
    folder, name = path.split("/")
    assert folder == "project-1"
    assert name.endswith(".jpg")


@pytest.fixture
async def project(backend):
    return await ProjectRegistry(backend.records, owner_id="owner-1").create_project("Lakeview Remodel")


async def test_upload_image(backend, storage_dir, project):
    registry = ImageRegistry(backend.records, backend.blobs)

    image = await registry.upload_image(project.id, ImageFile("kitchen.jpg", JPEG, "image/jpeg"))

    assert image.project_id == project.id
    assert re.fullmatch(rf"/storage/{BUCKET}/{project.id}/[0-9a-f]{{32}}\.jpg", image.url)

    stored = storage_dir / BUCKET / image.url.split(f"/storage/{BUCKET}/", 1)[1]
    assert stored.read_bytes() == JPEG


async def test_no_file_is_a_noop(backend, storage_dir, project):
    recording = RecordingStore(backend.records)
    registry = ImageRegistry(recording, backend.blobs)

    assert await registry.upload_image(project.id, None) is None
    assert await registry.upload_image(project.id, ImageFile(filename="")) is None

    assert recording.calls == []
    assert not (storage_dir / BUCKET).exists()


async def test_list_images_newest_first(backend, project):
    registry = ImageRegistry(backend.records, backend.blobs)
    first = await registry.upload_image(project.id, ImageFile("a.jpg", JPEG))
    second = await registry.upload_image(project.id, ImageFile("b.jpg", JPEG))

    images = await registry.list_images(project.id)

    assert [i.id for i in images] == [second.id, first.id]


async def test_images_scoped_to_project(backend, project):
    other = await ProjectRegistry(backend.records).create_project("Elsewhere")
    registry = ImageRegistry(backend.records, backend.blobs)
    await registry.upload_image(other.id, ImageFile("a.jpg", JPEG))

    assert await registry.list_images(project.id) == []


async def test_failed_insert_leaves_orphan_blob(backend, storage_dir, project):
    recording = RecordingStore(backend.records, fail_on={("insert", "images")})
    registry = ImageRegistry(recording, backend.blobs)

    with pytest.raises(RemoteServiceError, match="insert on images failed"):
        await registry.upload_image(project.id, ImageFile("kitchen.jpg", JPEG))

    orphans = list((storage_dir / BUCKET / project.id).iterdir())
    assert len(orphans) == 1
    assert orphans[0].suffix == ".jpg"
    assert await ImageRegistry(backend.records, backend.blobs).list_images(project.id) == []


async def test_oversized_upload_rejected(backend, storage_dir, project):
    registry = ImageRegistry(backend.records, backend.blobs, max_upload_bytes=8)

    with pytest.raises(ValidationFailed, match="File too large"):
        await registry.upload_image(project.id, ImageFile("kitchen.jpg", JPEG))

    assert not (storage_dir / BUCKET).exists()


async def test_get_missing_image(backend):
    with pytest.raises(RemoteServiceError) as exc_info:
        await ImageRegistry(backend.records, backend.blobs).get_image("missing")
    assert exc_info.value.status_code == 404


async def test_blob_store_refuses_existing_path(backend):
    await backend.blobs.upload("p/one.jpg", JPEG)

    with pytest.raises(RemoteServiceError, match="already exists"):
        await backend.blobs.upload("p/one.jpg", JPEG)


async def test_blob_store_refuses_traversal(backend):
    with pytest.raises(RemoteServiceError, match="Invalid object path"):
        await backend.blobs.upload("../outside.jpg", JPEG)
