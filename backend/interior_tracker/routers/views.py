"""
Interior Tracker - Views Router
Server-rendered pages: /auth, / (projects), /project/{id}, /image/{id}

Every form posts, reports the outcome as a toast and redirects back to the
page it came from, which fetches its data again on load.
"""
import logging
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import RedirectResponse
from fastapi.templating import Jinja2Templates
from starlette.datastructures import UploadFile

from interior_tracker.backends.base import Backend
from interior_tracker.config import get_settings
from interior_tracker.errors import TrackerError
from interior_tracker.schemas.auth import AuthSession
from interior_tracker.schemas.pin import PinPlacement
from interior_tracker.services.auth import (
    SessionGate,
    clear_session,
    get_session_gate,
    get_view_backend,
    load_session,
    require_view_session,
    store_session,
)
from interior_tracker.services.images import ImageFile, ImageRegistry
from interior_tracker.services.notification import Notifier, pop_notifications
from interior_tracker.services.pins import PinAnnotator, marker_style
from interior_tracker.services.projects import ProjectRegistry

logger = logging.getLogger(__name__)
settings = get_settings()

router = APIRouter(include_in_schema=False)

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent / "templates"))

# Cookie-session key: state of the one image view with an open pin form
PIN_VIEW_KEY = "pin_view"


def render(request: Request, name: str, **context):
    context["notifications"] = pop_notifications(request)
    context["current_session"] = load_session(request)
    context["app_name"] = settings.app_name
    return templates.TemplateResponse(request, name, context)


def redirect(url: str) -> RedirectResponse:
    return RedirectResponse(url, status_code=303)


# ============================================================
# Session Gate
# ============================================================

@router.get("/auth")
async def auth_page(request: Request, gate: SessionGate = Depends(get_session_gate)):
    if gate.is_authenticated():
        return redirect("/")
    return render(request, "auth.html")


@router.post("/auth/sign-in")
async def sign_in(
    request: Request,
    email: str = Form(...),
    password: str = Form(...),
    gate: SessionGate = Depends(get_session_gate)
):
    try:
        session = await gate.sign_in(email, password)
    except TrackerError as e:
        Notifier(request).error(e.message)
        return redirect("/auth")

    store_session(request, session)
    return redirect("/")


@router.post("/auth/sign-up")
async def sign_up(
    request: Request,
    email: str = Form(...),
    password: str = Form(...),
    gate: SessionGate = Depends(get_session_gate)
):
    try:
        message = await gate.sign_up(email, password)
    except TrackerError as e:
        Notifier(request).error(e.message)
    else:
        Notifier(request).success(message)
    return redirect("/auth")


@router.post("/auth/sign-out")
async def sign_out(request: Request, gate: SessionGate = Depends(get_session_gate)):
    try:
        await gate.sign_out()
    except TrackerError as e:
        Notifier(request).error(e.message)
        return redirect("/")

    clear_session(request)
    request.session.pop(PIN_VIEW_KEY, None)
    return redirect("/auth")


# ============================================================
# Projects
# ============================================================

@router.get("/")
async def projects_page(
    request: Request,
    current_session: AuthSession = Depends(require_view_session),
    backend: Backend = Depends(get_view_backend)
):
    registry = ProjectRegistry(backend.records, owner_id=current_session.user_id)
    try:
        await registry.list_projects()
    except TrackerError as e:
        Notifier(request).error(e.message)

    return render(request, "projects.html", projects=registry.projects)


@router.post("/projects")
async def create_project(
    request: Request,
    name: str = Form(""),
    description: Optional[str] = Form(None),
    floors: str = Form("1"),
    current_session: AuthSession = Depends(require_view_session),
    backend: Backend = Depends(get_view_backend)
):
    registry = ProjectRegistry(backend.records, owner_id=current_session.user_id)
    try:
        await registry.create_project(name, description, floors)
    except TrackerError as e:
        Notifier(request).error(e.message)
    else:
        Notifier(request).success("Project created successfully!")
    return redirect("/")


@router.get("/project/{project_id}")
async def project_page(
    request: Request,
    project_id: str,
    backend: Backend = Depends(get_view_backend)
):
    project = None
    images = []
    try:
        project = await ProjectRegistry(backend.records).get_project(project_id)
        images = await ImageRegistry(backend.records, backend.blobs).list_images(project_id)
    except TrackerError as e:
        Notifier(request).error(e.message)

    return render(request, "project.html", project=project, images=images)


@router.post("/project/{project_id}/images")
async def upload_image(
    request: Request,
    project_id: str,
    backend: Backend = Depends(get_view_backend)
):
    form = await request.form()
    upload = form.get("file")

    image_file = None
    if isinstance(upload, UploadFile) and upload.filename:
        image_file = ImageFile(
            filename=upload.filename,
            content=await upload.read(),
            content_type=upload.content_type
        )

    registry = ImageRegistry(backend.records, backend.blobs, settings.max_upload_bytes)
    try:
        image = await registry.upload_image(project_id, image_file)
    except TrackerError as e:
        Notifier(request).error(e.message)
    else:
        if image is not None:
            Notifier(request).success("Image uploaded successfully!")

    return redirect(f"/project/{project_id}")


# ============================================================
# Pin Annotator
# ============================================================

def save_view(request: Request, annotator: PinAnnotator) -> None:
    """Keep only the latest open form; an idle view stores nothing."""
    if not annotator.form_open:
        request.session.pop(PIN_VIEW_KEY, None)
        return
    request.session[PIN_VIEW_KEY] = {"image_id": annotator.image_id, **annotator.export_state()}


def saved_view(request: Request, image_id: str) -> Optional[dict]:
    view = request.session.get(PIN_VIEW_KEY)
    if not view or view.get("image_id") != image_id:
        return None
    return view


async def open_annotator(request: Request, backend: Backend, image_id: str) -> PinAnnotator:
    """Load the image view and reapply the state the browser left it in."""
    annotator = PinAnnotator(backend.records, image_id)
    await annotator.load()
    annotator.restore_state(saved_view(request, image_id))
    return annotator


@router.get("/image/{image_id}")
async def image_page(
    request: Request,
    image_id: str,
    backend: Backend = Depends(get_view_backend)
):
    annotator = PinAnnotator(backend.records, image_id)
    try:
        annotator = await open_annotator(request, backend, image_id)
    except TrackerError as e:
        Notifier(request).error(e.message)

    return render(
        request,
        "image.html",
        annotator=annotator,
        image=annotator.image,
        marker_style=marker_style
    )


@router.post("/image/{image_id}/pins")
async def place_pin(
    request: Request,
    image_id: str,
    click_x: float = Form(...),
    click_y: float = Form(...),
    image_left: float = Form(...),
    image_top: float = Form(...),
    image_width: float = Form(...),
    image_height: float = Form(...),
    backend: Backend = Depends(get_view_backend)
):
    placement = PinPlacement(
        click_x=click_x,
        click_y=click_y,
        image_left=image_left,
        image_top=image_top,
        image_width=image_width,
        image_height=image_height,
    )
    try:
        annotator = await open_annotator(request, backend, image_id)
        await annotator.place_pin(placement)
    except TrackerError as e:
        Notifier(request).error(e.message)
    else:
        save_view(request, annotator)

    return redirect(f"/image/{image_id}")


@router.post("/image/{image_id}/pins/{pin_id}/select")
async def select_pin(
    request: Request,
    image_id: str,
    pin_id: str,
    backend: Backend = Depends(get_view_backend)
):
    try:
        annotator = await open_annotator(request, backend, image_id)
        annotator.select_pin(pin_id)
    except TrackerError as e:
        Notifier(request).error(e.message)
    else:
        save_view(request, annotator)

    return redirect(f"/image/{image_id}")


@router.post("/image/{image_id}/metadata")
async def add_metadata(
    request: Request,
    image_id: str,
    key: str = Form(""),
    value: str = Form(""),
    backend: Backend = Depends(get_view_backend)
):
    try:
        annotator = await open_annotator(request, backend, image_id)
        await annotator.add_metadata(key, value)
    except TrackerError as e:
        Notifier(request).error(e.message)
    else:
        Notifier(request).success("Metadata added successfully!")

    return redirect(f"/image/{image_id}")


@router.post("/image/{image_id}/close")
async def close_pin_form(
    request: Request,
    image_id: str,
    current_session: AuthSession = Depends(require_view_session)
):
    if saved_view(request, image_id) is not None:
        request.session.pop(PIN_VIEW_KEY, None)
    return redirect(f"/image/{image_id}")
