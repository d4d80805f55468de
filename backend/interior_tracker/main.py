"""
Interior Tracker - Main Application Entry Point
Projects, room photos and pinned annotations over a hosted (or local) backend
"""
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse
from starlette.middleware.sessions import SessionMiddleware

from interior_tracker.backends import create_backend
from interior_tracker.config import get_settings
from interior_tracker.database import init_db
from interior_tracker.errors import TrackerError, tracker_error_handler
from interior_tracker.routers import (
    auth_router,
    health_router,
    images_router,
    pins_router,
    projects_router,
    storage_router,
    views_router,
)
from interior_tracker.services.auth import LoginRequired

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    logger.info(f"🚀 Starting {settings.app_name}...")

    app.state.backend = create_backend(settings)

    if app.state.backend.name == "local":
        Path(settings.storage_path).mkdir(parents=True, exist_ok=True)
        await init_db()
        logger.info("✅ Local database initialized")

    yield

    # Shutdown
    logger.info(f"👋 Shutting down {settings.app_name}...")


async def login_required_handler(request: Request, exc: LoginRequired) -> RedirectResponse:
    return RedirectResponse("/auth", status_code=303)


app = FastAPI(
    title=settings.app_name,
    description="Catalogue interior-design projects: floors, room photos and pinned annotations",
    version="0.1.0",
    lifespan=lifespan
)

# CORS middleware for API clients
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure properly in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Signed cookie holding the browser's session and pending toasts
app.add_middleware(SessionMiddleware, secret_key=settings.session_secret_key)

app.add_exception_handler(TrackerError, tracker_error_handler)
app.add_exception_handler(LoginRequired, login_required_handler)

# Include routers
app.include_router(health_router, prefix="/api")
app.include_router(auth_router, prefix="/api")
app.include_router(projects_router, prefix="/api")
app.include_router(images_router, prefix="/api")
app.include_router(pins_router, prefix="/api")
app.include_router(storage_router)
app.include_router(views_router)
