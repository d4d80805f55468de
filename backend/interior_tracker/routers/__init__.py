"""
Interior Tracker - API Routers
"""
from interior_tracker.routers.auth import router as auth_router
from interior_tracker.routers.health import router as health_router
from interior_tracker.routers.images import router as images_router
from interior_tracker.routers.pins import router as pins_router
from interior_tracker.routers.projects import router as projects_router
from interior_tracker.routers.storage import router as storage_router
from interior_tracker.routers.views import router as views_router

__all__ = [
    "auth_router",
    "health_router",
    "images_router",
    "pins_router",
    "projects_router",
    "storage_router",
    "views_router",
]
