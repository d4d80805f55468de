"""
Interior Tracker - Database Models (local provider)
"""
from interior_tracker.models.user import User
from interior_tracker.models.project import Project
from interior_tracker.models.image import Image
from interior_tracker.models.pin import Pin

__all__ = [
    "User",
    "Project",
    "Image",
    "Pin",
]
