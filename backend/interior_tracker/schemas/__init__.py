"""
Interior Tracker - Pydantic Schemas
"""
from interior_tracker.schemas.auth import AuthSession, Credentials
from interior_tracker.schemas.image import Image
from interior_tracker.schemas.pin import MetadataEntry, Pin, PinCreate, PinPlacement
from interior_tracker.schemas.project import Project, ProjectCreate

__all__ = [
    "AuthSession",
    "Credentials",
    "Image",
    "MetadataEntry",
    "Pin",
    "PinCreate",
    "PinPlacement",
    "Project",
    "ProjectCreate",
]
