"""
Interior Tracker - Image Pydantic Schemas
"""
from pydantic import BaseModel, ConfigDict
from datetime import datetime


class Image(BaseModel):
    """An uploaded room photo belonging to one project."""
    id: str
    project_id: str
    url: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
