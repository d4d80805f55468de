"""
Interior Tracker - Project Pydantic Schemas
"""
from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import List, Optional


class ProjectBase(BaseModel):
    """Base schema for Project."""
    name: str = Field(..., min_length=1, max_length=255, description="Project name")
    description: Optional[str] = Field(default=None, description="Optional description")
    floors: int = Field(default=1, ge=1, description="Number of floors, fixed at creation")


class ProjectCreate(ProjectBase):
    """Schema for creating a new project."""
    pass


class Project(ProjectBase):
    """A stored project."""
    id: str
    user_id: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @property
    def floor_labels(self) -> List[str]:
        """Floors are derived from the count; there are no floor records."""
        return [f"Floor {number}" for number in range(1, self.floors + 1)]
