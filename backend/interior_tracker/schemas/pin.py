"""
Interior Tracker - Pin Pydantic Schemas
Positions are fractions of the rendered image size, so markers survive rescaling.
"""
from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import Dict


class PinCreate(BaseModel):
    """Schema for placing a pin at an already normalized position."""
    x: float = Field(..., ge=0.0, le=1.0, description="Horizontal offset as a fraction of width")
    y: float = Field(..., ge=0.0, le=1.0, description="Vertical offset as a fraction of height")


class PinPlacement(BaseModel):
    """A click over the displayed image, in viewport pixels."""
    click_x: float
    click_y: float
    image_left: float
    image_top: float
    image_width: float
    image_height: float


class MetadataEntry(BaseModel):
    """A single key/value pair merged into a pin's metadata."""
    key: str = Field(..., min_length=1)
    value: str = Field(..., min_length=1)


class Pin(BaseModel):
    """A stored pin."""
    id: str
    image_id: str
    x: float = Field(..., ge=0.0, le=1.0)
    y: float = Field(..., ge=0.0, le=1.0)
    metadata: Dict[str, str] = Field(default_factory=dict)
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
