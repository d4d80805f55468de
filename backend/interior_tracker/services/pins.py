"""
Interior Tracker - Pin Annotator

Pins sit at fractions of the image's rendered size, never at pixels:
a click at (px, py) over an image rendered at (w, h) is stored as
(px / w, py / h) and drawn back at (100x %, 100y %) of the container,
so it stays on the same spot at any display size that keeps the image's
aspect ratio.

Per image view the annotator is a small state machine:

    idle --click image--> pin_created --click marker--> pin_selected
      ^                        |                             |
      +---------close----------+-------------close-----------+

While a form is open, clicks on the image are ignored.
"""
import enum
import logging
from typing import Any, Dict, List, Optional, Tuple

from interior_tracker.backends.base import RecordStore
from interior_tracker.errors import InvalidViewState, NotFound, ValidationFailed
from interior_tracker.schemas.image import Image
from interior_tracker.schemas.pin import Pin, PinPlacement
from interior_tracker.services.images import fetch_image

logger = logging.getLogger(__name__)

TABLE = "pins"


class PinViewState(str, enum.Enum):
    IDLE = "idle"
    PIN_CREATED = "pin_created"
    PIN_SELECTED = "pin_selected"


def normalize_click(placement: PinPlacement) -> Tuple[float, float]:
    """Click position relative to the image's bounding box, as fractions."""
    if placement.image_width <= 0 or placement.image_height <= 0:
        raise ValidationFailed("Image has no rendered size")

    x = (placement.click_x - placement.image_left) / placement.image_width
    y = (placement.click_y - placement.image_top) / placement.image_height

    if not (0.0 <= x <= 1.0 and 0.0 <= y <= 1.0):
        raise ValidationFailed("Click is outside the image")
    return x, y


def marker_position(pin: Pin) -> Tuple[float, float]:
    """Marker offset as (left %, top %) of the image container."""
    return pin.x * 100, pin.y * 100


def marker_style(pin: Pin) -> str:
    left, top = marker_position(pin)
    return f"left: {left}%; top: {top}%;"


def merge_metadata(metadata: Dict[str, str], key: str, value: str) -> Dict[str, str]:
    """New mapping with key set to value; keys match exactly, case-sensitively."""
    if not key or not value:
        raise ValidationFailed("Both key and value are required")
    return {**metadata, key: value}


async def list_pins(records: RecordStore, image_id: str) -> List[Pin]:
    rows = await records.select(TABLE, {"image_id": image_id}, order_by="created_at")
    return [Pin.model_validate(row) for row in rows]


async def get_pin(records: RecordStore, pin_id: str) -> Pin:
    rows = await records.select(TABLE, {"id": pin_id})
    if not rows:
        raise NotFound(f"Pin with id {pin_id} not found")
    return Pin.model_validate(rows[0])


async def create_pin(records: RecordStore, image_id: str, x: float, y: float) -> Pin:
    row = await records.insert(TABLE, {"image_id": image_id, "x": x, "y": y, "metadata": {}})
    pin = Pin.model_validate(row)
    logger.info(f"Pin {pin.id} placed on image {image_id} at ({x:.4f}, {y:.4f})")
    return pin


async def add_pin_metadata(records: RecordStore, pin: Pin, key: str, value: str) -> Pin:
    """Persist the full merged mapping; returns the updated pin, leaves `pin` untouched."""
    merged = merge_metadata(pin.metadata, key, value)
    await records.update(TABLE, pin.id, {"metadata": merged})
    logger.info(f"Pin {pin.id} metadata set: {key}")
    return pin.model_copy(update={"metadata": merged})


class PinAnnotator:
    """One image view: its pins, the selected pin and whether the detail form is open."""

    def __init__(self, records: RecordStore, image_id: str):
        self.records = records
        self.image_id = image_id
        self.image: Optional[Image] = None
        self.pins: List[Pin] = []
        self.state = PinViewState.IDLE
        self.selected_pin_id: Optional[str] = None

    @property
    def form_open(self) -> bool:
        return self.state != PinViewState.IDLE

    @property
    def selected_pin(self) -> Optional[Pin]:
        if self.selected_pin_id is None:
            return None
        return next((pin for pin in self.pins if pin.id == self.selected_pin_id), None)

    async def load(self) -> None:
        """Fetch the image and its pins (on mount)."""
        self.image = await fetch_image(self.records, self.image_id)
        self.pins = await list_pins(self.records, self.image_id)

    async def place_pin(self, placement: PinPlacement) -> Optional[Pin]:
        """Click on the image. Ignored (returns None) while a form is open."""
        if self.form_open:
            logger.debug(f"Ignoring image click on {self.image_id}: pin form is open")
            return None

        x, y = normalize_click(placement)
        pin = await create_pin(self.records, self.image_id, x, y)

        self.pins = [*self.pins, pin]
        self.selected_pin_id = pin.id
        self.state = PinViewState.PIN_CREATED
        return pin

    def select_pin(self, pin_id: str) -> Pin:
        """Click on a marker; replaces whatever form was open."""
        pin = next((p for p in self.pins if p.id == pin_id), None)
        if pin is None:
            raise NotFound(f"Pin with id {pin_id} not found")

        self.selected_pin_id = pin.id
        self.state = PinViewState.PIN_SELECTED
        return pin

    async def add_metadata(self, key: str, value: str) -> Pin:
        """
        Merge key/value into the selected pin and persist the whole mapping.

        The in-memory pin changes only once the update succeeded.
        """
        pin = self.selected_pin
        if not self.form_open or pin is None:
            raise InvalidViewState("Select a pin before adding metadata")

        updated = await add_pin_metadata(self.records, pin, key, value)
        self.pins = [updated if p.id == updated.id else p for p in self.pins]
        return updated

    def close(self) -> None:
        self.state = PinViewState.IDLE
        self.selected_pin_id = None

    def export_state(self) -> Dict[str, Any]:
        return {"state": self.state.value, "selected_pin_id": self.selected_pin_id}

    def restore_state(self, data: Optional[Dict[str, Any]]) -> None:
        """Reapply a previously exported state; falls back to idle if the pin is gone."""
        self.close()
        if not data:
            return

        try:
            state = PinViewState(data.get("state", PinViewState.IDLE.value))
        except ValueError:
            return

        pin_id = data.get("selected_pin_id")
        if state == PinViewState.IDLE or not any(p.id == pin_id for p in self.pins):
            return

        self.state = state
        self.selected_pin_id = pin_id
