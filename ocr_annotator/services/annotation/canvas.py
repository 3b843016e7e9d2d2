"""
Annotation Canvas - Streamlit component for drawing rectangles on page images

The frontend renders the image and rectangles at the current zoom and
reports raw pointer events in canvas (screen) coordinates. All gesture
logic stays in InteractionController.

Frontend contract (frontend/annotation_canvas, dev server on port 5174):

Args sent to the frontend:
    imageUrl: PNG data URL of the page image
    width, height: Canvas size in screen pixels (image size * scale)
    rects: [{id, x, y, w, h, isOcrRunning}] in screen pixels, creation order
    draftRect: Rubber-band rectangle of a draw in progress (same shape) or null
    selectedRectId: Rectangle to draw with corner handles, or null
    handleSize: Handle size in screen pixels

Value returned by the frontend (Streamlit.setComponentValue):
    events: [{type, x, y}] with type one of "down", "move", "up", "leave",
        x/y relative to the canvas top-left, in the order they happened
    eventTimestamp: New unique value for every batch; a batch carrying an
        already-seen timestamp is ignored

The frontend must not hit-test, move, or resize anything itself.
"""
import os
import streamlit.components.v1 as components
from typing import Optional, List, Dict, Any, Tuple
from PIL import Image
import base64
from io import BytesIO

from ocr_annotator import config
from .interaction import PointerEvent, PointerEventType
from .models import Rectangle, Point
from .geometry import to_screen_space

# Declare the custom component
_RELEASE = config.ANNOTATION_CANVAS_RELEASE_MODE

if not _RELEASE:
    _annotation_canvas = components.declare_component(
        "annotation_canvas",
        url="http://localhost:5174",  # Vite dev server
    )
else:
    parent_dir = os.path.dirname(os.path.abspath(__file__))
    build_dir = os.path.join(parent_dir, "../../../frontend/annotation_canvas/build")
    _annotation_canvas = components.declare_component(
        "annotation_canvas",
        path=build_dir
    )


def image_to_base64(image: Image.Image) -> str:
    """
    Convert PIL Image to base64 string

    Args:
        image: PIL Image object

    Returns:
        Base64-encoded data URL string
    """
    buffered = BytesIO()
    image.save(buffered, format="PNG")
    img_str = base64.b64encode(buffered.getvalue()).decode()
    return f"data:image/png;base64,{img_str}"


def rect_to_dict(rect: Rectangle, scale: float = 1.0) -> Dict[str, Any]:
    """Convert Rectangle to screen-space dict format for JS component"""
    origin = to_screen_space(Point(rect.x, rect.y), scale=scale)
    return {
        "id": rect.id,
        "x": origin.x,
        "y": origin.y,
        "w": rect.w * scale,
        "h": rect.h * scale,
        "isOcrRunning": rect.is_ocr_running,
    }


def annotation_canvas(
    image: Image.Image,
    rects: List[Rectangle],
    scale: float = 1.0,
    selected_rect_id: Optional[str] = None,
    draft_rect: Optional[Rectangle] = None,
    key: Optional[str] = None,
) -> Optional[Dict[str, Any]]:
    """
    Display interactive annotation canvas

    Args:
        image: PIL Image object to display
        rects: Committed rectangles of the page
        scale: Zoom factor
        selected_rect_id: ID of currently selected rectangle (or None)
        draft_rect: Rubber-band rectangle of a draw in progress
        key: Streamlit component key

    Returns:
        Dict with:
        - events: List of {type, x, y} pointer events in canvas coordinates
        - eventTimestamp: Identifier of the event batch
    """
    # Convert image to base64 data URL
    image_url = image_to_base64(image)

    component_value = _annotation_canvas(
        imageUrl=image_url,
        width=int(image.width * scale),
        height=int(image.height * scale),
        rects=[rect_to_dict(r, scale) for r in rects],
        draftRect=rect_to_dict(draft_rect, scale) if draft_rect is not None else None,
        selectedRectId=selected_rect_id,
        handleSize=config.HANDLE_SIZE,
        key=key,
        default=None,
    )

    return component_value


def parse_canvas_events(result: Optional[Dict[str, Any]]) -> Tuple[List[PointerEvent], Optional[Any]]:
    """
    Parse the result from annotation_canvas component

    Args:
        result: Raw result dict from component

    Returns:
        Tuple of (events: List[PointerEvent], event_timestamp)
    """
    if result is None:
        return [], None

    events = [
        PointerEvent(
            type=PointerEventType(e["type"]),
            x=float(e.get("x", 0.0)),
            y=float(e.get("y", 0.0)),
        )
        for e in result.get("events", [])
    ]
    return events, result.get("eventTimestamp")
