"""
Annotation Data Models

Dataclasses for representing pages, annotated rectangles, and the
interactive session that owns them.

All rectangle geometry is stored in image space (unscaled pixels of the
source image), so it is unaffected by the zoom level.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple
import uuid

from ocr_annotator import config


def new_rect_id() -> str:
    """Random short token used as a rectangle id"""
    return str(uuid.uuid4())[:8]


@dataclass
class Point:
    """2D point with x, y coordinates"""
    x: float
    y: float

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y}

    @classmethod
    def from_dict(cls, data: Dict[str, float]) -> "Point":
        return cls(x=data["x"], y=data["y"])

    def __sub__(self, other: "Point") -> "Point":
        return Point(self.x - other.x, self.y - other.y)

    def __add__(self, other: "Point") -> "Point":
        return Point(self.x + other.x, self.y + other.y)


class Handle(str, Enum):
    """Corner resize handles of a selected rectangle"""
    TOP_LEFT = "tl"
    TOP_RIGHT = "tr"
    BOTTOM_LEFT = "bl"
    BOTTOM_RIGHT = "br"

    @property
    def left(self) -> bool:
        return self in (Handle.TOP_LEFT, Handle.BOTTOM_LEFT)

    @property
    def right(self) -> bool:
        return self in (Handle.TOP_RIGHT, Handle.BOTTOM_RIGHT)

    @property
    def top(self) -> bool:
        return self in (Handle.TOP_LEFT, Handle.TOP_RIGHT)

    @property
    def bottom(self) -> bool:
        return self in (Handle.BOTTOM_LEFT, Handle.BOTTOM_RIGHT)


# Hit-test order; the first matching handle wins when thresholds overlap
HANDLE_ORDER: Tuple[Handle, ...] = (
    Handle.TOP_LEFT,
    Handle.TOP_RIGHT,
    Handle.BOTTOM_LEFT,
    Handle.BOTTOM_RIGHT,
)


class InteractionMode(str, Enum):
    """States of the pointer gesture state machine"""
    IDLE = "idle"
    DRAWING = "drawing"
    MOVING = "moving"
    RESIZING = "resizing"


@dataclass
class Rectangle:
    """
    Annotated rectangular region

    Attributes:
        id: Identifier, unique within the owning page
        x: Left edge in image space
        y: Top edge in image space
        w: Width in image space
        h: Height in image space
        text: Recognized or manually entered text
        is_ocr_running: True while a recognition request is outstanding
    """
    id: str = field(default_factory=new_rect_id)
    x: float = 0.0
    y: float = 0.0
    w: float = 0.0
    h: float = 0.0
    text: str = ""
    is_ocr_running: bool = False

    @property
    def origin(self) -> Point:
        return Point(self.x, self.y)

    @property
    def right(self) -> float:
        return self.x + self.w

    @property
    def bottom(self) -> float:
        return self.y + self.h

    def is_committable(self, min_size: float = config.MIN_RECT_SIZE) -> bool:
        """Whether both dimensions are strictly larger than min_size"""
        return self.w > min_size and self.h > min_size

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "x": self.x,
            "y": self.y,
            "w": self.w,
            "h": self.h,
            "text": self.text,
            "is_ocr_running": self.is_ocr_running,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Rectangle":
        return cls(
            id=str(data["id"]),
            x=float(data["x"]),
            y=float(data["y"]),
            w=float(data["w"]),
            h=float(data["h"]),
            text=data.get("text", ""),
            is_ocr_running=data.get("is_ocr_running", False),
        )

    @classmethod
    def from_corners(cls, start: Point, end: Point, **kwargs) -> "Rectangle":
        """Create the normalized bounding box of two opposite corners"""
        return cls(
            x=min(start.x, end.x),
            y=min(start.y, end.y),
            w=abs(end.x - start.x),
            h=abs(end.y - start.y),
            **kwargs,
        )


@dataclass
class Page:
    """
    One uploaded image and its own annotation set

    Attributes:
        id: Unique identifier assigned at upload time
        name: Display label (source file name)
        image_ref: Decoded image (a PIL Image); the page only references it
        rects: Rectangles in creation order
    """
    id: str = field(default_factory=lambda: f"page_{uuid.uuid4().hex[:6]}")
    name: str = ""
    image_ref: Any = None
    rects: List[Rectangle] = field(default_factory=list)

    @property
    def width(self) -> int:
        return getattr(self.image_ref, "width", 0)

    @property
    def height(self) -> int:
        return getattr(self.image_ref, "height", 0)

    def add_rect(self, rect: Rectangle) -> None:
        """Append a rectangle to this page"""
        if self.get_rect(rect.id) is not None:
            raise ValueError(f"Duplicate rectangle id on page {self.id}: {rect.id}")
        self.rects.append(rect)

    def remove_rect(self, rect_id: str) -> bool:
        """Remove a rectangle by ID. Returns True if found and removed."""
        for i, rect in enumerate(self.rects):
            if rect.id == rect_id:
                self.rects.pop(i)
                return True
        return False

    def get_rect(self, rect_id: str) -> Optional[Rectangle]:
        """Get a rectangle by ID"""
        for rect in self.rects:
            if rect.id == rect_id:
                return rect
        return None

    def new_rect_id(self) -> str:
        """Generate an id not yet used on this page"""
        rect_id = new_rect_id()
        while self.get_rect(rect_id) is not None:
            rect_id = new_rect_id()
        return rect_id

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "width": self.width,
            "height": self.height,
            "rects": [r.to_dict() for r in self.rects],
        }


@dataclass
class Gesture:
    """Ephemeral state of the pointer gesture in progress"""
    mode: InteractionMode = InteractionMode.IDLE
    start: Optional[Point] = None
    current: Optional[Rectangle] = None  # Rubber-band rectangle while drawing
    handle: Optional[Handle] = None
    drag_offset: Optional[Point] = None


@dataclass
class AnnotationSession:
    """
    Complete state of one annotation session

    Attributes:
        pages: Uploaded pages in upload order
        current_page_index: Index of the page being annotated
        selected_rect_id: Selected rectangle on the current page (or None)
        scale: Zoom factor shared across pages
        ocr_enabled: Whether committing a rectangle triggers recognition
        gesture: Pointer gesture in progress
    """
    pages: List[Page] = field(default_factory=list)
    current_page_index: int = 0
    selected_rect_id: Optional[str] = None
    scale: float = config.DEFAULT_SCALE
    ocr_enabled: bool = True
    gesture: Gesture = field(default_factory=Gesture)

    @property
    def current_page(self) -> Optional[Page]:
        if not self.pages:
            return None
        return self.pages[self.current_page_index]

    @property
    def rects(self) -> List[Rectangle]:
        """Rectangles of the current page"""
        page = self.current_page
        return page.rects if page is not None else []

    @property
    def selected_rect(self) -> Optional[Rectangle]:
        page = self.current_page
        if page is None or self.selected_rect_id is None:
            return None
        return page.get_rect(self.selected_rect_id)

    @property
    def total_rects(self) -> int:
        """Total number of rectangles across all pages"""
        return sum(len(page.rects) for page in self.pages)

    @property
    def labeled_rects(self) -> int:
        """Number of rectangles with text"""
        return sum(
            1 for page in self.pages
            for rect in page.rects
            if rect.text
        )
