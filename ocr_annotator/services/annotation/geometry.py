"""
Coordinate mapping and hit testing

Screen space is the pixel grid of the rendering surface (affected by zoom);
image space is the grid of the source image. Every gesture is evaluated in
image space so that behavior does not depend on the zoom level.
"""
import math
from typing import Dict, Iterable, Optional, Tuple

from ocr_annotator import config
from .models import HANDLE_ORDER, Handle, Point, Rectangle


ORIGIN = Point(0.0, 0.0)


def clamp_scale(
    scale: float,
    min_scale: float = config.MIN_SCALE,
    max_scale: float = config.MAX_SCALE,
) -> float:
    """Clamp a zoom factor to [min_scale, max_scale]"""
    return min(max(min_scale, scale), max_scale)


def step_scale(scale: float, step: float = config.ZOOM_STEP) -> float:
    """Apply a zoom increment (negative to zoom out) and clamp the result"""
    return clamp_scale(scale + step)


def fit_scale(image_width: int, fit_width: int = config.FIT_WIDTH) -> float:
    """
    Initial zoom for a freshly loaded page

    Pages wider than fit_width are shrunk to fit it; others show at the
    default scale.

    Args:
        image_width: Image width in pixels
        fit_width: Target display width in screen pixels

    Returns:
        Zoom factor within the allowed range
    """
    if image_width and image_width > fit_width:
        return clamp_scale(round(fit_width / image_width, 2))
    return config.DEFAULT_SCALE


def format_scale(scale: float) -> str:
    """Zoom readout as an integer percentage"""
    return f"{round(scale * 100)}%"


def to_image_space(screen_point: Point, surface_origin: Point = ORIGIN, scale: float = 1.0) -> Point:
    """Map a screen-space point to image space"""
    return Point(
        (screen_point.x - surface_origin.x) / scale,
        (screen_point.y - surface_origin.y) / scale,
    )


def to_screen_space(image_point: Point, surface_origin: Point = ORIGIN, scale: float = 1.0) -> Point:
    """Map an image-space point to screen space"""
    return Point(
        image_point.x * scale + surface_origin.x,
        image_point.y * scale + surface_origin.y,
    )


def handle_points(rect: Rectangle) -> Dict[Handle, Point]:
    """Corner positions of a rectangle's handles, in hit-test order"""
    corners = {
        Handle.TOP_LEFT: Point(rect.x, rect.y),
        Handle.TOP_RIGHT: Point(rect.right, rect.y),
        Handle.BOTTOM_LEFT: Point(rect.x, rect.bottom),
        Handle.BOTTOM_RIGHT: Point(rect.right, rect.bottom),
    }
    return {handle: corners[handle] for handle in HANDLE_ORDER}


def hit_handle(
    point: Point,
    rect: Rectangle,
    scale: float = 1.0,
    handle_size: float = config.HANDLE_SIZE,
) -> Optional[Handle]:
    """
    Find the resize handle under a point

    The touch target is handle_size screen pixels, so in image space it
    shrinks as the zoom grows. Handles are tried in the order tl, tr, bl, br
    and the first match wins.

    Args:
        point: Image-space point
        rect: The selected rectangle
        scale: Current zoom factor
        handle_size: Touch target in screen pixels

    Returns:
        Matching Handle or None
    """
    threshold = handle_size / scale
    for handle, corner in handle_points(rect).items():
        if abs(point.x - corner.x) <= threshold and abs(point.y - corner.y) <= threshold:
            return handle
    return None


def contains(rect: Rectangle, point: Point) -> bool:
    """Whether a point lies in the closed rectangle"""
    return rect.x <= point.x <= rect.right and rect.y <= point.y <= rect.bottom


def topmost_rect_at(point: Point, rects: Iterable[Rectangle]) -> Optional[Rectangle]:
    """Most recently created rectangle containing the point"""
    for rect in reversed(list(rects)):
        if contains(rect, point):
            return rect
    return None


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up"""
    return int(math.floor(value + 0.5))


def crop_box(rect: Rectangle) -> Tuple[int, int, int, int]:
    """Integer pixel box (left, top, right, bottom) covering a rectangle"""
    return (
        round_half_up(rect.x),
        round_half_up(rect.y),
        round_half_up(rect.right),
        round_half_up(rect.bottom),
    )
