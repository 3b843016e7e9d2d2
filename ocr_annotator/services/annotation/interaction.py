"""
Interaction State Machine

Turns pointer events into draw, move, and resize gestures:

    IDLE --down on handle of selected rect--> RESIZING
    IDLE --down inside a rect---------------> MOVING
    IDLE --down elsewhere-------------------> DRAWING
    any  --up / leave-----------------------> IDLE

Gesture state lives on the session (session.gesture) so that page
switches in the store can reset it.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ocr_annotator import config
from .geometry import hit_handle, to_image_space, topmost_rect_at, ORIGIN
from .models import Gesture, InteractionMode, Point, Rectangle
from .store import AnnotationStore

logger = logging.getLogger(__name__)


class PointerEventType(str, Enum):
    """Pointer events delivered by the rendering surface"""
    DOWN = "down"
    MOVE = "move"
    UP = "up"
    LEAVE = "leave"


@dataclass
class PointerEvent:
    """Pointer event in screen space"""
    type: PointerEventType
    x: float = 0.0
    y: float = 0.0

    @property
    def point(self) -> Point:
        return Point(self.x, self.y)


class InteractionController:
    """
    Pointer gesture state machine over an AnnotationStore

    Args:
        store: Store holding the session
        dispatcher: Optional OCRDispatcher used when a rectangle is committed
        min_size: Strict lower bound for rectangle width and height
        handle_size: Handle touch target in screen pixels
    """

    def __init__(
        self,
        store: AnnotationStore,
        dispatcher=None,
        min_size: float = config.MIN_RECT_SIZE,
        handle_size: float = config.HANDLE_SIZE,
    ):
        self.store = store
        self.dispatcher = dispatcher
        self.min_size = min_size
        self.handle_size = handle_size

    @property
    def gesture(self) -> Gesture:
        return self.store.session.gesture

    @property
    def mode(self) -> InteractionMode:
        return self.gesture.mode

    @property
    def ephemeral_rect(self) -> Optional[Rectangle]:
        """Rubber-band rectangle of a draw gesture in progress"""
        return self.gesture.current

    def _reset(self) -> None:
        self.store.session.gesture = Gesture()

    def handle_event(self, event: PointerEvent, surface_origin: Point = ORIGIN) -> Optional[Rectangle]:
        """
        Route a screen-space pointer event to the state machine

        Returns:
            The committed rectangle when the event finished a draw gesture
        """
        point = to_image_space(event.point, surface_origin, self.store.session.scale)
        event_type = PointerEventType(event.type)

        if event_type == PointerEventType.DOWN:
            self.pointer_down(point)
        elif event_type == PointerEventType.MOVE:
            self.pointer_move(point)
        else:
            return self.pointer_up()
        return None

    def pointer_down(self, point: Point) -> InteractionMode:
        """Start a gesture at an image-space point"""
        session = self.store.session
        if session.current_page is None:
            return self.mode

        # A lost up event must not leak into the next gesture
        if self.mode != InteractionMode.IDLE:
            self.pointer_up()

        selected = session.selected_rect
        if selected is not None:
            handle = hit_handle(point, selected, session.scale, self.handle_size)
            if handle is not None:
                session.gesture = Gesture(mode=InteractionMode.RESIZING, handle=handle)
                return self.mode

        target = topmost_rect_at(point, session.rects)
        if target is not None:
            self.store.select_rect(target.id)
            session.gesture = Gesture(
                mode=InteractionMode.MOVING,
                drag_offset=point - target.origin,
            )
            return self.mode

        self.store.clear_selection()
        session.gesture = Gesture(mode=InteractionMode.DRAWING, start=point)
        return self.mode

    def pointer_move(self, point: Point) -> None:
        """Continue the gesture in progress"""
        gesture = self.gesture

        if gesture.mode == InteractionMode.DRAWING:
            gesture.current = Rectangle.from_corners(gesture.start, point, id="")

        elif gesture.mode == InteractionMode.MOVING:
            rect_id = self.store.session.selected_rect_id
            origin = point - gesture.drag_offset
            if rect_id is None or not self.store.update_rect(rect_id, x=origin.x, y=origin.y):
                self._reset()

        elif gesture.mode == InteractionMode.RESIZING:
            self._resize(point)

    def _resize(self, point: Point) -> None:
        rect = self.store.session.selected_rect
        if rect is None:
            self._reset()
            return

        handle = self.gesture.handle
        patch = {}

        # Each edge is independent; an edge that would collapse stays put
        if handle.left:
            width = rect.right - point.x
            if width > self.min_size:
                patch.update(x=point.x, w=width)
        elif handle.right:
            width = point.x - rect.x
            if width > self.min_size:
                patch["w"] = width

        if handle.top:
            height = rect.bottom - point.y
            if height > self.min_size:
                patch.update(y=point.y, h=height)
        elif handle.bottom:
            height = point.y - rect.y
            if height > self.min_size:
                patch["h"] = height

        if patch:
            self.store.update_rect(rect.id, **patch)

    def pointer_up(self) -> Optional[Rectangle]:
        """
        Finish the gesture in progress

        Returns:
            The committed rectangle if a draw gesture produced one
        """
        gesture = self.gesture
        committed = None

        if gesture.mode == InteractionMode.DRAWING:
            candidate = gesture.current
            if candidate is not None and candidate.is_committable(self.min_size):
                committed = self._commit(candidate)

        self._reset()
        return committed

    pointer_leave = pointer_up

    def _commit(self, candidate: Rectangle) -> Rectangle:
        page = self.store.current_page
        rect = Rectangle(
            id=page.new_rect_id(),
            x=candidate.x,
            y=candidate.y,
            w=candidate.w,
            h=candidate.h,
        )
        self.store.add_rect(rect)
        self.store.select_rect(rect.id)
        logger.debug(f"Committed rect {rect.id} on {page.id}: ({rect.x:.1f}, {rect.y:.1f}, {rect.w:.1f}, {rect.h:.1f})")

        if self.store.session.ocr_enabled and self.dispatcher is not None:
            self.dispatcher.dispatch(page, rect)

        return rect
