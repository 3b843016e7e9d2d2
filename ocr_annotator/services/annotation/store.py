"""
Page & Annotation Store

Single owner of the annotation session. Every mutation of pages,
rectangles, selection, or zoom goes through this class.

Rectangle operations act on the current page, except the *_on_page
variants used by delayed writers (OCR completions) which target the
page they were issued from. Operations on ids that no longer exist are
no-ops that return False.
"""
import logging
from typing import Any, Iterable, List, Optional, Tuple

from .geometry import clamp_scale, fit_scale, step_scale
from .models import AnnotationSession, Gesture, Page, Rectangle

logger = logging.getLogger(__name__)

# Fields a patch may touch
RECT_FIELDS = ("x", "y", "w", "h", "text", "is_ocr_running")


class AnnotationStore:
    """
    Store for an AnnotationSession

    Usage:
        store = AnnotationStore()
        store.add_pages([("page1.png", image)])
        store.add_rect(Rectangle(x=10, y=10, w=100, h=50))
    """

    def __init__(self, session: Optional[AnnotationSession] = None):
        self.session = session if session is not None else AnnotationSession()

    # ------------------------------------------------------------------
    # Pages
    # ------------------------------------------------------------------

    @property
    def pages(self) -> List[Page]:
        return self.session.pages

    @property
    def current_page(self) -> Optional[Page]:
        return self.session.current_page

    def get_page(self, page_id: str) -> Optional[Page]:
        """Get a page by ID"""
        for page in self.session.pages:
            if page.id == page_id:
                return page
        return None

    def add_pages(self, images: Iterable[Tuple[str, Any]]) -> List[Page]:
        """
        Append one page per uploaded image, preserving the given order

        The first upload of a session also selects page 0 and resets the
        zoom to fit the first page.

        Args:
            images: (file name, decoded image) pairs

        Returns:
            The newly created pages
        """
        first_upload = not self.session.pages
        added = [Page(name=name, image_ref=image) for name, image in images]
        self.session.pages.extend(added)

        if first_upload and added:
            self.session.current_page_index = 0
            self.session.selected_rect_id = None
            self.session.gesture = Gesture()
            self.session.scale = fit_scale(added[0].width)

        logger.info(f"Added {len(added)} page(s); session has {len(self.session.pages)}")
        return added

    def set_current_page_index(self, index: int) -> int:
        """
        Switch to another page

        The index is clamped to the valid range. Selection and any gesture
        in progress are always cleared.

        Returns:
            The resulting page index
        """
        if self.session.pages:
            index = min(max(0, index), len(self.session.pages) - 1)
        else:
            index = 0
        self.session.current_page_index = index
        self.session.selected_rect_id = None
        self.session.gesture = Gesture()
        return index

    def next_page(self) -> int:
        return self.set_current_page_index(self.session.current_page_index + 1)

    def previous_page(self) -> int:
        return self.set_current_page_index(self.session.current_page_index - 1)

    # ------------------------------------------------------------------
    # Zoom and toggles
    # ------------------------------------------------------------------

    def set_scale(self, scale: float) -> float:
        self.session.scale = clamp_scale(scale)
        return self.session.scale

    def step_zoom(self, step: float) -> float:
        self.session.scale = step_scale(self.session.scale, step)
        return self.session.scale

    def set_ocr_enabled(self, enabled: bool) -> None:
        self.session.ocr_enabled = bool(enabled)

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def select_rect(self, rect_id: Optional[str]) -> bool:
        """Select a rectangle on the current page (None clears)"""
        if rect_id is None:
            self.session.selected_rect_id = None
            return True
        if self.get_rect(rect_id) is None:
            return False
        self.session.selected_rect_id = rect_id
        return True

    def clear_selection(self) -> None:
        self.session.selected_rect_id = None

    # ------------------------------------------------------------------
    # Rectangles (current page)
    # ------------------------------------------------------------------

    def get_rect(self, rect_id: str) -> Optional[Rectangle]:
        page = self.current_page
        return page.get_rect(rect_id) if page is not None else None

    def add_rect(self, rect: Rectangle) -> Rectangle:
        """Append a rectangle to the current page"""
        page = self.current_page
        if page is None:
            raise ValueError("Cannot add a rectangle before any page is loaded")
        page.add_rect(rect)
        logger.debug(f"Added rect {rect.id} to {page.id}")
        return rect

    def update_rect(self, rect_id: str, **patch) -> bool:
        """Patch fields of a rectangle on the current page"""
        page = self.current_page
        if page is None:
            return False
        return self.update_rect_on_page(page.id, rect_id, **patch)

    def set_text(self, rect_id: str, text: str) -> bool:
        return self.update_rect(rect_id, text=text)

    def delete_rect(self, rect_id: str) -> bool:
        """Delete a rectangle from the current page, clearing a dangling selection"""
        page = self.current_page
        if page is None or not page.remove_rect(rect_id):
            return False
        if self.session.selected_rect_id == rect_id:
            self.session.selected_rect_id = None
        logger.debug(f"Deleted rect {rect_id} from {page.id}")
        return True

    # ------------------------------------------------------------------
    # Rectangles (explicit page)
    # ------------------------------------------------------------------

    def update_rect_on_page(self, page_id: str, rect_id: str, **patch) -> bool:
        """
        Patch fields of a rectangle on a specific page

        Returns:
            True if the rectangle exists and was updated
        """
        unknown = set(patch) - set(RECT_FIELDS)
        if unknown:
            raise ValueError(f"Unknown rectangle fields: {', '.join(sorted(unknown))}")

        page = self.get_page(page_id)
        rect = page.get_rect(rect_id) if page is not None else None
        if rect is None:
            logger.debug(f"Ignoring update of missing rect {rect_id} on {page_id}")
            return False

        for name, value in patch.items():
            setattr(rect, name, value)
        return True
