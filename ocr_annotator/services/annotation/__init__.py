"""
Annotation Service

Pages, rectangles, gesture handling, and export for OCR annotation.

Usage:
    from ocr_annotator.services.annotation import (
        AnnotationStore, InteractionController, AnnotationExporter, Point,
    )

    store = AnnotationStore()
    store.add_pages([("page1.png", pil_image)])

    # Drive gestures with image-space points
    controller = InteractionController(store)
    controller.pointer_down(Point(10, 10))
    controller.pointer_move(Point(110, 60))
    rect = controller.pointer_up()  # Rectangle(x=10, y=10, w=100, h=50)

    store.set_text(rect.id, "Hello")

    # Export
    exporter = AnnotationExporter()
    csv_text = exporter.to_csv(store.session, all_pages=True)
    json_bytes = exporter.export_bytes(store.session, "json")  # For browser download

    # Use annotation canvas (in Streamlit app)
    from ocr_annotator.services.annotation import annotation_canvas
    result = annotation_canvas(pil_image, store.session.rects, scale=1.0)
"""
from .models import (
    Point,
    Handle,
    HANDLE_ORDER,
    InteractionMode,
    Rectangle,
    Page,
    Gesture,
    AnnotationSession,
)
from .store import AnnotationStore
from .interaction import InteractionController, PointerEvent, PointerEventType
from .exporter import AnnotationExporter, ExportFormat

# Lazy imports for Streamlit components (avoid loading Streamlit in non-UI contexts)
_canvas_module = None


def __getattr__(name):
    """Lazy load Streamlit canvas components."""
    global _canvas_module
    if name in ("annotation_canvas", "parse_canvas_events"):
        if _canvas_module is None:
            from . import canvas as _canvas_module
        return getattr(_canvas_module, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "Point",
    "Handle",
    "HANDLE_ORDER",
    "InteractionMode",
    "Rectangle",
    "Page",
    "Gesture",
    "AnnotationSession",
    "AnnotationStore",
    "InteractionController",
    "PointerEvent",
    "PointerEventType",
    "AnnotationExporter",
    "ExportFormat",
    "annotation_canvas",
    "parse_canvas_events",
]
