"""
Tests for the pointer gesture state machine
"""
import pytest

from ocr_annotator.services.annotation import (
    InteractionController,
    InteractionMode,
    Point,
    PointerEvent,
    PointerEventType,
    Rectangle,
)
from ocr_annotator.services.ocr import OCRDispatcher


@pytest.fixture
def controller(store_with_page):
    """Controller without OCR"""
    return InteractionController(store_with_page)


@pytest.fixture
def ocr_controller(store_with_page, ready_engine, manual_executor):
    """Controller wired to a dispatcher with a manual executor"""
    dispatcher = OCRDispatcher(store_with_page, ready_engine, executor=manual_executor)
    return InteractionController(store_with_page, dispatcher)


def drag(controller, start, end):
    controller.pointer_down(Point(*start))
    controller.pointer_move(Point(*end))
    return controller.pointer_up()


class TestDrawing:
    """Tests for draw gestures"""

    def test_draw_commits_rect(self, controller):
        """Test drawing from (10,10) to (110,60) commits a 100x50 rectangle"""
        rect = drag(controller, (10, 10), (110, 60))

        assert (rect.x, rect.y, rect.w, rect.h) == (10, 10, 100, 50)
        assert rect.text == ""
        assert controller.store.session.rects == [rect]
        assert controller.store.session.selected_rect_id == rect.id
        assert controller.mode == InteractionMode.IDLE

    def test_draw_dispatches_ocr_on_crop(self, ocr_controller, manual_executor, ready_engine):
        """Test the committed rectangle is recognized from its own crop"""
        rect = drag(ocr_controller, (10, 10), (110, 60))

        assert rect.is_ocr_running is True
        assert len(manual_executor.calls) == 1

        manual_executor.run(0)
        ocr_controller.dispatcher.poll()

        assert ready_engine.calls[0][0] == (100, 50)
        assert rect.text == "hello"
        assert rect.is_ocr_running is False

    def test_draw_without_ocr(self, ocr_controller, manual_executor):
        """Test disabled OCR commits without recognition"""
        ocr_controller.store.set_ocr_enabled(False)

        rect = drag(ocr_controller, (10, 10), (110, 60))

        assert rect is not None
        assert rect.is_ocr_running is False
        assert manual_executor.calls == []

    def test_tiny_draw_is_discarded(self, controller):
        """Test drawing from (10,10) to (12,11) adds nothing"""
        rect = drag(controller, (10, 10), (12, 11))

        assert rect is None
        assert controller.store.session.rects == []
        assert controller.mode == InteractionMode.IDLE

    @pytest.mark.parametrize("end", [(15, 100), (100, 15)])
    def test_boundary_size_is_discarded(self, controller, end):
        """Test a dimension of exactly 5 is not committed"""
        assert drag(controller, (10, 10), end) is None

    def test_reverse_drag_normalizes(self, controller):
        """Test dragging up-left produces the same rectangle"""
        rect = drag(controller, (110, 60), (10, 10))

        assert (rect.x, rect.y, rect.w, rect.h) == (10, 10, 100, 50)

    def test_ephemeral_rect_while_drawing(self, controller):
        """Test the rubber band follows the pointer and is not committed"""
        controller.pointer_down(Point(10, 10))
        controller.pointer_move(Point(50, 40))

        assert controller.mode == InteractionMode.DRAWING
        draft = controller.ephemeral_rect
        assert (draft.x, draft.y, draft.w, draft.h) == (10, 10, 40, 30)
        assert controller.store.session.rects == []

    def test_pointer_leave_commits(self, controller):
        """Test leaving the surface ends the gesture like pointer up"""
        controller.pointer_down(Point(10, 10))
        controller.pointer_move(Point(110, 60))
        rect = controller.pointer_leave()

        assert rect is not None
        assert controller.mode == InteractionMode.IDLE

    def test_down_on_empty_area_clears_selection(self, controller, sample_rect):
        """Test pressing outside every rectangle deselects"""
        controller.store.add_rect(sample_rect)
        controller.store.select_rect("r1")

        controller.pointer_down(Point(300, 150))

        assert controller.store.session.selected_rect_id is None
        assert controller.mode == InteractionMode.DRAWING

    def test_no_page_ignores_events(self):
        """Test gestures do nothing before any upload"""
        from ocr_annotator.services.annotation import AnnotationStore

        controller = InteractionController(AnnotationStore())
        controller.pointer_down(Point(10, 10))
        controller.pointer_move(Point(110, 60))

        assert controller.pointer_up() is None
        assert controller.mode == InteractionMode.IDLE

    def test_committed_ids_unique(self, controller):
        """Test rectangles drawn in a row get distinct ids"""
        ids = {drag(controller, (10 + i * 50, 10), (25 + i * 50, 40)).id for i in range(5)}

        assert len(ids) == 5


class TestMoving:
    """Tests for move gestures"""

    def test_move_keeps_grab_offset(self, controller, sample_rect):
        """Test the rectangle moves with the pointer at the grab offset"""
        controller.store.add_rect(sample_rect)

        controller.pointer_down(Point(30, 20))
        assert controller.mode == InteractionMode.MOVING
        assert controller.store.session.selected_rect_id == "r1"

        controller.pointer_move(Point(80, 70))
        controller.pointer_up()

        assert (sample_rect.x, sample_rect.y) == (60, 60)
        assert (sample_rect.w, sample_rect.h) == (100, 50)

    def test_move_picks_topmost(self, controller):
        """Test overlapping rectangles move the most recent one"""
        older = Rectangle(id="a", x=0, y=0, w=100, h=100)
        newer = Rectangle(id="b", x=50, y=50, w=100, h=100)
        controller.store.add_rect(older)
        controller.store.add_rect(newer)

        controller.pointer_down(Point(75, 75))

        assert controller.store.session.selected_rect_id == "b"

    def test_move_outside_image_allowed(self, controller, sample_rect):
        """Test moves are not clamped to the image"""
        controller.store.add_rect(sample_rect)

        drag(controller, (20, 20), (-50, -50))

        assert (sample_rect.x, sample_rect.y) == (-60, -60)

    def test_move_of_deleted_rect_resets(self, controller, sample_rect):
        """Test a rectangle deleted mid-drag ends the gesture"""
        controller.store.add_rect(sample_rect)
        controller.pointer_down(Point(20, 20))
        controller.store.delete_rect("r1")

        controller.pointer_move(Point(40, 40))

        assert controller.mode == InteractionMode.IDLE


class TestResizing:
    """Tests for resize gestures"""

    @pytest.fixture
    def selected(self, controller, sample_rect):
        controller.store.add_rect(sample_rect)
        controller.store.select_rect("r1")
        return sample_rect

    def test_bottom_right_resize(self, controller, selected):
        """Test dragging br from (110,60) to (150,40) gives 140x30"""
        controller.pointer_down(Point(110, 60))
        assert controller.mode == InteractionMode.RESIZING

        controller.pointer_move(Point(150, 40))
        controller.pointer_up()

        assert (selected.x, selected.y, selected.w, selected.h) == (10, 10, 140, 30)

    def test_top_left_resize_moves_origin(self, controller, selected):
        """Test tl keeps the opposite corner fixed"""
        drag(controller, (10, 10), (0, 20))

        assert (selected.x, selected.y, selected.w, selected.h) == (0, 20, 110, 40)
        assert (selected.right, selected.bottom) == (110, 60)

    def test_collapsing_edge_is_skipped(self, controller, selected):
        """Test an edge that would make a dimension <= 5 stays put"""
        drag(controller, (110, 60), (14, 100))

        # Width would be 4, height grows normally
        assert (selected.x, selected.w) == (10, 100)
        assert selected.h == 90

    def test_exact_threshold_is_skipped(self, controller, selected):
        """Test reaching exactly 5 is rejected too"""
        drag(controller, (110, 60), (15, 15))

        assert (selected.w, selected.h) == (100, 50)

    def test_resize_never_flips(self, controller, selected):
        """Test dragging a handle past the opposite edge never inverts"""
        drag(controller, (10, 10), (300, 300))

        assert selected.w > 5 and selected.h > 5
        assert (selected.x, selected.y) == (10, 10)

    def test_unselected_rect_has_no_handles(self, controller, sample_rect):
        """Test handles only exist on the selected rectangle"""
        controller.store.add_rect(sample_rect)

        controller.pointer_down(Point(110, 60))

        assert controller.mode == InteractionMode.MOVING

    def test_handle_target_scales_with_zoom(self, controller, selected):
        """Test handle threshold is in screen pixels"""
        controller.store.set_scale(4.0)

        controller.pointer_down(Point(114, 64))

        # 4 image pixels is 16 screen pixels, outside the handle target
        assert controller.mode == InteractionMode.DRAWING


class TestEvents:
    """Tests for screen-space event routing"""

    def test_events_mapped_by_scale(self, controller):
        """Test screen points are converted with the current zoom"""
        controller.store.set_scale(2.0)

        controller.handle_event(PointerEvent(PointerEventType.DOWN, 20, 20))
        controller.handle_event(PointerEvent(PointerEventType.MOVE, 220, 120))
        rect = controller.handle_event(PointerEvent(PointerEventType.UP, 220, 120))

        assert (rect.x, rect.y, rect.w, rect.h) == (10, 10, 100, 50)

    def test_events_mapped_by_origin(self, controller):
        """Test the surface origin is subtracted"""
        origin = Point(100, 50)

        controller.handle_event(PointerEvent("down", 110, 60), origin)
        controller.handle_event(PointerEvent("move", 210, 110), origin)
        rect = controller.handle_event(PointerEvent("up", 210, 110), origin)

        assert (rect.x, rect.y, rect.w, rect.h) == (10, 10, 100, 50)

    def test_down_while_drawing_finishes_previous(self, controller):
        """Test a lost up event does not leak into the next gesture"""
        controller.pointer_down(Point(10, 10))
        controller.pointer_move(Point(110, 60))
        controller.pointer_down(Point(300, 150))

        assert len(controller.store.session.rects) == 1
        assert controller.mode == InteractionMode.DRAWING

    def test_page_switch_cancels_gesture(self, store_with_pages):
        """Test switching pages drops a draw in progress"""
        controller = InteractionController(store_with_pages)
        controller.pointer_down(Point(10, 10))
        controller.pointer_move(Point(110, 60))

        store_with_pages.next_page()

        assert controller.pointer_up() is None
        assert store_with_pages.session.total_rects == 0
