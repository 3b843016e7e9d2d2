"""
Annotation Page - draw rectangles on page images and recognize their text

Features:
- Multi-image upload (one page per image)
- Page navigation
- Zoom controls and OCR toggle
- Interactive canvas for drawing, moving, and resizing rectangles
- Editable recognized text per rectangle
- CSV / JSON download
"""
import time
from typing import Any, Iterable, List, Tuple

import streamlit as st
from PIL import Image

from ocr_annotator import config
from ocr_annotator.state import AnnotationState
from ocr_annotator.services.annotation import ExportFormat, Rectangle
from ocr_annotator.services.annotation.canvas import annotation_canvas, parse_canvas_events
from ocr_annotator.services.annotation.geometry import format_scale, round_half_up
from ocr_annotator.services.ocr import EngineStatus


def get_annotation_state() -> AnnotationState:
    """Get annotation state from session state"""
    return st.session_state.annotation_state


def load_uploaded_images(files: Iterable[Any]) -> List[Tuple[str, Image.Image]]:
    """Decode uploaded files into (file name, image) pairs, keeping their order"""
    images = []
    for file in files:
        image = Image.open(file)
        image.load()
        images.append((file.name, image))
    return images


def rect_label(index: int, rect: Rectangle) -> str:
    """List label: 1-based position plus rounded origin"""
    return f"#{index + 1} (x:{round_half_up(rect.x)}, y:{round_half_up(rect.y)})"


def render_image_upload(state: AnnotationState):
    """Render image upload section"""
    uploaded_files = st.file_uploader(
        "Upload page images",
        type=["png", "jpg", "jpeg"],
        accept_multiple_files=True,
        key=f"page_upload_{state.uploader_key}",
    )

    if uploaded_files and st.button("Add Pages"):
        pages = state.store.add_pages(load_uploaded_images(uploaded_files))
        # Fresh key clears the uploader
        state.uploader_key += 1
        st.success(f"Added {len(pages)} page(s)")
        st.rerun()


# Keyed widgets are seeded from the store on every run; user edits reach the
# store only through these on_change callbacks
def _apply_zoom_slider(store):
    store.set_scale(st.session_state["zoom_slider"])


def _apply_ocr_toggle(store):
    store.set_ocr_enabled(st.session_state["ocr_toggle"])


def _apply_text_edit(store, page_id: str, rect_id: str, key: str):
    store.update_rect_on_page(page_id, rect_id, text=st.session_state[key])


def render_toolbar(state: AnnotationState):
    """Render zoom controls and the OCR toggle"""
    store = state.store
    session = store.session

    col1, col2, col3, col4, col5 = st.columns([1, 4, 1, 1, 2])

    with col1:
        if st.button("-", key="zoom_out", help="Zoom out 5%"):
            store.step_zoom(-config.ZOOM_STEP)
            st.rerun()

    with col2:
        st.session_state["zoom_slider"] = min(
            max(session.scale, config.SLIDER_MIN_SCALE), config.SLIDER_MAX_SCALE
        )
        st.slider(
            "Zoom",
            min_value=config.SLIDER_MIN_SCALE,
            max_value=config.SLIDER_MAX_SCALE,
            step=config.ZOOM_STEP,
            label_visibility="collapsed",
            key="zoom_slider",
            on_change=_apply_zoom_slider,
            args=(store,),
        )

    with col3:
        if st.button("+", key="zoom_in", help="Zoom in 5%"):
            store.step_zoom(config.ZOOM_STEP)
            st.rerun()

    with col4:
        st.markdown(format_scale(session.scale))

    with col5:
        st.session_state["ocr_toggle"] = session.ocr_enabled
        st.toggle("OCR", key="ocr_toggle", on_change=_apply_ocr_toggle, args=(store,))


def render_page_navigation(state: AnnotationState):
    """Render page navigation controls"""
    store = state.store
    session = store.session
    if not session.pages:
        return

    num_pages = len(session.pages)
    index = session.current_page_index

    col1, col2, col3 = st.columns([1, 4, 1])

    with col1:
        if st.button("Prev", disabled=index == 0, key="page_prev"):
            store.previous_page()
            st.rerun()

    with col2:
        st.markdown(
            f"<div style='text-align: center; padding-top: 5px;'><strong>Page {index + 1} of {num_pages}</strong>"
            f" &middot; {session.current_page.name}</div>",
            unsafe_allow_html=True
        )

    with col3:
        if st.button("Next", disabled=index >= num_pages - 1, key="page_next"):
            store.next_page()
            st.rerun()


def render_engine_status(state: AnnotationState):
    """Show OCR engine loading state in sidebar"""
    status = state.dispatcher.engine.status
    if status in (EngineStatus.UNINITIALIZED, EngineStatus.LOADING):
        st.sidebar.warning("Loading OCR engine...")
    elif status == EngineStatus.FAILED:
        st.sidebar.error("OCR engine unavailable. Text can still be entered manually.")


def render_region_sidebar(state: AnnotationState):
    """Render rectangle list and text editors in sidebar"""
    store = state.store
    session = store.session
    page = session.current_page

    st.sidebar.header("Regions")

    if page is None or not page.rects:
        st.sidebar.info("Drag on the image to draw a region.")
        return

    for index, rect in enumerate(page.rects):
        is_selected = rect.id == session.selected_rect_id

        if st.sidebar.button(
            f"{'> ' if is_selected else ''}{rect_label(index, rect)}",
            key=f"select_{page.id}_{rect.id}",
            use_container_width=True,
        ):
            store.select_rect(rect.id)
            st.rerun()

        if rect.is_ocr_running:
            st.sidebar.caption("Recognizing text...")
        else:
            text_key = f"text_{page.id}_{rect.id}"
            st.session_state[text_key] = rect.text
            st.sidebar.text_area(
                "Text",
                key=text_key,
                placeholder="No text" if session.ocr_enabled else "Enter text...",
                label_visibility="collapsed",
                on_change=_apply_text_edit,
                args=(store, page.id, rect.id, text_key),
            )

        if st.sidebar.button(
            "Re-run OCR",
            key=f"rerun_{page.id}_{rect.id}",
            disabled=not state.dispatcher.is_ready,
        ):
            state.dispatcher.rerun(rect.id)
            st.rerun()

        if st.sidebar.button("Delete", key=f"delete_{page.id}_{rect.id}"):
            store.delete_rect(rect.id)
            st.rerun()


def render_export_buttons(state: AnnotationState):
    """Render CSV / JSON download buttons in sidebar"""
    session = state.store.session
    exporter = state.exporter

    st.sidebar.divider()
    st.sidebar.subheader("Export")

    scope = st.sidebar.radio(
        "Scope",
        ["All pages", "Current page"],
        index=0 if state.export_all_pages else 1,
        key="export_scope",
    )
    state.export_all_pages = scope == "All pages"

    in_scope = session.total_rects if state.export_all_pages else len(session.rects)

    for fmt in (ExportFormat.CSV, ExportFormat.JSON):
        st.sidebar.download_button(
            label=fmt.value.upper(),
            data=exporter.export_bytes(session, fmt, all_pages=state.export_all_pages),
            file_name=exporter.file_name(fmt),
            mime=exporter.mime_type(fmt),
            disabled=in_scope == 0,
            key=f"download_{fmt.value}",
            use_container_width=True,
        )


def render_annotation_canvas(state: AnnotationState):
    """Render the canvas and feed its pointer events to the controller"""
    session = state.store.session
    page = session.current_page

    result = annotation_canvas(
        image=page.image_ref,
        rects=page.rects,
        scale=session.scale,
        selected_rect_id=session.selected_rect_id,
        draft_rect=state.controller.ephemeral_rect,
        key=f"canvas_{page.id}",
    )

    events, event_timestamp = parse_canvas_events(result)

    # Skip if we already processed this batch (prevents infinite loop)
    if not events or event_timestamp == state.last_event_timestamp:
        return

    state.last_event_timestamp = event_timestamp
    for event in events:
        state.controller.handle_event(event)
    st.rerun()


def render_annotation_page():
    """Main annotation page render function"""
    state = get_annotation_state()

    # Apply recognition results that finished since the last rerun
    state.dispatcher.poll()

    render_engine_status(state)

    with st.expander("Add Pages", expanded=not state.store.pages):
        render_image_upload(state)

    if not state.store.pages:
        st.info("Upload one or more images to start annotating.")
        return

    render_toolbar(state)
    render_page_navigation(state)

    st.divider()

    render_region_sidebar(state)
    render_export_buttons(state)
    render_annotation_canvas(state)

    if state.dispatcher.has_pending:
        time.sleep(config.OCR_POLL_INTERVAL)
        st.rerun()
