"""
Application state management for the OCR annotation tool

Contains the dataclass holding session state that persists across Streamlit reruns.
"""
from concurrent.futures import Executor
from dataclasses import dataclass, field
from typing import Any, Optional

from ocr_annotator import config
from ocr_annotator.services.annotation import (
    AnnotationExporter,
    AnnotationStore,
    InteractionController,
)
from ocr_annotator.services.ocr import OCRDispatcher, OCREngine, OCREngineFactory


@dataclass
class AnnotationState:
    """State of the annotation page"""
    store: AnnotationStore = field(default_factory=AnnotationStore)
    controller: Optional[InteractionController] = None
    dispatcher: Optional[OCRDispatcher] = None
    exporter: AnnotationExporter = field(default_factory=AnnotationExporter)
    export_all_pages: bool = True
    # Last canvas event batch handled (prevents replaying it on rerun)
    last_event_timestamp: Optional[Any] = None
    uploader_key: int = 0


def build_annotation_state(
    engine: Optional[OCREngine] = None,
    executor: Optional[Executor] = None,
) -> AnnotationState:
    """
    Wire store, dispatcher, and controller together

    Args:
        engine: Recognition engine (default: config.DEFAULT_OCR_ENGINE)
        executor: Executor for recognition (default: thread pool)

    Returns:
        AnnotationState with the engine loading in the background
    """
    store = AnnotationStore()
    if engine is None:
        engine = OCREngineFactory.create(config.DEFAULT_OCR_ENGINE)

    dispatcher = OCRDispatcher(store, engine, executor=executor)
    dispatcher.start_engine()

    return AnnotationState(
        store=store,
        controller=InteractionController(store, dispatcher),
        dispatcher=dispatcher,
    )


def init_session_state():
    """Initialize session state if not already done"""
    import streamlit as st

    if "annotation_state" not in st.session_state:
        st.session_state.annotation_state = build_annotation_state()
