"""
OCR Annotation Tool - draw regions on page images and recognize their text

Main application entry point.
"""
import streamlit as st

from ocr_annotator import config
from ocr_annotator.state import init_session_state
from ocr_annotator.utils import setup_logging
from ocr_annotator.backend.pages.annotate import render_annotation_page


def main():
    """Main application entry point"""
    # Page config
    st.set_page_config(
        page_title="OCR Annotation Tool",
        page_icon="",
        layout="wide",
    )

    if "logging_configured" not in st.session_state:
        setup_logging(level=config.LOG_LEVEL, log_dir=config.LOG_DIR)
        st.session_state.logging_configured = True

    # Initialize session state
    init_session_state()

    st.sidebar.title("OCR Annotation Tool")
    st.sidebar.divider()

    render_annotation_page()


if __name__ == "__main__":
    main()
