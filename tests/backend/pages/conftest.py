"""
Shared pytest fixtures for backend page tests
"""
import io

import pytest
from unittest.mock import MagicMock
from PIL import Image

from ocr_annotator.state import build_annotation_state


class FakeSessionState(dict):
    """Dict with attribute access, like st.session_state"""
    __getattr__ = dict.__getitem__
    __setattr__ = dict.__setitem__


@pytest.fixture
def mock_streamlit():
    """Mock Streamlit module for UI testing."""
    mock_st = MagicMock()

    # Mock sidebar
    mock_st.sidebar = MagicMock()
    mock_st.sidebar.button = MagicMock(return_value=False)
    mock_st.sidebar.text_area = MagicMock()
    mock_st.sidebar.radio = MagicMock(return_value="All pages")
    mock_st.sidebar.download_button = MagicMock()

    # Mock main UI elements
    mock_st.file_uploader = MagicMock(return_value=None)
    mock_st.button = MagicMock(return_value=False)
    mock_st.slider = MagicMock()
    mock_st.toggle = MagicMock()
    mock_st.columns = MagicMock(side_effect=lambda widths: [MagicMock() for _ in widths])
    mock_st.rerun = MagicMock()

    # Mock session state
    mock_st.session_state = FakeSessionState()

    return mock_st


@pytest.fixture
def annotation_state(manual_executor, ready_engine):
    """AnnotationState with a ready engine and no pages"""
    return build_annotation_state(engine=ready_engine, executor=manual_executor)


@pytest.fixture
def annotation_state_with_page(annotation_state, sample_page_image, sample_rect):
    """AnnotationState with one page holding one rectangle"""
    annotation_state.store.add_pages([("page1.png", sample_page_image)])
    annotation_state.store.add_rect(sample_rect)
    return annotation_state


@pytest.fixture
def mock_uploaded_files(sample_page_image):
    """Mock Streamlit uploaded files."""
    files = []
    for name in ("scan_1.png", "scan_2.png"):
        buf = io.BytesIO()
        sample_page_image.save(buf, format='PNG')
        buf.seek(0)
        buf.name = name
        files.append(buf)
    return files

