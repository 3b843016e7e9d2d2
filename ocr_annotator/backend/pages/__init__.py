"""
Streamlit pages for the OCR annotation tool
"""
from .annotate import render_annotation_page

__all__ = ["render_annotation_page"]
