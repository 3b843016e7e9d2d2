"""
OCR Annotation Tool

Draw rectangles over page images, recognize their text with OCR, edit
the text, and export everything as CSV or JSON.

Contains:
- config.py: Settings and environment overrides
- services/: Annotation state engine and OCR services
- backend/: Streamlit pages
- main.py: Streamlit entry point
"""
__version__ = "0.1.0"
