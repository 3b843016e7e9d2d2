"""
OCR Annotation Tool

Run with: streamlit run app.py
"""
from ocr_annotator.main import main

main()
