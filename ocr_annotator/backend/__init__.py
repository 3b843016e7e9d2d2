"""
Streamlit backend for the OCR annotation tool
"""
