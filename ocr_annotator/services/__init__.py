"""
Services for the OCR annotation tool
"""
