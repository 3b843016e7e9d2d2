"""
Type definitions for OCR service
"""
from enum import Enum


class EngineType(str, Enum):
    """Available recognition engines"""
    TESSERACT = "tesseract"
