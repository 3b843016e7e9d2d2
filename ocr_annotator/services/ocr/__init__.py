"""
OCR service for region text recognition

- Engines: recognize the text of one cropped image (e.g., TesseractEngine)
- Factory: creates engines by name
- Dispatcher: runs recognition asynchronously for annotated rectangles
  and writes results back to the annotation store
"""
from .base import *
from .factory import *
from .types import EngineType
from .dispatcher import OCRDispatcher, OCRRequest
from .engines.tesseract import TesseractEngine

# Register engines
OCREngineFactory.register_engine('tesseract', TesseractEngine)
