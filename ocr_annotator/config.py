"""
Application configuration settings for the OCR annotation tool
"""
import os
from pathlib import Path

# Project directories
# Support bundled mode via environment variable override
PROJECT_ROOT = Path(os.environ.get('OCR_ANNOTATOR_ROOT', Path(__file__).parent.parent))
DATA_DIR = PROJECT_ROOT / "data"
EXPORT_DIR = DATA_DIR / "exports"

# Geometry settings (image-space units unless noted)
MIN_RECT_SIZE = 5  # Committed rectangles must be strictly larger on both axes
HANDLE_SIZE = 8  # Screen pixels

# Zoom settings
MIN_SCALE = 0.1
MAX_SCALE = 5.0
SLIDER_MIN_SCALE = 0.1
SLIDER_MAX_SCALE = 3.0
ZOOM_STEP = 0.05
DEFAULT_SCALE = 1.0
FIT_WIDTH = 800  # Initial display width for oversized first pages

# OCR settings
DEFAULT_OCR_ENGINE = "tesseract"
OCR_LANGUAGE = os.getenv('OCR_LANGUAGE', 'jpn+eng')  # Japanese and English
OCR_MAX_WORKERS = int(os.getenv('OCR_MAX_WORKERS', '2'))
OCR_ERROR_TEXT = "Error"
OCR_POLL_INTERVAL = 0.5  # Seconds between reruns while recognition is pending

# Logging
LOG_LEVEL = os.getenv('OCR_ANNOTATOR_LOG_LEVEL', 'INFO').upper()
LOG_DIR = os.getenv('OCR_ANNOTATOR_LOG_DIR')

# Annotation Canvas Configuration
# Development mode connects to Vite dev server at http://localhost:5174
# Production mode loads pre-built component from frontend/annotation_canvas/build/
ANNOTATION_CANVAS_RELEASE_MODE = os.getenv('ANNOTATION_CANVAS_RELEASE', 'false').lower() == 'true'
