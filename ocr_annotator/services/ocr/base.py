"""
Base classes for OCR engines

OCR engines process PIL Images only - cropping to a region is done by the caller
"""
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional
from PIL import Image
import numpy as np

logger = logging.getLogger(__name__)


# Constants
DEFAULT_CONFIDENCE = -1.0  # Sentinel value for unavailable confidence


class EngineStatus(str, Enum):
    """Loading lifecycle of an OCR engine"""
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


@dataclass
class BoundingBox:
    """Bounding box coordinates for text regions"""
    left: int
    top: int
    width: int
    height: int


@dataclass
class Word:
    """Single recognized word with bounding box and confidence"""
    text: str
    bbox: BoundingBox
    confidence: float = DEFAULT_CONFIDENCE


@dataclass
class ConfidenceStats:
    """Confidence statistics computed from word-level confidences"""
    mean: float
    std: float
    available: bool  # False if confidence not available (all words have DEFAULT_CONFIDENCE)


@dataclass
class OCRResult:
    """Standardized OCR result format"""
    words: List[Word]  # List of recognized words with bboxes and confidences
    engine_name: str
    processing_time: float
    text: str = ""  # Full recognized text; derived from words when not given

    def __post_init__(self):
        if not self.text and self.words:
            self.text = " ".join(w.text for w in self.words)

    @property
    def confidence_stats(self) -> ConfidenceStats:
        """
        Compute confidence statistics from word confidences

        Returns:
            ConfidenceStats with mean, std, and availability
        """
        if not self.words:
            return ConfidenceStats(mean=DEFAULT_CONFIDENCE, std=0.0, available=False)

        # Extract confidences
        confidences = [w.confidence for w in self.words]

        # Check if any valid confidences are available
        valid_confidences = [c for c in confidences if c >= 0]

        if not valid_confidences:
            # All confidences are DEFAULT_CONFIDENCE (unavailable)
            return ConfidenceStats(mean=DEFAULT_CONFIDENCE, std=0.0, available=False)

        # Compute statistics
        mean = float(np.mean(valid_confidences))
        std = float(np.std(valid_confidences))

        return ConfidenceStats(mean=mean, std=std, available=True)


class OCREngine(ABC):
    """
    Abstract base class for all OCR engines

    Engines are loaded lazily. status moves from UNINITIALIZED to LOADING
    and then to READY or FAILED; callers check is_loaded before use.
    """

    def __init__(self, model_path: Optional[str] = None, **kwargs):
        """
        Initialize OCR engine

        Args:
            model_path: Path to model file (engine-specific)
            **kwargs: Engine-specific configuration
        """
        self.model_path = model_path
        self.status = EngineStatus.UNINITIALIZED
        self.config = kwargs

    @property
    def is_loaded(self) -> bool:
        return self.status == EngineStatus.READY

    def load(self) -> bool:
        """
        Run load_model() and record the outcome in status

        Returns:
            True if the engine is ready
        """
        self.status = EngineStatus.LOADING
        try:
            self.load_model()
        except Exception:
            logger.exception(f"Failed to load OCR engine '{self.name}'")
            self.status = EngineStatus.FAILED
            return False

        self.status = EngineStatus.READY
        logger.info(f"OCR engine '{self.name}' ready")
        return True

    @abstractmethod
    def load_model(self):
        """Load the OCR model; raise on failure"""
        pass

    @abstractmethod
    def recognize(self, image: Image.Image, lang: Optional[str] = None) -> OCRResult:
        """
        Recognize the text in a single image

        Args:
            image: PIL Image object (already cropped to the region)
            lang: Language hint overriding the engine default

        Returns:
            OCRResult with extracted text and metadata
        """
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """Engine name (e.g., 'tesseract')"""
        pass

    def __repr__(self):
        return f"{self.__class__.__name__}(name='{self.name}', status='{self.status.value}')"
