"""
Tesseract OCR Engine

Recognizes the text of a cropped region with Tesseract.
- CPU-only
- Multi-language hints joined with '+' (default: 'jpn+eng')
"""
import time
from typing import Dict, List, Optional, Tuple
from PIL import Image
import pytesseract

from ocr_annotator import config
from ..base import OCREngine, OCRResult, Word, BoundingBox


class TesseractEngine(OCREngine):
    """Tesseract OCR engine"""

    def __init__(self, lang: str = config.OCR_LANGUAGE, **kwargs):
        """
        Initialize Tesseract engine

        Args:
            lang: Tesseract language code(s), '+'-separated
            **kwargs: Additional configuration
        """
        super().__init__(**kwargs)
        self.lang = lang

    def load_model(self):
        """
        Load Tesseract model

        For Tesseract, this just verifies that the language data is available
        """
        try:
            available = pytesseract.get_languages()
        except Exception as e:
            raise RuntimeError(
                f"Tesseract not available. "
                f"Install Tesseract and download language data. Error: {e}"
            )

        missing = [code for code in self.lang.split('+') if code not in available]
        if missing:
            raise RuntimeError(
                f"Tesseract language data not installed: {', '.join(missing)}"
            )

    def recognize(self, image: Image.Image, lang: Optional[str] = None) -> OCRResult:
        """
        Process a single image with Tesseract

        Args:
            image: PIL Image object
            lang: Language hint (defaults to the engine language)

        Returns:
            OCRResult with words, bounding boxes, confidences, and line-joined text
        """
        # Lazy load
        if not self.is_loaded and not self.load():
            raise RuntimeError(f"Tesseract engine is not ready (status: {self.status.value})")

        start_time = time.time()

        # Run Tesseract OCR with detailed data
        data = pytesseract.image_to_data(
            image,
            lang=lang or self.lang,
            output_type=pytesseract.Output.DICT
        )

        # Extract words with bounding boxes and confidences
        n_boxes = len(data['text'])
        words = []
        lines: Dict[Tuple[int, int, int], List[str]] = {}

        for i in range(n_boxes):
            # Only include boxes with text and valid confidence
            if data['text'][i].strip() and float(data['conf'][i]) >= 0:
                bbox = BoundingBox(
                    left=data['left'][i],
                    top=data['top'][i],
                    width=data['width'][i],
                    height=data['height'][i]
                )

                conf = float(data['conf'][i]) / 100.0  # Convert 0-100 to 0-1

                word = Word(
                    text=data['text'][i],
                    confidence=conf,
                    bbox=bbox
                )

                words.append(word)
                lines.setdefault(self._line_key(data, i), []).append(word.text)

        processing_time = time.time() - start_time

        return OCRResult(
            words=words,
            engine_name=self.name,
            processing_time=processing_time,
            text="\n".join(" ".join(line) for line in lines.values()),
        )

    @staticmethod
    def _line_key(data: dict, i: int) -> Tuple[int, int, int]:
        """(block, paragraph, line) a word belongs to"""
        return tuple(
            data[key][i] if key in data else 0
            for key in ('block_num', 'par_num', 'line_num')
        )

    @property
    def name(self) -> str:
        return "tesseract"
