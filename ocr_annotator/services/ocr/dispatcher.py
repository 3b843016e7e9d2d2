"""
OCR Dispatcher - asynchronous recognition of annotated rectangles

Recognition runs on a thread pool. Worker threads never touch the
annotation store: finished requests are queued and applied by poll(),
which the UI calls on its own thread. Completions are applied in the
order they finish, so for overlapping requests on the same rectangle the
last one to complete wins.

Writes are addressed by (page id, rectangle id) and re-check existence,
so a rectangle deleted while its request was pending is never
resurrected and a page switch never redirects a result.
"""
import itertools
import logging
import queue
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from ocr_annotator import config
from ocr_annotator.services.annotation.geometry import crop_box
from ocr_annotator.services.annotation.models import Page, Rectangle
from ocr_annotator.services.annotation.store import AnnotationStore
from .base import EngineStatus, OCREngine

logger = logging.getLogger(__name__)


@dataclass
class OCRRequest:
    """One outstanding recognition request"""
    request_id: int
    page_id: str
    rect_id: str
    future: Future

    @property
    def key(self) -> Tuple[str, str]:
        return (self.page_id, self.rect_id)


class OCRDispatcher:
    """
    Issues recognition requests and writes their results back to the store

    Args:
        store: Store that owns the rectangles
        engine: Recognition engine
        executor: Executor running recognition (default: thread pool)
        lang: Language hint passed to the engine
        drop_stale: Discard a completion when a newer request for the same
            rectangle has been issued since (off by default: last completion wins)
    """

    def __init__(
        self,
        store: AnnotationStore,
        engine: OCREngine,
        executor: Optional[Executor] = None,
        lang: str = config.OCR_LANGUAGE,
        drop_stale: bool = False,
    ):
        self.store = store
        self.engine = engine
        self.executor = executor or ThreadPoolExecutor(
            max_workers=config.OCR_MAX_WORKERS,
            thread_name_prefix="ocr",
        )
        self.lang = lang
        self.drop_stale = drop_stale

        self._request_ids = itertools.count(1)
        self._completed: "queue.Queue[OCRRequest]" = queue.Queue()
        self._in_flight: Dict[Tuple[str, str], int] = {}
        self._latest: Dict[Tuple[str, str], int] = {}

    @property
    def is_ready(self) -> bool:
        return self.engine.status == EngineStatus.READY

    @property
    def pending(self) -> int:
        """Number of requests issued but not yet applied"""
        return sum(self._in_flight.values())

    @property
    def has_pending(self) -> bool:
        return self.pending > 0

    def is_running(self, page_id: str, rect_id: str) -> bool:
        return self._in_flight.get((page_id, rect_id), 0) > 0

    def start_engine(self) -> Optional[Future]:
        """
        Load the engine in the background if it has not been loaded yet

        Returns:
            Future of the load, or None if loading already started
        """
        if self.engine.status != EngineStatus.UNINITIALIZED:
            return None
        self.engine.status = EngineStatus.LOADING
        return self.executor.submit(self.engine.load)

    def dispatch(self, page: Page, rect: Rectangle) -> Optional[OCRRequest]:
        """
        Submit a rectangle of a page for recognition

        Nothing happens while the engine is not ready or when the rectangle
        no longer exists on the page.

        Returns:
            The issued request, or None if skipped
        """
        if not self.is_ready:
            logger.debug(f"OCR engine not ready ({self.engine.status.value}); skipping {rect.id}")
            return None

        if not self.store.update_rect_on_page(page.id, rect.id, is_ocr_running=True):
            return None

        key = (page.id, rect.id)
        crop = page.image_ref.crop(crop_box(rect))

        try:
            future = self.executor.submit(self.engine.recognize, crop, self.lang)
        except RuntimeError:
            # Executor already shut down; only earlier requests keep the flag set
            logger.warning(f"Could not submit OCR request for {rect.id} on {page.id}", exc_info=True)
            self.store.update_rect_on_page(page.id, rect.id, is_ocr_running=self.is_running(*key))
            return None

        request_id = next(self._request_ids)
        self._in_flight[key] = self._in_flight.get(key, 0) + 1
        self._latest[key] = request_id

        request = OCRRequest(request_id=request_id, page_id=page.id, rect_id=rect.id, future=future)
        future.add_done_callback(lambda _f, req=request: self._completed.put(req))

        logger.debug(f"Dispatched OCR request {request_id} for {rect.id} on {page.id} ({crop.width}x{crop.height})")
        return request

    def rerun(self, rect_id: str, page_id: Optional[str] = None) -> Optional[OCRRequest]:
        """Re-run recognition on an existing rectangle (current page by default)"""
        page = self.store.get_page(page_id) if page_id else self.store.current_page
        rect = page.get_rect(rect_id) if page is not None else None
        if rect is None:
            return None
        return self.dispatch(page, rect)

    def poll(self) -> int:
        """
        Apply every finished request to the store

        Returns:
            Number of requests applied
        """
        applied = 0
        while True:
            try:
                request = self._completed.get_nowait()
            except queue.Empty:
                break
            self._apply(request)
            applied += 1
        return applied

    def _apply(self, request: OCRRequest) -> None:
        key = request.key
        stale = request.request_id < self._latest.get(key, request.request_id)

        remaining = self._in_flight.get(key, 1) - 1
        if remaining > 0:
            self._in_flight[key] = remaining
        else:
            self._in_flight.pop(key, None)
            self._latest.pop(key, None)

        if self.drop_stale and stale:
            logger.debug(f"Dropping stale OCR request {request.request_id} for {request.rect_id}")
            self.store.update_rect_on_page(*key, is_ocr_running=remaining > 0)
            return

        try:
            result = request.future.result()
        except Exception:
            logger.warning(f"OCR request {request.request_id} for {request.rect_id} failed", exc_info=True)
            text = config.OCR_ERROR_TEXT
        else:
            text = result.text.strip()
            stats = result.confidence_stats
            if stats.available:
                logger.debug(
                    f"OCR request {request.request_id} done: {len(result.words)} words, "
                    f"mean confidence {stats.mean:.2f}"
                )

        self.store.update_rect_on_page(*key, text=text, is_ocr_running=remaining > 0)

    def shutdown(self, wait: bool = False) -> None:
        self.executor.shutdown(wait=wait)
