"""
Shared pytest fixtures
"""
from concurrent.futures import Executor, Future

import pytest
from PIL import Image

from ocr_annotator.services.annotation import AnnotationStore, Rectangle
from ocr_annotator.services.ocr.base import EngineStatus, OCREngine, OCRResult


class ManualExecutor(Executor):
    """
    Executor that never runs anything on its own

    Tests decide when (and in which order) each submitted call finishes,
    which makes asynchronous interleavings deterministic.
    """

    def __init__(self):
        self.calls = []  # (future, fn, args, kwargs)
        self.shutdown_called = False

    def submit(self, fn, *args, **kwargs):
        future = Future()
        self.calls.append((future, fn, args, kwargs))
        return future

    def run(self, index):
        """Execute a submitted call and resolve its future"""
        future, fn, args, kwargs = self.calls[index]
        if not future.set_running_or_notify_cancel():
            return
        try:
            result = fn(*args, **kwargs)
        except Exception as e:
            future.set_exception(e)
        else:
            future.set_result(result)

    def run_all(self):
        for index, (future, _, _, _) in enumerate(self.calls):
            if not future.done():
                self.run(index)

    def complete(self, index, result):
        """Resolve a submitted call with a given result without running it"""
        self.calls[index][0].set_result(result)

    def fail(self, index, error):
        """Resolve a submitted call with an exception"""
        self.calls[index][0].set_exception(error)

    def shutdown(self, wait=True, **kwargs):
        self.shutdown_called = True


class FakeEngine(OCREngine):
    """Recognition engine returning canned texts"""

    def __init__(self, texts=None, fail=False, load_error=None, **kwargs):
        super().__init__(**kwargs)
        self.texts = list(texts or [])
        self.fail = fail
        self.load_error = load_error
        self.calls = []  # (image size, lang)

    def load_model(self):
        if self.load_error is not None:
            raise self.load_error

    def recognize(self, image, lang=None):
        self.calls.append((image.size, lang))
        if self.fail:
            raise RuntimeError("recognition failed")
        text = self.texts.pop(0) if self.texts else ""
        return OCRResult(words=[], engine_name=self.name, processing_time=0.0, text=text)

    @property
    def name(self) -> str:
        return "fake"


def make_result(text):
    return OCRResult(words=[], engine_name="fake", processing_time=0.0, text=text)


@pytest.fixture
def manual_executor():
    """Executor driven by the test"""
    return ManualExecutor()


@pytest.fixture
def result_factory():
    """Build OCRResults with a given text"""
    return make_result


@pytest.fixture
def fake_engine():
    """Fake engine that has not been loaded"""
    return FakeEngine()


@pytest.fixture
def ready_engine():
    """Fake engine already in READY state"""
    engine = FakeEngine(texts=["  hello  "])
    engine.status = EngineStatus.READY
    return engine


@pytest.fixture
def sample_page_image():
    """Create a simple page image (400x200 white)"""
    return Image.new('RGB', (400, 200), color='white')


@pytest.fixture
def sample_page_image_wide():
    """Create a page wider than the fit width (1600x400)"""
    return Image.new('RGB', (1600, 400), color='white')


@pytest.fixture
def store_with_page(sample_page_image):
    """Store with a single page loaded"""
    store = AnnotationStore()
    store.add_pages([("page1.png", sample_page_image)])
    return store


@pytest.fixture
def store_with_pages(sample_page_image):
    """Store with three pages loaded"""
    store = AnnotationStore()
    store.add_pages([
        ("page1.png", sample_page_image),
        ("page2.png", Image.new('RGB', (300, 300), color='white')),
        ("page3.png", Image.new('RGB', (200, 100), color='white')),
    ])
    return store


@pytest.fixture
def sample_rect():
    """Rectangle at (10, 10) sized 100x50"""
    return Rectangle(id="r1", x=10, y=10, w=100, h=50)
