"""
OCR Engine Factory - creates recognition engines by name
"""
from typing import Dict, Type, List, Union
from .base import OCREngine
from .types import EngineType


class OCREngineFactory:
    """
    Factory for creating OCR engine instances

    Usage:
        engine = OCREngineFactory.create(EngineType.TESSERACT)
        engine = OCREngineFactory.create('tesseract', lang='eng')
    """

    _engines: Dict[str, Type[OCREngine]] = {}

    @classmethod
    def create(cls, engine: Union[EngineType, str], **kwargs) -> OCREngine:
        """
        Create an OCR engine instance

        Args:
            engine: Engine (e.g., EngineType.TESSERACT or 'tesseract')
            **kwargs: Engine-specific configuration

        Returns:
            OCREngine instance (not yet loaded)

        Raises:
            ValueError: If the engine is not registered
        """
        if isinstance(engine, EngineType):
            engine = engine.value

        if engine not in cls._engines:
            available = ', '.join(cls._engines.keys()) or 'none'
            raise ValueError(
                f"Unknown engine: '{engine}'. "
                f"Available engines: {available}"
            )
        return cls._engines[engine](**kwargs)

    @classmethod
    def available_engines(cls) -> List[str]:
        """Get list of available engine names"""
        return sorted(cls._engines.keys())

    @classmethod
    def register_engine(cls, name: str, engine_class: Type[OCREngine]):
        """Register an engine"""
        cls._engines[name] = engine_class
