from typing import ClassVar

import pytesseract

from ecoreceipt.config.settings import Settings
from ecoreceipt.ocr.base import BaseOcrEngine
from ecoreceipt.ocr.orchestrator import EngineProvider, MultiPassOcr
from ecoreceipt.ocr.tesseract_adapter import TesseractEngine


class OcrEngineFactory:
    """Creates engine session providers and the multi-pass orchestrator."""

    ENGINES: ClassVar[dict[str, type[BaseOcrEngine]]] = {
        "tesseract": TesseractEngine,
    }

    @classmethod
    def create_provider(cls, settings: Settings) -> EngineProvider:
        """Return a callable producing a fresh engine session per call."""
        engine = settings.ocr_engine.lower()
        engine_cls = cls.ENGINES.get(engine)
        if engine_cls is None:
            raise ValueError(
                f"Unknown OCR engine '{engine}'. Choose from: {list(cls.ENGINES)}"
            )
        if engine == "tesseract" and settings.tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = settings.tesseract_cmd
        return engine_cls

    @classmethod
    def create(cls, settings: Settings) -> MultiPassOcr:
        return MultiPassOcr(
            engine_provider=cls.create_provider(settings),
            language=settings.ocr_language,
            parallel=settings.ocr_parallel_passes,
        )
