from abc import ABC, abstractmethod

from ecoreceipt.ocr.models import OcrPassResult, SelectedOcrResult


class BaseCorrector(ABC):
    """Contract for OCR text correctors."""

    @abstractmethod
    def correct_if_needed(self, result: SelectedOcrResult | OcrPassResult) -> str:
        """Return corrected text, or the OCR text itself when no correction
        is warranted or possible. Never raises for service failures."""
