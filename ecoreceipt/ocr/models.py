from dataclasses import dataclass
from enum import Enum


class SegmentationMode(str, Enum):
    """Assumed text layout handed to the OCR engine."""

    SINGLE_BLOCK = "single_block"
    SINGLE_COLUMN = "single_column"


@dataclass(frozen=True)
class OcrPassResult:
    """Text and self-reported confidence (0-100) of one OCR pass."""

    text: str
    confidence: float
    segmentation_mode: SegmentationMode


@dataclass(frozen=True)
class SelectedOcrResult:
    """Winning pass plus both candidates, kept for diagnostics."""

    selected: OcrPassResult
    candidates: tuple[OcrPassResult, ...]

    @property
    def text(self) -> str:
        return self.selected.text

    @property
    def confidence(self) -> float:
        return self.selected.confidence

    @property
    def segmentation_mode(self) -> SegmentationMode:
        return self.selected.segmentation_mode
