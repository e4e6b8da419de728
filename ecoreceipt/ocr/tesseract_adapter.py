import io
from typing import Any, ClassVar

import pytesseract
from PIL import Image

from ecoreceipt.ocr.base import BaseOcrEngine
from ecoreceipt.ocr.exceptions import OcrError
from ecoreceipt.ocr.models import OcrPassResult, SegmentationMode


class TesseractEngine(BaseOcrEngine):
    """OCR session backed by the Tesseract CLI through pytesseract."""

    PAGE_SEGMENTATION_MODES: ClassVar[dict[SegmentationMode, int]] = {
        SegmentationMode.SINGLE_BLOCK: 6,
        SegmentationMode.SINGLE_COLUMN: 4,
    }
    ENGINE_MODE: ClassVar[int] = 3

    def __init__(self) -> None:
        self._image: Image.Image | None = None

    def close(self) -> None:
        if self._image is not None:
            self._image.close()
            self._image = None

    def recognize_text(
        self,
        image_bytes: bytes,
        mode: SegmentationMode,
        language: str,
    ) -> OcrPassResult:
        config = f"--oem {self.ENGINE_MODE} --psm {self.PAGE_SEGMENTATION_MODES[mode]}"
        try:
            self._image = Image.open(io.BytesIO(image_bytes))
            data = pytesseract.image_to_data(
                self._image,
                lang=language,
                config=config,
                output_type=pytesseract.Output.DICT,
            )
        except OcrError:
            raise
        except Exception as exc:
            raise OcrError(f"tesseract {mode.value} pass failed: {exc}") from exc

        return OcrPassResult(
            text=self._rebuild_text(data),
            confidence=self._mean_confidence(data),
            segmentation_mode=mode,
        )

    @staticmethod
    def _rebuild_text(data: dict[str, list[Any]]) -> str:
        lines: dict[tuple[int, int, int], list[str]] = {}
        for index, word in enumerate(data.get("text", [])):
            word = str(word).strip()
            if not word:
                continue
            key = (
                int(data["block_num"][index]),
                int(data["par_num"][index]),
                int(data["line_num"][index]),
            )
            lines.setdefault(key, []).append(word)
        return "\n".join(" ".join(words) for words in lines.values())

    @staticmethod
    def _mean_confidence(data: dict[str, list[Any]]) -> float:
        confidences: list[float] = []
        for word, raw_conf in zip(data.get("text", []), data.get("conf", [])):
            try:
                conf = float(raw_conf)
            except (TypeError, ValueError):
                continue
            if conf >= 0 and str(word).strip():
                confidences.append(conf)
        if not confidences:
            return 0.0
        return sum(confidences) / len(confidences)
