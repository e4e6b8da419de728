from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor

from ecoreceipt.logging.logger import Log
from ecoreceipt.ocr.base import BaseOcrEngine
from ecoreceipt.ocr.exceptions import OcrError, OcrUnavailableError
from ecoreceipt.ocr.models import OcrPassResult, SegmentationMode, SelectedOcrResult

EngineProvider = Callable[[], BaseOcrEngine]

# Pass order doubles as the tie-break order.
PASS_ORDER: tuple[SegmentationMode, ...] = (
    SegmentationMode.SINGLE_BLOCK,
    SegmentationMode.SINGLE_COLUMN,
)


class MultiPassOcr:
    """Runs one isolated engine session per segmentation mode and keeps the
    most confident result.

    A failed pass is tolerated as long as the other one succeeds; ties go to
    the single-block pass.
    """

    def __init__(
        self,
        engine_provider: EngineProvider,
        language: str = "spa",
        parallel: bool = False,
    ) -> None:
        self._engine_provider = engine_provider
        self._language = language
        self._parallel = parallel

    def recognize(self, image_bytes: bytes, language: str | None = None) -> SelectedOcrResult:
        """Run both passes and select the winner.

        Raises:
            OcrUnavailableError: if every pass failed.
        """
        lang = language or self._language
        if self._parallel:
            with ThreadPoolExecutor(max_workers=len(PASS_ORDER)) as pool:
                outcomes = list(
                    pool.map(lambda mode: self._try_pass(image_bytes, mode, lang), PASS_ORDER)
                )
        else:
            outcomes = [self._try_pass(image_bytes, mode, lang) for mode in PASS_ORDER]

        results = [result for result in outcomes if result is not None]
        if not results:
            raise OcrUnavailableError(
                f"All {len(PASS_ORDER)} OCR passes failed; no text could be recognized"
            )

        selected = self._select(results)
        Log.info(
            "OCR pass selected",
            mode=selected.segmentation_mode.value,
            confidence=round(selected.confidence, 2),
        )
        return SelectedOcrResult(selected=selected, candidates=tuple(results))

    def _try_pass(
        self,
        image_bytes: bytes,
        mode: SegmentationMode,
        language: str,
    ) -> OcrPassResult | None:
        try:
            with self._engine_provider() as engine:
                result = engine.recognize_text(image_bytes, mode, language)
        except OcrError as exc:
            Log.warning(f"OCR pass failed: {exc}", mode=mode.value)
            return None

        Log.info(
            "OCR pass finished",
            mode=mode.value,
            confidence=round(result.confidence, 2),
            chars=len(result.text),
        )
        Log.debug(f"OCR {mode.value} raw text:\n{result.text}")
        return result

    @staticmethod
    def _select(results: list[OcrPassResult]) -> OcrPassResult:
        best = results[0]
        for candidate in results[1:]:
            if candidate.confidence > best.confidence:
                best = candidate
        return best
