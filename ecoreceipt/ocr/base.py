from abc import ABC, abstractmethod
from types import TracebackType
from typing import Self

from ecoreceipt.ocr.models import OcrPassResult, SegmentationMode


class BaseOcrEngine(ABC):
    """Contract for one short-lived OCR engine session.

    Sessions are context managers: acquire with ``with``, run one
    recognition, release on exit. A session is never shared between passes.
    """

    def __enter__(self) -> Self:
        self.open()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()

    def open(self) -> None:
        """Acquire engine resources. Default: nothing to acquire."""

    def close(self) -> None:
        """Release engine resources. Default: nothing to release."""

    @abstractmethod
    def recognize_text(
        self,
        image_bytes: bytes,
        mode: SegmentationMode,
        language: str,
    ) -> OcrPassResult:
        """Recognize text in an OCR-ready image.

        Args:
            image_bytes: Lossless raster produced by the preprocessor.
            mode: Layout assumption for this pass.
            language: Engine language code (e.g. "spa").

        Returns:
            OcrPassResult with text and mean confidence (0-100).

        Raises:
            OcrError: if the engine fails for this pass.
        """
