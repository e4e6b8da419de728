from abc import ABC, abstractmethod

from ecoreceipt.imaging.models import PreprocessedImage


class BasePreprocessor(ABC):
    """Contract for all receipt image preprocessors."""

    @abstractmethod
    def preprocess(self, image_bytes: bytes) -> PreprocessedImage:
        """Turn an uploaded photo into an OCR-ready lossless raster.

        Args:
            image_bytes: Raw uploaded file content (JPEG, PNG, ...).

        Returns:
            PreprocessedImage with PNG bytes and the quality report that
            drove the transform parameters.

        Raises:
            InvalidImageError: if the bytes cannot be decoded.
            PreprocessingError: if any transform fails.
        """
