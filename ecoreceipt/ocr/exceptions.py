class OcrError(Exception):
    """Raised when a single OCR engine pass fails."""


class OcrUnavailableError(OcrError):
    """Raised when no OCR pass produced a result."""
