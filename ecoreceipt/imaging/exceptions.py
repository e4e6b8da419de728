class ImagingError(Exception):
    """Base exception for image analysis and preprocessing errors."""


class InvalidImageError(ImagingError):
    """Raised when the input cannot be decoded as an image or has no pixels."""


class PreprocessingError(ImagingError):
    """Raised when an image transform fails; the original cause is chained."""
