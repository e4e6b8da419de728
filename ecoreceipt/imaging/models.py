from dataclasses import dataclass


@dataclass(frozen=True)
class ImageQualityReport:
    """Brightness characteristics of a decoded receipt photo."""

    average_brightness: float
    is_dark: bool
    is_very_bright: bool


@dataclass(frozen=True)
class PreprocessedImage:
    """Output of the preprocessor: lossless OCR-ready bytes plus diagnostics."""

    image_bytes: bytes
    width: int
    height: int
    quality: ImageQualityReport
