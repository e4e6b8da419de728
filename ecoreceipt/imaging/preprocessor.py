"""Adaptive receipt preprocessing.

Processing flow:
1. Decode and measure brightness.
2. Upscale narrow photos to the target width (aspect ratio kept).
3. Greyscale.
4. Brightness/contrast correction chosen by the quality report.
5. Histogram normalization.
6. Binarize with a brightness-dependent threshold.
7. Mild blur, then sharpen unless the photo was dark.
8. Encode as PNG.
"""

import io
from typing import ClassVar

from PIL import Image, ImageEnhance, ImageFilter, ImageOps, UnidentifiedImageError

from ecoreceipt.imaging.base import BasePreprocessor
from ecoreceipt.imaging.exceptions import ImagingError, InvalidImageError, PreprocessingError
from ecoreceipt.imaging.models import ImageQualityReport, PreprocessedImage
from ecoreceipt.imaging.quality import ImageQualityAnalyzer
from ecoreceipt.logging.logger import Log


class AdaptivePreprocessor(BasePreprocessor):
    """Deterministic Pillow transform chain whose parameters follow brightness."""

    TARGET_WIDTH: ClassVar[int] = 2000

    # (brightness delta, contrast delta); deltas are added to PIL's neutral 1.0
    DARK_CORRECTION: ClassVar[tuple[float, float]] = (0.3, 1.0)
    VERY_BRIGHT_CORRECTION: ClassVar[tuple[float, float]] = (-0.2, 0.7)
    NORMAL_CORRECTION: ClassVar[tuple[float, float]] = (0.0, 0.9)

    DARK_THRESHOLD: ClassVar[int] = 120
    NORMAL_THRESHOLD: ClassVar[int] = 140

    BLUR_RADIUS: ClassVar[int] = 1
    SHARPEN_KERNEL: ClassVar[ImageFilter.Kernel] = ImageFilter.Kernel(
        (3, 3),
        [0, -1, 0, -1, 5, -1, 0, -1, 0],
        scale=1,
    )

    def __init__(
        self,
        analyzer: ImageQualityAnalyzer | None = None,
        target_width: int | None = None,
    ) -> None:
        self._analyzer = analyzer if analyzer is not None else ImageQualityAnalyzer()
        self._target_width = target_width if target_width is not None else self.TARGET_WIDTH

    def preprocess(self, image_bytes: bytes) -> PreprocessedImage:
        image = self._decode(image_bytes)
        try:
            quality = self._analyzer.analyze(image)
            Log.info(
                "Image quality analyzed",
                brightness=round(quality.average_brightness, 1),
                dark=quality.is_dark,
                very_bright=quality.is_very_bright,
            )
            processed = self._transform(image, quality)
            encoded = self._encode(processed)
        except ImagingError:
            raise
        except Exception as exc:
            raise PreprocessingError(f"Image preprocessing failed: {exc}") from exc

        Log.info(
            f"Preprocessed image to {processed.width}x{processed.height} "
            f"({len(encoded)} bytes)"
        )
        return PreprocessedImage(
            image_bytes=encoded,
            width=processed.width,
            height=processed.height,
            quality=quality,
        )

    @staticmethod
    def _decode(image_bytes: bytes) -> Image.Image:
        if not image_bytes:
            raise InvalidImageError("Image payload is empty")
        try:
            image = Image.open(io.BytesIO(image_bytes))
            image.load()
        except (
            UnidentifiedImageError,
            Image.DecompressionBombError,
            OSError,
            ValueError,
        ) as exc:
            raise InvalidImageError(f"Cannot decode image: {exc}") from exc
        return image

    def _transform(self, image: Image.Image, quality: ImageQualityReport) -> Image.Image:
        image = self._upscale(image)
        image = image.convert("L")
        image = self._correct_exposure(image, quality)
        image = ImageOps.autocontrast(image)
        image = self._binarize(image, quality)
        image = image.filter(ImageFilter.GaussianBlur(self.BLUR_RADIUS))
        if not quality.is_dark:
            # Sharpening a lifted dark photo boosts noise, not strokes.
            image = image.filter(self.SHARPEN_KERNEL)
        return image

    def _upscale(self, image: Image.Image) -> Image.Image:
        width, height = image.size
        if width >= self._target_width:
            return image
        new_height = max(1, round(height * self._target_width / width))
        Log.debug(f"Upscaling image from {width}x{height} to {self._target_width}x{new_height}")
        return image.resize((self._target_width, new_height), Image.Resampling.LANCZOS)

    def _correct_exposure(self, image: Image.Image, quality: ImageQualityReport) -> Image.Image:
        if quality.is_dark:
            brightness, contrast = self.DARK_CORRECTION
        elif quality.is_very_bright:
            brightness, contrast = self.VERY_BRIGHT_CORRECTION
        else:
            brightness, contrast = self.NORMAL_CORRECTION

        if brightness:
            image = ImageEnhance.Brightness(image).enhance(1.0 + brightness)
        return ImageEnhance.Contrast(image).enhance(1.0 + contrast)

    def _binarize(self, image: Image.Image, quality: ImageQualityReport) -> Image.Image:
        threshold = self.DARK_THRESHOLD if quality.is_dark else self.NORMAL_THRESHOLD
        return image.point(lambda value: 255 if value > threshold else 0)

    @staticmethod
    def _encode(image: Image.Image) -> bytes:
        buffer = io.BytesIO()
        image.save(buffer, format="PNG")
        return buffer.getvalue()
