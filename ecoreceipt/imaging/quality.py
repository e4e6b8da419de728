from PIL import Image, ImageStat

from ecoreceipt.imaging.exceptions import InvalidImageError
from ecoreceipt.imaging.models import ImageQualityReport

DARK_BRIGHTNESS_LIMIT = 100.0
VERY_BRIGHT_BRIGHTNESS_LIMIT = 200.0


class ImageQualityAnalyzer:
    """Reports the mean per-pixel brightness of a decoded image."""

    def analyze(self, image: Image.Image) -> ImageQualityReport:
        """Average ``(R + G + B) / 3`` over every pixel and classify it.

        Raises:
            InvalidImageError: if the image has no pixels.
        """
        width, height = image.size
        if width <= 0 or height <= 0:
            raise InvalidImageError(f"Image has no pixels ({width}x{height})")

        # Mean of per-pixel channel averages equals the average of channel means.
        channel_means = ImageStat.Stat(image.convert("RGB")).mean
        average = sum(channel_means) / len(channel_means)

        return ImageQualityReport(
            average_brightness=average,
            is_dark=average < DARK_BRIGHTNESS_LIMIT,
            is_very_bright=average > VERY_BRIGHT_BRIGHTNESS_LIMIT,
        )
