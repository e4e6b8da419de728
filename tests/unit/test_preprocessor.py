import io
from collections.abc import Callable
from unittest.mock import MagicMock, patch

import pytest
from PIL import Image, ImageEnhance, ImageFilter

from ecoreceipt.config.settings import Settings
from ecoreceipt.imaging.exceptions import InvalidImageError, PreprocessingError
from ecoreceipt.imaging.factory import PreprocessorFactory
from ecoreceipt.imaging.models import ImageQualityReport
from ecoreceipt.imaging.preprocessor import AdaptivePreprocessor


def _decode(data: bytes) -> Image.Image:
    return Image.open(io.BytesIO(data))


def _kernel_calls(spy: object) -> list[object]:
    return [
        call for call in spy.call_args_list  # type: ignore[attr-defined]
        if isinstance(call.args[1], ImageFilter.Kernel)
    ]


class TestAdaptivePreprocessorGeometry:
    def test_narrow_image_is_upscaled_to_target_width(self, narrow_image_bytes: bytes) -> None:
        result = AdaptivePreprocessor().preprocess(narrow_image_bytes)
        assert result.width == 2000
        assert result.height == 3000

    def test_wide_image_keeps_its_width(self, wide_image_bytes: bytes) -> None:
        result = AdaptivePreprocessor().preprocess(wide_image_bytes)
        assert result.width == 2400
        assert result.height == 300

    @pytest.mark.parametrize("width", [5, 640, 1999, 2000, 2001, 3000])
    def test_output_width_property(
        self,
        make_image_bytes: Callable[..., bytes],
        width: int,
    ) -> None:
        result = AdaptivePreprocessor().preprocess(make_image_bytes(width=width, height=10))
        assert result.width == max(width, 2000)

    def test_custom_target_width(self, make_image_bytes: Callable[..., bytes]) -> None:
        preprocessor = AdaptivePreprocessor(target_width=800)
        result = preprocessor.preprocess(make_image_bytes(width=400, height=100))
        assert (result.width, result.height) == (800, 200)


class TestAdaptivePreprocessorOutput:
    def test_output_is_binary_png(self, make_image_bytes: Callable[..., bytes]) -> None:
        result = AdaptivePreprocessor().preprocess(make_image_bytes())
        decoded = _decode(result.image_bytes)
        assert decoded.format == "PNG"
        assert decoded.mode == "L"
        assert decoded.size == (result.width, result.height)

    def test_reports_quality(self, make_image_bytes: Callable[..., bytes]) -> None:
        result = AdaptivePreprocessor().preprocess(make_image_bytes(color=(20, 20, 20)))
        assert result.quality.is_dark is True

    def test_is_deterministic(self, make_image_bytes: Callable[..., bytes]) -> None:
        data = make_image_bytes()
        preprocessor = AdaptivePreprocessor()
        assert preprocessor.preprocess(data).image_bytes == preprocessor.preprocess(data).image_bytes


class TestAdaptivePreprocessorBranches:
    def test_dark_image_is_brightened_and_not_sharpened(
        self,
        make_image_bytes: Callable[..., bytes],
    ) -> None:
        original_filter = Image.Image.filter
        with (
            patch.object(Image.Image, "filter", autospec=True, side_effect=original_filter) as spy,
            patch(
                "ecoreceipt.imaging.preprocessor.ImageEnhance.Brightness",
                wraps=ImageEnhance.Brightness,
            ) as brightness,
        ):
            AdaptivePreprocessor().preprocess(make_image_bytes(color=(25, 25, 25)))

        brightness.assert_called_once()
        assert _kernel_calls(spy) == []

    def test_normal_image_is_sharpened_without_brightness_change(
        self,
        make_image_bytes: Callable[..., bytes],
    ) -> None:
        original_filter = Image.Image.filter
        with (
            patch.object(Image.Image, "filter", autospec=True, side_effect=original_filter) as spy,
            patch(
                "ecoreceipt.imaging.preprocessor.ImageEnhance.Brightness",
                wraps=ImageEnhance.Brightness,
            ) as brightness,
        ):
            AdaptivePreprocessor().preprocess(make_image_bytes(color=(150, 150, 150)))

        brightness.assert_not_called()
        assert len(_kernel_calls(spy)) == 1

    def test_bright_image_is_darkened_and_sharpened(
        self,
        make_image_bytes: Callable[..., bytes],
    ) -> None:
        original_filter = Image.Image.filter
        with (
            patch.object(Image.Image, "filter", autospec=True, side_effect=original_filter) as spy,
            patch(
                "ecoreceipt.imaging.preprocessor.ImageEnhance.Brightness",
                wraps=ImageEnhance.Brightness,
            ) as brightness,
        ):
            AdaptivePreprocessor().preprocess(make_image_bytes(color=(245, 245, 245)))

        brightness.assert_called_once()
        assert len(_kernel_calls(spy)) == 1

    def test_binarize_threshold_depends_on_darkness(self) -> None:
        preprocessor = AdaptivePreprocessor()
        grey = Image.new("L", (1, 1), 130)
        dark = preprocessor._binarize(grey, _report(is_dark=True))
        normal = preprocessor._binarize(grey, _report(is_dark=False))
        assert dark.getpixel((0, 0)) == 255
        assert normal.getpixel((0, 0)) == 0


class TestAdaptivePreprocessorErrors:
    def test_empty_bytes_raise_invalid_image(self) -> None:
        with pytest.raises(InvalidImageError, match="empty"):
            AdaptivePreprocessor().preprocess(b"")

    def test_garbage_bytes_raise_invalid_image(self) -> None:
        with pytest.raises(InvalidImageError, match="Cannot decode"):
            AdaptivePreprocessor().preprocess(b"definitely not an image")

    def test_transform_failure_is_wrapped(self, make_image_bytes: Callable[..., bytes]) -> None:
        preprocessor = AdaptivePreprocessor()
        with patch.object(preprocessor, "_binarize", side_effect=RuntimeError("boom")):
            with pytest.raises(PreprocessingError, match="boom") as exc_info:
                preprocessor.preprocess(make_image_bytes())
        assert isinstance(exc_info.value.__cause__, RuntimeError)

    def test_oversized_image_raises_invalid_image(
        self,
        monkeypatch: pytest.MonkeyPatch,
        make_image_bytes: Callable[..., bytes],
    ) -> None:
        data = make_image_bytes()
        monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 1000)

        with pytest.raises(InvalidImageError, match="Cannot decode") as exc_info:
            AdaptivePreprocessor().preprocess(data)
        assert isinstance(exc_info.value.__cause__, Image.DecompressionBombError)

    def test_quality_analysis_failure_is_wrapped(
        self, make_image_bytes: Callable[..., bytes]
    ) -> None:
        analyzer = MagicMock()
        analyzer.analyze.side_effect = RuntimeError("histogram failed")
        preprocessor = AdaptivePreprocessor(analyzer=analyzer)

        with pytest.raises(PreprocessingError, match="histogram failed") as exc_info:
            preprocessor.preprocess(make_image_bytes())
        assert isinstance(exc_info.value.__cause__, RuntimeError)


class TestPreprocessorFactory:
    def test_creates_adaptive_preprocessor(self) -> None:
        preprocessor = PreprocessorFactory.create(Settings())
        assert isinstance(preprocessor, AdaptivePreprocessor)

    def test_rejects_non_positive_width(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PREPROCESS_TARGET_WIDTH", "0")
        with pytest.raises(ValueError, match="preprocess_target_width"):
            PreprocessorFactory.create(Settings())


def _report(is_dark: bool) -> ImageQualityReport:
    return ImageQualityReport(average_brightness=0.0, is_dark=is_dark, is_very_bright=False)
