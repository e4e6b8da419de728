import io
from collections.abc import Callable

import pytest
from PIL import Image, ImageDraw

ImageFactory = Callable[..., bytes]


def _png_bytes(image: Image.Image) -> bytes:
    buf = io.BytesIO()
    image.save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture()
def make_image_bytes() -> ImageFactory:
    """Build a PNG of the given size and fill colour, with a few dark text-like bars."""

    def _make(
        width: int = 400,
        height: int = 600,
        color: tuple[int, int, int] = (150, 150, 150),
    ) -> bytes:
        image = Image.new("RGB", (width, height), color)
        draw = ImageDraw.Draw(image)
        if width > 60:
            for top in range(20, height - 20, 40):
                draw.rectangle((20, top, width // 2, top + 8), fill=(0, 0, 0))
        return _png_bytes(image)

    return _make


@pytest.fixture()
def dark_image() -> Image.Image:
    return Image.new("RGB", (300, 400), (30, 30, 30))


@pytest.fixture()
def bright_image() -> Image.Image:
    return Image.new("RGB", (300, 400), (240, 240, 240))


@pytest.fixture()
def normal_image() -> Image.Image:
    return Image.new("RGB", (300, 400), (150, 150, 150))


@pytest.fixture()
def narrow_image_bytes(make_image_bytes: ImageFactory) -> bytes:
    """Typical low-resolution phone photo of a receipt."""
    return make_image_bytes(width=500, height=750)


@pytest.fixture()
def wide_image_bytes(make_image_bytes: ImageFactory) -> bytes:
    return make_image_bytes(width=2400, height=300)


@pytest.fixture()
def receipt_text() -> str:
    return (
        "TOTTUS\n"
        "HIPERMERCADOS TOTTUS S.A.\n"
        "2500012000007 MANZANA\n"
        "ROJA\n"
        "1.17kg 6.50 X kg 7.61\n"
        "7750243051234 LECHE GLORIA\n"
        "3 2.39 X UN 7.17\n"
        "TOTAL 14.78\n"
    )
