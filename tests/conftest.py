"""Shared pytest fixtures for the featured image tests."""

from io import BytesIO

import pytest
from PIL import Image

from image_templates.featured_image import FeaturedImageGenerator
from image_templates.fonts import FontLoader


class StubFont:
    """Font stand-in with a fixed advance per character."""

    def __init__(self, char_width=10):
        self.char_width = char_width

    def getlength(self, text):
        return len(text) * self.char_width


def encode_image(img: Image.Image, fmt: str = "PNG") -> bytes:
    buffer = BytesIO()
    img.save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def stub_font() -> StubFont:
    return StubFont()


@pytest.fixture(scope="session")
def generator() -> FeaturedImageGenerator:
    """Generator that never touches the network for fonts."""
    return FeaturedImageGenerator(fonts=FontLoader(google_fonts=False))


@pytest.fixture
def make_photo():
    """Build encoded photo bytes of a given size and color."""

    def _make(size=(800, 600), color=(10, 200, 30), fmt="PNG") -> bytes:
        return encode_image(Image.new("RGB", size, color), fmt)

    return _make


@pytest.fixture
def open_png():
    """Decode PNG bytes back into an RGBA image."""

    def _open(data: bytes) -> Image.Image:
        img = Image.open(BytesIO(data))
        img.load()
        return img.convert("RGBA")

    return _open
