"""Pytest configuration and shared fixtures."""

import io

import pytest
from PIL import Image


def _encode(img: Image.Image, fmt: str) -> bytes:
    buf = io.BytesIO()
    img.save(buf, format=fmt)
    return buf.getvalue()


@pytest.fixture
def make_image_bytes():
    """Factory for solid-color images encoded in memory."""

    def _make(color=(128, 128, 128), size=(32, 24), mode='RGB', fmt='PNG') -> bytes:
        return _encode(Image.new(mode, size, color), fmt)

    return _make


@pytest.fixture
def split_image_bytes() -> bytes:
    """30x20 PNG, white top half, black bottom half."""
    img = Image.new('RGB', (30, 20), (0, 0, 0))
    img.paste((255, 255, 255), (0, 0, 30, 10))
    return _encode(img, 'PNG')
