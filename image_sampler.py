"""
Decode-and-sample port for the placeholder encoder.

The encoder only needs two things from an image: a dominant color and a raw
3x2 resample. Everything that touches image files lives here.
"""

import asyncio
import io
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

import numpy as np
from PIL import Image, ImageFilter

from color_space import RgbColor


# =============================================================================
# Constants
# =============================================================================

FAST_MODE_SIZE = 64  # Bounding box for fast mode (pixels per side)
GRID_COLS = 3
GRID_ROWS = 2
HISTOGRAM_BINS = 16  # Per channel, 16^3 = 4096 bins for the dominant color

# Image size limits (security: prevent decompression bombs)
MAX_IMAGE_PIXELS = 50_000_000  # 50 megapixels
MAX_IMAGE_DIMENSION = 10_000  # 10k pixels per side


class ImageDecodeError(ValueError):
    """Raised when an image source cannot be decoded or exceeds size limits."""


@dataclass(frozen=True)
class ImageSample:
    """What the encoder consumes from an image."""
    dominant: RgbColor
    grid: bytes  # GRID_COLS x GRID_ROWS pixels, row-major
    channels: int  # Bytes per pixel in grid (>= 3)
    size: tuple  # (width, height) of the sampled image


@runtime_checkable
class ImageSampler(Protocol):
    """Capability to decode an image source and sample it for the encoder."""

    async def sample(self, source, *, fast: bool = True) -> ImageSample:
        ...


# =============================================================================
# Decoding
# =============================================================================

def open_image(source) -> Image.Image:
    """
    Open and fully decode an image.

    Args:
        source: File path, raw bytes, or a binary file object

    Raises:
        FileNotFoundError: If the image file doesn't exist
        ImageDecodeError: If the source is not a valid image or exceeds size limits
    """
    if isinstance(source, (bytes, bytearray, memoryview)):
        source = io.BytesIO(source)

    try:
        img = Image.open(source)
    except FileNotFoundError:
        raise FileNotFoundError(f"Image not found: {source}")
    except Exception as e:
        raise ImageDecodeError(f"Could not open image: {e}") from e

    width, height = img.size
    if width > MAX_IMAGE_DIMENSION or height > MAX_IMAGE_DIMENSION:
        img.close()
        raise ImageDecodeError(
            f"Image dimensions {width}x{height} exceed maximum "
            f"{MAX_IMAGE_DIMENSION}x{MAX_IMAGE_DIMENSION}"
        )
    if width * height > MAX_IMAGE_PIXELS:
        img.close()
        raise ImageDecodeError(
            f"Image has {width * height:,} pixels, exceeding maximum {MAX_IMAGE_PIXELS:,}"
        )

    try:
        img.load()
    except Exception as e:
        img.close()
        raise ImageDecodeError(f"Could not decode image: {e}") from e

    return img


def _to_8bit(img: Image.Image) -> Image.Image:
    """Scale a 16-bit grayscale image (modes I;16*, I, F) down to mode L."""
    values = np.asarray(img, dtype=np.float64)
    scaled = np.clip(np.round(values / 257.0), 0, 255).astype(np.uint8)
    return Image.fromarray(scaled)


def _normalize(img: Image.Image) -> Image.Image:
    """Convert to RGB, or RGBA when the image carries transparency."""
    if img.mode in ('I', 'F') or img.mode.startswith('I;16'):
        # Pillow clips these to 255 when converting straight to RGB
        with _to_8bit(img) as gray:
            return gray.convert('RGB')
    if img.mode in ('RGBA', 'LA', 'PA') or (img.mode == 'P' and 'transparency' in img.info):
        return img.convert('RGBA')
    if img.mode != 'RGB':
        return img.convert('RGB')
    return img


# =============================================================================
# Sampling
# =============================================================================

def dominant_color(pixels: np.ndarray) -> RgbColor:
    """
    Most common color of an image at 4096-bin resolution.

    Args:
        pixels: uint8 array of shape (..., channels), channels >= 3

    Returns:
        Center of the most populated bin. Ties go to the lowest bin.
    """
    rgb = pixels.reshape(-1, pixels.shape[-1])[:, :3].astype(np.int64)

    step = 256 // HISTOGRAM_BINS
    binned = rgb // step
    flat = (binned[:, 0] * HISTOGRAM_BINS + binned[:, 1]) * HISTOGRAM_BINS + binned[:, 2]
    counts = np.bincount(flat, minlength=HISTOGRAM_BINS ** 3)

    top = int(np.argmax(counts))
    r_bin, rest = divmod(top, HISTOGRAM_BINS * HISTOGRAM_BINS)
    g_bin, b_bin = divmod(rest, HISTOGRAM_BINS)

    half = step // 2
    return RgbColor(r_bin * step + half, g_bin * step + half, b_bin * step + half)


def resample_grid(img: Image.Image) -> tuple[bytes, int]:
    """
    Resample an image to the GRID_COLS x GRID_ROWS grid.

    Returns:
        Tuple of (raw row-major pixel bytes, channels per pixel)
    """
    grid = img.resize((GRID_COLS, GRID_ROWS), Image.Resampling.BICUBIC)
    grid = grid.filter(ImageFilter.UnsharpMask(radius=1, percent=100, threshold=0))
    return grid.tobytes(), len(grid.getbands())


def sample_image(source, fast: bool = True) -> ImageSample:
    """
    Decode an image and sample its dominant color and 3x2 grid.

    Args:
        source: File path, raw bytes, or a binary file object
        fast: Shrink into a FAST_MODE_SIZE box first (never enlarges)
    """
    with open_image(source) as original:
        img = _normalize(original)

        try:
            if fast:
                img.thumbnail((FAST_MODE_SIZE, FAST_MODE_SIZE), Image.Resampling.LANCZOS)

            dominant = dominant_color(np.asarray(img))
            grid, channels = resample_grid(img)

            return ImageSample(dominant=dominant, grid=grid, channels=channels, size=img.size)
        finally:
            if img is not original:
                img.close()


class PillowSampler:
    """ImageSampler backed by Pillow; decoding runs in a worker thread."""

    async def sample(self, source, *, fast: bool = True) -> ImageSample:
        return await asyncio.to_thread(sample_image, source, fast)
