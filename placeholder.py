#!/usr/bin/env python3
"""
Compact image placeholder codes.

Packs an image's dominant color (Oklab) and a 3x2 brightness grid into one
signed 20-bit integer that a client can expand into a blurred preview.

Bit layout, most significant first:

    19-8   six 2-bit brightness levels, row-major (cell 0 in bits 19-18)
    7-6    Oklab L   (2 bits)
    5-3    Oklab a   (3 bits)
    2-0    Oklab b   (3 bits)

The unsigned value is offset by -2^19 so the code stays in a small signed
range, e.g. for use as a CSS integer.
"""

from dataclasses import dataclass
from typing import Optional

import numpy as np

from color_space import RgbColor, luminance, rgb_to_oklab
from image_sampler import GRID_COLS, GRID_ROWS, ImageSample, ImageSampler, PillowSampler
from quantizer import quantize


# =============================================================================
# Constants
# =============================================================================

LIGHTNESS_RANGE = (0.2, 0.8)
CHROMA_RANGE = (-0.35, 0.35)
BRIGHTNESS_RANGE = (0.2, 0.8)

LIGHTNESS_BITS = 2
CHROMA_BITS = 3
BRIGHTNESS_BITS = 2

CELL_COUNT = GRID_COLS * GRID_ROWS

B_SHIFT = 0
A_SHIFT = B_SHIFT + CHROMA_BITS
L_SHIFT = A_SHIFT + CHROMA_BITS
BRIGHTNESS_SHIFT = L_SHIFT + LIGHTNESS_BITS
CODE_BITS = BRIGHTNESS_SHIFT + CELL_COUNT * BRIGHTNESS_BITS  # 20

CODE_OFFSET = 2 ** (CODE_BITS - 1)
MIN_CODE = -CODE_OFFSET
MAX_CODE = CODE_OFFSET - 1


@dataclass(frozen=True)
class PlaceholderOptions:
    fast: bool = True  # Downscale before sampling


@dataclass(frozen=True)
class PlaceholderFields:
    """Quantized fields of a placeholder code."""
    brightness: tuple  # CELL_COUNT levels, row-major
    l: int
    a: int
    b: int


# =============================================================================
# Encoding
# =============================================================================

def grid_brightness(grid: bytes, channels: int) -> tuple:
    """
    Quantized brightness of each grid cell, row-major.

    Channels past the third (alpha, padding) are ignored.
    """
    if channels < 3:
        raise ValueError(f"Grid needs at least 3 channels per pixel, got {channels}")
    needed = CELL_COUNT * channels
    if len(grid) < needed:
        raise ValueError(f"Grid buffer has {len(grid)} bytes, expected {needed}")

    pixels = np.frombuffer(grid, dtype=np.uint8, count=needed).reshape(CELL_COUNT, channels)
    levels = quantize(luminance(pixels[:, :3]), *BRIGHTNESS_RANGE, BRIGHTNESS_BITS)
    return tuple(int(level) for level in levels)


def encode_fields(dominant: RgbColor, grid: bytes, channels: int) -> PlaceholderFields:
    """Quantize the dominant color and grid into placeholder fields."""
    L, a, b = rgb_to_oklab(dominant)[0]

    return PlaceholderFields(
        brightness=grid_brightness(grid, channels),
        l=quantize(L, *LIGHTNESS_RANGE, LIGHTNESS_BITS),
        a=quantize(a, *CHROMA_RANGE, CHROMA_BITS),
        b=quantize(b, *CHROMA_RANGE, CHROMA_BITS),
    )


def pack_fields(fields: PlaceholderFields) -> int:
    """Pack fields into a signed placeholder code."""
    brightness_mask = (1 << BRIGHTNESS_BITS) - 1
    value = 0

    for i, level in enumerate(fields.brightness):
        shift = BRIGHTNESS_SHIFT + (CELL_COUNT - 1 - i) * BRIGHTNESS_BITS
        value |= (level & brightness_mask) << shift

    value |= (fields.l & ((1 << LIGHTNESS_BITS) - 1)) << L_SHIFT
    value |= (fields.a & ((1 << CHROMA_BITS) - 1)) << A_SHIFT
    value |= (fields.b & ((1 << CHROMA_BITS) - 1)) << B_SHIFT

    return value - CODE_OFFSET


def unpack_placeholder(code: int) -> PlaceholderFields:
    """
    Split a placeholder code back into its quantized fields.

    Raises:
        ValueError: If code is outside [MIN_CODE, MAX_CODE]
    """
    if not MIN_CODE <= code <= MAX_CODE:
        raise ValueError(f"Placeholder code {code} outside [{MIN_CODE}, {MAX_CODE}]")

    value = code + CODE_OFFSET
    brightness_mask = (1 << BRIGHTNESS_BITS) - 1

    brightness = tuple(
        (value >> (BRIGHTNESS_SHIFT + (CELL_COUNT - 1 - i) * BRIGHTNESS_BITS)) & brightness_mask
        for i in range(CELL_COUNT)
    )

    return PlaceholderFields(
        brightness=brightness,
        l=(value >> L_SHIFT) & ((1 << LIGHTNESS_BITS) - 1),
        a=(value >> A_SHIFT) & ((1 << CHROMA_BITS) - 1),
        b=(value >> B_SHIFT) & ((1 << CHROMA_BITS) - 1),
    )


def encode_placeholder(dominant: RgbColor, grid: bytes, channels: int) -> int:
    return pack_fields(encode_fields(dominant, grid, channels))


def encode_sample(sample: ImageSample) -> int:
    return encode_placeholder(sample.dominant, sample.grid, sample.channels)


async def generate_placeholder(source, options: Optional[PlaceholderOptions] = None,
                               *, sampler: Optional[ImageSampler] = None) -> int:
    """
    Generate the placeholder code for an image.

    Args:
        source: File path, raw bytes, or a binary file object
        options: Encoding options (fast mode on by default)
        sampler: Decode-and-sample backend, PillowSampler by default

    Returns:
        Signed code in [MIN_CODE, MAX_CODE]

    Raises:
        Whatever the sampler raises for unreadable input, unchanged.
    """
    if options is None:
        options = PlaceholderOptions()
    if sampler is None:
        sampler = PillowSampler()

    sample = await sampler.sample(source, fast=options.fast)
    return encode_sample(sample)


def css_declaration(code: int) -> str:
    return f"--lqip:{code}"


def format_fields(fields: PlaceholderFields) -> str:
    """Human-readable field dump for the CLI."""
    rows = [
        " ".join(str(level) for level in fields.brightness[row * GRID_COLS:(row + 1) * GRID_COLS])
        for row in range(GRID_ROWS)
    ]
    lines = [f"  Oklab: L={fields.l} a={fields.a} b={fields.b}", "  Brightness:"]
    lines.extend(f"    {row}" for row in rows)
    return "\n".join(lines)


# =============================================================================
# CLI
# =============================================================================

if __name__ == '__main__':
    import argparse
    import asyncio
    import sys
    from pathlib import Path

    parser = argparse.ArgumentParser(
        description='Compute the placeholder code of an image.'
    )
    parser.add_argument(
        '--input', '-i',
        required=True,
        help='Path to the image file'
    )
    parser.add_argument(
        '--no-fast',
        action='store_true',
        help='Sample the full-resolution image instead of a 64px thumbnail'
    )
    parser.add_argument(
        '--css',
        action='store_true',
        help='Print as a CSS custom property declaration'
    )
    parser.add_argument(
        '--fields',
        action='store_true',
        help='Also print the decoded quantized fields'
    )

    args = parser.parse_args()
    image_path = Path(args.input)
    options = PlaceholderOptions(fast=not args.no_fast)

    try:
        code = asyncio.run(generate_placeholder(image_path, options))
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        print(f"Error processing image: {e}", file=sys.stderr)
        sys.exit(1)

    print(css_declaration(code) if args.css else code)

    if args.fields:
        print(format_fields(unpack_placeholder(code)))
