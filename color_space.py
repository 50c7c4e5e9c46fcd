"""
Color conversions used by the placeholder encoder.

sRGB (0-255) → Oklab, and a cheap relative luminance taken straight from the
encoded channel ratios.
"""

from typing import NamedTuple

import numpy as np


class RgbColor(NamedTuple):
    r: int
    g: int
    b: int


class OklabColor(NamedTuple):
    l: float
    a: float
    b: float


def _as_rows(rgb) -> np.ndarray:
    """Coerce a single color or an (n, 3) array to float64 rows normalized to [0, 1]."""
    rows = np.asarray(rgb, dtype=np.float64).reshape(-1, 3)
    return rows / 255.0


def luminance(rgb) -> np.ndarray:
    """
    BT.709 luminance of RGB array (0-255), without gamma decoding.

    Returns:
        array of shape (n,)
    """
    rgb_norm = _as_rows(rgb)
    r, g, b = rgb_norm[:, 0], rgb_norm[:, 1], rgb_norm[:, 2]
    # Encoded channel ratios, not linear light
    return 0.2126 * r + 0.7152 * g + 0.0722 * b


def srgb_to_linear(rgb_norm: np.ndarray) -> np.ndarray:
    """Gamma-decode normalized sRGB values."""
    mask = rgb_norm > 0.04045
    return np.where(mask, ((rgb_norm + 0.055) / 1.055) ** 2.4, rgb_norm / 12.92)


def rgb_to_oklab(rgb) -> np.ndarray:
    """
    Convert RGB array (0-255) to Oklab.

    Args:
        rgb: A single color or array of shape (n, 3)

    Returns:
        array of shape (n, 3) with columns [L, a, b]
    """
    rgb_linear = srgb_to_linear(_as_rows(rgb))
    r, g, b = rgb_linear[:, 0], rgb_linear[:, 1], rgb_linear[:, 2]

    # Linear RGB to LMS
    l = 0.4122214708 * r + 0.5363325363 * g + 0.0514459929 * b
    m = 0.2119034982 * r + 0.6806995451 * g + 0.1073969566 * b
    s = 0.0883024619 * r + 0.2817188376 * g + 0.6299787005 * b

    l_ = np.cbrt(l)
    m_ = np.cbrt(m)
    s_ = np.cbrt(s)

    L = 0.2104542553 * l_ + 0.7936177850 * m_ - 0.0040720468 * s_
    a = 1.9779984951 * l_ - 2.4285922050 * m_ + 0.4505937099 * s_
    b_val = 0.0259040371 * l_ + 0.7827717662 * m_ - 0.8086757660 * s_

    return np.column_stack([L, a, b_val])


def color_luminance(color: RgbColor) -> float:
    return float(luminance(color)[0])


def color_to_oklab(color: RgbColor) -> OklabColor:
    """Convert one RgbColor to an OklabColor."""
    L, a, b = rgb_to_oklab(color)[0]
    return OklabColor(float(L), float(a), float(b))
