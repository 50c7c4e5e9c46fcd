"""
Clamped linear quantization of bounded real values to small bit-widths.
"""

import numpy as np

MAX_BITS = 62  # 2**63 no longer casts to int64


def quantize(value, lo: float, hi: float, bits: int):
    """
    Map a value in [lo, hi] to one of 2**bits levels.

    Values outside the domain saturate at the nearest level.

    Args:
        value: Scalar or numpy array of real values
        lo: Lower bound of the domain (maps to level 0)
        hi: Upper bound of the domain (maps to the top level)
        bits: Field width in bits, 1 to MAX_BITS

    Returns:
        int for scalar input, int64 array for array input
    """
    assert hi != lo, "quantize domain must not be empty"
    assert 0 < bits <= MAX_BITS, f"quantize width must be 1-{MAX_BITS} bits, got {bits}"

    levels = 2 ** bits - 1
    normalized = np.clip((np.asarray(value, dtype=np.float64) - lo) / (hi - lo), 0.0, 1.0)
    # float64 rounds levels up past 2**53, so clamp back to the top level
    quantized = np.minimum(np.floor(normalized * levels).astype(np.int64), levels)

    if quantized.ndim == 0:
        return int(quantized)
    return quantized
