"""Tests for clamped linear quantization."""

import numpy as np
import pytest

from quantizer import quantize


@pytest.mark.parametrize("bits", [1, 2, 3, 4, 8])
def test_domain_bounds_map_to_extreme_levels(bits):
    assert quantize(0.2, 0.2, 0.8, bits) == 0
    assert quantize(0.8, 0.2, 0.8, bits) == 2 ** bits - 1


@pytest.mark.parametrize("bits", [1, 2, 3])
def test_out_of_domain_values_saturate(bits):
    assert quantize(-5.0, -0.35, 0.35, bits) == 0
    assert quantize(5.0, -0.35, 0.35, bits) == 2 ** bits - 1


@pytest.mark.parametrize("bits", [1, 2, 3, 4])
def test_output_always_within_level_range(bits):
    values = np.linspace(-3.0, 4.0, 2001)
    levels = quantize(values, 0.0, 1.0, bits)
    assert levels.shape == values.shape
    assert levels.min() == 0
    assert levels.max() == 2 ** bits - 1


def test_levels_are_floored():
    # 0.5 * 3 = 1.5
    assert quantize(0.5, 0.0, 1.0, 2) == 1
    # 0.5 * 7 = 3.5
    assert quantize(0.0, -0.35, 0.35, 3) == 3
    assert quantize(0.99, 0.0, 1.0, 2) == 2


def test_levels_are_monotonic():
    levels = quantize(np.linspace(0.0, 1.0, 500), 0.0, 1.0, 3)
    assert np.all(np.diff(levels) >= 0)


def test_scalar_input_returns_python_int():
    assert type(quantize(0.5, 0.0, 1.0, 2)) is int
    assert type(quantize(np.float64(0.5), 0.0, 1.0, 2)) is int


def test_empty_domain_is_rejected():
    with pytest.raises(AssertionError):
        quantize(0.5, 0.3, 0.3, 2)


@pytest.mark.parametrize("bits", [53, 54, 60, 62])
def test_wide_fields_stay_within_level_range(bits):
    top = 2 ** bits - 1
    assert quantize(1.0, 0.0, 1.0, bits) == top
    assert quantize(5.0, 0.0, 1.0, bits) == top
    assert quantize(0.0, 0.0, 1.0, bits) == 0
    assert quantize(np.array([0.0, 1.0, 2.0]), 0.0, 1.0, bits).max() == top


@pytest.mark.parametrize("bits", [0, 63, 64])
def test_unsupported_widths_are_rejected(bits):
    with pytest.raises(AssertionError):
        quantize(0.5, 0.0, 1.0, bits)
