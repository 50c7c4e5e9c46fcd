"""Tests for luminance and sRGB → Oklab conversion."""

import numpy as np
import pytest

from color_space import (
    OklabColor,
    RgbColor,
    color_luminance,
    color_to_oklab,
    luminance,
    rgb_to_oklab,
    srgb_to_linear,
)


class TestLuminance:

    def test_black_is_zero(self):
        assert color_luminance(RgbColor(0, 0, 0)) == 0.0

    def test_white_is_one(self):
        assert color_luminance(RgbColor(255, 255, 255)) == pytest.approx(1.0)

    def test_uses_encoded_channel_ratios(self):
        # No gamma decoding: mid gray stays at its channel ratio
        assert color_luminance(RgbColor(128, 128, 128)) == pytest.approx(128 / 255)

    def test_channel_weights(self):
        assert color_luminance(RgbColor(255, 0, 0)) == pytest.approx(0.2126)
        assert color_luminance(RgbColor(0, 255, 0)) == pytest.approx(0.7152)
        assert color_luminance(RgbColor(0, 0, 255)) == pytest.approx(0.0722)

    def test_vectorized_over_rows(self):
        rgb = np.array([[0, 0, 0], [255, 255, 255], [255, 0, 0]], dtype=np.uint8)
        result = luminance(rgb)
        assert result.shape == (3,)
        assert result == pytest.approx([0.0, 1.0, 0.2126])


class TestSrgbToLinear:

    def test_linear_segment_below_threshold(self):
        assert srgb_to_linear(np.array([0.04045]))[0] == pytest.approx(0.04045 / 12.92)

    def test_power_segment_above_threshold(self):
        assert srgb_to_linear(np.array([0.5]))[0] == pytest.approx(((0.5 + 0.055) / 1.055) ** 2.4)

    def test_endpoints(self):
        assert srgb_to_linear(np.array([0.0, 1.0])) == pytest.approx([0.0, 1.0])


class TestRgbToOklab:

    def test_black(self):
        assert color_to_oklab(RgbColor(0, 0, 0)) == OklabColor(0.0, 0.0, 0.0)

    def test_white(self):
        L, a, b = color_to_oklab(RgbColor(255, 255, 255))
        assert L == pytest.approx(1.0, abs=1e-6)
        assert a == pytest.approx(0.0, abs=1e-6)
        assert b == pytest.approx(0.0, abs=1e-6)

    def test_pure_red(self):
        L, a, b = color_to_oklab(RgbColor(255, 0, 0))
        assert L == pytest.approx(0.627955, abs=1e-4)
        assert a == pytest.approx(0.224863, abs=1e-4)
        assert b == pytest.approx(0.125846, abs=1e-4)

    def test_achromatic_has_no_chroma(self):
        values = np.arange(0, 256, 5)
        grays = np.repeat(values[:, None], 3, axis=1)
        lab = rgb_to_oklab(grays)
        assert np.abs(lab[:, 1]).max() < 1e-6
        assert np.abs(lab[:, 2]).max() < 1e-6

    def test_achromatic_lightness_is_monotonic(self):
        grays = np.repeat(np.arange(256)[:, None], 3, axis=1)
        lightness = rgb_to_oklab(grays)[:, 0]
        assert np.all(np.diff(lightness) > 0)

    def test_mid_gray_lightness(self):
        L, _, _ = color_to_oklab(RgbColor(128, 128, 128))
        assert L == pytest.approx(0.59987, abs=1e-4)

    def test_scalar_helper_matches_vectorized(self):
        colors = np.array([[12, 200, 77], [255, 128, 0], [3, 3, 250]])
        lab = rgb_to_oklab(colors)
        for row, expected in zip(colors, lab):
            assert tuple(color_to_oklab(RgbColor(*row))) == pytest.approx(tuple(expected), rel=1e-12)

    def test_output_shape(self):
        assert rgb_to_oklab(RgbColor(10, 20, 30)).shape == (1, 3)
        assert rgb_to_oklab(np.zeros((7, 3), dtype=np.uint8)).shape == (7, 3)
