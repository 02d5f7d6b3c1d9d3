"""Unit tests for the OCR enhancement pipeline: stretch, clip, sharpen."""
import dataclasses

import numpy as np
import pytest

from docintake.services.image_enhance import (
    EnhancementConfig,
    clip_levels,
    convolve,
    enhance_for_ocr,
    luminance,
    normalize_luminance,
    sharpen,
    stretch_histogram,
)
from docintake.services.pixel_buffer import PixelBuffer

SHARPEN = (0, -1, 0, -1, 5, -1, 0, -1, 0)


def _gray_buffer(values, alpha=255):
    """Buffer whose R=G=B=value per pixel."""
    v = np.asarray(values, dtype=np.uint8)
    rgba = np.stack([v, v, v, np.full_like(v, alpha)], axis=2)
    return PixelBuffer.from_array(rgba)


def test_luminance_uses_bt709_weights():
    buf = PixelBuffer.from_array(np.array([[[255, 0, 0], [0, 255, 0], [0, 0, 255]]], dtype=np.uint8))
    gray = luminance(buf)
    assert gray[0, 0] == pytest.approx(0.2126 * 255)
    assert gray[0, 1] == pytest.approx(0.7152 * 255)
    assert gray[0, 2] == pytest.approx(0.0722 * 255)


def test_stretch_maps_min_to_0_max_to_255_and_mid_linearly():
    out = stretch_histogram(np.array([[50.0, 125.0, 200.0]]))
    assert out[0, 0] == 0.0
    assert out[0, 1] == pytest.approx(127.5)
    assert out[0, 2] == 255.0


def test_stretch_flat_image_maps_to_zero():
    out = stretch_histogram(np.full((3, 3), 180.0))
    assert np.all(out == 0.0)


def test_clip_forces_extremes_and_keeps_middle():
    out = clip_levels(np.array([0.0, 49.9, 50.0, 120.0, 200.0, 200.1, 250.0]), low=50, high=200)
    assert out.tolist() == [0.0, 0.0, 50.0, 120.0, 200.0, 255.0, 255.0]


def test_clip_respects_configured_thresholds():
    out = clip_levels(np.array([30.0, 100.0, 180.0]), low=40, high=150)
    assert out.tolist() == [0.0, 100.0, 255.0]


def test_normalize_luminance_stretches_buffer():
    buf = _gray_buffer([[50, 125, 200]])
    out = normalize_luminance(buf)
    r = out.samples[0, :, 0].astype(int)
    assert r[0] == 0
    assert r[2] == 255
    assert abs(r[1] - 127.5) <= 1
    # gray written to all three channels
    assert np.array_equal(out.samples[:, :, 0], out.samples[:, :, 1])
    assert np.array_equal(out.samples[:, :, 1], out.samples[:, :, 2])


def test_normalize_with_clip_pushes_light_and_dark_values():
    # after stretch: 0, 51, 204, 255 → clip: 0, 51, 255, 255
    buf = _gray_buffer([[0, 51, 204, 255]])
    out = normalize_luminance(buf, EnhancementConfig())
    assert out.samples[0, :, 0].tolist() == [0, 51, 255, 255]


def test_normalize_keeps_alpha_and_does_not_mutate_input():
    buf = _gray_buffer([[10, 90], [170, 250]], alpha=77)
    before = buf.samples.copy()
    out = normalize_luminance(buf, EnhancementConfig())
    assert np.array_equal(buf.samples, before)
    assert np.all(out.alpha == 77)
    assert out.samples is not buf.samples


def test_convolve_flat_interior_pixel_unchanged():
    rgb = np.full((5, 5, 3), 100.0)
    out = convolve(rgb, SHARPEN)
    assert np.all(out[1:4, 1:4] == 100.0)


def test_convolve_skips_out_of_bounds_taps():
    rgb = np.full((5, 5, 3), 100.0)
    out = convolve(rgb, SHARPEN)
    assert out[0, 2, 0] == 200.0  # one neighbour missing: 5c - 3c
    assert out[0, 0, 0] == 300.0  # corner: 5c - 2c


def test_convolve_isolated_bright_pixel():
    rgb = np.zeros((5, 5, 3))
    rgb[2, 2] = 100.0
    out = convolve(rgb, SHARPEN)
    assert out[2, 2, 0] == 500.0
    for y, x in ((1, 2), (3, 2), (2, 1), (2, 3)):
        assert out[y, x, 0] == -100.0
    # corners of the kernel are 0
    assert out[1, 1, 0] == 0.0


def test_sharpen_clamps_and_passes_alpha_through():
    buf = _gray_buffer(np.where(np.arange(25).reshape(5, 5) == 12, 100, 0), alpha=128)
    out = sharpen(buf, SHARPEN)
    assert out.samples[2, 2, 0] == 255
    assert out.samples[1, 2, 0] == 0
    assert np.all(out.alpha == 128)


def test_convolve_rejects_non_square_kernel():
    with pytest.raises(ValueError):
        convolve(np.zeros((3, 3, 3)), (1, 2, 3, 4))


def test_enhance_for_ocr_keeps_dimensions_and_returns_grayscale():
    rng = np.random.default_rng(7)
    rgb = rng.integers(0, 256, size=(12, 9, 3), dtype=np.uint8)
    buf = PixelBuffer.from_array(rgb)
    out = enhance_for_ocr(buf)
    assert (out.width, out.height) == (9, 12)
    assert out.samples.shape == (12, 9, 4)
    assert np.array_equal(out.samples[:, :, 0], out.samples[:, :, 2])
    assert np.all(out.alpha == 255)


def test_pixel_buffer_dimensions_are_fixed():
    buf = PixelBuffer.from_array(np.zeros((2, 3, 3), dtype=np.uint8))
    assert (buf.width, buf.height) == (3, 2)
    assert np.all(buf.alpha == 255)
    with pytest.raises(dataclasses.FrozenInstanceError):
        buf.width = 10
    with pytest.raises(ValueError):
        PixelBuffer(width=4, height=2, samples=np.zeros((2, 3, 4), dtype=np.uint8))


def test_convolve_gray_plane_matches_each_channel():
    rng = np.random.default_rng(3)
    plane = rng.integers(0, 256, size=(6, 7)).astype(np.float64)
    stacked = np.repeat(plane[:, :, None], 3, axis=2)
    out_plane = convolve(plane, SHARPEN)
    out_stacked = convolve(stacked, SHARPEN)
    assert out_plane.shape == (6, 7)
    for c in range(3):
        assert np.array_equal(out_stacked[:, :, c], out_plane)


def test_enhance_for_ocr_matches_stage_by_stage_pipeline():
    rng = np.random.default_rng(11)
    rgba = rng.integers(0, 256, size=(10, 8, 4), dtype=np.uint8)
    buf = PixelBuffer.from_array(rgba)
    config = EnhancementConfig()
    expected = sharpen(normalize_luminance(buf, config), config.sharpen_kernel)
    out = enhance_for_ocr(buf, config)
    assert np.array_equal(out.samples, expected.samples)
