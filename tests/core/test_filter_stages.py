"""Tests for the individual filter stages and their parameter math."""

from __future__ import annotations

import numpy as np
import pytest
from PIL import Image

from iPortrait.core.filters.algorithms import (
    brightness_lut,
    contrast_lut,
    focus_alpha,
    focus_radii,
    saturation_matrix,
    smoothing_strength,
    smoothing_weights,
)
from iPortrait.core.filters.compositing import apply_background_blur
from iPortrait.core.filters.jit_executor import apply_smoothing
from iPortrait.core.filters.numpy_executor import apply_saturation, radial_focus_mask
from iPortrait.core.filters.pillow_executor import (
    acquire_surface,
    apply_brightness,
    apply_contrast,
    gaussian_blur,
)
from iPortrait.errors import SurfaceAcquisitionError


def _local_variance(pixels: np.ndarray, radius: int = 2) -> float:
    """Mean variance of the red channel over interior square windows."""

    red = pixels[..., 0].astype(np.float64)
    height, width = red.shape
    values = []
    for y in range(radius, height - radius, radius * 2 + 1):
        for x in range(radius, width - radius, radius * 2 + 1):
            window = red[y - radius : y + radius + 1, x - radius : x + radius + 1]
            values.append(window.var())
    return float(np.mean(values))


@pytest.mark.parametrize(
    ("value", "expected"),
    [(0.0, 1), (0.1, 1), (0.2, 2), (0.5, 3), (0.99, 5), (1.0, 6)],
)
def test_smoothing_strength(value, expected) -> None:
    assert smoothing_strength(value) == expected


def test_smoothing_weights_floor_original_weight() -> None:
    assert smoothing_weights(0.5) == pytest.approx((0.55, 0.45))
    assert smoothing_weights(1.0) == pytest.approx((0.1, 0.9))
    original, smooth = smoothing_weights(2.0)
    assert original == pytest.approx(0.05)
    assert smooth == pytest.approx(0.95)


def _smooth_in_place(pixels: np.ndarray, value: float) -> np.ndarray:
    """Plain-Python smoothing that writes each blended value straight back."""

    data = pixels.astype(np.int64)
    height, width = data.shape[:2]
    strength = smoothing_strength(value)
    original_weight, smooth_weight = smoothing_weights(value)
    for y in range(height):
        for x in range(width):
            for c in range(3):
                total = 0
                count = 0
                for sy in range(y - strength, y + strength + 1):
                    for sx in range(x - strength, x + strength + 1):
                        if 0 <= sx < width and 0 <= sy < height:
                            total += int(data[sy, sx, c])
                            count += 1
                blended = data[y, x, c] * original_weight + (total / count) * smooth_weight
                data[y, x, c] = min(255, int(np.floor(blended + 0.5)))
    return data.astype(np.uint8)


@pytest.mark.parametrize("value", [0.3, 0.5, 1.0])
def test_smoothing_blends_in_raster_order(noise_raster, value) -> None:
    raster = noise_raster(9, 7)
    result = np.array(apply_smoothing(raster.to_image(), value))

    np.testing.assert_array_equal(result, _smooth_in_place(raster.pixels, value))


def test_smoothing_windows_see_already_blended_pixels(noise_raster) -> None:
    raster = noise_raster(9, 7)
    value = 0.5
    result = np.array(apply_smoothing(raster.to_image(), value)).astype(np.int64)

    # The last pixel's window covers pixels blended earlier in the pass, so a
    # mean taken over the untouched source gives a different answer somewhere.
    source = raster.pixels.astype(np.float64)
    strength = smoothing_strength(value)
    original_weight, smooth_weight = smoothing_weights(value)
    snapshot_based = np.empty_like(result[..., :3])
    for y in range(7):
        for x in range(9):
            y0, y1 = max(0, y - strength), min(7, y + strength + 1)
            x0, x1 = max(0, x - strength), min(9, x + strength + 1)
            for c in range(3):
                mean = source[y0:y1, x0:x1, c].mean()
                snapshot_based[y, x, c] = np.floor(
                    source[y, x, c] * original_weight + mean * smooth_weight + 0.5
                )
    assert not np.array_equal(result[..., :3], snapshot_based)
    assert np.array_equal(result[..., 3], raster.pixels[..., 3])


def test_smoothing_zero_is_identity(noise_raster) -> None:
    image = noise_raster().to_image()
    assert apply_smoothing(image, 0.0) is image


def test_smoothing_reduces_local_variance_monotonically(noise_raster) -> None:
    raster = noise_raster(60, 60)
    variances = [_local_variance(raster.pixels)]
    for value in (0.2, 0.5, 0.8, 1.0):
        variances.append(_local_variance(np.array(apply_smoothing(raster.to_image(), value))))

    assert all(later < earlier for earlier, later in zip(variances, variances[1:]))


def test_smoothing_keeps_flat_image_flat(solid_raster) -> None:
    raster = solid_raster(12, 12, (40, 80, 120, 200))
    result = np.array(apply_smoothing(raster.to_image(), 1.0))
    assert np.array_equal(result, raster.pixels)


def test_brightness_lut_is_linear_gain_with_clamp() -> None:
    lut = brightness_lut(0.2)
    assert lut[0] == 0
    assert lut[100] == 120
    assert lut[255] == 255
    assert brightness_lut(-0.5)[200] == 100


def test_contrast_lut_pivots_on_mid_grey() -> None:
    lut = contrast_lut(0.5)
    assert lut[0] == 0  # clamped
    assert lut[255] == 255
    assert abs(lut[128] - 128) <= 1
    assert lut[64] < 64 and lut[192] > 192
    flat = contrast_lut(-0.5)
    assert flat[0] == 64 and flat[255] == 191


def test_brightness_and_contrast_leave_alpha_alone() -> None:
    image = Image.new("RGBA", (2, 2), (100, 150, 200, 77))
    assert apply_brightness(image, 0.2).getpixel((0, 0)) == (120, 180, 240, 77)
    assert apply_contrast(image, -0.5).getpixel((1, 1))[3] == 77


def test_saturation_matrix_identity_and_grayscale() -> None:
    np.testing.assert_allclose(saturation_matrix(0.0), np.eye(3), atol=1e-6)
    gray = saturation_matrix(-1.0)
    np.testing.assert_allclose(gray[0], gray[1])
    np.testing.assert_allclose(gray[1], gray[2])
    np.testing.assert_allclose(gray.sum(axis=1), np.ones(3), atol=1e-6)


def test_apply_saturation_minus_one_desaturates(noise_raster) -> None:
    raster = noise_raster()
    result = np.array(apply_saturation(raster.to_image(), -1.0)).astype(np.int16)

    assert np.all(np.abs(result[..., 0] - result[..., 1]) <= 1)
    assert np.all(np.abs(result[..., 1] - result[..., 2]) <= 1)
    luminance = raster.pixels[..., :3].astype(np.float32) @ np.array([0.213, 0.715, 0.072])
    assert np.all(np.abs(result[..., 0] - luminance) <= 1.0)
    assert np.array_equal(result[..., 3], raster.pixels[..., 3])


def test_gaussian_blur_zero_radius_returns_input() -> None:
    image = Image.new("RGBA", (4, 4))
    assert gaussian_blur(image, 0) is image


def test_gaussian_blur_spreads_a_point(solid_raster) -> None:
    image = solid_raster(21, 21, (0, 0, 0, 255)).to_image()
    image.putpixel((10, 10), (255, 255, 255, 255))
    blurred = np.array(gaussian_blur(image, 2.0))
    assert blurred[10, 10, 0] < 255
    assert blurred[10, 12, 0] > 0
    assert np.all(blurred[..., 3] == 255)


def test_focus_alpha_profile() -> None:
    inner, outer = focus_radii(100, 200)
    assert inner == pytest.approx(21.0)
    assert outer == pytest.approx(49.0)

    span = outer - inner
    distances = np.array(
        [0.0, inner, inner + 0.7 * span, inner + 0.85 * span, outer, outer + 10.0],
        dtype=np.float32,
    )
    alpha = focus_alpha(distances, inner, outer)
    np.testing.assert_allclose(alpha, [1.0, 1.0, 1.0, 0.5, 0.0, 0.0], atol=1e-4)


def test_radial_focus_mask_is_opaque_at_centre_and_clear_at_corners() -> None:
    mask = np.array(radial_focus_mask(80, 60))
    assert mask.shape == (60, 80)
    assert mask[30, 40] == 255
    assert mask[0, 0] == 0 and mask[59, 79] == 0


def test_background_blur_keeps_centre_sharp(noise_raster) -> None:
    raster = noise_raster(80, 80)
    result = np.array(apply_background_blur(raster.to_image(), 0.8)).astype(np.int16)
    source = raster.pixels.astype(np.int16)

    centre_diff = np.abs(result[36:44, 36:44, :3] - source[36:44, 36:44, :3]).mean()
    corner_diff = np.abs(result[:8, :8, :3] - source[:8, :8, :3]).mean()

    assert centre_diff == 0
    assert corner_diff > 10
    assert np.all(result[..., 3] == 255)


def test_background_blur_zero_is_noop(noise_raster) -> None:
    image = noise_raster().to_image()
    assert apply_background_blur(image, 0.0) is image


def test_acquire_surface_rejects_empty_size() -> None:
    with pytest.raises(SurfaceAcquisitionError):
        acquire_surface((0, 10))


def test_acquire_surface_copies_source() -> None:
    source = Image.new("RGB", (3, 3), (1, 2, 3))
    surface = acquire_surface((3, 3), source)
    assert surface.mode == "RGBA"
    assert surface.getpixel((2, 2)) == (1, 2, 3, 255)
