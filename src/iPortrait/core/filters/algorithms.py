"""Pure parameter math for the filter stages.

Nothing in this module touches pixels.  The executors turn the values
computed here into lookup tables, colour matrices, kernels and masks.
"""

from __future__ import annotations

import math

import numpy as np

# Rec. 709 luminance weights as rounded by the saturate() colour matrix.
LUMA_R = 0.213
LUMA_G = 0.715
LUMA_B = 0.072

BLUR_RADIUS_SCALE = 8.0
BACKGROUND_BLUR_RADIUS_SCALE = 10.0

FOCUS_RADIUS_FRACTION = 0.35
FOCUS_INNER_SCALE = 0.6
FOCUS_OUTER_SCALE = 1.4
FOCUS_PLATEAU = 0.7


def smoothing_strength(value: float) -> int:
    """Return the window radius (1..6) for a smoothing *value* in ``[0, 1]``."""

    return max(1, int(math.floor(value * 5)) + 1)


def smoothing_weights(value: float) -> tuple[float, float]:
    """Return ``(original_weight, smooth_weight)`` for a smoothing *value*."""

    original_weight = max(0.05, 1.0 - value * 0.9)
    return original_weight, 1.0 - original_weight


def _to_byte(value: float) -> int:
    return int(max(0, min(255, math.floor(value * 255.0 + 0.5))))


def brightness_lut(value: float) -> list[int]:
    """Lookup table for a linear gain of ``1 + value`` on every channel level."""

    slope = 1.0 + value
    return [_to_byte((level / 255.0) * slope) for level in range(256)]


def contrast_lut(value: float) -> list[int]:
    """Lookup table stretching levels around mid-grey by ``1 + value``."""

    slope = 1.0 + value
    intercept = 0.5 - 0.5 * slope
    return [_to_byte((level / 255.0) * slope + intercept) for level in range(256)]


def saturation_matrix(value: float) -> np.ndarray:
    """Return the 3x3 saturate matrix for an amount of ``1 + value``.

    An amount of ``0`` collapses every pixel onto its luminance while ``1``
    is the identity.
    """

    s = 1.0 + value
    return np.array(
        [
            [LUMA_R + (1.0 - LUMA_R) * s, LUMA_G - LUMA_G * s, LUMA_B - LUMA_B * s],
            [LUMA_R - LUMA_R * s, LUMA_G + (1.0 - LUMA_G) * s, LUMA_B - LUMA_B * s],
            [LUMA_R - LUMA_R * s, LUMA_G - LUMA_G * s, LUMA_B + (1.0 - LUMA_B) * s],
        ],
        dtype=np.float32,
    )


def blur_radius(value: float) -> float:
    return value * BLUR_RADIUS_SCALE


def background_blur_radius(value: float) -> float:
    return value * BACKGROUND_BLUR_RADIUS_SCALE


def focus_radii(width: int, height: int) -> tuple[float, float]:
    """Return the inner and outer radius of the depth-of-field gradient."""

    focus = min(width, height) * FOCUS_RADIUS_FRACTION
    return focus * FOCUS_INNER_SCALE, focus * FOCUS_OUTER_SCALE


def focus_alpha(distance: np.ndarray, inner: float, outer: float) -> np.ndarray:
    """Map distances from the centre to mask opacity in ``[0, 1]``.

    The gradient position ``t`` runs from 0 at *inner* to 1 at *outer*.  The
    mask stays opaque up to ``t = 0.7`` and fades linearly to transparent at
    ``t = 1``.  Positions before the inner radius or past the outer radius
    take the colour of the nearest stop.
    """

    span = max(outer - inner, 1e-6)
    t = (distance - inner) / span
    ramp = (1.0 - t) / (1.0 - FOCUS_PLATEAU)
    return np.clip(ramp, 0.0, 1.0).astype(np.float32, copy=False)


__all__ = [
    "background_blur_radius",
    "blur_radius",
    "brightness_lut",
    "contrast_lut",
    "focus_alpha",
    "focus_radii",
    "saturation_matrix",
    "smoothing_strength",
    "smoothing_weights",
]
