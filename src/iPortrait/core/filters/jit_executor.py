"""JIT-accelerated smoothing kernel using Numba.

Smoothing runs in place in raster order: each window average sees the
already-blended pixels above and to the left of the current one.
"""

from __future__ import annotations

import numpy as np
from numba import jit
from PIL import Image

from .algorithms import smoothing_strength, smoothing_weights


def apply_smoothing(image: Image.Image, value: float) -> Image.Image:
    """Return a smoothed copy of the RGBA *image*.

    Every RGB channel is blended with the mean of the in-bounds pixels within
    a square window around it.  Border pixels average only the part of the
    window that lies inside the image.  Alpha is left untouched.
    """

    if value <= 0:
        return image

    strength = smoothing_strength(value)
    original_weight, smooth_weight = smoothing_weights(value)

    pixels = np.array(image, dtype=np.uint8)
    height, width = pixels.shape[:2]
    if width <= 0 or height <= 0:
        return image

    buffer = np.ascontiguousarray(pixels)
    _smooth_rgb_inplace(buffer, width, height, strength, original_weight, smooth_weight)
    return Image.fromarray(buffer, "RGBA")


@jit(nopython=True, cache=True)
def _smooth_rgb_inplace(
    buffer: np.ndarray,
    width: int,
    height: int,
    strength: int,
    original_weight: float,
    smooth_weight: float,
) -> None:
    """JIT-compiled box average blended into *buffer* pixel by pixel."""

    for y in range(height):
        y0 = max(0, y - strength)
        y1 = min(height - 1, y + strength) + 1
        for x in range(width):
            x0 = max(0, x - strength)
            x1 = min(width - 1, x + strength) + 1
            count = (y1 - y0) * (x1 - x0)
            for c in range(3):
                total = 0
                for sy in range(y0, y1):
                    for sx in range(x0, x1):
                        total += buffer[sy, sx, c]
                mean = total / count
                blended = buffer[y, x, c] * original_weight + mean * smooth_weight
                # Round half up, never half to even.
                buffer[y, x, c] = np.uint8(min(255.0, np.floor(blended + 0.5)))
