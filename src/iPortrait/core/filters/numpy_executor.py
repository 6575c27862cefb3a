"""NumPy vectorised stages: colour matrices and radial masks."""

from __future__ import annotations

import numpy as np
from PIL import Image

from .algorithms import focus_alpha, focus_radii, saturation_matrix


def apply_saturation(image: Image.Image, value: float) -> Image.Image:
    """Return *image* with its saturation scaled by ``1 + value``."""

    pixels = np.array(image, dtype=np.uint8)
    if pixels.size == 0:
        return image

    rgb = pixels[..., :3].astype(np.float32)
    matrix = saturation_matrix(value)
    # Row vectors times the transposed matrix apply the matrix to every pixel.
    transformed = rgb @ matrix.T
    pixels[..., :3] = np.clip(np.rint(transformed), 0.0, 255.0).astype(np.uint8)
    return Image.fromarray(pixels, "RGBA")


def radial_focus_mask(width: int, height: int) -> Image.Image:
    """Return an ``L`` mask that is opaque around the centre of the frame.

    Distances are measured from pixel centres to the geometric centre of the
    image.
    """

    inner, outer = focus_radii(width, height)
    y = np.arange(height, dtype=np.float32) + np.float32(0.5)
    x = np.arange(width, dtype=np.float32) + np.float32(0.5)
    dy = y[:, None] - np.float32(height / 2.0)
    dx = x[None, :] - np.float32(width / 2.0)
    distance = np.sqrt(dx * dx + dy * dy)
    alpha = focus_alpha(distance, inner, outer)
    mask = np.rint(alpha * np.float32(255.0)).astype(np.uint8)
    return Image.fromarray(mask, "L")


__all__ = ["apply_saturation", "radial_focus_mask"]
