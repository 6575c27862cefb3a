"""Pillow-based whole-image stages.

Brightness and contrast are applied through Pillow's C-optimised lookup
tables, blurs through its Gaussian filter.  Every working or scratch buffer
is allocated through :func:`acquire_surface` so allocation failures surface
as :class:`~iPortrait.errors.SurfaceAcquisitionError`.
"""

from __future__ import annotations

from collections.abc import Sequence

from PIL import Image, ImageFilter

from ...errors import SurfaceAcquisitionError
from .algorithms import brightness_lut, contrast_lut

_IDENTITY_TABLE = list(range(256))


def acquire_surface(size: tuple[int, int], source: Image.Image | None = None) -> Image.Image:
    """Return a new RGBA surface of *size*, seeded with *source* when given."""

    width, height = size
    if width <= 0 or height <= 0:
        raise SurfaceAcquisitionError(f"Cannot allocate a {width}x{height} surface")
    try:
        surface = Image.new("RGBA", (width, height), (0, 0, 0, 0))
        if source is not None:
            surface.paste(source if source.mode == "RGBA" else source.convert("RGBA"), (0, 0))
    except (MemoryError, ValueError) as exc:
        raise SurfaceAcquisitionError(
            f"Failed to allocate a {width}x{height} drawing surface"
        ) from exc
    return surface


def apply_lut(image: Image.Image, lut: Sequence[int]) -> Image.Image:
    """Apply *lut* to the RGB channels of *image*, preserving alpha."""

    table: list[int] = list(lut) * 3 + _IDENTITY_TABLE
    return image.point(table)


def apply_brightness(image: Image.Image, value: float) -> Image.Image:
    return apply_lut(image, brightness_lut(value))


def apply_contrast(image: Image.Image, value: float) -> Image.Image:
    return apply_lut(image, contrast_lut(value))


def gaussian_blur(image: Image.Image, radius: float) -> Image.Image:
    """Blur *image* with a Gaussian of standard deviation *radius* pixels.

    The blur runs on premultiplied alpha so transparent pixels do not bleed
    their (meaningless) colour into neighbours.
    """

    if radius <= 0:
        return image
    premultiplied = image.convert("RGBa")
    blurred = premultiplied.filter(ImageFilter.GaussianBlur(radius))
    return blurred.convert("RGBA")


__all__ = [
    "acquire_surface",
    "apply_brightness",
    "apply_contrast",
    "apply_lut",
    "gaussian_blur",
]
