"""Depth-of-field compositing for the background blur stage."""

from __future__ import annotations

from PIL import Image, ImageChops

from .algorithms import background_blur_radius
from .numpy_executor import radial_focus_mask
from .pillow_executor import acquire_surface, gaussian_blur


def apply_background_blur(image: Image.Image, value: float) -> Image.Image:
    """Keep a sharp radial region around the centre over a blurred frame.

    This approximates a shallow depth of field; it is not lens-accurate.
    """

    if value <= 0:
        return image

    width, height = image.size
    sharp = acquire_surface((width, height), image)
    blurred = gaussian_blur(sharp, background_blur_radius(value))

    working = acquire_surface((width, height), blurred)

    # Keep the sharp pixels only where the mask is opaque.
    focus_layer = acquire_surface((width, height), sharp)
    mask = radial_focus_mask(width, height)
    focus_layer.putalpha(ImageChops.multiply(focus_layer.getchannel("A"), mask))

    return Image.alpha_composite(working, focus_layer)


__all__ = ["apply_background_blur"]
