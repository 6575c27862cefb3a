"""Render entry points tying the individual filter stages together."""

from __future__ import annotations

import io
import logging
import time
from typing import Callable, Mapping, Optional

from PIL import Image

from ...config import JPEG_QUALITY, NEGLIGIBLE_FILTER_VALUE, RENDER_MIME_TYPE
from ..filter_state import FILTER_SPECS
from ..raster import RenderResult, SourceRaster, is_usable
from .algorithms import blur_radius
from .compositing import apply_background_blur
from .jit_executor import apply_smoothing
from .numpy_executor import apply_saturation
from .pillow_executor import acquire_surface, apply_brightness, apply_contrast, gaussian_blur

_LOGGER = logging.getLogger(__name__)

Stage = Callable[[Image.Image, float], Image.Image]


def _apply_blur(image: Image.Image, value: float) -> Image.Image:
    if value <= 0:
        return image
    return gaussian_blur(image, blur_radius(value))


# Stages run in exactly this order whatever order the caller's mapping uses.
FILTER_STAGES: tuple[tuple[str, Stage], ...] = (
    ("smoothing", apply_smoothing),
    ("brightness", apply_brightness),
    ("contrast", apply_contrast),
    ("blur", _apply_blur),
    ("saturation", apply_saturation),
    ("backgroundBlur", apply_background_blur),
)


def is_negligible(name: str, value: float) -> bool:
    """Return ``True`` when the stage *name* would not change the image."""

    spec = FILTER_SPECS.get(name)
    if spec is not None and spec.kind == "gain":
        return value == spec.neutral
    return abs(value) < NEGLIGIBLE_FILTER_VALUE


def apply_filters(
    image: Image.Image,
    filters: Mapping[str, float],
    *,
    stages: Optional[tuple[tuple[str, Stage], ...]] = None,
) -> Image.Image:
    """Run every non-negligible stage over a working copy of *image*.

    Exceptions propagate; :func:`render_filters` is the boundary that turns
    them into an absent result.
    """

    if stages is None:
        stages = FILTER_STAGES
    working = acquire_surface(image.size, image)

    known = {name for name, _ in stages}
    for name in filters:
        if name not in known:
            _LOGGER.warning("Unknown filter type %r; skipping", name)

    for name, stage in stages:
        if name not in filters:
            continue
        value = float(filters[name])
        if is_negligible(name, value):
            continue
        started = time.perf_counter()
        working = stage(working, value)
        if working.mode != "RGBA":
            working = working.convert("RGBA")
        _LOGGER.debug(
            "Applied %s=%.3f in %.1f ms", name, value, (time.perf_counter() - started) * 1000.0
        )
    return working


def encode_image(image: Image.Image, *, quality: int = JPEG_QUALITY) -> bytes:
    """Encode *image* as JPEG, flattening transparency onto opaque black."""

    if image.mode == "RGBA":
        backdrop = acquire_surface(image.size)
        backdrop.paste((0, 0, 0, 255), (0, 0, image.width, image.height))
        image = Image.alpha_composite(backdrop, image)
    buffer = io.BytesIO()
    image.convert("RGB").save(buffer, format="JPEG", quality=quality)
    return buffer.getvalue()


def render_filters(
    source: Optional[SourceRaster],
    filters: Mapping[str, float],
) -> Optional[RenderResult]:
    """Apply *filters* to *source* and return the encoded result.

    Returns ``None`` when there is nothing to render or when any stage fails;
    a partially filtered frame is never returned.
    """

    if not is_usable(source):
        _LOGGER.debug("Skipping render without a usable source raster")
        return None

    started = time.perf_counter()
    try:
        filtered = apply_filters(source.to_image(), filters)
        payload = encode_image(filtered)
    except Exception:
        _LOGGER.exception("Error during image processing")
        return None

    _LOGGER.debug(
        "Rendered %dx%d frame in %.1f ms",
        source.width,
        source.height,
        (time.perf_counter() - started) * 1000.0,
    )
    return RenderResult(
        payload=payload,
        width=source.width,
        height=source.height,
        mime_type=RENDER_MIME_TYPE,
    )


__all__ = [
    "FILTER_STAGES",
    "apply_filters",
    "encode_image",
    "is_negligible",
    "render_filters",
]
