"""Prepare rendered frames for download."""

from __future__ import annotations

import io
import logging
from pathlib import Path

from PIL import Image

from ..config import (
    DOWNLOAD_DEFAULT_STEM,
    DOWNLOAD_MAX_BYTES,
    DOWNLOAD_MAX_DIMENSION,
    DOWNLOAD_MIN_QUALITY,
    JPEG_QUALITY,
)
from .raster import RenderResult

_LOGGER = logging.getLogger(__name__)

_QUALITY_STEP = 8


def download_filename(original_name: str | None) -> str:
    """Return the file name offered for the edited image."""

    stem = Path(original_name).stem if original_name else ""
    return f"{stem or DOWNLOAD_DEFAULT_STEM}-edited.jpg"


def _encode(image: Image.Image, quality: int) -> bytes:
    buffer = io.BytesIO()
    image.save(buffer, format="JPEG", quality=quality, optimize=True)
    return buffer.getvalue()


def compress_for_download(
    result: RenderResult,
    *,
    max_bytes: int = DOWNLOAD_MAX_BYTES,
    max_dimension: int = DOWNLOAD_MAX_DIMENSION,
) -> bytes:
    """Return JPEG bytes no larger than *max_bytes* where achievable.

    The frame is first downscaled so its long side fits *max_dimension*, then
    re-encoded with decreasing quality until it fits.  When even the lowest
    quality is too large the smallest encoding is returned.  If compression
    fails altogether the original payload is returned unchanged.
    """

    try:
        image = result.decode().convert("RGB")
        if max(image.size) > max_dimension:
            image.thumbnail((max_dimension, max_dimension), Image.Resampling.LANCZOS)

        quality = JPEG_QUALITY
        payload = _encode(image, quality)
        while len(payload) > max_bytes and quality > DOWNLOAD_MIN_QUALITY:
            quality = max(DOWNLOAD_MIN_QUALITY, quality - _QUALITY_STEP)
            payload = _encode(image, quality)
        _LOGGER.debug(
            "Compressed download to %d bytes at quality %d (%dx%d)",
            len(payload),
            quality,
            image.width,
            image.height,
        )
        return payload
    except Exception:
        _LOGGER.exception("Error compressing image")
        return result.payload


def save_download(result: RenderResult, directory: Path, original_name: str | None = None) -> Path:
    """Write the compressed frame into *directory* and return its path."""

    target = Path(directory) / download_filename(original_name)
    target.write_bytes(compress_for_download(result))
    return target


__all__ = ["compress_for_download", "download_filename", "save_download"]
