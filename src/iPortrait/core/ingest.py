"""Upload validation, decoding and cropping of source images."""

from __future__ import annotations

import base64
import binascii
import io
import logging
import mimetypes
import re
from pathlib import Path
from typing import Optional, Union
from urllib.parse import unquote_to_bytes

from PIL import Image, ImageOps, UnidentifiedImageError

from ..config import ALLOWED_UPLOAD_TYPES, CROP_MIN_SIZE, MAX_UPLOAD_BYTES
from ..errors import InvalidSourceError, UploadValidationError
from .raster import SourceRaster

_LOGGER = logging.getLogger(__name__)

_DATA_URL_PATTERN = re.compile(r"^data:(?P<mime>[\w/+.-]*)(?P<params>(;[^,;]*)*?),(?P<data>.*)$", re.DOTALL)

ImageData = Union[bytes, bytearray, str, Path]


def guess_mime_type(name: str | Path) -> Optional[str]:
    """Return the MIME type implied by the extension of *name*."""

    mime_type, _ = mimetypes.guess_type(str(name))
    return mime_type


def validate_upload(name: str | Path, size: int, mime_type: Optional[str] = None) -> None:
    """Reject files the editor cannot or should not load.

    Raises
    ------
    UploadValidationError
        When the type is not JPEG/PNG or the file exceeds the size limit.
    """

    if not name:
        raise UploadValidationError("No file selected.")
    resolved_type = (mime_type or guess_mime_type(name) or "").lower()
    if resolved_type not in ALLOWED_UPLOAD_TYPES:
        raise UploadValidationError("Invalid file type. Please upload a JPG, JPEG, or PNG image.")
    if size > MAX_UPLOAD_BYTES:
        raise UploadValidationError(
            "Image size is too large. Please upload an image smaller than 10MB."
        )


def decode_data_url(url: str) -> bytes:
    """Return the raw bytes embedded in a ``data:`` URL."""

    match = _DATA_URL_PATTERN.match(url.strip())
    if match is None:
        raise InvalidSourceError("Not a data URL")
    data = match.group("data")
    try:
        if ";base64" in match.group("params"):
            return base64.b64decode(data, validate=True)
        return unquote_to_bytes(data)
    except (binascii.Error, ValueError) as exc:
        raise InvalidSourceError("Malformed data URL payload") from exc


def load_raster(data: ImageData) -> SourceRaster:
    """Decode *data* into a :class:`SourceRaster`.

    *data* may be encoded bytes, a ``data:`` URL, or a path on disk.  EXIF
    orientation is applied so the raster matches what a browser displays.
    """

    if isinstance(data, Path):
        payload = data.read_bytes()
    elif isinstance(data, str):
        payload = decode_data_url(data)
    else:
        payload = bytes(data)

    try:
        with Image.open(io.BytesIO(payload)) as image:
            image.load()
            oriented = ImageOps.exif_transpose(image)
            raster = SourceRaster.from_image(oriented)
    except (UnidentifiedImageError, OSError) as exc:
        raise InvalidSourceError(
            "Failed to read the file. It might be corrupted or an unsupported format."
        ) from exc

    if not raster.is_valid:
        raise InvalidSourceError("Decoded image has a zero dimension")
    return raster


def crop_raster(
    raster: SourceRaster,
    box: tuple[float, float, float, float],
    *,
    min_size: int = CROP_MIN_SIZE,
) -> SourceRaster:
    """Return the region *box* = ``(left, top, width, height)`` of *raster*.

    The box is clipped to the image bounds.  When either side of the crop is
    smaller than *min_size* the region is scaled up, preserving its aspect
    ratio, so the short side reaches *min_size*.
    """

    if not raster.is_valid:
        raise InvalidSourceError("Cannot crop an empty raster")

    left, top, width, height = (float(v) for v in box)
    x0 = max(0, min(raster.width, int(round(left))))
    y0 = max(0, min(raster.height, int(round(top))))
    x1 = max(x0, min(raster.width, int(round(left + width))))
    y1 = max(y0, min(raster.height, int(round(top + height))))
    if x1 - x0 <= 0 or y1 - y0 <= 0:
        raise InvalidSourceError("Crop rectangle does not intersect the image")

    region = raster.to_image().crop((x0, y0, x1, y1))
    crop_w, crop_h = region.size
    if crop_w < min_size or crop_h < min_size:
        scale = max(min_size / crop_w, min_size / crop_h)
        target = (max(1, round(crop_w * scale)), max(1, round(crop_h * scale)))
        _LOGGER.debug("Upscaling %dx%d crop to %dx%d", crop_w, crop_h, *target)
        region = region.resize(target, Image.Resampling.LANCZOS)
    return SourceRaster.from_image(region)


__all__ = [
    "crop_raster",
    "decode_data_url",
    "guess_mime_type",
    "load_raster",
    "validate_upload",
]
