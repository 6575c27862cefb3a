"""Immutable image containers exchanged between ingestion, rendering and export."""

from __future__ import annotations

import base64
import io
from dataclasses import dataclass, field
from typing import Optional

import numpy as np
from PIL import Image

from ..config import RENDER_MIME_TYPE


@dataclass(frozen=True, eq=False)
class SourceRaster:
    """Decoded RGBA8 pixels of the image being edited.

    Equality is identity: the scheduler treats a new ``SourceRaster`` object as
    a new source even when its pixels happen to match the previous one.
    """

    pixels: np.ndarray
    width: int = field(init=False)
    height: int = field(init=False)

    def __post_init__(self) -> None:
        # Copy so later writes to the caller's buffer cannot leak in.
        pixels = np.array(self.pixels, dtype=np.uint8, copy=True)
        if pixels.ndim != 3 or pixels.shape[2] != 4:
            raise ValueError(f"Expected an (h, w, 4) RGBA buffer, got shape {pixels.shape}")
        pixels.flags.writeable = False
        object.__setattr__(self, "pixels", pixels)
        object.__setattr__(self, "height", int(pixels.shape[0]))
        object.__setattr__(self, "width", int(pixels.shape[1]))

    @classmethod
    def from_image(cls, image: Image.Image) -> "SourceRaster":
        """Build a raster from any Pillow image, converting it to RGBA."""

        if image.mode != "RGBA":
            image = image.convert("RGBA")
        return cls(np.array(image, dtype=np.uint8))

    @property
    def size(self) -> tuple[int, int]:
        return self.width, self.height

    @property
    def is_valid(self) -> bool:
        """``True`` when both dimensions are nonzero."""

        return self.width > 0 and self.height > 0

    def to_image(self) -> Image.Image:
        """Return a fresh, mutable RGBA Pillow image seeded with the pixels."""

        return Image.fromarray(np.ascontiguousarray(self.pixels), "RGBA").copy()


def is_usable(source: Optional[SourceRaster]) -> bool:
    """Return ``True`` when *source* is present and has nonzero dimensions."""

    return source is not None and source.is_valid


@dataclass(frozen=True)
class RenderResult:
    """Encoded output of one successful render."""

    payload: bytes
    width: int
    height: int
    mime_type: str = RENDER_MIME_TYPE

    def to_data_url(self) -> str:
        encoded = base64.b64encode(self.payload).decode("ascii")
        return f"data:{self.mime_type};base64,{encoded}"

    def decode(self) -> Image.Image:
        """Decode the payload into a Pillow image."""

        with Image.open(io.BytesIO(self.payload)) as image:
            image.load()
            return image.copy()


__all__ = ["RenderResult", "SourceRaster", "is_usable"]
