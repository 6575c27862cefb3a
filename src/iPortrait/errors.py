"""Exception hierarchy shared across iPortrait."""

from __future__ import annotations


class IPortraitError(Exception):
    """Base class for all errors raised by iPortrait."""


class InvalidSourceError(IPortraitError):
    """The source raster is absent, undecodable, or has a zero dimension."""


class SurfaceAcquisitionError(IPortraitError):
    """A working or scratch drawing surface could not be allocated."""


class UploadValidationError(IPortraitError):
    """An uploaded file was rejected before decoding."""
