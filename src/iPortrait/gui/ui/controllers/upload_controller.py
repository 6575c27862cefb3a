"""Controller that validates and decodes uploaded photos."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from PySide6.QtCore import QObject, QTimer, Signal, Slot

from ....config import UPLOAD_DEBOUNCE_MS
from ....core.ingest import load_raster, validate_upload
from ....errors import InvalidSourceError, UploadValidationError

_LOGGER = logging.getLogger(__name__)


class UploadController(QObject):
    """Accept a file, read it, and hand the decoded raster on after a short delay.

    Only one upload is processed at a time; submissions made while another is
    loading are ignored.  Reading happens immediately so validation errors are
    reported at once, while decoding waits for the debounce window.
    """

    imageLoaded = Signal(object, str)
    """Emitted with the decoded :class:`SourceRaster` and the file name."""

    errorOccurred = Signal(str)
    loadingChanged = Signal(bool)

    def __init__(
        self,
        *,
        debounce_ms: int = UPLOAD_DEBOUNCE_MS,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self._loading = False
        self._pending: Optional[tuple[bytes, str]] = None
        self._last_error = ""

        self._debounce_timer = QTimer(self)
        self._debounce_timer.setSingleShot(True)
        self._debounce_timer.setInterval(max(0, int(debounce_ms)))
        self._debounce_timer.timeout.connect(self._deliver)

    def is_loading(self) -> bool:
        return self._loading

    def last_error(self) -> str:
        return self._last_error

    def submit_file(self, path: Path | str | None) -> bool:
        """Start loading *path*; return ``False`` if it was rejected or ignored."""

        if self._loading:
            _LOGGER.info("Ignoring upload while another file is loading")
            return False

        if not path:
            self._fail("No file selected.")
            return False
        path = Path(path)
        try:
            size = path.stat().st_size
            validate_upload(path.name, size)
            payload = path.read_bytes()
        except UploadValidationError as exc:
            self._fail(str(exc))
            return False
        except OSError:
            _LOGGER.exception("Failed to read upload %s", path)
            self._fail(
                "Failed to read the file. It might be corrupted or an unsupported format. "
                "Please try a different file."
            )
            return False

        self._last_error = ""
        self._pending = (payload, path.name)
        self._set_loading(True)
        self._debounce_timer.start()
        return True

    def cancel(self) -> None:
        """Drop a pending upload without delivering it."""

        self._debounce_timer.stop()
        self._pending = None
        self._set_loading(False)

    # ------------------------------------------------------------------
    @Slot()
    def _deliver(self) -> None:
        pending, self._pending = self._pending, None
        if pending is None:
            self._set_loading(False)
            return
        payload, name = pending
        try:
            raster = load_raster(payload)
        except InvalidSourceError as exc:
            _LOGGER.warning("Could not decode upload %s: %s", name, exc)
            self._set_loading(False)
            self._fail(
                "Failed to read the file. It might be corrupted or an unsupported format. "
                "Please try a different file."
            )
            return
        self._set_loading(False)
        self.imageLoaded.emit(raster, name)

    def _fail(self, message: str) -> None:
        self._last_error = message
        self.errorOccurred.emit(message)

    def _set_loading(self, loading: bool) -> None:
        if self._loading == loading:
            return
        self._loading = loading
        self.loadingChanged.emit(loading)


__all__ = ["UploadController"]
