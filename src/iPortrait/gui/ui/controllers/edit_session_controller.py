"""Controller that owns one editing session from upload to download."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional

from PySide6.QtCore import QObject, QThreadPool, Signal, Slot

from ....config import FILTER_DEBOUNCE_MS
from ....core.export import save_download
from ....core.filter_state import FilterSet, FilterStateManager, has_active_filters
from ....core.filters import render_filters
from ....core.ingest import crop_raster
from ....core.raster import SourceRaster, is_usable
from ....errors import InvalidSourceError
from ..tasks.filter_render_worker import Renderer
from .filter_render_controller import FilterRenderController
from .upload_controller import UploadController

_LOGGER = logging.getLogger(__name__)


class EditSessionController(QObject):
    """Wire uploads, cropping, the filter state and rendering together.

    The uploaded image is kept as the crop base; the image being filtered is
    either that original or the latest crop of it.  Loading a new image resets
    the filters, cropping keeps them.
    """

    sourceChanged = Signal(object)
    """Emitted with the raster now being filtered, or ``None``."""

    def __init__(
        self,
        *,
        debounce_ms: int = FILTER_DEBOUNCE_MS,
        renderer: Renderer = render_filters,
        thread_pool: Optional[QThreadPool] = None,
        upload: Optional[UploadController] = None,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self._filters = FilterStateManager(self)
        self._renderer = FilterRenderController(
            self._filters,
            debounce_ms=debounce_ms,
            renderer=renderer,
            thread_pool=thread_pool,
            parent=self,
        )
        self._upload = upload if upload is not None else UploadController(parent=self)
        self._upload.imageLoaded.connect(self._on_image_loaded)

        self._original: Optional[SourceRaster] = None
        self._file_name = ""

    # ------------------------------------------------------------------
    # Collaborators
    # ------------------------------------------------------------------
    @property
    def filters(self) -> FilterStateManager:
        return self._filters

    @property
    def render_controller(self) -> FilterRenderController:
        return self._renderer

    @property
    def upload(self) -> UploadController:
        return self._upload

    def file_name(self) -> str:
        return self._file_name

    def original(self) -> Optional[SourceRaster]:
        return self._original

    # ------------------------------------------------------------------
    # Filter control surface
    # ------------------------------------------------------------------
    def update_filter(self, name: str, value: Any) -> FilterSet:
        return self._filters.update(name, value)

    def reset_filters(self) -> FilterSet:
        return self._filters.reset()

    def current_filters(self) -> FilterSet:
        return self._filters.current()

    def has_active_filters(self) -> bool:
        return has_active_filters(self._filters.current())

    # ------------------------------------------------------------------
    # Source lifecycle
    # ------------------------------------------------------------------
    def load_source(self, raster: Optional[SourceRaster], file_name: str = "") -> None:
        """Start a new session on *raster*, discarding previous edits."""

        self._original = raster if is_usable(raster) else None
        self._file_name = file_name or "edited-photo"
        # Resetting first lets the debounce fold both changes into one render.
        self._filters.reset()
        self._set_source(self._original)

    def apply_crop(self, box: tuple[float, float, float, float]) -> bool:
        """Crop the uploaded original to *box* and filter the cropped region."""

        if self._original is None:
            return False
        try:
            cropped = crop_raster(self._original, box)
        except InvalidSourceError as exc:
            _LOGGER.warning("Ignoring crop %s: %s", box, exc)
            return False
        self._set_source(cropped)
        return True

    def clear(self) -> None:
        self._original = None
        self._file_name = ""
        self._set_source(None)

    def export(self, directory: Path) -> Optional[Path]:
        """Save the compressed rendered frame into *directory*."""

        result = self._renderer.result()
        if result is None:
            return None
        return save_download(result, directory, self._file_name)

    def shutdown(self) -> None:
        self._upload.cancel()
        self._renderer.shutdown()

    # ------------------------------------------------------------------
    @Slot(object, str)
    def _on_image_loaded(self, raster: SourceRaster, file_name: str) -> None:
        self.load_source(raster, file_name)

    def _set_source(self, raster: Optional[SourceRaster]) -> None:
        if raster is self._renderer.source():
            return
        self._renderer.set_source(raster)
        self.sourceChanged.emit(raster)


__all__ = ["EditSessionController"]
