"""Worker that executes filter renders on a background thread."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from PySide6.QtCore import QObject, QRunnable, Signal

from ....core.filter_state import FilterSet
from ....core.filters import render_filters
from ....core.raster import RenderResult, SourceRaster

_LOGGER = logging.getLogger(__name__)

Renderer = Callable[[Optional[SourceRaster], FilterSet], Optional[RenderResult]]


@dataclass(frozen=True)
class RenderJob:
    """One render attempt: a source raster and the filter snapshot to apply."""

    job_id: int
    source: SourceRaster
    filters: FilterSet


class FilterRenderSignals(QObject):
    """Signals emitted by :class:`FilterRenderWorker`."""

    finished = Signal(object, int)
    """Emitted with the render result (or ``None``) and the job identifier."""


class FilterRenderWorker(QRunnable):
    """Apply a :class:`RenderJob` using *renderer* off the GUI thread."""

    def __init__(self, job: RenderJob, renderer: Renderer = render_filters) -> None:
        super().__init__()
        self.setAutoDelete(True)
        self._job = job
        self._renderer = renderer
        self.signals = FilterRenderSignals()

    @property
    def job(self) -> RenderJob:
        return self._job

    def run(self) -> None:  # type: ignore[override]
        """Render the job and notify listeners when done, even on failure."""

        try:
            result = self._renderer(self._job.source, self._job.filters)
        except Exception:
            # ``render_filters`` contains its own failures; custom renderers may not.
            _LOGGER.exception("Render job %d failed", self._job.job_id)
            result = None
        self.signals.finished.emit(result, self._job.job_id)


__all__ = ["FilterRenderSignals", "FilterRenderWorker", "RenderJob", "Renderer"]
