"""Debounced scheduling of filter renders."""

from __future__ import annotations

import logging
from typing import Optional

from PySide6.QtCore import QObject, QThreadPool, QTimer, Signal, Slot

from ....config import FILTER_DEBOUNCE_MS
from ....core.filter_state import FilterSet, FilterStateManager
from ....core.filters import render_filters
from ....core.raster import RenderResult, SourceRaster, is_usable
from ..tasks.filter_render_worker import FilterRenderWorker, RenderJob, Renderer

_LOGGER = logging.getLogger(__name__)


class FilterRenderController(QObject):
    """Turn source and filter changes into at most one in-flight render.

    The controller moves between three states:

    ``idle``
        Nothing scheduled.  The published result matches the current inputs,
        or there is no usable source.
    ``pending``
        The debounce timer is armed.  Every further change re-arms it so
        only the latest inputs are rendered.
    ``rendering``
        A :class:`FilterRenderWorker` is running on the thread pool.  The
        busy flag is raised before the worker is dispatched.

    Each change bumps a generation counter.  A finished job whose id is not
    the current generation is stale and its result is dropped.
    """

    IDLE = "idle"
    PENDING = "pending"
    RENDERING = "rendering"

    busyChanged = Signal(bool)
    resultChanged = Signal(object)
    """Emitted with the new :class:`RenderResult` or ``None``."""

    stateChanged = Signal(str)

    def __init__(
        self,
        filters: FilterStateManager,
        *,
        debounce_ms: int = FILTER_DEBOUNCE_MS,
        renderer: Renderer = render_filters,
        thread_pool: Optional[QThreadPool] = None,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self._filters = filters
        self._renderer = renderer
        self._pool = thread_pool if thread_pool is not None else QThreadPool.globalInstance()

        self._source: Optional[SourceRaster] = None
        self._result: Optional[RenderResult] = None
        self._busy = False
        self._state = self.IDLE
        self._generation = 0
        self._active_job: Optional[RenderJob] = None
        self._active_worker: Optional[FilterRenderWorker] = None
        self._dispatch_deferred = False

        self._debounce_timer = QTimer(self)
        self._debounce_timer.setSingleShot(True)
        self._debounce_timer.setInterval(max(0, int(debounce_ms)))
        self._debounce_timer.timeout.connect(self._on_debounce_elapsed)

        self._filters.filtersChanged.connect(self._on_filters_changed)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------
    def source(self) -> Optional[SourceRaster]:
        return self._source

    def result(self) -> Optional[RenderResult]:
        return self._result

    def is_busy(self) -> bool:
        return self._busy

    def state(self) -> str:
        return self._state

    def debounce_interval(self) -> int:
        return self._debounce_timer.interval()

    # ------------------------------------------------------------------
    # Inputs
    # ------------------------------------------------------------------
    def set_source(self, source: Optional[SourceRaster]) -> None:
        """Replace the source raster; ``None`` or an empty raster clears output."""

        if source is self._source:
            return
        self._source = source
        if not is_usable(source):
            self._clear()
            return
        self._schedule()

    @Slot(object)
    def _on_filters_changed(self, _snapshot: FilterSet) -> None:
        if not is_usable(self._source):
            return
        self._schedule()

    def shutdown(self) -> None:
        """Cancel any pending render and ignore the one in flight, if any."""

        self._debounce_timer.stop()
        self._dispatch_deferred = False
        self._generation += 1
        if self._active_job is None:
            self._set_state(self.IDLE)

    # ------------------------------------------------------------------
    # Scheduling
    # ------------------------------------------------------------------
    def _schedule(self) -> None:
        self._generation += 1
        self._dispatch_deferred = False
        self._debounce_timer.start()
        # A cleared source drops the busy flag even if its job is still running.
        self._set_state(self.RENDERING if self._busy else self.PENDING)

    def _clear(self) -> None:
        self._debounce_timer.stop()
        self._dispatch_deferred = False
        self._generation += 1
        self._set_result(None)
        self._set_busy(False)
        self._set_state(self.IDLE)

    @Slot()
    def _on_debounce_elapsed(self) -> None:
        if not is_usable(self._source):
            self._clear()
            return
        if self._active_job is not None:
            # Only one render at a time; start this one when the current job ends.
            self._dispatch_deferred = True
            return
        self._dispatch()

    def _dispatch(self) -> None:
        job = RenderJob(
            job_id=self._generation,
            source=self._source,
            filters=self._filters.current(),
        )
        worker = FilterRenderWorker(job, self._renderer)
        worker.signals.finished.connect(self._on_render_finished)
        self._active_job = job
        self._active_worker = worker
        self._set_state(self.RENDERING)
        # Publish the busy flag before any pixel work can start.
        self._set_busy(True)
        _LOGGER.debug("Dispatching render job %d", job.job_id)
        self._pool.start(worker)

    @Slot(object, int)
    def _on_render_finished(self, result: Optional[RenderResult], job_id: int) -> None:
        if self._active_job is None or job_id != self._active_job.job_id:
            return
        self._active_job = None
        self._active_worker = None

        if job_id != self._generation:
            _LOGGER.debug("Discarding stale render job %d", job_id)
            if self._dispatch_deferred and is_usable(self._source):
                self._dispatch_deferred = False
                self._dispatch()
                return
            self._set_busy(False)
            self._set_state(self.PENDING if self._debounce_timer.isActive() else self.IDLE)
            return

        self._set_result(result)
        self._set_busy(False)
        self._set_state(self.IDLE)

    # ------------------------------------------------------------------
    # Publication
    # ------------------------------------------------------------------
    def _set_busy(self, busy: bool) -> None:
        if self._busy == busy:
            return
        self._busy = busy
        self.busyChanged.emit(busy)

    def _set_result(self, result: Optional[RenderResult]) -> None:
        if result is self._result:
            return
        self._result = result
        self.resultChanged.emit(result)

    def _set_state(self, state: str) -> None:
        if self._state == state:
            return
        self._state = state
        self.stateChanged.emit(state)


__all__ = ["FilterRenderController"]
