"""Background worker helpers for GUI tasks."""

from .filter_render_worker import (
    FilterRenderSignals,
    FilterRenderWorker,
    RenderJob,
    Renderer,
)

__all__ = [
    "FilterRenderSignals",
    "FilterRenderWorker",
    "RenderJob",
    "Renderer",
]
