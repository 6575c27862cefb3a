"""Controllers coordinating the editing session."""

from .edit_session_controller import EditSessionController
from .filter_render_controller import FilterRenderController
from .upload_controller import UploadController

__all__ = ["EditSessionController", "FilterRenderController", "UploadController"]
