"""Timeline engine: scrub instant + width + zones -> render model."""

from .engine import build_render_model, time_to_column, timeline_hours, window
from .model import DstKind, RenderModel, RenderRow

__all__ = [
    "DstKind",
    "RenderModel",
    "RenderRow",
    "build_render_model",
    "time_to_column",
    "timeline_hours",
    "window",
]
