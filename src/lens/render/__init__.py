"""Rendering collaborator contract and the in-memory reference renderer."""

from .memory import MemoryRenderer, PaintedSpan
from .protocol import HandleEraser, HighlightRenderer, RenderError

__all__ = [
    "HighlightRenderer",
    "HandleEraser",
    "RenderError",
    "MemoryRenderer",
    "PaintedSpan",
]
