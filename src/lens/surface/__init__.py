"""Reference editing surface: documents, cursor and visual selection."""

from .document import Document
from .session import EditorSession, VisualState

__all__ = ["Document", "EditorSession", "VisualState"]
