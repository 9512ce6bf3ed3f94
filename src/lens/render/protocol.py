"""Boundary types between the highlight core and the host's renderer."""

from __future__ import annotations

from typing import Any, Hashable, Iterable, Optional, Protocol, runtime_checkable

from lens.regions.models import Column, DocumentId


class HighlightRenderer(Protocol):
    """What the highlight service needs from the host editing surface."""

    def paint(
        self,
        document_id: DocumentId,
        line: int,
        start_col: int,
        end_col: Column,
        style: Any,
    ) -> Hashable:
        """Paint one line-restricted span and return an opaque handle.

        ``END_OF_LINE`` as ``end_col`` extends the paint to the physical end of
        the line at render time.
        """
        ...

    def erase(self, document_id: DocumentId, start_line: int, end_line: int) -> None:
        """Remove all lens paint on the inclusive line range of a document."""
        ...

    def erase_all_documents(self) -> Optional[Iterable[DocumentId]]:
        """Remove all lens paint everywhere; may return documents it skipped."""
        ...


@runtime_checkable
class HandleEraser(Protocol):
    """Optional extension: erase exactly the spans behind some handles."""

    def erase_handles(
        self, document_id: DocumentId, handles: Iterable[Hashable]
    ) -> None: ...


class RenderError(RuntimeError):
    """Raised by renderers when a document or handle cannot be painted."""

    def __init__(
        self, message: str, *, document_id: DocumentId | None = None
    ) -> None:
        super().__init__(message)
        self.document_id = document_id


__all__ = ["HighlightRenderer", "HandleEraser", "RenderError"]
