"""Renderer that keeps paint in memory, used by the demo host and tests."""

from __future__ import annotations

import itertools
from dataclasses import dataclass
from typing import Any, Dict, Hashable, Iterable, Iterator, List, Set, Tuple

from lens.regions.models import END_OF_LINE, Column, DocumentId

from .protocol import RenderError


@dataclass(frozen=True, slots=True)
class PaintedSpan:
    handle: int
    line: int
    start_col: int
    end_col: Column
    style: Any

    def resolve(self, line_length: int) -> Tuple[int, int]:
        """Concrete ``[start, end)`` columns for a line of ``line_length``."""

        end = line_length if self.end_col is END_OF_LINE else self.end_col
        start = min(self.start_col, line_length)
        return start, max(start, min(int(end), line_length))


class MemoryRenderer:
    """Per-document, per-line paint bookkeeping.

    Documents must be attached before they can be painted; painting or
    erasing a detached document raises ``RenderError``, which is how the demo
    host models a closed buffer.
    """

    def __init__(self) -> None:
        self._paint: Dict[DocumentId, Dict[int, PaintedSpan]] = {}
        self._handles = itertools.count(1)

    def attach(self, document_id: DocumentId) -> None:
        self._paint.setdefault(document_id, {})

    def detach(self, document_id: DocumentId) -> None:
        self._paint.pop(document_id, None)

    def is_attached(self, document_id: DocumentId) -> bool:
        return document_id in self._paint

    @property
    def documents(self) -> Tuple[DocumentId, ...]:
        return tuple(self._paint)

    def paint(
        self,
        document_id: DocumentId,
        line: int,
        start_col: int,
        end_col: Column,
        style: Any,
    ) -> int:
        spans = self._require(document_id)
        handle = next(self._handles)
        spans[handle] = PaintedSpan(handle, line, start_col, end_col, style)
        return handle

    def erase(self, document_id: DocumentId, start_line: int, end_line: int) -> None:
        spans = self._require(document_id)
        for handle in [h for h, s in spans.items() if start_line <= s.line <= end_line]:
            del spans[handle]

    def erase_handles(
        self, document_id: DocumentId, handles: Iterable[Hashable]
    ) -> None:
        spans = self._require(document_id)
        for handle in handles:
            spans.pop(handle, None)  # type: ignore[arg-type]

    def erase_all_documents(self) -> Tuple[DocumentId, ...]:
        for spans in self._paint.values():
            spans.clear()
        return ()

    def painted(self, document_id: DocumentId) -> List[PaintedSpan]:
        return sorted(
            self._paint.get(document_id, {}).values(),
            key=lambda s: (s.line, s.start_col, s.handle),
        )

    def spans(
        self, document_id: DocumentId, line: int, line_length: int
    ) -> Iterator[Tuple[int, int, Any]]:
        """Yield ``(start, end, style)`` for paint on ``line``, resolved now."""

        for span in self.painted(document_id):
            if span.line != line:
                continue
            start, end = span.resolve(line_length)
            if end > start:
                yield start, end, span.style

    def _require(self, document_id: DocumentId) -> Dict[int, PaintedSpan]:
        spans = self._paint.get(document_id)
        if spans is None:
            raise RenderError(
                f"Document {document_id!r} is not attached", document_id=document_id
            )
        return spans


__all__ = ["MemoryRenderer", "PaintedSpan"]
