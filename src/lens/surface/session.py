"""Cursor and visual-selection state across the open documents."""

from __future__ import annotations

import itertools
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterator, Optional

from lens.regions import Position, Selection, SelectionMode

from .document import Document


@dataclass(slots=True)
class VisualState:
    mode: SelectionMode
    anchor: Position


class EditorSession:
    """Minimal editing surface: documents, one cursor each, visual mode.

    Columns follow Normal-mode conventions: the cursor always rests on a
    character, so the largest column on a line is ``len(line) - 1``.
    """

    def __init__(self) -> None:
        self._documents: Dict[int, Document] = {}
        self._cursors: Dict[int, Position] = {}
        self._ids = itertools.count(1)
        self._active: Optional[int] = None
        self.visual: Optional[VisualState] = None

    def __iter__(self) -> Iterator[Document]:
        return iter(self._documents.values())

    def __len__(self) -> int:
        return len(self._documents)

    @property
    def document(self) -> Document:
        if self._active is None:
            raise RuntimeError("No document is open")
        return self._documents[self._active]

    @property
    def has_document(self) -> bool:
        return self._active is not None

    @property
    def cursor(self) -> Position:
        return self._cursors[self.document.id]

    @property
    def mode_name(self) -> str:
        return "visual" if self.visual else "normal"

    def get(self, document_id: int) -> Document:
        try:
            return self._documents[document_id]
        except KeyError as exc:
            raise KeyError(f"Document {document_id} is not open") from exc

    def open_text(self, text: str, *, name: str = "") -> Document:
        document = Document.from_text(next(self._ids), text, name=name)
        return self._register(document)

    def open_path(self, path: Path) -> Document:
        return self._register(Document.from_path(next(self._ids), path))

    def close(self, document_id: int) -> Document:
        document = self.get(document_id)
        del self._documents[document_id]
        self._cursors.pop(document_id, None)
        if self._active == document_id:
            self.visual = None
            self._active = next(iter(self._documents), None)
        return document

    def switch_to(self, document_id: int) -> Document:
        self.get(document_id)
        if document_id != self._active:
            self.visual = None
            self._active = document_id
        return self.document

    def cycle(self, step: int = 1) -> Document:
        ids = list(self._documents)
        if not ids:
            raise RuntimeError("No document is open")
        index = ids.index(self.document.id)
        return self.switch_to(ids[(index + step) % len(ids)])

    def set_cursor(self, line: int, col: int) -> Position:
        position = self._clamp(line, col)
        self._cursors[self.document.id] = position
        return position

    def move_cursor(self, d_line: int, d_col: int) -> Position:
        line, col = self.cursor
        return self.set_cursor(line + d_line, col + d_col)

    def enter_visual(self, mode: SelectionMode | str) -> VisualState:
        self.visual = VisualState(mode=SelectionMode.parse(mode), anchor=self.cursor)
        return self.visual

    def exit_visual(self) -> None:
        self.visual = None

    def selection(self) -> Optional[Selection]:
        """Current visual selection, or ``None`` outside visual mode."""

        if self.visual is None or not self.has_document:
            return None
        return Selection(
            document_id=self.document.id,
            mode=self.visual.mode,
            anchor=self.visual.anchor,
            active=self.cursor,
        )

    def _register(self, document: Document) -> Document:
        self._documents[document.id] = document
        self._cursors[document.id] = (0, 0)
        self._active = document.id
        self.visual = None
        return document

    def _clamp(self, line: int, col: int) -> Position:
        document = self.document
        line = max(0, min(line, document.line_count - 1))
        max_col = max(0, document.line_length(line) - 1)
        return (line, max(0, min(col, max_col)))


__all__ = ["EditorSession", "VisualState"]
