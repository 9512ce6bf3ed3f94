"""Line-oriented documents hosted by the editing session."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence


@dataclass(slots=True)
class Document:
    """Plain list-of-lines text storage identified by an integer id."""

    id: int
    _lines: List[str] = field(default_factory=lambda: [""])
    name: str = ""
    path: Optional[Path] = None

    @classmethod
    def from_text(cls, document_id: int, text: str, *, name: str = "") -> "Document":
        lines = text.splitlines() or [""]
        return cls(id=document_id, _lines=list(lines), name=name or f"[{document_id}]")

    @classmethod
    def from_path(cls, document_id: int, path: Path) -> "Document":
        document = cls.from_text(
            document_id, path.read_text(encoding="utf-8"), name=path.name
        )
        document.path = path
        return document

    def snapshot(self) -> Sequence[str]:
        return tuple(self._lines)

    @property
    def line_count(self) -> int:
        return len(self._lines)

    def get_line(self, index: int) -> str:
        return self._lines[index]

    def line_length(self, index: int) -> int:
        return len(self._lines[index])


__all__ = ["Document"]
