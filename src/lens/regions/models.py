"""Value types shared by the selection normalizer and the region store.

Coordinates are 0-based lines and 0-based columns. Column ranges are
half-open, and ``END_OF_LINE`` stands for "to the end of the line", whatever
that line's length is when the range is rendered.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Hashable, Tuple, Union


class InvalidSelection(ValueError):
    """Raised when a raw selection cannot be turned into a range."""


class LineEnd(Enum):
    """Sentinel column type; never compares equal to a real column."""

    END_OF_LINE = "$"

    def __repr__(self) -> str:
        return "END_OF_LINE"


END_OF_LINE = LineEnd.END_OF_LINE

Column = Union[int, LineEnd]
Position = Tuple[int, int]  # (line, column)
DocumentId = Hashable


class SelectionMode(str, Enum):
    """The three visual selection shapes a surface can report."""

    CHARACTER = "character"
    LINE = "line"
    BLOCK = "block"

    @classmethod
    def parse(cls, value: object) -> "SelectionMode":
        """Resolve an enum member, its value, or a Vim mode character.

        Raises ``InvalidSelection`` for anything else.
        """

        if isinstance(value, SelectionMode):
            return value
        if isinstance(value, str):
            resolved = _MODE_ALIASES.get(value)
            if resolved is not None:
                return resolved
            try:
                return cls(value.lower())
            except ValueError:
                pass
        raise InvalidSelection(f"Unrecognized selection mode {value!r}")


_MODE_ALIASES = {
    "v": SelectionMode.CHARACTER,
    "V": SelectionMode.LINE,
    "\x16": SelectionMode.BLOCK,
}


class AddOutcome(str, Enum):
    CREATED = "created"
    ALREADY_EXISTS = "already_exists"


class RemoveOutcome(str, Enum):
    REMOVED = "removed"
    NOT_FOUND = "not_found"


@dataclass(frozen=True, slots=True)
class Selection:
    """Raw selection as reported by the editing surface (not stored)."""

    document_id: DocumentId
    mode: SelectionMode | str
    anchor: Position | None
    active: Position | None


@dataclass(frozen=True, slots=True)
class LineSpan:
    """One line-restricted piece of a range, painted as a single unit."""

    line: int
    start_col: int
    end_col: Column


@dataclass(frozen=True, slots=True)
class CanonicalRange:
    """Direction-independent region extent inside one document."""

    document_id: DocumentId
    start_line: int
    start_col: int
    end_line: int
    end_col: Column

    def __post_init__(self) -> None:
        if self.start_line < 0 or self.start_col < 0:
            raise ValueError("range cannot start at a negative coordinate")
        if self.start_line > self.end_line:
            raise ValueError("start_line must not exceed end_line")
        if (
            self.start_line == self.end_line
            and self.end_col is not END_OF_LINE
            and self.start_col > self.end_col
        ):
            raise ValueError("start_col must not exceed end_col on a single line")

    @property
    def line_count(self) -> int:
        return self.end_line - self.start_line + 1

    @property
    def is_single_line(self) -> bool:
        return self.start_line == self.end_line

    def contains(self, point: Position) -> bool:
        """Return ``True`` when ``point`` falls inside this range."""

        line, col = point
        if line < self.start_line or line > self.end_line:
            return False
        if self.is_single_line:
            if self.end_col is END_OF_LINE:
                return True
            return self.start_col <= col < self.end_col
        if line == self.start_line:
            return col >= self.start_col
        if line == self.end_line:
            return self.end_col is END_OF_LINE or col < self.end_col
        return True

    def line_spans(self) -> Tuple[LineSpan, ...]:
        """Split the range into one paintable span per covered line.

        The first line runs from ``start_col`` to the end of the line, interior
        lines are covered in full and the last line runs from column 0 to
        ``end_col``.
        """

        if self.is_single_line:
            return (LineSpan(self.start_line, self.start_col, self.end_col),)
        spans = [LineSpan(self.start_line, self.start_col, END_OF_LINE)]
        spans.extend(
            LineSpan(line, 0, END_OF_LINE)
            for line in range(self.start_line + 1, self.end_line)
        )
        spans.append(LineSpan(self.end_line, 0, self.end_col))
        return tuple(spans)


@dataclass(frozen=True, slots=True)
class DedupKey:
    """Structural identity of a highlight; equal keys are the same region."""

    document_id: DocumentId
    mode: SelectionMode
    start_line: int
    start_col: int
    end_line: int
    end_col: Column

    @classmethod
    def for_range(cls, mode: SelectionMode, span: CanonicalRange) -> "DedupKey":
        return cls(
            document_id=span.document_id,
            mode=mode,
            start_line=span.start_line,
            start_col=span.start_col,
            end_line=span.end_line,
            end_col=span.end_col,
        )


@dataclass(frozen=True, slots=True)
class RegionRecord:
    """A stored highlight and the render handles painted for it."""

    key: DedupKey
    range: CanonicalRange
    handles: Tuple[Hashable, ...] = ()

    @property
    def document_id(self) -> DocumentId:
        return self.range.document_id


__all__ = [
    "InvalidSelection",
    "END_OF_LINE",
    "LineEnd",
    "Column",
    "Position",
    "DocumentId",
    "SelectionMode",
    "AddOutcome",
    "RemoveOutcome",
    "Selection",
    "LineSpan",
    "CanonicalRange",
    "DedupKey",
    "RegionRecord",
]
