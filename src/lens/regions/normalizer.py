"""Turn raw surface selections into canonical ranges and dedup keys."""

from __future__ import annotations

from typing import Callable, Dict, Tuple

from .models import (
    END_OF_LINE,
    CanonicalRange,
    DedupKey,
    DocumentId,
    InvalidSelection,
    Position,
    Selection,
    SelectionMode,
)

ColumnResolver = Callable[[Position, Position], Tuple[int, object]]


def _character_columns(start: Position, end: Position) -> Tuple[int, object]:
    # Inclusive cursor on the end character becomes an exclusive bound.
    return start[1], end[1] + 1


def _line_columns(start: Position, end: Position) -> Tuple[int, object]:
    del start, end
    return 0, END_OF_LINE


def _block_columns(start: Position, end: Position) -> Tuple[int, object]:
    left = min(start[1], end[1])
    right = max(start[1], end[1])
    return left, right + 1


_COLUMN_RESOLVERS: Dict[SelectionMode, ColumnResolver] = {
    SelectionMode.CHARACTER: _character_columns,
    SelectionMode.LINE: _line_columns,
    SelectionMode.BLOCK: _block_columns,
}

if set(_COLUMN_RESOLVERS) != set(SelectionMode):  # pragma: no cover - import guard
    raise RuntimeError("every SelectionMode needs a column resolver")


def _coerce_position(value: object, label: str) -> Position:
    if value is None:
        raise InvalidSelection(f"No active selection ({label} position missing)")
    try:
        line, col = value  # type: ignore[misc]
    except (TypeError, ValueError) as exc:
        raise InvalidSelection(
            f"{label} position must be a (line, column) pair"
        ) from exc
    if not all(isinstance(v, int) and not isinstance(v, bool) for v in (line, col)):
        raise InvalidSelection(f"{label} position must hold integers")
    if line < 0 or col < 0:
        raise InvalidSelection(f"{label} position {value!r} is negative")
    return (line, col)


def normalize(
    document_id: DocumentId,
    mode: SelectionMode | str,
    anchor_pos: Position | None,
    active_pos: Position | None,
) -> Tuple[CanonicalRange, DedupKey]:
    """Return the canonical range and dedup key for a raw selection.

    The anchor and the active end may arrive in either order; they are sorted
    by ``(line, column)`` first so the direction of the drag never changes the
    result. Column bounds then depend on ``mode``:

    * ``CHARACTER`` keeps the start column and makes the end column exclusive.
    * ``LINE`` always spans column 0 to ``END_OF_LINE``.
    * ``BLOCK`` uses the leftmost and rightmost raw columns, whichever end
      they came from.

    Raises ``InvalidSelection`` without side effects when the mode is unknown
    or a position is missing or malformed.
    """

    kind = SelectionMode.parse(mode)
    anchor = _coerce_position(anchor_pos, "anchor")
    active = _coerce_position(active_pos, "active")
    start, end = (anchor, active) if anchor <= active else (active, anchor)

    start_col, end_col = _COLUMN_RESOLVERS[kind](start, end)
    span = CanonicalRange(
        document_id=document_id,
        start_line=start[0],
        start_col=start_col,
        end_line=end[0],
        end_col=end_col,  # type: ignore[arg-type]
    )
    return span, DedupKey.for_range(kind, span)


def normalize_selection(selection: Selection) -> Tuple[CanonicalRange, DedupKey]:
    return normalize(
        selection.document_id, selection.mode, selection.anchor, selection.active
    )


__all__ = ["InvalidSelection", "normalize", "normalize_selection"]
