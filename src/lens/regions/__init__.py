"""Region model: selection normalization and the highlight region store."""

from .models import (
    END_OF_LINE,
    AddOutcome,
    CanonicalRange,
    Column,
    DedupKey,
    InvalidSelection,
    LineEnd,
    LineSpan,
    Position,
    RegionRecord,
    RemoveOutcome,
    Selection,
    SelectionMode,
)
from .normalizer import normalize, normalize_selection
from .store import RegionStore

__all__ = [
    "END_OF_LINE",
    "AddOutcome",
    "CanonicalRange",
    "Column",
    "DedupKey",
    "InvalidSelection",
    "LineEnd",
    "LineSpan",
    "Position",
    "RegionRecord",
    "RegionStore",
    "RemoveOutcome",
    "Selection",
    "SelectionMode",
    "normalize",
    "normalize_selection",
]
