from __future__ import annotations

from typing import Any, List, Tuple

import pytest

from lens.regions import (
    END_OF_LINE,
    AddOutcome,
    CanonicalRange,
    LineSpan,
    RegionStore,
    RemoveOutcome,
    SelectionMode,
    normalize,
)


class PaintLog:
    """Paint/unpaint callables that record what the store asked for."""

    def __init__(self) -> None:
        self.painted: List[CanonicalRange] = []
        self.erased: List[Tuple[Any, ...]] = []
        self.cleared = 0
        self._next = 0

    def paint(self, span: CanonicalRange) -> List[int]:
        self.painted.append(span)
        handles = []
        for _ in span.line_spans():
            self._next += 1
            handles.append(self._next)
        return handles

    def unpaint(self, handles, document_id, span) -> None:
        self.erased.append((handles, document_id, span))

    def unpaint_all(self) -> None:
        self.cleared += 1


def add(store: RegionStore, log: PaintLog, doc: Any, mode, anchor, active):
    span, key = normalize(doc, mode, anchor, active)
    return key, store.add(span, key, log.paint)


def test_add_is_idempotent() -> None:
    store = RegionStore()
    log = PaintLog()

    _, first = add(store, log, "doc", SelectionMode.CHARACTER, (1, 0), (1, 5))
    _, second = add(store, log, "doc", SelectionMode.CHARACTER, (1, 0), (1, 5))

    assert first is AddOutcome.CREATED
    assert second is AddOutcome.ALREADY_EXISTS
    assert len(store) == 1
    assert len(log.painted) == 1


def test_reversed_selection_is_the_same_region() -> None:
    store = RegionStore()
    log = PaintLog()

    add(store, log, "doc", SelectionMode.CHARACTER, (2, 3), (1, 0))
    _, outcome = add(store, log, "doc", SelectionMode.CHARACTER, (1, 0), (2, 3))

    assert outcome is AddOutcome.ALREADY_EXISTS
    assert len(store) == 1


def test_add_keeps_one_handle_per_line() -> None:
    store = RegionStore()
    log = PaintLog()

    key, _ = add(store, log, "doc", SelectionMode.CHARACTER, (3, 2), (6, 1))

    record = store.get(key)
    assert record is not None
    assert len(record.handles) == 4
    assert record.document_id == "doc"


def test_failed_paint_does_not_insert() -> None:
    store = RegionStore()
    span, key = normalize("doc", SelectionMode.CHARACTER, (0, 0), (0, 2))

    def broken(_span: CanonicalRange) -> List[int]:
        raise RuntimeError("invalid document")

    with pytest.raises(RuntimeError):
        store.add(span, key, broken)

    assert len(store) == 0
    assert key not in store


@pytest.mark.parametrize(
    "col, contained",
    [(1, False), (2, True), (4, True), (5, False)],
)
def test_single_line_containment(col: int, contained: bool) -> None:
    store = RegionStore()
    span = CanonicalRange("doc", 7, 2, 7, 5)
    _, key = normalize("doc", SelectionMode.CHARACTER, (7, 2), (7, 4))
    store.add(span, key, lambda _span: [1])

    found = store.find_containing("doc", (7, col))

    assert (found == key) is contained


@pytest.mark.parametrize(
    "point, contained",
    [
        ((10, 3), False),
        ((10, 4), True),
        ((11, 0), True),
        ((12, 1), True),
        ((12, 2), False),
        ((9, 50), False),
        ((13, 0), False),
    ],
)
def test_multi_line_containment(point: Tuple[int, int], contained: bool) -> None:
    span = CanonicalRange("doc", 10, 4, 12, 2)

    assert span.contains(point) is contained


def test_full_line_containment_covers_every_column() -> None:
    store = RegionStore()
    log = PaintLog()
    key, _ = add(store, log, "doc", SelectionMode.LINE, (3, 7), (3, 0))

    assert store.find_containing("doc", (3, 0)) == key
    assert store.find_containing("doc", (3, 999)) == key
    assert store.find_containing("doc", (4, 0)) is None


def test_multi_line_with_line_end_contains_last_line() -> None:
    span = CanonicalRange("doc", 1, 3, 4, END_OF_LINE)

    assert span.contains((4, 200))
    assert not span.contains((1, 2))


def test_find_containing_filters_by_document() -> None:
    store = RegionStore()
    log = PaintLog()
    add(store, log, "a", SelectionMode.CHARACTER, (0, 0), (0, 4))

    assert store.find_containing("b", (0, 1)) is None
    assert store.find_containing("a", (0, 1)) is not None


def test_remove_then_readd_paints_again() -> None:
    store = RegionStore()
    log = PaintLog()
    key, _ = add(store, log, "doc", SelectionMode.CHARACTER, (1, 0), (1, 5))
    old_handles = store.get(key).handles  # type: ignore[union-attr]

    assert store.remove(key, log.unpaint) is RemoveOutcome.REMOVED
    assert len(store) == 0
    _, outcome = add(store, log, "doc", SelectionMode.CHARACTER, (1, 0), (1, 5))

    assert outcome is AddOutcome.CREATED
    assert len(store) == 1
    assert len(log.painted) == 2
    record = store.get(key)
    assert record is not None
    assert set(record.handles).isdisjoint(old_handles)
    assert log.erased[0][0] == old_handles


def test_remove_missing_key_reports_not_found() -> None:
    store = RegionStore()
    log = PaintLog()
    _, key = normalize("doc", SelectionMode.CHARACTER, (0, 0), (0, 0))

    assert store.remove(key, log.unpaint) is RemoveOutcome.NOT_FOUND
    assert log.erased == []


def test_remove_drops_record_even_when_erase_fails() -> None:
    store = RegionStore()
    log = PaintLog()
    key, _ = add(store, log, "doc", SelectionMode.CHARACTER, (0, 0), (0, 3))

    def broken(*_args: Any) -> None:
        raise RuntimeError("erase failed")

    with pytest.raises(RuntimeError):
        store.remove(key, broken)

    assert key not in store


def test_clear_all_empties_store_across_documents() -> None:
    store = RegionStore()
    log = PaintLog()
    add(store, log, "a", SelectionMode.CHARACTER, (0, 0), (0, 4))
    add(store, log, "b", SelectionMode.LINE, (2, 0), (3, 0))

    store.clear_all(log.unpaint_all)

    assert log.cleared == 1
    assert len(store) == 0
    assert store.find_containing("a", (0, 1)) is None
    assert store.find_containing("b", (2, 0)) is None


def test_clear_all_empties_store_when_unpaint_fails() -> None:
    store = RegionStore()
    log = PaintLog()
    add(store, log, "a", SelectionMode.CHARACTER, (0, 0), (0, 4))

    def partial_failure() -> None:
        raise RuntimeError("document 7 is gone")

    with pytest.raises(RuntimeError):
        store.clear_all(partial_failure)

    assert len(store) == 0


def test_clear_document_only_touches_that_document() -> None:
    store = RegionStore()
    log = PaintLog()
    add(store, log, "a", SelectionMode.CHARACTER, (0, 0), (0, 4))
    add(store, log, "a", SelectionMode.CHARACTER, (3, 0), (3, 4))
    add(store, log, "b", SelectionMode.CHARACTER, (0, 0), (0, 4))
    erased: list[object] = []

    dropped = store.clear_document("a", erased.append)

    assert dropped == 2
    assert erased == ["a"]
    assert [record.document_id for record in store.records()] == ["b"]


def test_line_spans_decompose_multi_line_range() -> None:
    span = CanonicalRange("doc", 2, 5, 5, 3)

    assert span.line_spans() == (
        LineSpan(2, 5, END_OF_LINE),
        LineSpan(3, 0, END_OF_LINE),
        LineSpan(4, 0, END_OF_LINE),
        LineSpan(5, 0, 3),
    )


def test_line_spans_single_line_and_full_lines() -> None:
    assert CanonicalRange("doc", 1, 2, 1, 6).line_spans() == (LineSpan(1, 2, 6),)
    assert CanonicalRange("doc", 1, 0, 2, END_OF_LINE).line_spans() == (
        LineSpan(1, 0, END_OF_LINE),
        LineSpan(2, 0, END_OF_LINE),
    )


def test_canonical_range_rejects_inverted_bounds() -> None:
    with pytest.raises(ValueError):
        CanonicalRange("doc", 4, 0, 3, 1)
    with pytest.raises(ValueError):
        CanonicalRange("doc", 4, 5, 4, 2)
