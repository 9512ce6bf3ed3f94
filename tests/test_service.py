from __future__ import annotations

from typing import Any, List, Tuple

import pytest

from lens.config import HighlightStyle, LensConfig
from lens.regions import END_OF_LINE, RegionStore, Selection, SelectionMode
from lens.render import HandleEraser, MemoryRenderer, RenderError
from lens.service import HighlightBus, HighlightService


class RecordingRenderer:
    """Renderer without ``erase_handles``; erases by line range only."""

    def __init__(self) -> None:
        self.calls: List[Tuple[Any, ...]] = []
        self.skipped: Tuple[Any, ...] = ()
        self._next = 0

    def paint(self, document_id, line, start_col, end_col, style) -> int:
        self._next += 1
        self.calls.append(("paint", document_id, line, start_col, end_col, style))
        return self._next

    def erase(self, document_id, start_line, end_line) -> None:
        self.calls.append(("erase", document_id, start_line, end_line))

    def erase_all_documents(self):
        self.calls.append(("erase_all",))
        return self.skipped


def make_service(renderer: Any = None, **kwargs: Any):
    messages: List[Tuple[str, str]] = []
    renderer = renderer if renderer is not None else RecordingRenderer()
    service = HighlightService(
        renderer,
        notify=lambda message, level: messages.append((message, level)),
        **kwargs,
    )
    return service, renderer, messages


def test_add_paints_every_line_with_configured_style() -> None:
    config = LensConfig(highlight_group="Found", bg="#112233")
    service, renderer, messages = make_service(config=config)

    result = service.request_add("doc", "character", (2, 3), (4, 1))

    assert result.status == "created"
    assert result.changed
    style = HighlightStyle(group="Found", bg="#112233")
    assert renderer.calls == [
        ("paint", "doc", 2, 3, END_OF_LINE, style),
        ("paint", "doc", 3, 0, END_OF_LINE, style),
        ("paint", "doc", 4, 0, 2, style),
    ]
    assert messages == [("Highlight added", "info")]


def test_duplicate_add_reports_existing_and_does_not_repaint() -> None:
    service, renderer, messages = make_service()
    service.request_add("doc", "character", (1, 0), (1, 5))

    result = service.request_add("doc", "character", (1, 5), (1, 0))

    assert result.status == "exists"
    assert not result.changed
    assert len(renderer.calls) == 1
    assert messages[-1] == ("Selection already highlighted", "info")


def test_invalid_selection_warns_without_touching_store() -> None:
    service, renderer, messages = make_service()

    result = service.request_add("doc", "select", (0, 0), (0, 1))

    assert result.status == "invalid_selection"
    assert len(service.store) == 0
    assert renderer.calls == []
    assert messages[-1][1] == "warn"


def test_remove_at_erases_region_lines_without_handle_eraser() -> None:
    service, renderer, messages = make_service()
    service.request_add("doc", "character", (10, 4), (12, 1))

    result = service.request_remove_at("doc", (11, 7))

    assert result.status == "removed"
    assert renderer.calls[-1] == ("erase", "doc", 10, 12)
    assert len(service.store) == 0
    assert messages[-1] == ("Highlight removed", "info")


def test_remove_at_outside_regions_warns() -> None:
    service, renderer, messages = make_service()
    service.request_add("doc", "character", (7, 2), (7, 4))

    result = service.request_remove_at("doc", (7, 5))

    assert result.status == "not_found"
    assert len(service.store) == 1
    assert messages[-1] == ("No highlight found at cursor", "warn")


def test_clear_all_calls_renderer_once_and_empties_store() -> None:
    service, renderer, messages = make_service()
    service.request_add("a", "line", (0, 0), (1, 0))
    service.request_add("b", "block", (0, 2), (3, 5))

    result = service.request_clear_all()

    assert result.status == "cleared"
    assert renderer.calls.count(("erase_all",)) == 1
    assert len(service.store) == 0
    assert messages[-1] == ("All highlights cleared", "info")


def test_clear_all_with_skipped_documents_still_empties_store() -> None:
    service, renderer, _ = make_service()
    renderer.skipped = ("gone",)
    service.request_add("gone", "line", (0, 0), (0, 0))

    result = service.request_clear_all()

    assert result.status == "cleared"
    assert len(service.store) == 0


def test_clear_document_erases_only_that_document() -> None:
    service, renderer, _ = make_service()
    service.request_add("a", "line", (0, 0), (1, 0))
    service.request_add("b", "line", (0, 0), (1, 0))

    service.request_clear_document("a")

    erase = [call for call in renderer.calls if call[0] == "erase"]
    assert len(erase) == 1
    assert erase[0][1:3] == ("a", 0)
    assert [record.document_id for record in service.store.records()] == ["b"]


def test_injected_store_is_used() -> None:
    store = RegionStore()
    service, _, _ = make_service(store=store)

    service.request_add("doc", "line", (0, 0), (0, 0))

    assert service.store is store
    assert len(store) == 1


def test_paint_failure_propagates_and_leaves_store_empty() -> None:
    renderer = MemoryRenderer()
    service, _, messages = make_service(renderer)

    with pytest.raises(RenderError):
        service.request_add(99, "character", (0, 0), (0, 1))

    assert len(service.store) == 0
    assert messages == []


def test_remove_with_memory_renderer_erases_only_that_region() -> None:
    renderer = MemoryRenderer()
    renderer.attach(1)
    service, _, _ = make_service(renderer)
    service.request_add(1, "character", (0, 0), (0, 3))
    service.request_add(1, "character", (0, 6), (0, 9))

    service.request_remove_at(1, (0, 1))

    remaining = [(s.line, s.start_col, s.end_col) for s in renderer.painted(1)]
    assert remaining == [(0, 6, 10)]


def test_remove_drops_record_when_document_was_detached() -> None:
    renderer = MemoryRenderer()
    renderer.attach(1)
    service, _, _ = make_service(renderer)
    service.request_add(1, "line", (2, 0), (2, 0))
    renderer.detach(1)

    with pytest.raises(RenderError):
        service.request_remove_at(1, (2, 0))

    assert len(service.store) == 0


def test_toggle_adds_selection_then_removes_at_point() -> None:
    service, _, _ = make_service()
    selection = Selection("doc", SelectionMode.CHARACTER, (3, 1), (3, 4))

    added = service.request_toggle("doc", (3, 4), selection)
    removed = service.request_toggle("doc", (3, 2))

    assert added.status == "created"
    assert removed.status == "removed"
    assert removed.key == added.key


def test_bus_receives_event_for_each_outcome() -> None:
    bus = HighlightBus()
    events: List[Tuple[str, Any]] = []
    for name in ("highlight.added", "highlight.missing", "highlight.cleared"):
        bus.subscribe(name, lambda payload, name=name: events.append((name, payload)))
    service, _, _ = make_service(bus=bus)

    service.request_add("doc", "line", (0, 0), (0, 0))
    service.request_remove_at("doc", (5, 0))
    service.request_clear_all()

    assert [name for name, _ in events] == [
        "highlight.added",
        "highlight.missing",
        "highlight.cleared",
    ]
    assert events[0][1]["key"] is not None


def test_reject_reports_warning() -> None:
    service, _, messages = make_service()

    result = service.reject("Must be called from visual mode")

    assert result.status == "invalid_selection"
    assert messages == [("Must be called from visual mode", "warn")]


class FailingLineRenderer(MemoryRenderer):
    """Memory renderer that refuses to paint one line."""

    def __init__(self, failing_line: int) -> None:
        super().__init__()
        self.failing_line = failing_line

    def paint(self, document_id, line, start_col, end_col, style) -> int:
        if line == self.failing_line:
            raise RenderError("line is read-only", document_id=document_id)
        return super().paint(document_id, line, start_col, end_col, style)


def test_partial_paint_is_erased_when_a_later_line_fails() -> None:
    renderer = FailingLineRenderer(failing_line=2)
    renderer.attach(1)
    renderer.paint(1, 0, 6, 8, "other")
    service, _, _ = make_service(renderer)

    with pytest.raises(RenderError):
        service.request_add(1, "character", (0, 0), (3, 1))

    assert len(service.store) == 0
    assert [span.style for span in renderer.painted(1)] == ["other"]


def test_partial_paint_falls_back_to_line_erase() -> None:
    class FailingRecorder(RecordingRenderer):
        def paint(self, document_id, line, start_col, end_col, style) -> int:
            if line == 12:
                raise RenderError("gone", document_id=document_id)
            return super().paint(document_id, line, start_col, end_col, style)

    service, renderer, _ = make_service(FailingRecorder())

    with pytest.raises(RenderError):
        service.request_add("doc", "line", (10, 0), (13, 0))

    assert renderer.calls[-1] == ("erase", "doc", 10, 12)
    assert len(service.store) == 0


def test_handle_eraser_is_detected_structurally() -> None:
    assert isinstance(MemoryRenderer(), HandleEraser)
    assert not isinstance(RecordingRenderer(), HandleEraser)
