"""Entry points that tie normalization, the region store and the renderer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Hashable, Optional, Sequence, Tuple

from lens.config import HighlightStyle, LensConfig
from lens.regions import (
    AddOutcome,
    CanonicalRange,
    DedupKey,
    InvalidSelection,
    Position,
    RegionStore,
    RemoveOutcome,
    Selection,
    SelectionMode,
    normalize,
)
from lens.regions.models import DocumentId
from lens.render import HandleEraser, HighlightRenderer
from lens.runtime import telemetry

Notifier = Callable[[str, str], None]


@dataclass(slots=True)
class ActionResult:
    """Outcome of one highlight request, surfaced to the input layer."""

    status: str
    message: Optional[str] = None
    key: Optional[DedupKey] = None

    @property
    def changed(self) -> bool:
        return self.status in {"created", "removed", "cleared"}


class HighlightBus:
    """Synchronous pub/sub used to tell hosts what happened."""

    def __init__(self) -> None:
        self._subscribers: Dict[str, list[Callable[[object], None]]] = {}

    def subscribe(self, event: str, callback: Callable[[object], None]) -> None:
        self._subscribers.setdefault(event, []).append(callback)

    def emit(self, event: str, payload: object | None = None) -> None:
        for callback in self._subscribers.get(event, []):
            callback(payload)


def _silent(message: str, level: str) -> None:  # pragma: no cover - default hook
    del message, level


class HighlightService:
    """Add, remove and clear highlights for every open document.

    The service owns no global state: the region store, the renderer and the
    configuration are handed in by the host that creates it at start-up.
    """

    def __init__(
        self,
        renderer: HighlightRenderer,
        *,
        store: Optional[RegionStore] = None,
        config: Optional[LensConfig] = None,
        notify: Notifier = _silent,
        bus: Optional[HighlightBus] = None,
        logger_name: str | None = "lens.service",
    ) -> None:
        self.renderer = renderer
        self.store = store if store is not None else RegionStore()
        self.config = config or LensConfig()
        self.style: HighlightStyle = self.config.style
        self.bus = bus or HighlightBus()
        self._notify = notify
        self._logger_name = logger_name

    def request_add(
        self,
        document_id: DocumentId,
        mode: SelectionMode | str,
        anchor_pos: Position | None,
        active_pos: Position | None,
    ) -> ActionResult:
        with telemetry.span(
            "highlights::add",
            logger_name=self._logger_name,
            component="highlights",
            metadata={"document": document_id, "mode": mode},
        ) as handle:
            try:
                span, key = normalize(document_id, mode, anchor_pos, active_pos)
            except InvalidSelection as exc:
                handle.warn(str(exc))
                return self._report("invalid_selection", str(exc), "warn")

            outcome = self.store.add(span, key, self._paint)
            handle.add_metadata("outcome", outcome.value)
            if outcome is AddOutcome.ALREADY_EXISTS:
                return self._report("exists", "Selection already highlighted", key=key)
            return self._report("created", "Highlight added", key=key)

    def request_remove_at(
        self, document_id: DocumentId, point: Position
    ) -> ActionResult:
        with telemetry.span(
            "highlights::remove_at",
            logger_name=self._logger_name,
            component="highlights",
            metadata={"document": document_id, "point": point},
        ) as handle:
            key = self.store.find_containing(document_id, point)
            if key is None:
                handle.add_metadata("outcome", RemoveOutcome.NOT_FOUND.value)
                return self._report(
                    "not_found", "No highlight found at cursor", "warn"
                )
            outcome = self.store.remove(key, self._unpaint)
            handle.add_metadata("outcome", outcome.value)
            return self._report("removed", "Highlight removed", key=key)

    def request_clear_document(self, document_id: DocumentId) -> ActionResult:
        with telemetry.span(
            "highlights::clear_document",
            logger_name=self._logger_name,
            component="highlights",
            metadata={"document": document_id},
        ) as handle:
            dropped = self.store.clear_document(document_id, self._erase_document)
            handle.add_metadata("dropped", dropped)
            return self._report("cleared", "Document highlights cleared")

    def request_clear_all(self) -> ActionResult:
        with telemetry.span(
            "highlights::clear_all",
            logger_name=self._logger_name,
            component="highlights",
        ) as handle:
            skipped = tuple(
                self.store.clear_all(self.renderer.erase_all_documents) or ()
            )
            if skipped:
                handle.warn(f"paint left on documents {list(skipped)!r}")
            return self._report("cleared", "All highlights cleared")

    def request_toggle(
        self,
        document_id: DocumentId,
        point: Position,
        selection: Optional[Selection] = None,
    ) -> ActionResult:
        """Add ``selection`` when one is active, otherwise remove at ``point``."""

        if selection is not None:
            return self.request_add(
                selection.document_id,
                selection.mode,
                selection.anchor,
                selection.active,
            )
        return self.request_remove_at(document_id, point)

    def reject(self, message: str) -> ActionResult:
        """Report a request the input layer refused before reaching the core."""

        return self._report("invalid_selection", message, "warn")

    def _paint(self, span: CanonicalRange) -> Tuple[Hashable, ...]:
        """Paint every line of ``span``; on failure erase what was painted."""

        handles: list[Hashable] = []
        line = span.start_line
        try:
            for piece in span.line_spans():
                line = piece.line
                handles.append(
                    self.renderer.paint(
                        span.document_id,
                        piece.line,
                        piece.start_col,
                        piece.end_col,
                        self.style,
                    )
                )
        except Exception:
            if handles:
                self._erase_painted(span.document_id, handles, span.start_line, line)
            raise
        return tuple(handles)

    def _erase_painted(
        self,
        document_id: DocumentId,
        handles: Sequence[Hashable],
        start_line: int,
        end_line: int,
    ) -> None:
        try:
            if isinstance(self.renderer, HandleEraser):
                self.renderer.erase_handles(document_id, handles)
            else:
                self.renderer.erase(document_id, start_line, end_line)
        except Exception as exc:
            # the paint failure is what the caller needs to see
            telemetry.record_event(
                "highlight.rollback_failed",
                level="warning",
                data={"document": document_id, "error": str(exc)},
                logger_name=self._logger_name,
            )

    def _unpaint(
        self,
        handles: Tuple[Hashable, ...],
        document_id: DocumentId,
        span: CanonicalRange,
    ) -> None:
        if isinstance(self.renderer, HandleEraser):
            self.renderer.erase_handles(document_id, handles)
        else:
            self.renderer.erase(document_id, span.start_line, span.end_line)

    def _erase_document(self, document_id: DocumentId) -> None:
        # inclusive end line covering any document length
        self.renderer.erase(document_id, 0, _WHOLE_DOCUMENT)

    def _report(
        self,
        status: str,
        message: str,
        level: str = "info",
        *,
        key: Optional[DedupKey] = None,
    ) -> ActionResult:
        payload: Dict[str, Any] = {"status": status, "message": message, "key": key}
        self.bus.emit(_EVENTS[status], payload)
        telemetry.record_event(
            f"highlight.{status}",
            level="warning" if level == "warn" else level,
            data={"message": message},
            logger_name=self._logger_name,
        )
        self._notify(message, level)
        return ActionResult(status=status, message=message, key=key)


_WHOLE_DOCUMENT = 2**31 - 1

_EVENTS = {
    "created": "highlight.added",
    "exists": "highlight.exists",
    "invalid_selection": "highlight.invalid",
    "removed": "highlight.removed",
    "not_found": "highlight.missing",
    "cleared": "highlight.cleared",
}


__all__ = ["ActionResult", "HighlightBus", "HighlightService", "Notifier"]
