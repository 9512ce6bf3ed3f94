"""In-memory table of highlight regions keyed by their dedup key."""

from __future__ import annotations

from typing import Any, Callable, Dict, Hashable, Iterable, Iterator, Optional, Tuple

from lens.runtime import telemetry

from .models import (
    AddOutcome,
    CanonicalRange,
    DedupKey,
    DocumentId,
    Position,
    RegionRecord,
    RemoveOutcome,
)

PaintFn = Callable[[CanonicalRange], Iterable[Hashable]]
UnpaintFn = Callable[[Tuple[Hashable, ...], DocumentId, CanonicalRange], Any]
UnpaintDocumentFn = Callable[[DocumentId], Any]
UnpaintAllFn = Callable[[], Any]


class RegionStore:
    """Owns every highlight record for the lifetime of the process.

    One store is shared by all open documents; records carry their own
    ``document_id`` and lookups filter on it. Records are never mutated in
    place: a region that changes extent is removed and added again.
    """

    def __init__(self, *, logger_name: str | None = None) -> None:
        self._records: Dict[DedupKey, RegionRecord] = {}
        self._logger_name = logger_name

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, key: object) -> bool:
        return key in self._records

    def get(self, key: DedupKey) -> Optional[RegionRecord]:
        return self._records.get(key)

    def records(
        self, document_id: DocumentId | None = None
    ) -> Iterator[RegionRecord]:
        for record in list(self._records.values()):
            if document_id is None or record.document_id == document_id:
                yield record

    def add(
        self, span: CanonicalRange, key: DedupKey, paint_fn: PaintFn
    ) -> AddOutcome:
        """Paint and store a region unless ``key`` is already present.

        ``paint_fn`` runs before anything is inserted, so a paint failure
        propagates and leaves the store untouched.
        """

        with telemetry.span(
            "regions::add",
            logger_name=self._logger_name,
            component="regions",
            metadata={"document": span.document_id, "lines": span.line_count},
        ) as handle:
            if key in self._records:
                handle.add_metadata("outcome", AddOutcome.ALREADY_EXISTS.value)
                return AddOutcome.ALREADY_EXISTS
            handles = tuple(paint_fn(span))
            self._records[key] = RegionRecord(key=key, range=span, handles=handles)
            handle.add_metadata("outcome", AddOutcome.CREATED.value)
            handle.add_metadata("handles", len(handles))
            return AddOutcome.CREATED

    def find_containing(
        self, document_id: DocumentId, point: Position
    ) -> Optional[DedupKey]:
        """Return the key of a region in ``document_id`` covering ``point``.

        Overlapping regions are not prevented; when several contain the point
        any one of them may be returned.
        """

        for record in self._records.values():
            if record.document_id == document_id and record.range.contains(point):
                return record.key
        return None

    def remove(self, key: DedupKey, unpaint_fn: UnpaintFn) -> RemoveOutcome:
        """Erase and forget the region stored under ``key``.

        The record is dropped even if ``unpaint_fn`` raises; the error is then
        re-raised to the caller.
        """

        record = self._records.get(key)
        if record is None:
            return RemoveOutcome.NOT_FOUND
        with telemetry.span(
            "regions::remove",
            logger_name=self._logger_name,
            component="regions",
            metadata={"document": record.document_id},
        ):
            try:
                unpaint_fn(record.handles, record.document_id, record.range)
            finally:
                self._records.pop(key, None)
        return RemoveOutcome.REMOVED

    def clear_document(
        self, document_id: DocumentId, unpaint_fn: UnpaintDocumentFn
    ) -> int:
        """Drop every record of one document; returns how many were dropped."""

        doomed = [
            key
            for key, record in self._records.items()
            if record.document_id == document_id
        ]
        with telemetry.span(
            "regions::clear_document",
            logger_name=self._logger_name,
            component="regions",
            metadata={"document": document_id, "records": len(doomed)},
        ):
            try:
                unpaint_fn(document_id)
            finally:
                for key in doomed:
                    self._records.pop(key, None)
        return len(doomed)

    def clear_all(self, unpaint_all_fn: UnpaintAllFn) -> Any:
        """Erase all paint once and empty the store unconditionally.

        Returns whatever ``unpaint_all_fn`` returned (renderers may report the
        documents they failed to clear).
        """

        with telemetry.span(
            "regions::clear_all",
            logger_name=self._logger_name,
            component="regions",
            metadata={"records": len(self._records)},
        ):
            try:
                return unpaint_all_fn()
            finally:
                self._records.clear()


__all__ = ["RegionStore", "PaintFn", "UnpaintFn", "UnpaintDocumentFn", "UnpaintAllFn"]
