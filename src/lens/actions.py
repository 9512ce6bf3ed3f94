"""User-facing highlight verbs bound to keys by the input layer."""

from __future__ import annotations

from dataclasses import dataclass

from lens.service import ActionResult, HighlightService
from lens.surface import EditorSession


@dataclass(slots=True)
class ActionContext:
    session: EditorSession
    service: HighlightService


def add_highlight_from_visual(context: ActionContext, match=None) -> ActionResult:
    del match
    selection = context.session.selection()
    if selection is None:
        return context.service.reject("Must be called from visual mode")
    result = context.service.request_add(
        selection.document_id, selection.mode, selection.anchor, selection.active
    )
    context.session.exit_visual()
    return result


def remove_highlight_at_cursor(context: ActionContext, match=None) -> ActionResult:
    del match
    session = context.session
    return context.service.request_remove_at(session.document.id, session.cursor)


def toggle_highlight(context: ActionContext, match=None) -> ActionResult:
    del match
    session = context.session
    result = context.service.request_toggle(
        session.document.id, session.cursor, session.selection()
    )
    session.exit_visual()
    return result


def clear_document(context: ActionContext, match=None) -> ActionResult:
    del match
    return context.service.request_clear_document(context.session.document.id)


def clear_all(context: ActionContext, match=None) -> ActionResult:
    del match
    return context.service.request_clear_all()


__all__ = [
    "ActionContext",
    "add_highlight_from_visual",
    "remove_highlight_at_cursor",
    "toggle_highlight",
    "clear_document",
    "clear_all",
]
