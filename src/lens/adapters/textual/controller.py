"""UI-agnostic controller wiring keys to the session and highlight service."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from lens.actions import ActionContext
from lens.bindings import BindingTable, Resolution, load_default_bindings
from lens.config import LensConfig
from lens.regions import Position, Selection, SelectionMode
from lens.render import MemoryRenderer
from lens.runtime import telemetry
from lens.service import ActionResult, HighlightService
from lens.surface import Document, EditorSession

HighlightSpan = Tuple[int, int, int, Any]  # (line, start, end, style)


def _noop(*_args, **_kwargs) -> None:  # pragma: no cover - default hook
    return None


@dataclass(slots=True)
class ViewState:
    """Everything a host needs to draw the active document."""

    document_id: Optional[int]
    name: str
    lines: Tuple[str, ...]
    cursor: Position
    mode: str
    selection: Optional[Selection]
    highlights: Tuple[HighlightSpan, ...] = ()
    documents: Tuple[Tuple[int, str], ...] = ()


@dataclass(slots=True)
class LensUIHooks:
    update_view: Callable[[ViewState], None]
    update_status: Callable[[str], None] = _noop
    notify: Callable[[str, str], None] = _noop
    handle_event: Callable[[str, object | None], None] = _noop
    log: Callable[[str], None] = _noop


@dataclass
class PendingKeys:
    tokens: List[str] = field(default_factory=list)
    deadline: Optional[float] = None


_MOTIONS: Dict[str, Tuple[int, int]] = {
    "h": (0, -1),
    "left": (0, -1),
    "l": (0, 1),
    "right": (0, 1),
    "j": (1, 0),
    "down": (1, 0),
    "k": (-1, 0),
    "up": (-1, 0),
}

_VISUAL_KEYS: Dict[str, SelectionMode] = {
    "v": SelectionMode.CHARACTER,
    "V": SelectionMode.LINE,
    "ctrl+v": SelectionMode.BLOCK,
}

_MODE_LABELS = {
    None: "NORMAL",
    SelectionMode.CHARACTER: "VISUAL",
    SelectionMode.LINE: "V-LINE",
    SelectionMode.BLOCK: "V-BLOCK",
}

_BUS_EVENTS = (
    "highlight.added",
    "highlight.exists",
    "highlight.invalid",
    "highlight.removed",
    "highlight.missing",
    "highlight.cleared",
)


class LensController:
    """Feeds key tokens through the binding table, falling back to motions."""

    def __init__(
        self,
        session: EditorSession,
        service: HighlightService,
        table: BindingTable,
        renderer: MemoryRenderer,
        hooks: LensUIHooks,
        *,
        default_timeout_ms: int = 1000,
    ) -> None:
        self.session = session
        self.service = service
        self.table = table
        self.renderer = renderer
        self.hooks = hooks
        self.logger = telemetry.get_logger("lens.controller")
        self._pending = PendingKeys()
        self._default_timeout_ms = default_timeout_ms
        self._context = ActionContext(session=session, service=service)
        self._subscribe_events()

    @property
    def pending_tokens(self) -> Tuple[str, ...]:
        return tuple(self._pending.tokens)

    def open_text(self, text: str, *, name: str = "") -> Document:
        document = self.session.open_text(text, name=name)
        self.renderer.attach(document.id)
        self.refresh()
        return document

    def open_path(self, path: Path) -> Document:
        document = self.session.open_path(path)
        self.renderer.attach(document.id)
        self.refresh()
        return document

    def close_document(self, document_id: int) -> Document:
        """Drop a document's highlights, then close it on both sides."""

        self.service.request_clear_document(document_id)
        self.renderer.detach(document_id)
        document = self.session.close(document_id)
        self.refresh()
        return document

    def handle_key(
        self,
        key: str,
        *,
        text: Optional[str] = None,
        modifiers: Iterable[str] = (),
    ) -> ActionResult:
        token = _token(key, text, modifiers)
        self._log_state("key ->", key=token)
        if not self.session.has_document:
            return ActionResult(status="ignored", message="no_document")

        self._pending.tokens.append(token)
        resolution = self.table.resolve(self.session.mode_name, self._pending.tokens)
        if resolution.status == "match":
            self._reset_pending()
            result = self._run(resolution)
        elif resolution.status == "pending":
            timeout_ms = resolution.timeout_ms or self._default_timeout_ms
            self._pending.deadline = time.monotonic() + timeout_ms / 1000.0
            result = ActionResult(
                status="pending", message=" ".join(self.pending_tokens)
            )
        else:
            self._reset_pending()
            result = self._builtin(token)

        self._after(result)
        return result

    def process_timeouts(self) -> Optional[ActionResult]:
        deadline = self._pending.deadline
        if deadline is None or time.monotonic() < deadline:
            return None
        return self.force_timeout()

    def force_timeout(self) -> Optional[ActionResult]:
        if not self._pending.tokens:
            return None
        tokens = self.pending_tokens
        self._reset_pending()
        result = ActionResult(status="timeout", message=" ".join(tokens))
        self._log_state("timeout ->", tokens=tokens)
        self._after(result)
        return result

    def view(self) -> ViewState:
        session = self.session
        documents = tuple((doc.id, doc.name) for doc in session)
        if not session.has_document:
            return ViewState(None, "", ("",), (0, 0), "NORMAL", None, (), documents)
        document = session.document
        lines = tuple(document.snapshot())
        highlights = tuple(
            (index, start, end, style)
            for index, line in enumerate(lines)
            for start, end, style in self.renderer.spans(document.id, index, len(line))
        )
        visual = session.visual
        return ViewState(
            document_id=document.id,
            name=document.name,
            lines=lines,
            cursor=session.cursor,
            mode=_MODE_LABELS[visual.mode if visual else None],
            selection=session.selection(),
            highlights=highlights,
            documents=documents,
        )

    def refresh(self) -> None:
        self.hooks.update_view(self.view())

    def _run(self, resolution: Resolution) -> ActionResult:
        assert resolution.binding is not None and resolution.action is not None
        with telemetry.span(
            "bindings::execute",
            component="bindings",
            metadata={
                "binding_id": resolution.binding.id,
                "action": resolution.action.id,
            },
        ):
            outcome = resolution.action(self._context, resolution)
        if isinstance(outcome, ActionResult):
            return outcome
        return ActionResult(status="ok")

    def _builtin(self, token: str) -> ActionResult:
        session = self.session
        if token in _MOTIONS:
            session.move_cursor(*_MOTIONS[token])
            return ActionResult(status="motion")
        if token == "0":
            session.set_cursor(session.cursor[0], 0)
            return ActionResult(status="motion")
        if token == "$":
            line = session.cursor[0]
            session.set_cursor(line, session.document.line_length(line))
            return ActionResult(status="motion")
        if token == "G":
            session.set_cursor(session.document.line_count - 1, session.cursor[1])
            return ActionResult(status="motion")
        if token in _VISUAL_KEYS:
            return self._switch_visual(_VISUAL_KEYS[token])
        if token == "ESC":
            session.exit_visual()
            return ActionResult(status="visual", message="exit_visual")
        if token == "tab":
            document = session.cycle(1)
            return ActionResult(status="document", message=document.name)
        return ActionResult(status="ignored")

    def _switch_visual(self, mode: SelectionMode) -> ActionResult:
        visual = self.session.visual
        if visual is None:
            self.session.enter_visual(mode)
        elif visual.mode is mode:
            self.session.exit_visual()
            return ActionResult(status="visual", message="exit_visual")
        else:
            visual.mode = mode
        return ActionResult(status="visual", message=_MODE_LABELS[mode])

    def _after(self, result: ActionResult) -> None:
        status = result.message or result.status
        if status:
            self.hooks.update_status(status)
        self.refresh()
        self._log_state("result <-", status=result.status, message=result.message)

    def _reset_pending(self) -> None:
        self._pending.tokens.clear()
        self._pending.deadline = None

    def _subscribe_events(self) -> None:
        bus = self.service.bus
        for event in _BUS_EVENTS:
            bus.subscribe(
                event, lambda payload, name=event: self._handle_event(name, payload)
            )

    def _handle_event(self, name: str, payload: object | None) -> None:
        self._log_state("event ->", event=name, payload=payload)
        self.hooks.handle_event(name, payload)

    def _log_state(self, prefix: str, **fields: object) -> None:
        snapshot = self._state_metadata()
        snapshot.update({k: v for k, v in fields.items() if v is not None})
        self.hooks.log(" ".join([prefix, *(f"{k}={v!r}" for k, v in snapshot.items())]))

    def _state_metadata(self) -> Dict[str, object]:
        session = self.session
        if not session.has_document:
            return {"mode": session.mode_name, "document": None}
        return {
            "mode": session.mode_name,
            "document": session.document.id,
            "cursor": session.cursor,
            "pending": self.pending_tokens,
            "regions": len(self.service.store),
        }


def _token(key: str, text: Optional[str], modifiers: Iterable[str]) -> str:
    mods = tuple(str(mod).lower() for mod in modifiers)
    if "ctrl" in mods and len(key) == 1:
        return f"ctrl+{key.lower()}"
    if key in {"escape", "<Esc>"}:
        return "ESC"
    if key in {"enter", "return"}:
        return "ENTER"
    if text and len(text) == 1 and text.isprintable():
        return text
    return key


def build_controller(
    hooks: LensUIHooks,
    *,
    config: Optional[LensConfig] = None,
    default_timeout_ms: int = 1000,
) -> LensController:
    """Create the renderer, store, service, session and bindings for one host."""

    config = config or LensConfig()
    renderer = MemoryRenderer()
    service = HighlightService(renderer, config=config, notify=hooks.notify)
    table = BindingTable(logger_name="lens.bindings")
    load_default_bindings(table, config, timeout_ms=default_timeout_ms)
    return LensController(
        EditorSession(),
        service,
        table,
        renderer,
        hooks,
        default_timeout_ms=default_timeout_ms,
    )


__all__ = [
    "LensController",
    "LensUIHooks",
    "ViewState",
    "build_controller",
]
