"""Executable Textual app that hosts lens highlights over plain-text files."""

from __future__ import annotations

import argparse
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Sequence, Tuple

from rich.style import Style
from rich.text import Text
from textual import events
from textual.app import App, ComposeResult
from textual.containers import VerticalScroll
from textual.widgets import Footer, Header, Static

from lens.config import HighlightStyle, LensConfig
from lens.regions import END_OF_LINE, normalize_selection
from lens.runtime import telemetry

from .controller import LensController, LensUIHooks, ViewState, build_controller

SAMPLE_TEXT = """\
lens keeps track of highlighted regions.

Press v, V or ctrl+v to start a selection, move with h j k l,
then press <leader>l to highlight it. In normal mode <leader>l
removes the highlight under the cursor and <leader>L clears all.
"""

_SELECTION_STYLE = Style(reverse=True, dim=True)
_CURSOR_STYLE = Style(reverse=True)


def rich_style(style: Any) -> Style:
    if not isinstance(style, HighlightStyle):
        return Style(bgcolor="grey30")
    return Style(
        bgcolor=style.bg,
        color=style.fg,
        bold=style.bold,
        italic=style.italic,
        underline=style.underline,
    )


def render_view(view: ViewState) -> Text:
    """Draw the document with highlights, the selection and the cursor."""

    text = Text()
    selection = _selection_spans(view)
    for index, line in enumerate(view.lines):
        row = Text(line + " ")
        for line_no, start, end, style in view.highlights:
            if line_no == index:
                row.stylize(rich_style(style), start, end)
        for start, end in selection.get(index, ()):
            row.stylize(_SELECTION_STYLE, start, end)
        if view.cursor[0] == index:
            row.stylize(_CURSOR_STYLE, view.cursor[1], view.cursor[1] + 1)
        text.append_text(row)
        if index < len(view.lines) - 1:
            text.append("\n")
    return text


def _selection_spans(view: ViewState) -> dict[int, list[Tuple[int, int]]]:
    if view.selection is None:
        return {}
    span, _key = normalize_selection(view.selection)
    spans: dict[int, list[Tuple[int, int]]] = {}
    for piece in span.line_spans():
        if piece.line >= len(view.lines):
            continue
        length = len(view.lines[piece.line])
        end = length if piece.end_col is END_OF_LINE else piece.end_col
        spans.setdefault(piece.line, []).append((piece.start_col, int(end)))
    return spans


@dataclass
class UIState:
    status_text: str = ""


class LensApp(App[None]):
    """Minimal Textual UI showing lens highlights on open documents."""

    CSS = """
	Screen {
		layout: vertical;
	}

	#document-view {
		height: 1fr;
		border: round $accent;
		padding: 0 1;
	}

	#status-line {
		height: 1;
		background: $surface-darken-1;
		padding: 0 1;
	}
	"""

    BINDINGS = [
        ("ctrl+c", "quit", "Quit"),
        ("ctrl+q", "quit", "Quit"),
    ]

    def __init__(
        self,
        *,
        paths: Sequence[Path] = (),
        config: Optional[LensConfig] = None,
    ) -> None:
        super().__init__()
        self._paths = tuple(paths)
        self._config = config or LensConfig()
        self._state = UIState()
        self.controller: LensController | None = None
        self._document_widget: Static | None = None
        self._status_widget: Static | None = None
        self.logger = telemetry.get_logger("lens.app")

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        with VerticalScroll():
            self._document_widget = Static("", id="document-view")
            yield self._document_widget
        self._status_widget = Static("", id="status-line")
        yield self._status_widget
        yield Footer()

    def on_mount(self) -> None:
        hooks = LensUIHooks(
            update_view=self._update_view,
            update_status=self._update_status,
            notify=self._notify,
            log=self.logger.debug,
        )
        self.controller = build_controller(hooks, config=self._config)
        for path in self._paths:
            self.controller.open_path(path)
        if not self._paths:
            self.controller.open_text(SAMPLE_TEXT, name="welcome")
        self.set_interval(0.1, self._process_timeouts)

    def _process_timeouts(self) -> None:
        if self.controller:
            self.controller.process_timeouts()

    def on_key(self, event: events.Key) -> None:
        if not self.controller:
            return
        normalized = self._normalize_key(event)
        if normalized is None:
            return
        key, text = normalized
        self.controller.handle_key(key, text=text)
        event.stop()
        event.prevent_default()

    def _update_view(self, view: ViewState) -> None:
        self.sub_title = f"{view.name} [{view.mode}]"
        if self._document_widget:
            self._document_widget.update(render_view(view))

    def _update_status(self, status: str) -> None:
        self._state.status_text = status
        if self._status_widget:
            self._status_widget.update(status)

    def _notify(self, message: str, level: str) -> None:
        self.notify(message, severity="warning" if level == "warn" else "information")

    @staticmethod
    def _normalize_key(event: events.Key) -> Optional[Tuple[str, Optional[str]]]:
        key = event.key
        if key in {"ctrl+c", "ctrl+q"}:
            return None
        if key == "escape":
            return ("ESC", None)
        if key in {"enter", "return"}:
            return ("ENTER", None)
        if event.character and event.is_printable:
            return (event.character, event.character)
        return (key, None)


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Highlight regions of text files.")
    parser.add_argument("paths", nargs="*", type=Path, help="Files to open")
    parser.add_argument(
        "--leader",
        default=None,
        help="Leader key used by <leader> bindings (default: backslash)",
    )
    parser.add_argument("--bg", default=None, help="Highlight background color")
    parser.add_argument("--fg", default=None, help="Highlight foreground color")
    parser.add_argument(
        "--no-keymaps",
        action="store_true",
        help="Do not install the default highlight bindings",
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = _parse_args(argv)
    overrides = {
        name: value
        for name, value in (("leader", args.leader), ("bg", args.bg), ("fg", args.fg))
        if value is not None
    }
    if args.no_keymaps:
        overrides["setup_keymaps"] = False
    config = LensConfig.from_env().merge(overrides)
    LensApp(paths=args.paths, config=config).run()


if __name__ == "__main__":  # pragma: no cover - manual demo
    main()
