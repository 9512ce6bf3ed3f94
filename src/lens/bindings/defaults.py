"""Built-in highlight actions and the bindings derived from ``LensConfig``."""

from __future__ import annotations

from typing import Optional

from lens import actions
from lens.config import LensConfig

from .models import ActionRef, Binding, KeySequence
from .table import BindingTable

DEFAULT_ACTIONS: tuple[ActionRef, ...] = (
    ActionRef(
        id="lens.add_highlight",
        handler=actions.add_highlight_from_visual,
        description="Add highlight to visual selection",
    ),
    ActionRef(
        id="lens.remove_highlight",
        handler=actions.remove_highlight_at_cursor,
        description="Remove highlight at cursor",
    ),
    ActionRef(
        id="lens.toggle_highlight",
        handler=actions.toggle_highlight,
        description="Add in visual mode, remove at cursor otherwise",
    ),
    ActionRef(
        id="lens.clear_document",
        handler=actions.clear_document,
        description="Clear highlights in the current document",
    ),
    ActionRef(
        id="lens.clear_all",
        handler=actions.clear_all,
        description="Clear all highlights",
    ),
)


def default_bindings(
    config: LensConfig, *, timeout_ms: int = 1000
) -> tuple[Binding, ...]:
    def sequence(spec: str) -> KeySequence:
        return KeySequence.parse(spec, leader=config.leader, timeout_ms=timeout_ms)

    return (
        Binding(
            id="visual.add_highlight",
            mode="visual",
            sequence=sequence(config.add_key),
            action_id="lens.add_highlight",
            description="Add highlight to visual selection",
        ),
        Binding(
            id="normal.remove_highlight",
            mode="normal",
            sequence=sequence(config.remove_key),
            action_id="lens.remove_highlight",
            description="Remove highlight at cursor",
        ),
        Binding(
            id="normal.clear_all",
            mode="normal",
            sequence=sequence(config.clear_all_key),
            action_id="lens.clear_all",
            description="Clear all highlights",
        ),
    )


def load_default_bindings(
    table: BindingTable,
    config: Optional[LensConfig] = None,
    *,
    replace: bool = False,
    timeout_ms: int = 1000,
) -> None:
    """Register every built-in action, plus key bindings if enabled.

    Actions are always available so hosts can bind them themselves when
    ``config.setup_keymaps`` is off.
    """

    config = config or LensConfig()
    for action in DEFAULT_ACTIONS:
        table.register_action(action, replace=replace)
    if not config.setup_keymaps:
        return
    for binding in default_bindings(config, timeout_ms=timeout_ms):
        table.register_binding(binding, replace=replace)


__all__ = ["DEFAULT_ACTIONS", "default_bindings", "load_default_bindings"]
