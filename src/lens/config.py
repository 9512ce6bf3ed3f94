"""Highlight style and key configuration."""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from typing import Any, Mapping, Optional

from lens.runtime.telemetry import env, env_flag


@dataclass(frozen=True, slots=True)
class HighlightStyle:
    """Opaque style descriptor forwarded to the renderer's ``paint``."""

    group: str = "LensHighlight"
    bg: Optional[str] = "#3e4451"
    fg: Optional[str] = None
    bold: Optional[bool] = None
    italic: Optional[bool] = None
    underline: Optional[bool] = None


@dataclass(frozen=True, slots=True)
class LensConfig:
    highlight_group: str = "LensHighlight"
    bg: Optional[str] = "#3e4451"
    fg: Optional[str] = None
    bold: Optional[bool] = None
    italic: Optional[bool] = None
    underline: Optional[bool] = None
    setup_keymaps: bool = True
    leader: str = "\\"
    add_key: str = "<leader>l"
    remove_key: str = "<leader>l"
    clear_all_key: str = "<leader>L"

    @property
    def style(self) -> HighlightStyle:
        return HighlightStyle(
            group=self.highlight_group,
            bg=self.bg,
            fg=self.fg,
            bold=self.bold,
            italic=self.italic,
            underline=self.underline,
        )

    def merge(self, opts: Optional[Mapping[str, Any]] = None) -> "LensConfig":
        """Return a copy with ``opts`` forced over the current values."""

        opts = dict(opts or {})
        unknown = sorted(set(opts) - _FIELD_NAMES)
        if unknown:
            raise ValueError(f"Unknown lens option(s): {', '.join(unknown)}")
        return replace(self, **opts)

    @classmethod
    def from_env(cls, base: Optional["LensConfig"] = None) -> "LensConfig":
        """Overlay ``LENS_*`` environment variables on ``base`` (or defaults)."""

        config = base or cls()
        overrides: dict[str, Any] = {}
        for name in ("highlight_group", "bg", "fg", "leader"):
            raw = env(name.upper())
            if raw is None:
                continue
            if name in {"bg", "fg"} and raw.strip().lower() in {"", "none"}:
                overrides[name] = None
            else:
                overrides[name] = raw
        for name in ("bold", "italic", "underline"):
            if env(name.upper()) is not None:
                overrides[name] = env_flag(name.upper(), False)
        for name in ("add_key", "remove_key", "clear_all_key"):
            raw = env(name.upper())
            if raw:
                overrides[name] = raw
        if env("SETUP_KEYMAPS") is not None:
            overrides["setup_keymaps"] = env_flag("SETUP_KEYMAPS", True)
        return config.merge(overrides)


_FIELD_NAMES = frozenset(f.name for f in fields(LensConfig))


__all__ = ["HighlightStyle", "LensConfig"]
