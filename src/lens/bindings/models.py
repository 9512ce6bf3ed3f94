"""Key sequences, action references and bindings."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable

_SPECIAL_KEYS = {
    "esc": "ESC",
    "cr": "ENTER",
    "enter": "ENTER",
    "return": "ENTER",
    "space": "space",
    "tab": "tab",
    "bs": "backspace",
    "c-v": "ctrl+v",
}

_TOKEN = re.compile(r"<[^<>]+>|.", re.DOTALL)


def parse_keys(spec: str, *, leader: str = "\\") -> tuple[str, ...]:
    """Split a Vim-style key string such as ``"<leader>l"`` into tokens.

    ``<leader>`` expands to ``leader`` (itself parsed, so ``"<Space>"`` works);
    other bracketed names map to the token names the controller produces.
    """

    tokens: list[str] = []
    for raw in _TOKEN.findall(spec):
        if len(raw) > 2 and raw.startswith("<") and raw.endswith(">"):
            name = raw[1:-1].lower()
            if name == "leader":
                tokens.extend(parse_keys(leader, leader=""))
                continue
            tokens.append(_SPECIAL_KEYS.get(name, name))
        else:
            tokens.append(raw)
    return tuple(tokens)


@dataclass(frozen=True, slots=True)
class KeySequence:
    tokens: tuple[str, ...]
    timeout_ms: int = 1000

    def __post_init__(self) -> None:
        if not self.tokens:
            raise ValueError("KeySequence requires at least one token")
        if self.timeout_ms <= 0:
            raise ValueError("timeout_ms must be positive")

    @classmethod
    def parse(
        cls, spec: str, *, leader: str = "\\", timeout_ms: int = 1000
    ) -> "KeySequence":
        return cls(parse_keys(spec, leader=leader), timeout_ms=timeout_ms)

    @property
    def signature(self) -> str:
        return " ".join(self.tokens)


@dataclass(frozen=True, slots=True)
class ActionRef:
    """Named handler invoked as ``handler(context, match)``."""

    id: str
    handler: Callable[..., object]
    description: str = ""

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("ActionRef id cannot be empty")
        if not callable(self.handler):
            raise TypeError("handler must be callable")

    def __call__(self, *args: object, **kwargs: object) -> object:
        return self.handler(*args, **kwargs)


@dataclass(frozen=True, slots=True)
class Binding:
    id: str
    mode: str
    sequence: KeySequence
    action_id: str
    description: str = ""

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("binding id cannot be empty")
        if not self.mode:
            raise ValueError("binding mode cannot be empty")
        if not self.action_id:
            raise ValueError("binding action_id cannot be empty")


__all__ = ["ActionRef", "Binding", "KeySequence", "parse_keys"]
