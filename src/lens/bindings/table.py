"""Binding storage plus trie-based resolution of typed key sequences."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, Literal, Optional, Sequence

from lens.runtime.telemetry import span

from .models import ActionRef, Binding


class BindingConflictError(RuntimeError):
    """Raised when two bindings claim the same keys in the same mode."""

    def __init__(self, binding: Binding, conflicts: Iterable[Binding]):
        conflicts_tuple = tuple(conflicts)
        super().__init__(
            f"Binding '{binding.id}' conflicts with {[b.id for b in conflicts_tuple]}"
        )
        self.binding = binding
        self.conflicts = conflicts_tuple


@dataclass(slots=True)
class _Node:
    binding: Optional[str] = None
    children: Dict[str, "_Node"] = field(default_factory=dict)

    def walk(self) -> Iterator["_Node"]:
        stack = list(self.children.values())
        while stack:
            node = stack.pop()
            yield node
            stack.extend(node.children.values())


@dataclass(frozen=True, slots=True)
class Resolution:
    status: Literal["match", "pending", "miss"]
    binding: Optional[Binding] = None
    action: Optional[ActionRef] = None
    next_expected: tuple[str, ...] = ()
    timeout_ms: Optional[int] = None


class BindingTable:
    """Actions and per-mode bindings, resolved token by token."""

    def __init__(self, *, logger_name: str | None = None) -> None:
        self._actions: Dict[str, ActionRef] = {}
        self._bindings: Dict[str, Binding] = {}
        self._logger_name = logger_name
        self._revision = 0
        self._tries: Dict[str, tuple[int, _Node]] = {}

    def revision(self) -> int:
        return self._revision

    def get_action(self, action_id: str) -> ActionRef:
        try:
            return self._actions[action_id]
        except KeyError as exc:
            raise KeyError(f"Action '{action_id}' is not registered") from exc

    def bindings(self, mode: Optional[str] = None) -> Iterator[Binding]:
        for binding in self._bindings.values():
            if mode is None or binding.mode == mode:
                yield binding

    def register_action(self, action: ActionRef, *, replace: bool = False) -> ActionRef:
        if not replace and action.id in self._actions:
            raise ValueError(f"Action '{action.id}' already registered")
        self._actions[action.id] = action
        return action

    def register_binding(self, binding: Binding, *, replace: bool = False) -> Binding:
        with span(
            "bindings::register",
            logger_name=self._logger_name,
            component="bindings",
            metadata={"binding_id": binding.id, "mode": binding.mode},
        ) as handle:
            if binding.action_id not in self._actions:
                raise KeyError(
                    f"Binding '{binding.id}' references unknown action "
                    f"'{binding.action_id}'"
                )
            conflicts = [
                existing
                for existing in self.bindings(binding.mode)
                if existing.id != binding.id
                and existing.sequence.tokens == binding.sequence.tokens
            ]
            if conflicts and not replace:
                handle.add_metadata("conflicts", ",".join(c.id for c in conflicts))
                raise BindingConflictError(binding, conflicts)
            if binding.id in self._bindings and not replace:
                raise ValueError(f"Binding id '{binding.id}' already registered")
            for conflict in conflicts:
                del self._bindings[conflict.id]
            self._bindings[binding.id] = binding
            self._revision += 1
            return binding

    def unregister_binding(self, binding_id: str) -> Optional[Binding]:
        binding = self._bindings.pop(binding_id, None)
        if binding is not None:
            self._revision += 1
        return binding

    def resolve(self, mode: str, tokens: Sequence[str]) -> Resolution:
        """Match ``tokens`` typed so far against the bindings of ``mode``.

        ``pending`` means the tokens are a strict prefix of at least one
        binding; ``timeout_ms`` is the shortest timeout among those bindings.
        """

        node = self._trie(mode)
        for token in tokens:
            child = node.children.get(token)
            if child is None:
                return Resolution(status="miss")
            node = child

        if node.binding is not None:
            binding = self._bindings[node.binding]
            return Resolution(
                status="match",
                binding=binding,
                action=self.get_action(binding.action_id),
            )

        if node.children:
            timeouts = [
                self._bindings[child.binding].sequence.timeout_ms
                for child in node.walk()
                if child.binding is not None
            ]
            return Resolution(
                status="pending",
                next_expected=tuple(sorted(node.children)),
                timeout_ms=min(timeouts) if timeouts else None,
            )
        return Resolution(status="miss")

    def _trie(self, mode: str) -> _Node:
        cached = self._tries.get(mode)
        if cached and cached[0] == self._revision:
            return cached[1]
        root = _Node()
        for binding in self.bindings(mode):
            node = root
            for token in binding.sequence.tokens:
                node = node.children.setdefault(token, _Node())
            node.binding = binding.id
        self._tries[mode] = (self._revision, root)
        return root


__all__ = ["BindingConflictError", "BindingTable", "Resolution"]
