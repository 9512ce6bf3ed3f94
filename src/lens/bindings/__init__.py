"""Key bindings for the highlight verbs."""

from .models import ActionRef, Binding, KeySequence, parse_keys
from .table import BindingConflictError, BindingTable, Resolution
from .defaults import DEFAULT_ACTIONS, default_bindings, load_default_bindings

__all__ = [
    "ActionRef",
    "Binding",
    "KeySequence",
    "parse_keys",
    "BindingConflictError",
    "BindingTable",
    "Resolution",
    "DEFAULT_ACTIONS",
    "default_bindings",
    "load_default_bindings",
]
