"""Persistent, toggleable highlight regions for text-editing surfaces."""

__all__ = [
    "actions",
    "adapters",
    "bindings",
    "config",
    "regions",
    "render",
    "runtime",
    "service",
    "surface",
]

__version__ = "0.1.0"
