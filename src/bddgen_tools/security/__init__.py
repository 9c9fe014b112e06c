"""Path safety primitives."""

from .paths import PathBlockedError, resolve_under_root

__all__ = [
    "PathBlockedError",
    "resolve_under_root",
]
