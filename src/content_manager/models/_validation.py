"""Shared validation helpers for frozen dataclass models.

Private module -- not part of the public API. Used by ``__post_init__``
methods in sibling model modules to enforce runtime type constraints.
"""

from __future__ import annotations

import string
from typing import Any


_HEX_DIGITS = frozenset(string.hexdigits)


def validate_instance(value: Any, expected: type, name: str) -> None:
    """Raise ``TypeError`` if *value* is not an instance of *expected*."""
    if not isinstance(value, expected):
        article = "an" if expected.__name__[0] in "AEIOUaeiou" else "a"
        raise TypeError(f"{name} must be {article} {expected.__name__}, got {type(value).__name__}")


def validate_int_range(value: Any, name: str, *, low: int = 0, high: int | None = None) -> None:
    """Raise if *value* is not an ``int`` (``bool`` excluded) within [low, high]."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{name} must be an int, got {type(value).__name__}")
    if value < low:
        raise ValueError(f"{name} must be >= {low}, got {value}")
    if high is not None and value > high:
        raise ValueError(f"{name} must be <= {high}, got {value}")


def validate_hex(value: Any, name: str, length: int) -> None:
    """Raise if *value* is not a lowercase hex string of exactly *length* characters."""
    if not isinstance(value, str):
        raise TypeError(f"{name} must be a str, got {type(value).__name__}")
    if len(value) != length:
        raise ValueError(f"{name} must be {length} hex characters, got {len(value)}")
    if value != value.lower() or not set(value) <= _HEX_DIGITS:
        raise ValueError(f"{name} must be lowercase hex")


def freeze_tags(value: Any, name: str = "tags") -> tuple[tuple[str, ...], ...]:
    """Convert a sequence of string sequences into nested tuples.

    Raises:
        TypeError: If *value* is not a list/tuple of lists/tuples of ``str``.
    """
    if not isinstance(value, list | tuple):
        raise TypeError(f"{name} must be a list, got {type(value).__name__}")
    frozen: list[tuple[str, ...]] = []
    for index, tag in enumerate(value):
        if not isinstance(tag, list | tuple):
            raise TypeError(f"{name}[{index}] must be a list, got {type(tag).__name__}")
        for item in tag:
            if not isinstance(item, str):
                raise TypeError(f"{name}[{index}] values must be str, got {type(item).__name__}")
        frozen.append(tuple(tag))
    return tuple(frozen)
