"""Shared validation helpers for frozen dataclass models.

Private module -- not part of the public API. Used by ``__post_init__``
methods in sibling model modules so invalid instances never escape their
constructor.
"""

from __future__ import annotations

import string
from collections.abc import Iterable
from typing import Any


_HEX_DIGITS = frozenset(string.hexdigits.lower())


def validate_instance(value: Any, expected: type, name: str) -> None:
    """Raise ``TypeError`` if *value* is not an instance of *expected*."""
    if not isinstance(value, expected):
        article = "an" if expected.__name__[0] in "AEIOUaeiou" else "a"
        raise TypeError(f"{name} must be {article} {expected.__name__}, got {type(value).__name__}")


def validate_timestamp(value: Any, name: str) -> None:
    """Raise if *value* is not a non-negative ``int`` (``bool`` excluded)."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{name} must be an int, got {type(value).__name__}")
    if value < 0:
        raise ValueError(f"{name} must be non-negative")


def validate_kind(value: Any, name: str = "kind") -> None:
    """Raise if *value* is not a non-negative ``int``. Kinds have no upper bound."""
    validate_timestamp(value, name)


def is_hex(value: Any, length: int) -> bool:
    """Return True if *value* is a lowercase hex string of exactly *length* chars."""
    return isinstance(value, str) and len(value) == length and set(value) <= _HEX_DIGITS


def validate_hex(value: Any, length: int, name: str) -> None:
    """Raise if *value* is not a lowercase hex string of *length* characters."""
    if not isinstance(value, str):
        raise TypeError(f"{name} must be a str, got {type(value).__name__}")
    if not is_hex(value, length):
        raise ValueError(f"{name} must be {length} lowercase hex characters")


def freeze_tags(tags: Iterable[Iterable[str]], name: str = "tags") -> tuple[tuple[str, ...], ...]:
    """Convert a nested tag sequence into a tuple of tuples of ``str``.

    Order is preserved exactly; tags are never sorted or deduplicated,
    since both are part of the event id hash input.

    Raises:
        TypeError: If *tags* is a bare string, a tag is a bare string, or
            a tag value is not a ``str``.
    """
    if isinstance(tags, str | bytes):
        raise TypeError(f"{name} must be a sequence of sequences, got {type(tags).__name__}")
    frozen: list[tuple[str, ...]] = []
    for tag in tags:
        if isinstance(tag, str | bytes):
            raise TypeError(f"{name} entries must be sequences of str, got {type(tag).__name__}")
        values = tuple(tag)
        for item in values:
            if not isinstance(item, str):
                raise TypeError(f"{name} values must be str, got {type(item).__name__}")
        frozen.append(values)
    return tuple(frozen)
