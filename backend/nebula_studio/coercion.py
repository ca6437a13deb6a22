"""Coerce-or-default policies for node configuration fields.

Form input arrives as loosely typed values (mostly text). Each policy turns a
raw value into the field's type and falls back to the field's default when
the value cannot be used, so an invalid edit never surfaces as an error.
"""

import math
from collections.abc import Iterable
from enum import Enum
from typing import Any, TypeVar

E = TypeVar("E", bound=Enum)

_TRUE_WORDS = {"true", "1", "yes", "on"}
_FALSE_WORDS = {"false", "0", "no", "off"}


def text(raw: Any) -> str:
    """Render a raw value as text; None becomes the empty string."""
    if raw is None:
        return ""
    return str(raw)


def float_or_default(raw: Any, default: float, minimum: float = 0.0) -> float:
    """Parse a float, falling back to ``default`` when invalid or below ``minimum``."""
    if isinstance(raw, bool):
        return default
    try:
        value = float(raw)
    except (TypeError, ValueError, OverflowError):
        return default
    if math.isnan(value) or math.isinf(value) or value < minimum:
        return default
    return value


def _parse_int(raw: Any) -> int | None:
    if isinstance(raw, bool) or raw is None:
        return None
    if isinstance(raw, int):
        return raw
    try:
        value = float(str(raw).strip())
    except (ValueError, OverflowError):
        return None
    if math.isnan(value) or math.isinf(value) or not value.is_integer():
        return None
    return int(value)


def positive_int_or_default(raw: Any, default: int) -> int:
    """Parse a positive integer, falling back to ``default``."""
    value = _parse_int(raw)
    if value is None or value < 1:
        return default
    return value


def optional_positive_int(raw: Any) -> int | None:
    """Parse an optional positive integer; empty or invalid input leaves it unset."""
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return None
    value = _parse_int(raw)
    if value is None or value < 1:
        return None
    return value


def split_list(raw: Any) -> list[str]:
    """Split comma-separated text into trimmed, non-empty items, keeping order."""
    if raw is None:
        return []
    if isinstance(raw, str):
        items: Iterable[Any] = raw.split(",")
    elif isinstance(raw, Iterable):
        items = raw
    else:
        items = [raw]
    return [item for item in (text(i).strip() for i in items) if item]


def bool_or_default(raw: Any, default: bool) -> bool:
    """Interpret checkbox-style input, falling back to ``default``."""
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, (int, float)) and raw in (0, 1):
        return bool(raw)
    if isinstance(raw, str):
        word = raw.strip().lower()
        if word in _TRUE_WORDS:
            return True
        if word in _FALSE_WORDS:
            return False
    return default


def choice_or_default(raw: Any, choices: type[E], default: E) -> E:
    """Return the enum member for ``raw``, or ``default`` if it is not a valid choice."""
    if isinstance(raw, choices):
        return raw
    try:
        return choices(text(raw).strip())
    except ValueError:
        return default
