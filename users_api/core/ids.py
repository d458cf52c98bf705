"""Id allocation strategies for new users."""

import math
import re
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

# Decimal literals, signed Infinity, and unsigned hex/octal/binary integers.
_DECIMAL_RE = re.compile(r"[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?", re.ASCII)
_INFINITY_RE = re.compile(r"([+-]?)Infinity")
_RADIX_RE = re.compile(r"0([xX][0-9a-fA-F]+|[oO][0-7]+|[bB][01]+)")
_RADIX_BASES = {"x": 16, "o": 8, "b": 2}


class IdAllocator(ABC):
    """Chooses the id of a user about to be appended to a collection."""

    name = "base"

    @abstractmethod
    def next_id(self, users: List[Dict[str, Any]]) -> int:
        """Return the id for a record appended to ``users``."""


class LengthIdAllocator(IdAllocator):
    """Next id is the collection length plus one."""

    name = "length"

    def next_id(self, users: List[Dict[str, Any]]) -> int:
        return len(users) + 1


class MaxIdAllocator(IdAllocator):
    """
    Next id is one more than the largest integer id present.

    Records without an integer id are ignored, so an empty or fully
    malformed collection starts at 1.
    """

    name = "max"

    def next_id(self, users: List[Dict[str, Any]]) -> int:
        ids = [
            u["id"] for u in users
            if isinstance(u, dict) and isinstance(u.get("id"), int) and not isinstance(u["id"], bool)
        ]
        return max(ids, default=0) + 1


ALLOCATORS = {
    LengthIdAllocator.name: LengthIdAllocator,
    MaxIdAllocator.name: MaxIdAllocator,
}


def get_allocator(strategy: str) -> IdAllocator:
    """Return an allocator instance for a strategy name ("length" or "max")."""
    try:
        return ALLOCATORS[strategy]()
    except KeyError:
        raise ValueError(f"Unknown id strategy: {strategy}")


def parse_user_id(raw_id: str) -> Optional[float]:
    """
    Coerce a raw id (e.g. a path segment) to a number, leniently.

    Accepts the numeric-literal forms of a JavaScript ``Number()`` cast:
    surrounding whitespace is ignored, "2" and "2.0" both give 2.0, "0x10"
    gives 16.0 and "-Infinity" is allowed. Blank input is 0. Anything else
    ("abc", "1_0", "inf", "nan") gives None, which matches no user.
    """
    text = raw_id.strip()
    if not text:
        return 0.0
    if _DECIMAL_RE.fullmatch(text):
        return float(text)
    infinity = _INFINITY_RE.fullmatch(text)
    if infinity:
        return -math.inf if infinity.group(1) == "-" else math.inf
    radix = _RADIX_RE.fullmatch(text)
    if radix:
        digits = radix.group(1)
        value = int(digits[1:], _RADIX_BASES[digits[0].lower()])
        try:
            return float(value)
        except OverflowError:
            return math.inf
    return None
