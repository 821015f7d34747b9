"""Integer bitsets over dense vertex and face indices.

Python integers are unbounded, so a bitset is just an ``int`` whose bit ``i``
marks element ``i``. The helpers below name the set algebra used by the
search so call sites read as set operations rather than bit twiddling.
"""

from __future__ import annotations

from typing import Iterable, Iterator

EMPTY = 0


def singleton(element: int) -> int:
    return 1 << element


def from_elements(elements: Iterable[int]) -> int:
    """Build a bitset containing every element of ``elements``."""
    bits = EMPTY
    for el in elements:
        bits |= 1 << el
    return bits


def contains(bits: int, element: int) -> bool:
    return bool(bits >> element & 1)


def contains_all(bits: int, elements: int) -> bool:
    return bits & elements == elements


def has_more_than_one(bits: int) -> bool:
    # Clearing the lowest set bit leaves something iff there were two or more.
    return bool(bits & (bits - 1))


def is_singleton(bits: int) -> bool:
    return bits != 0 and not bits & (bits - 1)


def size(bits: int) -> int:
    return bin(bits).count("1")


def elements(bits: int) -> Iterator[int]:
    """Yield the elements of ``bits`` in increasing order."""
    while bits:
        low = bits & -bits
        yield low.bit_length() - 1
        bits ^= low


def to_list(bits: int) -> list[int]:
    return list(elements(bits))


__all__ = [
    "EMPTY",
    "singleton",
    "from_elements",
    "contains",
    "contains_all",
    "has_more_than_one",
    "is_singleton",
    "size",
    "elements",
    "to_list",
]
