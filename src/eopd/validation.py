"""
Error types and input checks for the eOPD search.

Every fatal condition raised by this package derives from ``EopdError``.
Search exhaustion is not an error: the oracle and the enumerator report
"nothing found" through their return values.
"""

from __future__ import annotations

# Largest vertex count the short planar_code encoding can carry (n + 1 must
# fit in an unsigned 16-bit value).
MAX_SHORT_VERTICES = 65534
# Largest vertex count written in the single-byte encoding.
MAX_BYTE_VERTICES = 254


class EopdError(ValueError):
    """Base exception for malformed input and failed lookups."""

    pass


class FormatError(EopdError):
    """Raised when a planar_code stream or rotation system is malformed."""

    pass


class CapacityError(EopdError):
    """Raised when a graph exceeds the configured size bounds."""

    pass


class LookupFailure(EopdError):
    """Raised when a requested edge or triangle does not exist."""

    pass


class EdgeLookupError(LookupFailure):
    """Raised when the inverse of a half-edge cannot be found."""

    pass


class TriangleLookupError(LookupFailure):
    """Raised when a requested triangle is absent or matches several faces."""

    pass


def validate_vertex_count(num_vertices: int, max_vertices: int) -> int:
    """
    Validate a vertex count against the configured capacity.

    Args:
        num_vertices: Vertex count announced by the input
        max_vertices: Largest count the run accepts

    Returns:
        The validated vertex count

    Raises:
        FormatError: If the count cannot describe a triangulation
        CapacityError: If the count exceeds ``max_vertices``
    """
    if num_vertices < 3:
        raise FormatError(f"a triangulation needs at least 3 vertices, got {num_vertices}")
    if num_vertices > max_vertices:
        raise CapacityError(
            f"graph has {num_vertices} vertices but at most {max_vertices} are supported"
        )
    return num_vertices


def validate_max_vertices(max_vertices: int) -> int:
    """
    Validate the capacity bound itself.

    Raises:
        CapacityError: If the bound is below 3 or above what planar_code can encode
    """
    if max_vertices < 3 or max_vertices > MAX_SHORT_VERTICES:
        raise CapacityError(
            f"max_vertices must be in [3, {MAX_SHORT_VERTICES}], got {max_vertices}"
        )
    return max_vertices


__all__ = [
    "MAX_SHORT_VERTICES",
    "MAX_BYTE_VERTICES",
    "EopdError",
    "FormatError",
    "CapacityError",
    "LookupFailure",
    "EdgeLookupError",
    "TriangleLookupError",
    "validate_vertex_count",
    "validate_max_vertices",
]
