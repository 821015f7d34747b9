"""Internal data structures for the eOPD search."""

from __future__ import annotations

from dataclasses import dataclass, fields

from .validation import MAX_SHORT_VERTICES


@dataclass(slots=True)
class HalfEdge:
    """A directed arc of the rotation system, stored in an index arena.

    ``next`` and ``prev`` are the clockwise successor and predecessor around
    ``start``; ``inverse`` is the arc ``end -> start``. All three are arena
    indices, as is ``right_face`` once the dual has been built.

    Attributes:
        start: Vertex the arc leaves.
        end: Vertex the arc points to.
        vertices: Bitset of both endpoints.
        next: Clockwise successor around ``start``.
        prev: Clockwise predecessor around ``start``.
        inverse: Index of the reversed arc.
        right_face: Face on the right of the arc (-1 until assigned).
    """

    start: int
    end: int
    vertices: int
    next: int = -1
    prev: int = -1
    inverse: int = -1
    right_face: int = -1


@dataclass(frozen=True)
class Patch:
    """A set of faces grown by the admissibility rule, with its vertex set.

    For a patch seeded from an extension face and its edge-neighbour, the
    apex of the extension face is not part of ``vertices``.
    """

    faces: int
    vertices: int


@dataclass(frozen=True)
class CachedPatch(Patch):
    """A maximal patch together with its extension frontier.

    Attributes:
        extensions: Faces outside the patch sharing at least two vertices
            with ``vertices``.
    """

    extensions: int = 0

    def covers(self, face_tuple: int) -> bool:
        """Whether this patch certifies ``face_tuple`` as covered."""
        inside = self.faces & face_tuple
        if inside & (inside - 1):
            return True
        return bool(inside) and bool(self.extensions & face_tuple)


@dataclass(frozen=True)
class SearchOptions:
    """Tunables for one analysis run.

    Attributes:
        initial_patches: Number of greedy closures stored before enumeration.
        use_cache: Consult stored patches before searching.
        max_vertices: Largest accepted vertex count.
    """

    initial_patches: int = 3
    use_cache: bool = True
    max_vertices: int = MAX_SHORT_VERTICES


@dataclass
class SearchStats:
    """Counters collected while analysing graphs."""

    three_tuples: int = 0
    four_tuples: int = 0
    cache_hits: int = 0
    searches: int = 0
    searches_found: int = 0
    stored_patches: int = 0

    def reset(self) -> None:
        for f in fields(self):
            setattr(self, f.name, 0)

    def merge(self, other: SearchStats) -> None:
        for f in fields(self):
            setattr(self, f.name, getattr(self, f.name) + getattr(other, f.name))

    def as_dict(self) -> dict[str, int]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass
class PlanarCodeRecord:
    """One decoded planar_code graph.

    Attributes:
        rotation: Clockwise neighbour list of every vertex (0-based).
        wide: True when the record used the 16-bit encoding.
    """

    rotation: list[list[int]]
    wide: bool = False

    @property
    def num_vertices(self) -> int:
        return len(self.rotation)


__all__ = [
    "HalfEdge",
    "Patch",
    "CachedPatch",
    "SearchOptions",
    "SearchStats",
    "PlanarCodeRecord",
]
