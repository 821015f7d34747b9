"""Half-edge embedding of a plane triangulation and its dual faces."""

from __future__ import annotations

from typing import TYPE_CHECKING, Mapping, Optional, Sequence, Union

import numpy as np

if TYPE_CHECKING:
    from typing_extensions import Self

from . import _bitset as bits
from ._types import HalfEdge
from .validation import (
    MAX_SHORT_VERTICES,
    EdgeLookupError,
    FormatError,
    TriangleLookupError,
    validate_vertex_count,
)

RotationLike = Union[Sequence[Sequence[int]], Mapping[int, Sequence[int]]]


class TriangulationEmbedding:
    """A plane triangulation stored as an arena of half-edges.

    The rotation system gives, for every vertex, the clockwise order of its
    neighbours. Half-edges reference each other by arena index, so the
    structure holds no reference cycles. Faces are derived once, when the
    embedding is built, and never change afterwards.

    Attributes:
        num_vertices: Number of vertices V.
        edges: The half-edge arena (2E entries).
        first_edge: For each vertex, the arena index of its first half-edge.
        neighbourhood: For each vertex, the bitset of adjacent vertices.
        face_sets: For each face, the bitset of its three vertices.
        face_start: For each face, a half-edge whose right face it is.
        face_incidence: Boolean (F, V) matrix mirroring ``face_sets``.
    """

    __slots__ = (
        "num_vertices",
        "edges",
        "first_edge",
        "neighbourhood",
        "face_sets",
        "face_start",
        "face_incidence",
    )

    def __init__(
        self,
        rotation: RotationLike,
        max_vertices: int = MAX_SHORT_VERTICES,
    ) -> None:
        order = _normalise_rotation(rotation)
        n = validate_vertex_count(len(order), max_vertices)

        self.num_vertices = n
        self.edges: list[HalfEdge] = []
        self.first_edge: list[int] = [0] * n
        self.neighbourhood: list[int] = [0] * n

        # (start, end) -> arena index, for resolving inverses
        index_of: dict[tuple[int, int], int] = {}

        for v, nbrs in enumerate(order):
            if not nbrs:
                raise FormatError(f"vertex {v} has no neighbours")
            if len(nbrs) >= n:
                raise FormatError(f"vertex {v} has degree {len(nbrs)} in a graph with {n} vertices")
            base = len(self.edges)
            self.first_edge[v] = base
            deg = len(nbrs)
            for k, w in enumerate(nbrs):
                if w < 0 or w >= n:
                    raise FormatError(f"vertex {v} lists neighbour {w} outside [0, {n})")
                if w == v:
                    raise FormatError(f"vertex {v} lists itself as a neighbour")
                if (v, w) in index_of:
                    raise FormatError(f"vertex {v} lists neighbour {w} twice")
                idx = base + k
                index_of[(v, w)] = idx
                self.neighbourhood[v] |= bits.singleton(w)
                self.edges.append(
                    HalfEdge(
                        start=v,
                        end=w,
                        vertices=bits.singleton(v) | bits.singleton(w),
                        next=base + (k + 1) % deg,
                        prev=base + (k - 1) % deg,
                    )
                )

        for idx, e in enumerate(self.edges):
            inv = index_of.get((e.end, e.start))
            if inv is None:
                raise EdgeLookupError(
                    f"error while looking for edge from {e.end} to {e.start}"
                )
            e.inverse = inv

        self.face_sets: list[int] = []
        self.face_start: list[int] = []
        self._make_dual()

        self.face_incidence = np.zeros((len(self.face_sets), n), dtype=bool)
        for f, face in enumerate(self.face_sets):
            self.face_incidence[f, bits.to_list(face)] = True

    @classmethod
    def from_rotation(
        cls,
        rotation: RotationLike,
        max_vertices: int = MAX_SHORT_VERTICES,
    ) -> Self:
        """Build an embedding from clockwise neighbour lists (0-based)."""
        return cls(rotation, max_vertices=max_vertices)

    @classmethod
    def from_triangles(
        cls,
        triangles: Sequence[tuple[int, int, int]],
        num_vertices: Optional[int] = None,
    ) -> Self:
        """Build an embedding from consistently oriented triangles."""
        return cls(rotation_from_triangles(triangles, num_vertices))

    def _make_dual(self) -> None:
        """Trace every face and assign ``right_face`` to its half-edges.

        Walking ``inverse(e).prev`` from a half-edge follows the boundary of
        the face on its right. Each half-edge lies on exactly one face.
        """
        visited: set[int] = set()
        edges = self.edges

        for v in range(self.num_vertices):
            start = self.first_edge[v]
            e = start
            while True:
                if e not in visited:
                    face = len(self.face_sets)
                    face_vertices = bits.EMPTY
                    length = 0
                    ef = e
                    while True:
                        visited.add(ef)
                        edges[ef].right_face = face
                        face_vertices |= bits.singleton(edges[ef].end)
                        length += 1
                        ef = edges[edges[ef].inverse].prev
                        if ef == e:
                            break
                    if length != 3:
                        raise FormatError(
                            f"face {face} has {length} sides; input is not a triangulation"
                        )
                    self.face_sets.append(face_vertices)
                    self.face_start.append(e)
                e = edges[e].next
                if e == start:
                    break

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def num_edges(self) -> int:
        """Number of half-edges (twice the number of undirected edges)."""
        return len(self.edges)

    @property
    def num_faces(self) -> int:
        return len(self.face_sets)

    def degree(self, v: int) -> int:
        return bits.size(self.neighbourhood[v])

    def degrees(self) -> np.ndarray:
        """Degree of every vertex, from the face incidence (each face adds 1)."""
        # In a triangulation every vertex lies on exactly deg(v) faces.
        return self.face_incidence.sum(axis=0)

    def face_vertices(self, face: int) -> list[int]:
        return bits.to_list(self.face_sets[face])

    def face_edges(self, face: int) -> list[int]:
        """The three half-edges bounding ``face``, starting at its representative."""
        result = []
        e = self.face_start[face]
        for _ in range(3):
            result.append(e)
            e = self.edges[self.edges[e].inverse].prev
        return result

    def euler_characteristic(self) -> int:
        """V - E + F, which is 2 for every plane triangulation."""
        return self.num_vertices - self.num_edges // 2 + self.num_faces

    def find_edge(self, start: int, end: int) -> int:
        """Return the arena index of the half-edge ``start -> end``.

        Raises:
            EdgeLookupError: If the two vertices are not adjacent
        """
        e = first = self.first_edge[start]
        while True:
            if self.edges[e].end == end:
                return e
            e = self.edges[e].next
            if e == first:
                break
        raise EdgeLookupError(f"error while looking for edge from {start} to {end}")

    def face_index(self, triangle: Sequence[int]) -> int:
        """Return the face whose vertex set is exactly ``triangle`` (0-based).

        Raises:
            TriangleLookupError: If no face, or more than one face, matches
        """
        target = set(triangle)
        label = ",".join(str(v + 1) for v in triangle)
        if len(target) != 3 or any(v < 0 or v >= self.num_vertices for v in target):
            raise TriangleLookupError(f"The triangle {label} does not exist")
        row = np.zeros(self.num_vertices, dtype=bool)
        row[list(target)] = True
        matches = np.flatnonzero((self.face_incidence == row).all(axis=1))
        if len(matches) == 0:
            raise TriangleLookupError(f"The triangle {label} does not exist")
        if len(matches) > 1:
            # Two faces share a vertex set only when the graph is a single triangle
            raise TriangleLookupError(f"The triangle {label} matches {len(matches)} faces")
        return int(matches[0])

    def to_rotation(self) -> list[list[int]]:
        """Re-derive the clockwise neighbour list of every vertex."""
        rotation: list[list[int]] = []
        for v in range(self.num_vertices):
            nbrs = []
            e = first = self.first_edge[v]
            while True:
                nbrs.append(self.edges[e].end)
                e = self.edges[e].next
                if e == first:
                    break
            rotation.append(nbrs)
        return rotation

    def __repr__(self) -> str:
        return (
            f"TriangulationEmbedding(V={self.num_vertices}, "
            f"E={self.num_edges // 2}, F={self.num_faces})"
        )


def rotation_from_triangles(
    triangles: Sequence[tuple[int, int, int]],
    num_vertices: Optional[int] = None,
) -> list[list[int]]:
    """Build a rotation system from consistently oriented triangles.

    An oriented triangle ``(a, b, c)`` is bounded by ``a->b``, ``b->c`` and
    ``c->a`` with the face on their right, so the clockwise successor of ``b``
    around ``a`` is ``c`` (and likewise for the other two corners).

    Args:
        triangles: Oriented triangles (0-based vertex labels).
        num_vertices: Vertex count; inferred from the labels if omitted.

    Returns:
        For each vertex, its clockwise neighbour list.

    Raises:
        FormatError: If the triangles do not close up around some vertex
    """
    if num_vertices is None:
        num_vertices = 1 + max(max(t) for t in triangles) if triangles else 0

    successor: list[dict[int, int]] = [{} for _ in range(num_vertices)]
    for a, b, c in triangles:
        for corner, first, second in ((a, b, c), (b, c, a), (c, a, b)):
            if first in successor[corner]:
                raise FormatError(
                    f"triangles are not consistently oriented around vertex {corner}"
                )
            successor[corner][first] = second

    rotation: list[list[int]] = []
    for v, succ in enumerate(successor):
        if not succ:
            raise FormatError(f"vertex {v} lies on no triangle")
        start = min(succ)
        order = [start]
        w = succ[start]
        while w != start:
            if w not in succ or len(order) > len(succ):
                raise FormatError(f"triangles around vertex {v} do not form a disc")
            order.append(w)
            w = succ[w]
        if len(order) != len(succ):
            raise FormatError(f"triangles around vertex {v} form more than one cycle")
        rotation.append(order)
    return rotation


def _normalise_rotation(rotation: RotationLike) -> list[list[int]]:
    if isinstance(rotation, Mapping):
        n = len(rotation)
        if sorted(rotation) != list(range(n)):
            raise FormatError("rotation keys must be the vertices 0..n-1")
        return [list(rotation[v]) for v in range(n)]
    return [list(nbrs) for nbrs in rotation]


__all__ = ["TriangulationEmbedding", "RotationLike", "rotation_from_triangles"]
