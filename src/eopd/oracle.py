"""Existence oracle for extended outer planar discs covering a face tuple.

A face tuple is *covered* when some eOPD contains at least two of its faces.
The oracle first consults the patches stored in the analysis context; on a
miss it searches, seeding a two-face patch from every tuple face and each of
its three edge-neighbours and growing it along two directions per step.
Every successful search stores the maximal closure of the witness, so later
queries touching the same region are answered by set intersection alone.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from typing_extensions import Self

from . import _bitset as bits
from ._types import CachedPatch, Patch, SearchOptions, SearchStats
from .embedding import TriangulationEmbedding
from .growth import add_face, can_add_face, close_maximal, growth_edges, seed_patch

logger = logging.getLogger(__name__)


class AnalysisContext:
    """Per-graph search state: the embedding, the patch cache and counters.

    The cache only grows while a graph is analysed and is cleared by
    ``reset`` before the next graph.

    Attributes:
        embedding: The triangulation being analysed.
        options: Search tunables.
        patches: Stored maximal patches, in the order they were found.
        stats: Counters for the current graph.
    """

    def __init__(
        self,
        embedding: TriangulationEmbedding,
        options: Optional[SearchOptions] = None,
    ) -> None:
        self.embedding = embedding
        self.options = options or SearchOptions()
        self.patches: list[CachedPatch] = []
        self.stats = SearchStats()

    def reset(self, embedding: Optional[TriangulationEmbedding] = None) -> Self:
        """Drop every stored patch and zero the counters."""
        if embedding is not None:
            self.embedding = embedding
        self.patches.clear()
        self.stats.reset()
        return self

    def store(self, patch: Patch) -> CachedPatch:
        """Close ``patch`` to its maximal extension and store the result."""
        closed = close_maximal(self.embedding, patch.vertices, patch.faces)
        self.patches.append(closed)
        self.stats.stored_patches += 1
        return closed

    def covered_faces(self) -> int:
        """Union of the face sets of all stored patches."""
        covered = bits.EMPTY
        for p in self.patches:
            covered |= p.faces
        return covered

    def lookup(self, face_tuple: int) -> Optional[CachedPatch]:
        """Return the first stored patch certifying ``face_tuple``, if any."""
        for p in self.patches:
            if p.covers(face_tuple):
                return p
        return None


def find_covering_patch(ctx: AnalysisContext, face_tuple: int) -> Optional[Patch]:
    """
    Find a patch showing that ``face_tuple`` is covered.

    Args:
        ctx: Analysis context holding the embedding and the patch cache.
        face_tuple: Bitset of face indices.

    Returns:
        A stored patch on a cache hit, otherwise the patch found by the
        search; None if no eOPD covers two faces of the tuple.
    """
    if ctx.options.use_cache:
        hit = ctx.lookup(face_tuple)
        if hit is not None:
            ctx.stats.cache_hits += 1
            return hit

    ctx.stats.searches += 1
    found = search_covering_patch(ctx.embedding, face_tuple)
    if found is None:
        return None

    ctx.stats.searches_found += 1
    ctx.store(found)
    logger.debug(
        "stored patch %d for tuple %s",
        len(ctx.patches) - 1,
        bits.to_list(face_tuple),
    )
    return found


def exists_covering_patch(ctx: AnalysisContext, face_tuple: int) -> bool:
    """Whether some eOPD covers at least two faces of ``face_tuple``."""
    return find_covering_patch(ctx, face_tuple) is not None


def search_covering_patch(emb: TriangulationEmbedding, face_tuple: int) -> Optional[Patch]:
    """Search for a covering patch without consulting or filling any cache.

    Each face ``f`` of the tuple is tried as the extension face, together
    with each of its three edge-neighbours. The patch then grows until it
    reaches another tuple face.

    Returns:
        The first covering patch found, or None.
    """
    for face in bits.elements(face_tuple):
        remaining = face_tuple & ~bits.singleton(face)
        shared = emb.face_start[face]
        for _ in range(3):
            patch = seed_patch(emb, face, shared)
            found = _grow(emb, patch, remaining, emb.edges[shared].inverse)
            if found is not None:
                return found
            shared = emb.edges[emb.edges[shared].next].inverse
    return None


def _grow(
    emb: TriangulationEmbedding,
    patch: Patch,
    remaining: int,
    last_edge: int,
) -> Optional[Patch]:
    """Depth-first growth from ``patch`` until it meets ``remaining``.

    Children are explored successor first, then the mirrored edge, exactly
    as a recursive search would; the explicit stack only avoids Python's
    recursion limit on large triangulations.
    """
    stack: list[tuple[Patch, int]] = [(patch, last_edge)]
    while stack:
        current, last = stack.pop()
        if current.faces & remaining:
            return current
        successor, mirrored = growth_edges(emb, last)
        for edge in (mirrored, successor):
            face = emb.edges[edge].right_face
            if bits.contains(current.faces, face):
                continue
            if can_add_face(emb, current.vertices, edge):
                stack.append((add_face(emb, current, edge), edge))
    return None


__all__ = [
    "AnalysisContext",
    "find_covering_patch",
    "exists_covering_patch",
    "search_covering_patch",
]
