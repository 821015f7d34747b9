"""Enumeration of vertex-disjoint face tuples in search of an uncovered one.

Tuples are grown in increasing face order. Faces sharing a vertex with a
face already in the tuple are never added. Every 3-tuple is checked with
the oracle; a covered 3-tuple covers all of its extensions, so its branch
is pruned. The first 4-tuple the oracle rejects is returned.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from . import _bitset as bits
from ._types import SearchOptions, SearchStats
from .embedding import TriangulationEmbedding
from .growth import seed_patch
from .oracle import AnalysisContext, exists_covering_patch

logger = logging.getLogger(__name__)

TupleCallback = Callable[[tuple[int, ...]], None]


def seed_initial_patches(ctx: AnalysisContext, count: Optional[int] = None) -> int:
    """
    Store up to ``count`` greedy closures before the enumeration starts.

    The first closure grows from face 0 and its first edge-neighbour. Each
    further closure starts at a face no stored patch contains yet, taking
    the lowest such face and the highest such face in turn.

    Returns:
        Number of patches stored.
    """
    emb = ctx.embedding
    if count is None:
        count = ctx.options.initial_patches
    nf = emb.num_faces
    stored = 0
    from_low = True

    while stored < count:
        covered = ctx.covered_faces()
        candidates = [f for f in range(nf) if not bits.contains(covered, f)]
        if not candidates:
            break
        if stored == 0:
            face = candidates[0]
        else:
            face = candidates[0] if from_low else candidates[-1]
            from_low = not from_low
        ctx.store(seed_patch(emb, face, emb.face_start[face]))
        stored += 1

    return stored


def find_uncovered_tuple(
    ctx: AnalysisContext,
    on_tuple: Optional[TupleCallback] = None,
) -> Optional[tuple[int, ...]]:
    """
    Find a 4-tuple of vertex-disjoint faces that no eOPD covers.

    The context cache is reset and seeded before the search starts.

    Args:
        ctx: Analysis context for the triangulation.
        on_tuple: Called with every tuple handed to the oracle.

    Returns:
        The first uncovered tuple as sorted face indices, or None when every
        4-tuple is covered.
    """
    ctx.reset()
    seed_initial_patches(ctx)

    emb = ctx.embedding
    face_sets = emb.face_sets
    nf = emb.num_faces

    def extend(face_tuple: int, tuple_vertices: int, start: int, size: int) -> Optional[int]:
        if size == 3:
            ctx.stats.three_tuples += 1
            if on_tuple is not None:
                on_tuple(tuple(bits.elements(face_tuple)))
            if exists_covering_patch(ctx, face_tuple):
                return None
        elif size == 4:
            ctx.stats.four_tuples += 1
            if on_tuple is not None:
                on_tuple(tuple(bits.elements(face_tuple)))
            if exists_covering_patch(ctx, face_tuple):
                return None
            return face_tuple

        for face in range(start, nf):
            if face_sets[face] & tuple_vertices:
                continue
            found = extend(
                face_tuple | bits.singleton(face),
                tuple_vertices | face_sets[face],
                face + 1,
                size + 1,
            )
            if found is not None:
                return found
        return None

    found = extend(bits.EMPTY, bits.EMPTY, 0, 0)
    if found is None:
        return None
    result = tuple(bits.elements(found))
    logger.debug("uncovered tuple %s", result)
    return result


def analyse(
    embedding: TriangulationEmbedding,
    options: Optional[SearchOptions] = None,
) -> tuple[Optional[tuple[int, ...]], SearchStats]:
    """Run the full enumeration on one triangulation with a fresh context."""
    ctx = AnalysisContext(embedding, options)
    result = find_uncovered_tuple(ctx)
    return result, ctx.stats


__all__ = [
    "TupleCallback",
    "seed_initial_patches",
    "find_uncovered_tuple",
    "analyse",
]
