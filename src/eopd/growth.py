"""Patch growth: the admissibility rule and the greedy maximal closure.

A patch grows one face at a time across a boundary half-edge ``e``. The face
on the right of ``e`` has apex ``next(e).end``; it may join the patch when
both endpoints of ``e`` are already in the patch and the apex sees no other
patch vertex. Every patch built this way stays disc-like.
"""

from __future__ import annotations

import heapq
import logging

import numpy as np

from . import _bitset as bits
from ._types import CachedPatch, Patch
from .embedding import TriangulationEmbedding

logger = logging.getLogger(__name__)


def can_add_face(emb: TriangulationEmbedding, vertices: int, edge: int) -> bool:
    """Whether the face on the right of ``edge`` may be added to a patch.

    Args:
        emb: The triangulation.
        vertices: Vertex bitset of the patch.
        edge: Arena index of the boundary half-edge to grow across.
    """
    e = emb.edges[edge]
    if not bits.contains_all(vertices, e.vertices):
        return False
    apex = emb.edges[e.next].end
    return vertices & emb.neighbourhood[apex] == e.vertices


def add_face(emb: TriangulationEmbedding, patch: Patch, edge: int) -> Patch:
    """Return ``patch`` grown by the face on the right of ``edge``."""
    face = emb.edges[edge].right_face
    return Patch(
        faces=patch.faces | bits.singleton(face),
        vertices=patch.vertices | emb.face_sets[face],
    )


def growth_edges(emb: TriangulationEmbedding, edge: int) -> tuple[int, int]:
    """The two new boundary half-edges after growing across ``edge``.

    The first is the clockwise successor of ``edge``; the second mirrors it
    on the other side of the added face.
    """
    edges = emb.edges
    successor = edges[edge].next
    mirrored = edges[edges[edges[edge].inverse].prev].inverse
    return successor, mirrored


def seed_patch(emb: TriangulationEmbedding, face: int, edge: int) -> Patch:
    """The two-face patch made of ``face`` and its neighbour across ``edge``.

    ``edge`` must bound ``face``. Only the neighbour's vertices enter the
    vertex set: ``face`` plays the role of the extension.
    """
    neighbour = emb.edges[emb.edges[edge].inverse].right_face
    return Patch(
        faces=bits.singleton(face) | bits.singleton(neighbour),
        vertices=emb.face_sets[neighbour],
    )


def extension_frontier(emb: TriangulationEmbedding, vertices: int, faces: int) -> int:
    """Faces outside ``faces`` sharing at least two vertices with ``vertices``."""
    members = bits.to_list(vertices)
    if len(members) < 2:
        return bits.EMPTY
    shared = emb.face_incidence[:, members].sum(axis=1)
    frontier = bits.EMPTY
    for f in np.flatnonzero(shared >= 2):
        f = int(f)
        if not bits.contains(faces, f):
            frontier |= bits.singleton(f)
    return frontier


def close_maximal(emb: TriangulationEmbedding, vertices: int, faces: int) -> CachedPatch:
    """Grow a patch until no half-edge admits another face.

    Each step adds the face behind the lowest-index admissible half-edge,
    so the result depends only on the seed. Candidates sit in a min-heap
    keyed by arena index. A half-edge that fails the rule is dropped: it can
    only become admissible again once one of its endpoints joins the patch,
    and every half-edge around a newly added vertex is pushed back.

    Args:
        emb: The triangulation.
        vertices: Vertex bitset of the seed patch.
        faces: Face bitset of the seed patch.

    Returns:
        The maximal patch together with its extension frontier.
    """
    edges = emb.edges
    work = list(range(len(edges)))
    heapq.heapify(work)

    while work:
        idx = heapq.heappop(work)
        face = edges[idx].right_face
        if bits.contains(faces, face) or not can_add_face(emb, vertices, idx):
            continue
        new_vertices = emb.face_sets[face] & ~vertices
        faces |= bits.singleton(face)
        vertices |= emb.face_sets[face]
        for v in bits.elements(new_vertices):
            e = first = emb.first_edge[v]
            while True:
                heapq.heappush(work, e)
                heapq.heappush(work, edges[e].inverse)
                e = edges[e].next
                if e == first:
                    break

    extensions = extension_frontier(emb, vertices, faces)
    logger.debug(
        "closed patch: %d faces, %d vertices, %d extensions",
        bits.size(faces),
        bits.size(vertices),
        bits.size(extensions),
    )
    return CachedPatch(faces=faces, vertices=vertices, extensions=extensions)


__all__ = [
    "can_add_face",
    "add_face",
    "growth_edges",
    "seed_patch",
    "extension_frontier",
    "close_maximal",
]
