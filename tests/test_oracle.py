"""Tests for the eOPD existence oracle and the patch cache."""

from __future__ import annotations

import itertools

from eopd import _bitset as bits
from eopd._types import CachedPatch, SearchOptions
from eopd.embedding import TriangulationEmbedding
from eopd.oracle import (
    AnalysisContext,
    exists_covering_patch,
    find_covering_patch,
    search_covering_patch,
)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _tetrahedron() -> TriangulationEmbedding:
    return TriangulationEmbedding.from_triangles([(0, 1, 2), (0, 2, 3), (0, 3, 1), (1, 3, 2)])


def _icosahedron_triangles() -> list[tuple[int, int, int]]:
    tris = []
    for k in range(5):
        u0, u1 = 1 + k, 1 + (k + 1) % 5
        l0, l1 = 6 + k, 6 + (k + 1) % 5
        tris.extend([(0, u0, u1), (u1, u0, l0), (u1, l0, l1), (11, l1, l0)])
    return tris


def _icosahedron() -> TriangulationEmbedding:
    return TriangulationEmbedding.from_triangles(_icosahedron_triangles())


def _stacked(count: int) -> TriangulationEmbedding:
    """Icosahedron with ``count`` degree-3 vertices stacked into spread-out faces."""
    tris = _icosahedron_triangles()
    for i in range(count):
        index = (7 * i) % len(tris)
        a, b, c = tris[index]
        v = 12 + i
        tris = tris[:index] + [(a, b, v), (b, c, v), (c, a, v)] + tris[index + 1 :]
    return TriangulationEmbedding.from_triangles(tris)


def _edge_neighbours(emb: TriangulationEmbedding, face: int) -> list[int]:
    return [emb.edges[emb.edges[e].inverse].right_face for e in emb.face_edges(face)]


def _disjoint_tuples(emb: TriangulationEmbedding, size: int):
    for combo in itertools.combinations(range(emb.num_faces), size):
        union = bits.EMPTY
        ok = True
        for f in combo:
            if emb.face_sets[f] & union:
                ok = False
                break
            union |= emb.face_sets[f]
        if ok:
            yield bits.from_elements(combo)


# ---------------------------------------------------------------------------
# CachedPatch.covers
# ---------------------------------------------------------------------------


class TestCachedPatchCovers:
    def test_two_faces_inside(self) -> None:
        patch = CachedPatch(faces=0b0111, vertices=0, extensions=0)
        assert patch.covers(0b1011)

    def test_one_inside_one_extension(self) -> None:
        patch = CachedPatch(faces=0b0011, vertices=0, extensions=0b0100)
        assert patch.covers(0b0101)

    def test_one_inside_only(self) -> None:
        patch = CachedPatch(faces=0b0011, vertices=0, extensions=0b0100)
        assert not patch.covers(0b1001)

    def test_extensions_only(self) -> None:
        patch = CachedPatch(faces=0b0011, vertices=0, extensions=0b1100)
        assert not patch.covers(0b1100)


# ---------------------------------------------------------------------------
# Search
# ---------------------------------------------------------------------------


class TestSearch:
    def test_adjacent_faces_are_covered(self) -> None:
        emb = _icosahedron()
        for f in range(emb.num_faces):
            for g in _edge_neighbours(emb, f):
                assert search_covering_patch(emb, bits.singleton(f) | bits.singleton(g))

    def test_tetrahedron_pairs_are_covered(self) -> None:
        emb = _tetrahedron()
        for f, g in itertools.combinations(range(4), 2):
            ctx = AnalysisContext(emb)
            assert exists_covering_patch(ctx, bits.singleton(f) | bits.singleton(g))

    def test_tuples_with_a_stacked_face_are_covered(self) -> None:
        emb = _stacked(2)
        stacked_faces = bits.EMPTY
        for v in range(emb.num_vertices):
            if emb.degree(v) == 3:
                for f in range(emb.num_faces):
                    if bits.contains(emb.face_sets[f], v):
                        stacked_faces |= bits.singleton(f)
        assert bits.size(stacked_faces) == 6

        checked = 0
        for face_tuple in _disjoint_tuples(emb, 4):
            if face_tuple & stacked_faces:
                assert search_covering_patch(emb, face_tuple) is not None
                checked += 1
        assert checked > 0

    def test_single_face_is_never_covered(self) -> None:
        emb = _icosahedron()
        for f in range(emb.num_faces):
            assert search_covering_patch(emb, bits.singleton(f)) is None

    def test_witness_covers_two_tuple_faces(self) -> None:
        emb = _icosahedron()
        for face_tuple in _disjoint_tuples(emb, 3):
            witness = search_covering_patch(emb, face_tuple)
            if witness is not None:
                assert bits.has_more_than_one(witness.faces & face_tuple)

    def test_witness_vertices_match_faces(self) -> None:
        emb = _icosahedron()
        for face_tuple in _disjoint_tuples(emb, 3):
            witness = search_covering_patch(emb, face_tuple)
            if witness is None:
                continue
            covered = bits.EMPTY
            for f in bits.elements(witness.faces):
                covered |= emb.face_sets[f]
            # the extension face contributes its apex only to ``covered``
            assert bits.contains_all(covered, witness.vertices)
            assert bits.size(covered & ~witness.vertices) <= 1


# ---------------------------------------------------------------------------
# Cache
# ---------------------------------------------------------------------------


class TestCache:
    def test_success_stores_one_patch(self) -> None:
        emb = _icosahedron()
        ctx = AnalysisContext(emb)
        g = _edge_neighbours(emb, 0)[0]
        assert exists_covering_patch(ctx, bits.singleton(0) | bits.singleton(g))
        assert len(ctx.patches) == 1
        assert ctx.stats.searches == 1
        assert ctx.stats.searches_found == 1

    def test_failure_stores_nothing(self) -> None:
        emb = _icosahedron()
        ctx = AnalysisContext(emb)
        assert not exists_covering_patch(ctx, bits.singleton(3))
        assert ctx.patches == []
        assert ctx.stats.searches == 1
        assert ctx.stats.searches_found == 0

    def test_repeat_query_hits_cache(self) -> None:
        emb = _icosahedron()
        ctx = AnalysisContext(emb)
        g = _edge_neighbours(emb, 0)[0]
        face_tuple = bits.singleton(0) | bits.singleton(g)
        first = find_covering_patch(ctx, face_tuple)
        second = find_covering_patch(ctx, face_tuple)
        assert first is not None and second is not None
        assert second is ctx.patches[0]
        assert ctx.stats.cache_hits == 1
        assert len(ctx.patches) == 1

    def test_cached_patch_is_maximal_closure_of_witness(self) -> None:
        emb = _icosahedron()
        ctx = AnalysisContext(emb)
        g = _edge_neighbours(emb, 0)[0]
        witness = find_covering_patch(ctx, bits.singleton(0) | bits.singleton(g))
        assert witness is not None
        assert bits.contains_all(ctx.patches[0].faces, witness.faces)

    def test_cache_disabled_always_searches(self) -> None:
        emb = _icosahedron()
        ctx = AnalysisContext(emb, SearchOptions(use_cache=False))
        g = _edge_neighbours(emb, 0)[0]
        face_tuple = bits.singleton(0) | bits.singleton(g)
        assert exists_covering_patch(ctx, face_tuple)
        assert exists_covering_patch(ctx, face_tuple)
        assert ctx.stats.cache_hits == 0
        assert ctx.stats.searches == 2
        assert len(ctx.patches) == 2

    def test_cache_only_grows(self) -> None:
        emb = _icosahedron()
        ctx = AnalysisContext(emb)
        certified: list[tuple[int, CachedPatch]] = []
        previous = 0
        for face_tuple in _disjoint_tuples(emb, 3):
            exists_covering_patch(ctx, face_tuple)
            assert len(ctx.patches) >= previous
            previous = len(ctx.patches)
            hit = ctx.lookup(face_tuple)
            if hit is not None:
                certified.append((face_tuple, hit))
            for earlier, patch in certified:
                assert patch in ctx.patches
                assert ctx.lookup(earlier) is not None

    def test_reset_clears_cache_and_stats(self) -> None:
        emb = _icosahedron()
        ctx = AnalysisContext(emb)
        g = _edge_neighbours(emb, 0)[0]
        exists_covering_patch(ctx, bits.singleton(0) | bits.singleton(g))
        assert ctx.reset() is ctx
        assert ctx.patches == []
        assert ctx.stats.as_dict() == dict.fromkeys(ctx.stats.as_dict(), 0)

    def test_covered_faces_is_union(self) -> None:
        emb = _icosahedron()
        ctx = AnalysisContext(emb)
        for f in (0, 7):
            g = _edge_neighbours(emb, f)[0]
            exists_covering_patch(ctx, bits.singleton(f) | bits.singleton(g))
        union = bits.EMPTY
        for p in ctx.patches:
            union |= p.faces
        assert ctx.covered_faces() == union
