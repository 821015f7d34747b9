"""Tests for the uncovered-tuple enumerator."""

from __future__ import annotations

from eopd import _bitset as bits
from eopd._types import CachedPatch, SearchOptions
from eopd.embedding import TriangulationEmbedding
from eopd.enumerator import analyse, find_uncovered_tuple, seed_initial_patches
from eopd.oracle import AnalysisContext, search_covering_patch

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _tetrahedron() -> TriangulationEmbedding:
    return TriangulationEmbedding.from_triangles([(0, 1, 2), (0, 2, 3), (0, 3, 1), (1, 3, 2)])


def _octahedron() -> TriangulationEmbedding:
    return TriangulationEmbedding.from_triangles(
        [
            (0, 1, 2),
            (0, 2, 3),
            (0, 3, 4),
            (0, 4, 1),
            (5, 2, 1),
            (5, 3, 2),
            (5, 4, 3),
            (5, 1, 4),
        ]
    )


def _icosahedron_triangles() -> list[tuple[int, int, int]]:
    tris = []
    for k in range(5):
        u0, u1 = 1 + k, 1 + (k + 1) % 5
        l0, l1 = 6 + k, 6 + (k + 1) % 5
        tris.extend([(0, u0, u1), (u1, u0, l0), (u1, l0, l1), (11, l1, l0)])
    return tris


def _stacked(count: int) -> TriangulationEmbedding:
    """Icosahedron with ``count`` degree-3 vertices stacked into spread-out faces."""
    tris = _icosahedron_triangles()
    for i in range(count):
        index = (7 * i) % len(tris)
        a, b, c = tris[index]
        v = 12 + i
        tris = tris[:index] + [(a, b, v), (b, c, v), (c, a, v)] + tris[index + 1 :]
    return TriangulationEmbedding.from_triangles(tris)


def _samples() -> list[TriangulationEmbedding]:
    return [
        TriangulationEmbedding.from_triangles(_icosahedron_triangles()),
        _stacked(2),
        _stacked(5),
    ]


class _Recorder:
    def __init__(self) -> None:
        self.tuples: list[tuple[int, ...]] = []

    def __call__(self, face_tuple: tuple[int, ...]) -> None:
        self.tuples.append(face_tuple)


# ---------------------------------------------------------------------------
# Small triangulations
# ---------------------------------------------------------------------------


class TestSmallTriangulations:
    def test_tetrahedron_has_no_uncovered_tuple(self) -> None:
        ctx = AnalysisContext(_tetrahedron())
        recorder = _Recorder()
        assert find_uncovered_tuple(ctx, on_tuple=recorder) is None
        assert recorder.tuples == []
        assert ctx.stats.three_tuples == 0
        assert ctx.stats.four_tuples == 0

    def test_octahedron_has_no_uncovered_tuple(self) -> None:
        result, stats = analyse(_octahedron())
        assert result is None
        assert stats.four_tuples == 0

    def test_analyse_returns_stats(self) -> None:
        _, stats = analyse(_tetrahedron())
        assert stats.stored_patches >= 1


# ---------------------------------------------------------------------------
# Initial patches
# ---------------------------------------------------------------------------


class TestSeedInitialPatches:
    def test_first_patch_grows_from_face_zero(self) -> None:
        ctx = AnalysisContext(TriangulationEmbedding.from_triangles(_icosahedron_triangles()))
        seed_initial_patches(ctx, 1)
        assert len(ctx.patches) == 1
        assert bits.contains(ctx.patches[0].faces, 0)

    def test_each_patch_starts_at_an_uncovered_face(self) -> None:
        ctx = AnalysisContext(_stacked(5))
        stored = seed_initial_patches(ctx, 3)
        assert stored == len(ctx.patches)
        union = bits.EMPTY
        for patch in ctx.patches:
            assert patch.faces & ~union
            union |= patch.faces

    def test_stops_when_everything_is_covered(self) -> None:
        ctx = AnalysisContext(_tetrahedron())
        stored = seed_initial_patches(ctx, 10)
        assert stored <= 4
        assert ctx.covered_faces() == 0b1111

    def test_zero_patches(self) -> None:
        ctx = AnalysisContext(_tetrahedron(), SearchOptions(initial_patches=0))
        assert seed_initial_patches(ctx) == 0
        assert ctx.patches == []


# ---------------------------------------------------------------------------
# Enumeration properties
# ---------------------------------------------------------------------------


class TestEnumerationProperties:
    def test_tuples_are_vertex_disjoint(self) -> None:
        for emb in _samples():
            ctx = AnalysisContext(emb)
            recorder = _Recorder()
            find_uncovered_tuple(ctx, on_tuple=recorder)
            for face_tuple in recorder.tuples:
                union = bits.EMPTY
                for f in face_tuple:
                    assert emb.face_sets[f] & union == 0
                    union |= emb.face_sets[f]

    def test_tuples_are_increasing_and_sized(self) -> None:
        for emb in _samples():
            ctx = AnalysisContext(emb)
            recorder = _Recorder()
            find_uncovered_tuple(ctx, on_tuple=recorder)
            for face_tuple in recorder.tuples:
                assert len(face_tuple) in (3, 4)
                assert list(face_tuple) == sorted(set(face_tuple))

    def test_counters_match_oracle_calls(self) -> None:
        for emb in _samples():
            ctx = AnalysisContext(emb)
            recorder = _Recorder()
            find_uncovered_tuple(ctx, on_tuple=recorder)
            threes = sum(1 for t in recorder.tuples if len(t) == 3)
            fours = sum(1 for t in recorder.tuples if len(t) == 4)
            assert ctx.stats.three_tuples == threes
            assert ctx.stats.four_tuples == fours
            assert ctx.stats.cache_hits + ctx.stats.searches == threes + fours

    def test_four_tuples_extend_uncovered_triples(self) -> None:
        for emb in _samples():
            ctx = AnalysisContext(emb)
            recorder = _Recorder()
            find_uncovered_tuple(ctx, on_tuple=recorder)
            seen = set(recorder.tuples)
            for face_tuple in recorder.tuples:
                if len(face_tuple) == 4:
                    assert face_tuple[:3] in seen
                    assert search_covering_patch(emb, bits.from_elements(face_tuple[:3])) is None

    def test_result_is_rejected_by_fresh_search(self) -> None:
        for emb in _samples():
            ctx = AnalysisContext(emb)
            result = find_uncovered_tuple(ctx)
            if result is not None:
                assert len(result) == 4
                assert search_covering_patch(emb, bits.from_elements(result)) is None

    def test_covered_tuples_are_found_without_cache(self) -> None:
        for emb in _samples():
            ctx = AnalysisContext(emb)
            recorder = _Recorder()
            result = find_uncovered_tuple(ctx, on_tuple=recorder)
            for face_tuple in recorder.tuples:
                if len(face_tuple) == 4 and face_tuple != result:
                    assert search_covering_patch(emb, bits.from_elements(face_tuple)) is not None

    def test_result_is_last_tuple_checked(self) -> None:
        for emb in _samples():
            ctx = AnalysisContext(emb)
            recorder = _Recorder()
            result = find_uncovered_tuple(ctx, on_tuple=recorder)
            if result is not None:
                assert recorder.tuples[-1] == result

    def test_enumeration_resets_previous_cache(self) -> None:
        emb = TriangulationEmbedding.from_triangles(_icosahedron_triangles())
        ctx = AnalysisContext(emb)
        ctx.patches.append(CachedPatch(faces=(1 << emb.num_faces) - 1, vertices=0))
        find_uncovered_tuple(ctx)
        assert all(p.vertices != 0 for p in ctx.patches)
        assert bits.contains(ctx.patches[0].faces, 0)

    def test_deterministic(self) -> None:
        for emb in _samples():
            first = find_uncovered_tuple(AnalysisContext(emb))
            second = find_uncovered_tuple(AnalysisContext(emb))
            assert first == second

    def test_without_cache_agrees_on_found_tuple(self) -> None:
        emb = _stacked(2)
        result = find_uncovered_tuple(AnalysisContext(emb, SearchOptions(use_cache=False)))
        if result is not None:
            assert search_covering_patch(emb, bits.from_elements(result)) is None
