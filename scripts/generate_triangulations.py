#!/usr/bin/env python3
"""
Generate random plane triangulations in planar_code.

Triangulations are grown by stacking vertices into random faces, then
mixed with random edge flips so that not every vertex ends up with degree 3.

Usage:
    uv run python scripts/generate_triangulations.py --vertices 14 --count 50 -o tri14.pc

Examples:
    uv run python scripts/generate_triangulations.py --vertices 12 --count 10 | eopd
    uv run python scripts/generate_triangulations.py --vertices 20 --flips 200 --seed 7 -o t.pc
"""

from __future__ import annotations

import argparse
import random
import sys

from eopd import PlanarCodeWriter, TriangulationEmbedding

Triangle = tuple[int, int, int]


def stacked_triangulation(n: int, rng: random.Random) -> list[Triangle]:
    """Stack vertices 4..n-1 into random faces of the tetrahedron."""
    tris: list[Triangle] = [(0, 1, 2), (0, 2, 3), (0, 3, 1), (1, 3, 2)]
    for v in range(4, n):
        i = rng.randrange(len(tris))
        a, b, c = tris[i]
        tris[i] = (a, b, v)
        tris.extend([(b, c, v), (c, a, v)])
    return tris


def flip_random_edge(tris: list[Triangle], rng: random.Random) -> bool:
    """Flip one random edge if that keeps the triangulation simple.

    Faces (a, b, c) and (b, a, d) sharing edge a-b become (c, a, d) and
    (d, b, c).
    """
    i = rng.randrange(len(tris))
    a, b, c = tris[i]
    corner = rng.randrange(3)
    a, b, c = (a, b, c)[corner:] + (a, b, c)[:corner]

    j = d = None
    for k, (x, y, z) in enumerate(tris):
        for p, q, r in ((x, y, z), (y, z, x), (z, x, y)):
            if (p, q) == (b, a):
                j, d = k, r
    if j is None or d is None:
        return False

    adjacent = set()
    degree_a = degree_b = 0
    for t in tris:
        if c in t:
            adjacent.update(t)
        degree_a += a in t
        degree_b += b in t
    if d in adjacent or degree_a <= 3 or degree_b <= 3:
        return False

    tris[i] = (c, a, d)
    tris[j] = (d, b, c)
    return True


def random_triangulation(n: int, flips: int, rng: random.Random) -> TriangulationEmbedding:
    tris = stacked_triangulation(n, rng)
    for _ in range(flips):
        flip_random_edge(tris, rng)
    return TriangulationEmbedding.from_triangles(tris, num_vertices=n)


def main():
    parser = argparse.ArgumentParser(description="Generate random plane triangulations")
    parser.add_argument("--vertices", type=int, default=12, help="Vertices per triangulation")
    parser.add_argument("--count", type=int, default=10, help="Number of triangulations")
    parser.add_argument("--flips", type=int, default=None, help="Edge flips (default: 4 * vertices)")
    parser.add_argument("--seed", type=int, default=42, help="Random seed")
    parser.add_argument("-o", "--output", help="Output file (default: stdout)")

    args = parser.parse_args()

    if args.vertices < 4:
        parser.error("--vertices must be at least 4")

    rng = random.Random(args.seed)
    flips = 4 * args.vertices if args.flips is None else args.flips

    out = open(args.output, "wb") if args.output else sys.stdout.buffer
    try:
        writer = PlanarCodeWriter(out)
        for _ in range(args.count):
            writer.write(random_triangulation(args.vertices, flips, rng))
    finally:
        if args.output:
            out.close()

    print(f"Wrote {args.count} triangulations with {args.vertices} vertices", file=sys.stderr)


if __name__ == "__main__":
    main()
