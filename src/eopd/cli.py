"""
Command-line entry points.

``eopd`` reads plane triangulations in planar_code and writes those that
contain a 4-tuple of vertex-disjoint faces not covered by any extended outer
planar disc. ``eopd-check`` tests one tuple of triangles against one graph.

Usage:
    eopd < triangulations.pc > uncovered.pc
    eopd-check 1,2,3 4,5,6 7,8,9 10,11,12 < graph.pc
"""

from __future__ import annotations

import argparse
import logging
import re
import sys
from dataclasses import dataclass, field
from typing import BinaryIO, Optional, Sequence

from . import __version__
from . import _bitset as bits
from ._types import SearchOptions, SearchStats
from .dump import format_face_tuple_faces
from .embedding import TriangulationEmbedding
from .enumerator import find_uncovered_tuple
from .oracle import AnalysisContext, find_covering_patch
from .planar_code import PlanarCodeReader, PlanarCodeWriter
from .validation import (
    MAX_SHORT_VERTICES,
    EopdError,
    TriangleLookupError,
    validate_max_vertices,
)

logger = logging.getLogger(__name__)

_TRIANGLE = re.compile(r"^\s*(\d+)\s*,\s*(\d+)\s*,\s*(\d+)\s*$")


@dataclass
class RunSummary:
    """Totals for one ``eopd`` run."""

    graphs_read: int = 0
    graphs_written: int = 0
    stats: SearchStats = field(default_factory=SearchStats)

    def lines(self) -> list[str]:
        read, written = self.graphs_read, self.graphs_written
        return [
            f"Read {read} graph{'' if read == 1 else 's'}.",
            f"Written {written} uncovered graph{'' if written == 1 else 's'}.",
            f"Checked {self.stats.three_tuples} 3-tuples and {self.stats.four_tuples} 4-tuples.",
            f"Cache hits: {self.stats.cache_hits}, searches: {self.stats.searches} "
            f"({self.stats.searches_found} successful), "
            f"stored patches: {self.stats.stored_patches}.",
        ]


def classify_stream(
    instream: BinaryIO,
    outstream: BinaryIO,
    options: Optional[SearchOptions] = None,
) -> RunSummary:
    """
    Copy every triangulation with an uncovered 4-tuple from ``instream`` to ``outstream``.

    Each graph is decoded, analysed and, if uncovered, written in full before
    the next one is read, so output already written stays valid when a later
    record turns out to be malformed.

    Raises:
        EopdError: On the first malformed or oversized record
    """
    options = options or SearchOptions()
    reader = PlanarCodeReader(instream, max_vertices=options.max_vertices)
    writer = PlanarCodeWriter(outstream)
    summary = RunSummary()
    ctx: Optional[AnalysisContext] = None

    for record in reader:
        emb = TriangulationEmbedding(record.rotation, max_vertices=options.max_vertices)
        if ctx is None:
            ctx = AnalysisContext(emb, options)
        else:
            ctx.reset(emb)

        found = find_uncovered_tuple(ctx)
        summary.graphs_read += 1
        summary.stats.merge(ctx.stats)

        if found is not None:
            writer.write(emb, wide=record.wide)
            summary.graphs_written += 1
            if logger.isEnabledFor(logging.INFO):
                logger.info(
                    "graph %d: uncovered tuple\n%s",
                    summary.graphs_read,
                    format_face_tuple_faces(emb, bits.from_elements(found)),
                )
        else:
            logger.debug("graph %d: all tuples covered", summary.graphs_read)

    return summary


def check_tuple(
    emb: TriangulationEmbedding,
    triangles: Sequence[tuple[int, int, int]],
) -> tuple[int, Optional[int]]:
    """
    Map 1-based triangles to faces and run the oracle on the resulting tuple.

    Returns:
        The face tuple and the faces of a covering patch (None if there is none).

    Raises:
        TriangleLookupError: If a triangle is missing, ambiguous, or repeated
    """
    face_tuple = bits.EMPTY
    for tri in triangles:
        face = emb.face_index([v - 1 for v in tri])
        if bits.contains(face_tuple, face):
            label = ",".join(str(v) for v in tri)
            raise TriangleLookupError(f"The triangle {label} was given twice")
        face_tuple |= bits.singleton(face)

    ctx = AnalysisContext(emb)
    witness = find_covering_patch(ctx, face_tuple)
    return face_tuple, None if witness is None else witness.faces


def parse_triangle(text: str) -> tuple[int, int, int]:
    """Parse ``"u,v,w"`` into three 1-based labels."""
    m = _TRIANGLE.match(text)
    if m is None:
        raise ValueError(f"expected u,v,w, got {text!r}")
    a, b, c = (int(g) for g in m.groups())
    return a, b, c


def _configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(message)s", stream=sys.stderr)


def _open_input(path: Optional[str]) -> BinaryIO:
    if path is None or path == "-":
        return sys.stdin.buffer
    return open(path, "rb")


def _open_output(path: Optional[str]) -> BinaryIO:
    if path is None or path == "-":
        return sys.stdout.buffer
    return open(path, "wb")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="eopd",
        description=(
            "Check whether every 4-tuple of vertex-disjoint faces of a plane "
            "triangulation is contained in an extended outer planar disc. "
            "Triangulations with an uncovered tuple are written in planar_code."
        ),
    )
    parser.add_argument("-i", "--input", help="planar_code input file (default: stdin)")
    parser.add_argument("-o", "--output", help="planar_code output file (default: stdout)")
    parser.add_argument(
        "--initial-patches",
        type=int,
        default=SearchOptions.initial_patches,
        help="Maximal patches stored before enumerating tuples",
    )
    parser.add_argument(
        "--no-cache",
        action="store_true",
        help="Search for every tuple instead of consulting stored patches",
    )
    parser.add_argument(
        "--max-vertices",
        type=int,
        default=MAX_SHORT_VERTICES,
        help="Largest vertex count accepted",
    )
    parser.add_argument("-v", "--verbose", action="count", default=0, help="More diagnostics")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    _configure_logging(args.verbose)

    try:
        options = SearchOptions(
            initial_patches=max(args.initial_patches, 0),
            use_cache=not args.no_cache,
            max_vertices=validate_max_vertices(args.max_vertices),
        )
        instream = _open_input(args.input)
        outstream = _open_output(args.output)
        try:
            summary = classify_stream(instream, outstream, options)
        finally:
            if instream is not sys.stdin.buffer:
                instream.close()
            if outstream is not sys.stdout.buffer:
                outstream.close()
    except EopdError as exc:
        print(f"error: {exc} -- exiting!", file=sys.stderr)
        return 1
    except OSError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    for line in summary.lines():
        print(line, file=sys.stderr)
    return 0


def build_check_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="eopd-check",
        description=(
            "Check whether an extended outer planar disc covers at least two of "
            "the given triangles of a plane triangulation."
        ),
    )
    parser.add_argument(
        "triangles",
        nargs="+",
        metavar="u,v,w",
        help="Triangle given by its three 1-based vertex labels",
    )
    parser.add_argument("-i", "--input", help="planar_code input file (default: stdin)")
    parser.add_argument(
        "-w",
        "--witness",
        action="store_true",
        help="Print the faces of the covering patch",
    )
    parser.add_argument("-v", "--verbose", action="count", default=0, help="More diagnostics")
    return parser


def check_main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_check_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    if len(args.triangles) < 2:
        parser.print_usage(sys.stderr)
        return 1

    triangles = []
    for i, text in enumerate(args.triangles, start=1):
        try:
            triangles.append(parse_triangle(text))
        except ValueError:
            print(f"Error while reading triangle {i}.", file=sys.stderr)
            parser.print_usage(sys.stderr)
            return 1

    try:
        instream = _open_input(args.input)
        try:
            record = PlanarCodeReader(instream).read_record()
        finally:
            if instream is not sys.stdin.buffer:
                instream.close()
        if record is None:
            print("Error while reading triangulation -- exiting!", file=sys.stderr)
            return 1
        emb = TriangulationEmbedding(record.rotation)
        _, witness = check_tuple(emb, triangles)
    except EopdError as exc:
        print(f"error: {exc} -- exiting!", file=sys.stderr)
        return 1
    except OSError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    if witness is None:
        print("There is no extended outer planar disc.", file=sys.stderr)
    else:
        print("There is an extended outer planar disc.", file=sys.stderr)
        if args.witness:
            print(format_face_tuple_faces(emb, witness), file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())
