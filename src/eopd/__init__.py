"""
eopd: extended outer planar disc coverage of plane triangulations.

For a plane triangulation, decides whether every 4-tuple of vertex-disjoint
faces has two faces inside a common extended outer planar disc (eOPD).

Components:
- embedding: half-edge rotation system and its dual faces
- growth: the patch admissibility rule and greedy maximal closure
- oracle: eOPD existence for a face tuple, with a cache of maximal patches
- enumerator: backtracking search for an uncovered 4-tuple
- planar_code: reader and writer for the planar_code format
"""

__version__ = "0.1.0"

from ._types import CachedPatch, Patch, PlanarCodeRecord, SearchOptions, SearchStats
from .embedding import TriangulationEmbedding, rotation_from_triangles
from .enumerator import analyse, find_uncovered_tuple, seed_initial_patches
from .growth import can_add_face, close_maximal, extension_frontier, seed_patch
from .oracle import (
    AnalysisContext,
    exists_covering_patch,
    find_covering_patch,
    search_covering_patch,
)
from .planar_code import (
    PlanarCodeReader,
    PlanarCodeWriter,
    decode_planar_code,
    encode_planar_code,
    read_planar_code,
)
from .validation import (
    CapacityError,
    EdgeLookupError,
    EopdError,
    FormatError,
    LookupFailure,
    TriangleLookupError,
)

__all__ = [
    # Version
    "__version__",
    # Data
    "Patch",
    "CachedPatch",
    "PlanarCodeRecord",
    "SearchOptions",
    "SearchStats",
    # Embedding
    "TriangulationEmbedding",
    "rotation_from_triangles",
    # Search
    "can_add_face",
    "seed_patch",
    "close_maximal",
    "extension_frontier",
    "AnalysisContext",
    "find_covering_patch",
    "exists_covering_patch",
    "search_covering_patch",
    "seed_initial_patches",
    "find_uncovered_tuple",
    "analyse",
    # planar_code
    "PlanarCodeReader",
    "PlanarCodeWriter",
    "encode_planar_code",
    "decode_planar_code",
    "read_planar_code",
    # Errors
    "EopdError",
    "FormatError",
    "CapacityError",
    "LookupFailure",
    "EdgeLookupError",
    "TriangleLookupError",
]
