"""Human-readable dumps of faces, face tuples and vertex sets.

Faces and vertices are printed 1-based, matching the labels used on the
command line.
"""

from __future__ import annotations

from . import _bitset as bits
from .embedding import TriangulationEmbedding


def format_vertex_set(vertex_set: int) -> str:
    return " ".join(str(v + 1) for v in bits.elements(vertex_set))


def format_face(emb: TriangulationEmbedding, face: int) -> str:
    """One line ``"<face>) <v> <v> <v>"``."""
    return f"{face + 1}) {format_vertex_set(emb.face_sets[face])}"


def format_faces(emb: TriangulationEmbedding) -> str:
    """Every face of ``emb`` with its vertices, one per line."""
    return "\n".join(format_face(emb, f) for f in range(emb.num_faces))


def format_face_tuple(face_tuple: int) -> str:
    return "Face tuple: " + " ".join(str(f + 1) for f in bits.elements(face_tuple))


def format_face_tuple_faces(emb: TriangulationEmbedding, face_tuple: int) -> str:
    """The faces of ``face_tuple`` with their vertices, one per line."""
    return "\n".join(format_face(emb, f) for f in bits.elements(face_tuple))


__all__ = [
    "format_vertex_set",
    "format_face",
    "format_faces",
    "format_face_tuple",
    "format_face_tuple_faces",
]
