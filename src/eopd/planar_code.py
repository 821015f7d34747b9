"""
Reader and writer for the planar_code exchange format.

A planar_code stream is an optional ``>>planar_code<<`` header followed by
records. A record starts with the vertex count n. When that first byte is
nonzero every entry is one byte; when it is zero, n and all entries are
unsigned 16-bit values. For each vertex the 1-based neighbours follow in
clockwise order, terminated by 0.

The header may also carry the byte order of 16-bit values
(``>>planar_code le<<`` or ``>>planar_code be<<``) and may recur between
records.
"""

from __future__ import annotations

import io
import struct
import warnings
from typing import BinaryIO, Iterator, Optional, Sequence, Union

from ._types import PlanarCodeRecord
from .embedding import TriangulationEmbedding
from .validation import (
    MAX_BYTE_VERTICES,
    MAX_SHORT_VERTICES,
    CapacityError,
    FormatError,
    validate_vertex_count,
)

HEADER = b">>planar_code<<"
_HEADER_NAME = b"planar_code"
_BYTE_ORDERS = {b"le": "<", b"be": ">"}

Encodable = Union[TriangulationEmbedding, Sequence[Sequence[int]]]


class PlanarCodeReader:
    """Iterate over the records of a planar_code stream.

    Args:
        stream: Binary stream positioned at the start of the data.
        max_vertices: Largest vertex count accepted.
        byteorder: ``"<"`` or ``">"``; used for 16-bit records until a
            header says otherwise.
    """

    def __init__(
        self,
        stream: BinaryIO,
        max_vertices: int = MAX_SHORT_VERTICES,
        byteorder: str = "<",
    ) -> None:
        self._stream = stream
        self._pending = bytearray()
        self.max_vertices = max_vertices
        self.byteorder = byteorder
        self.records_read = 0

    def __iter__(self) -> Iterator[PlanarCodeRecord]:
        while True:
            record = self.read_record()
            if record is None:
                return
            yield record

    # ------------------------------------------------------------------
    # Low-level reads
    # ------------------------------------------------------------------

    def _read(self, n: int) -> bytes:
        """Read up to n bytes, taking pushed-back bytes first."""
        if self._pending:
            head = bytes(self._pending[:n])
            del self._pending[:n]
            if len(head) < n:
                head += self._stream.read(n - len(head))
            return head
        return self._stream.read(n)

    def _read_exact(self, n: int) -> bytes:
        data = self._read(n)
        if len(data) != n:
            raise FormatError(f"unexpected end of stream in record {self.records_read + 1}")
        return data

    def _read_short(self) -> int:
        (value,) = struct.unpack(self.byteorder + "H", self._read_exact(2))
        return value

    def _skip_header(self) -> None:
        """Consume a header whose leading ``>>p`` has already been read."""
        text = bytearray(b"p")
        while True:
            c = self._read(1)
            if not c:
                raise FormatError("unterminated planar_code header")
            if c == b"<":
                break
            text += c
        if self._read(1) != b"<":
            raise FormatError("Problems with header -- single '<'")

        name, _, rest = bytes(text).partition(b" ")
        if name != _HEADER_NAME:
            raise FormatError(f"No planarcode header detected: {bytes(text)!r}")
        token = rest.strip()
        if token:
            if token in _BYTE_ORDERS:
                self.byteorder = _BYTE_ORDERS[token]
            else:
                warnings.warn(
                    f"Unknown byte order {token!r} in planar_code header; assuming little-endian",
                    UserWarning,
                    stacklevel=3,
                )
                self.byteorder = "<"

    # ------------------------------------------------------------------
    # Records
    # ------------------------------------------------------------------

    def read_record(self) -> Optional[PlanarCodeRecord]:
        """Read the next record, or return None at end of stream.

        Raises:
            FormatError: If the stream is truncated or malformed
            CapacityError: If the graph exceeds ``max_vertices``
        """
        first = self._read(1)
        while first == b">":
            lookahead = self._read(2)
            if lookahead != b">p":
                # A byte-format graph with 62 vertices
                self._pending[:0] = lookahead
                break
            self._skip_header()
            first = self._read(1)
        if not first:
            return None

        if first[0] != 0:
            n = first[0]
            wide = False
            validate_vertex_count(n, self.max_vertices)
            read_entry = self._read_byte_entry
        else:
            n = self._read_short()
            wide = True
            validate_vertex_count(n, self.max_vertices)
            read_entry = self._read_short

        rotation: list[list[int]] = []
        for v in range(n):
            nbrs: list[int] = []
            while True:
                entry = read_entry()
                if entry == 0:
                    break
                if entry > n:
                    raise FormatError(
                        f"vertex {v + 1} lists neighbour {entry} in a graph with {n} vertices"
                    )
                nbrs.append(entry - 1)
            rotation.append(nbrs)

        self.records_read += 1
        return PlanarCodeRecord(rotation=rotation, wide=wide)

    def _read_byte_entry(self) -> int:
        return self._read_exact(1)[0]


class PlanarCodeWriter:
    """Write graphs in planar_code, emitting the header before the first one.

    Args:
        stream: Binary output stream.
        byteorder: Byte order of 16-bit records.
    """

    def __init__(self, stream: BinaryIO, byteorder: str = "<") -> None:
        self._stream = stream
        self.byteorder = byteorder
        self.records_written = 0

    def write(self, graph: Encodable, wide: bool = False) -> None:
        """Write one graph; ``wide`` forces the 16-bit encoding.

        Raises:
            CapacityError: If the graph is too large for planar_code
        """
        data = encode_planar_code(graph, wide=wide, byteorder=self.byteorder)
        if self.records_written == 0:
            self._stream.write(HEADER)
        self._stream.write(data)
        self._stream.flush()
        self.records_written += 1


def encode_planar_code(
    graph: Encodable,
    wide: bool = False,
    byteorder: str = "<",
) -> bytes:
    """
    Encode one graph as a planar_code record (without header).

    Args:
        graph: An embedding, or clockwise neighbour lists (0-based).
        wide: Use the 16-bit encoding even for small graphs.
        byteorder: Byte order of 16-bit values.

    Returns:
        The encoded record.

    Raises:
        CapacityError: If the graph has more vertices than the format allows
    """
    if isinstance(graph, TriangulationEmbedding):
        rotation = graph.to_rotation()
    else:
        rotation = [list(nbrs) for nbrs in graph]
    n = len(rotation)

    if n > MAX_SHORT_VERTICES:
        raise CapacityError("Graphs of that size are currently not supported")

    if not wide and n <= MAX_BYTE_VERTICES:
        out = bytearray([n])
        for nbrs in rotation:
            out.extend(w + 1 for w in nbrs)
            out.append(0)
        return bytes(out)

    values = [n]
    for nbrs in rotation:
        values.extend(w + 1 for w in nbrs)
        values.append(0)
    return b"\x00" + struct.pack(f"{byteorder}{len(values)}H", *values)


def decode_planar_code(
    data: bytes,
    max_vertices: int = MAX_SHORT_VERTICES,
) -> list[PlanarCodeRecord]:
    """Decode every record in ``data``."""
    return list(PlanarCodeReader(io.BytesIO(data), max_vertices=max_vertices))


def read_planar_code(
    stream: BinaryIO,
    max_vertices: int = MAX_SHORT_VERTICES,
) -> Iterator[PlanarCodeRecord]:
    """Yield the records of a planar_code stream one by one."""
    return iter(PlanarCodeReader(stream, max_vertices=max_vertices))


__all__ = [
    "HEADER",
    "PlanarCodeReader",
    "PlanarCodeWriter",
    "encode_planar_code",
    "decode_planar_code",
    "read_planar_code",
]
