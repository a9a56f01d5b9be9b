# ============================================================================
# SOURCEFILE: __init__.py
# RELPATH: datachunk/src/datachunk/__init__.py
# PROJECT: Data Chunk Tool v1.0
# VERSION: 1.0.0
# LIFECYCLE: Proposed
# DESCRIPTION: Package exports
# ============================================================================

"""Data Chunk Tool: embed data files in literate documents as fenced chunks."""

from datachunk.assembler import assemble
from datachunk.codec import checksum, decode, encode, verify
from datachunk.exceptions import (
    ChecksumMismatchError,
    ChunkError,
    CorruptPayloadError,
    DataChunkError,
    InvalidArgumentsError,
    InvalidEncodingChoiceError,
    InvalidPositionError,
    MalformedHeaderError,
    UnterminatedChunkError,
)
from datachunk.header import parse_header, serialize_header
from datachunk.models import Chunk, ChunkHeader, ChunkOptions, ChunkResult
from datachunk.scanner import decode_chunk, list_chunks, scan
from datachunk.sniffer import is_binary
from datachunk.splicer import insert_at, remove_ranges

__version__ = "1.0.0"

__all__ = [
    "assemble",
    "checksum",
    "decode",
    "encode",
    "verify",
    "ChecksumMismatchError",
    "ChunkError",
    "CorruptPayloadError",
    "DataChunkError",
    "InvalidArgumentsError",
    "InvalidEncodingChoiceError",
    "InvalidPositionError",
    "MalformedHeaderError",
    "UnterminatedChunkError",
    "parse_header",
    "serialize_header",
    "Chunk",
    "ChunkHeader",
    "ChunkOptions",
    "ChunkResult",
    "decode_chunk",
    "list_chunks",
    "scan",
    "is_binary",
    "insert_at",
    "remove_ranges",
    "__version__",
]
