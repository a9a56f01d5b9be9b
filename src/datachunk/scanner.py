# ============================================================================
# SOURCEFILE: scanner.py
# RELPATH: datachunk/src/datachunk/scanner.py
# PROJECT: Data Chunk Tool v1.0
# VERSION: 1.0.0
# LIFECYCLE: Proposed
# DESCRIPTION: Document chunk scanner and per-chunk decoding
# ============================================================================

"""
Document Chunk Scanner.

Walks a document's lines once, tracking whether it is inside a chunk, and
yields every chunk of the requested engine with its label, options, body
and line range. Code fences of other engines (```{r}, ```python, ```) are
stepped over without looking at their contents.

The scan is a pure read over the given snapshot: calling it again on the
same lines yields the same chunks, and ranges go stale as soon as the
document is edited.
"""

import logging
from typing import Iterator, List, Optional, Sequence

from datachunk import codec
from datachunk.exceptions import (
    CorruptPayloadError,
    InvalidArgumentsError,
    InvalidEncodingChoiceError,
    MalformedHeaderError,
    UnterminatedChunkError,
)
from datachunk.header import (
    FENCE_ANY_PATTERN,
    is_close_fence,
    match_open_fence,
    parse_header_text,
)
from datachunk.models import Chunk, ChunkHeader

logger = logging.getLogger(__name__)

DEFAULT_ENGINE = "data"
UNNAMED_LABEL = "unnamed-chunk-{}"


def _engine_token(header_text: str) -> str:
    """Best-effort engine name of a header that failed to parse."""
    stripped = header_text.strip()
    if not stripped:
        return ""
    return stripped.split(None, 1)[0].split(",", 1)[0]


def scan(document_lines: Sequence[str],
         engine: Optional[str] = DEFAULT_ENGINE) -> Iterator[Chunk]:
    """
    Lazily yield the chunks of a document in order.

    Args:
        document_lines: Document as a sequence of lines (no terminators)
        engine: Engine name to collect; None collects every braced chunk

    Yields:
        Chunk objects with 0-based half-open line ranges

    Raises:
        MalformedHeaderError: On a malformed header for the engine, or a
            nested opening fence inside an open chunk
        UnterminatedChunkError: If the document ends inside a chunk
    """
    unnamed = 0
    current: Optional[ChunkHeader] = None
    current_label = ""
    synthesized = False
    start = 0
    body: List[str] = []
    other_fence: Optional[str] = None

    for index, line in enumerate(document_lines):
        if current is not None:
            if is_close_fence(line, current.fence):
                yield Chunk(
                    label=current_label,
                    engine=current.engine,
                    options=current.options,
                    body_lines=tuple(body),
                    start=start,
                    end=index + 1,
                    fence=current.fence,
                    label_synthesized=synthesized,
                )
                current = None
                body = []
                continue

            matched = match_open_fence(line)
            if matched and len(matched[0]) >= len(current.fence):
                if _engine_token(matched[1]) == current.engine:
                    raise MalformedHeaderError(
                        line.strip(), "chunk fence nested inside an open chunk",
                        current_label, index + 1
                    )
            body.append(line)
            continue

        if other_fence is not None:
            if is_close_fence(line, other_fence):
                other_fence = None
            continue

        matched = match_open_fence(line)
        if matched:
            fence, text = matched
            wanted = engine is None or _engine_token(text) == engine
            try:
                header = parse_header_text(text)
            except MalformedHeaderError as e:
                if not wanted:
                    other_fence = fence
                    continue
                raise MalformedHeaderError(e.fragment, e.reason, line_number=index + 1)

            label = header.label
            is_unnamed = label is None
            if is_unnamed:
                unnamed += 1
                label = UNNAMED_LABEL.format(unnamed)

            if engine is not None and header.engine != engine:
                other_fence = fence
                continue

            current = ChunkHeader(fence=fence, engine=header.engine,
                                  label=header.label, options=header.options)
            current_label = label
            synthesized = is_unnamed
            start = index
            continue

        plain = FENCE_ANY_PATTERN.match(line)
        if plain and "`" not in plain.group(2):
            other_fence = plain.group(1)

    if current is not None:
        raise UnterminatedChunkError(start + 1, current_label)


def list_chunks(document_lines: Sequence[str],
                engine: Optional[str] = DEFAULT_ENGINE) -> List[Chunk]:
    """Scan eagerly and return all chunks as a list."""
    return list(scan(document_lines, engine))


def find_chunks_in_selection(chunks: Sequence[Chunk],
                             selection_start: int,
                             selection_end: int) -> List[Chunk]:
    """
    Chunks touched by a selection of lines.

    Args:
        chunks: Chunks from a scan of the current snapshot
        selection_start: First selected line index (0-based)
        selection_end: Last selected line index (0-based, inclusive)

    Returns:
        Chunks whose range overlaps the selection, in document order
    """
    if selection_end < selection_start:
        selection_start, selection_end = selection_end, selection_start
    return [
        chunk for chunk in chunks
        if chunk.start <= selection_end and selection_start < chunk.end
    ]


def decode_chunk(chunk: Chunk, verify: bool = True) -> bytes:
    """
    Decode a chunk body and check its stored digest.

    Args:
        chunk: Scanned chunk
        verify: Check md5sum when present; False skips the check

    Returns:
        Decoded payload bytes

    Raises:
        InvalidEncodingChoiceError: Unknown encoding in the header
        MalformedHeaderError: Unknown format in the header
        CorruptPayloadError: Body cannot be decoded
        ChecksumMismatchError: Decoded bytes do not match md5sum
    """
    options = chunk.options
    encoding = options.encoding or "asis"
    try:
        options.validate()
        data = codec.decode(chunk.body_lines, encoding)
    except InvalidArgumentsError as e:
        raise MalformedHeaderError(
            f'format="{options.format}"', e.reason, chunk.label, chunk.line_number
        ) from e
    except InvalidEncodingChoiceError as e:
        raise InvalidEncodingChoiceError(e.encoding, e.reason, chunk.label, chunk.line_number) from e
    except CorruptPayloadError as e:
        raise CorruptPayloadError(e.encoding, e.reason, chunk.label, chunk.line_number) from e

    expected = options.md5sum
    if expected:
        if verify:
            codec.verify_or_raise(data, expected, chunk.label, chunk.line_number)
        else:
            logger.debug("Skipping md5sum check for chunk '%s'", chunk.label)
    return data


# ============================================================================
# LIFECYCLE STATUS: Proposed
# DEPENDENCIES: codec.py, header.py, models.py, exceptions.py
# TESTS: tests/unit/test_scanner.py
# ============================================================================
