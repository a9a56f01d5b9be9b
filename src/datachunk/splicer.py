# ============================================================================
# SOURCEFILE: splicer.py
# RELPATH: datachunk/src/datachunk/splicer.py
# PROJECT: Data Chunk Tool v1.0
# VERSION: 1.0.0
# LIFECYCLE: Proposed
# DESCRIPTION: Inserting chunks into and removing chunk ranges from documents
# ============================================================================

"""
Document Splicer.

Documents are lists of lines and are never modified in place: every
operation returns a new list. Ranges are 0-based and half-open.
"""

import re
from typing import Iterable, List, Optional, Sequence, Tuple

from datachunk.exceptions import InvalidPositionError

Range = Tuple[int, int]

_LINE_BREAK = re.compile(r"\r\n|\r|\n")


def split_document(text: str) -> List[str]:
    """
    Split document text into lines without terminators.

    A final line ending does not produce an extra empty line; use
    join_document(..., trailing_newline=True) to restore it.
    """
    if not text:
        return []
    lines = _LINE_BREAK.split(text)
    if lines[-1] == "":
        lines.pop()
    return lines


def detect_newline(text: str) -> str:
    """First line terminator in the text; LF when there is none."""
    m = _LINE_BREAK.search(text)
    return m.group(0) if m else "\n"


def join_document(lines: Sequence[str], trailing_newline: bool = True,
                  newline: str = "\n") -> str:
    """Join lines with newline, optionally terminating the last one."""
    text = newline.join(lines)
    if trailing_newline and lines:
        text += newline
    return text


def insert_at(document_lines: Sequence[str],
              position: int,
              chunk_lines: Sequence[str]) -> List[str]:
    """
    Insert chunk lines before a 0-based line index.

    Positions past the end append to the document.

    Raises:
        InvalidPositionError: If position is negative
    """
    if position < 0:
        raise InvalidPositionError(position, "insert position cannot be negative")
    position = min(position, len(document_lines))
    return list(document_lines[:position]) + list(chunk_lines) + list(document_lines[position:])


def merge_ranges(ranges: Iterable[Range], line_count: Optional[int] = None) -> List[Range]:
    """
    Sort ranges by start and merge any that overlap or touch.

    Args:
        ranges: (start, end) half-open pairs in any order
        line_count: Document length; when given, ranges must lie within it

    Returns:
        Disjoint, non-adjacent ranges in ascending order

    Raises:
        InvalidPositionError: Negative start, end before start, or past the end
    """
    checked: List[Range] = []
    for start, end in ranges:
        if start < 0 or end < start:
            raise InvalidPositionError((start, end), "range must satisfy 0 <= start <= end")
        if line_count is not None and end > line_count:
            raise InvalidPositionError(
                (start, end), f"range extends past end of document ({line_count} lines)"
            )
        if end > start:
            checked.append((start, end))

    merged: List[Range] = []
    for start, end in sorted(checked):
        if merged and start <= merged[-1][1]:
            merged[-1] = (merged[-1][0], max(merged[-1][1], end))
        else:
            merged.append((start, end))
    return merged


def remove_ranges(document_lines: Sequence[str],
                  ranges: Iterable[Range]) -> Tuple[List[str], Optional[int]]:
    """
    Remove line ranges from a document in one pass.

    Ranges may overlap and arrive in any order; they are merged first so
    earlier removals never shift later ones.

    Args:
        document_lines: Current document snapshot
        ranges: (start, end) half-open pairs, e.g. chunk.range values

    Returns:
        (new_lines, first_removed) where first_removed is the index at which
        the first removed span started, or None if nothing was removed
    """
    merged = merge_ranges(ranges, len(document_lines))
    if not merged:
        return list(document_lines), None

    result: List[str] = []
    cursor = 0
    for start, end in merged:
        result.extend(document_lines[cursor:start])
        cursor = end
    result.extend(document_lines[cursor:])
    return result, merged[0][0]


# ============================================================================
# LIFECYCLE STATUS: Proposed
# DEPENDENCIES: exceptions.py
# TESTS: tests/unit/test_splicer.py
# ============================================================================
