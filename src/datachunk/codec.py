# ============================================================================
# SOURCEFILE: codec.py
# RELPATH: datachunk/src/datachunk/codec.py
# PROJECT: Data Chunk Tool v1.0
# VERSION: 1.0.0
# LIFECYCLE: Proposed
# DESCRIPTION: Payload encoding/decoding and checksum verification
# ============================================================================

"""
Payload codec.

Turns a byte buffer into chunk body lines and back again, and computes the
MD5 digest stored in a chunk's ``md5sum`` option.

Two encodings are supported:

- ``asis``: the payload is UTF-8 text and the body lines are its lines.
  Line endings (LF, CRLF, CR) all split lines, and on decode every line is
  terminated with LF. ``b"abc\\n"`` therefore round-trips exactly while
  ``b"abc"`` comes back as ``b"abc\\n"``.
- ``base64``: standard base64 wrapped at a fixed width. Always exact.
"""

import base64
import binascii
import hashlib
import io
import re
from typing import BinaryIO, Iterable, Iterator, List, Optional

from datachunk.exceptions import (
    ChecksumMismatchError,
    CorruptPayloadError,
    InvalidArgumentsError,
    InvalidEncodingChoiceError,
)
from datachunk.models import ENCODINGS
from datachunk.sniffer import is_binary

TEXT_ENCODING = "utf-8"
BASE64_LINE_WIDTH = 64

# Lines per block when streaming base64 output
_BLOCK_LINES = 1024

_LINE_BREAK = re.compile(r"\r\n|\r|\n")


def default_encoding(buffer: bytes) -> str:
    """Pick base64 unless the buffer is text that asis can carry."""
    if is_binary(buffer) or not asis_encodable(buffer):
        return "base64"
    return "asis"


def _check_line_width(line_width: int) -> None:
    if line_width <= 0 or line_width % 4:
        raise InvalidArgumentsError(
            f"base64 line width must be a positive multiple of 4, got {line_width}"
        )


def _text_lines(buffer: bytes) -> List[str]:
    if b"\x00" in buffer:
        raise InvalidEncodingChoiceError("asis", "payload contains NUL bytes")
    try:
        text = buffer.decode(TEXT_ENCODING)
    except UnicodeDecodeError as e:
        raise InvalidEncodingChoiceError(
            "asis", f"payload is not valid {TEXT_ENCODING} text (byte offset {e.start})"
        )
    if not text:
        return []
    lines = _LINE_BREAK.split(text)
    if lines[-1] == "":
        lines.pop()
    return lines


def iter_base64_lines(stream: BinaryIO,
                      line_width: int = BASE64_LINE_WIDTH) -> Iterator[str]:
    """
    Stream base64 body lines from a binary file object.

    Reads in bounded blocks whose size is a multiple of three bytes, so the
    concatenated output is identical to encoding the whole payload at once.

    Args:
        stream: Readable binary file object
        line_width: Characters per output line (positive multiple of 4)

    Yields:
        Body lines of at most line_width characters
    """
    _check_line_width(line_width)
    bytes_per_line = line_width // 4 * 3
    block_size = bytes_per_line * _BLOCK_LINES

    for block in iter(lambda: stream.read(block_size), b""):
        encoded = base64.b64encode(block).decode("ascii")
        for i in range(0, len(encoded), line_width):
            yield encoded[i:i + line_width]


def encode(buffer: bytes,
           encoding: Optional[str] = None,
           line_width: int = BASE64_LINE_WIDTH) -> List[str]:
    """
    Encode a payload into chunk body lines.

    Args:
        buffer: Original payload bytes
        encoding: 'asis' or 'base64'; None picks one with the binary sniffer
        line_width: Wrap width for base64 output

    Returns:
        Body lines without line terminators

    Raises:
        InvalidEncodingChoiceError: Unknown encoding, or asis on non-text bytes
    """
    if encoding is None:
        encoding = default_encoding(buffer)

    if encoding == "asis":
        return _text_lines(buffer)
    if encoding == "base64":
        return list(iter_base64_lines(io.BytesIO(buffer), line_width))

    raise InvalidEncodingChoiceError(
        encoding, f"supported encodings are {', '.join(ENCODINGS)}"
    )


def decode(lines: Iterable[str], encoding: str) -> bytes:
    """
    Decode chunk body lines back into bytes.

    Args:
        lines: Body lines as they appear between the fences
        encoding: 'asis' or 'base64'

    Returns:
        Decoded payload

    Raises:
        CorruptPayloadError: If a base64 body is not valid base64
        InvalidEncodingChoiceError: If the encoding is unknown
    """
    if encoding == "asis":
        return "".join(line + "\n" for line in lines).encode(TEXT_ENCODING)

    if encoding == "base64":
        joined = "".join("".join(lines).split())
        try:
            return base64.b64decode(joined, validate=True)
        except (binascii.Error, ValueError) as e:
            raise CorruptPayloadError("base64", str(e))

    raise InvalidEncodingChoiceError(
        encoding, f"supported encodings are {', '.join(ENCODINGS)}"
    )


def asis_encodable(buffer: bytes) -> bool:
    """True if the buffer is NUL-free UTF-8, the only text asis can hold."""
    try:
        _text_lines(buffer)
    except InvalidEncodingChoiceError:
        return False
    return True


def asis_round_trips(buffer: bytes) -> bool:
    """True if asis encoding reproduces the buffer byte for byte."""
    try:
        return decode(_text_lines(buffer), "asis") == buffer
    except InvalidEncodingChoiceError:
        return False


# ============================================================================
# Checksums
# ============================================================================

def checksum(buffer: bytes) -> str:
    """
    Calculate the MD5 digest of a payload.

    This detects corruption only; it is not a security control.

    Returns:
        Lowercase hexadecimal digest
    """
    return hashlib.md5(buffer).hexdigest()


def verify(buffer: bytes, expected: str) -> bool:
    """
    Verify a payload against an expected digest.

    Args:
        buffer: Decoded payload
        expected: Hex digest (case-insensitive)

    Returns:
        True if the digest matches
    """
    return checksum(buffer) == expected.strip().lower()


def verify_or_raise(buffer: bytes, expected: str,
                    label: Optional[str] = None,
                    line_number: Optional[int] = None) -> None:
    """
    Verify a payload or raise.

    Raises:
        ChecksumMismatchError: If the digest does not match
    """
    actual = checksum(buffer)
    if actual != expected.strip().lower():
        raise ChecksumMismatchError(expected, actual, label, line_number)


# ============================================================================
# LIFECYCLE STATUS: Proposed
# DEPENDENCIES: exceptions.py, models.py, sniffer.py
# TESTS: tests/unit/test_codec.py
# ============================================================================
