# ============================================================================
# SOURCEFILE: sniffer.py
# RELPATH: datachunk/src/datachunk/sniffer.py
# PROJECT: Data Chunk Tool v1.0
# VERSION: 1.0.0
# LIFECYCLE: Proposed
# DESCRIPTION: Text/binary classification of byte buffers
# ============================================================================

"""
Binary sniffer.

Classifies a byte buffer as text-like or binary-like from a bounded prefix
sample. A NUL byte is always binary. Otherwise the share of "suspicious"
bytes decides: control characters outside common whitespace, plus, when the
sample is not valid UTF-8, every byte >= 0x80.
"""

import codecs

DEFAULT_SAMPLE_BYTES = 8192
DEFAULT_BINARY_THRESHOLD = 0.30

# Tab, LF, VT, FF, CR, BS
_TEXT_CONTROLS = frozenset(b"\t\n\x0b\x0c\r\x08")


def _looks_like_utf8(sample: bytes, truncated: bool) -> bool:
    """Strict UTF-8 check that tolerates a sequence cut at the sample edge."""
    decoder = codecs.getincrementaldecoder("utf-8")()
    try:
        decoder.decode(sample, final=not truncated)
    except UnicodeDecodeError:
        return False
    return True


def is_binary(buffer: bytes,
              sample_bytes: int = DEFAULT_SAMPLE_BYTES,
              threshold: float = DEFAULT_BINARY_THRESHOLD) -> bool:
    """
    Decide whether a byte buffer should be treated as binary.

    Args:
        buffer: Bytes to classify
        sample_bytes: Size of the prefix that is examined
        threshold: Fraction of suspicious bytes above which the buffer is binary

    Returns:
        True if binary-like, False if text-like (an empty buffer is text)
    """
    sample = bytes(buffer[:sample_bytes])
    if not sample:
        return False

    if b"\x00" in sample:
        return True

    suspicious = sum(
        1 for b in sample
        if (b < 0x20 and b not in _TEXT_CONTROLS) or b == 0x7F
    )

    if not _looks_like_utf8(sample, truncated=len(buffer) > len(sample)):
        suspicious += sum(1 for b in sample if b >= 0x80)

    return suspicious / len(sample) > threshold


# ============================================================================
# LIFECYCLE STATUS: Proposed
# DEPENDENCIES: None
# TESTS: tests/unit/test_sniffer.py
# ============================================================================
