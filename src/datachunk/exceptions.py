# ============================================================================
# FILE: exceptions.py
# RELPATH: datachunk/src/datachunk/exceptions.py
# PROJECT: Data Chunk Tool v1.0
# VERSION: 1.0.0
# LIFECYCLE: Proposed
# DESCRIPTION: Exception hierarchy for Data Chunk Tool
# ============================================================================

"""
Exception classes for Data Chunk Tool.

Every failure carries enough structured context (line number, chunk label,
expected vs. actual digest) for a caller to present a precise message. A
failure while processing one chunk is isolated to that chunk.
"""

from typing import Any, Optional


class DataChunkError(Exception):
    """Base exception for all Data Chunk Tool errors."""
    pass


# ============================================================================
# Chunk-Related Exceptions
# ============================================================================

class ChunkError(DataChunkError):
    """
    Base exception for chunk codec and scanning errors.

    Attributes:
        label: Label of the chunk being processed, if known
        line_number: 1-based document line where the problem was found, if known
    """
    def __init__(self, message: str, label: Optional[str] = None,
                 line_number: Optional[int] = None):
        self.label = label
        self.line_number = line_number

        if label is not None:
            message = f"Chunk '{label}': {message}"
        if line_number is not None:
            message += f" (line {line_number})"
        super().__init__(message)


class InvalidEncodingChoiceError(ChunkError):
    """
    Raised when the requested encoding cannot represent the payload.

    Attributes:
        encoding: The encoding that was requested
        reason: Human-readable explanation of the mismatch
    """
    def __init__(self, encoding: str, reason: str, label: Optional[str] = None,
                 line_number: Optional[int] = None):
        self.encoding = encoding
        self.reason = reason
        super().__init__(f"Encoding '{encoding}' not usable: {reason}", label, line_number)


class CorruptPayloadError(ChunkError):
    """
    Raised when a chunk body cannot be decoded.

    Attributes:
        encoding: The encoding the body claims to use
        reason: Explanation of the decode failure
    """
    def __init__(self, encoding: str, reason: str, label: Optional[str] = None,
                 line_number: Optional[int] = None):
        self.encoding = encoding
        self.reason = reason
        super().__init__(f"Corrupt {encoding} payload: {reason}", label, line_number)


class ChecksumMismatchError(ChunkError):
    """
    Raised when decoded bytes do not match the stored digest.

    Attributes:
        expected: Digest stored in the chunk header
        actual: Digest computed over the decoded bytes
    """
    def __init__(self, expected: str, actual: str, label: Optional[str] = None,
                 line_number: Optional[int] = None):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Checksum mismatch: expected {expected}, got {actual}", label, line_number
        )


class MalformedHeaderError(ChunkError):
    """
    Raised for chunk header syntax errors and nested chunk fences.

    Attributes:
        fragment: The offending piece of header text
        reason: Explanation of what is wrong with it
    """
    def __init__(self, fragment: str, reason: str, label: Optional[str] = None,
                 line_number: Optional[int] = None):
        self.fragment = fragment
        self.reason = reason
        super().__init__(f"Malformed header near '{fragment}': {reason}", label, line_number)


class UnterminatedChunkError(ChunkError):
    """Raised when the document ends while a chunk is still open."""
    def __init__(self, line_number: int, label: Optional[str] = None):
        super().__init__("Chunk opened here is never closed", label, line_number)


# ============================================================================
# Argument-Related Exceptions
# ============================================================================

class InvalidArgumentsError(DataChunkError):
    """
    Raised when a caller supplies an incoherent parameter combination.

    Attributes:
        reason: Explanation of the problem
    """
    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Invalid arguments: {reason}")


class InvalidPositionError(DataChunkError):
    """
    Raised when a splice position or line range is out of bounds.

    Attributes:
        position: The offending position or range
        reason: Explanation of the problem
    """
    def __init__(self, position: Any, reason: str):
        self.position = position
        self.reason = reason
        super().__init__(f"Invalid position {position}: {reason}")


# ============================================================================
# Configuration-Related Exceptions
# ============================================================================

class ConfigError(DataChunkError):
    """Base exception for configuration-related errors."""
    pass


class ConfigLoadError(ConfigError):
    """
    Raised when configuration file cannot be loaded.

    Attributes:
        config_file: Path to the configuration file
        reason: Explanation of the failure
    """
    def __init__(self, config_file: str, reason: str):
        self.config_file = config_file
        self.reason = reason
        super().__init__(f"Failed to load config '{config_file}': {reason}")


class ConfigValidationError(ConfigError):
    """
    Raised when configuration data fails validation.

    Attributes:
        key: Configuration key that failed validation
        value: The invalid value
        reason: Explanation of why validation failed
    """
    def __init__(self, key: str, value: Any, reason: str):
        self.key = key
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid config value for '{key}': {reason}")


# ============================================================================
# I/O-Related Exceptions
# ============================================================================

class DocumentIOError(DataChunkError):
    """Base exception for I/O errors."""
    pass


class DocumentReadError(DocumentIOError):
    """
    Raised when a document or data file cannot be read.

    Attributes:
        path: Path to the file
        reason: Explanation of the failure
    """
    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to read '{path}': {reason}")


class DocumentWriteError(DocumentIOError):
    """
    Raised when a document or extracted file cannot be written.

    Attributes:
        path: Path where writing failed
        reason: Explanation of the failure
    """
    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to write '{path}': {reason}")


class OverwriteError(DocumentIOError):
    """
    Raised when attempting to overwrite an existing file without permission.

    Attributes:
        path: Path to the file that would be overwritten
    """
    def __init__(self, path: str):
        self.path = path
        super().__init__(f"File '{path}' already exists and overwrite not permitted")


# ============================================================================
# LIFECYCLE STATUS: Proposed
# DEPENDENCIES: None (base exception definitions)
# TESTS: tests/unit/test_exceptions.py
# ============================================================================
