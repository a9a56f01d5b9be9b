# ============================================================================
# SOURCEFILE: logging.py
# RELPATH: datachunk/src/datachunk/logging.py
# PROJECT: Data Chunk Tool v1.0
# VERSION: 1.0.0
# LIFECYCLE: Proposed
# DESCRIPTION: Structured JSON logging for chunk operations and diagnostics
# ============================================================================

"""
Structured Logging Module.

Provides a JSON-lines audit log of chunk operations (create, insert,
remove, extract, validate) plus UTF-8 console setup for the CLI.
"""

from __future__ import annotations

import io
import json
import uuid
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional, Any, Iterable
from enum import Enum
import sys


def _ensure_stream_utf8(stream: Optional[io.TextIOBase]) -> Optional[io.TextIOBase]:
    """Ensure a text stream writes UTF-8, wrapping if necessary."""
    if stream is None:
        return None

    encoding = getattr(stream, "encoding", None)
    if isinstance(encoding, str) and encoding.lower() in ("utf-8", "utf8"):
        return stream

    reconfigure = getattr(stream, "reconfigure", None)
    if callable(reconfigure):
        try:
            reconfigure(encoding="utf-8", errors="backslashreplace")
            return stream
        except (ValueError, io.UnsupportedOperation):
            pass

    buffer = getattr(stream, "buffer", None)
    if buffer is None:
        return stream

    stream.flush()
    wrapped = io.TextIOWrapper(buffer, encoding="utf-8", errors="backslashreplace")
    return wrapped


def configure_utf8_logging(force: bool = False) -> None:
    """Configure stdout/stderr and root logger handlers for UTF-8 output.

    Chunk labels and echoed text payloads may hold any Unicode; consoles
    that default to a legacy code page are switched to UTF-8. Safe to call
    more than once.
    """

    streams: Iterable[str] = ("stdout", "stderr")
    for name in streams:
        stream = getattr(sys, name, None)
        if stream is None:
            continue

        new_stream = _ensure_stream_utf8(stream)
        if new_stream is not None and new_stream is not stream:
            setattr(sys, name, new_stream)

    root = logging.getLogger()
    if force and not root.handlers:
        root.addHandler(logging.StreamHandler(sys.stderr))

    for handler in root.handlers:
        stream = getattr(handler, "stream", None)
        if stream is None:
            continue
        new_stream = _ensure_stream_utf8(stream)
        if new_stream is not None and new_stream is not stream:
            handler.setStream(new_stream)


class LogEvent(Enum):
    """Enumeration of loggable events."""
    OPERATION_START = "operation_start"
    OPERATION_COMPLETE = "operation_complete"
    ERROR = "error"
    WARNING = "warning"
    CHUNK_ASSEMBLED = "chunk_assembled"
    CHUNK_DECODED = "chunk_decoded"
    CHECKSUM_VERIFIED = "checksum_verified"
    CHUNKS_REMOVED = "chunks_removed"


class StructuredLogger:
    """
    JSON-structured logger for chunk operations.

    Every entry is appended to a per-session JSON-lines file and kept in an
    in-memory buffer for inspection.
    """

    def __init__(self, log_dir: str = "logs", session_id: Optional[str] = None):
        """
        Initialize structured logger.

        Args:
            log_dir: Directory for log files
            session_id: Optional session ID (generated if not provided)
        """
        self.log_dir = Path(log_dir)
        self.session_id = session_id or str(uuid.uuid4())
        self.start_time = datetime.now(timezone.utc)

        timestamp = self.start_time.strftime("%Y%m%d_%H%M%S")
        self.log_file = self.log_dir / f"datachunk_session_{timestamp}_{self.session_id[:8]}.json"
        self._ensure_log_file_exists()

        self.log_buffer: List[Dict] = []

    def _ensure_log_file_exists(self) -> None:
        """Create the log directory and touch the session file."""
        try:
            self.log_dir.mkdir(parents=True, exist_ok=True)
            self.log_file.touch(exist_ok=True)
        except OSError as e:
            print(f"Warning: Failed to create log file {self.log_file}: {e}", file=sys.stderr)

    def log_operation_start(self,
                            command: str,
                            document: Optional[str],
                            source: Optional[str] = None) -> None:
        """
        Log the start of a CLI operation.

        Args:
            command: Subcommand name ("create", "insert", "remove", ...)
            document: Document being read or edited
            source: Data file being embedded, if any
        """
        entry = self._create_log_entry(
            event=LogEvent.OPERATION_START,
            details={
                "command": command,
                "document": document,
                "source": source
            }
        )
        self._write_log_entry(entry)

    def log_operation_complete(self,
                               command: str,
                               document: Optional[str],
                               processed: int,
                               skipped: int,
                               errors: int,
                               elapsed_ms: int) -> None:
        """
        Log completion of a CLI operation.

        Args:
            command: Subcommand name
            document: Document path
            processed: Chunks processed
            skipped: Chunks skipped
            errors: Chunks that failed
            elapsed_ms: Operation duration in milliseconds
        """
        entry = self._create_log_entry(
            event=LogEvent.OPERATION_COMPLETE,
            details={
                "command": command,
                "document": document,
                "counts": {
                    "processed": processed,
                    "skipped": skipped,
                    "errors": errors
                },
                "elapsedMs": elapsed_ms
            }
        )
        self._write_log_entry(entry)

    def log_error(self,
                  command: str,
                  error_message: str,
                  error_type: str,
                  label: Optional[str] = None,
                  line_number: Optional[int] = None) -> None:
        """
        Log an error.

        Args:
            command: Subcommand name
            error_message: Human-readable error message
            error_type: Exception class name
            label: Chunk label, if the error concerns one chunk
            line_number: 1-based line number, if known
        """
        entry = self._create_log_entry(
            event=LogEvent.ERROR,
            details={
                "command": command,
                "errorMessage": error_message,
                "errorType": error_type,
                "label": label,
                "lineNumber": line_number
            }
        )
        self._write_log_entry(entry)

    def log_warning(self,
                    message: str,
                    context: Optional[Dict] = None) -> None:
        """Log a warning with optional context."""
        entry = self._create_log_entry(
            event=LogEvent.WARNING,
            details={
                "message": message,
                "context": context or {}
            }
        )
        self._write_log_entry(entry)

    def log_chunk_assembled(self,
                            label: Optional[str],
                            format: str,
                            encoding: str,
                            size_bytes: int,
                            body_lines: int) -> None:
        """Log creation of a chunk from a payload."""
        entry = self._create_log_entry(
            event=LogEvent.CHUNK_ASSEMBLED,
            details={
                "label": label,
                "format": format,
                "encoding": encoding,
                "sizeBytes": size_bytes,
                "bodyLines": body_lines
            }
        )
        self._write_log_entry(entry)

    def log_chunk_decoded(self,
                          label: str,
                          encoding: str,
                          size_bytes: int,
                          start: int,
                          end: int) -> None:
        """Log a successfully decoded chunk."""
        entry = self._create_log_entry(
            event=LogEvent.CHUNK_DECODED,
            details={
                "label": label,
                "encoding": encoding,
                "sizeBytes": size_bytes,
                "range": [start, end]
            }
        )
        self._write_log_entry(entry)

    def log_checksum_verification(self,
                                  label: str,
                                  verified: bool,
                                  expected: Optional[str] = None,
                                  actual: Optional[str] = None) -> None:
        """
        Log checksum verification result.

        Args:
            label: Chunk being verified
            verified: Whether checksum matched
            expected: Expected checksum (if verification failed)
            actual: Actual checksum (if verification failed)
        """
        entry = self._create_log_entry(
            event=LogEvent.CHECKSUM_VERIFIED,
            details={
                "label": label,
                "verified": verified,
                "expected": expected,
                "actual": actual
            }
        )
        self._write_log_entry(entry)

    def log_chunks_removed(self,
                           labels: List[str],
                           ranges: List[List[int]],
                           lines_removed: int) -> None:
        """Log a chunk removal."""
        entry = self._create_log_entry(
            event=LogEvent.CHUNKS_REMOVED,
            details={
                "labels": labels,
                "ranges": ranges,
                "linesRemoved": lines_removed
            }
        )
        self._write_log_entry(entry)

    def _create_log_entry(self,
                          event: LogEvent,
                          details: Dict[str, Any]) -> Dict:
        return {
            "sessionId": self.session_id,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "event": event.value,
            "details": details
        }

    def _write_log_entry(self, entry: Dict) -> None:
        """Write log entry to file and buffer."""
        self.log_buffer.append(entry)

        try:
            with open(self.log_file, 'a', encoding='utf-8') as f:
                f.write(json.dumps(entry, ensure_ascii=False) + '\n')
        except OSError as e:
            print(f"Warning: Failed to write log entry: {e}", file=sys.stderr)

    def get_session_logs(self) -> List[Dict]:
        """All log entries of the current session."""
        return list(self.log_buffer)


# ============================================================================
# LIFECYCLE STATUS: Proposed
# DEPENDENCIES: None (standalone logging)
# TESTS: tests/unit/test_logging.py
# ============================================================================
