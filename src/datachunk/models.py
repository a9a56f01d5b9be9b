# ============================================================================
# SOURCEFILE: models.py
# RELPATH: datachunk/src/datachunk/models.py
# PROJECT: Data Chunk Tool v1.0
# VERSION: 1.0.0
# LIFECYCLE: Proposed
# DESCRIPTION: Core data models for chunk options, headers and scanned chunks
# ============================================================================

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from datachunk.exceptions import (
    DataChunkError,
    InvalidArgumentsError,
    InvalidEncodingChoiceError,
)


FORMATS = ("text", "binary")
ENCODINGS = ("asis", "base64")

# Canonical header order for recognized keys; everything else follows in
# insertion order.
RECOGNIZED_KEYS = (
    "label",
    "format",
    "encoding",
    "output.var",
    "output.file",
    "loader.function",
    "md5sum",
    "echo",
    "eval",
)

_TRUE_LITERALS = {"TRUE", "T", "True", "true"}
_FALSE_LITERALS = {"FALSE", "F", "False", "false"}


def quote_value(value: str) -> str:
    """Render a Python string as a double-quoted header literal."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def unquote_value(raw: str) -> str:
    """
    Strip one level of single or double quotes from a raw header value.

    Unquoted values are returned stripped but otherwise untouched; they are
    opaque source text for the host document engine.
    """
    raw = raw.strip()
    if len(raw) >= 2 and raw[0] == raw[-1] and raw[0] in ("'", '"'):
        inner = raw[1:-1]
        out = []
        i = 0
        while i < len(inner):
            ch = inner[i]
            if ch == "\\" and i + 1 < len(inner):
                out.append(inner[i + 1])
                i += 2
                continue
            out.append(ch)
            i += 1
        return "".join(out)
    return raw


class ChunkOptions(dict):
    """
    Mapping of option name to raw option value text.

    Values are stored exactly as they appear in the header (quotes included)
    so unrecognized options pass through serialization verbatim. The typed
    properties interpret the recognized fields.
    """

    def _unquoted(self, key: str) -> Optional[str]:
        if key not in self:
            return None
        return unquote_value(self[key])

    def value(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """Option value with one level of string quoting removed."""
        if key not in self:
            return default
        return unquote_value(self[key])

    @property
    def format(self) -> Optional[str]:
        return self._unquoted("format")

    @property
    def encoding(self) -> Optional[str]:
        return self._unquoted("encoding")

    @property
    def md5sum(self) -> Optional[str]:
        return self._unquoted("md5sum")

    @property
    def output_var(self) -> Optional[str]:
        return self._unquoted("output.var")

    @property
    def output_file(self) -> Optional[str]:
        return self._unquoted("output.file")

    @property
    def loader_function(self) -> Optional[str]:
        # Code, not a string literal
        return self.get("loader.function")

    @property
    def echo(self) -> Optional[bool]:
        """Echo flag as a bool, or None when absent or not a plain literal."""
        raw = self.get("echo")
        if raw is None:
            return None
        raw = raw.strip()
        if raw in _TRUE_LITERALS:
            return True
        if raw in _FALSE_LITERALS:
            return False
        return None

    def validate(self) -> None:
        """
        Check the strongly-typed fields.

        Raises:
            InvalidArgumentsError: If format is not text or binary
            InvalidEncodingChoiceError: If encoding is not asis or base64
        """
        fmt = self.format
        if fmt is not None and fmt not in FORMATS:
            raise InvalidArgumentsError(
                f"format must be one of {', '.join(FORMATS)}, got '{fmt}'"
            )
        enc = self.encoding
        if enc is not None and enc not in ENCODINGS:
            raise InvalidEncodingChoiceError(
                enc, f"supported encodings are {', '.join(ENCODINGS)}"
            )

    def copy(self) -> "ChunkOptions":
        return ChunkOptions(self)


@dataclass(frozen=True)
class ChunkHeader:
    """
    A parsed opening-fence line.

    Attributes:
        fence: The backtick run that opened the chunk
        engine: Chunk-type name (e.g. 'data', 'r')
        label: Bare label token, or None if the header has none
        options: Remaining key=value options
    """
    fence: str
    engine: str
    label: Optional[str]
    options: ChunkOptions = field(default_factory=ChunkOptions)


@dataclass(frozen=True)
class Chunk:
    """
    A chunk located by the scanner.

    `start` is the 0-based index of the opening fence line and `end` is one
    past the closing fence line, so `lines[start:end]` is the whole chunk.
    Ranges are only valid against the document snapshot that was scanned.
    """
    label: str
    engine: str
    options: ChunkOptions
    body_lines: Tuple[str, ...]
    start: int
    end: int
    fence: str = "```"
    label_synthesized: bool = False

    @property
    def range(self) -> Tuple[int, int]:
        return (self.start, self.end)

    @property
    def line_count(self) -> int:
        return self.end - self.start

    @property
    def line_number(self) -> int:
        """1-based line number of the opening fence."""
        return self.start + 1

    def to_row(self) -> Dict[str, object]:
        """Flat summary used for chunk listings."""
        return {
            "label": self.label,
            "engine": self.engine,
            "start": self.start,
            "end": self.end,
            "format": self.options.format or "",
            "encoding": self.options.encoding or "",
            "output.var": self.options.output_var or "",
            "output.file": self.options.output_file or "",
        }


@dataclass
class ChunkResult:
    """Outcome of decoding one chunk; failures stay local to the chunk."""
    chunk: Chunk
    data: Optional[bytes] = None
    error: Optional[DataChunkError] = None
    verified: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None

    def as_text(self) -> Optional[str]:
        """Decoded payload as text, for echoing text-format chunks."""
        if self.data is None:
            return None
        return self.data.decode("utf-8", errors="replace")


def ranges_of(chunks: List[Chunk]) -> List[Tuple[int, int]]:
    """Line ranges of a selection of chunks, in the given order."""
    return [chunk.range for chunk in chunks]


# ============================================================================
# LIFECYCLE STATUS: Proposed
# DEPENDENCIES: exceptions.py
# TESTS: tests/unit/test_models.py
# ============================================================================
