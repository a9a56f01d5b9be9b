# ============================================================================
# SOURCEFILE: header.py
# RELPATH: datachunk/src/datachunk/header.py
# PROJECT: Data Chunk Tool v1.0
# VERSION: 1.0.0
# LIFECYCLE: Proposed
# DESCRIPTION: Chunk header (opening fence) parsing and serialization
# ============================================================================

"""
Chunk Header Parser/Serializer.

Header syntax:
    ```{data mylabel, format="binary", encoding="base64", output.var="df"}

An opening fence is a run of three or more backticks followed by a braced
header: the engine name, an optional bare label, then comma-separated
``key=value`` options. Values may be quoted strings or any balanced source
expression; they are kept verbatim and never evaluated here.
"""

import re
from typing import List, Optional, Tuple

from datachunk.exceptions import InvalidArgumentsError, MalformedHeaderError
from datachunk.models import (
    RECOGNIZED_KEYS,
    ChunkHeader,
    ChunkOptions,
    quote_value,
    unquote_value,
)

# Matches: ```{engine ...}
FENCE_OPEN_PATTERN = re.compile(r"^[ \t]*(`{3,})[ \t]*\{(.*)\}[ \t]*$")

# Matches: ``` (closing fence, nothing after the backticks)
FENCE_CLOSE_PATTERN = re.compile(r"^[ \t]*(`{3,})[ \t]*$")

# Matches any fenced code block opener: ```python, ```{r}, ```
FENCE_ANY_PATTERN = re.compile(r"^[ \t]*(`{3,})(.*)$")

ENGINE_PATTERN = re.compile(r"^[A-Za-z_][\w.-]*$")
KEY_PATTERN = re.compile(r"^[A-Za-z._][\w.]*$")
BARE_LABEL_PATTERN = re.compile(r"^[^\s,{}=\"'`]+$")

_OPENERS = {"(": ")", "[": "]", "{": "}"}
_CLOSERS = {")", "]", "}"}


def match_open_fence(line: str) -> Optional[Tuple[str, str]]:
    """
    Match a braced opening fence.

    Returns:
        (fence, header_text) or None if the line is not a chunk opener
    """
    m = FENCE_OPEN_PATTERN.match(line)
    if not m:
        return None
    return m.group(1), m.group(2)


def is_close_fence(line: str, fence: str) -> bool:
    """True if the line closes a chunk opened with the given fence."""
    m = FENCE_CLOSE_PATTERN.match(line)
    return bool(m) and len(m.group(1)) >= len(fence)


def split_top_level(text: str) -> List[str]:
    """
    Split header text on commas outside quotes and brackets.

    Raises:
        MalformedHeaderError: On unbalanced quotes or brackets
    """
    segments: List[str] = []
    current: List[str] = []
    stack: List[str] = []
    quote: Optional[str] = None
    escaped = False

    for ch in text:
        if quote:
            current.append(ch)
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == quote:
                quote = None
            continue

        if ch in ("'", '"', "`"):
            quote = ch
        elif ch in _OPENERS:
            stack.append(_OPENERS[ch])
        elif ch in _CLOSERS:
            if not stack or stack[-1] != ch:
                raise MalformedHeaderError("".join(current) + ch, f"unbalanced '{ch}'")
            stack.pop()
        elif ch == "," and not stack:
            segments.append("".join(current))
            current = []
            continue
        current.append(ch)

    tail = "".join(current)
    if quote:
        raise MalformedHeaderError(tail, f"unterminated {quote} string")
    if stack:
        raise MalformedHeaderError(tail, f"missing '{stack[-1]}'")
    segments.append(tail)
    return segments


def _split_option(segment: str) -> Tuple[str, str]:
    """Split one 'key=value' segment."""
    key, sep, value = segment.partition("=")
    key = key.strip()
    value = value.strip()
    if not sep or not KEY_PATTERN.match(key):
        raise MalformedHeaderError(segment.strip(), "expected key=value")
    if not value:
        raise MalformedHeaderError(segment.strip(), f"option '{key}' has no value")
    return key, value


def parse_options(text: str) -> ChunkOptions:
    """
    Parse a comma-separated 'key=value' list into ChunkOptions.

    Used both for header option lists and for the free-form extra option
    string a front end collects.

    Raises:
        MalformedHeaderError: On bad syntax or duplicate keys
    """
    options = ChunkOptions()
    for segment in split_top_level(text):
        if not segment.strip():
            continue
        key, value = _split_option(segment)
        if key in options:
            raise MalformedHeaderError(segment.strip(), f"duplicate option '{key}'")
        options[key] = value
    return options


def parse_header_text(text: str) -> ChunkHeader:
    """
    Parse the text between the braces of a chunk header.

    Raises:
        MalformedHeaderError: On syntax errors
    """
    segments = split_top_level(text)
    first = segments[0].strip()
    if not first:
        raise MalformedHeaderError(text, "missing engine name")

    tokens = first.split(None, 1)
    engine = tokens[0]
    if not ENGINE_PATTERN.match(engine):
        raise MalformedHeaderError(engine, "invalid engine name")

    label: Optional[str] = None
    options = ChunkOptions()
    rest = list(segments[1:])

    if len(tokens) == 2:
        remainder = tokens[1].strip()
        if "=" in remainder:
            rest.insert(0, remainder)
        else:
            label = unquote_value(remainder)

    for index, segment in enumerate(rest):
        stripped = segment.strip()
        if not stripped:
            continue
        if "=" not in stripped and label is None and index == 0:
            # knitr also accepts {engine, label, ...}
            label = unquote_value(stripped)
            continue
        key, value = _split_option(segment)
        if key in options:
            raise MalformedHeaderError(stripped, f"duplicate option '{key}'")
        options[key] = value

    if "label" in options:
        if label is not None:
            raise MalformedHeaderError(options["label"], "label given twice")
        label = unquote_value(options.pop("label"))

    return ChunkHeader(fence="", engine=engine, label=label, options=options)


def parse_header(line: str) -> ChunkHeader:
    """
    Parse a full opening-fence line.

    Args:
        line: Document line such as '```{data x, format="text"}'

    Returns:
        ChunkHeader with fence, engine, label and options

    Raises:
        MalformedHeaderError: If the line is not a chunk header or is malformed
    """
    matched = match_open_fence(line)
    if matched is None:
        raise MalformedHeaderError(line.strip(), "not a chunk opening fence")
    fence, text = matched
    header = parse_header_text(text)
    return ChunkHeader(fence=fence, engine=header.engine,
                       label=header.label, options=header.options)


def serialize_header(label: Optional[str],
                     options: ChunkOptions,
                     engine: str = "data",
                     fence: str = "```") -> str:
    """
    Render an opening-fence line.

    Recognized keys come first in canonical order, then all other keys in
    their original relative order. A label that cannot stand as a bare
    token is written as a quoted label option.

    Raises:
        InvalidArgumentsError: If the engine name or an option key is invalid
    """
    if not ENGINE_PATTERN.match(engine):
        raise InvalidArgumentsError(f"invalid engine name '{engine}'")
    if len(fence) < 3 or set(fence) != {"`"}:
        raise InvalidArgumentsError(f"fence must be three or more backticks, got '{fence}'")

    options = ChunkOptions(options)
    if label is None and "label" in options:
        label = unquote_value(options.pop("label"))
    options.pop("label", None)

    head = engine
    parts: List[str] = []
    if label:
        if BARE_LABEL_PATTERN.match(label):
            head = f"{engine} {label}"
        else:
            parts.append(f"label={quote_value(label)}")

    ordered = [k for k in RECOGNIZED_KEYS if k in options]
    ordered += [k for k in options if k not in RECOGNIZED_KEYS]
    for key in ordered:
        if not KEY_PATTERN.match(key):
            raise InvalidArgumentsError(f"invalid option name '{key}'")
        parts.append(f"{key}={options[key]}")

    return fence + "{" + ", ".join([head] + parts) + "}"


# ============================================================================
# LIFECYCLE STATUS: Proposed
# DEPENDENCIES: exceptions.py, models.py
# TESTS: tests/unit/test_header.py
# ============================================================================
