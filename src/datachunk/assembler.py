# ============================================================================
# SOURCEFILE: assembler.py
# RELPATH: datachunk/src/datachunk/assembler.py
# PROJECT: Data Chunk Tool v1.0
# VERSION: 1.0.0
# LIFECYCLE: Proposed
# DESCRIPTION: Builds complete data chunk text from a payload and parameters
# ============================================================================

"""
Chunk Assembler.

Produces the full text of a data chunk (opening fence with header, body
lines, closing fence) from already-read payload bytes and already-resolved
parameters. UI-level defaulting lives in datachunk.defaults; this module
only fills in format/encoding from the binary sniffer when they are absent.

Example output:
    ```{data mydata, format="binary", encoding="base64", output.var="df", md5sum="..."}
    AAEC...
    ```
"""

import logging
import re
from typing import List, Optional, Sequence

from datachunk import codec
from datachunk.exceptions import InvalidArgumentsError, InvalidEncodingChoiceError
from datachunk.header import parse_options, serialize_header
from datachunk.models import FORMATS, ENCODINGS, ChunkOptions, quote_value
from datachunk.scanner import DEFAULT_ENGINE
from datachunk.sniffer import is_binary

logger = logging.getLogger(__name__)

_LEADING_BACKTICKS = re.compile(r"^[ \t]*(`+)")


def fence_for(body_lines: Sequence[str]) -> str:
    """
    Shortest fence (>= 3 backticks) that no body line can close or nest.
    """
    longest = 0
    for line in body_lines:
        m = _LEADING_BACKTICKS.match(line)
        if m:
            longest = max(longest, len(m.group(1)))
    return "`" * max(3, longest + 1)


def resolve_format_encoding(payload: bytes,
                            format: Optional[str] = None,
                            encoding: Optional[str] = None):
    """
    Effective (format, encoding) pair.

    Explicit values win. A missing encoding follows the format (binary ->
    base64, text -> asis); when both are missing the sniffer decides. A
    defaulted encoding is never asis for bytes asis cannot hold (invalid
    UTF-8 such as Latin-1 text), so defaults always assemble.

    Raises:
        InvalidArgumentsError: Unknown format
        InvalidEncodingChoiceError: Unknown encoding
    """
    if format is not None and format not in FORMATS:
        raise InvalidArgumentsError(f"format must be one of {', '.join(FORMATS)}, got '{format}'")
    if encoding is not None and encoding not in ENCODINGS:
        raise InvalidEncodingChoiceError(encoding, f"supported encodings are {', '.join(ENCODINGS)}")

    if format is None:
        if encoding is not None:
            format = "binary" if encoding == "base64" else "text"
        elif is_binary(payload) or not codec.asis_encodable(payload):
            format = "binary"
        else:
            format = "text"
    if encoding is None:
        if format == "binary" or not codec.asis_encodable(payload):
            encoding = "base64"
        else:
            encoding = "asis"
    return format, encoding


def assemble(payload: bytes,
             label: Optional[str] = None,
             format: Optional[str] = None,
             encoding: Optional[str] = None,
             extra_options: Optional[str] = None,
             output_var: Optional[str] = None,
             output_file: Optional[str] = None,
             loader_function: Optional[str] = None,
             md5: bool = False,
             echo: bool = False,
             eval_expr: Optional[str] = None,
             engine: str = DEFAULT_ENGINE,
             line_width: int = codec.BASE64_LINE_WIDTH) -> List[str]:
    """
    Assemble a data chunk as a list of lines.

    Args:
        payload: Original file bytes
        label: Chunk label, or None for an unlabelled chunk
        format: 'text' or 'binary'; None to default
        encoding: 'asis' or 'base64'; None to default
        extra_options: Additional 'key=value, ...' options passed through verbatim
        output_var: Variable the host engine loads the data into
        output_file: File path the host engine writes the data to
        loader_function: Function applied when loading into output_var (code)
        md5: Store an md5sum of the payload
        echo: Value of the echo flag
        eval_expr: Raw eval expression, e.g. '!file.exists("x.csv")'
        engine: Engine name written in the header
        line_width: base64 wrap width

    Returns:
        Lines of the chunk: header line, body lines, closing fence

    Raises:
        InvalidArgumentsError: Incoherent parameters (e.g. loader without variable)
        InvalidEncodingChoiceError: Encoding cannot represent the payload
        MalformedHeaderError: extra_options is not a valid option list
    """
    if loader_function and not output_var:
        raise InvalidArgumentsError("loader.function requires an output variable name")

    format, encoding = resolve_format_encoding(payload, format, encoding)

    if md5 and encoding == "asis" and not codec.asis_round_trips(payload):
        raise InvalidEncodingChoiceError(
            "asis",
            "text does not round-trip exactly (no final newline or non-LF line endings); "
            "use base64 or disable the md5sum check",
            label,
        )

    try:
        body = codec.encode(payload, encoding, line_width)
    except InvalidEncodingChoiceError as e:
        raise InvalidEncodingChoiceError(e.encoding, e.reason, label) from e

    options = ChunkOptions()
    options["format"] = quote_value(format)
    options["encoding"] = quote_value(encoding)
    if output_var:
        options["output.var"] = quote_value(output_var)
    if output_file:
        options["output.file"] = quote_value(output_file)
    if output_var and loader_function:
        options["loader.function"] = loader_function
    if md5:
        options["md5sum"] = quote_value(codec.checksum(payload))
    options["echo"] = "TRUE" if echo else "FALSE"
    if eval_expr:
        options["eval"] = eval_expr

    if extra_options and extra_options.strip():
        extra = parse_options(extra_options)
        clashes = [key for key in extra if key in options or key == "label"]
        if clashes:
            raise InvalidArgumentsError(
                f"extra options repeat assembled options: {', '.join(clashes)}"
            )
        options.update(extra)

    fence = fence_for(body)
    header = serialize_header(label or None, options, engine=engine, fence=fence)

    logger.debug("Assembled chunk '%s': %s/%s, %d body lines",
                 label or "", format, encoding, len(body))
    return [header] + body + [fence]


# ============================================================================
# LIFECYCLE STATUS: Proposed
# DEPENDENCIES: codec.py, header.py, models.py, scanner.py, sniffer.py
# TESTS: tests/unit/test_assembler.py
# ============================================================================
