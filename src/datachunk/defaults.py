# ============================================================================
# SOURCEFILE: defaults.py
# RELPATH: datachunk/src/datachunk/defaults.py
# PROJECT: Data Chunk Tool v1.0
# VERSION: 1.0.0
# LIFECYCLE: Proposed
# DESCRIPTION: Front-end parameter defaulting and validation for new chunks
# ============================================================================

"""
Front-end defaults.

Any front end that collects chunk parameters from a user (the CLI here, a
dialog elsewhere) applies the same defaulting before calling the
assembler, which itself only accepts resolved values:

- binary payloads default to format=binary, encoding=base64; text payloads
  to format=text, encoding=asis
- an output file with no eval expression gets a guard that skips the chunk
  when the file already exists
- a loader function is guessed from the data file's extension
"""

import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Dict, List, Optional

from datachunk import codec
from datachunk.assembler import assemble
from datachunk.exceptions import InvalidArgumentsError
from datachunk.models import quote_value
from datachunk.scanner import DEFAULT_ENGINE
from datachunk.sniffer import DEFAULT_BINARY_THRESHOLD, DEFAULT_SAMPLE_BYTES, is_binary

logger = logging.getLogger(__name__)

DEFAULT_LOADERS = {"csv": "read.csv", "rds": "readRDS"}


@dataclass
class ChunkRequest:
    """Parameters collected from a user for one new data chunk."""
    source_name: str = ""
    label: Optional[str] = None
    format: Optional[str] = None
    encoding: Optional[str] = None
    extra_options: Optional[str] = None
    output_var: Optional[str] = None
    output_file: Optional[str] = None
    loader_function: Optional[str] = None
    md5: bool = True
    echo: bool = False
    eval_expr: Optional[str] = None


def guess_loader_function(source_name: str,
                          loaders: Optional[Dict[str, str]] = None) -> Optional[str]:
    """Loader function for a file extension, e.g. 'data.csv' -> 'read.csv'."""
    table = DEFAULT_LOADERS if loaders is None else loaders
    ext = Path(source_name).suffix.lower().lstrip(".")
    return table.get(ext)


def eval_guard(output_file: str) -> str:
    """Eval expression that skips a chunk whose output file already exists."""
    return f"!file.exists({quote_value(output_file)})"


def validate_request(request: ChunkRequest) -> None:
    """
    Reject parameter combinations a front end must not submit.

    Raises:
        InvalidArgumentsError: No output target, or loader without variable
    """
    problems: List[str] = []
    if not request.output_var and not request.output_file:
        problems.append("at least one of output variable or output file must be given")
    if request.loader_function and not request.output_var:
        problems.append("loader function only has value if output variable name specified")
    if problems:
        raise InvalidArgumentsError("; ".join(problems))


def resolve_request_defaults(request: ChunkRequest,
                             payload: bytes,
                             loaders: Optional[Dict[str, str]] = None,
                             sample_bytes: int = DEFAULT_SAMPLE_BYTES,
                             threshold: float = DEFAULT_BINARY_THRESHOLD) -> ChunkRequest:
    """
    Fill in the defaults a front end applies before assembling.

    Explicit values in the request always win.

    Returns:
        A new ChunkRequest with format, encoding, eval and loader resolved
    """
    binary = is_binary(payload, sample_bytes=sample_bytes, threshold=threshold)
    encodable = codec.asis_encodable(payload)

    fmt = request.format or ("binary" if binary or not encodable else "text")
    enc = request.encoding
    if enc is None:
        enc = "base64" if fmt == "binary" else "asis"
        if enc == "asis" and not encodable:
            logger.info("Payload '%s' is not UTF-8 text; using base64", request.source_name)
            enc = "base64"
        elif enc == "asis" and request.md5 and not codec.asis_round_trips(payload):
            # asis would alter the bytes and the md5sum could never verify
            logger.info("Text payload '%s' does not round-trip as asis; using base64",
                        request.source_name)
            enc = "base64"

    eval_expr = request.eval_expr
    if request.output_file and not eval_expr:
        eval_expr = eval_guard(request.output_file)

    loader = request.loader_function
    if request.output_var and not loader:
        loader = guess_loader_function(request.source_name, loaders)

    return replace(request, format=fmt, encoding=enc,
                   eval_expr=eval_expr, loader_function=loader)


def build_chunk(request: ChunkRequest,
                payload: bytes,
                engine: str = DEFAULT_ENGINE,
                line_width: int = codec.BASE64_LINE_WIDTH) -> List[str]:
    """Validate a resolved request and hand it to the assembler unchanged."""
    validate_request(request)
    return assemble(
        payload,
        label=request.label,
        format=request.format,
        encoding=request.encoding,
        extra_options=request.extra_options,
        output_var=request.output_var,
        output_file=request.output_file,
        loader_function=request.loader_function,
        md5=request.md5,
        echo=request.echo,
        eval_expr=request.eval_expr,
        engine=engine,
        line_width=line_width,
    )


# ============================================================================
# LIFECYCLE STATUS: Proposed
# DEPENDENCIES: assembler.py, codec.py, sniffer.py, models.py
# TESTS: tests/unit/test_defaults.py
# ============================================================================
