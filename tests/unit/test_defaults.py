# ============================================================================
# SOURCEFILE: test_defaults.py
# RELPATH: datachunk/tests/unit/test_defaults.py
# PROJECT: Data Chunk Tool v1.0
# VERSION: 1.0.0
# LIFECYCLE: Proposed
# DESCRIPTION: Unit tests for front-end parameter defaulting
# ============================================================================

"""Unit tests for ChunkRequest defaulting and validation."""

import pytest

from datachunk.defaults import (
    ChunkRequest,
    build_chunk,
    eval_guard,
    guess_loader_function,
    resolve_request_defaults,
    validate_request,
)
from datachunk.exceptions import InvalidArgumentsError
from datachunk.header import parse_header
from datachunk.scanner import decode_chunk, list_chunks


class TestGuessLoader:
    """Tests for guess_loader_function()."""

    @pytest.mark.parametrize("name,expected", [
        ("cars.csv", "read.csv"),
        ("MODEL.RDS", "readRDS"),
        ("image.png", None),
        ("noext", None),
    ])
    def test_default_table(self, name, expected):
        """Known extensions map to loaders, case-insensitively."""
        assert guess_loader_function(name) == expected

    def test_custom_table(self):
        """A configured table replaces the defaults."""
        assert guess_loader_function("x.tsv", {"tsv": "read.delim"}) == "read.delim"
        assert guess_loader_function("x.csv", {"tsv": "read.delim"}) is None


class TestEvalGuard:
    """Tests for eval_guard()."""

    def test_guard_expression(self):
        """Output file guard skips the chunk when the file exists."""
        assert eval_guard("data/x.csv") == '!file.exists("data/x.csv")'


class TestValidateRequest:
    """Tests for validate_request()."""

    def test_needs_output(self):
        """Either output variable or output file is required."""
        with pytest.raises(InvalidArgumentsError):
            validate_request(ChunkRequest(source_name="x.csv"))

    def test_loader_needs_variable(self):
        """Loader with only an output file is rejected."""
        with pytest.raises(InvalidArgumentsError) as exc_info:
            validate_request(ChunkRequest(output_file="x.csv", loader_function="read.csv"))
        assert "loader function" in str(exc_info.value)

    def test_both_problems_reported(self):
        """All problems are listed together."""
        with pytest.raises(InvalidArgumentsError) as exc_info:
            validate_request(ChunkRequest(loader_function="read.csv"))
        assert ";" in exc_info.value.reason

    def test_valid(self):
        """Output variable alone is enough."""
        validate_request(ChunkRequest(output_var="df"))


class TestResolveRequestDefaults:
    """Tests for resolve_request_defaults()."""

    def test_binary_payload(self, binary_payload):
        """Binary payloads become binary/base64."""
        request = resolve_request_defaults(ChunkRequest(source_name="a.png", output_var="img"),
                                           binary_payload)
        assert (request.format, request.encoding) == ("binary", "base64")
        assert request.loader_function is None

    def test_text_payload(self, text_payload):
        """Text payloads become text/asis with a guessed loader."""
        request = resolve_request_defaults(ChunkRequest(source_name="cars.csv", output_var="cars"),
                                           text_payload)
        assert (request.format, request.encoding) == ("text", "asis")
        assert request.loader_function == "read.csv"

    def test_lossy_text_switches_to_base64(self):
        """Text that asis would alter falls back to base64 under md5."""
        request = resolve_request_defaults(ChunkRequest(output_var="x", md5=True), b"a\r\nb\r\n")
        assert (request.format, request.encoding) == ("text", "base64")

    def test_lossy_text_without_md5(self):
        """Without md5 the asis default stands."""
        request = resolve_request_defaults(ChunkRequest(output_var="x", md5=False), b"abc")
        assert request.encoding == "asis"

    def test_non_utf8_text_switches_to_base64(self):
        """Latin-1 text defaults to base64 whether or not md5 is on."""
        payload = "café au lait, crème brûlée\n".encode("latin-1")
        for md5 in (True, False):
            request = resolve_request_defaults(ChunkRequest(output_var="x", md5=md5), payload)
            assert (request.format, request.encoding) == ("binary", "base64")
            lines = build_chunk(request, payload)
            assert decode_chunk(list_chunks(lines)[0]) == payload

    def test_output_file_guard(self, text_payload):
        """Output file gets an eval guard unless one is given."""
        request = resolve_request_defaults(ChunkRequest(output_file="out/cars.csv"), text_payload)
        assert request.eval_expr == '!file.exists("out/cars.csv")'

        request = resolve_request_defaults(
            ChunkRequest(output_file="out/cars.csv", eval_expr="TRUE"), text_payload
        )
        assert request.eval_expr == "TRUE"

    def test_explicit_values_win(self, text_payload):
        """User choices are never overridden."""
        original = ChunkRequest(source_name="cars.csv", output_var="cars",
                                format="binary", encoding="base64", loader_function="readr::read_csv")
        request = resolve_request_defaults(original, text_payload)
        assert (request.format, request.encoding) == ("binary", "base64")
        assert request.loader_function == "readr::read_csv"

    def test_request_not_mutated(self, text_payload):
        """A new request is returned."""
        original = ChunkRequest(source_name="cars.csv", output_var="cars")
        resolve_request_defaults(original, text_payload)
        assert original.format is None


class TestBuildChunk:
    """Tests for build_chunk()."""

    def test_end_to_end(self, text_payload):
        """A resolved request assembles into a verifiable chunk."""
        request = resolve_request_defaults(
            ChunkRequest(source_name="cars.csv", label="cars", output_var="cars",
                         output_file="cars.csv"),
            text_payload,
        )
        lines = build_chunk(request, text_payload)
        header = parse_header(lines[0])
        assert header.options.loader_function == "read.csv"
        assert header.options["eval"] == '!file.exists("cars.csv")'
        assert header.options.md5sum

        chunk = list_chunks(lines)[0]
        assert decode_chunk(chunk) == text_payload

    def test_invalid_request(self, text_payload):
        """Validation runs before assembly."""
        with pytest.raises(InvalidArgumentsError):
            build_chunk(ChunkRequest(), text_payload)


# ============================================================================
# LIFECYCLE STATUS: Proposed
# DEPENDENCIES: pytest, datachunk.defaults
# TESTS: N/A (test file)
# ============================================================================
