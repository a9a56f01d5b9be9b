# ============================================================================
# SOURCEFILE: test_models.py
# RELPATH: datachunk/tests/unit/test_models.py
# PROJECT: Data Chunk Tool v1.0
# VERSION: 1.0.0
# LIFECYCLE: Proposed
# DESCRIPTION: Unit tests for ChunkOptions, Chunk and ChunkResult
# ============================================================================

"""Unit tests for core data models."""

import pytest

from datachunk.exceptions import InvalidArgumentsError, InvalidEncodingChoiceError
from datachunk.models import (
    Chunk,
    ChunkOptions,
    ChunkResult,
    quote_value,
    ranges_of,
    unquote_value,
)


class TestQuoting:
    """Tests for header string literals."""

    def test_quote_escapes(self):
        """Backslashes and double quotes are escaped."""
        assert quote_value('a"b\\c') == '"a\\"b\\\\c"'

    def test_unquote_double_and_single(self):
        """One level of either quote style is removed."""
        assert unquote_value('"x,y"') == "x,y"
        assert unquote_value("'x,y'") == "x,y"

    def test_unquote_escapes(self):
        """Escaped characters are unescaped."""
        assert unquote_value('"a\\"b"') == 'a"b'

    def test_unquoted_values_untouched(self):
        """Bare values are only stripped."""
        assert unquote_value("  read.csv ") == "read.csv"
        assert unquote_value("c(1, 2)") == "c(1, 2)"

    def test_quote_roundtrip(self):
        """quote then unquote gives back the string."""
        for text in ['plain', 'with "quotes"', 'back\\slash', 'a,b']:
            assert unquote_value(quote_value(text)) == text


class TestChunkOptions:
    """Tests for typed access to recognized options."""

    def test_typed_fields(self):
        """Recognized string fields are unquoted."""
        options = ChunkOptions({
            "format": '"binary"',
            "encoding": "'base64'",
            "output.var": '"df"',
            "output.file": '"data/x.csv"',
            "md5sum": '"abc"',
        })
        assert options.format == "binary"
        assert options.encoding == "base64"
        assert options.output_var == "df"
        assert options.output_file == "data/x.csv"
        assert options.md5sum == "abc"

    def test_missing_fields_are_none(self):
        """Absent options read as None."""
        options = ChunkOptions()
        assert options.format is None
        assert options.encoding is None
        assert options.echo is None

    def test_loader_function_is_raw(self):
        """loader.function is code and keeps its text."""
        options = ChunkOptions({"loader.function": "function(x) read.csv(x)"})
        assert options.loader_function == "function(x) read.csv(x)"

    @pytest.mark.parametrize("raw,expected", [
        ("TRUE", True), ("T", True), ("true", True),
        ("FALSE", False), ("F", False), ("false", False),
        ("interactive()", None),
    ])
    def test_echo_literals(self, raw, expected):
        """echo understands logical literals only."""
        assert ChunkOptions({"echo": raw}).echo is expected

    def test_value_with_default(self):
        """value() unquotes and falls back to the default."""
        options = ChunkOptions({"key2": '"x,y"'})
        assert options.value("key2") == "x,y"
        assert options.value("missing", "d") == "d"

    def test_validate_format(self):
        """Unknown formats are argument errors."""
        with pytest.raises(InvalidArgumentsError):
            ChunkOptions({"format": '"image"'}).validate()

    def test_validate_encoding(self):
        """Unknown encodings are encoding errors."""
        with pytest.raises(InvalidEncodingChoiceError):
            ChunkOptions({"encoding": '"hex"'}).validate()

    def test_validate_passes(self):
        """Valid options do not raise."""
        ChunkOptions({"format": '"text"', "encoding": '"asis"'}).validate()

    def test_copy_is_independent(self):
        """copy() returns a separate ChunkOptions."""
        options = ChunkOptions({"a": "1"})
        clone = options.copy()
        clone["b"] = "2"
        assert isinstance(clone, ChunkOptions)
        assert "b" not in options


class TestChunk:
    """Tests for Chunk."""

    def _chunk(self, start=4, end=9):
        return Chunk(
            label="cars",
            engine="data",
            options=ChunkOptions({"format": '"text"'}),
            body_lines=("a", "b"),
            start=start,
            end=end,
        )

    def test_range_properties(self):
        """Range, length and 1-based line number."""
        chunk = self._chunk()
        assert chunk.range == (4, 9)
        assert chunk.line_count == 5
        assert chunk.line_number == 5

    def test_to_row(self):
        """Listing row exposes the common options."""
        row = self._chunk().to_row()
        assert row["label"] == "cars"
        assert row["format"] == "text"
        assert row["encoding"] == ""

    def test_ranges_of(self):
        """ranges_of keeps the given order."""
        chunks = [self._chunk(10, 12), self._chunk(1, 3)]
        assert ranges_of(chunks) == [(10, 12), (1, 3)]

    def test_frozen(self):
        """Chunks are immutable."""
        chunk = self._chunk()
        with pytest.raises(AttributeError):
            chunk.start = 0


class TestChunkResult:
    """Tests for ChunkResult."""

    def test_ok_and_text(self):
        """Successful result decodes as text."""
        chunk = Chunk("x", "data", ChunkOptions(), (), 0, 2)
        result = ChunkResult(chunk=chunk, data="é\n".encode("utf-8"))
        assert result.ok
        assert result.as_text() == "é\n"

    def test_error(self):
        """Result with an error is not ok."""
        chunk = Chunk("x", "data", ChunkOptions(), (), 0, 2)
        result = ChunkResult(chunk=chunk, error=InvalidArgumentsError("bad"))
        assert not result.ok
        assert result.as_text() is None


# ============================================================================
# LIFECYCLE STATUS: Proposed
# DEPENDENCIES: pytest, datachunk.models
# TESTS: N/A (test file)
# ============================================================================
