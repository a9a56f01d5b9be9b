# ============================================================================
# SOURCEFILE: test_header.py
# RELPATH: datachunk/tests/unit/test_header.py
# PROJECT: Data Chunk Tool v1.0
# VERSION: 1.0.0
# LIFECYCLE: Proposed
# DESCRIPTION: Unit tests for chunk header parsing and serialization
# ============================================================================

"""Unit tests for header parsing and serialization."""

import pytest

from datachunk.exceptions import InvalidArgumentsError, MalformedHeaderError
from datachunk.header import (
    is_close_fence,
    match_open_fence,
    parse_header,
    parse_header_text,
    parse_options,
    serialize_header,
    split_top_level,
)
from datachunk.models import ChunkOptions


class TestFenceMatching:
    """Tests for opening and closing fence recognition."""

    def test_open_fence(self):
        """Braced fence yields fence and header text."""
        assert match_open_fence('```{data x, a=1}') == ("```", "data x, a=1")

    def test_long_fence(self):
        """Longer backtick runs are kept."""
        assert match_open_fence("````{data}") == ("````", "data")

    def test_not_braced(self):
        """Plain code fences are not chunk openers."""
        assert match_open_fence("```python") is None
        assert match_open_fence("```") is None

    def test_close_fence(self):
        """Closing fence must be at least as long as the opener."""
        assert is_close_fence("```", "```")
        assert is_close_fence("````  ", "```")
        assert not is_close_fence("```", "````")
        assert not is_close_fence("``` x", "```")


class TestSplitTopLevel:
    """Tests for comma splitting."""

    def test_quoted_comma(self):
        """Commas inside quotes do not split."""
        assert split_top_level('key1=1, key2="x,y"') == ["key1=1", ' key2="x,y"']

    def test_bracketed_comma(self):
        """Commas inside calls do not split."""
        assert split_top_level("a=c(1, 2), b=f(x, y)") == ["a=c(1, 2)", " b=f(x, y)"]

    def test_escaped_quote(self):
        """Escaped quotes do not end the string."""
        assert split_top_level(r'a="x\",y", b=2') == [r'a="x\",y"', " b=2"]

    def test_unterminated_string(self):
        """Unclosed quotes are malformed."""
        with pytest.raises(MalformedHeaderError):
            split_top_level('a="x, b=2')

    @pytest.mark.parametrize("text", ["a=c(1, 2", "a=1)", "a=[1}"])
    def test_unbalanced_brackets(self, text):
        """Unbalanced brackets are malformed."""
        with pytest.raises(MalformedHeaderError):
            split_top_level(text)


class TestParseOptions:
    """Tests for option list parsing."""

    def test_quoted_comma_value(self):
        """key2="x,y" parses as the literal x,y."""
        options = parse_options('key1=1, key2="x,y"')
        assert options["key1"] == "1"
        assert options.value("key2") == "x,y"

    def test_raw_values_kept(self):
        """Values are stored verbatim."""
        options = parse_options('eval=!file.exists("a.csv"), n = 10')
        assert options["eval"] == '!file.exists("a.csv")'
        assert options["n"] == "10"

    def test_empty_segments_ignored(self):
        """Trailing commas are tolerated."""
        assert parse_options("a=1,") == {"a": "1"}

    def test_duplicate_key(self):
        """Duplicate keys are malformed."""
        with pytest.raises(MalformedHeaderError):
            parse_options("a=1, a=2")

    @pytest.mark.parametrize("text", ["a", "=1", "a=", "1a=2"])
    def test_bad_pairs(self, text):
        """Segments that are not key=value are malformed."""
        with pytest.raises(MalformedHeaderError):
            parse_options(text)


class TestParseHeader:
    """Tests for full header parsing."""

    def test_engine_label_options(self):
        """Engine, bare label and options."""
        header = parse_header('```{data mydata, format="binary", encoding="base64"}')
        assert header.fence == "```"
        assert header.engine == "data"
        assert header.label == "mydata"
        assert header.options.format == "binary"
        assert header.options.encoding == "base64"

    def test_no_label(self):
        """Header with engine only."""
        header = parse_header("```{data}")
        assert header.label is None
        assert header.options == {}

    def test_no_label_with_options(self):
        """Option directly after the engine is not a label."""
        header = parse_header_text('data format="text"')
        assert header.label is None
        assert header.options.format == "text"

    def test_label_after_comma(self):
        """{engine, label, ...} form is accepted."""
        header = parse_header_text("data, mylabel, a=1")
        assert header.label == "mylabel"
        assert header.options == {"a": "1"}

    def test_label_option(self):
        """label="..." is folded into the label."""
        header = parse_header_text('data, label="my data", a=1')
        assert header.label == "my data"
        assert "label" not in header.options

    def test_label_given_twice(self):
        """Bare label and label option together are malformed."""
        with pytest.raises(MalformedHeaderError):
            parse_header_text('data x, label="y"')

    def test_unknown_options_preserved(self):
        """Unrecognized options keep their raw text."""
        header = parse_header_text("data x, fig.width=7, custom='v'")
        assert header.options["fig.width"] == "7"
        assert header.options["custom"] == "'v'"

    @pytest.mark.parametrize("line", ["```{}", "```{9x}", '```{data x, a="1}'])
    def test_malformed(self, line):
        """Bad headers raise MalformedHeaderError."""
        with pytest.raises(MalformedHeaderError):
            parse_header(line)

    def test_not_a_fence(self):
        """Non-fence lines are rejected."""
        with pytest.raises(MalformedHeaderError):
            parse_header("just text")


class TestSerializeHeader:
    """Tests for header serialization."""

    def test_canonical_order(self):
        """Recognized keys first in canonical order, then the rest."""
        options = ChunkOptions()
        options["custom"] = "1"
        options["md5sum"] = '"abc"'
        options["format"] = '"text"'
        options["output.var"] = '"df"'
        line = serialize_header("x", options)
        assert line == '```{data x, format="text", output.var="df", md5sum="abc", custom=1}'

    def test_no_label(self):
        """Unlabelled header has just the engine."""
        assert serialize_header(None, ChunkOptions()) == "```{data}"

    def test_label_needing_quotes(self):
        """Labels with spaces become a label option."""
        line = serialize_header("my data", ChunkOptions())
        assert line == '```{data, label="my data"}'
        assert parse_header(line).label == "my data"

    def test_fence_and_engine(self):
        """Custom fence and engine are used."""
        assert serialize_header("x", ChunkOptions(), engine="blob", fence="````") == "````{blob x}"

    def test_parse_serialize_parse(self):
        """Parsing a serialized header gives the same header."""
        original = parse_header('```{data x, key1=1, key2="x,y", format="text"}')
        again = parse_header(serialize_header(original.label, original.options))
        assert again.label == original.label
        assert dict(again.options) == dict(original.options)

    def test_invalid_engine(self):
        """Engine names are checked."""
        with pytest.raises(InvalidArgumentsError):
            serialize_header("x", ChunkOptions(), engine="bad engine")

    def test_invalid_fence(self):
        """Fences must be three or more backticks."""
        with pytest.raises(InvalidArgumentsError):
            serialize_header("x", ChunkOptions(), fence="``")

    def test_invalid_key(self):
        """Option names are checked."""
        with pytest.raises(InvalidArgumentsError):
            serialize_header("x", ChunkOptions({"bad key": "1"}))


# ============================================================================
# LIFECYCLE STATUS: Proposed
# DEPENDENCIES: pytest, datachunk.header
# TESTS: N/A (test file)
# ============================================================================
