"""Tests for the line tokenizer."""

import pytest

from attribute_parser.shared import MarkupSyntaxError, TokenizerConfig
from attribute_parser.tokenization import (
    LineToken,
    LineTokenizer,
    ScannerState,
    TokenKind,
)


@pytest.fixture
def tokenizer():
    return LineTokenizer()


class TestOpeningTags:
    """Test classification of opening tag lines."""

    def test_tag_without_attributes(self, tokenizer):
        """Test a bare opening tag."""
        token = tokenizer.tokenize_line("<a>", 1)

        assert token.kind == TokenKind.OPEN
        assert token.is_opening
        assert token.name == "a"
        assert token.attributes == ()
        assert token.line_number == 1

    def test_single_attribute(self, tokenizer):
        """Test an opening tag with one attribute."""
        token = tokenizer.tokenize_line('<tag1 value="value">', 1)

        assert token.name == "tag1"
        assert token.attributes == (("value", "value"),)

    def test_multiple_attributes_in_order(self, tokenizer):
        """Test attribute pairs are extracted left to right."""
        token = tokenizer.tokenize_line('<tag1 value="HelloWorld" name="Name1">', 3)

        assert token.attributes == (("value", "HelloWorld"), ("name", "Name1"))
        assert token.line_number == 3

    def test_whitespace_around_equals(self, tokenizer):
        """Test optional whitespace around '=' and before '>'."""
        token = tokenizer.tokenize_line('<tag   x  =  "1"   y= "2"  >', 1)

        assert token.attributes == (("x", "1"), ("y", "2"))

    def test_value_whitespace_is_trimmed(self, tokenizer):
        """Test surrounding whitespace inside quotes is trimmed."""
        token = tokenizer.tokenize_line('<tag x="  padded value  ">', 1)

        assert token.attribute_map == {"x": "padded value"}

    def test_value_may_contain_special_characters(self, tokenizer):
        """Test values keep '>', '=', '.', '~' and spaces."""
        token = tokenizer.tokenize_line('<tag expr="a.b~c = d > e">', 1)

        assert token.attribute_map["expr"] == "a.b~c = d > e"

    def test_duplicate_keys_last_write_wins(self, tokenizer):
        """Test repeated keys keep every pair but fold to the last value."""
        token = tokenizer.tokenize_line('<tag k="first" k="second">', 1)

        assert token.attributes == (("k", "first"), ("k", "second"))
        assert token.attribute_map == {"k": "second"}
        assert token.duplicate_keys == ["k"]

    def test_tab_separators(self, tokenizer):
        """Test tabs count as whitespace."""
        token = tokenizer.tokenize_line('<tag\tx="1"\ty="2">', 1)

        assert token.attribute_map == {"x": "1", "y": "2"}

    def test_empty_value_allowed_by_default(self, tokenizer):
        """Test key="" is accepted in the default configuration."""
        token = tokenizer.tokenize_line('<tag x="">', 1)

        assert token.attribute_map == {"x": ""}


class TestClosingTags:
    """Test classification of closing tag lines."""

    def test_closing_tag(self, tokenizer):
        """Test a well-formed closing tag."""
        token = tokenizer.tokenize_line("</tag1>", 2)

        assert token.kind == TokenKind.CLOSE
        assert token.is_closing
        assert token.name == "tag1"
        assert token.attributes == ()
        assert token.line_number == 2

    def test_names_may_contain_angle_bracket(self, tokenizer):
        """Test only the final > ends a tag, so earlier ones belong to the name."""
        opening = tokenizer.tokenize_line("<a>>", 1)
        closing = tokenizer.tokenize_line("</a>>", 2)

        assert opening.kind == TokenKind.OPEN
        assert opening.name == "a>"
        assert closing.kind == TokenKind.CLOSE
        assert closing.name == "a>"

    @pytest.mark.parametrize("line", ["</>", "</ a>", "</a >", '</a x="1">'])
    def test_invalid_closing_tags(self, tokenizer, line):
        """Test closing tags with empty names, whitespace or attributes."""
        with pytest.raises(MarkupSyntaxError):
            tokenizer.tokenize_line(line, 1)


class TestInvalidLines:
    """Test rejection of lines that match neither tag form."""

    @pytest.mark.parametrize("line", [
        "",
        "tag",
        "<tag",
        "<>",
        "< tag>",
        "<tag value=novalue>",
        '<tag value="unterminated>',
        '<tag x="1"y="2">',
        '<tag ="1">',
        '<tag x>',
        '<tag x "1">',
        '<tag x="1">trailing',
        "<a>b c",
    ])
    def test_syntax_errors(self, tokenizer, line):
        """Test malformed lines raise MarkupSyntaxError."""
        with pytest.raises(MarkupSyntaxError):
            tokenizer.tokenize_line(line, 1)

    def test_error_reports_line_number(self, tokenizer):
        """Test the error carries the offending 1-based line number."""
        with pytest.raises(MarkupSyntaxError) as exc_info:
            tokenizer.tokenize_line("<tag value=novalue>", 4)

        error = exc_info.value
        assert error.line_number == 4
        assert error.line == "<tag value=novalue>"
        assert error.message == "Syntax error"
        assert "quoted" in error.detail
        assert error.format_diagnostic() == "Line 4\n\tSyntax error"

    def test_tokenizer_recovers_for_next_line(self, tokenizer):
        """Test scanner state is reset after a failed line."""
        with pytest.raises(MarkupSyntaxError):
            tokenizer.tokenize_line('<a x="1', 1)

        token = tokenizer.tokenize_line("<b>", 2)
        assert token.name == "b"
        assert tokenizer.state == ScannerState.DONE


class TestTokenizerConfig:
    """Test configurable tokenizer behavior."""

    def test_surrounding_whitespace_stripped_by_default(self, tokenizer):
        """Test leading/trailing whitespace and CR are ignored."""
        token = tokenizer.tokenize_line('   <a x="1">  \r', 1)

        assert token.name == "a"
        assert token.raw == '   <a x="1">  \r'

    def test_strip_disabled(self):
        """Test leading whitespace is an error when stripping is disabled."""
        tokenizer = LineTokenizer(TokenizerConfig(strip_lines=False))

        with pytest.raises(MarkupSyntaxError):
            tokenizer.tokenize_line("  <a>", 1)

    def test_empty_values_rejected(self):
        """Test allow_empty_values=False rejects key=""."""
        tokenizer = LineTokenizer(TokenizerConfig(allow_empty_values=False))

        with pytest.raises(MarkupSyntaxError, match="Syntax error"):
            tokenizer.tokenize_line('<a x="  ">', 1)

    def test_max_line_length(self):
        """Test overly long lines are rejected."""
        tokenizer = LineTokenizer(TokenizerConfig(max_line_length=10))

        assert tokenizer.tokenize_line("<short>", 1).name == "short"
        with pytest.raises(MarkupSyntaxError) as exc_info:
            tokenizer.tokenize_line('<long x="123456">', 2)
        assert "exceeds" in exc_info.value.detail


class TestTokenStream:
    """Test lazy tokenization of many lines."""

    def test_tokenize_assigns_line_numbers(self, tokenizer):
        """Test line numbers follow input order."""
        tokens = list(tokenizer.tokenize(["<a>", "<b>", "</b>", "</a>"]))

        assert [t.line_number for t in tokens] == [1, 2, 3, 4]
        assert [t.kind for t in tokens] == [
            TokenKind.OPEN, TokenKind.OPEN, TokenKind.CLOSE, TokenKind.CLOSE
        ]

    def test_tokenize_stops_at_first_invalid_line(self, tokenizer):
        """Test iteration raises at the first bad line."""
        stream = tokenizer.tokenize(["<a>", "oops", "</a>"])

        assert next(stream).name == "a"
        with pytest.raises(MarkupSyntaxError) as exc_info:
            next(stream)
        assert exc_info.value.line_number == 2


class TestLineToken:
    """Test LineToken validation."""

    def test_empty_name_rejected(self):
        """Test tokens require a name."""
        with pytest.raises(ValueError, match="Tag name cannot be empty"):
            LineToken(TokenKind.OPEN, "", (), 1, "<>")

    def test_closing_token_without_attributes(self):
        """Test closing tokens cannot carry attributes."""
        with pytest.raises(ValueError, match="Closing tags cannot carry attributes"):
            LineToken(TokenKind.CLOSE, "a", (("x", "1"),), 1, "</a>")
