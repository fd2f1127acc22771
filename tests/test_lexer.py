# =============================================================================
# test_lexer.py - Lexer Unit Tests
# =============================================================================
# Tests for the stack machine assembler lexer/tokenizer.
#
# Test coverage includes:
#   - Identifiers, numbers (decimal and 0x hex), strings, directives
#   - Punctuation tokens
#   - Whitespace and ';' comments
#   - Byte offsets, lines and columns
#   - Error conditions
# =============================================================================

import pytest
from sembler.assembler.lexer import Lexer, TokenType, source_context
from sembler.errors import ParseError


# =============================================================================
# Helper Function
# =============================================================================

def tokenize(source) -> list:
    """Tokenize and drop the trailing EOF token."""
    lexer = Lexer(source, "<test>")
    return [t for t in lexer.tokenize() if t.type != TokenType.EOF]


# =============================================================================
# Basic Token Recognition Tests
# =============================================================================

class TestBasicTokens:
    """Test basic token recognition for simple inputs."""

    def test_empty_input(self):
        """Empty input produces no tokens."""
        assert tokenize("") == []

    def test_whitespace_only(self):
        """Spaces, tabs, CR and LF are all skipped."""
        assert tokenize(" \t\r\n  \n") == []

    def test_identifier(self):
        tokens = tokenize("main")
        assert len(tokens) == 1
        assert tokens[0].type == TokenType.IDENTIFIER
        assert tokens[0].value == "main"

    def test_identifier_with_underscore_and_digits(self):
        tokens = tokenize("loop_2")
        assert tokens[0].type == TokenType.IDENTIFIER
        assert tokens[0].value == "loop_2"

    def test_identifier_starting_with_digit(self):
        """A digit-led run that is not a number is an identifier."""
        tokens = tokenize("2nd")
        assert tokens[0].type == TokenType.IDENTIFIER
        assert tokens[0].value == "2nd"

    def test_punctuation(self):
        tokens = tokenize("{ } : -")
        assert [t.type for t in tokens] == [
            TokenType.LBRACE,
            TokenType.RBRACE,
            TokenType.COLON,
            TokenType.MINUS,
        ]

    def test_label_and_colon_without_space(self):
        tokens = tokenize("main:RET")
        assert [t.type for t in tokens] == [
            TokenType.IDENTIFIER,
            TokenType.COLON,
            TokenType.IDENTIFIER,
        ]

    def test_bytes_input(self):
        """The lexer accepts raw bytes as well as str."""
        tokens = tokenize(b"PSH")
        assert tokens[0].value == "PSH"

    def test_eof_token_always_last(self):
        tokens = list(Lexer("RET").tokenize())
        assert tokens[-1].type == TokenType.EOF


# =============================================================================
# Number Tests
# =============================================================================

class TestNumbers:
    """Test decimal and hexadecimal literals."""

    def test_decimal(self):
        tokens = tokenize("1234")
        assert tokens[0].type == TokenType.NUMBER
        assert tokens[0].value == 1234

    def test_zero(self):
        assert tokenize("0")[0].value == 0

    def test_hex(self):
        tokens = tokenize("0x7F")
        assert tokens[0].type == TokenType.NUMBER
        assert tokens[0].value == 0x7F

    def test_hex_mixed_case_digits(self):
        assert tokenize("0xdeadBEEF")[0].value == 0xDEADBEEF

    def test_large_number_is_not_truncated(self):
        """Range checking is the parser's job."""
        assert tokenize("0x100000000")[0].value == 0x100000000

    def test_minus_is_separate_token(self):
        tokens = tokenize("-1")
        assert tokens[0].type == TokenType.MINUS
        assert tokens[1].type == TokenType.NUMBER
        assert tokens[1].value == 1

    def test_malformed_hex(self):
        with pytest.raises(ParseError, match="malformed numeric literal"):
            tokenize("0xZZ")

    def test_hex_prefix_without_digits(self):
        with pytest.raises(ParseError, match="malformed numeric literal"):
            tokenize("0x")


# =============================================================================
# String and Directive Tests
# =============================================================================

class TestStrings:
    """Test double-quoted strings."""

    def test_simple_string(self):
        tokens = tokenize('"hello"')
        assert tokens[0].type == TokenType.STRING
        assert tokens[0].value == "hello"

    def test_empty_string(self):
        assert tokenize('""')[0].value == ""

    def test_no_escape_processing(self):
        """Backslashes are kept verbatim."""
        assert tokenize(r'"a\nb"')[0].value == "a\\nb"

    def test_semicolon_inside_string_is_not_a_comment(self):
        assert tokenize('"a;b"')[0].value == "a;b"

    def test_utf8_string(self):
        assert tokenize('"héllo"'.encode("utf-8"))[0].value == "héllo"

    def test_unterminated_string(self):
        with pytest.raises(ParseError, match="unterminated string"):
            tokenize('"abc')

    def test_invalid_utf8_string(self):
        with pytest.raises(ParseError, match="not valid UTF-8"):
            tokenize(b'"\xff"')


class TestDirectives:
    """Test dot-prefixed directive names."""

    def test_directive(self):
        tokens = tokenize(".asciz")
        assert tokens[0].type == TokenType.DIRECTIVE
        assert tokens[0].value == ".asciz"

    def test_directive_followed_by_string(self):
        tokens = tokenize('.ascii"x"')
        assert [t.type for t in tokens] == [TokenType.DIRECTIVE, TokenType.STRING]

    def test_lone_dot(self):
        with pytest.raises(ParseError, match="expected directive name"):
            tokenize(". db")


# =============================================================================
# Comment Tests
# =============================================================================

class TestComments:
    """Test ';' line comments."""

    def test_comment_only(self):
        assert tokenize("; nothing here") == []

    def test_comment_after_token(self):
        tokens = tokenize("RET ; return")
        assert len(tokens) == 1
        assert tokens[0].value == "RET"

    def test_comment_ends_at_newline(self):
        tokens = tokenize("; first\nPSH")
        assert len(tokens) == 1
        assert tokens[0].value == "PSH"

    def test_comment_at_end_of_input_without_newline(self):
        assert tokenize("POP ;")[0].value == "POP"

    def test_interleaved_comments_and_whitespace(self):
        tokens = tokenize("; a\n  ; b\r\n\tADD ; c\n")
        assert [t.value for t in tokens] == ["ADD"]


# =============================================================================
# Position Tracking Tests
# =============================================================================

class TestPositions:
    """Test offsets, line and column tracking."""

    def test_offsets_are_byte_offsets(self):
        tokens = tokenize("bss {\n  RET }")
        assert [t.offset for t in tokens] == [0, 4, 8, 12]

    def test_line_and_column(self):
        tokens = tokenize("bss {\n  RET }")
        ret = tokens[2]
        assert ret.line == 2
        assert ret.column == 3

    def test_offsets_count_multibyte_characters_as_bytes(self):
        tokens = tokenize('"é" RET'.encode("utf-8"))
        assert tokens[1].offset == 5

    def test_location_property(self):
        token = tokenize("  PSH")[0]
        loc = token.location
        assert loc.filename == "<test>"
        assert loc.offset == 2
        assert str(loc) == "<test>:1:3"


# =============================================================================
# Error Tests
# =============================================================================

class TestErrors:
    """Test lexer error reporting."""

    def test_unexpected_character(self):
        with pytest.raises(ParseError, match="unexpected character '@'") as exc_info:
            tokenize("PSH @")
        assert exc_info.value.offset == 4

    def test_unexpected_byte(self):
        with pytest.raises(ParseError, match="unexpected byte 0xFF"):
            tokenize(b"PSH \xff")

    def test_error_has_context(self):
        with pytest.raises(ParseError) as exc_info:
            tokenize("bss {\n  PSH # bad\n}")
        assert exc_info.value.context == "  PSH # bad"
        assert exc_info.value.location.line == 2

    def test_error_context_omitted_for_undecodable_line(self):
        with pytest.raises(ParseError) as exc_info:
            tokenize(b"\xc3 #")
        assert exc_info.value.context is None


class TestSourceContext:
    """Test context extraction for error messages."""

    def test_middle_line(self):
        assert source_context(b"one\ntwo\nthree", 5) == "two"

    def test_offset_at_end(self):
        assert source_context(b"one\ntwo", 7) == "two"

    def test_crlf_is_trimmed(self):
        assert source_context(b"one\r\ntwo", 1) == "one"

    def test_invalid_utf8(self):
        assert source_context(b"ok\n\xff\xfe", 4) is None
