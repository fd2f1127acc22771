"""
Assembly Language Lexer
=======================

This module implements a lexer (tokenizer) for the stack-machine assembly
language. It converts source bytes into a stream of tokens that the parser
can process.

Token Types
-----------
- IDENTIFIER: Labels, label references, mnemonics, section keywords
- NUMBER: Decimal (123) or hexadecimal (0x7B) unsigned integers
- STRING: Double-quoted strings ("hello"), no escape processing
- DIRECTIVE: Dot-prefixed directive names (.asciz, .db, ...)
- Punctuation: { } : -
- EOF: End of input

Whitespace (space, tab, CR, LF) and line comments are skipped anywhere
between tokens and never produce tokens of their own:

    bss { }      ; everything after a semicolon is ignored
    raw { main: RET }

Positions
---------
The lexer works on raw bytes. Every token records its byte offset along
with a 1-indexed line and column, so errors can point at the exact byte
where the input went wrong even when the source is not valid text.

Example
-------
>>> from sembler.assembler.lexer import Lexer
>>> for token in Lexer(b"main: IMM 0x2A").tokenize():
...     print(token)
Token(IDENTIFIER, 'main', 1:1)
Token(COLON, ':', 1:5)
Token(IDENTIFIER, 'IMM', 1:7)
Token(NUMBER, $2A, 1:11)
Token(EOF, 1:15)
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator, Optional
import string

from sembler.errors import ParseError, SourceLocation


# =============================================================================
# Token Type Enumeration
# =============================================================================

class TokenType(Enum):
    """Token types for the assembly language."""

    EOF = auto()

    # Values
    IDENTIFIER = auto()  # [A-Za-z0-9_]+ not spelled as a number
    NUMBER = auto()      # Decimal or 0x-prefixed hexadecimal
    STRING = auto()      # Double-quoted "..."
    DIRECTIVE = auto()   # .name

    # Punctuation
    LBRACE = auto()      # {
    RBRACE = auto()      # }
    COLON = auto()       # :
    MINUS = auto()       # -


# =============================================================================
# Token Data Class
# =============================================================================

@dataclass(frozen=True)
class Token:
    """
    Represents a single token from the source code.

    Attributes:
        type: The TokenType classification
        value: Identifier/directive name, string text, or number magnitude
        line: Line number in source (1-indexed)
        column: Column number in source (1-indexed, in bytes)
        offset: Byte offset in source (0-indexed)
        filename: Name of the source file
    """
    type: TokenType
    value: str | int | None
    line: int
    column: int
    offset: int
    filename: str

    def __repr__(self) -> str:
        if self.value is not None:
            if isinstance(self.value, int):
                return f"Token({self.type.name}, ${self.value:X}, {self.line}:{self.column})"
            return f"Token({self.type.name}, {self.value!r}, {self.line}:{self.column})"
        return f"Token({self.type.name}, {self.line}:{self.column})"

    @property
    def location(self) -> SourceLocation:
        """Return a SourceLocation for error reporting."""
        return SourceLocation(self.filename, self.line, self.column, self.offset)


# =============================================================================
# Context Extraction
# =============================================================================

def source_context(source: bytes, offset: int) -> Optional[str]:
    """
    Return the source line containing `offset`, for error messages.

    Returns None when the line is not valid UTF-8, since there is no
    faithful way to show it.
    """
    offset = max(0, min(offset, len(source)))
    start = source.rfind(b"\n", 0, offset) + 1
    end = source.find(b"\n", offset)
    if end == -1:
        end = len(source)
    try:
        return source[start:end].decode("utf-8").rstrip("\r")
    except UnicodeDecodeError:
        return None


# =============================================================================
# Lexer Implementation
# =============================================================================

class Lexer:
    """
    Tokenizes assembly source.

    Usage:
        lexer = Lexer(source_bytes, filename)
        tokens = list(lexer.tokenize())

    Attributes:
        source: The source bytes being tokenized
        filename: Name of the source file (for error reporting)
    """

    # Characters that make up identifiers and numbers
    WORD_CHARS = string.ascii_letters + string.digits + "_"

    WHITESPACE = " \t\r\n"

    SINGLE_CHAR_TOKENS = {
        "{": TokenType.LBRACE,
        "}": TokenType.RBRACE,
        ":": TokenType.COLON,
        "-": TokenType.MINUS,
    }

    def __init__(self, source: bytes | str, filename: str = "<input>"):
        """
        Initialize the lexer with source code.

        Args:
            source: The assembly source (str input is encoded as UTF-8)
            filename: Name of the source file (for error messages)
        """
        if isinstance(source, str):
            source = source.encode("utf-8")
        self.source = source
        self.filename = filename

        # Latin-1 maps every byte to exactly one character, so string
        # indices below are byte offsets.
        self._text = source.decode("latin-1")

        self._pos = 0
        self._line = 1
        self._column = 1

    def tokenize(self) -> Iterator[Token]:
        """
        Generate tokens from the source code.

        Yields:
            Token objects representing each lexical element, ending with EOF

        Raises:
            ParseError: If invalid syntax is encountered
        """
        while True:
            self._skip_whitespace_and_comments()
            if self._at_end():
                break
            yield self._scan_token()

        yield self._make_token(TokenType.EOF, None, self._line, self._column, self._pos)

    # =========================================================================
    # Character Access Methods
    # =========================================================================

    def _at_end(self) -> bool:
        return self._pos >= len(self._text)

    def _peek(self, offset: int = 0) -> str:
        """Look at character at current position + offset, '' past the end."""
        pos = self._pos + offset
        if pos >= len(self._text):
            return ""
        return self._text[pos]

    def _advance(self) -> str:
        """Consume and return the current character, updating line/column."""
        if self._at_end():
            return ""

        char = self._text[self._pos]
        self._pos += 1

        if char == "\n":
            self._line += 1
            self._column = 1
        else:
            self._column += 1

        return char

    # =========================================================================
    # Token Creation
    # =========================================================================

    def _make_token(
        self,
        token_type: TokenType,
        value: str | int | None,
        line: int,
        column: int,
        offset: int,
    ) -> Token:
        return Token(
            type=token_type,
            value=value,
            line=line,
            column=column,
            offset=offset,
            filename=self.filename,
        )

    def _error(
        self,
        message: str,
        line: Optional[int] = None,
        column: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> ParseError:
        """Create a parse error at the current (or given) position."""
        if offset is None:
            line, column, offset = self._line, self._column, self._pos
        location = SourceLocation(self.filename, line, column, offset)
        return ParseError(message, location, context=source_context(self.source, offset))

    # =========================================================================
    # Whitespace and Comment Handling
    # =========================================================================

    def _skip_whitespace_and_comments(self) -> None:
        """Skip any interleaving of whitespace and ';' line comments."""
        while not self._at_end():
            char = self._peek()
            if char in self.WHITESPACE:
                self._advance()
            elif char == ";":
                while not self._at_end() and self._peek() != "\n":
                    self._advance()
            else:
                return

    # =========================================================================
    # Token Scanning
    # =========================================================================

    def _scan_token(self) -> Token:
        line, column, offset = self._line, self._column, self._pos
        char = self._peek()

        if char in self.WORD_CHARS:
            return self._scan_word(line, column, offset)

        if char == ".":
            return self._scan_directive(line, column, offset)

        if char == '"':
            return self._scan_string(line, column, offset)

        if char in self.SINGLE_CHAR_TOKENS:
            self._advance()
            return self._make_token(self.SINGLE_CHAR_TOKENS[char], char, line, column, offset)

        if char.isprintable() and ord(char) < 0x80:
            raise self._error(f"unexpected character '{char}'")
        raise self._error(f"unexpected byte 0x{ord(char):02X}")

    def _read_word_chars(self) -> str:
        chars = []
        # _peek() returns '' at end of input, and '' is in every string
        while self._peek() and self._peek() in self.WORD_CHARS:
            chars.append(self._advance())
        return "".join(chars)

    def _scan_word(self, line: int, column: int, offset: int) -> Token:
        """
        Scan a run of identifier characters and classify it.

        All-digit runs are decimal numbers and '0x' runs are hexadecimal
        numbers; anything else is an identifier.
        """
        word = self._read_word_chars()

        if word.isdigit():
            return self._make_token(TokenType.NUMBER, int(word), line, column, offset)

        if word.startswith("0x"):
            digits = word[2:]
            if not digits or any(c not in string.hexdigits for c in digits):
                raise self._error(
                    f"malformed numeric literal '{word}'", line, column, offset
                )
            return self._make_token(TokenType.NUMBER, int(digits, 16), line, column, offset)

        return self._make_token(TokenType.IDENTIFIER, word, line, column, offset)

    def _scan_directive(self, line: int, column: int, offset: int) -> Token:
        self._advance()  # consume .
        name = self._read_word_chars()
        if not name:
            raise self._error("expected directive name after '.'", line, column, offset)
        return self._make_token(TokenType.DIRECTIVE, "." + name, line, column, offset)

    def _scan_string(self, line: int, column: int, offset: int) -> Token:
        """
        Scan a double-quoted string literal.

        The content is taken verbatim up to the next double quote. There
        are no escape sequences, so a string can never contain a quote.
        """
        self._advance()  # consume opening "
        start = self._pos

        while not self._at_end() and self._peek() != '"':
            self._advance()

        if self._at_end():
            raise self._error("unterminated string literal", line, column, offset)

        raw = self.source[start:self._pos]
        self._advance()  # consume closing "

        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise self._error(
                "string literal is not valid UTF-8", line, column, offset
            ) from e

        return self._make_token(TokenType.STRING, text, line, column, offset)
