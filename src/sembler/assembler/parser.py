"""
Assembly Language Parser
========================

This module implements a recursive-descent parser for the stack-machine
assembly language. It converts the token stream from the lexer into a
Program (see sembler.assembler.ast).

Grammar
-------
```
program     := bss raw EOF
bss         := "bss" "{" entry* "}"
raw         := "raw" "{" entry* "}"
entry       := [label] instruction
label       := identifier ":"        (no whitespace before the colon)
instruction := directive | operation
directive   := ".asciz" string | ".ascii" string
             | ".db" literal   | ".dw" literal
operation   := nullary_mnemonic | unary_mnemonic word
word        := literal | identifier
literal     := ["-"] number
```
Whitespace and comments are handled by the lexer and may appear between
any two tokens.

Mnemonics
---------
Mnemonics are matched as whole, case-sensitive words against the opcode
tables, so a mnemonic that is a prefix of another (BZ/BNZ, PSH/PUSHARG)
can never pre-empt the longer one.

Errors
------
Any mismatch raises ParseError with the byte offset of the offending token
and the source line around it. There is no error recovery and no partial
result.
"""

from typing import Optional

from sembler.errors import ParseError
from sembler.assembler.lexer import Lexer, Token, TokenType, source_context
from sembler.assembler.ast import (
    Ascii,
    Asciz,
    Byte,
    DataWord,
    Entry,
    Instruction,
    LabelRef,
    Literal,
    NULLARY_MNEMONICS,
    Nullary,
    Operand,
    Program,
    UNARY_MNEMONICS,
    Unary,
)


DIRECTIVE_NAMES = frozenset({".asciz", ".ascii", ".db", ".dw"})


class Parser:
    """
    Parses a token list into a Program.

    Usage:
        tokens = list(Lexer(source, filename).tokenize())
        program = Parser(tokens, source, filename).parse()
    """

    def __init__(self, tokens: list[Token], source: bytes = b"", filename: str = "<input>"):
        """
        Initialize the parser.

        Args:
            tokens: List of tokens from the lexer (ending with EOF)
            source: Original source bytes, used for error context
            filename: Source filename for error reporting
        """
        self._tokens = tokens
        self._source = source
        self._filename = filename
        self._pos = 0

    def parse(self) -> Program:
        """
        Parse both sections and require end of input after them.

        Raises:
            ParseError: If the tokens do not form a valid program
        """
        bss = self._parse_section("bss")
        raw = self._parse_section("raw")

        if not self._check(TokenType.EOF):
            raise self._error("unexpected input after end of 'raw' section")

        return Program(bss=bss, raw=raw)

    # =========================================================================
    # Token Navigation
    # =========================================================================

    def _current(self) -> Token:
        if self._pos >= len(self._tokens):
            return self._eof_token()
        return self._tokens[self._pos]

    def _eof_token(self) -> Token:
        end = len(self._source)
        last = self._tokens[-1] if self._tokens else None
        return Token(
            TokenType.EOF, None,
            last.line if last else 1,
            last.column if last else 1,
            last.offset if last else end,
            self._filename,
        )

    def _peek(self, offset: int = 0) -> Token:
        pos = self._pos + offset
        if pos >= len(self._tokens):
            return self._eof_token()
        return self._tokens[pos]

    def _advance(self) -> Token:
        token = self._current()
        if token.type != TokenType.EOF:
            self._pos += 1
        return token

    def _check(self, *types: TokenType) -> bool:
        return self._current().type in types

    def _match(self, *types: TokenType) -> Optional[Token]:
        if self._check(*types):
            return self._advance()
        return None

    def _expect(self, token_type: TokenType, message: str) -> Token:
        if not self._check(token_type):
            raise self._error(message)
        return self._advance()

    def _error(self, message: str, token: Optional[Token] = None, hint: Optional[str] = None) -> ParseError:
        """Create a ParseError pointing at `token` (default: current token)."""
        token = token or self._current()
        return ParseError(
            message,
            token.location,
            context=source_context(self._source, token.offset),
            hint=hint,
        )

    @staticmethod
    def _describe(token: Token) -> str:
        if token.type == TokenType.EOF:
            return "end of input"
        if token.type == TokenType.STRING:
            return f'string "{token.value}"'
        if token.type == TokenType.NUMBER:
            return f"number {token.value}"
        return f"'{token.value}'"

    # =========================================================================
    # Sections and Entries
    # =========================================================================

    def _parse_section(self, keyword: str) -> tuple[Entry, ...]:
        """Parse `keyword { entry* }`."""
        token = self._current()
        if token.type != TokenType.IDENTIFIER or token.value != keyword:
            raise self._error(
                f"expected '{keyword}' section, found {self._describe(token)}"
            )
        self._advance()

        self._expect(TokenType.LBRACE, f"expected '{{' after '{keyword}'")

        entries: list[Entry] = []
        while not self._check(TokenType.RBRACE):
            if self._check(TokenType.EOF):
                raise self._error(f"unterminated '{keyword}' section, expected '}}'")
            entries.append(self._parse_entry())

        self._advance()  # consume }
        return tuple(entries)

    def _colon_follows(self) -> bool:
        """True if the next token is a ':' directly after the current one."""
        token, after = self._current(), self._peek(1)
        return (
            after.type == TokenType.COLON
            and after.offset == token.offset + len(token.value)
        )

    def _parse_entry(self) -> Entry:
        start = self._current()
        label = None

        if self._check(TokenType.IDENTIFIER) and self._colon_follows():
            label = self._advance().value
            self._advance()  # consume :

            if self._check(TokenType.RBRACE, TokenType.EOF):
                raise self._error(f"expected instruction after label '{label}'")

        instruction = self._parse_instruction()
        return Entry(instruction=instruction, label=label, location=start.location)

    # =========================================================================
    # Instructions
    # =========================================================================

    def _parse_instruction(self) -> Instruction:
        token = self._current()

        if token.type == TokenType.DIRECTIVE:
            return self._parse_directive()

        if token.type == TokenType.IDENTIFIER:
            name = token.value

            if name in NULLARY_MNEMONICS:
                self._advance()
                return Nullary(NULLARY_MNEMONICS[name])

            if name in UNARY_MNEMONICS:
                self._advance()
                return Unary(UNARY_MNEMONICS[name], self._parse_word(name))

            hint = None
            upper = name.upper()
            if upper in NULLARY_MNEMONICS or upper in UNARY_MNEMONICS:
                hint = f"mnemonics are case-sensitive; did you mean '{upper}'?"
            elif self._colon_follows():
                hint = "labels must be followed by an instruction on the same entry"
            elif self._peek(1).type == TokenType.COLON:
                hint = f"write '{name}:' with no space before the ':'"
            raise self._error(f"unknown mnemonic '{name}'", hint=hint)

        raise self._error(f"expected instruction, found {self._describe(token)}")

    def _parse_directive(self) -> Instruction:
        token = self._advance()
        name = token.value

        if name == ".asciz":
            return Asciz(self._parse_string(name))
        if name == ".ascii":
            return Ascii(self._parse_string(name))
        if name == ".db":
            return Byte(self._parse_literal(bits=8))
        if name == ".dw":
            return DataWord(self._parse_literal(bits=32))

        raise self._error(
            f"unknown directive '{name}'",
            token,
            hint=f"valid directives: {', '.join(sorted(DIRECTIVE_NAMES))}",
        )

    def _parse_string(self, directive: str) -> str:
        return self._expect(
            TokenType.STRING, f"expected string literal after '{directive}'"
        ).value

    def _parse_word(self, mnemonic: str) -> Operand:
        """Parse a unary operand: a literal, else a label reference."""
        if self._check(TokenType.NUMBER, TokenType.MINUS):
            return Literal(self._parse_literal(bits=32))

        token = self._current()
        if token.type == TokenType.IDENTIFIER:
            self._advance()
            return LabelRef(token.value, token.location)

        raise self._error(
            f"expected literal or label after '{mnemonic}', found {self._describe(token)}"
        )

    def _parse_literal(self, bits: int) -> int:
        """
        Parse an optionally negated number that must fit in `bits` bits.

        A negative literal is the two's-complement negation of its
        magnitude at that width, so `-1` is 0xFFFFFFFF as a word and
        0xFF as a byte.
        """
        minus = self._match(TokenType.MINUS)
        token = self._expect(
            TokenType.NUMBER, f"expected numeric literal, found {self._describe(self._current())}"
        )

        limit = 1 << bits
        magnitude = token.value
        if magnitude >= limit:
            raise self._error(
                f"numeric literal {magnitude:#x} does not fit in {bits} bits",
                minus or token,
            )

        if minus:
            return (-magnitude) & (limit - 1)
        return magnitude


# =============================================================================
# Convenience Function
# =============================================================================

def parse_source(source: bytes | str, filename: str = "<input>") -> Program:
    """
    Parse assembly source into a Program.

    Args:
        source: Source bytes (str input is encoded as UTF-8)
        filename: Filename for error messages

    Returns:
        The parsed Program

    Raises:
        ParseError: On the first grammar mismatch
    """
    if isinstance(source, str):
        source = source.encode("utf-8")
    tokens = list(Lexer(source, filename).tokenize())
    return Parser(tokens, source, filename).parse()
