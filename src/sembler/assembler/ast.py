"""
Program Data Model
==================

This module defines the in-memory representation of a parsed program.
Every node is immutable: the parser builds a Program once and nothing
downstream modifies it.

Structure
---------
```
Program
├── bss: tuple[Entry, ...]
└── raw: tuple[Entry, ...]

Entry = optional label + Instruction

Instruction
├── Asciz / Ascii / Byte / DataWord  (data directives)
├── Nullary(NullaryOp)               (1 byte)
└── Unary(UnaryOp, Literal|LabelRef) (1 + 4 bytes)
```

Opcode Table
------------
Each mnemonic maps to exactly one fixed opcode byte. The enum member value
*is* the opcode; the member name is the mnemonic as written in source.

Nullary (no operand):

| Mnemonic | Opcode | Mnemonic | Opcode |
|----------|--------|----------|--------|
| PSH      | $10    | EQ       | $20    |
| PUSHARG  | $11    | NE       | $21    |
| LI       | $12    | LT       | $22    |
| LC       | $13    | GT       | $23    |
| SI       | $14    | LE       | $24    |
| SC       | $15    | GE       | $25    |
| SWAP     | $16    | ADD..XOR | $26-$2D|
| POP      | $17    |          |        |
| RET      | $18    |          |        |

Unary (opcode followed by a 32-bit big-endian operand):
IMM $01, REL $02, JMP $03, BZ $04, BNZ $05, ENT $06, ADJ $07, JSR $08, INT $09
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union

from sembler.errors import SourceLocation


WORD_MASK = 0xFFFFFFFF
BYTE_MASK = 0xFF


# =============================================================================
# Opcodes
# =============================================================================

class NullaryOp(Enum):
    """Zero-operand instructions."""

    # Stack, load/store and return
    PSH = 0x10
    PUSHARG = 0x11
    LI = 0x12
    LC = 0x13
    SI = 0x14
    SC = 0x15
    SWAP = 0x16
    POP = 0x17
    RET = 0x18

    # Comparison
    EQ = 0x20
    NE = 0x21
    LT = 0x22
    GT = 0x23
    LE = 0x24
    GE = 0x25

    # Arithmetic and logic
    ADD = 0x26
    SUB = 0x27
    MUL = 0x28
    DIV = 0x29
    MOD = 0x2A
    AND = 0x2B
    OR = 0x2C
    XOR = 0x2D

    @property
    def mnemonic(self) -> str:
        return self.name

    @property
    def opcode(self) -> int:
        return self.value


class UnaryOp(Enum):
    """Instructions taking one 32-bit word operand."""

    IMM = 0x01      # Load immediate
    REL = 0x02      # Load frame-relative address
    JMP = 0x03      # Absolute jump
    BZ = 0x04       # Branch if zero
    BNZ = 0x05      # Branch if not zero
    ENT = 0x06      # Enter subroutine frame
    ADJ = 0x07      # Adjust stack
    JSR = 0x08      # Call subroutine
    INT = 0x09      # Software interrupt

    @property
    def mnemonic(self) -> str:
        return self.name

    @property
    def opcode(self) -> int:
        return self.value


# Mnemonic lookup tables for the parser (exact, case-sensitive)
NULLARY_MNEMONICS: dict[str, NullaryOp] = {op.name: op for op in NullaryOp}
UNARY_MNEMONICS: dict[str, UnaryOp] = {op.name: op for op in UnaryOp}


# =============================================================================
# Operands
# =============================================================================

@dataclass(frozen=True)
class Literal:
    """A 32-bit unsigned numeric operand."""
    value: int

    def __post_init__(self):
        if not 0 <= self.value <= WORD_MASK:
            raise ValueError(f"word literal out of range: {self.value}")


@dataclass(frozen=True)
class LabelRef:
    """A reference to a label whose address is resolved at assembly time."""
    name: str
    location: Optional[SourceLocation] = field(default=None, compare=False)


# A unary operand word: a literal or a label resolved in pass 2
Operand = Union[Literal, LabelRef]


# =============================================================================
# Instructions
# =============================================================================

@dataclass(frozen=True)
class Asciz:
    """`.asciz "text"` - string bytes followed by a null terminator."""
    text: str


@dataclass(frozen=True)
class Ascii:
    """`.ascii "text"` - string bytes, no terminator."""
    text: str


@dataclass(frozen=True)
class Byte:
    """`.db value` - a single byte."""
    value: int

    def __post_init__(self):
        if not 0 <= self.value <= BYTE_MASK:
            raise ValueError(f"byte literal out of range: {self.value}")


@dataclass(frozen=True)
class DataWord:
    """`.dw value` - a single 32-bit big-endian word."""
    value: int

    def __post_init__(self):
        if not 0 <= self.value <= WORD_MASK:
            raise ValueError(f"word literal out of range: {self.value}")


@dataclass(frozen=True)
class Nullary:
    op: NullaryOp


@dataclass(frozen=True)
class Unary:
    op: UnaryOp
    operand: Operand


Directive = Union[Asciz, Ascii, Byte, DataWord]
Opcode = Union[Nullary, Unary]
Instruction = Union[Directive, Opcode]


# =============================================================================
# Program Structure
# =============================================================================

@dataclass(frozen=True)
class Entry:
    """
    One program line: an optional label bound to the current byte offset,
    followed by one instruction.

    The source location is kept for error reporting only and does not take
    part in equality, so two programs parsed from differently formatted
    text compare equal when their structure matches.
    """
    instruction: Instruction
    label: Optional[str] = None
    location: Optional[SourceLocation] = field(default=None, compare=False)


@dataclass(frozen=True)
class Program:
    """
    A parsed program: the bss and raw sections, in source order.

    Each section is addressed independently from offset 0.
    """
    bss: tuple[Entry, ...] = ()
    raw: tuple[Entry, ...] = ()

    def sections(self) -> tuple[tuple[str, tuple[Entry, ...]], ...]:
        """Return (name, entries) pairs in emission order."""
        return (("bss", self.bss), ("raw", self.raw))

    def __str__(self) -> str:
        from sembler.assembler.printer import format_program
        return format_program(self)
