"""
Stack Machine Code Generator
============================

This module turns a parsed Program into machine code. It implements a
two-pass assembly process over an intermediate entity stream.

Entity Stream
-------------
Each instruction is first encoded into a sequence of entities, where an
entity is either a resolved byte (an int 0-255) or a Placeholder naming a
label whose address is not known yet:

| Instruction       | Entities                                  |
|-------------------|-------------------------------------------|
| PSH               | [$10]                                     |
| IMM 0x1           | [$01, $00, $00, $00, $01]                 |
| JMP loop          | [$03, Placeholder('loop')]                |
| .asciz "AB"       | [$41, $42, $00]                           |
| .ascii "AB"       | [$41, $42]                                |
| .db 7             | [$07]                                     |
| .dw 0x10          | [$00, $00, $00, $10]                      |

Pass 1 (Layout and Symbol Collection)
-------------------------------------
- Walk a section's entries, tracking a byte offset that starts at 0
- Bind each label to the current offset in the shared symbol table
- Append the instruction's entities to the section's stream
- Advance by 1 per byte and by 4 per placeholder

Pass 2 (Fixup and Emission)
---------------------------
- Copy resolved bytes verbatim
- Replace each placeholder by the big-endian 32-bit value of its symbol

Pass 2 does no offset tracking of its own, so each pass can be run and
checked in isolation.

Symbol Namespace
----------------
The bss and raw sections are both addressed from 0, but their labels go
into one symbol table. A name must be unique across the whole program,
and a reference from one section to a label in the other resolves to an
offset relative to the other section's start.
"""

from dataclasses import dataclass, field
from typing import Optional, Union
import logging
import struct

from sembler.errors import (
    DuplicateSymbolError,
    MissingEntryPointError,
    SourceLocation,
    UndefinedSymbolError,
)
from sembler.assembler.ast import (
    Ascii,
    Asciz,
    Byte,
    DataWord,
    Entry,
    Instruction,
    LabelRef,
    Literal,
    Nullary,
    Program,
    Unary,
)
from sembler.output import Blob

logger = logging.getLogger(__name__)


DEFAULT_ENTRY_POINT = "main"

# Size of an expanded placeholder (one 32-bit address)
PLACEHOLDER_SIZE = 4


# =============================================================================
# Entities and Symbols
# =============================================================================

@dataclass(frozen=True)
class Placeholder:
    """An unresolved 32-bit reference to a label."""
    label: str
    location: Optional[SourceLocation] = field(default=None, compare=False)

    def __repr__(self) -> str:
        return f"[{self.label}]"


Entity = Union[int, Placeholder]


@dataclass(frozen=True)
class Symbol:
    """
    Symbol table entry.

    Attributes:
        name: Label name
        value: Byte offset within its section
        section: Section the label was defined in ("bss" or "raw")
        location: Where the label was defined
    """
    name: str
    value: int
    section: str
    location: Optional[SourceLocation] = None


SymbolTable = dict[str, Symbol]


# =============================================================================
# Encoding Rules
# =============================================================================

def _word_bytes(value: int) -> list[int]:
    return list(struct.pack(">I", value))


def encode_instruction(instruction: Instruction) -> list[Entity]:
    """
    Encode one instruction into entities.

    Label operands become a single Placeholder; everything else is
    resolved immediately.
    """
    if isinstance(instruction, Nullary):
        return [instruction.op.opcode]

    if isinstance(instruction, Unary):
        operand = instruction.operand
        if isinstance(operand, Literal):
            return [instruction.op.opcode] + _word_bytes(operand.value)
        if isinstance(operand, LabelRef):
            return [instruction.op.opcode, Placeholder(operand.name, operand.location)]
        raise TypeError(f"unknown operand {operand!r}")

    if isinstance(instruction, Asciz):
        return list(instruction.text.encode("utf-8")) + [0]

    if isinstance(instruction, Ascii):
        return list(instruction.text.encode("utf-8"))

    if isinstance(instruction, Byte):
        return [instruction.value]

    if isinstance(instruction, DataWord):
        return _word_bytes(instruction.value)

    raise TypeError(f"unknown instruction {instruction!r}")


def entity_size(entity: Entity) -> int:
    """Number of output bytes an entity expands to."""
    return PLACEHOLDER_SIZE if isinstance(entity, Placeholder) else 1


# =============================================================================
# Pass 1: Layout and Symbol Collection
# =============================================================================

def first_pass(section: str, entries: tuple[Entry, ...], symbols: SymbolTable) -> list[Entity]:
    """
    Lay out one section and record its labels.

    Args:
        section: Section name, recorded on each symbol
        entries: The section's entries in source order
        symbols: Symbol table shared by all sections; updated in place

    Returns:
        The section's entity stream

    Raises:
        DuplicateSymbolError: If a label is already in the table
    """
    entities: list[Entity] = []
    offset = 0

    for entry in entries:
        if entry.label is not None:
            existing = symbols.get(entry.label)
            if existing is not None:
                raise DuplicateSymbolError(
                    entry.label,
                    location=entry.location,
                    original_location=existing.location,
                )
            symbols[entry.label] = Symbol(entry.label, offset, section, entry.location)

        for entity in encode_instruction(entry.instruction):
            entities.append(entity)
            offset += entity_size(entity)

    return entities


# =============================================================================
# Pass 2: Fixup and Emission
# =============================================================================

def second_pass(entities: list[Entity], symbols: SymbolTable) -> bytes:
    """
    Expand an entity stream into final bytes.

    Raises:
        UndefinedSymbolError: If a placeholder names an unknown label
    """
    code = bytearray()

    for entity in entities:
        if isinstance(entity, Placeholder):
            symbol = symbols.get(entity.label)
            if symbol is None:
                raise UndefinedSymbolError(
                    entity.label,
                    location=entity.location,
                    similar_symbols=find_similar_symbols(entity.label, symbols),
                )
            code += struct.pack(">I", symbol.value)
        else:
            code.append(entity)

    return bytes(code)


def resolve_entry_point(symbols: SymbolTable, name: str = DEFAULT_ENTRY_POINT) -> int:
    """
    Look up the entry-point symbol.

    Raises:
        MissingEntryPointError: If `name` is not defined
    """
    symbol = symbols.get(name)
    if symbol is None:
        raise MissingEntryPointError(name)
    return symbol.value


# =============================================================================
# Diagnostics
# =============================================================================

def find_similar_symbols(name: str, symbols: SymbolTable) -> list[str]:
    """
    Find symbols with similar names for error hints.

    Uses simple edit distance heuristic.
    """
    name_lower = name.lower()
    similar = []

    for sym in sorted(symbols):
        sym_lower = sym.lower()
        if (
            sym_lower == name_lower or
            abs(len(sym) - len(name)) <= 1 and
            _edit_distance(name_lower, sym_lower) <= 2
        ):
            similar.append(sym)

    return similar[:3]


def _edit_distance(s1: str, s2: str) -> int:
    """Calculate Levenshtein edit distance between two strings."""
    if len(s1) < len(s2):
        s1, s2 = s2, s1

    distances = list(range(len(s2) + 1))
    for i, c1 in enumerate(s1):
        new_distances = [i + 1]
        for j, c2 in enumerate(s2):
            if c1 == c2:
                new_distances.append(distances[j])
            else:
                new_distances.append(1 + min(distances[j], distances[j + 1], new_distances[-1]))
        distances = new_distances
    return distances[-1]


def format_entities(entities: list[Entity]) -> str:
    """Render an entity stream as hex bytes and [label] placeholders."""
    return " ".join(
        repr(entity) if isinstance(entity, Placeholder) else f"{entity:02X}"
        for entity in entities
    )


def format_symbols(symbols: SymbolTable) -> str:
    """
    Render a symbol table, one `name section 0xOFFSET` line per symbol.

    Sorted by section, then offset, then name.
    """
    order = {"bss": 0, "raw": 1}
    rows = sorted(
        symbols.values(),
        key=lambda s: (order.get(s.section, 2), s.value, s.name),
    )
    return "\n".join(f"{s.name} {s.section} 0x{s.value:08X}" for s in rows)


# =============================================================================
# Code Generator
# =============================================================================

class CodeGenerator:
    """
    Assembles a Program into a Blob.

    Each call to generate() builds a fresh symbol table, so one generator
    can be reused and separate generators share no state.

    Usage:
        codegen = CodeGenerator()
        blob = codegen.generate(program, entry_point="main")
        symbols = codegen.get_symbols()
    """

    def __init__(self):
        self._symbols: SymbolTable = {}
        self._streams: dict[str, list[Entity]] = {}

    def generate(self, program: Program, entry_point: str = DEFAULT_ENTRY_POINT) -> Blob:
        """
        Run both passes over both sections and resolve the entry point.

        Results of any earlier run are discarded first, so after a failure
        the accessors report nothing rather than a different program.

        Raises:
            DuplicateSymbolError: From pass 1
            UndefinedSymbolError: From pass 2
            MissingEntryPointError: If `entry_point` is not defined
        """
        self._symbols = {}
        self._streams = {}

        symbols: SymbolTable = {}
        streams: dict[str, list[Entity]] = {}

        for name, entries in program.sections():
            streams[name] = first_pass(name, entries, symbols)

        if logger.isEnabledFor(logging.DEBUG):
            for name, entities in streams.items():
                logger.debug(f"{name} entities: {format_entities(entities)}")
            logger.debug(f"symbols:\n{format_symbols(symbols)}")

        bss = second_pass(streams["bss"], symbols)
        raw = second_pass(streams["raw"], symbols)
        ep = resolve_entry_point(symbols, entry_point)

        self._symbols = symbols
        self._streams = streams

        logger.debug(
            f"assembled {len(bss)} bss bytes, {len(raw)} raw bytes, "
            f"entry point '{entry_point}' at 0x{ep:08X}"
        )
        return Blob(bss=bss, raw=raw, ep=ep)

    def get_symbols(self) -> dict[str, int]:
        """Return name -> offset for the last successful run."""
        return {name: sym.value for name, sym in self._symbols.items()}

    def get_symbol_table(self) -> SymbolTable:
        """Return a copy of the full symbol table of the last successful run."""
        return dict(self._symbols)

    def get_entities(self, section: str) -> list[Entity]:
        """Return a copy of a section's entity stream from the last run."""
        return list(self._streams.get(section, []))

    def get_symbol_listing(self) -> str:
        return format_symbols(self._symbols)
