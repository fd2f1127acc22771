"""
Program Pretty-Printer
======================

Renders a Program back into assembly source. The output is meant for
debugging (the `sasm --print-program` option) and is guaranteed to parse
back into a structurally identical Program:

    parse_source(format_program(program)) == program

Literals are always printed in fixed-width hexadecimal, so negative source
literals come back as their two's-complement value.

Example output:

    bss {
    msg:    .asciz "hi"
    }
    raw {
    main:   IMM 0x00000001
            JSR print
            RET
    }
"""

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


INDENT = 8


def format_instruction(instruction: Instruction) -> str:
    """Render a single instruction without label or indentation."""
    if isinstance(instruction, Nullary):
        return instruction.op.mnemonic

    if isinstance(instruction, Unary):
        operand = instruction.operand
        if isinstance(operand, Literal):
            return f"{instruction.op.mnemonic} 0x{operand.value:08X}"
        if isinstance(operand, LabelRef):
            return f"{instruction.op.mnemonic} {operand.name}"
        raise TypeError(f"unknown operand {operand!r}")

    if isinstance(instruction, Asciz):
        return f'.asciz "{instruction.text}"'
    if isinstance(instruction, Ascii):
        return f'.ascii "{instruction.text}"'
    if isinstance(instruction, Byte):
        return f".db 0x{instruction.value:02X}"
    if isinstance(instruction, DataWord):
        return f".dw 0x{instruction.value:08X}"

    raise TypeError(f"unknown instruction {instruction!r}")


def format_entry(entry: Entry) -> str:
    """Render one entry as a source line, label in the left column."""
    body = format_instruction(entry.instruction)
    if entry.label is None:
        return " " * INDENT + body
    prefix = f"{entry.label}:"
    if len(prefix) < INDENT:
        prefix = prefix.ljust(INDENT)
    else:
        prefix += " "
    return prefix + body


def format_program(program: Program) -> str:
    """Render a whole program, one entry per line."""
    lines = []
    for name, entries in program.sections():
        lines.append(f"{name} {{")
        lines.extend(format_entry(entry) for entry in entries)
        lines.append("}")
    return "\n".join(lines) + "\n"
