"""Operand extraction for 16-bit CHIP-8 instruction words."""

from chex import dataclass


@dataclass(frozen=True)
class DecodedInstruction:
    """An instruction word and its operand fields.

    Every field is extracted up front; each handler reads only the ones its
    encoding defines.
    """
    raw: int
    opcode: int  # Top nibble, selects the handler
    x: int
    y: int
    n: int
    nn: int
    nnn: int


def decode(instruction: int) -> DecodedInstruction:
    return DecodedInstruction(
        raw=instruction,
        opcode=instruction >> 12,
        x=(instruction >> 8) & 0xF,
        y=(instruction >> 4) & 0xF,
        n=instruction & 0xF,
        nn=instruction & 0xFF,
        nnn=instruction & 0xFFF,
    )
