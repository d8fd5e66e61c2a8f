"""
LC-3 Emulator - Opcode Decoder + Field Extraction

Instruction word layout (16-bit):

  15..12  opcode
  11..9   DR / SR (store source) / BR condition bits n,z,p
  8..6    SR1 / BaseR
  5       immediate flag (ADD, AND)
  4..0    imm5
  2..0    SR2
  5..0    offset6  (LDR, STR)
  8..0    PCoffset9
  10..0   PCoffset11 (JSR, bit 11 = 1)
  7..0    trapvect8

Every PC-relative offset is added to the already-incremented PC.
"""

from enum import IntEnum

from ..config import WORD_MASK
from ..errors import DecodeFault
from .regs import Register


class Opcode(IntEnum):
    BR = 0x0
    ADD = 0x1
    LD = 0x2
    ST = 0x3
    JSR = 0x4
    AND = 0x5
    LDR = 0x6
    STR = 0x7
    RTI = 0x8
    NOT = 0x9
    LDI = 0xA
    STI = 0xB
    JMP = 0xC
    RES = 0xD
    LEA = 0xE
    TRAP = 0xF

    @classmethod
    def from_tag(cls, tag: int) -> "Opcode":
        """Map a raw opcode tag to its variant, or raise DecodeFault."""
        try:
            return cls(tag)
        except ValueError:
            raise DecodeFault('opcode', tag) from None


def decode(instr: int) -> Opcode:
    """Extract the opcode from the high nibble of an instruction word."""
    return Opcode.from_tag((instr & WORD_MASK) >> 12)


def sign_extend(x: int, bit_count: int) -> int:
    """Widen a `bit_count`-bit two's complement field to 16 bits."""
    if (x >> (bit_count - 1)) & 1:
        x |= 0xFFFF << bit_count
    return x & WORD_MASK


# ──────────────────────────────────────────────
# Field extraction
# ──────────────────────────────────────────────

def dr(instr: int) -> Register:
    """Bits 11..9: destination register (or store source)."""
    return Register.from_index((instr >> 9) & 0x7)


def sr1(instr: int) -> Register:
    """Bits 8..6: first source / base register."""
    return Register.from_index((instr >> 6) & 0x7)


def sr2(instr: int) -> Register:
    return Register.from_index(instr & 0x7)


def imm_flag(instr: int) -> bool:
    return bool((instr >> 5) & 0x1)


def imm5(instr: int) -> int:
    return sign_extend(instr & 0x1F, 5)


def offset6(instr: int) -> int:
    return sign_extend(instr & 0x3F, 6)


def pc_offset9(instr: int) -> int:
    return sign_extend(instr & 0x1FF, 9)


def pc_offset11(instr: int) -> int:
    return sign_extend(instr & 0x7FF, 11)


def cond_bits(instr: int) -> int:
    """Bits 11..9 of BR: n, z, p (same layout as COND)."""
    return (instr >> 9) & 0x7


def jsr_mode(instr: int) -> bool:
    """Bit 11 of JSR: set = PC-relative JSR, clear = JSRR BaseR."""
    return bool((instr >> 11) & 0x1)


def trap_vector(instr: int) -> int:
    return instr & 0xFF
