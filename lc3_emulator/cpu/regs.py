"""
LC-3 Emulator - Register File + Condition Codes

Register model:
  R0-R7  general purpose, 16-bit (R7 = return address after JSR/JSRR)
  PC     program counter, 16-bit
  COND   condition codes, exactly one of:
           bit 0: P (Positive)
           bit 1: Z (Zero)
           bit 2: N (Negative)

Registers are addressed by name (`Register` member), never by a raw
index. Raw 3-bit fields from an instruction are converted with
`Register.from_index()`, which is where an out-of-range slot becomes a
decode fault.
"""

from enum import IntEnum, IntFlag

from ..config import PC_START, WORD_MASK
from ..errors import DecodeFault


class Register(IntEnum):
    R0 = 0
    R1 = 1
    R2 = 2
    R3 = 3
    R4 = 4
    R5 = 5
    R6 = 6
    R7 = 7
    PC = 8
    COND = 9

    @classmethod
    def from_index(cls, value: int) -> "Register":
        """Convert a raw register number, or raise DecodeFault."""
        if 0 <= value < len(cls):
            return cls(value)
        raise DecodeFault('register', value)


class ConditionFlag(IntFlag):
    POS = 1 << 0
    ZRO = 1 << 1
    NEG = 1 << 2


GENERAL_PURPOSE = tuple(Register.from_index(i) for i in range(8))


class Registers:
    """LC-3 register file: R0-R7, PC, COND."""

    __slots__ = ('R0', 'R1', 'R2', 'R3', 'R4', 'R5', 'R6', 'R7', 'PC', 'COND')

    def __init__(self, pc_start: int = PC_START):
        self.reset(pc_start)

    def update(self, reg: Register, value: int):
        """Overwrite `reg` with a 16-bit value (wraps silently)."""
        setattr(self, reg.name, int(value) & WORD_MASK)

    def get(self, reg: Register) -> int:
        return getattr(self, reg.name)

    # --- Condition codes ---

    @property
    def cond(self) -> ConditionFlag:
        return ConditionFlag(self.COND)

    @property
    def positive(self) -> bool:
        return bool(self.COND & ConditionFlag.POS)

    @property
    def zero(self) -> bool:
        return bool(self.COND & ConditionFlag.ZRO)

    @property
    def negative(self) -> bool:
        return bool(self.COND & ConditionFlag.NEG)

    # --- Display ---

    def display(self) -> str:
        """Format register state for trace / debugging."""
        gprs = ' '.join(f"R{i}={getattr(self, f'R{i}'):04X}" for i in range(8))
        flags = ''.join(
            c if self.COND & f else '.'
            for c, f in (('N', ConditionFlag.NEG),
                         ('Z', ConditionFlag.ZRO),
                         ('P', ConditionFlag.POS))
        )
        return f"PC={self.PC:04X} {gprs} COND=[{flags}]"

    def reset(self, pc_start: int = PC_START):
        """Power-on state: all zero, COND=Z, PC at the start address."""
        for reg in GENERAL_PURPOSE:
            setattr(self, reg.name, 0)
        self.PC = pc_start & WORD_MASK
        self.COND = int(ConditionFlag.ZRO)
