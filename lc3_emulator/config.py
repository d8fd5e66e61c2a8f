"""
LC-3 Emulator - Machine Constants and Run Configuration

Address space:
  $0000-$2FFF  Trap vector table / OS area (unused by this emulator)
  $3000-$FDFF  User program space (PC_START is the conventional entry)
  $FE00        KBSR - keyboard status register (bit 15 = key ready)
  $FE02        KBDR - keyboard data register (low byte = last key)

All words are 16-bit unsigned. Arithmetic wraps modulo 2^16.
"""

from dataclasses import dataclass
from typing import Optional


# =============================================================================
#  WORD / ADDRESS SPACE
# =============================================================================
WORD_BITS = 16
WORD_MASK = 0xFFFF
SIGN_BIT = 0x8000
MEMORY_MAX = 1 << 16       # 65536 words

# Conventional load / start address for user programs
PC_START = 0x3000

# Image origins outside this window fall back to PC_START
USER_SPACE_START = 0x3000
USER_SPACE_END = 0xFDFF


# =============================================================================
#  MEMORY-MAPPED REGISTERS
# =============================================================================
KBSR = 0xFE00              # Keyboard status
KBDR = 0xFE02              # Keyboard data
KBSR_READY = 0x8000        # KBSR bit 15


# =============================================================================
#  CONSOLE TEXT
# =============================================================================
HALT_MESSAGE = "HALT"
IN_PROMPT = "Enter a character: "


@dataclass
class EmulatorConfig:
    """Per-run settings. CLI flags override the defaults."""
    pc_start: int = PC_START
    max_steps: Optional[int] = None     # None = run until HALT / fault
    trace: bool = False
    trace_depth: int = 10_000          # trace lines kept in memory
    halt_message: str = HALT_MESSAGE
    in_prompt: str = IN_PROMPT

    def __post_init__(self):
        self.pc_start &= WORD_MASK
        if self.max_steps is not None and self.max_steps < 0:
            raise ValueError(f"max_steps must be >= 0, got {self.max_steps}")
        if self.trace_depth < 0:
            raise ValueError(f"trace_depth must be >= 0, got {self.trace_depth}")
