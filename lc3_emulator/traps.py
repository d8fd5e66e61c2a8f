"""
LC-3 Emulator - Trap Routines (emulated OS services)

Vector table:
  x20  GETC   read one char into R0 (no echo)
  x21  OUT    write R0[7:0]
  x22  PUTS   write string at R0, one char per word, 0-terminated
  x23  IN     prompt, then read one char into R0
  x24  PUTSP  write string at R0, two chars per word (low byte first)
  x25  HALT   print halt notice, stop the machine

The routines run natively instead of jumping through the trap vector
table in memory, so R7 is not modified. GETC and IN write R0 without
touching COND. Output is flushed when each routine completes.
"""

import logging
from enum import IntEnum

from .config import WORD_MASK
from .cpu.regs import Register
from .errors import DecodeFault

log = logging.getLogger(__name__)


class TrapVector(IntEnum):
    GETC = 0x20
    OUT = 0x21
    PUTS = 0x22
    IN = 0x23
    PUTSP = 0x24
    HALT = 0x25

    @classmethod
    def from_vector(cls, vector: int) -> "TrapVector":
        try:
            return cls(vector)
        except ValueError:
            raise DecodeFault('trap vector', vector) from None


class TrapTable:
    """Trap layer bound to one emulator's registers, memory and console."""

    def __init__(self, emu):
        self.emu = emu
        self._routines = {
            TrapVector.GETC:  self.trap_getc,
            TrapVector.OUT:   self.trap_out,
            TrapVector.PUTS:  self.trap_puts,
            TrapVector.IN:    self.trap_in,
            TrapVector.PUTSP: self.trap_putsp,
            TrapVector.HALT:  self.trap_halt,
        }

    def dispatch(self, vector: int):
        """Run the routine for `vector`. Unknown vectors raise DecodeFault."""
        trap = TrapVector.from_vector(vector)
        log.debug("TRAP x%02X (%s)", vector, trap.name)
        self._routines[trap]()
        self.emu.console.flush()

    # --- Routines ---

    def trap_getc(self):
        self.emu.regs.update(Register.R0, self.emu.console.getc())

    def trap_out(self):
        self.emu.console.putc(self.emu.regs.get(Register.R0))

    def trap_puts(self):
        mem = self.emu.mem
        addr = self.emu.regs.get(Register.R0)
        word = mem.read(addr)
        while word:
            self.emu.console.putc(word)
            addr = (addr + 1) & WORD_MASK
            word = mem.read(addr)

    def trap_in(self):
        console = self.emu.console
        console.write(self.emu.config.in_prompt)
        console.flush()
        self.trap_getc()

    def trap_putsp(self):
        mem = self.emu.mem
        console = self.emu.console
        addr = self.emu.regs.get(Register.R0)
        word = mem.read(addr)
        while word:
            console.putc(word & 0xFF)
            high = word >> 8
            if high:
                console.putc(high)
            addr = (addr + 1) & WORD_MASK
            word = mem.read(addr)

    def trap_halt(self):
        self.emu.console.write(self.emu.config.halt_message + "\n")
        self.emu.running = False
        log.info("HALT at x%04X", (self.emu.regs.PC - 1) & WORD_MASK)
