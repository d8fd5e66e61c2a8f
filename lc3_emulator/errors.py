"""
LC-3 Emulator - Exception Hierarchy

Every error is terminal for the run:
  ImageLoadError   malformed/truncated program image (before execution)
  DecodeFault      opcode, trap vector or register index not recognized
  ConsoleIOError   console read/write failure or input exhausted
"""

from typing import Optional


class LC3Error(Exception):
    """Base for all emulator errors."""
    pass


class ImageLoadError(LC3Error):
    pass


class DecodeFault(LC3Error):
    """Raised when a raw field has no matching variant.

    `kind` names the field ('opcode', 'trap vector', 'register'),
    `value` is the raw integer, `pc` the address of the faulting
    instruction (filled in by the execution loop).
    """

    def __init__(self, kind: str, value: int, pc: Optional[int] = None):
        super().__init__(kind, value)
        self.kind = kind
        self.value = value
        self.pc = pc

    def __str__(self):
        where = f" at x{self.pc:04X}" if self.pc is not None else ""
        return f"Unknown {self.kind} 0x{self.value:02X}{where}"


class ConsoleIOError(LC3Error):
    pass
