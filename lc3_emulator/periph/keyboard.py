"""
LC-3 Emulator - Keyboard Status / Data Registers

Register map:
  $FE00  KBSR  - bit 15 set when a key is ready
  $FE02  KBDR  - low byte holds the key (zero-extended)

Every read of KBSR polls the console. A ready byte sets KBSR=$8000 and
latches the byte into KBDR; otherwise KBSR is cleared to 0. The poll
never blocks, so a program spinning on KBSR keeps executing while no
key is pending.

KBDR reads are plain memory reads of the latched value.
"""

import logging

from ..config import KBDR, KBSR, KBSR_READY

log = logging.getLogger(__name__)


class KeyboardDevice:
    """Memory-mapped keyboard backed by a ConsoleDevice."""

    def __init__(self, console):
        self.console = console
        self._memory = None

    def register(self, memory):
        """Wire the KBSR read handler into the memory system."""
        self._memory = memory
        memory.register_io_handler(KBSR, self._poll)

    def _poll(self, addr: int):
        byte = self.console.poll()
        if byte is not None:
            self._memory.write(KBSR, KBSR_READY)
            self._memory.write(KBDR, byte & 0xFF)
            log.debug("KBSR poll: key 0x%02X ready", byte)
        else:
            self._memory.write(KBSR, 0)
