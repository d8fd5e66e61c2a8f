"""
LC-3 Emulator - Main Emulator Class

Integrates:
  - Register file (cpu/regs.py)
  - Memory + keyboard registers (mem/memory.py, periph/keyboard.py)
  - Opcode decoder + handlers (cpu/decoder.py, cpu/ops.py)
  - Trap routines (traps.py)
  - Console (periph/console.py)

Execution model, one instruction per step():
  1. Fetch word at PC, PC += 1
  2. Decode opcode (high nibble)
  3. Dispatch to handler -> registers, memory, flags, traps
  4. Check the running flag (cleared only by the HALT trap)

run() repeats step() and checks breakpoints and the step budget
before each instruction.

Termination reasons:
  - HALT:     HALT trap executed
  - ILLEGAL:  decode fault (opcode, trap vector or register)
  - BREAK:    breakpoint address hit
  - TIMEOUT:  max_steps exceeded

The running flag lives on the instance, so separate emulators (and
repeated runs of one emulator after reset()) never share state.
"""

import logging
from collections import deque
from enum import Enum
from typing import Deque, Optional, Set

from .config import EmulatorConfig, WORD_MASK
from .cpu.decoder import decode
from .cpu.ops import HANDLERS
from .cpu.regs import Register, Registers
from .errors import DecodeFault
from .loader import load_image
from .mem.memory import Memory
from .periph.console import ConsoleDevice
from .periph.keyboard import KeyboardDevice
from .traps import TrapTable

log = logging.getLogger(__name__)


class StopReason(Enum):
    HALT = 'HALT'
    ILLEGAL = 'ILLEGAL'
    BREAK = 'BREAK'
    TIMEOUT = 'TIMEOUT'


class LC3Emulator:
    """LC-3 virtual machine.

    Usage:
        emu = LC3Emulator(console=ConsoleDevice(io.BytesIO(), out))
        emu.load_image('hello.obj')
        reason = emu.run()
        print(out.getvalue())        # b"Hello\\nHALT\\n"
    """

    def __init__(self, config: Optional[EmulatorConfig] = None,
                 console: Optional[ConsoleDevice] = None):
        self.config = config or EmulatorConfig()

        # Core components
        self.regs = Registers(self.config.pc_start)
        self.mem = Memory()

        # Devices
        self.console = console or ConsoleDevice()
        self.keyboard = KeyboardDevice(self.console)
        self.keyboard.register(self.mem)

        self.traps = TrapTable(self)

        # Run state
        self.running = True
        self.steps = 0
        self.fault: Optional[DecodeFault] = None

        self._breakpoints: Set[int] = set()
        self._break_pc: Optional[int] = None      # BREAK reported here, not yet executed
        self._trace = self.config.trace
        self._trace_output: Deque[str] = deque(maxlen=self.config.trace_depth)

    # ══════════════════════════════════════════════
    # Loading
    # ══════════════════════════════════════════════

    def load_image(self, source) -> int:
        """Load a program image (path, bytes or stream). Returns the origin.

        PC is left at config.pc_start; the image origin does not move it.
        """
        origin, _ = load_image(self.mem, source)
        return origin

    # ══════════════════════════════════════════════
    # Execution
    # ══════════════════════════════════════════════

    def step(self) -> Optional[StopReason]:
        """Execute one instruction. Returns StopReason if stopped, else None."""
        if not self.running:
            return StopReason.ILLEGAL if self.fault is not None else StopReason.HALT

        pc = self.regs.PC
        instr = self.mem.read(pc)
        self._break_pc = None
        self.regs.update(Register.PC, pc + 1)

        try:
            opcode = decode(instr)
            if self._trace:
                line = f"x{pc:04X}: {instr:04X} {opcode.name:5s} {self.regs.display()}"
                self._trace_output.append(line)
                log.debug(line)
            HANDLERS[opcode](self, instr)
        except DecodeFault as e:
            e.pc = pc
            self.fault = e
            self.running = False
            log.error("Decode fault: unknown %s 0x%02X at x%04X (instr %04X)",
                      e.kind, e.value, pc, instr)
            return StopReason.ILLEGAL

        self.steps += 1
        if not self.running:
            return StopReason.HALT
        return None

    def run(self, max_steps: Optional[int] = None) -> StopReason:
        """Run until HALT, a decode fault, a breakpoint or the step budget.

        Only the breakpoint that produced the last BREAK is stepped over,
        so calling run() again resumes from it. A breakpoint on the entry
        PC of a fresh run fires before anything executes.
        """
        if max_steps is None:
            max_steps = self.config.max_steps

        executed = 0
        while self.running:
            if max_steps is not None and executed >= max_steps:
                return StopReason.TIMEOUT
            pc = self.regs.PC
            if pc in self._breakpoints and pc != self._break_pc:
                self._break_pc = pc
                return StopReason.BREAK

            reason = self.step()
            executed += 1
            if reason is not None:
                return reason

        return StopReason.ILLEGAL if self.fault is not None else StopReason.HALT

    # ══════════════════════════════════════════════
    # Breakpoint API
    # ══════════════════════════════════════════════

    def add_breakpoint(self, addr: int):
        """Add a breakpoint. run() stops before executing this address."""
        self._breakpoints.add(addr & WORD_MASK)

    def remove_breakpoint(self, addr: int):
        self._breakpoints.discard(addr & WORD_MASK)

    def clear_breakpoints(self):
        self._breakpoints.clear()

    # ══════════════════════════════════════════════
    # Trace / Debug
    # ══════════════════════════════════════════════

    def enable_trace(self, enable: bool = True):
        """Record one line per executed instruction (last trace_depth kept)."""
        self._trace = enable

    def get_trace(self) -> str:
        return '\n'.join(self._trace_output)

    def clear_trace(self):
        self._trace_output.clear()

    def reset(self, clear_memory: bool = False):
        """Back to the initial Running state: registers reset, COND=Z,
        PC=config.pc_start. Memory is kept unless clear_memory is set."""
        self.regs.reset(self.config.pc_start)
        if clear_memory:
            self.mem.clear()
        self.running = True
        self.steps = 0
        self.fault = None
        self._break_pc = None
        self._trace_output.clear()
