# LC-3 Emulator - 16-bit LC-3 virtual machine
#
# Loads a big-endian .obj program image into 64K words of memory and runs
# it with a fetch/decode/dispatch loop. Console I/O goes through the
# GETC/OUT/PUTS/IN/PUTSP/HALT trap routines and the memory-mapped
# keyboard registers (KBSR $FE00, KBDR $FE02).

from .config import EmulatorConfig, PC_START
from .emu import LC3Emulator, StopReason
from .errors import ConsoleIOError, DecodeFault, ImageLoadError, LC3Error
from .periph.console import ConsoleDevice

__version__ = "0.1.0"

__all__ = [
    "ConsoleDevice",
    "ConsoleIOError",
    "DecodeFault",
    "EmulatorConfig",
    "ImageLoadError",
    "LC3Emulator",
    "LC3Error",
    "PC_START",
    "StopReason",
]
