#!/usr/bin/env python3
"""
lc3emu - LC-3 Virtual Machine CLI

Usage:
    python lc3emu.py <image.obj> [--pc-start x3000] [--max-steps N]
                                 [--trace] [--verbose] [--log-file PATH]

The image is a big-endian .obj file: 2-byte origin followed by program
words. Execution starts at --pc-start (default x3000).

When stdin is a terminal it is switched to non-canonical, no-echo mode
for the run so GETC and the keyboard registers see single keystrokes,
and restored on every exit path.

Exit codes:
    0    HALT
    1    load error, decode fault, or step budget exhausted
    2    console I/O failure
    130  interrupted (Ctrl+C)
"""

import argparse
import logging
import os
import sys
from contextlib import contextmanager

from lc3_emulator import (
    ConsoleDevice, ConsoleIOError, EmulatorConfig, ImageLoadError,
    LC3Emulator, StopReason, __version__,
)
from lc3_emulator.config import PC_START
from lc3_emulator.log_setup import setup_logging

log = logging.getLogger("lc3_emulator.cli")


def parse_int_arg(value: str) -> int:
    """Parse an integer that may be hex (0x... or LC-3 style x...) or decimal."""
    value = value.strip()
    if value[:2].lower() == "0x":
        return int(value, 16)
    if value[:1] in ("x", "X"):
        return int(value[1:], 16)
    return int(value)


def _address_arg(value: str) -> int:
    try:
        addr = parse_int_arg(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid address: {value!r}")
    if not 0 <= addr <= 0xFFFF:
        raise argparse.ArgumentTypeError(f"address out of range: {value!r}")
    return addr


def _count_arg(value: str) -> int:
    try:
        count = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid count: {value!r}")
    if count < 0:
        raise argparse.ArgumentTypeError(f"count must be >= 0: {value!r}")
    return count


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lc3emu",
        description="LC-3 virtual machine: run a .obj program image",
    )
    parser.add_argument("image", help="Program image (.obj, big-endian)")
    parser.add_argument("--pc-start", type=_address_arg, default=PC_START,
                        help="Initial PC (default: x3000)")
    parser.add_argument("--max-steps", type=_count_arg, default=None,
                        help="Stop after N instructions (default: unlimited)")
    parser.add_argument("--trace", action="store_true",
                        help="Log every executed instruction at DEBUG (use with --log-file or -vv)")
    parser.add_argument("--verbose", "-v", action="count", default=0,
                        help="More log output on stderr (-v info, -vv debug)")
    parser.add_argument("--log-file", default=None,
                        help="Write a full debug log to this file")
    parser.add_argument("--version", action="version",
                        version=f"lc3emu {__version__}")
    return parser


@contextmanager
def raw_terminal(stream=None):
    """Put a TTY into non-canonical, no-echo mode; restore on exit.

    No-op when the stream is not a terminal (pipes, files) or termios
    is unavailable.
    """
    stream = stream if stream is not None else sys.stdin
    try:
        fd = stream.fileno()
    except (AttributeError, ValueError, OSError):
        yield
        return
    if not os.isatty(fd):
        yield
        return

    import termios

    old_settings = termios.tcgetattr(fd)
    new_settings = termios.tcgetattr(fd)
    new_settings[3] &= ~(termios.ICANON | termios.ECHO)
    new_settings[6][termios.VMIN] = 1
    new_settings[6][termios.VTIME] = 0
    termios.tcsetattr(fd, termios.TCSANOW, new_settings)
    try:
        yield
    finally:
        termios.tcsetattr(fd, termios.TCSADRAIN, old_settings)


def _console_level(verbose: int) -> int:
    if verbose >= 2:
        return logging.DEBUG
    if verbose == 1:
        return logging.INFO
    return logging.WARNING


def main(argv=None, console: ConsoleDevice = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(console_level=_console_level(args.verbose), log_file=args.log_file)

    config = EmulatorConfig(pc_start=args.pc_start, max_steps=args.max_steps,
                            trace=args.trace)
    emu = LC3Emulator(config, console=console)

    try:
        origin = emu.load_image(args.image)
    except ImageLoadError as e:
        log.error("Load error: %s", e)
        return 1
    log.info("Image %s origin x%04X, PC x%04X", args.image, origin, emu.regs.PC)

    try:
        with raw_terminal():
            reason = emu.run()
    except ConsoleIOError as e:
        log.error("Console I/O error: %s", e)
        return 2
    except KeyboardInterrupt:
        log.warning("Interrupted at x%04X after %d step(s)", emu.regs.PC, emu.steps)
        return 130

    if reason is StopReason.HALT:
        log.info("Halted after %d step(s)", emu.steps)
        return 0
    if reason is StopReason.TIMEOUT:
        log.warning("Step budget exhausted at x%04X (%d steps)", emu.regs.PC, emu.steps)
        return 1
    log.error("Stopped: %s (%s)", reason.value, emu.fault)
    return 1


def main_entry():
    sys.exit(main())


if __name__ == "__main__":
    main_entry()
