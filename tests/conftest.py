"""
Shared fixtures for the LC-3 emulator tests.

Programs are hand-assembled 16-bit words loaded at x3000 (the default
PC). The console reads from / writes to in-memory streams so no test
touches the real terminal.
"""

import io

import pytest

from lc3_emulator import ConsoleDevice, LC3Emulator


def make_emu(stdin: bytes = b"", config=None) -> LC3Emulator:
    console = ConsoleDevice(io.BytesIO(stdin), io.BytesIO())
    return LC3Emulator(config, console=console)


def load(emu: LC3Emulator, words, addr: int = 0x3000):
    emu.mem.load_words(words, addr)


@pytest.fixture
def emu():
    return make_emu()
