"""
LC-3 Emulator - Console Device (stdin/stdout byte I/O)

The console is the only external resource the machine touches:
  - poll()  non-blocking "is a byte ready?" used by the KBSR read
  - getc()  blocking single-byte read used by the GETC / IN traps
  - putc()  single-byte write, write() for whole strings, flush()

Input sources, in order:
  1. bytes queued with inject_input() (tests, scripted sessions)
  2. the input stream. If it has a real file descriptor, readiness is
     checked with a zero-timeout select() and bytes are read straight
     from the descriptor, so nothing is held in a Python-side buffer
     select() cannot see. In-memory streams (io.BytesIO) never block
     and are read directly; end of stream means "not ready".

Everything written is also appended to tx_buffer for inspection.
"""

import io
import os
import select
import sys
from collections import deque
from typing import BinaryIO, Optional, Union

from ..errors import ConsoleIOError


def _std_stream(stream) -> BinaryIO:
    return getattr(stream, 'buffer', stream)


class ConsoleDevice:
    """Byte-oriented console for the emulated machine."""

    def __init__(self, input_stream: Optional[BinaryIO] = None,
                 output_stream: Optional[BinaryIO] = None):
        self._input = input_stream if input_stream is not None else _std_stream(sys.stdin)
        self._output = output_stream if output_stream is not None else _std_stream(sys.stdout)
        self._fd = self._input_fd(self._input)

        self._rx_queue: deque = deque()
        self.tx_buffer: bytearray = bytearray()

    @staticmethod
    def _input_fd(stream) -> Optional[int]:
        try:
            return stream.fileno()
        except (AttributeError, io.UnsupportedOperation):
            return None

    # --- Input ---

    def inject_input(self, data: Union[bytes, str]):
        """Queue bytes ahead of the input stream."""
        if isinstance(data, str):
            data = data.encode('latin-1')
        self._rx_queue.extend(data)

    @property
    def has_rx_data(self) -> bool:
        return bool(self._rx_queue)

    def poll(self) -> Optional[int]:
        """Return the next input byte if one is ready, else None. Never blocks."""
        if self._rx_queue:
            return self._rx_queue.popleft()
        if self._fd is not None and not self._fd_ready():
            return None
        return self._read_byte()

    def getc(self) -> int:
        """Block until one input byte arrives.

        Raises ConsoleIOError if the input is exhausted: there is no
        other way to unblock a GETC/IN trap.
        """
        if self._rx_queue:
            return self._rx_queue.popleft()
        byte = self._read_byte()
        if byte is None:
            raise ConsoleIOError("console input closed while waiting for a character")
        return byte

    def _fd_ready(self) -> bool:
        try:
            readable, _, _ = select.select([self._fd], [], [], 0)
        except (OSError, ValueError) as e:
            raise ConsoleIOError(f"console poll failed: {e}") from e
        return bool(readable)

    def _read_byte(self) -> Optional[int]:
        try:
            if self._fd is not None:
                data = os.read(self._fd, 1)
            else:
                data = self._input.read(1)
        except OSError as e:
            raise ConsoleIOError(f"console read failed: {e}") from e
        return data[0] if data else None

    # --- Output ---

    def putc(self, byte: int):
        self._write(bytes([byte & 0xFF]))

    def write(self, text: Union[str, bytes]):
        if isinstance(text, str):
            text = text.encode('latin-1', errors='replace')
        self._write(text)

    def _write(self, data: bytes):
        try:
            self._output.write(data)
        except (OSError, ValueError) as e:
            raise ConsoleIOError(f"console write failed: {e}") from e
        self.tx_buffer.extend(data)

    def flush(self):
        try:
            self._output.flush()
        except (OSError, ValueError) as e:
            raise ConsoleIOError(f"console flush failed: {e}") from e

    @property
    def output(self) -> bytes:
        """All bytes written since construction / last reset."""
        return bytes(self.tx_buffer)

    def reset(self):
        self._rx_queue.clear()
        self.tx_buffer.clear()
