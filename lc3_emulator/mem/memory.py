"""
LC-3 Emulator - 64K Word Memory with Memory-Mapped I/O

Memory is a flat array of 65536 16-bit words. Addresses and values are
masked to 16 bits on every access, so no access can fall outside the
array and its length never changes.

Device registers (KBSR, KBDR) are modelled by read handlers: a handler
registered for an address runs before the raw read and may update the
backing words (the keyboard poll writes KBSR/KBDR, then the read returns
the just-updated value).
"""

from array import array
from typing import Callable, Dict, Iterable

from ..config import MEMORY_MAX, WORD_MASK


class Memory:
    """Flat word-addressable LC-3 memory."""

    def __init__(self):
        self._mem = array('H', bytes(2 * MEMORY_MAX))

        # addr -> fn(addr), called before the raw read of addr
        self._io_read_handlers: Dict[int, Callable[[int], None]] = {}

    def __len__(self) -> int:
        return len(self._mem)

    # --- Core read/write ---

    def read(self, addr: int) -> int:
        """Read a word. Device registers poll their device first."""
        addr &= WORD_MASK
        handler = self._io_read_handlers.get(addr)
        if handler is not None:
            handler(addr)
        return self._mem[addr]

    def write(self, addr: int, value: int):
        self._mem[addr & WORD_MASK] = value & WORD_MASK

    def peek(self, addr: int) -> int:
        """Raw read that never triggers a device poll (debug / trace)."""
        return self._mem[addr & WORD_MASK]

    # --- Bulk load ---

    def load_words(self, words: Iterable[int], base_addr: int) -> int:
        """Store words sequentially from base_addr. Returns the count.

        Stops at the top of the address space instead of wrapping.
        """
        addr = base_addr & WORD_MASK
        count = 0
        for word in words:
            if addr >= MEMORY_MAX:
                break
            self._mem[addr] = word & WORD_MASK
            addr += 1
            count += 1
        return count

    def clear(self):
        for i in range(MEMORY_MAX):
            self._mem[i] = 0

    # --- I/O handler registration ---

    def register_io_handler(self, addr: int, read_fn: Callable[[int], None]):
        """Run read_fn(addr) before every read of addr."""
        self._io_read_handlers[addr & WORD_MASK] = read_fn

    # --- Hex dump ---

    def hexdump(self, start: int, length: int = 64) -> str:
        """Word dump, 8 words per line, with the low-byte characters."""
        lines = []
        for offset in range(0, length, 8):
            addr = (start + offset) & WORD_MASK
            words = [self._mem[(addr + i) & WORD_MASK] for i in range(8)]
            hex_words = ' '.join(f'{w:04X}' for w in words)
            low = [w & 0xFF for w in words]
            text = ''.join(
                chr(c) if 0x20 <= c < 0x7F else '.'
                for c in low
            )
            lines.append(f'x{addr:04X}  {hex_words}  {text}')
        return '\n'.join(lines)
