"""
LC-3 Emulator - Program Image Loader

Image format (.obj):
  bytes 0-1   origin address, big-endian
  bytes 2..   program words, big-endian, loaded contiguously from origin

No header, length or checksum. Loading stops at end of stream or at the
top of the address space, whichever comes first.

Origin handling: an origin inside user program space ($3000-$FDFF) is
used as the load address. Anything else (trap table / OS area, device
registers) is not a usable load address and the image is loaded at
PC_START instead.

Errors (ImageLoadError, fatal):
  - fewer than 2 bytes (no origin)
  - odd number of payload bytes (half a word)
  - unreadable file
"""

import logging
import struct
from pathlib import Path
from typing import BinaryIO, List, Tuple, Union

from .config import MEMORY_MAX, PC_START, USER_SPACE_END, USER_SPACE_START
from .errors import ImageLoadError

log = logging.getLogger(__name__)

ORIGIN_BYTES = 2


def resolve_origin(raw_origin: int) -> int:
    """Return the load address for a header origin."""
    if USER_SPACE_START <= raw_origin <= USER_SPACE_END:
        return raw_origin
    log.warning("Origin x%04X outside user space, loading at x%04X",
                raw_origin, PC_START)
    return PC_START


def parse_image(data: bytes) -> Tuple[int, List[int]]:
    """Split raw image bytes into (load address, words).

    Words past the end of the address space are dropped.
    """
    if len(data) < ORIGIN_BYTES:
        raise ImageLoadError(
            f"Image too short: {len(data)} byte(s), need a 2-byte origin")

    payload = data[ORIGIN_BYTES:]
    if len(payload) % 2:
        raise ImageLoadError(
            f"Image payload has odd length ({len(payload)} bytes)")

    (raw_origin,) = struct.unpack('>H', data[:ORIGIN_BYTES])
    origin = resolve_origin(raw_origin)

    total = len(payload) // 2
    count = min(total, MEMORY_MAX - origin)
    if count < total:
        log.warning("Image truncated: %d word(s) past xFFFF dropped", total - count)
    words = list(struct.unpack(f'>{count}H', payload[:count * 2]))
    return origin, words


def read_image(source: Union[str, Path, bytes, bytearray, BinaryIO]) -> bytes:
    """Read image bytes from a path, a bytes object or a binary stream."""
    if isinstance(source, (bytes, bytearray)):
        return bytes(source)
    try:
        if isinstance(source, (str, Path)):
            return Path(source).read_bytes()
        return source.read()
    except OSError as e:
        raise ImageLoadError(f"Cannot read image {source}: {e}") from e


def load_image(memory, source) -> Tuple[int, int]:
    """Load an image into memory. Returns (load address, words loaded)."""
    origin, words = parse_image(read_image(source))
    count = memory.load_words(words, origin)
    if count:
        log.info("Loaded %d word(s) at x%04X-x%04X", count, origin, origin + count - 1)
    else:
        log.warning("Image has no program words (origin x%04X)", origin)
    return origin, count
