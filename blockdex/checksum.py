"""Weak rolling checksum and strong content hash.

This module provides the two checksums every index entry carries:

- The weak checksum is the rsync-style rolling checksum. It is cheap to
  compute and can be updated in O(1) when a fixed-length window slides by
  one byte, which makes it a fast pre-filter for block matching.
- The strong checksum is a SHA-1 digest and is the authoritative content
  identifier for blocks, files and directories.

The weak accumulators are deliberately left unmasked: ``a`` and ``b`` are
plain Python integers and are packed as ``(b << 16) | a`` without truncating
either half to 16 bits. Indexes produced elsewhere depend on this exact
arithmetic, so it must not be "fixed" here.

Example:
    >>> from blockdex.checksum import weak_start, weak_checksum, strong
    >>> a, b = weak_start(b"hello")
    >>> weak_checksum(a, b)
    103219732
    >>> strong(b"hello").hex()
    'aaf4c61ddcc5e8a2dabede0f3b482cd9aea9434d'
"""

import hashlib
from typing import Tuple

# Block boundary and rolling window length, in bytes
BLOCKSIZE = 8192


def weak_start(buffer: bytes) -> Tuple[int, int]:
    """Seed the weak checksum accumulators for a buffer.

    For a buffer of length L, ``a`` is the sum of all bytes and ``b`` weights
    each byte by its distance from the end of the buffer (L - i).

    Args:
        buffer: Bytes to checksum.

    Returns:
        The ``(a, b)`` accumulator pair.
    """
    length = len(buffer)
    a = 0
    b = 0
    for i, byte in enumerate(buffer):
        a += byte
        b += (length - i) * byte
    return a, b


def weak_checksum(a: int, b: int) -> int:
    """Pack the accumulators into a single weak checksum value."""
    return (b << 16) | a


def weak_roll(
    a: int, b: int, removed_byte: int, new_byte: int, block_size: int = BLOCKSIZE
) -> Tuple[int, int]:
    """Slide the checksum window forward by one byte.

    ``b`` is updated from the already-updated ``a``.

    Args:
        a: Current ``a`` accumulator.
        b: Current ``b`` accumulator.
        removed_byte: Byte leaving the front of the window.
        new_byte: Byte entering the back of the window.
        block_size: Window length. Defaults to BLOCKSIZE.

    Returns:
        The updated ``(a, b)`` pair.
    """
    a -= removed_byte - new_byte
    b -= removed_byte * block_size - a
    return a, b


def new_strong():
    """Return a fresh streaming strong-hash accumulator.

    The accumulator supports ``update(chunk)`` any number of times followed
    by ``digest()``, so a whole-file hash can be built alongside per-block
    hashes without re-reading the file.
    """
    return hashlib.sha1()


def strong(data: bytes) -> bytes:
    """Compute the strong (SHA-1) digest of a byte string."""
    return hashlib.sha1(data).digest()


class RollingChecksum:
    """Weak checksum over a window that can be rolled one byte at a time.

    Attributes:
        a: The byte-sum accumulator.
        b: The weighted-sum accumulator.
        block_size: Window length used when rolling.
    """

    __slots__ = ("a", "b", "block_size")

    def __init__(self, window: bytes, block_size: int = BLOCKSIZE) -> None:
        self.a, self.b = weak_start(window)
        self.block_size = block_size

    def roll(self, removed_byte: int, new_byte: int) -> None:
        self.a, self.b = weak_roll(
            self.a, self.b, removed_byte, new_byte, self.block_size
        )

    @property
    def checksum(self) -> int:
        return weak_checksum(self.a, self.b)
