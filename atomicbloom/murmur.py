"""MurmurHash3 (x64, 128-bit, seed 0) and the four-value digest used by the filter."""

from __future__ import annotations

import struct

C1_128 = 0x87C37B91114253D5
C2_128 = 0x4CF5AD432745937F
BLOCK_SIZE = 16

_MASK64 = 0xFFFFFFFFFFFFFFFF
_BLOCK = struct.Struct("<QQ")


def _rotl64(x: int, r: int) -> int:
    return ((x << r) | (x >> (64 - r))) & _MASK64


def _mix_k1(k1: int) -> int:
    k1 = (k1 * C1_128) & _MASK64
    k1 = _rotl64(k1, 31)
    return (k1 * C2_128) & _MASK64


def _mix_k2(k2: int) -> int:
    k2 = (k2 * C2_128) & _MASK64
    k2 = _rotl64(k2, 33)
    return (k2 * C1_128) & _MASK64


def fmix64(k: int) -> int:
    """Final avalanche step of MurmurHash3 on a 64-bit value."""
    k &= _MASK64
    k ^= k >> 33
    k = (k * 0xFF51AFD7ED558CCD) & _MASK64
    k ^= k >> 33
    k = (k * 0xC4CEB9FE1A85EC53) & _MASK64
    k ^= k >> 33
    return k


class Digest128:
    """Running state of a 128-bit MurmurHash3 computation."""

    def __init__(self) -> None:
        self.h1 = 0
        self.h2 = 0

    def bmix(self, data: bytes) -> None:
        """Mix every complete 16-byte block of ``data`` into the state."""
        data = bytes(data)
        whole = len(data) - len(data) % BLOCK_SIZE
        for k1, k2 in _BLOCK.iter_unpack(data[:whole]):
            self.bmix_words(k1, k2)

    def bmix_words(self, k1: int, k2: int) -> None:
        """Mix two little-endian 64-bit words (one block) into the state."""
        h1, h2 = self.h1, self.h2

        h1 ^= _mix_k1(k1 & _MASK64)
        h1 = _rotl64(h1, 27)
        h1 = (h1 + h2) & _MASK64
        h1 = (h1 * 5 + 0x52DCE729) & _MASK64

        h2 ^= _mix_k2(k2 & _MASK64)
        h2 = _rotl64(h2, 31)
        h2 = (h2 + h1) & _MASK64
        h2 = (h2 * 5 + 0x38495AB5) & _MASK64

        self.h1, self.h2 = h1, h2

    def sum128(self, pad_tail: bool, length: int, tail: bytes) -> tuple[int, int]:
        """Finish the hash over ``tail`` without changing the running state.

        ``length`` is the full length of the hashed input. With ``pad_tail``
        the tail is treated as if a byte of value 1 followed it.
        """
        tail = bytes(tail)[: len(tail) & 15]
        if pad_tail and len(tail) < 15:
            tail += b"\x01"

        h1, h2 = self.h1, self.h2
        if len(tail) > 8:
            h2 ^= _mix_k2(int.from_bytes(tail[8:], "little"))
        if tail:
            h1 ^= _mix_k1(int.from_bytes(tail[:8], "little"))

        h1 ^= length & _MASK64
        h2 ^= length & _MASK64

        h1 = (h1 + h2) & _MASK64
        h2 = (h2 + h1) & _MASK64

        h1 = fmix64(h1)
        h2 = fmix64(h2)

        h1 = (h1 + h2) & _MASK64
        h2 = (h2 + h1) & _MASK64
        return h1, h2

    def sum256(self, data: bytes) -> tuple[int, int, int, int]:
        """Four 64-bit values: the hash of ``data`` and of ``data`` followed by byte 1."""
        data = bytes(data)
        self.h1 = self.h2 = 0
        self.bmix(data)

        length = len(data)
        tail_length = length % BLOCK_SIZE
        tail = data[length - tail_length:]
        hash1, hash2 = self.sum128(False, length, tail)

        if tail_length + 1 == BLOCK_SIZE:
            word1 = int.from_bytes(tail[:8], "little")
            word2 = int.from_bytes(tail[8:15], "little") | (1 << 56)
            self.bmix_words(word1, word2)
            hash3, hash4 = self.sum128(False, length + 1, b"")
        else:
            hash3, hash4 = self.sum128(True, length + 1, tail)

        return hash1, hash2, hash3, hash4


def murmur3_128(data: bytes) -> tuple[int, int]:
    """MurmurHash3 x64 128-bit hash of ``data`` with seed 0, as two 64-bit values."""
    data = bytes(data)
    digest = Digest128()
    digest.bmix(data)
    tail_length = len(data) % BLOCK_SIZE
    return digest.sum128(False, len(data), data[len(data) - tail_length:])


def sum256(data: bytes) -> tuple[int, int, int, int]:
    """Four 64-bit hash values of ``data`` computed on a fresh digest."""
    return Digest128().sum256(data)