"""A fixed-size bit set that is safe to share between threads."""

from __future__ import annotations

import struct
import threading
from typing import Any, BinaryIO, Iterable

_MASK64 = 0xFFFFFFFFFFFFFFFF
_HEADER = struct.Struct(">QQ")
_WORD = struct.Struct(">q")


def _to_signed(word: int) -> int:
    return word - (1 << 64) if word >> 63 else word


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _read_exact(stream: BinaryIO, n: int) -> bytes:
    chunk = stream.read(n)
    if chunk is None or len(chunk) < n:
        raise EOFError("unexpected end of bit set data")
    return chunk


class AtomicBitSet:
    """Bit set of ``size`` bits stored in 64-bit words.

    Mutations take an internal lock; bits outside ``size`` are ignored on
    set and read as clear.
    """

    __hash__ = None  # type: ignore[assignment]

    def __init__(self, size: int) -> None:
        if size < 0:
            raise ValueError(f"bit set size must be non-negative, got {size}")
        self.size = size
        self._words = [0] * ((size + 63) // 64)
        self._lock = threading.Lock()

    @classmethod
    def _from_raw(cls, size: int, words: Iterable[int]) -> AtomicBitSet:
        bitset = cls(0)
        bitset.size = size
        bitset._words = [word & _MASK64 for word in words]
        return bitset

    def set(self, i: int) -> None:
        """Set bit ``i``; indices outside the set are ignored."""
        if not 0 <= i < self.size:
            return
        index, pos = divmod(i, 64)
        with self._lock:
            self._words[index] |= 1 << pos

    def test(self, i: int) -> bool:
        """Whether bit ``i`` is set; indices outside the set read as clear."""
        if not 0 <= i < self.size:
            return False
        index, pos = divmod(i, 64)
        return bool(self._words[index] >> pos & 1)

    def clear_all(self) -> None:
        """Reset every bit to zero."""
        with self._lock:
            self._words = [0] * len(self._words)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AtomicBitSet):
            return NotImplemented
        return self.size == other.size and list(self._words) == list(other._words)

    def union_update(self, other: AtomicBitSet) -> None:
        """OR the bits of ``other`` into this set."""
        theirs = list(other._words)
        if len(theirs) < len(self._words):
            raise ValueError(
                f"bit set too small for union: {len(theirs)} words < {len(self._words)}"
            )
        with self._lock:
            self._words = [mine | their for mine, their in zip(self._words, theirs)]

    def count(self) -> int:
        """Number of set bits."""
        return sum(bin(word).count("1") for word in list(self._words))

    def words(self) -> list[int]:
        """The storage words as signed 64-bit integers."""
        return [_to_signed(word) for word in list(self._words)]

    def write_to(self, stream: BinaryIO) -> int:
        """Write the binary form to ``stream`` and return the number of bytes written.

        The form is: size (u64), word count (u64), then each word (i64), all big-endian.
        """
        words = self.words()
        payload = _HEADER.pack(self.size, len(words)) + b"".join(
            _WORD.pack(word) for word in words
        )
        stream.write(payload)
        return len(payload)

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready mapping with ``size`` and ``data`` keys."""
        return {"size": self.size, "data": self.words()}


def bitset_from_words(data: Iterable[int], size: int) -> AtomicBitSet:
    """A bit set of ``size`` bits initialised from ``data``; surplus words are dropped."""
    bitset = AtomicBitSet(size)
    capacity = len(bitset._words)
    for index, word in enumerate(data):
        if index >= capacity:
            break
        bitset._words[index] = word & _MASK64
    return bitset


def read_bitset(stream: BinaryIO) -> AtomicBitSet:
    """Read a bit set in the form written by :meth:`AtomicBitSet.write_to`."""
    size, count = _HEADER.unpack(_read_exact(stream, _HEADER.size))
    words = [
        _WORD.unpack(_read_exact(stream, _WORD.size))[0] for _ in range(count)
    ]
    return AtomicBitSet._from_raw(size, words)


def bitset_from_dict(obj: Any) -> AtomicBitSet:
    """Build a bit set from the mapping produced by :meth:`AtomicBitSet.to_dict`."""
    if not isinstance(obj, dict):
        raise ValueError("invalid bit set object in JSON")
    size = obj.get("size")
    if not _is_number(size):
        raise ValueError("invalid size type in JSON")
    if size < 0:
        raise ValueError("invalid size value in JSON")
    data = obj.get("data")
    if not isinstance(data, list):
        raise ValueError("invalid data type in JSON")
    if not all(_is_number(value) for value in data):
        raise ValueError("invalid data element type in JSON")
    return AtomicBitSet._from_raw(int(size), (int(value) for value in data))