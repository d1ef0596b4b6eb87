"""Bloom filters backed by a thread-safe bit set."""

from __future__ import annotations

import io
import json
import math
import struct
from typing import Any, BinaryIO, Iterable, Sequence, Union

from atomicbloom.bitset import (
    AtomicBitSet,
    bitset_from_dict,
    bitset_from_words,
    read_bitset,
)
from atomicbloom.murmur import sum256

_MASK32 = 0xFFFFFFFF
_MASK64 = 0xFFFFFFFFFFFFFFFF
_HEADER = struct.Struct(">QQ")
_UINT32 = struct.Struct(">I")
_FP_ROUNDS = 100_000

Data = Union[bytes, bytearray, memoryview, str]
Hashes = Sequence[int]


def _as_bytes(data: Data) -> bytes:
    if isinstance(data, str):
        return data.encode("utf-8")
    if isinstance(data, (bytes, bytearray, memoryview)):
        return bytes(data)
    raise TypeError(f"expected bytes or str, got {type(data).__name__}")


def base_hashes(data: Data) -> tuple[int, int, int, int]:
    """The four 64-bit base hash values from which every location is derived."""
    return sum256(_as_bytes(data))


def location(h: Hashes, i: int) -> int:
    """The ``i``-th hashed location (a 64-bit value) built from base hashes ``h``."""
    return (h[i % 2] + i * h[2 + ((i + i % 2) % 4) // 2]) & _MASK64


def locations(data: Data, k: int) -> list[int]:
    """The first ``k`` hashed locations of ``data``, independent of any filter size."""
    h = base_hashes(data)
    return [location(h, i) for i in range(k)]


def estimate_parameters(n: int, p: float) -> tuple[int, int]:
    """Bit count ``m`` and hash count ``k`` for ``n`` items at false positive rate ``p``."""
    if n <= 0:
        raise ValueError(f"expected item count must be positive, got {n}")
    if not 0 < p < 1:
        raise ValueError(f"false positive rate must be in (0, 1), got {p}")
    m = math.ceil(-1 * n * math.log(p) / math.log(2) ** 2)
    k = math.ceil(math.log(2) * m / n)
    return m, max(1, k)


class BloomFilter:
    """A Bloom filter with ``m`` bits and ``k`` hash functions.

    Items may be ``bytes``-like or ``str`` (hashed as UTF-8).
    """

    __hash__ = None  # type: ignore[assignment]

    def __init__(self, m: int, k: int) -> None:
        self.m = max(1, m)
        self.k = max(1, k)
        self._bits = AtomicBitSet(self.m)

    @classmethod
    def _from_parts(cls, m: int, k: int, bits: AtomicBitSet) -> BloomFilter:
        bloom = cls.__new__(cls)
        bloom.m = m
        bloom.k = k
        bloom._bits = bits
        return bloom

    @property
    def cap(self) -> int:
        """The capacity in bits."""
        return self.m

    @property
    def bitset(self) -> AtomicBitSet:
        """The underlying bit set."""
        return self._bits

    def _location(self, h: Hashes, i: int) -> int:
        return location(h, i) % self.m

    def _locations(self, h: Hashes) -> Iterable[int]:
        return (self._location(h, i) for i in range(self.k))

    def add(self, data: Data) -> BloomFilter:
        """Add ``data``; returns the filter for chaining."""
        return self.add_hash(base_hashes(data))

    def add_hash(self, h: Hashes) -> BloomFilter:
        """Add an item given by its precomputed base hashes; returns the filter."""
        for loc in self._locations(h):
            self._bits.set(loc)
        return self

    def merge(self, other: BloomFilter) -> None:
        """OR the bits of ``other`` into this filter; both must share ``m`` and ``k``."""
        if self.m != other.m:
            raise ValueError(f"m's don't match: {self.m} != {other.m}")
        if self.k != other.k:
            raise ValueError(f"k's don't match: {self.k} != {other.k}")
        self._bits.union_update(other._bits)

    def copy(self) -> BloomFilter:
        """A deep copy of the filter."""
        duplicate = BloomFilter(self.m, self.k)
        duplicate._bits = bitset_from_words(self._bits.words(), duplicate.m)
        return duplicate

    def test(self, data: Data) -> bool:
        """Whether ``data`` is probably in the filter."""
        return self.test_hash(base_hashes(data))

    def __contains__(self, data: Data) -> bool:
        return self.test(data)

    def test_hash(self, h: Hashes) -> bool:
        """Whether the item with base hashes ``h`` is probably in the filter."""
        return all(self._bits.test(loc) for loc in self._locations(h))

    def test_locations(self, locs: Iterable[int]) -> bool:
        """Whether every location (taken modulo ``m``) is set."""
        return all(self._bits.test(loc % self.m) for loc in locs)

    def test_and_add(self, data: Data) -> bool:
        """Add ``data`` unconditionally; return whether it was probably present before."""
        present = True
        for loc in self._locations(base_hashes(data)):
            if not self._bits.test(loc):
                present = False
            self._bits.set(loc)
        return present

    def test_or_add(self, data: Data) -> bool:
        """Set only the missing bits of ``data``; return whether it was probably present."""
        present = True
        for loc in self._locations(base_hashes(data)):
            if not self._bits.test(loc):
                present = False
                self._bits.set(loc)
        return present

    def clear_all(self) -> BloomFilter:
        """Clear every bit; returns the filter."""
        self._bits.clear_all()
        return self

    def approximated_size(self) -> int:
        """Estimate of the number of distinct items added."""
        m = float(self.m)
        k = float(self.k)
        x = float(self._bits.count())
        if m == 0 or k == 0 or m == x:
            if m == x and m > 0 and k > 0:
                return int(m / k)
            return 0
        return int(-m / k * math.log(1 - x / m))

    def to_json(self) -> str:
        """JSON text with ``m``, ``k`` and the bit set under ``b``."""
        return json.dumps(
            {"m": self.m, "k": self.k, "b": self._bits.to_dict()},
            separators=(",", ":"),
        )

    def write_to(self, stream: BinaryIO) -> int:
        """Write the binary form to ``stream``; returns the number of bytes written."""
        header = _HEADER.pack(self.m, self.k)
        stream.write(header)
        return len(header) + self._bits.write_to(stream)

    def to_bytes(self) -> bytes:
        """The binary form as bytes."""
        buffer = io.BytesIO()
        self.write_to(buffer)
        return buffer.getvalue()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BloomFilter):
            return NotImplemented
        return self.m == other.m and self.k == other.k and self._bits == other._bits

    def __repr__(self) -> str:
        return f"BloomFilter(m={self.m}, k={self.k})"


def from_words(data: Sequence[int], k: int) -> BloomFilter:
    """A filter of ``len(data) * 64`` bits initialised from 64-bit words."""
    data = list(data)
    return from_words_with_m(data, len(data) * 64, k)


def from_words_with_m(data: Iterable[int], m: int, k: int) -> BloomFilter:
    """A filter of ``m`` bits and ``k`` hashes initialised from 64-bit words."""
    return BloomFilter._from_parts(m, max(1, k), bitset_from_words(data, m))


def new_with_estimates(n: int, fp: float) -> BloomFilter:
    """A filter sized for about ``n`` items at false positive rate ``fp``."""
    m, k = estimate_parameters(n, fp)
    return BloomFilter(m, k)


def estimate_false_positive_rate(m: int, k: int, n: int) -> float:
    """Empirical false positive rate of an ``m``/``k`` filter holding ``n`` items."""
    bloom = BloomFilter(m, k)
    n32 = n & _MASK32
    for i in range(n32):
        bloom.add(_UINT32.pack(i))
    false_positives = sum(
        bloom.test(_UINT32.pack((i + n32 + 1) & _MASK32)) for i in range(_FP_ROUNDS)
    )
    return false_positives / _FP_ROUNDS


def _json_uint(obj: dict[str, Any], key: str) -> int:
    value = obj.get(key)
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"invalid {key} value in JSON: {value!r}")
    return value


def from_json(text: Union[str, bytes]) -> BloomFilter:
    """Build a filter from the text produced by :meth:`BloomFilter.to_json`."""
    obj = json.loads(text)
    if not isinstance(obj, dict):
        raise ValueError("invalid Bloom filter object in JSON")
    m = _json_uint(obj, "m")
    k = _json_uint(obj, "k")
    raw_bits = obj.get("b")
    bits = AtomicBitSet(0) if raw_bits is None else bitset_from_dict(raw_bits)
    return BloomFilter._from_parts(m, k, bits)


def read_from(stream: BinaryIO) -> BloomFilter:
    """Read a filter in the form written by :meth:`BloomFilter.write_to`."""
    header = stream.read(_HEADER.size)
    if header is None or len(header) < _HEADER.size:
        raise EOFError("unexpected end of Bloom filter data")
    m, k = _HEADER.unpack(header)
    return BloomFilter._from_parts(m, k, read_bitset(stream))


def from_bytes(data: bytes) -> BloomFilter:
    """Decode a filter from the bytes produced by :meth:`BloomFilter.to_bytes`."""
    return read_from(io.BytesIO(data))