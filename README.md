# atomicbloom

Bloom filters that can be shared between threads. Bits are held in 64-bit
words, and every change to them is made under a lock. Items are hashed with
128-bit MurmurHash3 (x64 variant, seed 0).

## Install

```
pip install atomicbloom
```

## Quick start

```python
from atomicbloom.bloom import BloomFilter, new_with_estimates

f = new_with_estimates(1000, 0.001)   # about 1000 items, 0.1% false positives
f.add(b"Love")
assert f.test(b"Love")
assert b"Love" in f
assert not f.test(b"is")               # probably

seen_before = f.test_and_add(b"in")    # False the first time; b"in" is now added
```

A filter built directly takes a bit count `m` and a number of hash functions
`k`. Both are raised to at least 1:

```python
f = BloomFilter(1000, 4)
f.m, f.k, f.cap                        # (1000, 4, 1000)
```

Items may be `bytes`, `bytearray`, `memoryview` or `str`. Strings are hashed
as UTF-8. Any other type raises `TypeError`.

## Operations

All of these live in `atomicbloom.bloom`.

- `add(data)` adds an item and returns the filter, so calls can be chained.
  `test(data)` and `data in f` check whether an item is probably present.
- `test_and_add(data)` sets all of the item's bits. `test_or_add(data)` sets
  only the bits that are missing. Both return whether the item was probably
  present before the call.
- `base_hashes(data)` returns the four 64-bit base hashes of an item.
  `add_hash(h)` and `test_hash(h)` take those hashes instead of the item.
- `location(h, i)` gives the `i`-th 64-bit location built from base hashes `h`.
  `locations(data, k)` gives the first `k` of them for an item. They do not
  depend on any filter size. `test_locations(locs)` checks them against a
  filter, each taken modulo `m`.
- `merge(other)` ORs another filter into this one. It raises `ValueError` if
  `m` or `k` differ.
- `copy()` makes a deep copy. `clear_all()` empties the filter and returns it.
- `approximated_size()` estimates how many distinct items were added.
- `f.bitset` is the underlying `AtomicBitSet`. Filters compare equal with `==`
  when `m`, `k` and all bits match.
- `estimate_parameters(n, p)` returns `(m, k)` for `n` items at a
  false-positive rate of `p`. It raises `ValueError` unless `n > 0` and
  `0 < p < 1`.
- `new_with_estimates(n, fp)` builds a filter sized that way.
- `estimate_false_positive_rate(m, k, n)` measures the false-positive rate.
  It adds `n` four-byte big-endian integers to a fresh filter, then tests
  100,000 integers that were not added.
- `from_words(data, k)` builds a filter of `len(data) * 64` bits from 64-bit
  words. `from_words_with_m(data, m, k)` takes an explicit bit count and drops
  any surplus words.

## Serialisation

```python
from atomicbloom.bloom import from_bytes, from_json, read_from

data = f.to_bytes()          # big-endian: m, k, bitset size, word count, words
g = from_bytes(data)
assert g == f

text = f.to_json()           # {"m": ..., "k": ..., "b": {"size": ..., "data": [...]}}
assert from_json(text) == f

with open("filter.bin", "wb") as out:
    f.write_to(out)          # returns the number of bytes written
with open("filter.bin", "rb") as src:
    h = read_from(src)
```

Malformed JSON, or JSON with values of the wrong type, raises `ValueError`.
Truncated binary data raises `EOFError`.

## Lower-level pieces

`atomicbloom.bitset.AtomicBitSet(size)` is a fixed-size bit set with these
members:

- `set(i)` and `test(i)`. Indices outside the set are ignored on `set` and
  read as clear on `test`.
- `clear_all()` and `count()`.
- `union_update(other)`.
- `words()`, which returns the words as signed 64-bit integers.
- `write_to(stream)` and `to_dict()`.

The module also has `bitset_from_words(data, size)`, `read_bitset(stream)`
and `bitset_from_dict(obj)`.

`atomicbloom.murmur` provides the following:

- `murmur3_128(data)`, the 128-bit hash as two 64-bit integers.
- `sum256(data)`, four 64-bit values: the hash of `data`, then the hash of
  `data` followed by a `0x01` byte.
- `fmix64(k)`.
- The `Digest128` class. It holds the running hash state.

## What it does not do

This is a library only. It has no command-line tool, and it does not keep
filters anywhere by itself. To persist a filter, write it out with
`write_to`, `to_bytes` or `to_json` and store the result yourself.