import random
import struct

import pytest

from atomicbloom.murmur import Digest128, fmix64, murmur3_128, sum256

BIGDATA = bytes(range(256)) * 4


def _reference(data):
    return murmur3_128(data) + murmur3_128(data + b"\x01")


def test_hash_basic_matches_streamed_murmur():
    for length in range(0, 1001):
        data = BIGDATA[:length]
        assert Digest128().sum256(data) == _reference(data), length


@pytest.mark.parametrize("seed", [1, 2, 3])
def test_hash_random_matches_streamed_murmur(seed):
    rng = random.Random(seed)
    for length in range(0, 1001):
        data = rng.randbytes(length)
        assert sum256(data) == _reference(data), length


def test_empty_input_hashes_to_zero():
    assert murmur3_128(b"") == (0, 0)


def test_fmix64_of_zero_is_zero():
    assert fmix64(0) == 0


def test_fmix64_stays_within_64_bits():
    for value in (1, 2**63, 2**64 - 1, 0x1234567890ABCDEF):
        assert 0 <= fmix64(value) < 2**64


def test_sum256_resets_state_between_calls():
    digest = Digest128()
    first = digest.sum256(b"hello world")
    digest.sum256(b"something else entirely, long enough")
    assert digest.sum256(b"hello world") == first


def test_sum256_accepts_bytearray_and_memoryview():
    expected = sum256(b"abcdefghijklmnopq")
    assert sum256(bytearray(b"abcdefghijklmnopq")) == expected
    assert sum256(memoryview(b"abcdefghijklmnopq")) == expected


def test_bmix_equals_bmix_words_per_block():
    data = BIGDATA[:48]
    by_blocks = Digest128()
    by_blocks.bmix(data)
    by_words = Digest128()
    for k1, k2 in struct.iter_unpack("<QQ", data):
        by_words.bmix_words(k1, k2)
    assert (by_blocks.h1, by_blocks.h2) == (by_words.h1, by_words.h2)


def test_bmix_ignores_trailing_partial_block():
    full = Digest128()
    full.bmix(BIGDATA[:32])
    partial = Digest128()
    partial.bmix(BIGDATA[:45])
    assert (full.h1, full.h2) == (partial.h1, partial.h2)


@pytest.mark.parametrize("tail_length", range(0, 15))
def test_sum128_padding_equals_appended_one(tail_length):
    tail = BIGDATA[100:100 + tail_length]
    digest = Digest128()
    digest.bmix(BIGDATA[:32])
    padded = digest.sum128(True, 32 + tail_length + 1, tail)
    appended = digest.sum128(False, 32 + tail_length + 1, tail + b"\x01")
    assert padded == appended


def test_sum128_does_not_change_state():
    digest = Digest128()
    digest.bmix(BIGDATA[:16])
    before = (digest.h1, digest.h2)
    digest.sum128(False, 20, BIGDATA[16:20])
    assert (digest.h1, digest.h2) == before


@pytest.mark.parametrize("length", [15, 31, 47])
def test_sum256_full_block_after_append(length):
    data = BIGDATA[:length]
    assert sum256(data)[2:] == murmur3_128(data + b"\x01")


def test_different_inputs_give_different_hashes():
    assert sum256(b"Bess") != sum256(b"Jane")