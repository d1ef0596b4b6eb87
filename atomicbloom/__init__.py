"""Thread-safe Bloom filters with MurmurHash3 hashing: bitset, bloom and murmur modules."""

__version__ = "1.0.0"
__all__ = ["bitset", "bloom", "murmur"]