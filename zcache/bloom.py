"""An array of small Bloom filters sharing one bit table."""

from __future__ import annotations

import math
from typing import Tuple

from zcache.utils import hash_128_to_64, hash_int

_MAX_HASHES = 30


def _bits_to_bytes(bits: int) -> int:
    return (bits + 7) >> 3


def _find_optimal_params(element_count: int, fp_prob: float) -> Tuple[int, int]:
    min_m = math.inf
    min_k = 0
    for k in range(1, _MAX_HASHES):
        curr_m = (-float(k) * element_count) / math.log(1 - fp_prob ** (1.0 / k))
        if curr_m < min_m:
            min_m = curr_m
            min_k = k
    return min_k, int(min_m)


class BloomFilter:
    """A fixed number of Bloom filters, each addressed by an index.

    Each filter uses ``num_hashes`` hash functions, each mapping into its own
    table of ``hash_table_bit_size`` bits. A fresh filter reports every key
    as absent.
    """

    def __init__(
        self, num_filters: int, num_hashes: int, hash_table_bit_size: int
    ) -> None:
        if num_filters <= 0 or num_hashes <= 0 or hash_table_bit_size <= 0:
            raise ValueError("invalid bloom filter params")
        self._num_filters = num_filters
        self._hash_table_bit_size = hash_table_bit_size
        self._filter_byte_size = _bits_to_bytes(num_hashes * hash_table_bit_size)
        self._seeds = [hash_int(i) for i in range(num_hashes)]
        self._bits = bytearray(self.byte_size())

    @staticmethod
    def make_bloom_filter(
        num_filters: int, element_count: int, fp_prob: float
    ) -> "BloomFilter":
        """Build filters sized for ``element_count`` keys at ``fp_prob``."""
        num_hashes, table_size = _find_optimal_params(element_count, fp_prob)
        bits_per_filter = table_size // num_hashes
        return BloomFilter(num_filters, num_hashes, bits_per_filter)

    @staticmethod
    def get_optimal_params(element_count: int, fp_prob: float) -> Tuple[int, int]:
        """Return the best (hash count, total table bits) for the inputs."""
        return _find_optimal_params(element_count, fp_prob)

    def _filter_start(self, idx: int) -> int:
        if not 0 <= idx < self._num_filters:
            raise IndexError(f"filter index {idx} out of range")
        return idx * self._filter_byte_size

    def _bit_positions(self, key: int):
        first_bit = 0
        for seed in self._seeds:
            yield first_bit + hash_128_to_64(key, seed) % self._hash_table_bit_size
            first_bit += self._hash_table_bit_size

    def set(self, idx: int, key: int) -> None:
        """Record ``key`` in filter ``idx``."""
        start = self._filter_start(idx)
        for bit in self._bit_positions(key):
            self._bits[start + (bit >> 3)] |= 1 << (bit & 7)

    def could_exist(self, idx: int, key: int) -> bool:
        """Return False if ``key`` is certainly absent from filter ``idx``."""
        start = self._filter_start(idx)
        return all(
            self._bits[start + (bit >> 3)] & (1 << (bit & 7))
            for bit in self._bit_positions(key)
        )

    def clear(self, idx: int) -> None:
        """Empty filter ``idx``."""
        start = self._filter_start(idx)
        self._bits[start:start + self._filter_byte_size] = bytes(
            self._filter_byte_size
        )

    def reset(self) -> None:
        """Empty every filter."""
        self._bits[:] = bytes(len(self._bits))

    def num_filters(self) -> int:
        return self._num_filters

    def num_hashes(self) -> int:
        return len(self._seeds)

    def num_bits_per_filter(self) -> int:
        return self._filter_byte_size * 8

    def byte_size(self) -> int:
        """Total bytes across all filters."""
        return self._num_filters * self._filter_byte_size