"""Random number generators and skewed sampling distributions."""

from __future__ import annotations

import random
import threading
from itertools import accumulate
from typing import List, Sequence

from zcache.utils import rdtsc

_MASK48 = (1 << 48) - 1
_MASK64 = (1 << 64) - 1
_SIZE_MAX = _MASK64
_MULTIPLIER = 0x5DEECE66D
_ADDEND = 0xB


def narrow_cast(value: float, low: int, high: int) -> int:
    """Truncate ``value`` to an integer, clamped to ``[low, high]``."""
    if value > high:
        return high
    if value < low:
        return low
    return int(value)


class ZipfTableDistribution:
    """Zipf distribution over ``[1, n]`` drawn from a precomputed table."""

    def __init__(self, n: int, q: float = 1.0) -> None:
        if n < 1:
            raise ValueError("zipf distribution needs at least one item")
        self._n = n
        self._q = q
        weights = [0.0] + [float(i) ** -q for i in range(1, n + 1)]
        self._cum_weights = list(accumulate(weights))
        self._population = range(n + 1)

    def __call__(self, rng: random.Random) -> int:
        return rng.choices(self._population, cum_weights=self._cum_weights)[0]

    def s(self) -> float:
        """The exponent the distribution was built with."""
        return self._q

    def min(self) -> int:
        return 1

    def max(self) -> int:
        return self._n


class FastDiscreteDistribution:
    """Two-level sampler over ``[left, right]``.

    The input weights are cut into ``num_buckets`` buckets of equal weight;
    a draw picks a bucket uniformly and then an object uniformly within it.
    """

    def __init__(
        self,
        left: int,
        right: int,
        sizes: Sequence[int],
        probs: Sequence[float],
        num_buckets: int = 2048,
    ) -> None:
        if right < left:
            raise ValueError("right must not be below left")
        if num_buckets <= 0:
            raise ValueError("num_buckets must be positive")
        sizes = list(sizes)
        probs = list(probs)
        total_weight = sum(probs)
        total_objects = float(sum(sizes))
        if total_weight <= 0:
            raise ValueError("total weight must be positive")
        if total_objects <= 0:
            raise ValueError("total number of objects must be positive")
        self._left = left
        self._right = right
        self._bucket_weight = total_weight / num_buckets
        self._scaling_factor = (right - left) / total_objects
        self._bucket_offsets: List[int] = [0]
        buckets: List[int] = []

        weight_seen = 0.0
        objects_seen = 0
        i = 0
        while i < len(probs):
            if weight_seen + probs[i] >= self._bucket_weight:
                bucket_pct = (self._bucket_weight - weight_seen) / probs[i]
                taken = narrow_cast(bucket_pct * sizes[i], 0, _SIZE_MAX)
                objects_seen = max(1, objects_seen + taken)
                sizes[i] -= taken
                probs[i] -= bucket_pct * probs[i]
                buckets.append(int(objects_seen * self._scaling_factor))
                self._bucket_offsets.append(self._bucket_offsets[-1] + objects_seen)
                weight_seen = 0.0
                objects_seen = 0
            else:
                weight_seen += probs[i]
                objects_seen += sizes[i]
                i += 1

        if not buckets:
            raise ValueError("distribution produced no buckets")
        self._buckets = buckets
        real_count = sum(buckets)
        if real_count > right - left:
            raise ValueError(
                f"bucketed object count {real_count} exceeds range {right - left}"
            )

    def __call__(self, rng: random.Random) -> int:
        bucket = rng.randint(0, len(self._buckets) - 1)
        upper = (self._buckets[bucket] - 1) & _MASK64
        in_bucket = rng.randint(0, upper)
        result = self._bucket_offsets[bucket] + in_bucket + self._left
        if result > self._right:
            raise RuntimeError(
                f"sample {result} exceeds right bound {self._right}"
            )
        return result

    def summarize(self) -> None:
        """Print the bucket weight and bucket offsets."""
        print(f"Bucket Weight: {self._bucket_weight:f}")
        print("Buckets:")
        for count, offset in enumerate(self._bucket_offsets):
            print(f"{count}: {offset}")


class FastRandom:
    """48-bit linear congruential generator."""

    def __init__(self, seed: int = 0) -> None:
        self._seed = 0
        self.set_seed0(seed)

    def _next_bits(self, bits: int) -> int:
        self._seed = (self._seed * _MULTIPLIER + _ADDEND) & _MASK48
        return self._seed >> (48 - bits)

    def next(self) -> int:
        """Return a 64-bit value."""
        high = self._next_bits(32)
        return ((high << 32) + self._next_bits(32)) & _MASK64

    def next_u32(self) -> int:
        return self._next_bits(32)

    def next_u16(self) -> int:
        return self._next_bits(16)

    def next_uniform(self) -> float:
        """Return a float in ``[0.0, 1.0)``."""
        high = self._next_bits(26)
        return ((high << 27) + self._next_bits(27)) / float(1 << 53)

    def next_char(self) -> int:
        """Return a byte value in ``[0, 255]``."""
        return self._next_bits(8) % 256

    def next_string(self, length: int) -> bytes:
        """Return ``length`` random bytes."""
        return bytes(self.next_char() for _ in range(length))

    @property
    def seed(self) -> int:
        return self._seed

    def set_seed(self, seed: int) -> None:
        """Set the raw generator state."""
        self._seed = seed & _MASK64

    def set_seed0(self, seed: int) -> None:
        """Set the state from a user seed, scrambled."""
        self._seed = (seed ^ _MULTIPLIER) & _MASK48

    def rand_number(self, low: int, high: int) -> int:
        """Return an integer in ``[low, high]``."""
        value = int(self.next_uniform() * (high - low + 1) + low)
        if not low <= value <= high:
            raise RuntimeError(f"{value} outside [{low}, {high}]")
        return value


class ZipfBucketRandom:
    """Zipf-ranked index spread uniformly over ``bucket_num`` slots."""

    def __init__(self, num: int, alpha: float, bucket_num: int) -> None:
        self._zipf = ZipfTableDistribution(num, alpha)
        self._bucket_num = bucket_num

    def __call__(self, rng: random.Random) -> int:
        bucket = rng.randint(0, self._bucket_num)
        index = self._zipf(rng) - 1
        return index * self._bucket_num + bucket


class SampleBucketRandom:
    """Pick a bucket by weight, then an item uniformly within it."""

    def __init__(self, weights: Sequence[float], nums: Sequence[int]) -> None:
        if len(weights) != len(nums):
            raise ValueError("weights and nums must have the same length")
        if not weights:
            raise ValueError("at least one bucket is required")
        total = sum(weights)
        if total <= 0:
            raise ValueError("total weight must be positive")
        self._nums = list(nums)
        pdf = [0.0] + [w / total for w in weights]
        self._cum_weights = list(accumulate(pdf))
        self._population = range(len(pdf))
        self._starts = [0, *accumulate(self._nums)]

    def __call__(self, rng: random.Random) -> int:
        bucket = rng.choices(self._population, cum_weights=self._cum_weights)[0] - 1
        inner = rng.getrandbits(64) % self._nums[bucket]
        return self._starts[bucket] + inner


_local = threading.local()


def _thread_random() -> FastRandom:
    generator = getattr(_local, "generator", None)
    if generator is None:
        generator = FastRandom(rdtsc())
        _local.generator = generator
    return generator


def rand32() -> int:
    """Return a 32-bit value from this thread's generator."""
    return _thread_random().next_u32()


def rand64() -> int:
    """Return a 64-bit value from this thread's generator."""
    return _thread_random().next()