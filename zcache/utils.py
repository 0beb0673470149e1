"""Alignment, hashing, checksum and timing helpers."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import TypeVar, Union

_MASK32 = (1 << 32) - 1
_MASK64 = (1 << 64) - 1
_K_MUL = 0x9DDFEA08EB382D69
TAG_SEED = 23

T = TypeVar("T")


def pow_two_align(size: int, boundary: int) -> int:
    """Round ``size`` up to a multiple of the power-of-two ``boundary``."""
    return (size + (boundary - 1)) & ~(boundary - 1)


def malloc_slot_size(size: int) -> int:
    """Estimate the slot size an allocator uses for ``size`` bytes."""
    if size <= 8:
        return 8
    if size <= 128:
        return pow_two_align(size, 16)
    if size <= 512:
        return pow_two_align(size, 64)
    if size <= 4096:
        return pow_two_align(size, 256)
    return pow_two_align(size, 4096)


def between(x: T, a: T, b: T) -> bool:
    """Return True if ``a <= x <= b``."""
    return a <= x <= b


def between_strict(x: T, a: T, b: T) -> bool:
    """Return True if ``a < x < b``."""
    return a < x < b


def hash_int(v: int) -> int:
    """Hash a 32-bit integer to a 64-bit value."""
    v &= _MASK32
    h = v
    for shift in (8, 16, 24):
        h = ((h << 5) - h + ((v >> shift) & 0xFF)) & _MASK64
    return h


def hash_128_to_64(upper: int, lower: int) -> int:
    """Murmur-inspired mix of two 64-bit values into one."""
    a = ((lower ^ upper) * _K_MUL) & _MASK64
    a ^= a >> 47
    b = ((upper ^ a) * _K_MUL) & _MASK64
    b ^= b >> 47
    return (b * _K_MUL) & _MASK64


def simple_checksum(data: Union[bytes, bytearray, memoryview]) -> int:
    """Return a shift-and-add 32-bit checksum of ``data``."""
    total = 0
    for byte in bytes(data):
        total = ((total << 3) + byte) & _MASK32
    return total


def rt_assert(condition: bool, message: str) -> None:
    """Raise RuntimeError if ``condition`` is false."""
    if not condition:
        raise RuntimeError(f"Assertion failed: {message}")


def rdtsc() -> int:
    """Return a monotonic cycle-like counter in nanoseconds."""
    return time.perf_counter_ns()


def to_sec(cycles: float, freq_ghz: float) -> float:
    """Convert cycles at ``freq_ghz`` to seconds."""
    return cycles / (freq_ghz * 1_000_000_000)


def to_msec(cycles: float, freq_ghz: float) -> float:
    """Convert cycles at ``freq_ghz`` to milliseconds."""
    return cycles / (freq_ghz * 1_000_000)


def to_usec(cycles: float, freq_ghz: float) -> float:
    """Convert cycles at ``freq_ghz`` to microseconds."""
    return cycles / (freq_ghz * 1000)


def to_nsec(cycles: float, freq_ghz: float) -> float:
    """Convert cycles at ``freq_ghz`` to nanoseconds."""
    return cycles / freq_ghz


def ms_to_cycles(ms: float, freq_ghz: float) -> int:
    """Convert milliseconds to cycles at ``freq_ghz``."""
    return int(ms * 1000 * 1000 * freq_ghz)


def us_to_cycles(us: float, freq_ghz: float) -> int:
    """Convert microseconds to cycles at ``freq_ghz``."""
    return int(us * 1000 * freq_ghz)


def ns_to_cycles(ns: float, freq_ghz: float) -> int:
    """Convert nanoseconds to cycles at ``freq_ghz``."""
    return int(ns * freq_ghz)


def create_tag(hk: int, tag_length: int) -> int:
    """Derive a ``tag_length``-bit tag from a hashed key."""
    return hash_128_to_64(hk, TAG_SEED) % (1 << tag_length)


class ChronoTimer:
    """Wall-clock stopwatch measuring time since creation or last reset."""

    def __init__(self) -> None:
        self._start = 0
        self.reset()

    def reset(self) -> None:
        self._start = time.perf_counter_ns()

    def get_sec(self) -> float:
        return self.get_ns() / 1e9

    def get_ms(self) -> float:
        return self.get_ns() / 1e6

    def get_us(self) -> float:
        return self.get_ns() / 1e3

    def get_ns(self) -> int:
        return time.perf_counter_ns() - self._start


@dataclass
class TscTimer:
    """Accumulating timer over repeated start/stop intervals."""

    start_tsc: int = 0
    tsc_sum: int = 0
    num_calls: int = 0

    def start(self) -> None:
        self.start_tsc = rdtsc()

    def stop(self) -> None:
        self.tsc_sum += rdtsc() - self.start_tsc
        self.num_calls += 1

    def reset(self) -> None:
        self.start_tsc = 0
        self.tsc_sum = 0
        self.num_calls = 0

    def avg_cycles(self) -> int:
        """Average cycles per interval; ZeroDivisionError if none recorded."""
        return self.tsc_sum // self.num_calls

    def avg_sec(self, freq_ghz: float) -> float:
        return to_sec(self.avg_cycles(), freq_ghz)

    def avg_usec(self, freq_ghz: float) -> float:
        return to_usec(self.avg_cycles(), freq_ghz)

    def avg_nsec(self, freq_ghz: float) -> float:
        return to_nsec(self.avg_cycles(), freq_ghz)