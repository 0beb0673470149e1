"""Buffers, hashing helpers, bloom filters, workload distributions and an in-memory zoned device."""

__version__ = "0.1.0"
__all__ = ["buffer", "utils", "types", "bloom", "rand", "device"]