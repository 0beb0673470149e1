"""Block devices with aligned IO, chunked writes and zone management."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Optional, Union

from zcache.buffer import Buffer
from zcache.utils import pow_two_align

BytesLike = Union[bytes, bytearray, memoryview]

_MIN_WRITE_SIZE = 4096
_DEFAULT_ALIGNMENT = 1


class DeviceError(Exception):
    """Raised when the device fails to carry out an IO operation."""


class Device(ABC):
    """A device addressed by byte offsets, split into equal zones.

    Subclasses supply the raw operations; this class enforces alignment and
    bounds, splits large writes and handles unaligned reads.
    """

    def __init__(
        self,
        size: int,
        io_align_size: int = _DEFAULT_ALIGNMENT,
        max_write_size: int = 0,
        num_zones: int = 0,
        zone_size: int = 0,
        zone_cap_size: int = 0,
    ) -> None:
        if io_align_size <= 0:
            raise ValueError(f"Invalid ioAlignSize {io_align_size}")
        if max_write_size % io_align_size != 0:
            raise ValueError(
                f"Invalid max write size {max_write_size} "
                f"ioAlignSize {io_align_size}"
            )
        self._size = size
        self._io_alignment_size = io_align_size
        self._max_write_size = max_write_size
        self._num_zones = num_zones
        self._zone_size = zone_size
        self._zone_cap_size = zone_cap_size

    @property
    def size(self) -> int:
        """Total usable size; all IO lies within ``[0, size)``."""
        return self._size

    @property
    def io_alignment_size(self) -> int:
        return self._io_alignment_size

    @property
    def max_write_size(self) -> int:
        return self._max_write_size

    @property
    def zone_size(self) -> int:
        return self._zone_size

    @property
    def zone_cap_size(self) -> int:
        return self._zone_cap_size

    @property
    def num_zones(self) -> int:
        return self._num_zones

    def _address_limit(self) -> int:
        return self._num_zones * self._zone_size

    def _check_bounds(self, offset: int, size: int) -> None:
        if offset < 0 or offset + size > self._address_limit():
            raise ValueError(
                f"IO at offset {offset:#x} of size {size:#x} exceeds "
                f"{self._num_zones} zones of size {self._zone_size:#x}"
            )

    def _check_aligned(self, what: str, value: int) -> None:
        if value % self._io_alignment_size:
            raise ValueError(
                f"{what} {value:#x} is not aligned to {self._io_alignment_size}"
            )

    def io_aligned_size(self, size: int) -> int:
        """Round ``size`` up to the IO alignment."""
        return pow_two_align(size, self._io_alignment_size)

    def make_io_buffer(self, size: int) -> Buffer:
        """Return a zeroed buffer of at least ``size`` bytes, IO aligned."""
        return Buffer(
            size=self.io_aligned_size(size), alignment=self._io_alignment_size
        )

    def write(self, offset: int, buffer: Union[Buffer, BytesLike]) -> bool:
        """Write ``buffer`` at ``offset``, split into chunks of the max write size.

        Writes smaller than 4096 bytes are refused. The result is that of the
        last chunk written.
        """
        data = memoryview(bytes(buffer))
        size = len(data)
        self._check_bounds(offset, size)
        if size < _MIN_WRITE_SIZE:
            return False
        max_write = self._max_write_size or size
        result = True
        for start in range(0, size, max_write):
            chunk = data[start:start + max_write]
            chunk_offset = offset + start
            self._check_aligned("offset", chunk_offset)
            self._check_aligned("write size", len(chunk))
            result = self._write_impl(chunk_offset, chunk)
        return result

    def read_aligned(self, offset: int, size: int) -> bytes:
        """Read ``size`` bytes at ``offset``; both must be IO aligned."""
        self._check_aligned("offset", offset)
        self._check_aligned("read size", size)
        self._check_bounds(offset, size)
        data = self._read_impl(offset, size)
        if data is None or len(data) != size:
            raise DeviceError(f"read of {size:#x} bytes at {offset:#x} failed")
        return bytes(data)

    def read(self, offset: int, size: int) -> Buffer:
        """Read ``size`` bytes at any ``offset`` into a buffer.

        The read is widened to aligned bounds and the buffer is then trimmed
        to the requested window.
        """
        self._check_bounds(offset, size)
        mask = self._io_alignment_size - 1
        read_offset = offset & ~mask
        prefix = offset & mask
        read_size = self.io_aligned_size(prefix + size)
        buffer = self.make_io_buffer(read_size)
        buffer.copy_from(0, self.read_aligned(read_offset, read_size))
        buffer.trim_start(prefix)
        buffer.shrink(size)
        return buffer

    def flush(self) -> None:
        """Make everything written so far durable."""
        self._flush_impl()

    def reset(self, offset: int, size: int) -> bool:
        """Reset the zones covering ``[offset, offset + size)``."""
        return self._reset_impl(offset, size)

    def finish(self, offset: int, size: int) -> bool:
        """Mark the zones covering ``[offset, offset + size)`` full."""
        return self._finish_impl(offset, size)

    @abstractmethod
    def _reset_impl(self, offset: int, size: int) -> bool:
        """Reset zones; return False on failure."""

    @abstractmethod
    def _finish_impl(self, offset: int, size: int) -> bool:
        """Finish zones; return False on failure."""

    @abstractmethod
    def _write_impl(self, offset: int, data: memoryview) -> bool:
        """Write ``data`` at ``offset``; return False on failure."""

    @abstractmethod
    def _read_impl(self, offset: int, size: int) -> Optional[bytes]:
        """Read ``size`` bytes at ``offset``; return None on failure."""

    @abstractmethod
    def _flush_impl(self) -> None:
        """Persist pending writes."""


class MemoryZonedDevice(Device):
    """A zoned device held in memory.

    Each zone is written sequentially at its write pointer and accepts at
    most ``zone_cap_size`` bytes; finishing a zone makes it full and
    resetting it rewinds the write pointer and clears its data.
    """

    def __init__(
        self,
        num_zones: int,
        zone_size: int,
        zone_cap_size: Optional[int] = None,
        io_align_size: int = 4096,
        max_write_size: int = 0,
    ) -> None:
        if num_zones <= 0:
            raise ValueError("a zoned device needs at least one zone")
        if zone_size <= 0:
            raise ValueError("zone size must be positive")
        cap = zone_size if zone_cap_size is None else zone_cap_size
        if not 0 < cap <= zone_size:
            raise ValueError("zone capacity must be in (0, zone size]")
        if io_align_size > 0 and (
            zone_size % io_align_size or cap % io_align_size
        ):
            raise ValueError("zone size and capacity must be IO aligned")
        super().__init__(
            num_zones * cap,
            io_align_size,
            max_write_size or cap,
            num_zones,
            zone_size,
            cap,
        )
        self._storage = bytearray(num_zones * zone_size)
        self._write_pointers: List[int] = [0] * num_zones

    def write_pointer(self, zone: int) -> int:
        """Return the number of bytes written into ``zone``."""
        return self._write_pointers[zone]

    def _zones_in(self, offset: int, size: int) -> Optional[range]:
        if offset < 0 or size <= 0 or offset % self.zone_size:
            return None
        first = offset // self.zone_size
        last = (offset + size - 1) // self.zone_size
        if last >= self.num_zones:
            return None
        return range(first, last + 1)

    def _finish_impl(self, offset: int, size: int) -> bool:
        zones = self._zones_in(offset, size)
        if zones is None:
            return False
        for zone in zones:
            self._write_pointers[zone] = self.zone_cap_size
        return True

    def _reset_impl(self, offset: int, size: int) -> bool:
        if not self._finish_impl(offset, size):
            return False
        for zone in self._zones_in(offset, size):
            start = zone * self.zone_size
            self._storage[start:start + self.zone_size] = bytes(self.zone_size)
            self._write_pointers[zone] = 0
        return True

    def _write_impl(self, offset: int, data: memoryview) -> bool:
        zone, position = divmod(offset, self.zone_size)
        if zone >= self.num_zones:
            return False
        if position != self._write_pointers[zone]:
            return False
        if position + len(data) > self.zone_cap_size:
            return False
        self._storage[offset:offset + len(data)] = data
        self._write_pointers[zone] += len(data)
        return True

    def _read_impl(self, offset: int, size: int) -> Optional[bytes]:
        if offset < 0 or offset + size > len(self._storage):
            return None
        return bytes(self._storage[offset:offset + size])

    def _flush_impl(self) -> None:
        # Memory holds every completed write; there is nothing pending.
        return None