"""Byte buffers with an adjustable window over their storage."""

from __future__ import annotations

from typing import Optional, Union

BytesLike = Union[bytes, bytearray, memoryview]

_COMPACT_LIMIT = 80


class Buffer:
    """An owned byte buffer whose valid data may be a window of its storage.

    A buffer built with neither ``data`` nor ``size`` is null: it holds no
    storage at all.
    """

    __hash__ = None  # mutable

    def __init__(
        self,
        data: Optional[BytesLike] = None,
        size: Optional[int] = None,
        alignment: int = 0,
    ) -> None:
        if data is not None:
            payload = bytes(data)
            if size is not None and size != len(payload):
                raise ValueError("size does not match the length of data")
            size = len(payload)
        else:
            payload = None
        if size is not None and size < 0:
            raise ValueError("buffer size must not be negative")
        if alignment < 0:
            raise ValueError("alignment must not be negative")
        if alignment and size is not None and size % alignment:
            raise ValueError(
                f"size {size} is not a multiple of alignment {alignment}"
            )
        self._alignment = alignment
        self._start = 0
        if size is None:
            self._storage: Optional[bytearray] = None
            self._size = 0
        else:
            self._storage = bytearray(payload) if payload is not None else bytearray(size)
            self._size = size

    def view(self) -> memoryview:
        """Return a read-only view of the valid data."""
        return self.data().toreadonly()

    def is_null(self) -> bool:
        """Return True if the buffer holds no storage."""
        return self._storage is None

    def data(self) -> memoryview:
        """Return a writable view of the valid data."""
        if self._storage is None:
            return memoryview(bytearray())
        return memoryview(self._storage)[self._start:self._start + self._size]

    def size(self) -> int:
        """Return the number of valid bytes."""
        return self._size

    def copy(self, alignment: int = 0) -> "Buffer":
        """Return a new buffer holding a copy of the valid data."""
        if self._storage is None:
            return Buffer(size=self._size, alignment=alignment)
        return Buffer(data=self.data(), alignment=alignment)

    def copy_from(self, offset: int, view: BytesLike) -> None:
        """Copy ``view`` into the valid data starting at ``offset``."""
        if self._storage is None:
            raise ValueError("cannot copy into a null buffer")
        source = bytes(view)
        if offset < 0 or offset + len(source) > self._size:
            raise ValueError("copy does not fit into the buffer")
        begin = self._start + offset
        self._storage[begin:begin + len(source)] = source

    def trim_start(self, amount: int) -> None:
        """Drop ``amount`` bytes from the front of the valid data."""
        if amount < 0 or amount > self._size:
            raise ValueError("trim amount exceeds buffer size")
        self._start += amount
        self._size -= amount

    def shrink(self, size: int) -> None:
        """Reduce the logical size without reallocating."""
        if size < 0 or size > self._size:
            raise ValueError("shrink size exceeds buffer size")
        self._size = size

    def reset(self) -> None:
        """Release the storage and make the buffer null."""
        self._storage = None
        self._start = 0
        self._size = 0

    def resize(self, size: int) -> None:
        """Reallocate fresh storage of at least the current size."""
        if size < self._size:
            raise ValueError("resize cannot shrink the buffer")
        self._storage = bytearray(size)
        self._start = 0
        self._size = size

    def __len__(self) -> int:
        return self._size

    def __bytes__(self) -> bytes:
        return bytes(self.data())

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Buffer):
            return bytes(self) == bytes(other)
        if isinstance(other, (bytes, bytearray, memoryview)):
            return bytes(self) == bytes(other)
        return NotImplemented

    def __repr__(self) -> str:
        if self._storage is None:
            return "Buffer(null)"
        return f"Buffer({to_string(self.view())})"


def is_like_text(view: BytesLike) -> bool:
    """Return True if every byte is a printable, non-space ASCII character."""
    return all(32 < byte < 127 for byte in bytes(view))


def to_string(view: BytesLike, compact: bool = True) -> str:
    """Render bytes for debug output, as text or as hex."""
    raw = bytes(view)
    if is_like_text(raw):
        return f'BufferView "{raw.decode("ascii")}"'
    visible = raw[:_COMPACT_LIMIT] if compact else raw
    suffix = "..." if len(raw) > len(visible) else ""
    return f"BufferView size={len(raw)} <{visible.hex()}{suffix}>"