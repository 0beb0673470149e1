"""Shared cache types: statuses, identifiers and the cache engine interface."""

from __future__ import annotations

import enum
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple, Union

from zcache.buffer import Buffer

HashedKey = int


class Status(enum.Enum):
    """Generic operation status."""

    OK = enum.auto()
    NOT_FOUND = enum.auto()
    REJECTED = enum.auto()
    RETRY = enum.auto()
    DEVICE_ERROR = enum.auto()
    BAD_STATE = enum.auto()


class DestructorEvent(enum.Enum):
    """Why an item left the cache."""

    RECYCLED = enum.auto()
    REMOVED = enum.auto()
    PUT_FAILED = enum.auto()


@dataclass(frozen=True)
class LogSegmentId:
    """A log segment: an offset within a zone."""

    offset: int
    zone: int


@dataclass(frozen=True, eq=False)
class _OptionalIndex:
    index: int = 0
    valid: bool = False

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        if not self.valid and not other.valid:
            return True
        return self.valid == other.valid and self.index == other.index

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.index if self.valid else None))


class LogPageId(_OptionalIndex):
    """Index of a log page; all invalid ids compare equal."""


class PartitionOffset(_OptionalIndex):
    """Offset in a log partition; all invalid offsets compare equal."""


@dataclass(frozen=True)
class KangarooBucketId:
    """Index of a set-associative bucket."""

    index: int


@dataclass
class ObjectInfo:
    """An object moving between cache layers."""

    key: HashedKey
    value: Buffer
    hits: int
    lpid: LogPageId
    tag: int

    def __post_init__(self) -> None:
        if not isinstance(self.value, Buffer):
            self.value = Buffer(data=self.value)


BytesLike = Union[bytes, bytearray, memoryview]

DestructorCallback = Callable[[HashedKey, memoryview, DestructorEvent], None]
BitVectorUpdateVisitor = Callable[[int], None]
BitVectorReadVisitor = Callable[[int], bool]
SetNumberCallback = Callable[[int], KangarooBucketId]
ReadmitCallback = Callable[[ObjectInfo], None]
SetMultiInsertCallback = Callable[[List[ObjectInfo], ReadmitCallback], None]
RedivideCallback = Callable[[HashedKey, memoryview, int], None]


class CacheEngine(ABC):
    """Interface of a key-value cache engine."""

    @abstractmethod
    def lookup(self, hk: HashedKey) -> Tuple[Status, Optional[Buffer]]:
        """Return the status and, when found, the value for ``hk``."""

    @abstractmethod
    def insert(self, hk: HashedKey, value: BytesLike) -> Status:
        """Store ``value`` under ``hk``."""

    @abstractmethod
    def remove(self, hk: HashedKey) -> Status:
        """Remove ``hk`` from the cache."""

    @abstractmethod
    def prefill(
        self,
        k_func: Callable[[], HashedKey],
        v_func: Callable[[], BytesLike],
    ) -> Status:
        """Fill the cache with keys and values drawn from the given callables."""