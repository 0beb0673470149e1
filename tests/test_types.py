import dataclasses

import pytest

from zcache.buffer import Buffer
from zcache.types import (
    CacheEngine,
    DestructorEvent,
    KangarooBucketId,
    LogPageId,
    LogSegmentId,
    ObjectInfo,
    PartitionOffset,
    Status,
)


class DictCache(CacheEngine):
    def __init__(self, capacity):
        self.capacity = capacity
        self.items = {}

    def lookup(self, hk):
        if hk not in self.items:
            return Status.NOT_FOUND, None
        return Status.OK, Buffer(data=self.items[hk])

    def insert(self, hk, value):
        if len(self.items) >= self.capacity and hk not in self.items:
            return Status.REJECTED
        self.items[hk] = bytes(value)
        return Status.OK

    def remove(self, hk):
        if self.items.pop(hk, None) is None:
            return Status.NOT_FOUND
        return Status.OK

    def prefill(self, k_func, v_func):
        while len(self.items) < self.capacity:
            self.insert(k_func(), v_func())
        return Status.OK


def test_status_round_trips_by_value():
    members = list(Status)
    assert len(members) == 6
    for member in members:
        assert Status(member.value) is member


def test_destructor_events_round_trip_by_value():
    assert [DestructorEvent(e.value).name for e in DestructorEvent] == [
        "RECYCLED",
        "REMOVED",
        "PUT_FAILED",
    ]


def test_log_segment_id_equality():
    assert LogSegmentId(1, 2) == LogSegmentId(1, 2)
    assert LogSegmentId(1, 2) != LogSegmentId(2, 1)
    assert LogSegmentId(3, 4).zone == 4


def test_log_segment_id_frozen():
    seg = LogSegmentId(1, 2)
    with pytest.raises(dataclasses.FrozenInstanceError):
        seg.offset = 5
    assert seg.offset == 1


@pytest.mark.parametrize("cls", [LogPageId, PartitionOffset])
def test_invalid_ids_compare_equal(cls):
    assert cls() == cls(7, False)
    assert hash(cls()) == hash(cls(7, False))


@pytest.mark.parametrize("cls", [LogPageId, PartitionOffset])
def test_valid_ids_compare_by_index(cls):
    assert cls(3, True) == cls(3, True)
    assert cls(3, True) != cls(4, True)
    assert cls(3, True) != cls(3, False)
    assert cls().index == 0
    assert not cls().valid


def test_page_id_and_partition_offset_differ():
    assert (LogPageId(1, True) == PartitionOffset(1, True)) is False


def test_ids_usable_as_keys():
    table = {LogPageId(1, True): "a", LogPageId(): "b"}
    assert table[LogPageId(1, True)] == "a"
    assert table[LogPageId(9, False)] == "b"


def test_bucket_id():
    assert KangarooBucketId(5) == KangarooBucketId(5)
    assert KangarooBucketId(5).index == 5


def test_object_info_wraps_bytes():
    info = ObjectInfo(key=10, value=b"payload", hits=1, lpid=LogPageId(2, True), tag=3)
    assert isinstance(info.value, Buffer)
    assert bytes(info.value) == b"payload"


def test_object_info_keeps_buffer():
    buf = Buffer(data=b"xyz")
    info = ObjectInfo(key=1, value=buf, hits=0, lpid=LogPageId(), tag=0)
    assert info.value is buf


def test_cache_engine_is_abstract():
    with pytest.raises(TypeError):
        CacheEngine()


def test_cache_engine_subclass_round_trip():
    cache = DictCache(capacity=2)
    stored = Buffer(data=b"one")
    assert cache.insert(1, stored) is Status.OK
    status, value = cache.lookup(1)
    assert status is Status.OK
    assert bytes(value) == bytes(stored) == b"one"
    assert cache.remove(1) is Status.OK
    assert cache.lookup(1) == (Status.NOT_FOUND, None)
    assert cache.remove(1) is Status.NOT_FOUND


def test_cache_engine_prefill():
    keys = iter(range(100))
    value = Buffer(data=b"v")
    cache = DictCache(capacity=5)
    assert cache.prefill(lambda: next(keys), lambda: value) is Status.OK
    assert sorted(cache.items) == [0, 1, 2, 3, 4]
    status, found = cache.lookup(0)
    assert status is Status.OK
    assert bytes(found) == bytes(value)
    assert cache.insert(99, Buffer(data=b"x")) is Status.REJECTED