# zcache

Building blocks for flash caches on zoned storage, in plain Python with no
third-party dependencies.

## What is inside

- `zcache.buffer`: `Buffer` is an owned byte buffer. It supports an alignment
  check on its size, `trim_start` and `shrink` to narrow the valid window,
  `copy_from`, `copy`, `reset` and `resize`. `is_like_text` and `to_string`
  render bytes for debug output, either as text or as hex. In compact mode the
  hex is cut at 80 bytes.
- `zcache.utils` has these helpers:
  - alignment: `pow_two_align` and `malloc_slot_size`;
  - hashing: `hash_int`, `hash_128_to_64`, `create_tag` and `simple_checksum`;
  - range checks: `between` and `between_strict`;
  - `rt_assert`, which raises `RuntimeError`;
  - cycle and time conversions: `to_sec`, `to_msec`, `to_usec`, `to_nsec`,
    `ms_to_cycles`, `us_to_cycles` and `ns_to_cycles`;
  - timers: `ChronoTimer` and the accumulating `TscTimer`. `rdtsc()` returns a
    monotonic nanosecond counter.
- `zcache.types` has these types:
  - the `Status` and `DestructorEvent` enums;
  - the identifiers `LogSegmentId`, `LogPageId`, `PartitionOffset` and
    `KangarooBucketId`. All invalid `LogPageId` values compare equal, and so do
    all invalid `PartitionOffset` values;
  - `ObjectInfo`;
  - the abstract `CacheEngine` interface, with `lookup`, `insert`, `remove` and
    `prefill`.
- `zcache.bloom`: `BloomFilter` is an array of small bloom filters addressed
  by index. `BloomFilter.make_bloom_filter` chooses the hash count and the
  table size for a target false-positive rate, and
  `BloomFilter.get_optimal_params` returns those parameters without building a
  filter.
- `zcache.rand` has the workload generators:
  - `FastRandom`, a 48-bit linear congruential generator;
  - `ZipfTableDistribution`, `FastDiscreteDistribution`, `ZipfBucketRandom` and
    `SampleBucketRandom`. Each is called with a `random.Random` instance;
  - `narrow_cast`;
  - `rand32` and `rand64`, which use a per-thread `FastRandom`.
- `zcache.device`: `Device` is an abstract zoned block device. It checks
  bounds and alignment, splits large writes into chunks no larger than
  `max_write_size`, and widens unaligned reads to aligned bounds before it
  trims the result.
  - `Device.write` returns `False` for writes under 4096 bytes. Otherwise it
    returns the result of the last chunk written.
  - `read` and `read_aligned` raise `DeviceError` when the underlying read
    fails.
  - Out-of-range or misaligned requests raise `ValueError`.
  - `MemoryZonedDevice` is an in-memory implementation. Its zones are written
    sequentially at a write pointer, up to the zone capacity. `finish` marks a
    zone full, and `reset` clears the zone and rewinds it.

## What it does not do

- The package has no concrete cache engine. `CacheEngine` is only an
  interface.
- The only device is `MemoryZonedDevice`. There is no access to real zoned
  block devices, and data is not persisted across processes.
- There is no command-line tool.

## Installing

```
pip install .
```

For the tests:

```
pip install ".[test]"
pytest
```

## Example

```python
import random

from zcache.bloom import BloomFilter
from zcache.device import MemoryZonedDevice
from zcache.rand import ZipfTableDistribution

bf = BloomFilter.make_bloom_filter(16, 1000, 0.01)
bf.set(3, 42)
assert bf.could_exist(3, 42)
bf.clear(3)
assert not bf.could_exist(3, 42)

dev = MemoryZonedDevice(num_zones=4, zone_size=65536, zone_cap_size=65536,
                        io_align_size=4096, max_write_size=0)
buf = dev.make_io_buffer(4096)
buf.copy_from(0, b"hello")
assert dev.write(0, buf)
assert bytes(dev.read(0, 5)) == b"hello"

zipf = ZipfTableDistribution(100, 0.9)
rank = zipf(random.Random(1))
assert zipf.min() <= rank <= zipf.max()
```