import pytest

from zcache.buffer import Buffer, is_like_text, to_string


def test_data_round_trip():
    buf = Buffer(data=b"hello world")
    assert bytes(buf.view()) == b"hello world"
    assert buf.size() == 11
    assert not buf.is_null()


def test_size_allocates_zeroed():
    buf = Buffer(size=16)
    assert len(buf) == 16
    assert bytes(buf.view()) == bytes(16)


def test_default_is_null():
    buf = Buffer()
    assert buf.is_null()
    assert buf.size() == 0


def test_alignment_must_divide_size():
    with pytest.raises(ValueError):
        Buffer(size=10, alignment=4)
    buf = Buffer(size=12, alignment=4)
    assert buf.size() == 12


def test_mismatched_size_and_data():
    with pytest.raises(ValueError):
        Buffer(data=b"abc", size=5)


def test_view_is_read_only():
    buf = Buffer(data=b"abc")
    with pytest.raises(TypeError):
        buf.view()[0] = 1


def test_data_is_writable():
    buf = Buffer(data=b"abc")
    buf.data()[0] = ord("x")
    assert bytes(buf) == b"xbc"


def test_trim_and_shrink_window():
    data = b"0123456789"
    buf = Buffer(data=data)
    buf.trim_start(2)
    buf.shrink(3)
    assert bytes(buf.view()) == data[2:5]
    assert buf.size() == 3


def test_trim_too_far_raises():
    buf = Buffer(data=b"abc")
    with pytest.raises(ValueError):
        buf.trim_start(4)


def test_shrink_larger_raises():
    buf = Buffer(data=b"abc")
    with pytest.raises(ValueError):
        buf.shrink(4)


def test_copy_is_independent():
    buf = Buffer(data=b"abcd")
    clone = buf.copy()
    buf.data()[0] = ord("z")
    assert bytes(clone) == b"abcd"
    assert bytes(buf) == b"zbcd"


def test_copy_respects_window():
    buf = Buffer(data=b"abcdef")
    buf.trim_start(1)
    buf.shrink(4)
    assert buf.copy() == b"bcde"


def test_copy_aligned_checks_size():
    buf = Buffer(data=b"abc")
    with pytest.raises(ValueError):
        buf.copy(alignment=2)


def test_copy_from_writes_at_offset():
    buf = Buffer(size=6)
    buf.copy_from(2, b"xy")
    assert bytes(buf) == b"\x00\x00xy\x00\x00"


def test_copy_from_after_trim_uses_window():
    buf = Buffer(size=6)
    buf.trim_start(3)
    buf.copy_from(0, b"abc")
    assert bytes(buf) == b"abc"


def test_copy_from_overflow_raises():
    buf = Buffer(size=4)
    with pytest.raises(ValueError):
        buf.copy_from(3, b"ab")


def test_copy_from_null_raises():
    with pytest.raises(ValueError):
        Buffer().copy_from(0, b"")


def test_reset_makes_null():
    buf = Buffer(data=b"abc")
    buf.reset()
    assert buf.is_null()
    assert buf.size() == 0
    assert bytes(buf.view()) == b""


def test_resize():
    buf = Buffer(data=b"abc")
    buf.resize(8)
    assert buf.size() == 8
    with pytest.raises(ValueError):
        buf.resize(2)


def test_is_like_text():
    assert is_like_text(b"hello")
    assert not is_like_text(b"he llo")
    assert not is_like_text(b"\x7f")
    assert is_like_text(b"~!")


def test_to_string_text():
    assert to_string(b"hello") == 'BufferView "hello"'


def test_to_string_binary():
    assert to_string(b"\x00\xff\x10") == "BufferView size=3 <00ff10>"


def test_to_string_compact_truncates():
    data = bytes(100)
    assert to_string(data) == "BufferView size=100 <" + "00" * 80 + "...>"


def test_to_string_full():
    data = bytes(100)
    text = to_string(data, compact=False)
    assert "..." not in text
    assert ("00" * 100) in text