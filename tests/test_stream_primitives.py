from __future__ import annotations

import math
import struct

import pytest

from binstream.core.int_codec import NATIVE_INT_SIZE
from binstream.errors import InvalidArgumentError, StreamOverflowError
from binstream.limits import StreamLimits
from binstream.stream import BinaryStream


def test_scenario_read_int_both_orders() -> None:
    s = BinaryStream.from_bytes()
    for b in (0x01, 0x02, 0x03, 0x04):
        s.write_byte(b)
    s.seek(0)
    assert s.read_int(4, big_endian=True) == 0x01020304
    s.seek(0)
    assert s.read_int(4, big_endian=False) == 0x04030201


@pytest.mark.parametrize("size", [1, 2, 4, 8])
@pytest.mark.parametrize("big_endian", [True, False])
def test_int_roundtrip_is_mod_width(size: int, big_endian: bool) -> None:
    for value in (0, 1, 0x7F, 0x1234, 0xDEADBEEF, 0x0123456789ABCDEF, (1 << 72) + 5):
        s = BinaryStream.from_bytes()
        assert s.write_int(value, size, big_endian) == size
        s.seek(0)
        assert s.read_int(size, big_endian) == value % (1 << (8 * size))


def test_write_int_byte_layout() -> None:
    s = BinaryStream.from_bytes()
    s.write_int(0x0102, 2, big_endian=True)
    s.write_int(0x0102, 2, big_endian=False)
    assert s.getvalue() == b"\x01\x02\x02\x01"


def test_write_int_truncates_silently() -> None:
    s = BinaryStream.from_bytes()
    s.write_int(0x123456, 2)
    assert s.getvalue() == b"\x34\x56"


def test_write_int_negative_is_twos_complement() -> None:
    s = BinaryStream.from_bytes()
    s.write_int(-2, 2)
    assert s.getvalue() == b"\xff\xfe"
    s.seek(0)
    assert s.read_int(2, signed=True) == -2
    s.seek(0)
    assert s.read_int(2) == 0xFFFE


@pytest.mark.parametrize("size", [2, 4, 8])
def test_endianness_symmetry(size: int) -> None:
    value = 0x0102030405060708 % (1 << (8 * size))
    s = BinaryStream.from_bytes()
    s.write_int(value, size, big_endian=True)
    s.seek(0)
    got = s.read_int(size, big_endian=False)
    assert got == int.from_bytes(value.to_bytes(size, "big"), "little")


def test_read_int_overflow_before_consuming() -> None:
    s = BinaryStream.from_bytes(bytes(range(16)))
    s.seek(3)
    with pytest.raises(StreamOverflowError):
        s.read_int(NATIVE_INT_SIZE + 1)
    assert s.tell() == 3
    # Still a plain OverflowError for callers that only know the builtin.
    with pytest.raises(OverflowError):
        s.read_int(NATIVE_INT_SIZE + 1)
    # Handle stays usable.
    assert s.read_int(1) == 3


def test_read_int_overflow_respects_limits() -> None:
    s = BinaryStream.from_bytes(b"\x00" * 8, limits=StreamLimits(native_int_size=4))
    with pytest.raises(StreamOverflowError):
        s.read_int(5)
    assert s.tell() == 0


def test_read_int_zero_size_rejected() -> None:
    s = BinaryStream.from_bytes(b"\x01")
    with pytest.raises(InvalidArgumentError):
        s.read_int(0)


def test_write_int_rejects_non_positive_size() -> None:
    s = BinaryStream.from_bytes()
    for size in (0, -1):
        with pytest.raises(InvalidArgumentError):
            s.write_int(5, size)
        with pytest.raises(InvalidArgumentError):
            s.write_int_big(5, size)
    assert s.getvalue() == b""
    assert s.tell() == 0


def test_write_int_has_no_native_ceiling() -> None:
    s = BinaryStream.from_bytes()
    assert s.write_int(1, NATIVE_INT_SIZE + 1) == NATIVE_INT_SIZE + 1
    assert s.getvalue() == b"\x00" * NATIVE_INT_SIZE + b"\x01"


def test_read_int_short_read_uses_available_bytes() -> None:
    s = BinaryStream.from_bytes(b"\x01\x02")
    assert s.read_int(4) == 0x0102
    s.seek(0)
    assert s.read_int(4, big_endian=False) == 0x0201
    assert s.read_int(4) == 0


def test_int_big_128bit() -> None:
    value = (1 << 127) | 0xABCDEF
    for big_endian in (True, False):
        s = BinaryStream.from_bytes()
        assert s.write_int_big(value, 16, big_endian) == 16
        s.seek(0)
        assert s.read_int_big(16, big_endian) == value
        assert s.eof()


def test_int_big_layout_matches_int() -> None:
    a = BinaryStream.from_bytes()
    b = BinaryStream.from_bytes()
    a.write_int(0xCAFEBABE, 4, False)
    b.write_int_big(0xCAFEBABE, 4, False)
    assert a.getvalue() == b.getvalue() == bytes.fromhex("bebafeca")


def test_read_byte_and_eof() -> None:
    s = BinaryStream.from_bytes(b"\xff")
    assert not s.eof()
    assert s.read_byte() == 0xFF
    assert s.read_byte() == -1
    assert s.eof()

    empty = BinaryStream.from_bytes()
    assert empty.read_byte() == -1
    assert empty.eof()


def test_write_byte_masks() -> None:
    s = BinaryStream.from_bytes()
    assert s.write_byte(0x1FF) == 1
    assert s.write_byte(-1) == 1
    assert s.getvalue() == b"\xff\xff"


def test_bool() -> None:
    s = BinaryStream.from_bytes(b"\x00\x01\xff\x80")
    assert [s.read_bool() for _ in range(4)] == [False, True, True, True]

    w = BinaryStream.from_bytes()
    w.write_bool(True)
    w.write_bool(False)
    assert w.getvalue() == b"\x01\x00"


FLOAT_BITS = [
    0x00000000,  # 0.0
    0x80000000,  # -0.0
    0x3F800000,  # 1.0
    0x7FC00000,  # NaN
    0x7F800000,  # +inf
    0xFF800000,  # -inf
    0x00000001,  # smallest subnormal
]

DOUBLE_BITS = [
    0x0000000000000000,
    0x8000000000000000,
    0x3FF0000000000000,
    0x7FF8000000000000,
    0x7FF0000000000000,
    0xFFF0000000000000,
    0x0000000000000001,
]


@pytest.mark.parametrize("bits", FLOAT_BITS)
@pytest.mark.parametrize("big_endian", [True, False])
def test_float_bit_exact(bits: int, big_endian: bool) -> None:
    raw = bits.to_bytes(4, "big" if big_endian else "little")
    s = BinaryStream.from_bytes(raw)
    value = s.read_float(big_endian)

    out = BinaryStream.from_bytes()
    assert out.write_float(value, big_endian) == 4
    assert out.getvalue() == raw


@pytest.mark.parametrize("bits", DOUBLE_BITS)
@pytest.mark.parametrize("big_endian", [True, False])
def test_double_bit_exact(bits: int, big_endian: bool) -> None:
    raw = bits.to_bytes(8, "big" if big_endian else "little")
    s = BinaryStream.from_bytes(raw)
    value = s.read_double(big_endian)

    out = BinaryStream.from_bytes()
    assert out.write_double(value, big_endian) == 8
    assert out.getvalue() == raw


def test_float_values() -> None:
    s = BinaryStream.from_bytes()
    s.write_float(1.5)
    s.write_double(-2.25, big_endian=False)
    assert s.getvalue() == struct.pack(">f", 1.5) + struct.pack("<d", -2.25)
    s.seek(0)
    assert s.read_float() == 1.5
    assert s.read_double(big_endian=False) == -2.25


def test_float_special_values_decode() -> None:
    s = BinaryStream.from_bytes(bytes.fromhex("7fc00000" "ff800000" "80000000"))
    assert math.isnan(s.read_float())
    assert s.read_float() == -math.inf
    neg_zero = s.read_float()
    assert neg_zero == 0.0 and math.copysign(1.0, neg_zero) == -1.0


def test_float_too_large_for_binary32() -> None:
    s = BinaryStream.from_bytes()
    with pytest.raises(StreamOverflowError):
        s.write_float(1e300)
    assert s.getvalue() == b""
