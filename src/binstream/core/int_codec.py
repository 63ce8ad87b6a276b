from __future__ import annotations

import struct

from binstream.errors import InvalidArgumentError, StreamOverflowError

# Platform word size (bytes): the widest integer read_int() will accept.
NATIVE_INT_SIZE = struct.calcsize("q")


def check_int_size(size: int, native_int_size: int | None = NATIVE_INT_SIZE) -> None:
    """``native_int_size=None`` only checks the lower bound (arbitrary precision)."""
    if size < 1:
        raise InvalidArgumentError(f"integer size must be >= 1 (got {size})")
    if native_int_size is not None and size > native_int_size:
        raise StreamOverflowError(
            f"native integer size ({native_int_size}) is smaller than size ({size})"
        )


def int_from_bytes(buf: bytes, *, big_endian: bool = True, signed: bool = False) -> int:
    """Accumulate ``buf`` most-significant byte first.

    Little-endian input is reversed before the shift-left-8-OR loop, so the
    same accumulation applies to both orders. A short buffer yields a value
    built from the bytes it has.
    """
    if not big_endian:
        buf = buf[::-1]
    out = 0
    for b in buf:
        out = (out << 8) | b
    if signed and buf and out & (1 << (8 * len(buf) - 1)):
        out -= 1 << (8 * len(buf))
    return out


def int_to_bytes(value: int, size: int, *, big_endian: bool = True) -> bytes:
    """Emit exactly ``size`` bytes; wider values are truncated, not rejected."""
    out = bytearray()
    for _ in range(size):
        out.append(value & 0xFF)
        value >>= 8
    if big_endian:
        out.reverse()
    return bytes(out)


def bigint_from_bytes(buf: bytes, *, big_endian: bool = True) -> int:
    if not big_endian:
        buf = buf[::-1]
    out = 0
    for b in buf:
        out = out * 256 + b
    return out


def bigint_to_bytes(value: int, size: int, *, big_endian: bool = True) -> bytes:
    """Base-256 digit extraction via divmod (no shift width limit)."""
    out = bytearray()
    for _ in range(size):
        value, digit = divmod(value, 256)
        out.append(digit)
    if big_endian:
        out.reverse()
    return bytes(out)


# IEEE-754 bit reinterpretation (no numeric conversion).


def float_to_bits(value: float) -> int:
    try:
        packed = struct.pack("<f", value)
    except OverflowError as err:
        raise StreamOverflowError(f"{value!r} does not fit in binary32") from err
    return struct.unpack("<I", packed)[0]


def bits_to_float(bits: int) -> float:
    return struct.unpack("<f", struct.pack("<I", bits & 0xFFFFFFFF))[0]


def double_to_bits(value: float) -> int:
    return struct.unpack("<Q", struct.pack("<d", value))[0]


def bits_to_double(bits: int) -> float:
    return struct.unpack("<d", struct.pack("<Q", bits & 0xFFFFFFFFFFFFFFFF))[0]
