"""Variable-length integers: 7-bit groups, most-significant group first.

Every byte but the last has the continuation bit (0x80) set:

    300 = 0b10_0101100 -> 0x82 0x2C

Note: this is NOT LEB128 (which emits the least-significant group first).
"""

from __future__ import annotations

from collections.abc import Callable

from binstream.errors import DecodeError, InvalidArgumentError, VarIntTooLong

# ceil(64 / 7): enough groups for any 64-bit value.
DEFAULT_MAX_VARINT_GROUPS = 10


def encode_varint(value: int) -> bytes:
    if value < 0:
        raise InvalidArgumentError(f"varint cannot be negative (got {value})")
    out = bytearray([value & 0x7F])
    value >>= 7
    while value:
        out.append(0x80 | (value & 0x7F))
        value >>= 7
    out.reverse()
    return bytes(out)


def _check_groups(groups: int, max_groups: int | None) -> None:
    if max_groups is not None and groups > max_groups:
        raise VarIntTooLong(f"varint longer than {max_groups} groups")


def decode_varint(
    buf: bytes, idx: int = 0, *, max_groups: int | None = DEFAULT_MAX_VARINT_GROUPS
) -> tuple[int, int]:
    """Decode one varint from ``buf`` at ``idx``; return (value, next_idx)."""
    x = 0
    groups = 0
    while True:
        if idx >= len(buf):
            raise DecodeError("varint truncated")
        b = buf[idx]
        idx += 1
        groups += 1
        _check_groups(groups, max_groups)
        x = (x << 7) | (b & 0x7F)
        if (b & 0x80) == 0:
            return x, idx


def read_varint_from(
    read_byte: Callable[[], int], *, max_groups: int | None = DEFAULT_MAX_VARINT_GROUPS
) -> int:
    """Stream flavour of decode_varint(); ``read_byte`` returns -1 at end of stream.

    ``max_groups=None`` disables the length cap: a stream that never clears
    the continuation bit is then read until it runs out.
    """
    x = 0
    groups = 0
    while True:
        b = read_byte()
        if b < 0:
            raise DecodeError("varint truncated")
        groups += 1
        _check_groups(groups, max_groups)
        x = (x << 7) | (b & 0x7F)
        if (b & 0x80) == 0:
            return x


def zigzag_encode(n: int) -> int:
    return (n << 1) if n >= 0 else ((-n << 1) - 1)


def zigzag_decode(u: int) -> int:
    return (u >> 1) if (u & 1) == 0 else -(u >> 1) - 1


def encode_varints(ints: list[int]) -> bytes:
    """Concatenation of varint(n) for each n."""
    out = bytearray()
    for n in ints:
        out += encode_varint(int(n))
    return bytes(out)


def decode_varints(
    raw: bytes, *, max_groups: int | None = DEFAULT_MAX_VARINT_GROUPS
) -> list[int]:
    """Decode concatenated varints until the buffer is exhausted."""
    out: list[int] = []
    idx = 0
    b = bytes(raw)
    while idx < len(b):
        n, idx = decode_varint(b, idx, max_groups=max_groups)
        out.append(n)
    return out
