from __future__ import annotations

from collections.abc import Callable

from binstream.errors import DelimiterNotFound, InvalidArgumentError

# Guard against streams that never produce the delimiter.
DEFAULT_MAX_UNTIL_BYTES = 1 << 20


def read_until_from(
    read: Callable[[int], bytes],
    delimiter: bytes,
    *,
    max_bytes: int | None = DEFAULT_MAX_UNTIL_BYTES,
) -> bytes:
    """Read one byte at a time until the accumulated tail equals ``delimiter``.

    The result includes the delimiter. ``max_bytes=None`` reads without a cap
    (end of stream still stops the scan).
    """
    if not delimiter:
        raise InvalidArgumentError("delimiter cannot be empty")
    buf = bytearray()
    while not buf.endswith(delimiter):
        if max_bytes is not None and len(buf) >= max_bytes:
            raise DelimiterNotFound(
                f"delimiter {delimiter!r} not found within {max_bytes} bytes", bytes(buf)
            )
        c = read(1)
        if not c:
            raise DelimiterNotFound(
                f"end of stream before delimiter {delimiter!r}", bytes(buf)
            )
        buf += c
    return bytes(buf)
