"""BinaryStream: typed read/write over one owned Transport.

Byte order is a per-call flag (``big_endian``, default True), never state.

    with BinaryStream.from_bytes(b"\\x01\\x02\\x03\\x04") as s:
        s.read_int(4)                    # 0x01020304
        s.seek(0)
        s.read_int(4, big_endian=False)  # 0x04030201

Not thread-safe: position and resource state are unsynchronized, callers
sharing a handle must serialize access themselves.
"""

from __future__ import annotations

import logging
import os
from types import TracebackType

from binstream.core import int_codec, varint
from binstream.core.text_line import read_until_from
from binstream.core.transport import SEEK_SET, Transport
from binstream.errors import BinStreamError, DecodeError
from binstream.limits import DEFAULT_LIMITS, StreamLimits

logger = logging.getLogger(__name__)


class BinaryStream:
    """Stream handle. Owns exactly one Transport and closes it exactly once."""

    def __init__(self, transport: Transport, *, limits: StreamLimits | None = None) -> None:
        self._transport = transport
        self.limits = limits or DEFAULT_LIMITS

    @classmethod
    def from_path(
        cls, path: str | os.PathLike[str], *, limits: StreamLimits | None = None
    ) -> BinaryStream:
        """Open an existing file read+write (never truncated, never created)."""
        return cls(Transport.from_path(path), limits=limits)

    @classmethod
    def from_bytes(
        cls, data: bytes = b"", *, limits: StreamLimits | None = None
    ) -> BinaryStream:
        return cls(Transport.from_bytes(data), limits=limits)

    # -------------
    # lifecycle
    # -------------

    @property
    def closed(self) -> bool:
        return self._transport.closed

    def close(self) -> None:
        self._transport.close()

    def __enter__(self) -> BinaryStream:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def __del__(self) -> None:
        # Best-effort release; never raise during cleanup.
        transport = getattr(self, "_transport", None)
        if transport is None or transport.closed:
            return
        try:
            transport.close()
        except BinStreamError as e:
            logger.debug("ignoring close failure for %s: %s", transport.name, e)

    def __repr__(self) -> str:
        state = "closed" if self.closed else "open"
        return f"<BinaryStream {self._transport.name} {state}>"

    # -------------
    # raw transport
    # -------------

    def read(self, size: int) -> bytes:
        return self._transport.read(size)

    def write(self, data: bytes, length: int | None = None) -> int:
        return self._transport.write(data, length)

    def seek(self, offset: int, whence: int = SEEK_SET) -> None:
        self._transport.seek(offset, whence)

    def tell(self) -> int:
        return self._transport.tell()

    def eof(self) -> bool:
        return self._transport.eof()

    def flush(self) -> None:
        self._transport.flush()

    def getvalue(self) -> bytes:
        return self._transport.getvalue()

    # -------------
    # primitives
    # -------------

    def read_byte(self) -> int:
        """Return the next byte (0..255), or -1 at end of stream."""
        b = self._transport.read(1)
        return b[0] if b else -1

    def write_byte(self, value: int) -> int:
        return self._transport.write(bytes([value & 0xFF]))

    def read_int(self, size: int, big_endian: bool = True, *, signed: bool = False) -> int:
        """Read a ``size``-byte integer (unsigned unless ``signed``).

        Raises StreamOverflowError, before consuming anything, when ``size`` is
        wider than ``limits.native_int_size``. On a short read the value is
        built from the bytes actually obtained.
        """
        int_codec.check_int_size(size, self.limits.native_int_size)
        buf = self._transport.read(size)
        return int_codec.int_from_bytes(buf, big_endian=big_endian, signed=signed)

    def write_int(self, value: int, size: int, big_endian: bool = True) -> int:
        int_codec.check_int_size(size, None)
        return self._transport.write(int_codec.int_to_bytes(value, size, big_endian=big_endian))

    def read_int_big(self, size: int, big_endian: bool = True) -> int:
        """Like read_int() but without the native width ceiling."""
        int_codec.check_int_size(size, None)
        buf = self._transport.read(size)
        return int_codec.bigint_from_bytes(buf, big_endian=big_endian)

    def write_int_big(self, value: int, size: int, big_endian: bool = True) -> int:
        int_codec.check_int_size(size, None)
        return self._transport.write(
            int_codec.bigint_to_bytes(value, size, big_endian=big_endian)
        )

    def read_float(self, big_endian: bool = True) -> float:
        return int_codec.bits_to_float(self.read_int(4, big_endian))

    def write_float(self, value: float, big_endian: bool = True) -> int:
        return self.write_int(int_codec.float_to_bits(value), 4, big_endian)

    def read_double(self, big_endian: bool = True) -> float:
        return int_codec.bits_to_double(self.read_int(8, big_endian))

    def write_double(self, value: float, big_endian: bool = True) -> int:
        return self.write_int(int_codec.double_to_bits(value), 8, big_endian)

    def read_bool(self) -> bool:
        return self.read_byte() != 0

    def write_bool(self, value: bool) -> int:
        return self.write_byte(1 if value else 0)

    # -------------
    # varint
    # -------------

    def read_varint(self) -> int:
        return varint.read_varint_from(self.read_byte, max_groups=self.limits.max_varint_groups)

    def write_varint(self, value: int) -> int:
        return self._transport.write(varint.encode_varint(value))

    def read_signed_varint(self) -> int:
        return varint.zigzag_decode(self.read_varint())

    def write_signed_varint(self, value: int) -> int:
        return self.write_varint(varint.zigzag_encode(value))

    # -------------
    # text
    # -------------

    def read_until(self, delimiter: str | bytes) -> str | bytes:
        """Read up to and including ``delimiter``.

        Returns ``str`` for a ``str`` delimiter (decoded with
        ``limits.encoding``), ``bytes`` otherwise.
        """
        enc = self.limits.encoding
        delim = delimiter.encode(enc) if isinstance(delimiter, str) else bytes(delimiter)
        raw = read_until_from(
            self._transport.read, delim, max_bytes=self.limits.max_until_bytes
        )
        return self._decode(raw) if isinstance(delimiter, str) else raw

    def read_line(self) -> str:
        """Native line read; at a clean end of stream returns "" (or the partial last line)."""
        return self._decode(self._transport.readline())

    def write_line(self, text: str | bytes, newline: str | None = None) -> int:
        enc = self.limits.encoding
        nl = self.limits.newline_str() if newline is None else newline
        if isinstance(text, str):
            return self._transport.write((text + nl).encode(enc))
        return self._transport.write(bytes(text) + nl.encode(enc))

    def _decode(self, raw: bytes) -> str:
        try:
            return raw.decode(self.limits.encoding)
        except UnicodeDecodeError as e:
            raise DecodeError(f"text is not valid {self.limits.encoding}: {e}") from e
