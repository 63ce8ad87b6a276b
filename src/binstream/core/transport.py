"""Transport adapter: raw byte I/O over a seekable binary file object.

No encoding logic lives here. Every failure reported by the underlying file
object (OSError, or ValueError from io on a detached/closed buffer) is
re-raised as StreamIOError with the system diagnostic attached.
"""

from __future__ import annotations

import io
import logging
import os
from typing import BinaryIO

from binstream.errors import InvalidArgumentError, StreamClosedError, StreamIOError

logger = logging.getLogger(__name__)

SEEK_SET = os.SEEK_SET
SEEK_CUR = os.SEEK_CUR
SEEK_END = os.SEEK_END

_WHENCE = {SEEK_SET, SEEK_CUR, SEEK_END}


class Transport:
    """Owns one seekable binary file object.

    ``close()`` is idempotent; any other call after close raises
    StreamClosedError.
    """

    __slots__ = ("_fp", "name")

    def __init__(self, fp: BinaryIO, *, name: str = "<stream>") -> None:
        self._fp: BinaryIO | None = fp
        self.name = name

    @classmethod
    def from_path(cls, path: str | os.PathLike[str]) -> Transport:
        """Open an existing file for read+write, without truncating it."""
        p = os.fspath(path)
        try:
            fp = open(p, "r+b")  # noqa: SIM115
        except OSError as err:
            raise StreamIOError("open", f"{p}: {err.strerror or err}") from err
        logger.debug("opened %s", p)
        return cls(fp, name=p)

    @classmethod
    def from_bytes(cls, data: bytes = b"") -> Transport:
        """Volatile in-memory transport pre-populated with ``data``, cursor at 0."""
        fp = io.BytesIO(bytes(data))
        fp.seek(0)
        logger.debug("opened memory stream (%d bytes)", len(data))
        return cls(fp, name="<memory>")

    @property
    def closed(self) -> bool:
        return self._fp is None

    def _require(self) -> BinaryIO:
        if self._fp is None:
            raise StreamClosedError(f"stream {self.name} is closed")
        return self._fp

    def read(self, size: int) -> bytes:
        fp = self._require()
        try:
            return fp.read(size)
        except (OSError, ValueError) as err:
            raise StreamIOError("read", str(err)) from err

    def write(self, data: bytes, length: int | None = None) -> int:
        """Write ``data``; ``length`` truncates it, or pads it with NUL bytes."""
        fp = self._require()
        buf = bytes(data)
        if length is not None:
            if length < 0:
                raise InvalidArgumentError("length must be >= 0")
            buf = buf[:length].ljust(length, b"\x00")
        try:
            n = fp.write(buf)
        except (OSError, ValueError) as err:
            raise StreamIOError("write", str(err)) from err
        # Raw (unbuffered) file objects may report None on EAGAIN.
        return len(buf) if n is None else int(n)

    def seek(self, offset: int, whence: int = SEEK_SET) -> None:
        fp = self._require()
        if whence not in _WHENCE:
            raise InvalidArgumentError(f"invalid whence: {whence!r}")
        try:
            fp.seek(offset, whence)
        except (OSError, ValueError) as err:
            raise StreamIOError("seek", str(err)) from err

    def tell(self) -> int:
        fp = self._require()
        try:
            return fp.tell()
        except (OSError, ValueError) as err:
            raise StreamIOError("get position", str(err)) from err

    def eof(self) -> bool:
        """True when the cursor sits at (or past) the current end of the stream."""
        fp = self._require()
        try:
            pos = fp.tell()
            end = fp.seek(0, SEEK_END)
            fp.seek(pos, SEEK_SET)
        except (OSError, ValueError) as err:
            raise StreamIOError("check end of stream", str(err)) from err
        return pos >= end

    def readline(self) -> bytes:
        fp = self._require()
        try:
            return fp.readline()
        except (OSError, ValueError) as err:
            raise StreamIOError("read", str(err)) from err

    def flush(self) -> None:
        fp = self._require()
        try:
            fp.flush()
        except (OSError, ValueError) as err:
            raise StreamIOError("flush", str(err)) from err

    def getvalue(self) -> bytes:
        """Whole stream content; the cursor is left where it was."""
        fp = self._require()
        if isinstance(fp, io.BytesIO):
            return fp.getvalue()
        try:
            pos = fp.tell()
            fp.seek(0, SEEK_SET)
            data = fp.read()
            fp.seek(pos, SEEK_SET)
        except (OSError, ValueError) as err:
            raise StreamIOError("read", str(err)) from err
        return data

    def close(self) -> None:
        fp = self._fp
        if fp is None:
            return
        self._fp = None
        try:
            fp.close()
        except (OSError, ValueError) as err:
            logger.debug("close failed for %s: %s", self.name, err)
            raise StreamIOError("close", str(err)) from err
        logger.debug("closed %s", self.name)
