"""binstream CLI.

This is the stable CLI entrypoint (console-script: ``binstream``).

UX policy:
  - One subcommand per direction (read/write), the value TYPE picks the codec.
  - Byte order defaults to big-endian; ``--little`` flips it per invocation.
  - Errors print ``[binstream] ...`` on stderr and return the error's exit code.
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Callable
from pathlib import Path

from binstream.core.transport import SEEK_END
from binstream.core.varint import decode_varints, encode_varints
from binstream.errors import EXIT_GENERIC, EXIT_USAGE, BinStreamError, UsageError
from binstream.limits import DEFAULT_LIMITS, LimitsSpecError, StreamLimits, load_limits_spec
from binstream.stream import BinaryStream

VALUE_TYPES = (
    "u8",
    "int",
    "sint",
    "bigint",
    "float",
    "double",
    "bool",
    "varint",
    "svarint",
    "line",
)

# Default --size per type (only int/sint/bigint honour it).
_DEFAULT_SIZE = {"int": 4, "sint": 4, "bigint": 16}


def _add_common_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--debug", action="store_true", help="Show stack traces on errors")


def _add_codec_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("file", type=Path)
    p.add_argument("type", choices=VALUE_TYPES, help="Value type")
    p.add_argument("--little", action="store_true", help="Little-endian (default: big-endian)")
    p.add_argument(
        "--size",
        type=int,
        default=None,
        help="Byte width for int/sint/bigint (default: 4, 4, 16)",
    )
    p.add_argument(
        "--limits",
        default=None,
        help="Limits spec JSON. Use '@file.json' to load from file, or pass JSON inline.",
    )


def _limits(limits_arg: str | None) -> StreamLimits:
    return load_limits_spec(limits_arg) if limits_arg else DEFAULT_LIMITS


def _size(kind: str, size: int | None) -> int:
    if size is None:
        return _DEFAULT_SIZE.get(kind, 0)
    if size < 1:
        raise UsageError(f"--size must be >= 1 (got {size})")
    return size


def _read_one(s: BinaryStream, kind: str, size: int, big_endian: bool) -> str:
    if kind == "u8":
        return str(s.read_byte())
    if kind == "int":
        return str(s.read_int(size, big_endian))
    if kind == "sint":
        return str(s.read_int(size, big_endian, signed=True))
    if kind == "bigint":
        return str(s.read_int_big(size, big_endian))
    if kind == "float":
        return repr(s.read_float(big_endian))
    if kind == "double":
        return repr(s.read_double(big_endian))
    if kind == "bool":
        return "true" if s.read_bool() else "false"
    if kind == "varint":
        return str(s.read_varint())
    if kind == "svarint":
        return str(s.read_signed_varint())
    if kind == "line":
        return s.read_line().rstrip("\r\n")
    raise AssertionError("unreachable")


def _parse_int(raw: str) -> int:
    try:
        return int(raw, 0)
    except ValueError as e:
        raise UsageError(f"not an integer: {raw!r}") from e


def _parse_float(raw: str) -> float:
    try:
        return float(raw)
    except ValueError as e:
        raise UsageError(f"not a number: {raw!r}") from e


def _parse_bool(raw: str) -> bool:
    v = raw.strip().lower()
    if v in {"1", "true", "yes"}:
        return True
    if v in {"0", "false", "no"}:
        return False
    raise UsageError(f"not a boolean: {raw!r}")


def _writer(s: BinaryStream, kind: str, size: int, big_endian: bool) -> Callable[[str], int]:
    if kind == "u8":
        return lambda raw: s.write_byte(_parse_int(raw))
    if kind in {"int", "sint"}:
        return lambda raw: s.write_int(_parse_int(raw), size, big_endian)
    if kind == "bigint":
        return lambda raw: s.write_int_big(_parse_int(raw), size, big_endian)
    if kind == "float":
        return lambda raw: s.write_float(_parse_float(raw), big_endian)
    if kind == "double":
        return lambda raw: s.write_double(_parse_float(raw), big_endian)
    if kind == "bool":
        return lambda raw: s.write_bool(_parse_bool(raw))
    if kind == "varint":
        return lambda raw: s.write_varint(_parse_int(raw))
    if kind == "svarint":
        return lambda raw: s.write_signed_varint(_parse_int(raw))
    if kind == "line":
        return lambda raw: s.write_line(raw)
    raise AssertionError("unreachable")


def _cmd_read(
    path: Path,
    kind: str,
    *,
    offset: int,
    count: int,
    size: int | None,
    big_endian: bool,
    limits_arg: str | None,
) -> int:
    if count < 1:
        raise UsageError(f"--count must be >= 1 (got {count})")
    n = _size(kind, size)
    with BinaryStream.from_path(path, limits=_limits(limits_arg)) as s:
        s.seek(offset)
        for _ in range(count):
            print(_read_one(s, kind, n, big_endian))
    return 0


def _cmd_write(
    path: Path,
    kind: str,
    values: list[str],
    *,
    offset: int | None,
    append: bool,
    size: int | None,
    big_endian: bool,
    limits_arg: str | None,
) -> int:
    n = _size(kind, size)
    total = 0
    with BinaryStream.from_path(path, limits=_limits(limits_arg)) as s:
        if append:
            s.seek(0, SEEK_END)
        else:
            s.seek(offset or 0)
        write = _writer(s, kind, n, big_endian)
        for raw in values:
            total += write(raw)
    print(f"OK {total} bytes")
    return 0


def _cmd_varint_encode(values: list[str]) -> int:
    print(encode_varints([_parse_int(v) for v in values]).hex())
    return 0


def _cmd_varint_decode(hexstr: str, limits_arg: str | None) -> int:
    try:
        raw = bytes.fromhex(hexstr)
    except ValueError as e:
        raise UsageError(f"not a hex string: {hexstr!r}") from e
    for v in decode_varints(raw, max_groups=_limits(limits_arg).max_varint_groups):
        print(v)
    return 0


def _cmd_limits_validate(limits_arg: str) -> int:
    # load is the validation
    load_limits_spec(limits_arg)
    print("OK")
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="binstream", description="Typed binary read/write over seekable files"
    )
    sub = p.add_subparsers(dest="cmd", required=True)

    p_r = sub.add_parser("read", help="Decode values from an existing file")
    _add_codec_args(p_r)
    p_r.add_argument("--offset", type=int, default=0, help="Start offset (default: 0)")
    p_r.add_argument("--count", type=int, default=1, help="Number of values (default: 1)")
    _add_common_args(p_r)

    p_w = sub.add_parser("write", help="Encode values into an existing file (in place)")
    _add_codec_args(p_w)
    p_w.add_argument("values", nargs="+", help="Values to encode, in order")
    where = p_w.add_mutually_exclusive_group()
    where.add_argument("--offset", type=int, default=None, help="Start offset (default: 0)")
    where.add_argument("--append", action="store_true", help="Write at end of file")
    _add_common_args(p_w)

    # varint ...
    p_v = sub.add_parser("varint", help="Variable-length integer helpers (hex in/out)")
    sub_v = p_v.add_subparsers(dest="varint_cmd", required=True)

    p_ve = sub_v.add_parser("encode", help="Encode integers, print hex")
    p_ve.add_argument("values", nargs="+")
    _add_common_args(p_ve)

    p_vd = sub_v.add_parser("decode", help="Decode hex, print one integer per line")
    p_vd.add_argument("hex")
    p_vd.add_argument(
        "--limits",
        default=None,
        help="Limits spec JSON (only max_varint_groups applies here).",
    )
    _add_common_args(p_vd)

    p_l = sub.add_parser("limits-validate", help="Validate a limits spec (v1)")
    p_l.add_argument("limits", help="Limits spec JSON (@file.json or inline JSON)")
    _add_common_args(p_l)

    return p


def main(argv: list[str] | None = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)
    p = build_parser()
    ns = p.parse_args(argv)

    if getattr(ns, "debug", False):
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    try:
        if ns.cmd == "read":
            return _cmd_read(
                ns.file,
                ns.type,
                offset=ns.offset,
                count=ns.count,
                size=ns.size,
                big_endian=not ns.little,
                limits_arg=ns.limits,
            )
        if ns.cmd == "write":
            return _cmd_write(
                ns.file,
                ns.type,
                list(ns.values),
                offset=ns.offset,
                append=bool(ns.append),
                size=ns.size,
                big_endian=not ns.little,
                limits_arg=ns.limits,
            )
        if ns.cmd == "varint":
            if ns.varint_cmd == "encode":
                return _cmd_varint_encode(list(ns.values))
            if ns.varint_cmd == "decode":
                return _cmd_varint_decode(str(ns.hex), ns.limits)
            raise AssertionError("unreachable")
        if ns.cmd == "limits-validate":
            return _cmd_limits_validate(str(ns.limits))

        raise AssertionError("unreachable")

    except SystemExit:
        raise
    except LimitsSpecError as e:
        # Treat as usage/config error.
        if getattr(ns, "debug", False):
            raise
        print(f"[binstream] {e}", file=sys.stderr)
        return EXIT_USAGE
    except BinStreamError as e:
        if getattr(ns, "debug", False):
            raise
        print(f"[binstream] {e}", file=sys.stderr)
        return int(getattr(e, "exit_code", EXIT_GENERIC) or EXIT_GENERIC)
    except Exception as e:
        if getattr(ns, "debug", False):
            raise
        print(f"[binstream] error: {e}", file=sys.stderr)
        return EXIT_GENERIC


if __name__ == "__main__":
    raise SystemExit(main())
