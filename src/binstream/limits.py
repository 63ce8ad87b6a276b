"""Limits spec (v1) for binstream.

Goal: make decode guards and text defaults reproducible and portable
(library callers, CLI, CI).

This module intentionally stays *small* and strict:
  - JSON only
  - explicit schema id
  - unknown keys are rejected
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from binstream.core.int_codec import NATIVE_INT_SIZE
from binstream.core.text_line import DEFAULT_MAX_UNTIL_BYTES
from binstream.core.varint import DEFAULT_MAX_VARINT_GROUPS

SPEC_ID_V1 = "binstream.limits.v1"

NEWLINES: dict[str, str] = {"\n": "\n", "\r\n": "\r\n", "\r": "\r", "os": os.linesep}


class LimitsSpecError(ValueError):
    pass


def check_text_encoding(name: str) -> None:
    """Text codecs must encode a line break as the single byte 0x0A.

    Transport.readline() splits on that byte, and each encode() call must be
    self-contained (no BOM, no wide code units).
    """
    try:
        nl = "\n".encode(name)
    except LookupError as e:
        raise LimitsSpecError(f"limits: unknown text encoding: {name!r}") from e
    if nl != b"\n":
        raise LimitsSpecError(
            f"limits: encoding {name!r} is not ASCII-compatible for line breaks"
        )


@dataclass(frozen=True)
class StreamLimits:
    """Per-handle guards and text defaults.

    ``None`` for max_varint_groups / max_until_bytes means unbounded.
    """

    native_int_size: int = NATIVE_INT_SIZE
    max_varint_groups: int | None = DEFAULT_MAX_VARINT_GROUPS
    max_until_bytes: int | None = DEFAULT_MAX_UNTIL_BYTES
    encoding: str = "utf-8"
    newline: str = "os"

    def __post_init__(self) -> None:
        check_text_encoding(self.encoding)
        if self.newline not in NEWLINES:
            raise LimitsSpecError(f"limits: unsupported newline: {self.newline!r}")

    def newline_str(self) -> str:
        return NEWLINES[self.newline]


DEFAULT_LIMITS = StreamLimits()


def _load_json_arg(limits_arg: str) -> dict[str, Any]:
    s = limits_arg.strip()
    if not s:
        raise LimitsSpecError("limits: empty argument")

    if s.startswith("@"):
        p = Path(s[1:]).expanduser()
        if not p.exists() or not p.is_file():
            raise LimitsSpecError(f"limits: file not found: {p}")
        raw = p.read_text(encoding="utf-8")
        try:
            obj = json.loads(raw)
        except Exception as e:
            raise LimitsSpecError(f"limits: invalid JSON in {p}: {e}") from e
        if not isinstance(obj, dict):
            raise LimitsSpecError(f"limits: the JSON in {p} must be an object")
        return obj

    try:
        obj = json.loads(s)
    except Exception as e:
        raise LimitsSpecError(f"limits: invalid inline JSON: {e}") from e
    if not isinstance(obj, dict):
        raise LimitsSpecError("limits: inline JSON must be an object")
    return obj


def _optional_int(
    obj: dict[str, Any],
    key: str,
    default: int | None,
    *,
    lo: int,
    hi: int | None = None,
    nullable: bool = False,
) -> int | None:
    if key not in obj:
        return default
    v = obj.get(key)
    if v is None:
        if nullable:
            return None
        raise LimitsSpecError(f"limits: field '{key}' cannot be null")
    # bool is an int subclass: reject it explicitly
    if isinstance(v, bool) or not isinstance(v, int):
        raise LimitsSpecError(f"limits: field '{key}' must be an integer")
    if v < lo or (hi is not None and v > hi):
        rng = f">= {lo}" if hi is None else f"in [{lo}, {hi}]"
        raise LimitsSpecError(f"limits: field '{key}' must be {rng} (got {v})")
    return v


def _optional_encoding(obj: dict[str, Any]) -> str:
    v = obj.get("encoding", DEFAULT_LIMITS.encoding)
    if not isinstance(v, str) or not v.strip():
        raise LimitsSpecError("limits: field 'encoding' must be a string")
    check_text_encoding(v.strip())
    return v.strip()


def _optional_newline(obj: dict[str, Any]) -> str:
    v = obj.get("newline", DEFAULT_LIMITS.newline)
    if not isinstance(v, str) or v not in NEWLINES:
        allowed = ", ".join(repr(k) for k in NEWLINES)
        raise LimitsSpecError(f"limits: field 'newline' must be one of {allowed}")
    return v


def load_limits_spec(limits_arg: str) -> StreamLimits:
    """Load and validate a limits spec.

    limits_arg:
      - '@file.json'
      - inline JSON object
    """
    obj = _load_json_arg(limits_arg)

    # Strict key set (keep it small and stable).
    allowed = {
        "spec",
        "native_int_size",
        "max_varint_groups",
        "max_until_bytes",
        "encoding",
        "newline",
    }
    extra = sorted(set(obj.keys()) - allowed)
    if extra:
        raise LimitsSpecError(f"limits: unsupported keys: {', '.join(extra)}")

    spec_id = obj.get("spec")
    if spec_id != SPEC_ID_V1:
        raise LimitsSpecError(
            f"limits: unsupported spec: {spec_id!r} (expected {SPEC_ID_V1!r})"
        )

    native_int_size = _optional_int(
        obj, "native_int_size", DEFAULT_LIMITS.native_int_size, lo=1, hi=64
    )
    max_varint_groups = _optional_int(
        obj, "max_varint_groups", DEFAULT_LIMITS.max_varint_groups, lo=1, nullable=True
    )
    max_until_bytes = _optional_int(
        obj, "max_until_bytes", DEFAULT_LIMITS.max_until_bytes, lo=1, nullable=True
    )
    if native_int_size is None:
        raise LimitsSpecError("limits: field 'native_int_size' cannot be null")

    return StreamLimits(
        native_int_size=native_int_size,
        max_varint_groups=max_varint_groups,
        max_until_bytes=max_until_bytes,
        encoding=_optional_encoding(obj),
        newline=_optional_newline(obj),
    )
