"""Typed errors for binstream.

Single source of truth for exit codes lives here.

Policy:
- Errors are small and boring.
- Codec errors propagate immediately: no retry, no partial-state repair.
- The CLI maps errors to stable exit codes (see EXIT_* constants).
- docs/exit_codes.md is generated from this module (scripts/gen_exit_codes_md.py).
"""

from __future__ import annotations

from dataclasses import dataclass

# -------------------------
# Exit codes (single source)
# -------------------------

EXIT_OK = 0
EXIT_USAGE = 2
EXIT_GENERIC = 10
EXIT_IO = 11
EXIT_OVERFLOW = 12
EXIT_DECODE = 13


@dataclass(frozen=True, slots=True)
class ExitCodeInfo:
    code: int
    name: str
    description: str


EXIT_CODES: tuple[ExitCodeInfo, ...] = (
    ExitCodeInfo(EXIT_OK, "OK", "Success"),
    ExitCodeInfo(
        EXIT_USAGE,
        "USAGE",
        "Usage/config error (invalid args, invalid limits spec, closed stream, etc.)",
    ),
    ExitCodeInfo(EXIT_GENERIC, "GENERIC", "Generic failure (unexpected error)"),
    ExitCodeInfo(EXIT_IO, "IO", "Transport failure on open/read/write/seek/tell"),
    ExitCodeInfo(EXIT_OVERFLOW, "OVERFLOW", "Integer width exceeds the native integer size"),
    ExitCodeInfo(
        EXIT_DECODE,
        "DECODE",
        "Malformed input (truncated or oversized varint, missing delimiter)",
    ),
)

_EXIT_CODE_BY_CODE: dict[int, ExitCodeInfo] = {e.code: e for e in EXIT_CODES}


def exit_code_info(code: int) -> ExitCodeInfo | None:
    return _EXIT_CODE_BY_CODE.get(int(code))


def render_exit_codes_markdown() -> str:
    """Render docs/exit_codes.md content."""
    lines: list[str] = []
    lines.append("# Exit codes\n")
    lines.append("> GENERATED FILE - do not edit manually.\n")
    lines.append("> Source of truth: `src/binstream/errors.py` (EXIT_CODES).\n")
    lines.append("> Regenerate: `python scripts/gen_exit_codes_md.py`.\n\n")
    lines.append("These are the CLI exit codes you can rely on.\n\n")
    lines.append("| Code | Name | Meaning |\n")
    lines.append("|---:|---|---|\n")
    for e in sorted(EXIT_CODES, key=lambda x: x.code):
        lines.append(f"| {e.code} | `{e.name}` | {e.description} |\n")
    lines.append("\n## Notes\n")
    lines.append("- Every library error extends `BinStreamError` and carries an `exit_code`.\n")
    lines.append("- `--debug` re-raises errors to show full stack traces.\n")
    lines.append("- End of stream is not an error for `read_byte()` (returns -1) or `eof()`.\n")
    return "".join(lines)


# ---------------
# Typed exceptions
# ---------------


class BinStreamError(Exception):
    """Base error for binstream."""

    exit_code: int = EXIT_GENERIC


class UsageError(BinStreamError):
    exit_code = EXIT_USAGE


class InvalidArgumentError(UsageError, ValueError):
    """Caller passed a value the codec cannot encode (e.g. a negative varint)."""


class StreamClosedError(UsageError):
    """Operation attempted on a stream handle that was already closed."""


class StreamIOError(BinStreamError):
    """The transport reported a failure.

    ``op`` names the transport operation (read, write, seek, ...) and
    ``diagnostic`` carries the underlying system message.
    """

    exit_code = EXIT_IO

    def __init__(self, op: str, diagnostic: str) -> None:
        super().__init__(f"could not {op}: {diagnostic}")
        self.op = op
        self.diagnostic = diagnostic


class StreamOverflowError(BinStreamError, OverflowError):
    exit_code = EXIT_OVERFLOW


class DecodeError(BinStreamError):
    exit_code = EXIT_DECODE


class VarIntTooLong(DecodeError):
    pass


class DelimiterNotFound(DecodeError):
    """Delimiter missing before end of stream or before the byte limit.

    ``partial`` holds what was consumed before giving up.
    """

    def __init__(self, message: str, partial: bytes = b"") -> None:
        super().__init__(message)
        self.partial = partial
