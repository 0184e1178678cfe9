"""Typed errors for nilsimsa-digest.

Single source of truth for exit codes lives here.

Policy:
- Errors are small and boring.
- The digest engine itself never raises: only hex decoding, input decoding and
  configuration can fail.
- The CLI maps errors to stable exit codes (see EXIT_* constants).
- docs/exit_codes.md is generated from this module (``nilsimsa-digest exit-codes``).
"""

from __future__ import annotations

from dataclasses import dataclass

# -------------------------
# Exit codes (single source)
# -------------------------

EXIT_OK = 0
EXIT_USAGE = 2
EXIT_GENERIC = 10
EXIT_BAD_DIGEST = 11
EXIT_MISSING_DEPENDENCY = 12
EXIT_CORRUPT_INPUT = 13


@dataclass(frozen=True, slots=True)
class ExitCodeInfo:
    code: int
    name: str
    description: str


EXIT_CODES: tuple[ExitCodeInfo, ...] = (
    ExitCodeInfo(EXIT_OK, "OK", "Success"),
    ExitCodeInfo(EXIT_USAGE, "USAGE", "Usage/config error (invalid args, invalid scan spec, etc.)"),
    ExitCodeInfo(EXIT_GENERIC, "GENERIC", "Generic failure (unreadable file, unexpected error, etc.)"),
    ExitCodeInfo(EXIT_BAD_DIGEST, "BAD_DIGEST", "Malformed hex digest (not 64 hex characters)"),
    ExitCodeInfo(
        EXIT_MISSING_DEPENDENCY,
        "MISSING_DEPENDENCY",
        "Optional library not installed (e.g. zstandard for .zst inputs)",
    ),
    ExitCodeInfo(EXIT_CORRUPT_INPUT, "CORRUPT_INPUT", "Compressed input cannot be decoded"),
)

def render_exit_codes_markdown() -> str:
    """Render docs/exit_codes.md content."""
    lines: list[str] = []
    lines.append("# Exit codes\n")
    lines.append("> GENERATED FILE - do not edit manually.\n")
    lines.append("> Source of truth: `src/nilsimsa_digest/errors.py` (EXIT_CODES).\n")
    lines.append("> Regenerate: `nilsimsa-digest exit-codes > docs/exit_codes.md`.\n\n")
    lines.append("These are the CLI exit codes you can rely on.\n\n")
    lines.append("| Code | Name | Meaning |\n")
    lines.append("|---:|---|---|\n")
    for e in sorted(EXIT_CODES, key=lambda x: x.code):
        lines.append(f"| {e.code} | `{e.name}` | {e.description} |\n")
    lines.append("\n## Notes\n")
    lines.append("- Internal errors extend `NilsimsaDigestError` and carry an `exit_code`.\n")
    lines.append("- Scan spec errors (`ScanSpecError`) map to `USAGE`.\n")
    lines.append("- `--debug` re-raises errors to show full stack traces.\n")
    return "".join(lines)


# ---------------
# Typed exceptions
# ---------------


class NilsimsaDigestError(Exception):
    """Base error for nilsimsa-digest."""

    exit_code: int = EXIT_GENERIC


class UsageError(NilsimsaDigestError):
    exit_code = EXIT_USAGE


class DigestFormatError(NilsimsaDigestError, ValueError):
    """An external hex digest is not exactly 64 hexadecimal characters."""

    exit_code = EXIT_BAD_DIGEST


class MissingDependency(NilsimsaDigestError):
    exit_code = EXIT_MISSING_DEPENDENCY


class CorruptInput(NilsimsaDigestError):
    exit_code = EXIT_CORRUPT_INPUT
