"""nilsimsa-digest CLI.

This is the stable CLI entrypoint (console-script: ``nilsimsa-digest``).

UX policy:
  - Digests are printed as 64 uppercase hex characters.
  - Text is hashed as bytes in an explicit encoding (--encoding, default utf-8),
    never in the platform default.
  - Errors go to stderr as ``[nilsimsa-digest] ...`` with a stable exit code.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from nilsimsa_digest.errors import NilsimsaDigestError, UsageError
from nilsimsa_digest.scan_spec import ScanSpecError, ScanSpecV1, load_scan_spec

PROG = "nilsimsa-digest"


def _add_common_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--debug", action="store_true", help="Show stack traces on errors")


def _add_input_args(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--codec",
        default=None,
        help="Input decoding: auto (by suffix), raw, zlib, zstd (default: auto)",
    )
    p.add_argument(
        "--max-bytes",
        type=int,
        default=None,
        help="Fingerprint only the first N decoded bytes of each file",
    )


def _load_spec(spec_arg: str | None) -> ScanSpecV1:
    return load_scan_spec(spec_arg) if spec_arg else ScanSpecV1()


def _cmd_digest(paths: list[Path], *, codec: str | None, max_bytes: int | None) -> int:
    from nilsimsa_digest.analyzer.fingerprint import fingerprint_file

    spec = ScanSpecV1().with_overrides(codec=codec, max_bytes=max_bytes)
    for p in paths:
        fp = fingerprint_file(p, codec=spec.codec, max_bytes=spec.max_bytes)
        print(f"{fp.digest}  {p}")
    return 0


def _cmd_text(text: str, *, encoding: str) -> int:
    from nilsimsa_digest.core.nilsimsa import Nilsimsa

    try:
        data = text.encode(encoding)
    except LookupError as e:
        raise UsageError(f"unknown encoding: {encoding}") from e
    except UnicodeEncodeError as e:
        raise UsageError(f"text cannot be encoded as {encoding}: {e}") from e
    print(Nilsimsa(data).hexdigest())
    return 0


def _digest_arg(arg: str, *, as_hex: bool, codec: str) -> bytes:
    from nilsimsa_digest.analyzer.fingerprint import fingerprint_file
    from nilsimsa_digest.core.digest_hex import parse_hexdigest

    if as_hex:
        return parse_hexdigest(arg.strip())
    return parse_hexdigest(fingerprint_file(Path(arg), codec=codec).digest)


def _cmd_compare(a: str, b: str, *, as_hex: bool, codec: str | None) -> int:
    from nilsimsa_digest.core.distance import bitwise_difference, similarity

    spec = ScanSpecV1().with_overrides(codec=codec)
    d1 = _digest_arg(a, as_hex=as_hex, codec=spec.codec)
    d2 = _digest_arg(b, as_hex=as_hex, codec=spec.codec)
    print(f"score={similarity(d1, d2)} distance={bitwise_difference(d1, d2)}")
    return 0


def _cmd_hex_validate(s: str) -> int:
    from nilsimsa_digest.core.digest_hex import parse_hexdigest

    parse_hexdigest(s)
    print("OK")
    return 0


def _cmd_scan(
    input_dir: Path,
    out_jsonl: Path,
    *,
    spec_arg: str | None,
    codec: str | None,
    max_bytes: int | None,
) -> int:
    from nilsimsa_digest.analyzer.fingerprint import analyze_dir

    if not input_dir.is_dir():
        raise UsageError(f"not a directory: {input_dir}")
    spec = _load_spec(spec_arg).with_overrides(codec=codec, max_bytes=max_bytes)
    analyze_dir(input_dir, out_jsonl=out_jsonl, spec=spec)
    return 0


def _cmd_groups(
    report_jsonl: Path, out_jsonl: Path, *, spec_arg: str | None, threshold: int | None
) -> int:
    from nilsimsa_digest.analyzer.near_dup import group_report

    # precedence: CLI --threshold > spec.threshold > default
    spec = _load_spec(spec_arg).with_overrides(threshold=threshold)
    group_report(report_jsonl, out_jsonl=out_jsonl, threshold=spec.threshold)
    return 0


def _cmd_spec_validate(spec_arg: str) -> int:
    # load is the validation
    load_scan_spec(spec_arg)
    print("OK")
    return 0


def _cmd_exit_codes() -> int:
    from nilsimsa_digest.errors import render_exit_codes_markdown

    sys.stdout.write(render_exit_codes_markdown())
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog=PROG, description="Nilsimsa locality-sensitive digests and near-duplicate search"
    )
    sub = p.add_subparsers(dest="cmd", required=True)

    p_d = sub.add_parser("digest", help="Print the digest of each file")
    p_d.add_argument("paths", nargs="+", type=Path)
    _add_input_args(p_d)
    _add_common_args(p_d)

    p_t = sub.add_parser("text", help="Print the digest of a text argument")
    p_t.add_argument("text")
    p_t.add_argument(
        "--encoding", default="utf-8", help="Encoding used to turn text into bytes (default: utf-8)"
    )
    _add_common_args(p_t)

    p_c = sub.add_parser("compare", help="Compare two files (or two hex digests with --hex)")
    p_c.add_argument("a")
    p_c.add_argument("b")
    p_c.add_argument("--hex", action="store_true", help="Arguments are 64-char hex digests")
    p_c.add_argument(
        "--codec", default=None, help="Input decoding for files: auto, raw, zlib, zstd"
    )
    _add_common_args(p_c)

    p_hv = sub.add_parser("hex-validate", help="Check that a string is a valid hex digest")
    p_hv.add_argument("hexdigest")
    _add_common_args(p_hv)

    p_s = sub.add_parser("scan", help="Fingerprint a directory into a JSONL report")
    p_s.add_argument("input_dir", type=Path)
    p_s.add_argument("output", type=Path)
    p_s.add_argument(
        "--spec",
        default=None,
        help="Scan spec JSON. Use '@file.json' to load from file, or pass JSON inline.",
    )
    _add_input_args(p_s)
    _add_common_args(p_s)

    p_g = sub.add_parser("groups", help="Group near-duplicates from a scan report")
    p_g.add_argument("report", type=Path)
    p_g.add_argument("output", type=Path)
    p_g.add_argument("--spec", default=None, help="Scan spec JSON (@file.json or inline JSON)")
    p_g.add_argument(
        "--threshold",
        type=int,
        default=None,
        help="Minimum score in [-128, 128] (default: spec.threshold or 64)",
    )
    _add_common_args(p_g)

    p_sv = sub.add_parser("spec-validate", help="Validate a scan spec (v1)")
    p_sv.add_argument("spec", help="Scan spec JSON (@file.json or inline JSON)")
    _add_common_args(p_sv)

    p_ec = sub.add_parser("exit-codes", help="Print the exit code table (markdown)")
    _add_common_args(p_ec)

    return p


def main(argv: list[str] | None = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)
    p = build_parser()
    ns = p.parse_args(argv)

    try:
        if ns.cmd == "digest":
            return _cmd_digest(ns.paths, codec=ns.codec, max_bytes=ns.max_bytes)
        if ns.cmd == "text":
            return _cmd_text(ns.text, encoding=ns.encoding)
        if ns.cmd == "compare":
            return _cmd_compare(ns.a, ns.b, as_hex=bool(ns.hex), codec=ns.codec)
        if ns.cmd == "hex-validate":
            return _cmd_hex_validate(ns.hexdigest)
        if ns.cmd == "scan":
            return _cmd_scan(
                ns.input_dir,
                ns.output,
                spec_arg=ns.spec,
                codec=ns.codec,
                max_bytes=ns.max_bytes,
            )
        if ns.cmd == "groups":
            return _cmd_groups(ns.report, ns.output, spec_arg=ns.spec, threshold=ns.threshold)
        if ns.cmd == "spec-validate":
            return _cmd_spec_validate(str(ns.spec))
        if ns.cmd == "exit-codes":
            return _cmd_exit_codes()
        raise AssertionError("unreachable")

    except SystemExit:
        raise
    except ScanSpecError as e:
        # Treat as usage/config error.
        if getattr(ns, "debug", False):
            raise
        print(f"[{PROG}] {e}", file=sys.stderr)
        return 2
    except NilsimsaDigestError as e:
        if getattr(ns, "debug", False):
            raise
        print(f"[{PROG}] {e}", file=sys.stderr)
        return int(getattr(e, "exit_code", 10) or 10)
    except Exception as e:
        if getattr(ns, "debug", False):
            raise
        print(f"[{PROG}] error: {e}", file=sys.stderr)
        return 10


if __name__ == "__main__":
    raise SystemExit(main())
