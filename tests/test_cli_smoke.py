from __future__ import annotations

import json
import os
import subprocess
import sys
import zlib
from pathlib import Path

import pytest

pytestmark = pytest.mark.p1

SHORT_MSG_HEX = "0BC08E2AC24644D48C08B4D12A9004781C054653D05A539A446A24F9A00027B1"
SHORT_MSG_BANG_HEX = "0BC08E2AC24644F48C08B4D52A9004781C054653D05A539A546A24F9A00027B1"
UMLAUT_HEX = "0040200000000000000000000000000000001000000000000000000000004000"


def _run_cli(*args: str, cwd: Path | None = None) -> subprocess.CompletedProcess[str]:
    """Run nilsimsa-digest CLI through a python -c wrapper.

    This avoids assuming the console-script entrypoint is installed.
    """
    src = str(Path(__file__).resolve().parents[1] / "src")
    env = dict(os.environ)
    env["PYTHONPATH"] = os.pathsep.join(p for p in (src, env.get("PYTHONPATH")) if p)
    env["PYTHONUTF8"] = "1"
    cmd = [
        sys.executable,
        "-c",
        "from nilsimsa_digest.cli import main; raise SystemExit(main())",
        *args,
    ]
    return subprocess.run(
        cmd,
        cwd=str(cwd) if cwd else None,
        env=env,
        text=True,
        capture_output=True,
    )


def test_cli_text_digest() -> None:
    r = _run_cli("text", "A short test message")
    assert r.returncode == 0, (r.stdout, r.stderr)
    assert r.stdout.strip() == SHORT_MSG_HEX


def test_cli_text_explicit_encoding() -> None:
    r = _run_cli("text", "äö", "--encoding", "utf-8")
    assert r.returncode == 0, (r.stdout, r.stderr)
    assert r.stdout.strip() == UMLAUT_HEX

    r = _run_cli("text", "abc", "--encoding", "no-such-codec")
    assert r.returncode == 2
    assert "[nilsimsa-digest]" in r.stderr


def test_cli_digest_files(tmp_path: Path) -> None:
    a = tmp_path / "a.txt"
    b = tmp_path / "b.txt.zz"
    a.write_bytes(b"A short test message")
    b.write_bytes(zlib.compress(b"A short test message!"))

    r = _run_cli("digest", str(a), str(b))
    assert r.returncode == 0, (r.stdout, r.stderr)
    lines = r.stdout.splitlines()
    assert lines == [f"{SHORT_MSG_HEX}  {a}", f"{SHORT_MSG_BANG_HEX}  {b}"]


def test_cli_digest_missing_file_exit_10(tmp_path: Path) -> None:
    r = _run_cli("digest", str(tmp_path / "missing.txt"))
    assert r.returncode == 10
    assert "[nilsimsa-digest] error:" in r.stderr


def test_cli_digest_corrupt_input_exit_13(tmp_path: Path) -> None:
    p = tmp_path / "bad.zz"
    p.write_bytes(b"not zlib")
    r = _run_cli("digest", str(p))
    assert r.returncode == 13
    assert "[nilsimsa-digest]" in r.stderr


def test_cli_compare_hex_and_files(tmp_path: Path) -> None:
    r = _run_cli("compare", "--hex", SHORT_MSG_HEX, SHORT_MSG_BANG_HEX.lower())
    assert r.returncode == 0, (r.stdout, r.stderr)
    assert r.stdout.strip() == "score=125 distance=3"

    a = tmp_path / "a.txt"
    b = tmp_path / "b.txt"
    a.write_bytes(b"A short test message")
    b.write_bytes(b"Something completely different")
    r = _run_cli("compare", str(a), str(b))
    assert r.returncode == 0, (r.stdout, r.stderr)
    assert r.stdout.strip() == "score=-5 distance=133"


def test_cli_hex_validate_exit_codes() -> None:
    r = _run_cli("hex-validate", SHORT_MSG_HEX)
    assert r.returncode == 0, (r.stdout, r.stderr)
    assert "OK" in r.stdout

    r = _run_cli("hex-validate", SHORT_MSG_HEX[:-1])
    assert r.returncode == 11
    assert "[nilsimsa-digest]" in r.stderr

    r = _run_cli("compare", "--hex", "Z" * 64, SHORT_MSG_HEX)
    assert r.returncode == 11


def test_cli_scan_and_groups(tmp_path: Path) -> None:
    in_dir = tmp_path / "in"
    in_dir.mkdir()
    (in_dir / "a.txt").write_text("The quick brown fox jumps over the lazy dog", encoding="utf-8")
    (in_dir / "b.txt").write_text("The quick brown fox jumps over the lazy dog!", encoding="utf-8")
    (in_dir / "c.txt").write_text("Something completely different", encoding="utf-8")

    report = tmp_path / "report.jsonl"
    groups = tmp_path / "groups.jsonl"

    spec = {"spec": "nilsimsa-digest.scan.v1", "include": ["*.txt"], "threshold": 120}
    spec_file = tmp_path / "scan.json"
    spec_file.write_text(json.dumps(spec), encoding="utf-8")

    r = _run_cli("spec-validate", f"@{spec_file}")
    assert r.returncode == 0, (r.stdout, r.stderr)
    assert "OK" in r.stdout

    r = _run_cli("scan", str(in_dir), str(report), "--spec", f"@{spec_file}")
    assert r.returncode == 0, (r.stdout, r.stderr)
    assert "scan: wrote 3 records" in r.stdout

    r = _run_cli("groups", str(report), str(groups), "--spec", f"@{spec_file}")
    assert r.returncode == 0, (r.stdout, r.stderr)
    recs = [json.loads(x) for x in groups.read_text(encoding="utf-8").splitlines()]
    assert recs == [{"group": 0, "members": ["a.txt", "b.txt"], "min_score": 126}]

    # --threshold wins over spec.threshold
    r = _run_cli(
        "groups", str(report), str(groups), "--spec", f"@{spec_file}", "--threshold", "127"
    )
    assert r.returncode == 0, (r.stdout, r.stderr)
    assert groups.read_text(encoding="utf-8") == ""


def test_cli_spec_validate_rejects_bad_json_exit_2() -> None:
    r = _run_cli("spec-validate", "{}")
    assert r.returncode == 2
    assert "[nilsimsa-digest]" in r.stderr


def test_cli_scan_rejects_non_directory_exit_2(tmp_path: Path) -> None:
    r = _run_cli("scan", str(tmp_path / "nope"), str(tmp_path / "r.jsonl"))
    assert r.returncode == 2
    assert "not a directory" in r.stderr


def test_cli_debug_reraises() -> None:
    r = _run_cli("hex-validate", "xyz", "--debug")
    assert r.returncode == 1
    assert "DigestFormatError" in r.stderr


def test_cli_exit_codes_matches_docs() -> None:
    r = _run_cli("exit-codes")
    assert r.returncode == 0, (r.stdout, r.stderr)
    docs = Path(__file__).resolve().parents[1] / "docs" / "exit_codes.md"
    assert r.stdout == docs.read_text(encoding="utf-8")
