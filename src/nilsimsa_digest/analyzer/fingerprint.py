from __future__ import annotations

import fnmatch
import json
from collections.abc import Iterator
from dataclasses import asdict, dataclass
from pathlib import Path

from nilsimsa_digest.core.input_codecs import AUTO, iter_file_chunks, resolve_codec_id
from nilsimsa_digest.core.nilsimsa import Nilsimsa
from nilsimsa_digest.errors import CorruptInput
from nilsimsa_digest.scan_spec import ScanSpecV1


@dataclass(frozen=True)
class FileFingerprint:
    path: str
    codec: str
    size: int
    digest: str


def fingerprint_file(
    path: Path, *, codec: str = AUTO, max_bytes: int | None = None
) -> FileFingerprint:
    """Nilsimsa digest of the decoded content of one file."""
    cid = resolve_codec_id(codec, path)
    n = Nilsimsa()
    for chunk in iter_file_chunks(path, cid, max_bytes=max_bytes):
        n.update(chunk)
    return FileFingerprint(path=str(path), codec=cid, size=n.count, digest=n.hexdigest())


def _selected(rel: str, spec: ScanSpecV1) -> bool:
    if not any(fnmatch.fnmatchcase(rel, pat) for pat in spec.include):
        return False
    return not any(fnmatch.fnmatchcase(rel, pat) for pat in spec.exclude)


def iter_files(root: Path, spec: ScanSpecV1) -> Iterator[Path]:
    # sorted: the report must not depend on filesystem order
    for p in sorted(root.rglob("*"), key=lambda x: x.relative_to(root).as_posix()):
        if p.is_file() and _selected(p.relative_to(root).as_posix(), spec):
            yield p


def analyze_dir(root: Path, *, out_jsonl: Path, spec: ScanSpecV1 | None = None) -> int:
    """Fingerprint every selected file under ``root`` into a JSONL report.

    Unreadable or undecodable files become ``{"path", "rel", "error"}`` records;
    a missing optional library (zstandard) aborts the scan.
    """
    spec = spec or ScanSpecV1()
    root = root.resolve()
    out_abs = out_jsonl.resolve()
    n = 0
    with out_jsonl.open("w", encoding="utf-8") as f:
        for p in iter_files(root, spec):
            if p == out_abs:
                continue
            rel = p.relative_to(root).as_posix()
            try:
                fp = fingerprint_file(p, codec=spec.codec, max_bytes=spec.max_bytes)
            except (OSError, CorruptInput) as e:
                rec = {"path": str(p), "rel": rel, "error": str(e)}
            else:
                rec = {"rel": rel, **asdict(fp)}
            f.write(json.dumps(rec, ensure_ascii=False) + "\n")
            n += 1
    print(f"scan: wrote {n} records -> {out_jsonl}")
    return n

