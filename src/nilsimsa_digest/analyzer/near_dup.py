"""Near-duplicate grouping over a scan report.

Two files are near-duplicates when the Nilsimsa score of their digests is
>= threshold. Groups are the connected components of that relation, so a
group can contain pairs that are only linked through a third file.

Pairwise comparison is O(n^2): fine for a few thousand files.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Tuple

from nilsimsa_digest.core.digest_hex import parse_hexdigest
from nilsimsa_digest.core.distance import similarity


@dataclass(frozen=True)
class NearDupPair:
    a: str
    b: str
    score: int


@dataclass(frozen=True)
class NearDupGroup:
    group: int
    members: Tuple[str, ...]
    min_score: int


def load_report(report_jsonl: Path) -> List[dict]:
    records: List[dict] = []
    with report_jsonl.open("r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line:
                continue
            records.append(json.loads(line))
    return records


def _digests(records: List[dict]) -> List[Tuple[str, bytes]]:
    by_key: Dict[str, bytes] = {}
    for r in records:
        if "digest" not in r:
            # error records from the scan
            continue
        key = str(r.get("rel") or r.get("path"))
        digest = parse_hexdigest(str(r["digest"]))
        # concatenated reports repeat keys: first record wins
        by_key.setdefault(key, digest)
    return sorted(by_key.items())


def find_near_duplicates(records: List[dict], *, threshold: int) -> List[NearDupPair]:
    items = _digests(records)
    pairs: List[NearDupPair] = []
    for i in range(len(items)):
        ka, da = items[i]
        for j in range(i + 1, len(items)):
            kb, db = items[j]
            score = similarity(da, db)
            if score >= threshold:
                pairs.append(NearDupPair(a=ka, b=kb, score=score))
    return pairs


def _find(parent: Dict[str, str], x: str) -> str:
    while parent[x] != x:
        parent[x] = parent[parent[x]]
        x = parent[x]
    return x


def group_near_duplicates(records: List[dict], *, threshold: int) -> List[NearDupGroup]:
    pairs = find_near_duplicates(records, threshold=threshold)

    parent: Dict[str, str] = {}
    for p in pairs:
        parent.setdefault(p.a, p.a)
        parent.setdefault(p.b, p.b)
        ra, rb = _find(parent, p.a), _find(parent, p.b)
        if ra != rb:
            # smallest key is the root: keeps output stable
            if rb < ra:
                ra, rb = rb, ra
            parent[rb] = ra

    members: Dict[str, List[str]] = {}
    for k in parent:
        members.setdefault(_find(parent, k), []).append(k)
    min_score: Dict[str, int] = {}
    for p in pairs:
        root = _find(parent, p.a)
        min_score[root] = min(min_score.get(root, p.score), p.score)

    roots = [root for root in sorted(members) if len(members[root]) >= 2]
    groups: List[NearDupGroup] = []
    for gi, root in enumerate(roots):
        groups.append(
            NearDupGroup(group=gi, members=tuple(sorted(members[root])), min_score=min_score[root])
        )
    return groups


def group_report(report_jsonl: Path, *, out_jsonl: Path, threshold: int) -> int:
    groups = group_near_duplicates(load_report(report_jsonl), threshold=threshold)
    with out_jsonl.open("w", encoding="utf-8") as f:
        for g in groups:
            rec = {"group": g.group, "members": list(g.members), "min_score": g.min_score}
            f.write(json.dumps(rec, ensure_ascii=False) + "\n")
    print(f"groups: wrote {len(groups)} groups -> {out_jsonl}")
    return len(groups)
