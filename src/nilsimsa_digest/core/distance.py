from __future__ import annotations

from nilsimsa_digest.errors import DigestFormatError

DIGEST_SIZE = 32
DIGEST_BITS = DIGEST_SIZE * 8


def _require_digest(d: bytes, *, where: str) -> bytes:
    b = bytes(d)
    if len(b) != DIGEST_SIZE:
        raise DigestFormatError(f"{where}: digest must be {DIGEST_SIZE} bytes, got {len(b)}")
    return b


def bitwise_difference(d1: bytes, d2: bytes) -> int:
    """Number of differing bits between two 32-byte digests (0..256).

    The digests are compared as 8 little-endian 32-bit words.
    """
    a = _require_digest(d1, where="bitwise_difference")
    b = _require_digest(d2, where="bitwise_difference")
    distance = 0
    for i in range(0, DIGEST_SIZE, 4):
        w1 = int.from_bytes(a[i : i + 4], "little")
        w2 = int.from_bytes(b[i : i + 4], "little")
        distance += bin(w1 ^ w2).count("1")
    return distance


def similarity(d1: bytes, d2: bytes) -> int:
    """Nilsimsa score in [-128, 128]; 128 means identical digests."""
    return DIGEST_BITS // 2 - bitwise_difference(d1, d2)
