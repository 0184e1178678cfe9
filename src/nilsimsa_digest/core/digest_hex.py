"""Hex rendering of Nilsimsa digests.

The 64-character hex string is the only persisted form of a digest.
Rendering is uppercase; parsing accepts either case but nothing else
(no whitespace, no 0x prefix).
"""

from __future__ import annotations

from nilsimsa_digest.core.distance import DIGEST_SIZE
from nilsimsa_digest.errors import DigestFormatError

HEXDIGEST_LEN = DIGEST_SIZE * 2

_HEX_CHARS = frozenset("0123456789abcdefABCDEF")


def is_hexdigest(s: str) -> bool:
    return isinstance(s, str) and len(s) == HEXDIGEST_LEN and all(c in _HEX_CHARS for c in s)


def hexdigest_of(digest: bytes) -> str:
    return bytes(digest).hex().upper()


def parse_hexdigest(s: str) -> bytes:
    """Decode a 64-character hex digest into its 32 bytes.

    Raises DigestFormatError on wrong length or non-hex characters.
    """
    if not isinstance(s, str):
        raise DigestFormatError(f"hex digest must be a string, got {type(s).__name__}")
    if len(s) != HEXDIGEST_LEN:
        raise DigestFormatError(
            f"hex digest must be {HEXDIGEST_LEN} characters, got {len(s)}"
        )
    bad = sorted({c for c in s if c not in _HEX_CHARS})
    if bad:
        raise DigestFormatError(f"hex digest has non-hex characters: {''.join(bad)!r}")
    return bytes.fromhex(s)
