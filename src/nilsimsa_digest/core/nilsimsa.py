"""Nilsimsa digest engine.

A Nilsimsa digest is a 256-bit locality-sensitive fingerprint: inputs that
share most of their byte trigrams get digests that differ in few bits.

State per instance:
  - count: bytes seen
  - 256 accumulators, one per tran3() output value
  - the last 4 bytes seen (newest first, -1 = not yet seen)
  - the cached digest, dropped on every update()

The engine works on bytes only. Text must be encoded by the caller with an
explicit encoding (the CLI uses --encoding, default utf-8).

Instances are not thread-safe: serialize access to a shared instance.
"""

from __future__ import annotations

from nilsimsa_digest.core.digest_hex import hexdigest_of, parse_hexdigest
from nilsimsa_digest.core.distance import DIGEST_BITS, DIGEST_SIZE, bitwise_difference
from nilsimsa_digest.core.tran_table import tran3

_NO_BYTE = -1


def _threshold(count: int) -> int:
    # empirical base from the reference algorithm: keep exactly as is
    if count < 3:
        total = 0
    elif count == 3:
        total = 1
    elif count == 4:
        total = 4
    else:
        total = 8 * count - 28
    return total // 256


class Nilsimsa:
    """Incremental Nilsimsa hasher.

    >>> Nilsimsa(b"A short test message").compare(Nilsimsa(b"A short test message!"))
    125
    """

    __slots__ = ("_count", "_acc", "_h0", "_h1", "_h2", "_h3", "_digest")

    def __init__(self, data: bytes | bytearray | memoryview | None = None):
        self._acc = [0] * 256
        self.reset()
        if data is not None:
            self.update(data)

    # ------------------------------------------------------------------
    # state
    # ------------------------------------------------------------------

    @property
    def count(self) -> int:
        return self._count

    @property
    def accumulators(self) -> tuple[int, ...]:
        return tuple(self._acc)

    @property
    def history(self) -> tuple[int, int, int, int]:
        """Last four bytes seen, newest first (-1 where not yet available)."""
        return (self._h0, self._h1, self._h2, self._h3)

    @property
    def is_finalized(self) -> bool:
        return self._digest is not None

    def reset(self) -> Nilsimsa:
        self._count = 0
        self._acc[:] = [0] * 256
        self._h0 = self._h1 = self._h2 = self._h3 = _NO_BYTE
        self._digest = None
        return self

    def update(self, data: bytes | bytearray | memoryview) -> Nilsimsa:
        """Feed more bytes. Returns self so calls can be chained."""
        if isinstance(data, str):
            raise TypeError(
                "Nilsimsa.update() wants bytes: encode text explicitly (e.g. .encode('utf-8'))"
            )

        acc = self._acc
        h0, h1, h2, h3 = self._h0, self._h1, self._h2, self._h3
        n = 0
        for v in memoryview(data).cast("B"):
            n += 1
            if h1 != _NO_BYTE:
                acc[tran3(v, h0, h1, 0)] += 1
            if h2 != _NO_BYTE:
                acc[tran3(v, h0, h2, 1)] += 1
                acc[tran3(v, h1, h2, 2)] += 1
            if h3 != _NO_BYTE:
                acc[tran3(v, h0, h3, 3)] += 1
                acc[tran3(v, h1, h3, 4)] += 1
                acc[tran3(v, h2, h3, 5)] += 1
                acc[tran3(h3, h0, v, 6)] += 1
                acc[tran3(h3, h2, v, 7)] += 1
            h3, h2, h1, h0 = h2, h1, h0, v

        self._count += n
        self._h0, self._h1, self._h2, self._h3 = h0, h1, h2, h3
        self._digest = None
        return self

    # ------------------------------------------------------------------
    # digest
    # ------------------------------------------------------------------

    def _finalize(self) -> bytes:
        threshold = _threshold(self._count)
        out = bytearray(DIGEST_SIZE)
        for i, a in enumerate(self._acc):
            if a > threshold:
                out[DIGEST_SIZE - 1 - (i >> 3)] |= 1 << (i & 7)
        return bytes(out)

    def digest(self, data: bytes | bytearray | memoryview | None = None) -> bytes:
        """Return the 32-byte digest.

        With ``data``: reset, hash ``data`` and return its digest.
        """
        if data is not None:
            self.reset()
            self.update(data)
        if self._digest is None:
            self._digest = self._finalize()
        return self._digest

    def hexdigest(self, data: bytes | bytearray | memoryview | None = None) -> str:
        """Uppercase 64-character hex form of digest()."""
        return hexdigest_of(self.digest(data))

    @classmethod
    def get_hash(cls, data: bytes | bytearray | memoryview) -> Nilsimsa:
        return cls().update(data)

    @staticmethod
    def from_hexdigest(s: str) -> bytes:
        """Decode an external hex digest (DigestFormatError if malformed)."""
        return parse_hexdigest(s)

    # ------------------------------------------------------------------
    # comparison
    # ------------------------------------------------------------------

    def bitwise_difference(self, other: Nilsimsa | bytes) -> int:
        """Hamming distance (0..256) between this digest and ``other``."""
        d2 = other.digest() if isinstance(other, Nilsimsa) else other
        return bitwise_difference(self.digest(), d2)

    def compare(self, other: Nilsimsa | bytes) -> int:
        """Score in [-128, 128]: 128 = identical, lower = less similar."""
        return DIGEST_BITS // 2 - self.bitwise_difference(other)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Nilsimsa):
            return False
        return self.digest() == other.digest()

    def __hash__(self) -> int:
        # int hashing does not depend on PYTHONHASHSEED
        return hash(int.from_bytes(self.digest(), "big"))

    def __repr__(self) -> str:
        state = "finalized" if self._digest is not None else "accumulating"
        return f"<Nilsimsa count={self._count} {state}>"
