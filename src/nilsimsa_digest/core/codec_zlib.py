from __future__ import annotations

import zlib
from collections.abc import Iterator
from typing import BinaryIO

from nilsimsa_digest.errors import CorruptInput


class CodecZlib:
    """zlib/DEFLATE input codec (no external deps)."""

    codec_id: str = "zlib"

    def iter_decompress(self, fp: BinaryIO, chunk_size: int) -> Iterator[bytes]:
        d = zlib.decompressobj()
        try:
            while True:
                comp = fp.read(chunk_size)
                if not comp:
                    break
                out = d.decompress(comp)
                if out:
                    yield out
            tail = d.flush()
        except zlib.error as e:
            raise CorruptInput(f"zlib: {e}") from e
        if tail:
            yield tail
        if not d.eof:
            raise CorruptInput("zlib: stream troncato (missing end of stream)")
