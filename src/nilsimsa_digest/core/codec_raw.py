from __future__ import annotations

from collections.abc import Iterator
from typing import BinaryIO


class CodecRaw:
    """
    Codec identity: the file bytes are hashed as they are.
    """

    codec_id: str = "raw"

    def iter_decompress(self, fp: BinaryIO, chunk_size: int) -> Iterator[bytes]:
        while True:
            b = fp.read(chunk_size)
            if not b:
                return
            yield b
