from __future__ import annotations

from collections.abc import Iterator
from typing import BinaryIO

from nilsimsa_digest.errors import CorruptInput, MissingDependency

try:
    import zstandard as zstd  # type: ignore
except Exception:  # pragma: no cover
    zstd = None


class CodecZstd:
    """
    zstd input codec (python-zstandard).

    Frames without content size are fine: decompression is streamed.
    """

    codec_id: str = "zstd"

    def _require(self) -> None:
        if zstd is None:
            raise MissingDependency(
                "zstandard module not available. Install with: python3 -m pip install zstandard"
            )

    def iter_decompress(self, fp: BinaryIO, chunk_size: int) -> Iterator[bytes]:
        self._require()
        d = zstd.ZstdDecompressor()
        try:
            with d.stream_reader(fp, read_size=chunk_size, closefd=False) as reader:
                while True:
                    b = reader.read(chunk_size)
                    if not b:
                        return
                    yield b
        except zstd.ZstdError as e:
            raise CorruptInput(f"zstd: {e}") from e
