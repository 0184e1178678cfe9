"""Input codec resolution.

Files are hashed on their *decoded* content: a corpus stored as .zst hashes
the same as the plain file.

Codec ids: raw, zlib, zstd. ``auto`` picks by suffix.
"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path
from typing import Union

from nilsimsa_digest.core.codec_raw import CodecRaw
from nilsimsa_digest.core.codec_zlib import CodecZlib
from nilsimsa_digest.core.codec_zstd import CodecZstd
from nilsimsa_digest.errors import UsageError

InputCodec = Union[CodecRaw, CodecZlib, CodecZstd]

CODEC_IDS: tuple[str, ...] = ("raw", "zlib", "zstd")
AUTO = "auto"

CHUNK_SIZE_DEFAULT = 256 * 1024

_SUFFIX_TO_CODEC = {
    ".zst": "zstd",
    ".zstd": "zstd",
    ".zz": "zlib",
    ".zlib": "zlib",
}


def resolve_codec_id(codec_id: str, path: Path | None = None) -> str:
    cid = codec_id.strip().lower()
    if cid == AUTO:
        if path is None:
            return "raw"
        return _SUFFIX_TO_CODEC.get(path.suffix.lower(), "raw")
    if cid not in CODEC_IDS:
        raise UsageError(
            f"unknown input codec: {codec_id!r} (expected auto, {', '.join(CODEC_IDS)})"
        )
    return cid


def get_codec(codec_id: str) -> InputCodec:
    cid = resolve_codec_id(codec_id)
    if cid == "zlib":
        return CodecZlib()
    if cid == "zstd":
        return CodecZstd()
    return CodecRaw()


def iter_file_chunks(
    path: Path,
    codec_id: str = AUTO,
    *,
    max_bytes: int | None = None,
    chunk_size: int = CHUNK_SIZE_DEFAULT,
) -> Iterator[bytes]:
    """Yield the decoded content of ``path`` in chunks, stopping after max_bytes."""
    codec = get_codec(resolve_codec_id(codec_id, path))
    left = max_bytes
    with path.open("rb") as fp:
        for chunk in codec.iter_decompress(fp, chunk_size):
            if left is not None:
                if left <= 0:
                    return
                if len(chunk) > left:
                    chunk = chunk[:left]
                left -= len(chunk)
            yield chunk
