from __future__ import annotations

import pytest

from nilsimsa_digest.core.digest_hex import (
    HEXDIGEST_LEN,
    hexdigest_of,
    is_hexdigest,
    parse_hexdigest,
)
from nilsimsa_digest.core.distance import DIGEST_SIZE, bitwise_difference, similarity
from nilsimsa_digest.errors import EXIT_BAD_DIGEST, DigestFormatError, NilsimsaDigestError

SHORT_MSG_HEX = "0BC08E2AC24644D48C08B4D12A9004781C054653D05A539A446A24F9A00027B1"
SHORT_MSG_BANG_HEX = "0BC08E2AC24644F48C08B4D52A9004781C054653D05A539A546A24F9A00027B1"


def test_distance_extremes() -> None:
    zero = bytes(DIGEST_SIZE)
    ones = b"\xff" * DIGEST_SIZE
    assert bitwise_difference(zero, zero) == 0
    assert bitwise_difference(zero, ones) == 256
    assert similarity(zero, zero) == 128
    assert similarity(zero, ones) == -128


def test_distance_single_bits() -> None:
    zero = bytes(DIGEST_SIZE)
    for pos in (0, 3, 4, 17, 31):
        d = bytearray(zero)
        d[pos] = 0x81
        assert bitwise_difference(zero, bytes(d)) == 2
        assert similarity(bytes(d), zero) == 126


def test_distance_on_known_digests() -> None:
    a = parse_hexdigest(SHORT_MSG_HEX)
    b = parse_hexdigest(SHORT_MSG_BANG_HEX)
    assert bitwise_difference(a, b) == 3
    assert bitwise_difference(b, a) == 3
    assert similarity(a, b) == 125


def test_distance_rejects_wrong_size() -> None:
    with pytest.raises(DigestFormatError, match="32 bytes"):
        bitwise_difference(b"\x00" * 31, bytes(32))
    with pytest.raises(DigestFormatError):
        similarity(bytes(32), b"\x00" * 33)


def test_hex_render_is_uppercase() -> None:
    d = bytes(range(32))
    h = hexdigest_of(d)
    assert len(h) == HEXDIGEST_LEN == 64
    assert h == h.upper()
    assert h.startswith("000102030405")


def test_hex_roundtrip_both_cases() -> None:
    d = parse_hexdigest(SHORT_MSG_HEX)
    assert len(d) == 32
    assert hexdigest_of(d) == SHORT_MSG_HEX
    assert parse_hexdigest(SHORT_MSG_HEX.lower()) == d


@pytest.mark.parametrize(
    "bad",
    [
        "",
        "0" * 63,
        "0" * 65,
        "0" * 128,
        "G" + "0" * 63,
        "0x" + "0" * 62,
        " " + "0" * 63,
        "0" * 31 + " " + "0" * 32,
        "é" + "0" * 63,
    ],
)
def test_parse_rejects_malformed(bad: str) -> None:
    assert not is_hexdigest(bad)
    with pytest.raises(DigestFormatError):
        parse_hexdigest(bad)


def test_parse_rejects_non_string() -> None:
    with pytest.raises(DigestFormatError):
        parse_hexdigest(b"0" * 64)  # type: ignore[arg-type]


def test_format_error_is_value_error_with_exit_code() -> None:
    with pytest.raises(ValueError) as ei:
        parse_hexdigest("xyz")
    assert isinstance(ei.value, NilsimsaDigestError)
    assert ei.value.exit_code == EXIT_BAD_DIGEST
    assert "64 characters" in str(ei.value)
