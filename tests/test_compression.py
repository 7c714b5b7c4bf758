import pytest

from geyserstream.bincode import DecodeError, Decoder, Encoder
from geyserstream.compression import CompressionKind, CompressionType

DATA = bytes(range(256)) * 20


@pytest.mark.parametrize(
    "ctype",
    [CompressionType.none(), CompressionType.lz4_fast(8), CompressionType.lz4(4)],
)
def test_round_trip(ctype):
    assert ctype.decompress(ctype.compress(DATA)) == DATA


def test_empty_input_stays_empty():
    assert CompressionType.lz4_fast(8).compress(b"") == b""


def test_none_passes_through():
    assert CompressionType.none().compress(b"abc") == b"abc"


def test_lz4_shrinks_repetitive_data():
    assert len(CompressionType.lz4_fast(8).compress(DATA)) < len(DATA)


def test_default_is_lz4_fast_8():
    assert CompressionType.default() == CompressionType(CompressionKind.LZ4_FAST, 8)


def test_wire_encoding_round_trip():
    for ctype in (CompressionType.none(), CompressionType.lz4(3)):
        enc = Encoder()
        ctype.encode(enc)
        assert CompressionType.decode(Decoder(enc.getvalue())) == ctype


def test_none_encodes_as_variant_zero():
    enc = Encoder()
    CompressionType.none().encode(enc)
    assert enc.getvalue() == b"\x00\x00\x00\x00"


def test_invalid_variant():
    with pytest.raises(DecodeError):
        CompressionType.decode(Decoder(b"\x09\x00\x00\x00"))