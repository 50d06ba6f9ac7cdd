import struct

import pytest

from pngblit.errors import (
    BadSignature,
    ChecksumFailed,
    IncompleteBlock,
    MissingHeader,
    UnexpectedEnd,
    UnsupportedFormat,
)
from pngblit.models.png_model import PNG_SIGNATURE, ChunkKind, ImageHeader
from pngblit.services.chunk_parser import ByteReader, parse_chunk, parse_chunks

from conftest import chunk, ihdr_payload


def test_byte_reader_cursor_never_passes_end():
    reader = ByteReader(b"\x00\x00\x01\x00\x07")
    assert reader.read_u32() == 256
    assert reader.read_u8() == 7
    assert reader.at_end()
    with pytest.raises(UnexpectedEnd):
        reader.read_u8()
    assert reader.pos == 5


def test_parse_valid_file(white_1x1_png):
    header, chunks = parse_chunks(white_1x1_png)
    assert header == ImageHeader(1, 1, 8, 6, 0, 0, 0)
    assert [c.kind for c in chunks] == [ChunkKind.IDAT]
    assert chunks[0].length == len(chunks[0].payload)


@pytest.mark.parametrize("pos", range(8))
def test_altered_signature_byte(white_1x1_png, pos):
    data = bytearray(white_1x1_png)
    data[pos] ^= 0xFF
    with pytest.raises(BadSignature):
        parse_chunks(bytes(data))


@pytest.mark.parametrize("data", [b"", PNG_SIGNATURE[:5]])
def test_truncated_signature(data):
    with pytest.raises(BadSignature):
        parse_chunks(data)


def test_flipped_bit_in_last_checksum(white_1x1_png):
    data = bytearray(white_1x1_png)
    data[-1] ^= 0x01
    with pytest.raises(ChecksumFailed) as excinfo:
        parse_chunks(bytes(data))
    assert excinfo.value.chunk_type == b"IEND"


def test_corrupted_payload_fails_checksum(white_1x1_png):
    data = bytearray(white_1x1_png)
    # первый байт данных IHDR (ширина)
    data[8 + 8] ^= 0x80
    with pytest.raises(ChecksumFailed):
        parse_chunks(bytes(data))


def test_first_chunk_must_be_header():
    data = PNG_SIGNATURE + chunk(b"IDAT", b"\x00") + chunk(b"IEND")
    with pytest.raises(MissingHeader):
        parse_chunks(data)


@pytest.mark.parametrize("payload", [ihdr_payload(1, 1)[:12], ihdr_payload(1, 1) + b"\x00"])
def test_header_with_wrong_size(payload):
    data = PNG_SIGNATURE + chunk(b"IHDR", payload) + chunk(b"IEND")
    with pytest.raises(IncompleteBlock) as excinfo:
        parse_chunks(data)
    assert excinfo.value.kind == "IHDR"


def test_end_chunk_with_payload(png_builder):
    data = png_builder.build(1, 1, b"\x00" * 4)
    data = data[:-12] + chunk(b"IEND", b"\x00")
    with pytest.raises(IncompleteBlock) as excinfo:
        parse_chunks(data)
    assert excinfo.value.kind == "IEND"


@pytest.mark.parametrize(
    "header",
    [
        ihdr_payload(1, 1, color_type=2),
        ihdr_payload(1, 1, color_type=3),
        ihdr_payload(1, 1, bit_depth=16),
        ihdr_payload(1, 1, interlace=1),
    ],
)
def test_unsupported_profile_fails_fast(header):
    # после IHDR нет ничего: ошибка формата должна возникнуть раньше UnexpectedEnd
    data = PNG_SIGNATURE + chunk(b"IHDR", header)
    with pytest.raises(UnsupportedFormat):
        parse_chunks(data)


@pytest.mark.parametrize("cut", [1, 4, 10, 20])
def test_truncated_file(white_1x1_png, cut):
    with pytest.raises(UnexpectedEnd):
        parse_chunks(white_1x1_png[:-cut])


def test_missing_end_chunk(white_1x1_png):
    with pytest.raises(UnexpectedEnd):
        parse_chunks(white_1x1_png[:-12])


def test_unknown_chunks_are_kept(png_builder):
    data = png_builder.build(1, 1, b"\x00" * 4, extra_chunks=[(b"tEXt", b"k\x00v"), (b"gAMA", b"\x00\x00\xb1\x8f")])
    _header, chunks = parse_chunks(data)
    assert [c.type_tag for c in chunks] == [b"tEXt", b"gAMA", b"IDAT"]
    assert chunks[0].kind is ChunkKind.UNKNOWN
    assert bytes(chunks[0].payload) == b"k\x00v"


def test_unknown_chunk_checksum_is_verified():
    bad = chunk(b"tEXt", b"abc", crc=0)
    data = PNG_SIGNATURE + chunk(b"IHDR", ihdr_payload(1, 1)) + bad + chunk(b"IEND")
    with pytest.raises(ChecksumFailed):
        parse_chunks(data)


def test_parse_chunk_reads_length_type_payload_crc():
    raw = chunk(b"zzZz", b"\x01\x02\x03")
    parsed = parse_chunk(ByteReader(raw))
    assert parsed.length == 3
    assert parsed.type_tag == b"zzZz"
    assert parsed.checksum == struct.unpack(">I", raw[-4:])[0]
