import logging
import tracemalloc
import zlib

import pytest

from pngblit.errors import DecompressionFailed, NoImageData
from pngblit.models.png_model import Chunk
from pngblit.services.idat_stream import IdatStream, decompress_image_data, inflate


def make_chunk(tag: bytes, payload: bytes) -> Chunk:
    return Chunk(length=len(payload), type_tag=tag, payload=memoryview(payload), checksum=0)


def test_stream_concatenates_idat_in_file_order():
    chunks = [
        make_chunk(b"IDAT", b"abc"),
        make_chunk(b"tEXt", b"ignored"),
        make_chunk(b"IDAT", b""),
        make_chunk(b"IDAT", b"defg"),
    ]
    stream = IdatStream(chunks)
    assert stream.chunk_count == 3
    assert stream.read(2) == b"ab"
    # чтение не пересекает границу чанка за один вызов
    assert stream.read(10) == b"c"
    assert stream.read(10) == b"defg"
    assert stream.read(10) == b""


def test_stream_read_all():
    chunks = [make_chunk(b"IDAT", bytes([i]) * 3) for i in range(5)]
    assert IdatStream(chunks).read() == b"".join(bytes([i]) * 3 for i in range(5))


def test_no_image_data():
    with pytest.raises(NoImageData):
        IdatStream([make_chunk(b"tEXt", b"x")])


@pytest.mark.parametrize("parts", [1, 2, 7])
@pytest.mark.parametrize("block_size", [1, 5, 1 << 16])
def test_decompress_split_stream(parts, block_size):
    payload = bytes(range(256)) * 40
    compressed = zlib.compress(payload)
    step = -(-len(compressed) // parts)
    chunks = [make_chunk(b"IDAT", compressed[i:i + step]) for i in range(0, len(compressed), step)]
    assert decompress_image_data(chunks, block_size=block_size) == payload


def test_corrupt_stream():
    with pytest.raises(DecompressionFailed) as excinfo:
        decompress_image_data([make_chunk(b"IDAT", b"\x00\x01garbage")])
    assert isinstance(excinfo.value.__cause__, zlib.error)


def test_truncated_stream():
    compressed = zlib.compress(b"x" * 1000)
    with pytest.raises(DecompressionFailed):
        inflate(IdatStream([make_chunk(b"IDAT", compressed[:-6])]))


def test_inflate_stops_at_limit():
    compressed = zlib.compress(b"abcde" + bytes(20_000_000), 9)
    tracemalloc.start()
    try:
        out = inflate(IdatStream([make_chunk(b"IDAT", compressed)]), limit=5)
        _current, peak = tracemalloc.get_traced_memory()
    finally:
        tracemalloc.stop()
    assert out == b"abcde"
    assert peak < 1_000_000


@pytest.mark.parametrize("block_size", [1, 3, 1 << 16])
def test_inflate_limit_equal_to_stream_size(block_size):
    payload = bytes(range(200))
    stream = IdatStream([make_chunk(b"IDAT", zlib.compress(payload))])
    assert inflate(stream, block_size=block_size, limit=len(payload)) == payload


def test_inflate_limit_still_reports_truncation():
    compressed = zlib.compress(b"x" * 1000)
    with pytest.raises(DecompressionFailed):
        inflate(IdatStream([make_chunk(b"IDAT", compressed[:-6])]), limit=2000)


def test_excess_image_data_is_logged(caplog):
    chunks = [make_chunk(b"IDAT", zlib.compress(bytes(100)))]
    with caplog.at_level(logging.WARNING):
        assert decompress_image_data(chunks, expected_size=10) == bytes(10)
    assert "exceeds" in caplog.text
