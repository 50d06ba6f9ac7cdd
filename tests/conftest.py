import struct
import zlib

import numpy as np
import pytest

from pngblit.models.frame_model import FrameBuffer
from pngblit.models.png_model import PNG_SIGNATURE, FilterType
from pngblit.services.scanline_service import filter_row


def chunk(tag: bytes, payload: bytes = b"", crc: int = None) -> bytes:
    if crc is None:
        crc = zlib.crc32(payload, zlib.crc32(tag))
    return struct.pack(">I", len(payload)) + tag + payload + struct.pack(">I", crc)


def ihdr_payload(width, height, bit_depth=8, color_type=6, interlace=0) -> bytes:
    return struct.pack(">IIBBBBB", width, height, bit_depth, color_type, 0, 0, interlace)


class PngBuilder:
    """Собирает PNG вручную: строки RGBA, типы фильтров, разбиение IDAT."""

    def filtered(self, width, height, raw: bytes, filters=None) -> bytes:
        stride = width * 4
        filters = filters or [FilterType.NONE] * height
        out = bytearray()
        prior = None
        for y in range(height):
            row = raw[y * stride:(y + 1) * stride]
            out.append(filters[y].value)
            out += filter_row(filters[y], row, prior)
            prior = row
        return bytes(out)

    def build(
        self,
        width,
        height,
        raw: bytes,
        filters=None,
        idat_parts=1,
        header=None,
        extra_chunks=(),
        compressed=None,
    ) -> bytes:
        if compressed is None:
            compressed = zlib.compress(self.filtered(width, height, raw, filters))
        step = max(1, -(-len(compressed) // idat_parts))
        parts = [compressed[i:i + step] for i in range(0, len(compressed), step)] or [b""]

        data = PNG_SIGNATURE
        data += chunk(b"IHDR", header if header is not None else ihdr_payload(width, height))
        for tag, payload in extra_chunks:
            data += chunk(tag, payload)
        for part in parts:
            data += chunk(b"IDAT", part)
        data += chunk(b"IEND")
        return data


@pytest.fixture
def png_builder():
    return PngBuilder()


@pytest.fixture
def white_1x1_png(png_builder):
    return png_builder.build(1, 1, b"\xff\xff\xff\xff")


@pytest.fixture
def sentinel_frame():
    """Кадр-представление внутри буфера, окружённого сторожевыми пикселями."""
    def make(width, height, fill=0, sentinel=0xDEADBEEF):
        backing = np.full((height + 2, width + 2), sentinel, dtype=np.uint32)
        backing[1:-1, 1:-1] = fill
        frame = FrameBuffer(width, height, pixels=backing[1:-1, 1:-1])
        return frame, backing
    return make


def border(backing: np.ndarray) -> np.ndarray:
    return np.concatenate([backing[0, :], backing[-1, :], backing[1:-1, 0], backing[1:-1, -1]])


@pytest.fixture
def border_of():
    return border
