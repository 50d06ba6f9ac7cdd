"""Разбор контейнера PNG: сигнатура, чанки, проверка CRC32.

Принципы:
- SRP: модуль только режет поток байтов на чанки и проверяет их целостность.
- Ошибки не подавляются: каждое нарушение формата поднимает свой тип `PngError`.
"""
from __future__ import annotations

import logging
import struct
import zlib
from typing import List, Tuple

from pngblit.errors import (
    BadSignature,
    ChecksumFailed,
    IncompleteBlock,
    MissingHeader,
    UnexpectedEnd,
    UnsupportedFormat,
)
from pngblit.models.png_model import (
    COLOR_TYPE_RGBA,
    IHDR_LENGTH,
    PNG_SIGNATURE,
    SUPPORTED_BIT_DEPTH,
    Chunk,
    ChunkKind,
    ImageHeader,
)

logger = logging.getLogger(__name__)


class ByteReader:
    """Неизменяемые байты с курсором; курсор никогда не выходит за длину."""

    def __init__(self, data: bytes | bytearray | memoryview) -> None:
        self._data = memoryview(data)
        self.pos = 0

    def __len__(self) -> int:
        return len(self._data)

    @property
    def remaining(self) -> int:
        return len(self._data) - self.pos

    def at_end(self) -> bool:
        return self.pos == len(self._data)

    def read(self, n: int) -> memoryview:
        if n > self.remaining:
            raise UnexpectedEnd()
        view = self._data[self.pos:self.pos + n]
        self.pos += n
        return view

    def read_u8(self) -> int:
        return self.read(1)[0]

    def read_u32(self) -> int:
        # PNG хранит числа в big-endian
        return struct.unpack(">I", self.read(4))[0]


def parse_signature(reader: ByteReader) -> None:
    """Проверяет 8-байтовую сигнатуру PNG; при несовпадении или обрыве поднимает `BadSignature`."""
    if reader.remaining < len(PNG_SIGNATURE):
        raise BadSignature()
    if bytes(reader.read(len(PNG_SIGNATURE))) != PNG_SIGNATURE:
        raise BadSignature()


def _verify_crc(type_tag: bytes, payload: memoryview, checksum: int) -> None:
    actual = zlib.crc32(payload, zlib.crc32(type_tag))
    if actual != checksum:
        raise ChecksumFailed(type_tag, expected=checksum, actual=actual)


def parse_chunk(reader: ByteReader) -> Chunk:
    """Читает один чанк: длина, тип, данные, CRC.

    Размер IHDR/IEND проверяется до чтения данных, поэтому чанк неверной
    длины даёт `IncompleteBlock`, а не ошибку контрольной суммы.
    """
    length = reader.read_u32()
    type_tag = bytes(reader.read(4))
    kind = ChunkKind.from_tag(type_tag)
    if kind is ChunkKind.IHDR and length != IHDR_LENGTH:
        raise IncompleteBlock("IHDR")
    if kind is ChunkKind.IEND and length != 0:
        raise IncompleteBlock("IEND")

    payload = reader.read(length)
    checksum = reader.read_u32()
    _verify_crc(type_tag, payload, checksum)
    return Chunk(length=length, type_tag=type_tag, payload=payload, checksum=checksum)


def decode_header(chunk: Chunk) -> ImageHeader:
    """Распаковывает поля IHDR."""
    if chunk.kind is not ChunkKind.IHDR:
        raise MissingHeader()
    if chunk.length != IHDR_LENGTH:
        raise IncompleteBlock("IHDR")
    fields = struct.unpack(">IIBBBBB", chunk.payload)
    return ImageHeader(*fields)


def validate_header(header: ImageHeader) -> None:
    """Поддерживается только один профиль: RGBA, 8 бит, без чересстрочности."""
    if header.color_type != COLOR_TYPE_RGBA or header.bit_depth != SUPPORTED_BIT_DEPTH:
        raise UnsupportedFormat(
            "This parser only supports RGBA images "
            f"(got color type {header.color_type}, bit depth {header.bit_depth})."
        )
    if header.interlace_method != 0:
        raise UnsupportedFormat("This parser only supports non-interlaced images.")


def parse_chunks(data: bytes | bytearray | memoryview) -> Tuple[ImageHeader, List[Chunk]]:
    """Разбирает весь файл до IEND.

    Args:
        data: Полное содержимое файла.

    Returns:
        Заголовок изображения и упорядоченный список чанков после IHDR
        (без IEND; неизвестные типы сохраняются как есть).

    Raises:
        BadSignature, UnexpectedEnd, ChecksumFailed, MissingHeader,
        IncompleteBlock, UnsupportedFormat.
    """
    reader = ByteReader(data)
    parse_signature(reader)

    first = parse_chunk(reader)
    header = decode_header(first)
    logger.debug("IHDR: %s", header)
    # отказ до разбора остальных чанков: частичное декодирование не выполняется
    validate_header(header)

    chunks: List[Chunk] = []
    while True:
        chunk = parse_chunk(reader)
        if chunk.kind is ChunkKind.IEND:
            break
        if chunk.kind is ChunkKind.UNKNOWN:
            logger.debug("Skipping chunk %r (%d bytes)", chunk.type_tag, chunk.length)
        chunks.append(chunk)

    if not reader.at_end():
        logger.debug("Ignoring %d bytes after IEND", reader.remaining)
    logger.debug("Parsed %d chunks after IHDR", len(chunks))
    return header, chunks
