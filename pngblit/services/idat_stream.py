"""Адаптер потока сжатых данных: последовательность чанков IDAT как один поток.

Данные чанков не склеиваются заранее: `IdatStream` отдаёт их по мере чтения,
а распаковка выполняется `zlib` блоками фиксированного размера.
"""
from __future__ import annotations

import io
import logging
import zlib
from typing import Iterable, List, Optional

from pngblit.errors import DecompressionFailed, NoImageData
from pngblit.models.png_model import Chunk, ChunkKind

logger = logging.getLogger(__name__)

DEFAULT_BLOCK_SIZE = 64 * 1024


class IdatStream(io.RawIOBase):
    """Читаемый поток, последовательно отдающий данные всех IDAT в порядке файла."""

    def __init__(self, chunks: Iterable[Chunk]) -> None:
        super().__init__()
        self._payloads: List[memoryview] = [c.payload for c in chunks if c.kind is ChunkKind.IDAT]
        if not self._payloads:
            raise NoImageData()
        self._index = 0
        self._offset = 0

    @property
    def chunk_count(self) -> int:
        return len(self._payloads)

    def readable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:
        out = memoryview(buffer).cast("B")
        # пустые IDAT пропускаются, 0 возвращается только в конце последнего чанка
        while self._index < len(self._payloads):
            current = self._payloads[self._index]
            if self._offset < len(current):
                n = min(len(out), len(current) - self._offset)
                out[:n] = current[self._offset:self._offset + n]
                self._offset += n
                return n
            self._index += 1
            self._offset = 0
        return 0


def inflate(
    stream: io.RawIOBase,
    block_size: int = DEFAULT_BLOCK_SIZE,
    limit: Optional[int] = None,
) -> bytes:
    """Распаковывает zlib-поток из `stream`.

    Args:
        stream: Источник сжатых байтов.
        block_size: Сколько сжатых байтов читать за раз.
        limit: Сколько распакованных байтов нужно вызывающему; остаток потока
            не распаковывается. None: без ограничения.

    Raises:
        DecompressionFailed: повреждённые данные или поток оборвался до конца.
    """
    decompressor = zlib.decompressobj()
    out = bytearray()
    try:
        while not decompressor.eof:
            if limit is not None and len(out) > limit:
                break
            block = decompressor.unconsumed_tail or stream.read(block_size)
            if not block:
                break
            if limit is None:
                out += decompressor.decompress(block)
            else:
                # на байт больше лимита: так видно, что данные лишние
                out += decompressor.decompress(block, limit + 1 - len(out))
        if limit is not None and len(out) > limit:
            logger.warning("Image data exceeds the expected %d bytes, ignoring the rest", limit)
            return bytes(out[:limit])
        out += decompressor.flush()
    except zlib.error as exc:
        raise DecompressionFailed(exc) from exc

    if not decompressor.eof:
        raise DecompressionFailed("compressed stream is truncated")
    if decompressor.unused_data:
        logger.debug("Ignoring %d bytes after end of zlib stream", len(decompressor.unused_data))
    return bytes(out)


def decompress_image_data(
    chunks: Iterable[Chunk],
    block_size: int = DEFAULT_BLOCK_SIZE,
    expected_size: Optional[int] = None,
) -> bytes:
    """Находит все IDAT и возвращает распакованные отфильтрованные строки.

    `expected_size` (обычно `ImageHeader.filtered_size`) ограничивает распаковку.
    """
    stream = IdatStream(chunks)
    logger.debug("Inflating %d IDAT chunk(s)", stream.chunk_count)
    return inflate(stream, block_size, expected_size)
