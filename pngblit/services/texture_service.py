"""Загрузка PNG с диска или из памяти и упаковка пикселей в `Texture`.

Принципы:
- SRP: сервис связывает стадии декодера, сами алгоритмы живут в соседних модулях.
- OCP: новые источники (стрим, архив) добавляются отдельными методами поверх `decode`.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Iterator, Optional

import numpy as np

from pngblit.errors import IoError
from pngblit.models.png_model import BYTES_PER_PIXEL, Texture
from pngblit.services.chunk_parser import parse_chunks
from pngblit.services.idat_stream import DEFAULT_BLOCK_SIZE, decompress_image_data
from pngblit.services.scanline_service import reconstruct

logger = logging.getLogger(__name__)


def materialize_texture(raw: bytes | bytearray | memoryview, width: int, height: int) -> Texture:
    """Переинтерпретирует байты RGBA как упакованные пиксели `(A<<24)|(R<<16)|(G<<8)|B`.

    Байты R и B каждого пикселя меняются местами в новом массиве, который
    затем рассматривается как little-endian uint32. `raw` не изменяется, и
    текстура не разделяет с ним память.

    Raises:
        ValueError: длина не кратна 4 или не равна width*height*4.
    """
    if len(raw) % BYTES_PER_PIXEL != 0:
        raise ValueError(f"Pixel data length {len(raw)} is not a multiple of {BYTES_PER_PIXEL}")
    if len(raw) != width * height * BYTES_PER_PIXEL:
        raise ValueError(f"Pixel data length {len(raw)} does not match {width}x{height} RGBA")

    # (R, G, B, A) -> (B, G, R, A); индексирование списком создаёт копию
    channels = np.frombuffer(raw, dtype=np.uint8).reshape(-1, BYTES_PER_PIXEL)[:, [2, 1, 0, 3]]
    bitmap = channels.reshape(-1).view("<u4").astype(np.uint32, copy=False).reshape(height, width)
    bitmap.flags.writeable = False
    return Texture(bitmap=bitmap, width=width, height=height)


class TextureService:
    def __init__(self, block_size: int = DEFAULT_BLOCK_SIZE) -> None:
        self._block_size = block_size

    def decode(self, data: bytes | bytearray | memoryview) -> Texture:
        """Декодирует PNG из буфера в памяти.

        Raises:
            PngError: любой из типов `pngblit.errors`.
        """
        header, chunks = parse_chunks(data)
        filtered = decompress_image_data(chunks, self._block_size, header.filtered_size)
        raw = reconstruct(header, filtered)
        return materialize_texture(raw, header.width, header.height)

    def load_texture(self, file_path: str | Path) -> Texture:
        """Читает файл целиком и декодирует его.

        Raises:
            IoError: файл не удалось прочитать.
            PngError: содержимое не является поддерживаемым PNG.
        """
        path = Path(file_path)
        try:
            data = path.read_bytes()
        except OSError as exc:
            raise IoError(path, exc) from exc

        texture = self.decode(data)
        logger.info("Loaded %s (%dx%d)", path, texture.width, texture.height)
        return texture


class TextureLibrary:
    """Именованный набор текстур, загруженных один раз при старте."""

    def __init__(self, service: Optional[TextureService] = None) -> None:
        self._service = service or TextureService()
        self._textures: Dict[str, Texture] = {}

    def load(self, name: str, file_path: str | Path) -> Texture:
        texture = self._service.load_texture(file_path)
        self._textures[name] = texture
        return texture

    def add(self, name: str, texture: Texture) -> None:
        self._textures[name] = texture

    def get(self, name: str) -> Texture:
        return self._textures[name]

    def __contains__(self, name: object) -> bool:
        return name in self._textures

    def __iter__(self) -> Iterator[str]:
        return iter(self._textures)

    def __len__(self) -> int:
        return len(self._textures)
