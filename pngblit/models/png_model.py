"""Модели данных контейнера PNG и декодированной текстуры.

Принципы:
- SRP: только структура данных, без логики разбора.
- Чистый код: неизменяемость (`frozen=True`) для предсказуемости.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

import numpy as np

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"
IHDR_LENGTH = 13
BYTES_PER_PIXEL = 4  # RGBA, 8 бит на канал

COLOR_TYPE_RGBA = 6
SUPPORTED_BIT_DEPTH = 8


class ChunkKind(Enum):
    IHDR = b"IHDR"
    IDAT = b"IDAT"
    IEND = b"IEND"
    UNKNOWN = None

    @classmethod
    def from_tag(cls, tag: bytes) -> "ChunkKind":
        try:
            return cls(bytes(tag))
        except ValueError:
            return cls.UNKNOWN


class FilterType(Enum):
    NONE = 0
    SUB = 1
    UP = 2
    AVERAGE = 3
    PAETH = 4


@dataclass(frozen=True)
class ImageHeader:
    """Содержимое чанка IHDR.

    Fields:
        width: Ширина, px.
        height: Высота, px.
        bit_depth: Бит на канал.
        color_type: Тип цвета PNG (6 = RGBA).
        compression_method: Метод сжатия (всегда 0 = deflate).
        filter_method: Метод фильтрации (0 = адаптивная фильтрация строк).
        interlace_method: 0 = без чересстрочности, 1 = Adam7.
    """
    width: int
    height: int
    bit_depth: int
    color_type: int
    compression_method: int
    filter_method: int
    interlace_method: int

    @property
    def stride(self) -> int:
        """Длина строки пикселей в байтах (без байта фильтра)."""
        return self.width * BYTES_PER_PIXEL

    @property
    def filtered_size(self) -> int:
        """Размер распакованных данных: `height` строк по байту фильтра и `stride` байт."""
        return self.height * (1 + self.stride)


@dataclass(frozen=True)
class Chunk:
    """Один чанк контейнера.

    `payload`: срез (`memoryview`) исходного буфера файла, живёт не дольше разбора.
    """
    length: int
    type_tag: bytes
    payload: memoryview = field(repr=False)
    checksum: int

    @property
    def kind(self) -> ChunkKind:
        return ChunkKind.from_tag(self.type_tag)


@dataclass(frozen=True, eq=False)
class Texture:
    """Декодированное изображение: упакованные пиксели `(A<<24)|(R<<16)|(G<<8)|B`.

    Fields:
        bitmap: `np.ndarray` формы (height, width), dtype uint32, только для чтения.
        width: Ширина, px.
        height: Высота, px.
        position: Необязательная позиция размещения (x, y), задаётся потребителем.
    """
    bitmap: np.ndarray = field(repr=False)
    width: int
    height: int
    position: Optional[Tuple[int, int]] = None

    def placed_at(self, x: int, y: int) -> "Texture":
        """Та же текстура (общий буфер пикселей) с позицией размещения."""
        return Texture(bitmap=self.bitmap, width=self.width, height=self.height, position=(x, y))


# Фиксированная палитра квантизатора: чёрный, красный, зелёный, жёлтый,
# синий, пурпурный, голубой, белый
PALETTE: Tuple[Tuple[int, int, int], ...] = (
    (0x00, 0x00, 0x00),
    (0xFF, 0x00, 0x00),
    (0x00, 0xFF, 0x00),
    (0xFF, 0xFF, 0x00),
    (0x00, 0x00, 0xFF),
    (0xFF, 0x00, 0xFF),
    (0x00, 0xFF, 0xFF),
    (0xFF, 0xFF, 0xFF),
)
