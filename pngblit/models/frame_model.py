"""Модели кадра: целевой буфер и явно передаваемое состояние отрисовки."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np

from pngblit.models.png_model import Texture


@dataclass(eq=False)
class FrameBuffer:
    """Целевой буфер кадра: (height, width) пикселей uint32, row-major.

    Движок пишет в `pixels` на месте и никогда не меняет его размер сам;
    `resize` вызывает владелец поверхности по событию изменения размеров окна.
    """
    width: int
    height: int
    pixels: np.ndarray = field(repr=False, default=None)  # type: ignore[assignment]

    def __post_init__(self) -> None:
        if self.width < 0 or self.height < 0:
            raise ValueError(f"Negative frame size: {self.width}x{self.height}")
        if self.pixels is None:
            self.pixels = np.zeros((self.height, self.width), dtype=np.uint32)
        elif self.pixels.shape != (self.height, self.width) or self.pixels.dtype != np.uint32:
            raise ValueError(
                f"Frame pixels must be uint32 of shape {(self.height, self.width)}, "
                f"got {self.pixels.dtype} {self.pixels.shape}"
            )

    def resize(self, width: int, height: int) -> None:
        """Пересоздаёт буфер новых размеров (содержимое не сохраняется)."""
        if width < 0 or height < 0:
            raise ValueError(f"Negative frame size: {width}x{height}")
        self.width = width
        self.height = height
        self.pixels = np.zeros((height, width), dtype=np.uint32)

    def clip(self, x: int, y: int, width: int, height: int) -> Tuple[int, int, int, int]:
        """Обрезает прямоугольник по границам буфера.

        Returns:
            (x0, y0, x1, y1), полуоткрытые границы; пустой прямоугольник при x0 >= x1 или y0 >= y1.
        """
        if x < 0 or y < 0 or width < 0 or height < 0:
            raise ValueError(f"Invalid rectangle: ({x}, {y}) {width}x{height}")
        x0 = min(x, self.width)
        y0 = min(y, self.height)
        return x0, y0, min(x + width, self.width), min(y + height, self.height)


@dataclass(frozen=True)
class Rect:
    x: int
    y: int
    width: int
    height: int
    color: int


@dataclass
class FrameContext:
    """Состояние отрисовки, которым владеет вызывающий и передаёт в каждый кадр.

    Fields:
        x_offset: Горизонтальное смещение фонового узора.
        y_offset: Вертикальное смещение фонового узора.
        rects: Прямоугольники сплошной заливки, рисуются поверх фона.
        textures: Текстуры с заданной позицией, рисуются с альфа-смешиванием.
        dither_region: Область (x, y, width, height) для квантизации; None, если не нужна.
    """
    x_offset: int = 0
    y_offset: int = 0
    rects: List[Rect] = field(default_factory=list)
    textures: List[Texture] = field(default_factory=list)
    dither_region: Optional[Tuple[int, int, int, int]] = None

    def scroll(self, dx: int, dy: int) -> None:
        self.x_offset += dx
        self.y_offset += dy
