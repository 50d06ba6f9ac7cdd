"""Настройки отрисовки по умолчанию; CLI переопределяет их флагами."""
from __future__ import annotations

from dataclasses import dataclass

from pngblit.services.dither_service import ColorMetric
from pngblit.services.idat_stream import DEFAULT_BLOCK_SIZE


@dataclass(frozen=True)
class RenderSettings:
    """Неизменяемые параметры кадра.

    Fields:
        width: Ширина кадра, px.
        height: Высота кадра, px.
        rect_color: Цвет прямоугольника игрока (0xRRGGBB).
        scroll_step: Сдвиг фонового узора за кадр по обеим осям.
        dither_metric: Метрика выбора цвета палитры.
        inflate_block_size: Размер блока чтения при распаковке IDAT.
    """
    width: int = 1280
    height: int = 720
    rect_color: int = 0xD3869B
    scroll_step: int = 1
    dither_metric: ColorMetric = ColorMetric.SATURATING
    inflate_block_size: int = DEFAULT_BLOCK_SIZE
