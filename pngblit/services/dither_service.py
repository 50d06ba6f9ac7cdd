"""Квантизация области кадра в фиксированную палитру из 8 цветов с диффузией ошибки.

Принципы:
- SRP: только подбор цвета палитры и распределение ошибки (Флойд–Стейнберг).
- Результат совпадает с построчным обходом слева направо, сверху вниз.
  Пиксель (x, y) получает ошибку только от (x-1, y), (x+1, y-1), (x, y-1)
  и (x-1, y-1), поэтому пиксели с одинаковым `x + 2*y` независимы и
  обрабатываются одной операцией numpy.

Метрика по умолчанию (`ColorMetric.SATURATING`) считает разность каналов с
насыщением снизу нулём: `max(pixel - palette, 0)`. Она учитывает только то,
насколько канал нужно уменьшить, поэтому любой не чёрный пиксель ближе всего
к белому, а ошибка квантизации всегда равна нулю. Поведение сохранено;
стандартная симметричная метрика доступна как `ColorMetric.SYMMETRIC`.
"""
from __future__ import annotations

from enum import Enum
from typing import Sequence, Tuple

import numpy as np

from pngblit.models.frame_model import FrameBuffer
from pngblit.models.png_model import PALETTE

# (dx, dy, вес из 16). Соседу справа вес 3 от пикселя сверху-справа
# достаётся раньше веса 7 от пикселя слева, отсюда порядок.
FLOYD_STEINBERG = ((-1, 1, 3), (1, 0, 7), (0, 1, 5), (1, 1, 1))

# строк за раз при квантизации без диффузии
ROW_BLOCK = 64


class ColorMetric(Enum):
    SATURATING = "saturating"
    SYMMETRIC = "symmetric"


def palette_distances(
    rgb: np.ndarray,
    metric: ColorMetric = ColorMetric.SATURATING,
    palette: Sequence[Tuple[int, int, int]] = PALETTE,
) -> np.ndarray:
    """Квадраты расстояний от пикселей `(..., 3)` до всех цветов палитры: `(..., len(palette))`."""
    pal = np.asarray(palette, dtype=np.int32)
    diff = np.asarray(rgb, dtype=np.int32)[..., None, :] - pal
    if metric is ColorMetric.SATURATING:
        np.maximum(diff, 0, out=diff)
    return (diff * diff).sum(axis=-1)


def nearest_palette_index(
    rgb: Sequence[int],
    metric: ColorMetric = ColorMetric.SATURATING,
    palette: Sequence[Tuple[int, int, int]] = PALETTE,
) -> int:
    """Индекс ближайшего цвета палитры; при равенстве выигрывает более ранний."""
    # argmin возвращает первый минимум
    return int(np.argmin(palette_distances(np.asarray(rgb), metric, palette)))


class DitherService:
    def __init__(self, metric: ColorMetric = ColorMetric.SATURATING) -> None:
        self.metric = metric
        self._palette = np.asarray(PALETTE, dtype=np.int64)

    def _nearest(self, rgb: np.ndarray) -> np.ndarray:
        return self._palette[np.argmin(palette_distances(rgb, self.metric), axis=-1)]

    def _quantize(self, rgb: np.ndarray) -> np.ndarray:
        out = np.empty_like(rgb)
        for r in range(0, rgb.shape[0], ROW_BLOCK):
            out[r:r + ROW_BLOCK] = self._nearest(rgb[r:r + ROW_BLOCK])
        return out

    def _diffuse(self, rgb: np.ndarray) -> np.ndarray:
        """Флойд–Стейнберг на месте по диагоналям `x + 2*y`; сложение с ограничением 0..255."""
        h, w = rgb.shape[:2]
        for t in range(w + 2 * (h - 1)):
            ys = np.arange(max(0, (t - w + 2) // 2), min(h - 1, t // 2) + 1)
            if ys.size == 0:
                continue
            xs = t - 2 * ys
            old = rgb[ys, xs]
            new = self._nearest(old)
            rgb[ys, xs] = new
            err = old - new
            for dx, dy, weight in FLOYD_STEINBERG:
                nx, ny = xs + dx, ys + dy
                inside = (nx >= 0) & (nx < w) & (ny < h)
                if not inside.any():
                    continue
                tx, ty = nx[inside], ny[inside]
                # деление с отбрасыванием дробной части к нулю
                delta = (err[inside] * weight / 16).astype(np.int64)
                rgb[ty, tx] = np.clip(rgb[ty, tx] + delta, 0, 255)
        return rgb

    def dither(self, frame: FrameBuffer, x: int, y: int, width: int, height: int) -> None:
        """Квантизует область кадра на месте.

        Область обрезается по границам кадра; ошибка распределяется только на
        соседей внутри обрезанной области, пиксели вне её не меняются.
        Альфа-байт каждого пикселя сохраняется.
        """
        x0, y0, x1, y1 = frame.clip(x, y, width, height)
        if x0 >= x1 or y0 >= y1:
            return
        region = frame.pixels[y0:y1, x0:x1]
        rgb = np.stack([(region >> s) & 0xFF for s in (16, 8, 0)], axis=-1).astype(np.int64)

        if self.metric is ColorMetric.SATURATING:
            # ошибка всегда нулевая: каждый пиксель квантизуется независимо
            out = self._quantize(rgb)
        else:
            out = self._diffuse(rgb)

        out = out.astype(np.uint32)
        region[:, :] = (
            (region & np.uint32(0xFF000000))
            | (out[..., 0] << np.uint32(16))
            | (out[..., 1] << np.uint32(8))
            | out[..., 2]
        )
