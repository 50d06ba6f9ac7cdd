from __future__ import annotations

import numpy as np

from pngblit.models.frame_model import FrameBuffer
from pngblit.models.png_model import Texture


class RasterService:
    """Отрисовка в целевой буфер кадра.

    Все операции обрезаются по границам буфера: диапазоны ограничены
    `min(запрошенный_край, край_буфера)`, запись за пределы невозможна.
    """

    def draw_background(self, frame: FrameBuffer, x_offset: int, y_offset: int) -> None:
        """
        Заполняет кадр узором `((x+dx) & 0xFF) | (((y+dy) & 0xFF) << 8)`.
        """
        xs = (np.arange(frame.width, dtype=np.int64) + x_offset) & 0xFF
        ys = (np.arange(frame.height, dtype=np.int64) + y_offset) & 0xFF
        frame.pixels[:, :] = (xs[np.newaxis, :] | (ys[:, np.newaxis] << 8)).astype(np.uint32)

    def draw_rectangle(
        self,
        frame: FrameBuffer,
        pos: tuple[int, int],
        size: tuple[int, int],
        color: int,
    ) -> None:
        """
        Сплошная заливка прямоугольника одним цветом, без смешивания.
        """
        x0, y0, x1, y1 = frame.clip(pos[0], pos[1], size[0], size[1])
        if x0 >= x1 or y0 >= y1:
            return
        frame.pixels[y0:y1, x0:x1] = np.uint32(color & 0xFFFFFFFF)

    # ---------- Вспомогательные функции ----------
    def _texture_window(self, frame: FrameBuffer, texture: Texture, pos_x: int, pos_y: int):
        x0, y0, x1, y1 = frame.clip(pos_x, pos_y, texture.width, texture.height)
        if x0 >= x1 or y0 >= y1:
            return None
        src = texture.bitmap[: y1 - y0, : x1 - x0]
        dst = frame.pixels[y0:y1, x0:x1]
        return src, dst

    def copy_texture(self, frame: FrameBuffer, texture: Texture, pos_x: int, pos_y: int) -> None:
        """
        Копирует пиксели текстуры как есть (без учёта альфа-канала).
        """
        window = self._texture_window(frame, texture, pos_x, pos_y)
        if window is None:
            return
        src, dst = window
        dst[:, :] = src

    def draw_texture(self, frame: FrameBuffer, texture: Texture, pos_x: int, pos_y: int) -> None:
        """
        Рисует текстуру с альфа-смешиванием:
        - alpha = A / 255
        - для каждого из R, G, B: bg + alpha * (fg - bg)
        Альфа текстуры в кадр не записывается: альфа-байт кадра сохраняется.
        """
        window = self._texture_window(frame, texture, pos_x, pos_y)
        if window is None:
            return
        src, dst = window

        alpha = ((src >> 24) & 0xFF).astype(np.float64)[..., np.newaxis] / 255.0
        shifts = np.array([16, 8, 0], dtype=np.uint32)  # R, G, B
        fg = ((src[..., np.newaxis] >> shifts) & 0xFF).astype(np.float64)
        bg = ((dst[..., np.newaxis] >> shifts) & 0xFF).astype(np.float64)

        blended = (bg + alpha * (fg - bg)).astype(np.uint32)
        dst[:, :] = (
            (dst & np.uint32(0xFF000000))
            | (blended[..., 0] << np.uint32(16))
            | (blended[..., 1] << np.uint32(8))
            | blended[..., 2]
        )
