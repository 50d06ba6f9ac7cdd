"""Экспорт кадра в изображение PIL и сохранение на диск.

Принципы:
- SRP: класс отвечает только за преобразование буфера кадра в `PIL.Image` и запись файла.
- Декодирование PNG сюда не относится: оно живёт в `texture_service`.
"""
from __future__ import annotations

from pathlib import Path

import numpy as np
from PIL import Image

from pngblit.models.frame_model import FrameBuffer
from pngblit.models.png_model import Texture


def _packed_to_rgba(pixels: np.ndarray, opaque: bool) -> np.ndarray:
    rgba = np.stack([(pixels >> s) & 0xFF for s in (16, 8, 0, 24)], axis=-1).astype(np.uint8)
    if opaque:
        rgba[..., 3] = 0xFF
    return rgba


class ImageService:
    def frame_to_image(self, frame: FrameBuffer) -> Image.Image:
        """Преобразует кадр в RGBA-изображение PIL (альфа принудительно 255)."""
        return Image.fromarray(_packed_to_rgba(frame.pixels, opaque=True))

    def texture_to_image(self, texture: Texture) -> Image.Image:
        """Преобразует текстуру в RGBA-изображение PIL с сохранением альфа-канала."""
        return Image.fromarray(_packed_to_rgba(texture.bitmap, opaque=False))

    def save_frame(self, frame: FrameBuffer, file_path: str | Path) -> Path:
        """Сохраняет кадр; формат определяется расширением файла.

        Raises:
            OSError: если файл не удалось записать.
        """
        path = Path(file_path)
        self.frame_to_image(frame).save(path)
        return path
