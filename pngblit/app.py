from __future__ import annotations

from pathlib import Path
from typing import Optional

from pngblit.config import RenderSettings
from pngblit.controllers.render_controller import LogStateHandler, RenderController
from pngblit.models.frame_model import FrameBuffer, FrameContext, Rect
from pngblit.models.png_model import Texture
from pngblit.services.dither_service import DitherService
from pngblit.services.texture_service import TextureLibrary, TextureService


class PngblitApp:
    """Корень композиции: владеет кадром, текстурами, контроллером и состоянием кадра."""

    def __init__(self, settings: Optional[RenderSettings] = None) -> None:
        self.settings = settings or RenderSettings()

        self.frame = FrameBuffer(self.settings.width, self.settings.height)
        self.context = FrameContext()
        self.textures = TextureLibrary(TextureService(block_size=self.settings.inflate_block_size))

        self._controller = RenderController(ditherer=DitherService(self.settings.dither_metric))
        self._controller.on_key_press("F3", LogStateHandler())

    @property
    def controller(self) -> RenderController:
        return self._controller

    def place_texture(self, name: str, file_path: str | Path, x: int = 0, y: int = 0) -> Texture:
        """Загружает текстуру и добавляет её в кадр в позиции (x, y)."""
        texture = self.textures.load(name, file_path).placed_at(x, y)
        self.context.textures.append(texture)
        return texture

    def add_rect(self, x: int, y: int, width: int, height: int, color: Optional[int] = None) -> Rect:
        rect = Rect(x, y, width, height, self.settings.rect_color if color is None else color)
        self.context.rects.append(rect)
        return rect

    def press(self, key: str) -> bool:
        return self._controller.dispatch_key(key, self.context)

    def step(self) -> FrameBuffer:
        """Рисует один кадр и сдвигает фоновый узор."""
        self._controller.render_frame(self.frame, self.context)
        self.context.scroll(self.settings.scroll_step, self.settings.scroll_step)
        return self.frame

    def run(self, frames: int) -> FrameBuffer:
        for _ in range(frames):
            self.step()
        return self.frame
