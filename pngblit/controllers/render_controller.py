"""Контроллер кадра: оркестрация сервисов отрисовки и обработчиков клавиш.

SOLID:
- SRP: класс решает только порядок вызовов сервисов за кадр, без алгоритмов.
- DIP: обработчики клавиш зависят от протокола `InputHandler`, а не от конкретных классов.
Clean Code:
- Состояние кадра (`FrameContext`) передаётся явно, глобальных изменяемых данных нет.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Protocol

from pngblit.models.frame_model import FrameBuffer, FrameContext
from pngblit.services.dither_service import DitherService
from pngblit.services.raster_service import RasterService

logger = logging.getLogger(__name__)


class InputHandler(Protocol):
    """Всё, что умеет реагировать на нажатие клавиши."""

    def on_input(self, key: str, context: FrameContext) -> None:
        ...


class LogStateHandler:
    """Выводит текущее состояние кадра в лог (аналог отладочной клавиши F3)."""

    def on_input(self, key: str, context: FrameContext) -> None:
        logger.info("[%s] %r", key, context)


@dataclass
class RenderController:
    """Рисует кадр по `FrameContext` и маршрутизирует нажатия клавиш.

    Ответственности:
    - Фон, прямоугольники, текстуры и квантизация в фиксированном порядке.
    - Реестр обработчиков: идентификатор клавиши -> `InputHandler`.
    """
    raster: RasterService = RasterService()
    ditherer: DitherService = DitherService()
    _handlers: Dict[str, InputHandler] = field(default_factory=dict)

    def on_key_press(self, key: str, handler: InputHandler) -> None:
        """Регистрирует обработчик клавиши (заменяет предыдущий для той же клавиши)."""
        self._handlers[key] = handler

    def dispatch_key(self, key: str, context: FrameContext) -> bool:
        """Вызывает обработчик клавиши; False, если для клавиши ничего не зарегистрировано."""
        handler = self._handlers.get(key)
        if handler is None:
            return False
        handler.on_input(key, context)
        return True

    def render_frame(self, frame: FrameBuffer, context: FrameContext) -> None:
        self.raster.draw_background(frame, context.x_offset, context.y_offset)
        for rect in context.rects:
            self.raster.draw_rectangle(frame, (rect.x, rect.y), (rect.width, rect.height), rect.color)
        for texture in context.textures:
            # текстура без позиции рисуется в левом верхнем углу
            pos_x, pos_y = texture.position or (0, 0)
            self.raster.draw_texture(frame, texture, pos_x, pos_y)
        if context.dither_region is not None:
            self.ditherer.dither(frame, *context.dither_region)
