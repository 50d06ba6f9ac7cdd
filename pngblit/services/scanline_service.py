"""Восстановление строк пикселей после фильтрации PNG (None/Sub/Up/Average/Paeth).

Соседи: `a`: байт того же канала слева (на bpp=4 байта левее) в уже
восстановленной строке, `b`: байт сверху, `c`: сверху-слева. Отсутствующие
соседи (строка 0, столбцы < 4) считаются нулями. Арифметика по модулю 256.
"""
from __future__ import annotations

import logging

import numpy as np

from pngblit.errors import InvalidFilterType, UnexpectedEnd
from pngblit.models.png_model import BYTES_PER_PIXEL, FilterType, ImageHeader

logger = logging.getLogger(__name__)


def paeth_predictor(a: int, b: int, c: int) -> int:
    """Предсказатель Paeth: ближайший к p = a + b - c; при равенстве a, затем b."""
    p = a + b - c
    pa, pb, pc = abs(p - a), abs(p - b), abs(p - c)
    if pa <= pb and pa <= pc:
        return a
    if pb <= pc:
        return b
    return c


def to_filter_type(value: int) -> FilterType:
    try:
        return FilterType(value)
    except ValueError:
        raise InvalidFilterType(value) from None


def unfilter_row(
    filter_type: FilterType,
    line: bytes | bytearray | memoryview,
    prior: bytes | bytearray | None,
    bpp: int = BYTES_PER_PIXEL,
) -> bytearray:
    """Восстанавливает одну строку.

    Args:
        filter_type: Тип фильтра строки.
        line: Отфильтрованные байты строки (без байта типа).
        prior: Уже восстановленная предыдущая строка; None для первой строки.
        bpp: Байт на пиксель.

    Returns:
        Восстановленные байты строки.
    """
    out = bytearray(line)
    stride = len(out)
    if prior is None:
        prior = bytes(stride)

    if filter_type is FilterType.NONE:
        return out
    if filter_type is FilterType.UP:
        # uint8 складывается с переполнением, то есть по модулю 256
        up = np.frombuffer(out, dtype=np.uint8) + np.frombuffer(prior, dtype=np.uint8)
        return bytearray(up.tobytes())

    if filter_type is FilterType.SUB:
        for x in range(bpp, stride):
            out[x] = (out[x] + out[x - bpp]) & 0xFF
    elif filter_type is FilterType.AVERAGE:
        for x in range(stride):
            a = out[x - bpp] if x >= bpp else 0
            out[x] = (out[x] + ((a + prior[x]) >> 1)) & 0xFF
    elif filter_type is FilterType.PAETH:
        for x in range(stride):
            if x >= bpp:
                a, c = out[x - bpp], prior[x - bpp]
            else:
                a = c = 0
            out[x] = (out[x] + paeth_predictor(a, prior[x], c)) & 0xFF
    return out


def filter_row(
    filter_type: FilterType,
    raw: bytes | bytearray | memoryview,
    prior: bytes | bytearray | None,
    bpp: int = BYTES_PER_PIXEL,
) -> bytearray:
    """Обратное преобразование к `unfilter_row`: фильтрует восстановленную строку."""
    raw = bytes(raw)
    stride = len(raw)
    if prior is None:
        prior = bytes(stride)
    out = bytearray(stride)
    for x in range(stride):
        a = raw[x - bpp] if x >= bpp else 0
        b = prior[x]
        c = prior[x - bpp] if x >= bpp else 0
        if filter_type is FilterType.NONE:
            pred = 0
        elif filter_type is FilterType.SUB:
            pred = a
        elif filter_type is FilterType.UP:
            pred = b
        elif filter_type is FilterType.AVERAGE:
            pred = (a + b) >> 1
        else:
            pred = paeth_predictor(a, b, c)
        out[x] = (raw[x] - pred) & 0xFF
    return out


def reconstruct(header: ImageHeader, data: bytes | bytearray | memoryview) -> bytearray:
    """Восстанавливает все строки изображения.

    Args:
        header: Заголовок (ширина, высота).
        data: Распакованный поток: `height` строк по `1 + width*4` байт.

    Returns:
        Пиксели RGBA построчно, `width*height*4` байт.

    Raises:
        InvalidFilterType: байт типа фильтра вне 0–4.
        UnexpectedEnd: данных меньше, чем требует заголовок.
    """
    view = memoryview(data)
    stride = header.stride
    row_len = 1 + stride
    image = bytearray()
    prior = None
    pos = 0
    for _y in range(header.height):
        if pos + row_len > len(view):
            raise UnexpectedEnd()
        filter_type = to_filter_type(view[pos])
        line = unfilter_row(filter_type, view[pos + 1:pos + row_len], prior)
        image += line
        prior = line
        pos += row_len

    if pos != len(view):
        logger.warning("Ignoring %d trailing bytes of image data", len(view) - pos)
    return image
