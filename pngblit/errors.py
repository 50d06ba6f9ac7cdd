"""Иерархия ошибок декодера PNG.

Каждая стадия декодирования поднимает свой тип исключения; загрузчик их не
перехватывает, решение (фатально или пропустить текстуру) принимает вызывающий.
"""
from __future__ import annotations

from pathlib import Path


class PngError(Exception):
    """Базовый класс всех ошибок декодирования."""


class IoError(PngError):
    """Не удалось прочитать файл с диска."""

    def __init__(self, path: str | Path, err: OSError) -> None:
        self.path = Path(path)
        self.err = err
        super().__init__(f"Failed to load {self.path}: {err}.")


class BadSignature(PngError):
    def __init__(self) -> None:
        super().__init__("Unknown file format.")


class UnexpectedEnd(PngError):
    def __init__(self) -> None:
        super().__init__("File ended abruptly. Not enough data.")


class ChecksumFailed(PngError):
    def __init__(self, chunk_type: bytes = b"", expected: int = 0, actual: int = 0) -> None:
        self.chunk_type = chunk_type
        self.expected = expected
        self.actual = actual
        super().__init__("Checksum doesn't match.")


class MissingHeader(PngError):
    def __init__(self) -> None:
        super().__init__("Expected IHDR block.")


class IncompleteBlock(PngError):
    """Обязательный чанк имеет неверную длину полезной нагрузки."""

    def __init__(self, kind: str) -> None:
        self.kind = kind
        super().__init__(f"Missing fields in block {kind}")


class NoImageData(PngError):
    def __init__(self) -> None:
        super().__init__("Missing actual image data.")


class DecompressionFailed(PngError):
    """Ошибка zlib; исходное исключение доступно через `__cause__`."""

    def __init__(self, reason: object) -> None:
        self.reason = reason
        super().__init__(f"Failed to decompress: {reason}.")


class UnsupportedFormat(PngError):
    def __init__(self, reason: str) -> None:
        super().__init__(reason)


class InvalidFilterType(PngError):
    def __init__(self, value: int) -> None:
        self.value = value
        super().__init__(f"Unknown filter type {value}.")
