"""
Errors - типы ошибок ядра locale_lens.

Все ошибки наследуются от LocaleLensError. Компоненты бросают их внутри,
а границы (Loader, Writer, Extractor, ResolutionSession) перехватывают,
логируют и превращают в частичный результат со статусом.
"""

from pathlib import Path
from typing import Optional


class LocaleLensError(Exception):
    """Базовая ошибка locale_lens."""


class ConfigurationMissingError(LocaleLensError):
    """Не настроен ни один каталог с локалями."""

    def __init__(self, message: str = "Не настроены пути к файлам локалей (locales_paths)"):
        super().__init__(message)


class LocaleFileError(LocaleLensError):
    """Файл локали не читается или не разбирается."""

    def __init__(self, path: Path, reason: str):
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"{self.path}: {reason}")


class ObjectLiteralError(LocaleLensError):
    """Объектный литерал JS/TS не удалось разобрать."""


class ExportNotFoundError(ObjectLiteralError):
    """В исходнике не найден экспорт объектного литерала."""

    def __init__(self, path: Optional[Path] = None, pattern: str = "export default {...}"):
        self.path = Path(path) if path else None
        self.pattern = pattern
        where = f" в {self.path}" if self.path else ""
        super().__init__(f"Экспорт '{pattern}' не найден{where}")


class ScriptParseError(LocaleLensError):
    """Исходный код JS/TS не разбирается в AST."""

    def __init__(self, language: str, message: str, offset: int = -1):
        self.language = language
        self.offset = offset
        super().__init__(f"[{language}] {message}" + (f" (offset {offset})" if offset >= 0 else ""))


class SessionDisposedError(LocaleLensError):
    """Сессия уже закрыта и не может использоваться повторно."""

    def __init__(self):
        super().__init__("ResolutionSession уже закрыта (dispose)")
