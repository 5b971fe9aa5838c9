"""
locale_lens - поиск, слияние и разрешение i18n-переводов JS/TS/Vue проектов.

Модули:
- locator: поиск файлов локалей и определение (locale, namespace)
- loader: разбор JSON / JS / TS файлов, deep merge и плоские карты ключей
- resolver: поиск значения по dot-ключу (три стратегии)
- extractor: AST-поиск вызовов функций перевода (tree-sitter)
- writer: запись перевода обратно в файлы с сохранением формата
- session: ResolutionSession - жизненный цикл и кеш данных проекта
- host: debounce-планировщик для интеграции с редактором
- manager: CLI
"""

from .config import LensConfig
from .errors import (
    ConfigurationMissingError,
    ExportNotFoundError,
    LocaleFileError,
    LocaleLensError,
    ObjectLiteralError,
    ScriptParseError,
    SessionDisposedError,
)
from .extractor import CallSite, extract
from .host import ExtractionScheduler
from .loader import LoadReport, LocaleData, load_locale_data
from .locator import LocaleFile, LocaleLocator, build_file_index, locate
from .resolver import TranslationResolver, resolve
from .session import RefreshResult, ResolutionSession, SessionState
from .writer import WriteResult, write_translation

__all__ = [
    "LensConfig",
    "LocaleLensError",
    "ConfigurationMissingError",
    "LocaleFileError",
    "ObjectLiteralError",
    "ExportNotFoundError",
    "ScriptParseError",
    "SessionDisposedError",
    "CallSite",
    "extract",
    "ExtractionScheduler",
    "LoadReport",
    "LocaleData",
    "load_locale_data",
    "LocaleFile",
    "LocaleLocator",
    "build_file_index",
    "locate",
    "TranslationResolver",
    "resolve",
    "RefreshResult",
    "ResolutionSession",
    "SessionState",
    "WriteResult",
    "write_translation",
]
