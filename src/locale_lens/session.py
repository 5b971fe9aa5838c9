#!/usr/bin/env python3
"""
Session - сессия разрешения переводов для одного проекта.

Владеет загруженными данными локалей и индексом файлов, обновляет их
по запросу и отвечает на resolve / extract / write.

Состояния:
    UNINITIALIZED -> LOADING -> READY
    READY -> LOADING (refresh)
    LOADING -> ERROR (нет путей к локалям или сбой Locator/Loader)
    ERROR -> LOADING (следующий refresh)
    * -> DISPOSED (терминальное)

Новые данные строятся целиком и публикуются одним присваиванием,
поэтому resolve видит либо старый, либо новый снимок.
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

from .config import LensConfig
from .errors import ConfigurationMissingError, SessionDisposedError
from .extractor import CallSite, extract
from .loader import LoadReport, LocaleData, load_locale_data
from .locator import LocaleFile, LocaleLocator
from .resolver import TranslationResolver
from .writer import WriteResult, write_translation

logger = logging.getLogger(__name__)


class SessionState(Enum):
    """Состояния сессии."""
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"
    DISPOSED = "disposed"


@dataclass
class RefreshResult:
    """Итог refresh()."""
    ok: bool
    locale_count: int = 0
    key_count: int = 0
    report: Optional[LoadReport] = None
    error: str = ""
    error_kind: str = ""    # configuration-missing | load-failed


@dataclass(frozen=True)
class _Snapshot:
    data: LocaleData
    resolver: TranslationResolver


class ResolutionSession:
    """
    Долгоживущий объект с данными локалей проекта.

    Использование:
        session = ResolutionSession(LensConfig(locales_paths=["src/locales"]))
        await session.init()
        session.resolve("home.title")        # {"en": "Home", "zh-cn": "首页"}
        session.extract(text, "vue")         # [CallSite, ...]
        await session.write("home.title", {"en": "Start"})
        session.dispose()
    """

    def __init__(self, config: LensConfig, locator: Optional[LocaleLocator] = None):
        self._config = config
        self._locator = locator or LocaleLocator()
        self._state = SessionState.UNINITIALIZED
        self._snapshot = self._make_snapshot(LocaleData(), config)
        self._lock = asyncio.Lock()
        self._last_error = ""

    # ------------------------------------------------------------------
    # Свойства
    # ------------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def config(self) -> LensConfig:
        return self._config

    @property
    def data(self) -> LocaleData:
        return self._snapshot.data

    @property
    def locale_files(self) -> Dict[str, Dict[str, List[LocaleFile]]]:
        return self._snapshot.data.files

    @property
    def last_error(self) -> str:
        return self._last_error

    # ------------------------------------------------------------------
    # Жизненный цикл
    # ------------------------------------------------------------------

    async def init(self) -> RefreshResult:
        """Первичная загрузка данных."""
        return await self.refresh()

    async def refresh(self, config: Optional[LensConfig] = None) -> RefreshResult:
        """
        Перечитывает файлы локалей и атомарно публикует новый снимок.

        Args:
            config: Новый снимок конфигурации (при смене настроек хоста)

        Returns:
            RefreshResult с количеством локалей и ключей либо ошибкой
        """
        self._ensure_alive()

        async with self._lock:
            self._ensure_alive()
            if config is not None:
                self._config = config
            config = self._config
            self._state = SessionState.LOADING

            try:
                if not config.locales_paths:
                    raise ConfigurationMissingError()

                roots = config.resolve_locale_dirs()
                files = await asyncio.to_thread(self._locator.locate, roots, config.file_extensions)
                data = await load_locale_data(files)
            except ConfigurationMissingError as e:
                logger.warning(f"{e}; сессия ждёт настройки")
                return self._fail(str(e), "configuration-missing")
            except Exception as e:
                logger.exception("Ошибка загрузки данных локалей")
                return self._fail(str(e), "load-failed")

            if self._state is SessionState.DISPOSED:
                return RefreshResult(ok=False, error="session disposed", error_kind="disposed")

            self._snapshot = self._make_snapshot(data, config)
            self._state = SessionState.READY
            self._last_error = ""

            result = RefreshResult(
                ok=True,
                locale_count=len(data.tree),
                key_count=data.key_count(),
                report=data.report,
            )
            logger.info(f"Загружено {result.locale_count} локалей, {result.key_count} ключей")
            return result

    def dispose(self) -> None:
        """Освобождает данные; повторное использование сессии запрещено."""
        if self._state is SessionState.DISPOSED:
            return
        self._snapshot = self._make_snapshot(LocaleData(), self._config)
        self._state = SessionState.DISPOSED
        logger.debug("Сессия закрыта")

    # ------------------------------------------------------------------
    # Операции
    # ------------------------------------------------------------------

    def resolve(self, key: str) -> Dict[str, Any]:
        """Возвращает {locale: value} для ключа (пусто - перевода нет)."""
        self._ensure_alive()
        return self._snapshot.resolver.resolve(key)

    def extract(self, text: str, language: str) -> List[CallSite]:
        """Находит вызовы методов перевода из конфигурации."""
        self._ensure_alive()
        return extract(text, language, self._config.translation_methods)

    async def write(self, key: str, values: Dict[str, Any], refresh: bool = True) -> Dict[str, WriteResult]:
        """
        Записывает значения перевода и (по умолчанию) перечитывает данные.

        Returns:
            {locale: WriteResult}
        """
        self._ensure_alive()
        index = self._snapshot.data.files
        results = await asyncio.to_thread(write_translation, key, values, index)
        if refresh and any(r.ok for r in results.values()):
            await self.refresh()
        return results

    # ------------------------------------------------------------------
    # Внутренние методы
    # ------------------------------------------------------------------

    def _fail(self, message: str, kind: str) -> RefreshResult:
        if self._state is not SessionState.DISPOSED:
            self._state = SessionState.ERROR
        self._last_error = message
        return RefreshResult(ok=False, error=message, error_kind=kind)

    def _ensure_alive(self) -> None:
        if self._state is SessionState.DISPOSED:
            raise SessionDisposedError()

    @staticmethod
    def _make_snapshot(data: LocaleData, config: LensConfig) -> _Snapshot:
        resolver = TranslationResolver(
            data,
            trailing_segment_fallback=config.trailing_segment_fallback,
            cache_limit=config.cache_limit,
        )
        return _Snapshot(data=data, resolver=resolver)
