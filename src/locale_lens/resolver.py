#!/usr/bin/env python3
"""
Resolver - поиск значения перевода по dot-ключу во всех локалях.

Для каждой локали namespace перебираются в порядке загрузки, в каждом
пробуются стратегии:
1. Точное совпадение в плоской карте ("a.b" -> value)
2. Навигация по вложенному объекту сегмент за сегментом (только листья)
3. Последний сегмент ключа как ключ верхнего уровня (если сегментов > 1)

Первое найденное значение для локали побеждает.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from .loader import LocaleData

logger = logging.getLogger(__name__)

_MISSING = object()


def lookup_in_namespace(key: str, nested: Dict[str, Any], flat: Dict[str, Any],
                        trailing_segment_fallback: bool = True) -> Tuple[Any, str]:
    """
    Ищет ключ в одном namespace.

    Returns:
        (значение, имя стратегии) или (_MISSING, "")
    """
    if key in flat:
        return flat[key], "exact"

    parts = key.split(".")
    current: Any = nested
    for part in parts:
        if not isinstance(current, dict) or part not in current:
            current = _MISSING
            break
        current = current[part]
    if current is not _MISSING and current is not None and not isinstance(current, (dict, list)):
        return current, "nested"

    if trailing_segment_fallback and len(parts) > 1 and parts[-1] in flat:
        return flat[parts[-1]], "trailing"

    return _MISSING, ""


class TranslationResolver:
    """
    Разрешает ключи по снимку LocaleData с кешем результатов.

    Кеш живёт столько же, сколько снимок: при refresh сессия создаёт
    новый резолвер. При переполнении кеш очищается целиком.
    """

    def __init__(self, data: LocaleData, trailing_segment_fallback: bool = True,
                 cache_limit: int = 1000):
        self.data = data
        self.trailing_segment_fallback = trailing_segment_fallback
        self.cache_limit = cache_limit
        self._cache: Dict[str, Dict[str, Any]] = {}

    def resolve(self, key: str) -> Dict[str, Any]:
        """
        Возвращает {locale: value} для ключа.

        Пустой результат означает "перевода нет", а не ошибку.
        """
        if key in self._cache:
            return dict(self._cache[key])

        result: Dict[str, Any] = {}
        if not key:
            logger.warning("Пустой ключ перевода")
        else:
            for locale, namespaces in self.data.tree.items():
                flat_namespaces = self.data.flat.get(locale, {})
                for namespace, nested in namespaces.items():
                    value, strategy = lookup_in_namespace(
                        key, nested, flat_namespaces.get(namespace, {}),
                        self.trailing_segment_fallback,
                    )
                    if value is not _MISSING:
                        result[locale] = value
                        logger.debug(f"{locale}.{namespace}: '{key}' найден ({strategy})")
                        break

            if not result:
                logger.debug(f"Перевод не найден: {key}")

        if len(self._cache) >= self.cache_limit:
            self._cache.clear()
        self._cache[key] = result
        return dict(result)

    def clear_cache(self) -> None:
        self._cache.clear()

    @property
    def cache_size(self) -> int:
        return len(self._cache)


def resolve(key: str, data: LocaleData, trailing_segment_fallback: bool = True) -> Dict[str, Any]:
    """Разовый поиск без кеша."""
    return TranslationResolver(data, trailing_segment_fallback).resolve(key)


def order_locales(translations: Dict[str, Any], default_locale: Optional[str] = None) -> List[str]:
    """Порядок показа: локаль по умолчанию, затем английский, затем по алфавиту."""
    default = (default_locale or "").lower()

    def sort_key(locale: str):
        lowered = locale.lower()
        if default and lowered == default:
            return (0, lowered)
        if lowered in ("en", "en-us"):
            return (1, lowered)
        return (2, lowered)

    return sorted(translations.keys(), key=sort_key)


def format_translations(key: str, translations: Dict[str, Any],
                        default_locale: Optional[str] = None) -> str:
    """Текстовое представление переводов ключа (для CLI и подсказок хоста)."""
    lines = [f"Translation key: {key}"]
    if not translations:
        lines.append("  (no translation found)")
        return "\n".join(lines)

    default = (default_locale or "").lower()
    for locale in order_locales(translations, default_locale):
        marker = " (default)" if locale.lower() == default else ""
        value = translations[locale]
        lines.append(f"  {locale}{marker}: {value if value not in (None, '') else '(empty)'}")
    return "\n".join(lines)
