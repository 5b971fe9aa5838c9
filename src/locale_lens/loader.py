#!/usr/bin/env python3
"""
Loader - загрузка и слияние данных локалей.

Формирует два представления:
- tree: locale -> namespace -> вложенный объект (deep merge всех файлов namespace)
- flat: locale -> namespace -> {"a.b.c": value} (листья и промежуточные узлы)

Файлы читаются и разбираются параллельно (asyncio + потоки), слияние
выполняется после этого в порядке, который вернул Locator.
"""

import asyncio
import copy
import json
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

import json5

from .errors import LocaleFileError, ObjectLiteralError
from .js_module import LOADER_PATTERNS, locate_object_literal, parse_object_literal
from .locator import LocaleFile, build_file_index

logger = logging.getLogger(__name__)

SCRIPT_EXTENSIONS = (".js", ".ts", ".mjs", ".cjs", ".mts", ".cts")

LocaleTree = Dict[str, Dict[str, Dict[str, Any]]]
FlattenedMap = Dict[str, Dict[str, Dict[str, Any]]]


@dataclass
class LoadReport:
    """Статистика загрузки (на корректность не влияет)."""
    files_total: int = 0
    succeeded: int = 0
    failed: int = 0
    errors: List[dict] = field(default_factory=list)     # [{"path": ..., "error": ...}]
    elapsed: float = 0.0


@dataclass
class LocaleData:
    """Загруженные данные локалей проекта."""
    tree: LocaleTree = field(default_factory=dict)
    flat: FlattenedMap = field(default_factory=dict)
    files: Dict[str, Dict[str, List[LocaleFile]]] = field(default_factory=dict)
    report: LoadReport = field(default_factory=LoadReport)

    @property
    def locales(self) -> List[str]:
        return list(self.tree.keys())

    def key_count(self) -> int:
        """Количество различных ключей-листьев по всем локалям и namespace."""
        keys = set()
        for namespaces in self.flat.values():
            for entries in namespaces.values():
                keys.update(key for key, value in entries.items() if not isinstance(value, dict))
        return len(keys)


def deep_merge(target: Dict[str, Any], source: Dict[str, Any]) -> Dict[str, Any]:
    """
    Рекурсивно вливает source в target (target изменяется).

    Объект + объект сливаются рекурсивно, в остальных случаях
    побеждает значение из source.
    """
    for key, value in source.items():
        if isinstance(value, dict) and isinstance(target.get(key), dict):
            deep_merge(target[key], value)
        else:
            target[key] = copy.deepcopy(value)
    return target


def flatten(obj: Dict[str, Any], prefix: str = "") -> Dict[str, Any]:
    """
    Преобразует вложенный объект в плоский с dot-notation ключами.

    Промежуточные объекты сохраняются под своим путём, массивы - листья.
    Ключ, записанный в объекте буквально ("a.b"), имеет приоритет над
    таким же путём, полученным из вложенных объектов.
    """
    result: Dict[str, Any] = {}
    nested: List[Dict[str, Any]] = []
    for key, value in obj.items():
        path = f"{prefix}.{key}" if prefix else str(key)
        result[path] = value
        if isinstance(value, dict):
            nested.append(flatten(value, path))

    for entries in nested:
        for path, value in entries.items():
            result.setdefault(path, value)
    return result


def parse_locale_file(file: LocaleFile) -> Dict[str, Any]:
    """
    Читает и разбирает один файл локали.

    Raises:
        LocaleFileError: файл не читается, не разбирается или это не объект
    """
    try:
        content = file.path.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as e:
        raise LocaleFileError(file.path, f"ошибка чтения: {e}") from e

    ext = file.extension
    if ext == ".json":
        try:
            data = json.loads(content)
        except ValueError as e:
            raise LocaleFileError(file.path, f"некорректный JSON: {e}") from e
    elif ext == ".json5":
        try:
            data = json5.loads(content)
        except ValueError as e:
            raise LocaleFileError(file.path, f"некорректный JSON5: {e}") from e
    elif ext in SCRIPT_EXTENSIONS:
        literal = locate_object_literal(content, LOADER_PATTERNS)
        if literal is None:
            raise LocaleFileError(file.path, "не найден экспорт объектного литерала")
        try:
            data = parse_object_literal(literal.source)
        except ObjectLiteralError as e:
            raise LocaleFileError(file.path, str(e)) from e
    else:
        raise LocaleFileError(file.path, f"неподдерживаемое расширение: {ext}")

    if not isinstance(data, dict):
        raise LocaleFileError(file.path, f"ожидался объект, получено: {type(data).__name__}")
    return data


async def _parse_async(file: LocaleFile) -> Tuple[LocaleFile, Optional[Dict[str, Any]], str]:
    try:
        data = await asyncio.to_thread(parse_locale_file, file)
        return file, data, ""
    except LocaleFileError as e:
        return file, None, e.reason


def merge_locale_files(parsed: Iterable[Tuple[LocaleFile, Dict[str, Any]]]) -> Tuple[LocaleTree, FlattenedMap]:
    """Сливает разобранные файлы по (locale, namespace) и строит плоские карты."""
    tree: LocaleTree = {}
    for file, data in parsed:
        accumulator = tree.setdefault(file.locale, {}).setdefault(file.namespace, {})
        deep_merge(accumulator, data)

    flat: FlattenedMap = {
        locale: {namespace: flatten(obj) for namespace, obj in namespaces.items()}
        for locale, namespaces in tree.items()
    }
    return tree, flat


async def load_locale_data(files: List[LocaleFile]) -> LocaleData:
    """
    Загружает все файлы локалей.

    Ошибка отдельного файла фиксируется в отчёте, остальные файлы
    группы продолжают загружаться.

    Args:
        files: Файлы в порядке, который вернул Locator

    Returns:
        Новый LocaleData (существующие данные не изменяются)
    """
    start = time.time()
    report = LoadReport(files_total=len(files))

    results = await asyncio.gather(*(_parse_async(f) for f in files))

    parsed: List[Tuple[LocaleFile, Dict[str, Any]]] = []
    for file, data, error in results:
        if data is None:
            report.failed += 1
            report.errors.append({"path": str(file.path), "error": error})
            logger.warning(f"Файл локали пропущен: {file.relative_path or file.path}: {error}")
            continue
        report.succeeded += 1
        parsed.append((file, data))

    tree, flat = merge_locale_files(parsed)
    report.elapsed = round(time.time() - start, 3)

    logger.info(
        f"Загружено файлов: {report.succeeded}/{report.files_total}, "
        f"ошибок: {report.failed}, локалей: {len(tree)} ({report.elapsed}с)"
    )
    return LocaleData(tree=tree, flat=flat, files=build_file_index(files), report=report)
