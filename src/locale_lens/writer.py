#!/usr/bin/env python3
"""
Writer - запись значения перевода обратно в файлы локалей.

Для каждой локали с непустым значением:
1. Выбирается файл: namespace == первый сегмент ключа, иначе common,
   иначе первый namespace локали
2. Если namespace совпал с первым сегментом - сегмент отбрасывается
3. Значение устанавливается по оставшемуся пути (промежуточные объекты создаются)
4. JSON пишется с отступом 2; в JS/TS заменяется только литерал export default {...}

Запись не транзакционна: ошибка одной локали не откатывает другие.
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from .errors import ExportNotFoundError, LocaleLensError
from .js_module import WRITER_PATTERNS, locate_object_literal, parse_object_literal, serialize_object_literal
from .loader import SCRIPT_EXTENSIONS
from .locator import COMMON_NAMESPACE, LocaleFile

logger = logging.getLogger(__name__)

FileIndex = Dict[str, Dict[str, List[LocaleFile]]]


@dataclass
class WriteResult:
    """Результат записи для одной локали."""
    locale: str
    ok: bool
    path: Optional[Path] = None
    skipped: bool = False       # Для локали нет ни одного файла
    error: str = ""


def set_nested_value(obj: Dict[str, Any], keys: List[str], value: Any) -> None:
    """Устанавливает значение по пути, заменяя не-объекты на промежуточных уровнях."""
    current = obj
    for key in keys[:-1]:
        if not isinstance(current.get(key), dict):
            current[key] = {}
        current = current[key]
    current[keys[-1]] = value


def select_target(key: str, namespaces: Dict[str, List[LocaleFile]]) -> Optional[Tuple[LocaleFile, List[str]]]:
    """
    Выбирает файл для записи и путь внутри него.

    Returns:
        (LocaleFile, путь) или None, если у локали нет файлов
    """
    parts = key.split(".")
    first = parts[0]

    if namespaces.get(first):
        return namespaces[first][0], parts[1:]

    candidates = [COMMON_NAMESPACE] + [ns for ns in namespaces if ns != COMMON_NAMESPACE]
    for namespace in candidates:
        files = namespaces.get(namespace)
        if files:
            return files[0], parts
    return None


def update_json(text: str, path: List[str], value: Any) -> str:
    """Устанавливает значение в JSON-тексте и сериализует с отступом 2."""
    data = json.loads(text) if text.strip() else {}
    if not isinstance(data, dict):
        raise LocaleLensError("Корень JSON не является объектом")
    set_nested_value(data, path, value)
    result = json.dumps(data, ensure_ascii=False, indent=2)
    return result + "\n" if text.endswith("\n") else result


def update_script(text: str, path: List[str], value: Any, file_path: Optional[Path] = None) -> str:
    """
    Устанавливает значение в литерале export default {...}.

    Текст вне литерала сохраняется как есть.

    Raises:
        ExportNotFoundError: export default {...} не найден
        ObjectLiteralError: литерал не разбирается
    """
    literal = locate_object_literal(text, WRITER_PATTERNS)
    if literal is None:
        raise ExportNotFoundError(file_path)
    data = parse_object_literal(literal.source)
    set_nested_value(data, path, value)
    return text[:literal.start] + serialize_object_literal(data) + text[literal.end:]


def write_file(file: LocaleFile, path: List[str], value: Any) -> None:
    """Записывает значение в один файл локали."""
    if not path:
        raise LocaleLensError("Пустой путь внутри файла: ключ совпадает с namespace")

    text = file.path.read_text(encoding="utf-8-sig")
    ext = file.extension
    if ext == ".json":
        new_text = update_json(text, path, value)
    elif ext in SCRIPT_EXTENSIONS:
        new_text = update_script(text, path, value, file.path)
    else:
        raise LocaleLensError(f"Запись в файлы {ext} не поддерживается")

    file.path.write_text(new_text, encoding="utf-8")


def write_translation(key: str, values: Dict[str, Any], index: FileIndex) -> Dict[str, WriteResult]:
    """
    Записывает значения перевода по локалям.

    Args:
        key: Dot-ключ перевода
        values: {locale: value}; пустые значения пропускаются
        index: locale -> namespace -> [LocaleFile]

    Returns:
        {locale: WriteResult}
    """
    results: Dict[str, WriteResult] = {}

    for locale, value in values.items():
        if value is None or value == "":
            continue

        namespaces = index.get(locale) or index.get(locale.lower(), {})
        target = select_target(key, namespaces)
        if target is None:
            logger.warning(f"[{locale}] нет файла локали для записи '{key}'")
            results[locale] = WriteResult(locale=locale, ok=False, skipped=True,
                                          error="нет файла локали")
            continue

        file, path = target
        try:
            write_file(file, path, value)
        except (LocaleLensError, OSError, ValueError) as e:
            logger.warning(f"[{locale}] не удалось записать '{key}' в {file.path}: {e}")
            results[locale] = WriteResult(locale=locale, ok=False, path=file.path, error=str(e))
            continue

        logger.info(f"[{locale}] записан '{key}' -> {file.relative_path or file.path}")
        results[locale] = WriteResult(locale=locale, ok=True, path=file.path)

    return results
