#!/usr/bin/env python3
"""
Locator - находит файлы локалей в настроенных каталогах.

Для каждого файла определяются:
- locale: сегмент пути вида en / zh-CN, затем имя файла, иначе само имя файла
- namespace: имя файла без расширения; если имя само является локалью - "common"

Пример:
    locales/zh-CN/common.json  -> locale="zh-cn", namespace="common"
    locales/en.json            -> locale="en",    namespace="common"
    locales/en/home.ts         -> locale="en",    namespace="home"
"""

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Set

logger = logging.getLogger(__name__)

LOCALE_PATTERN = re.compile(r"^[a-z]{2}(-[A-Z]{2})?$", re.IGNORECASE)

DEFAULT_EXCLUDE_DIRS = [
    "node_modules", ".git", "dist", "build", ".venv", "venv", "__pycache__",
]

COMMON_NAMESPACE = "common"


@dataclass(frozen=True)
class LocaleFile:
    """Файл локали, отнесённый к паре (locale, namespace)."""
    path: Path
    locale: str
    namespace: str
    relative_path: str = ""     # Путь относительно каталога локалей (для логов)

    @property
    def extension(self) -> str:
        return self.path.suffix.lower()


def is_locale_identifier(name: str) -> bool:
    """Проверяет, похоже ли имя на идентификатор локали (en, zh-CN)."""
    return bool(LOCALE_PATTERN.match(name))


def determine_locale(path: Path, root: Optional[Path] = None) -> str:
    """
    Определяет локаль по пути файла.

    Порядок:
    1. Сегмент каталога (относительно root), затем имя самого root
    2. Имя файла без расширения
    3. Имя файла как есть
    """
    path = Path(path)
    segments: List[str] = []
    if root is not None:
        try:
            segments.extend(path.relative_to(root).parts[:-1])
        except ValueError:
            segments.extend(path.parent.parts)
        segments.append(Path(root).name)
    else:
        segments.extend(path.parent.parts)

    for segment in segments:
        if is_locale_identifier(segment):
            return segment.lower()

    stem = path.stem
    if is_locale_identifier(stem):
        return stem.lower()

    return stem


def determine_namespace(path: Path) -> str:
    """Namespace - имя файла без расширения, для файлов-локалей - common."""
    stem = Path(path).stem
    if is_locale_identifier(stem):
        return COMMON_NAMESPACE
    return stem


class LocaleLocator:
    """
    Рекурсивно обходит каталоги локалей и классифицирует найденные файлы.

    Пропускает каталоги зависимостей и barrel-файлы index.*
    """

    def __init__(self, exclude_dirs: Optional[List[str]] = None):
        self.exclude_dirs = exclude_dirs or list(DEFAULT_EXCLUDE_DIRS)

    def locate(self, roots: Iterable[Path], extensions: Iterable[str]) -> List[LocaleFile]:
        """
        Находит файлы локалей.

        Args:
            roots: Каталоги для поиска (несуществующие пропускаются)
            extensions: Расширения вида '.json'

        Returns:
            Список LocaleFile без дублей, в порядке корней и путей
        """
        wanted = {ext.lower() if ext.startswith(".") else f".{ext.lower()}" for ext in extensions}
        seen: Set[Path] = set()
        found: List[LocaleFile] = []

        for root in roots:
            root = Path(root)
            if not root.is_dir():
                logger.debug(f"Каталог локалей не найден, пропуск: {root}")
                continue

            for path in self._find_files(root, wanted):
                resolved = path.resolve()
                if resolved in seen:
                    continue
                seen.add(resolved)

                found.append(LocaleFile(
                    path=path,
                    locale=determine_locale(path, root),
                    namespace=determine_namespace(path),
                    relative_path=path.relative_to(root).as_posix(),
                ))

        logger.info(f"Найдено файлов локалей: {len(found)}")
        return found

    def _find_files(self, root: Path, extensions: Set[str]) -> List[Path]:
        """Находит файлы с нужными расширениями, кроме index.* и исключённых каталогов."""
        files = []
        for path in root.rglob("*"):
            if not path.is_file() or path.suffix.lower() not in extensions:
                continue
            parts = path.relative_to(root).parts
            if any(part in self.exclude_dirs for part in parts[:-1]):
                continue
            if path.name.split(".")[0] == "index":
                continue
            files.append(path)
        return sorted(files)


def locate(roots: Iterable[Path], extensions: Iterable[str],
           exclude_dirs: Optional[List[str]] = None) -> List[LocaleFile]:
    """Сокращение для LocaleLocator(exclude_dirs).locate(roots, extensions)."""
    return LocaleLocator(exclude_dirs).locate(roots, extensions)


def build_file_index(files: Iterable[LocaleFile]) -> Dict[str, Dict[str, List[LocaleFile]]]:
    """Группирует файлы: locale -> namespace -> [LocaleFile] в порядке обнаружения."""
    index: Dict[str, Dict[str, List[LocaleFile]]] = {}
    for file in files:
        index.setdefault(file.locale, {}).setdefault(file.namespace, []).append(file)
    return index
