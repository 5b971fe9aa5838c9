"""
Config - снимок настроек i18n для одного цикла разрешения.

Хост передаёт LensConfig в ResolutionSession; ядро считает его неизменяемым.
Значения можно взять из окружения (.env через python-dotenv):

    LOCALE_LENS_LOCALES_PATHS=./src/locales/,./src/i18n/
    LOCALE_LENS_FILE_EXTENSIONS=.json,.js,.ts
    LOCALE_LENS_DEFAULT_LOCALE=zh-CN
    LOCALE_LENS_TRANSLATION_METHODS=$t,$st,i18n.global.t,i18n.t,t,translate
    LOCALE_LENS_PROJECT_ROOT=/path/to/project
"""

import os
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_LOCALES_PATHS = ["./src/locales/", "./src/i18n/"]
DEFAULT_FILE_EXTENSIONS = [".json", ".js", ".ts"]
DEFAULT_LOCALE = "zh-CN"
DEFAULT_TRANSLATION_METHODS = ["$t", "$st", "i18n.global.t", "i18n.t", "t", "translate"]

ENV_PREFIX = "LOCALE_LENS_"


def _split_list(raw: str) -> List[str]:
    return [item.strip() for item in raw.split(",") if item.strip()]


class LensConfig(BaseModel):
    """Настройки поиска и разрешения переводов."""

    model_config = ConfigDict(frozen=True)

    locales_paths: List[str] = Field(default_factory=lambda: list(DEFAULT_LOCALES_PATHS))
    file_extensions: List[str] = Field(default_factory=lambda: list(DEFAULT_FILE_EXTENSIONS))
    default_locale: str = DEFAULT_LOCALE
    translation_methods: List[str] = Field(default_factory=lambda: list(DEFAULT_TRANSLATION_METHODS))
    project_roots: List[Path] = Field(default_factory=lambda: [Path.cwd()])
    # Стратегия 3 резолвера: поиск по последнему сегменту ключа
    trailing_segment_fallback: bool = True
    cache_limit: int = Field(default=1000, ge=1)

    @field_validator("file_extensions")
    @classmethod
    def _normalize_extensions(cls, value: List[str]) -> List[str]:
        """Приводит расширения к виду '.ext' в нижнем регистре без дублей."""
        result: List[str] = []
        for ext in value:
            ext = ext.strip().lower()
            if not ext:
                continue
            if not ext.startswith("."):
                ext = f".{ext}"
            if ext not in result:
                result.append(ext)
        return result

    @field_validator("locales_paths", "translation_methods")
    @classmethod
    def _strip_items(cls, value: List[str]) -> List[str]:
        return [item.strip() for item in value if item and item.strip()]

    @classmethod
    def from_env(cls, env_file: Optional[Path] = None, **overrides) -> "LensConfig":
        """
        Собирает конфиг из переменных окружения LOCALE_LENS_*.

        Args:
            env_file: Путь к .env (по умолчанию ищется в текущей директории)
            **overrides: Явные значения, перекрывающие окружение

        Returns:
            LensConfig
        """
        if env_file is not None:
            load_dotenv(env_file)
        else:
            load_dotenv()

        values = {}
        list_fields = {
            "LOCALES_PATHS": "locales_paths",
            "FILE_EXTENSIONS": "file_extensions",
            "TRANSLATION_METHODS": "translation_methods",
        }
        for env_name, field_name in list_fields.items():
            raw = os.getenv(ENV_PREFIX + env_name)
            if raw is not None:
                values[field_name] = _split_list(raw)

        default_locale = os.getenv(ENV_PREFIX + "DEFAULT_LOCALE")
        if default_locale:
            values["default_locale"] = default_locale.strip()

        project_root = os.getenv(ENV_PREFIX + "PROJECT_ROOT")
        if project_root:
            values["project_roots"] = [Path(p) for p in _split_list(project_root)]

        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    def resolve_locale_dirs(self) -> List[Path]:
        """
        Возвращает абсолютные каталоги локалей.

        Относительные пути присоединяются к каждому корню проекта.
        Порядок сохраняется, дубли убираются.
        """
        dirs: List[Path] = []
        for raw in self.locales_paths:
            candidate = Path(raw).expanduser()
            if candidate.is_absolute():
                targets = [candidate]
            else:
                targets = [Path(root) / candidate for root in self.project_roots]
            for target in targets:
                target = Path(os.path.normpath(target.absolute()))
                if target not in dirs:
                    dirs.append(target)
        return dirs
