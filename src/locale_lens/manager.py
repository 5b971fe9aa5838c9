#!/usr/bin/env python3
"""
Manager - CLI для работы с переводами проекта.

Команды:
  stats      Загружает локали и показывает статистику
  locate     Показывает найденные файлы локалей
  resolve    Показывает переводы ключа во всех локалях
  extract    Находит вызовы функций перевода в файле
  write      Записывает значения перевода в файлы локалей

Использование:
  python -m locale_lens.manager stats --project-root . --locales-path src/locales
  python -m locale_lens.manager resolve home.title
  python -m locale_lens.manager extract src/App.vue
  python -m locale_lens.manager write home.title en=Home zh-CN=首页
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional

from .config import LensConfig
from .resolver import format_translations
from .session import RefreshResult, ResolutionSession

LANGUAGE_BY_SUFFIX = {
    ".js": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".jsx": "javascriptreact",
    ".ts": "typescript",
    ".mts": "typescript",
    ".cts": "typescript",
    ".tsx": "typescriptreact",
    ".vue": "vue",
    ".svelte": "svelte",
}


def setup_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def build_config(args) -> LensConfig:
    """Собирает конфиг: окружение (.env) + аргументы командной строки."""
    env_file = Path(args.env_file) if args.env_file else None
    overrides = {
        "locales_paths": args.locales_path,
        "file_extensions": args.ext,
        "default_locale": args.default_locale,
        "translation_methods": args.method,
        "project_roots": [Path(args.project_root)] if args.project_root else None,
    }
    if args.no_trailing_fallback:
        overrides["trailing_segment_fallback"] = False
    return LensConfig.from_env(env_file, **overrides)


def print_refresh(result: RefreshResult) -> None:
    if not result.ok:
        print(f"\n  Ошибка загрузки ({result.error_kind}): {result.error}")
        return

    report = result.report
    print(f"\n{'='*60}")
    print(f"  Локалей: {result.locale_count}, ключей: {result.key_count}")
    if report is not None:
        print(f"  Файлов: {report.files_total}, успешно: {report.succeeded}, "
              f"ошибок: {report.failed} ({report.elapsed}с)")
        for error in report.errors:
            print(f"    [SKIP] {error['path']}: {error['error']}")
    print(f"{'='*60}")


def parse_assignments(items: List[str]) -> Dict[str, str]:
    """Разбирает аргументы вида LOCALE=VALUE."""
    values = {}
    for item in items:
        locale, sep, value = item.partition("=")
        if not sep or not locale.strip():
            raise ValueError(f"Ожидалось LOCALE=VALUE, получено: {item}")
        values[locale.strip()] = value
    return values


async def cmd_stats(session: ResolutionSession, args) -> int:
    """Команда: статистика."""
    result = await session.refresh()
    print_refresh(result)
    if result.ok:
        for locale, namespaces in session.data.flat.items():
            counts = ", ".join(f"{ns}={len(entries)}" for ns, entries in namespaces.items())
            print(f"  [{locale}] {counts}")
    return 0 if result.ok else 1


async def cmd_locate(session: ResolutionSession, args) -> int:
    """Команда: список файлов локалей."""
    result = await session.refresh()
    if not result.ok:
        print_refresh(result)
        return 1
    for locale, namespaces in session.locale_files.items():
        for namespace, files in namespaces.items():
            for file in files:
                print(f"  {locale:<8} {namespace:<16} {file.path}")
    return 0


async def cmd_resolve(session: ResolutionSession, args) -> int:
    """Команда: переводы ключа."""
    result = await session.refresh()
    if not result.ok:
        print_refresh(result)
        return 1
    translations = session.resolve(args.key)
    print(format_translations(args.key, translations, session.config.default_locale))
    return 0


async def cmd_extract(session: ResolutionSession, args) -> int:
    """Команда: вызовы функций перевода в файле."""
    path = Path(args.file)
    language = args.language or LANGUAGE_BY_SUFFIX.get(path.suffix.lower())
    if not language:
        print(f"  Не удалось определить язык файла: {path} (используйте --language)")
        return 1

    result = await session.refresh()
    if not result.ok:
        print_refresh(result)

    text = path.read_text(encoding="utf-8")
    sites = session.extract(text, language)
    default_locale = session.config.default_locale.lower()

    print(f"\n🔍 {path} ({language}): найдено вызовов: {len(sites)}")
    for site in sites:
        line = text.count("\n", 0, site.start_offset) + 1
        translations = session.resolve(site.key)
        value = translations.get(default_locale)
        if value is None and translations:
            value = next(iter(translations.values()))
        shown = value if value is not None else "(нет перевода)"
        print(f"  {line:>5}: {site.method}('{site.key}') -> {shown}")
    return 0


async def cmd_write(session: ResolutionSession, args) -> int:
    """Команда: запись перевода."""
    try:
        values = parse_assignments(args.values)
    except ValueError as e:
        print(f"  {e}")
        return 1

    result = await session.refresh()
    if not result.ok:
        print_refresh(result)
        return 1

    results = await session.write(args.key, values)
    failed = 0
    for locale, outcome in results.items():
        if outcome.ok:
            print(f"  ✅ [{locale}] {outcome.path}")
        else:
            failed += 1
            print(f"  ❌ [{locale}] {outcome.error}")
    return 1 if failed else 0


def build_parser() -> argparse.ArgumentParser:
    """Строит парсер аргументов."""
    parser = argparse.ArgumentParser(
        prog="locale-lens",
        description="Поиск и редактирование i18n-переводов JS/TS/Vue проекта",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Примеры:
  locale-lens stats --locales-path src/locales
  locale-lens resolve home.title
  locale-lens extract src/views/Home.vue
  locale-lens write home.title en=Home zh-CN=首页
        """
    )
    parser.add_argument("--project-root", default="", help="Корень проекта")
    parser.add_argument("--locales-path", action="append", default=None,
                        help="Каталог локалей (можно повторять)")
    parser.add_argument("--ext", action="append", default=None,
                        help="Расширение файлов локалей (можно повторять)")
    parser.add_argument("--default-locale", default=None, help="Локаль по умолчанию")
    parser.add_argument("--method", action="append", default=None,
                        help="Имя функции перевода (можно повторять)")
    parser.add_argument("--env-file", default="", help="Путь к .env")
    parser.add_argument("--no-trailing-fallback", action="store_true",
                        help="Отключить поиск по последнему сегменту ключа")
    parser.add_argument("--verbose", "-v", action="store_true", help="Подробный лог")

    subparsers = parser.add_subparsers(dest="command", help="Команда")

    subparsers.add_parser("stats", help="Статистика локалей")
    subparsers.add_parser("locate", help="Список файлов локалей")

    p_resolve = subparsers.add_parser("resolve", help="Переводы ключа")
    p_resolve.add_argument("key", help="Dot-ключ перевода")

    p_extract = subparsers.add_parser("extract", help="Вызовы перевода в файле")
    p_extract.add_argument("file", help="Файл исходного кода")
    p_extract.add_argument("--language", default=None,
                           help="javascript / typescript / vue / svelte")

    p_write = subparsers.add_parser("write", help="Записать перевод")
    p_write.add_argument("key", help="Dot-ключ перевода")
    p_write.add_argument("values", nargs="+", help="Значения LOCALE=VALUE")

    return parser


COMMANDS = {
    "stats": cmd_stats,
    "locate": cmd_locate,
    "resolve": cmd_resolve,
    "extract": cmd_extract,
    "write": cmd_write,
}


async def run(args) -> int:
    session = ResolutionSession(build_config(args))
    try:
        return await COMMANDS[args.command](session, args)
    finally:
        session.dispose()


def main(argv: Optional[List[str]] = None) -> int:
    """Точка входа CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    setup_logging(args.verbose)
    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
