"""
JS Module - поиск и разбор объектного литерала в JS/TS файлах локалей.

Код не исполняется: найденный фрагмент {...} разбирается json5
(ключи без кавычек, одинарные кавычки, висячие запятые). Если json5 не
справился - пробуем привести фрагмент к JSON регулярками.

Поиск экспорта идёт по тексту с "замаскированными" комментариями:
комментарии заменяются пробелами той же длины, поэтому смещения совпадают
с исходным текстом и найденный диапазон можно заменить в оригинале.
"""

import json
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Pattern, Sequence

import json5

from .errors import ObjectLiteralError

EXPORT_DEFAULT = re.compile(r"\bexport\s+default\s+\{")
MODULE_EXPORTS = re.compile(r"\bmodule\.exports\s*=\s*\{")
CONST_ASSIGN = re.compile(r"\b(?:const|let|var)\s+[A-Za-z_$][\w$]*\s*(?::[^=;{]+)?=\s*\{")
EXPORT_BLOCK = re.compile(r"\bexport\s+\{")

# Порядок важен: первый найденный экспорт побеждает
LOADER_PATTERNS: List[Pattern] = [EXPORT_DEFAULT, MODULE_EXPORTS, CONST_ASSIGN, EXPORT_BLOCK]
WRITER_PATTERNS: List[Pattern] = [EXPORT_DEFAULT]

_QUOTES = "'\"`"


@dataclass
class ObjectLiteral:
    """Найденный литерал: диапазон [start, end) в исходном тексте."""
    start: int
    end: int
    source: str     # Текст литерала без комментариев


def _skip_string(text: str, start: int) -> int:
    """Возвращает позицию сразу за строковым литералом, начинающимся в start."""
    quote = text[start]
    i = start + 1
    n = len(text)
    while i < n:
        ch = text[i]
        if ch == "\\":
            i += 2
            continue
        if ch == quote:
            return i + 1
        if ch == "\n" and quote != "`":
            return i
        i += 1
    return n


def mask_comments(text: str) -> str:
    """Заменяет // и /* */ комментарии пробелами, не трогая строки."""
    out: List[str] = []
    i = 0
    n = len(text)
    while i < n:
        ch = text[i]
        if ch in _QUOTES:
            end = _skip_string(text, i)
            out.append(text[i:end])
            i = end
        elif text.startswith("//", i):
            end = text.find("\n", i)
            end = n if end == -1 else end
            out.append(" " * (end - i))
            i = end
        elif text.startswith("/*", i):
            end = text.find("*/", i + 2)
            end = n if end == -1 else end + 2
            # Переводы строк сохраняем, чтобы не сбить номера строк
            out.append(re.sub(r"[^\n]", " ", text[i:end]))
            i = end
        else:
            out.append(ch)
            i += 1
    return "".join(out)


def _match_brace(text: str, start: int) -> Optional[int]:
    """Находит парную '}' для '{' в позиции start; возвращает позицию за ней."""
    depth = 0
    i = start
    n = len(text)
    while i < n:
        ch = text[i]
        if ch in _QUOTES:
            i = _skip_string(text, i)
            continue
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return i + 1
        i += 1
    return None


def locate_object_literal(text: str,
                          patterns: Sequence[Pattern] = LOADER_PATTERNS) -> Optional[ObjectLiteral]:
    """
    Ищет объектный литерал по шаблонам экспорта в порядке приоритета.

    Args:
        text: Исходный текст модуля
        patterns: Регулярки, заканчивающиеся на '{'

    Returns:
        ObjectLiteral или None, если ни один шаблон не сработал
    """
    masked = mask_comments(text)
    for pattern in patterns:
        for match in pattern.finditer(masked):
            brace = match.end() - 1
            end = _match_brace(masked, brace)
            if end is not None:
                return ObjectLiteral(start=brace, end=end, source=masked[brace:end])
    return None


# JSON-совместимый fallback
_BARE_KEY = re.compile(r"([{,]\s*)([A-Za-z_$][\w$]*|\d+)\s*:")
_SINGLE_QUOTED = re.compile(r"'((?:[^'\\\n]|\\.)*)'")
_TRAILING_COMMA = re.compile(r",(\s*[}\]])")


def _requote(match: "re.Match") -> str:
    inner = match.group(1).replace("\\'", "'").replace('"', '\\"')
    return f'"{inner}"'


def _to_json(source: str) -> str:
    text = _SINGLE_QUOTED.sub(_requote, source)
    text = _BARE_KEY.sub(r'\1"\2":', text)
    return _TRAILING_COMMA.sub(r"\1", text)


def parse_object_literal(source: str) -> Dict[str, Any]:
    """
    Разбирает текст объектного литерала без исполнения кода.

    Raises:
        ObjectLiteralError: литерал не разбирается или это не объект
    """
    try:
        data = json5.loads(source)
    except ValueError as json5_error:
        try:
            data = json.loads(_to_json(source))
        except ValueError:
            raise ObjectLiteralError(f"Не удалось разобрать объектный литерал: {json5_error}") from json5_error

    if not isinstance(data, dict):
        raise ObjectLiteralError(f"Ожидался объект, получено: {type(data).__name__}")
    return data


def serialize_object_literal(data: Dict[str, Any]) -> str:
    """Сериализует объект для записи обратно в модуль (отступ 2 пробела)."""
    return json.dumps(data, ensure_ascii=False, indent=2)
