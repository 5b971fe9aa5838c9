#!/usr/bin/env python3
"""
Extractor - находит вызовы функций перевода в исходном тексте.

Использует tree-sitter (грамматики JavaScript / TypeScript) для разбора
JS/TS в AST и обход всех call_expression. Для компонентных файлов
(Vue, Svelte) разбирается первый блок <script>, а шаблон сканируется
регуляркой: интерполяция шаблона сама по себе не является JS.

Имя вызова:
    t('k')                 -> "t"
    this.$t('k')           -> "$t"
    i18n.t('k')            -> "i18n.t"
    i18n.global.t('k')     -> "i18n.global.t"
    app.global.t('k')      -> "global.t"

Вызов засчитывается, если имя есть в списке методов и среди аргументов
есть строковый литерал. Ошибка разбора документа даёт пустой список.
"""

import logging
import re
import threading
from bisect import bisect_left
from dataclasses import dataclass
from itertools import accumulate
from typing import Iterable, List, Optional, Tuple

import json5
import tree_sitter_javascript
import tree_sitter_typescript
from tree_sitter import Language, Node, Parser

from .errors import ScriptParseError

logger = logging.getLogger(__name__)

JS_LANGUAGES = ("javascript", "javascriptreact")
TS_LANGUAGES = ("typescript", "typescriptreact")
COMPONENT_LANGUAGES = ("vue", "svelte")
SUPPORTED_LANGUAGES = JS_LANGUAGES + TS_LANGUAGES + COMPONENT_LANGUAGES

SCRIPT_BLOCK = re.compile(r"<script(?:\s+([^>]*))?>([\s\S]*?)</script>", re.IGNORECASE)
SCRIPT_LANG = re.compile(r"""\blang\s*=\s*["']?(\w+)""", re.IGNORECASE)
HTML_COMMENT = re.compile(r"<!--[\s\S]*?-->")

_GRAMMARS = {
    "javascript": tree_sitter_javascript.language,
    "typescript": tree_sitter_typescript.language_typescript,
    "tsx": tree_sitter_typescript.language_tsx,
}
# tree-sitter Parser не потокобезопасен: у каждого потока свои экземпляры
_local = threading.local()


@dataclass(frozen=True)
class CallSite:
    """Вызов функции перевода со строковым ключом."""
    key: str
    start_offset: int       # Смещение литерала (включая кавычки) в документе
    end_offset: int
    source_language: str
    method: str = ""


def _get_parser(grammar: str) -> Parser:
    parsers = getattr(_local, "parsers", None)
    if parsers is None:
        parsers = _local.parsers = {}
    parser = parsers.get(grammar)
    if parser is None:
        parser = Parser(Language(_GRAMMARS[grammar]()))
        parsers[grammar] = parser
    return parser


def _grammar_for(language: str) -> str:
    if language == "typescriptreact":
        return "tsx"
    if language in TS_LANGUAGES:
        return "typescript"
    return "javascript"


def _first_error(node: Node) -> Optional[Node]:
    """Находит первый узел ERROR / MISSING в дереве."""
    stack = [node]
    while stack:
        current = stack.pop()
        if current.type == "ERROR" or current.is_missing:
            return current
        if current.has_error:
            stack.extend(reversed(current.children))
    return None


def _walk(node: Node):
    """Обход дерева в порядке документа."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))


def _text(node: Optional[Node]) -> str:
    if node is None or node.text is None:
        return ""
    return node.text.decode("utf-8")


def resolve_call_name(callee: Node) -> str:
    """Вычисляет имя вызываемой функции по узлу callee."""
    if callee.type == "identifier":
        return _text(callee)

    if callee.type != "member_expression":
        return ""

    prop = callee.child_by_field_name("property")
    obj = callee.child_by_field_name("object")
    if prop is None or prop.type not in ("property_identifier", "identifier"):
        return ""
    name = _text(prop)

    if obj is not None and obj.type == "member_expression":
        obj_prop = obj.child_by_field_name("property")
        if _text(obj_prop) == "global":
            outer = obj.child_by_field_name("object")
            if outer is not None and outer.type == "identifier" and _text(outer) == "i18n":
                return f"i18n.global.{name}"
            return f"global.{name}"
    elif obj is not None and obj.type == "identifier" and _text(obj) == "i18n":
        return f"i18n.{name}"

    return name


def _string_value(node: Node) -> Optional[str]:
    """Значение строкового литерала ('...' или "...")."""
    try:
        value = json5.loads(_text(node))
    except ValueError:
        return None
    return value if isinstance(value, str) else None


class _OffsetMap:
    """
    Перевод байтовых смещений tree-sitter в символьные.

    Для не-ASCII текста таблица начал символов строится один раз,
    каждый перевод - двоичный поиск по ней.
    """

    def __init__(self, text: str, source: bytes):
        self.ascii = len(source) == len(text)
        self.starts: List[int] = []
        if not self.ascii:
            self.starts = list(accumulate((len(ch.encode("utf-8")) for ch in text), initial=0))

    def char(self, byte_offset: int) -> int:
        if self.ascii:
            return byte_offset
        return bisect_left(self.starts, byte_offset)


def parse_script(source: str, language: str) -> Tuple[Node, bytes]:
    """
    Разбирает JS/TS в AST.

    Raises:
        ScriptParseError: в дереве есть синтаксические ошибки
    """
    data = source.encode("utf-8")
    tree = _get_parser(_grammar_for(language)).parse(data)
    root = tree.root_node
    if root.has_error:
        error = _first_error(root)
        offset = error.start_byte if error is not None else -1
        raise ScriptParseError(language, "синтаксическая ошибка", offset)
    return root, data


def extract_from_script(source: str, language: str, methods: Iterable[str],
                        base_offset: int = 0,
                        source_language: Optional[str] = None) -> List[CallSite]:
    """
    Находит вызовы методов перевода в JS/TS тексте через AST.

    Args:
        source: Текст скрипта
        language: javascript / typescript / *react
        methods: Имена методов перевода
        base_offset: Смещение фрагмента в полном документе
        source_language: Язык документа для CallSite (по умолчанию language)

    Raises:
        ScriptParseError: текст не разбирается
    """
    method_set = set(methods)
    root, data = parse_script(source, language)
    offsets = _OffsetMap(source, data)
    sites: List[CallSite] = []

    for node in _walk(root):
        if node.type != "call_expression":
            continue
        callee = node.child_by_field_name("function")
        arguments = node.child_by_field_name("arguments")
        if callee is None or arguments is None or arguments.type != "arguments":
            continue

        name = resolve_call_name(callee)
        if name not in method_set:
            continue

        for arg in arguments.named_children:
            if arg.type != "string":
                continue
            key = _string_value(arg)
            if key is None:
                continue
            sites.append(CallSite(
                key=key,
                start_offset=offsets.char(arg.start_byte) + base_offset,
                end_offset=offsets.char(arg.end_byte) + base_offset,
                source_language=source_language or language,
                method=name,
            ))
            break

    return sites


def _template_pattern(methods: Iterable[str]) -> Optional["re.Pattern"]:
    names = sorted({m for m in methods if m}, key=len, reverse=True)
    if not names:
        return None
    alternatives = "|".join(re.escape(name) for name in names)
    return re.compile(rf"(?<![\w$])({alternatives})\s*\(\s*(['\"])([^'\"]+)\2")


def extract_from_template(text: str, methods: Iterable[str], source_language: str,
                          skip_ranges: Iterable[Tuple[int, int]] = ()) -> List[CallSite]:
    """Регулярочный поиск вызовов в тексте шаблона (вне skip_ranges и HTML-комментариев)."""
    pattern = _template_pattern(methods)
    if pattern is None:
        return []

    skipped = list(skip_ranges) + [m.span() for m in HTML_COMMENT.finditer(text)]
    sites = []
    for match in pattern.finditer(text):
        if any(start <= match.start() < end for start, end in skipped):
            continue
        # Диапазон литерала вместе с кавычками
        literal_start = match.start(3) - 1
        literal_end = match.end(3) + 1
        sites.append(CallSite(
            key=match.group(3),
            start_offset=literal_start,
            end_offset=literal_end,
            source_language=source_language,
            method=match.group(1),
        ))
    return sites


def _extract_component(text: str, language: str, methods: List[str]) -> List[CallSite]:
    sites: List[CallSite] = []
    skip: List[Tuple[int, int]] = []

    script = SCRIPT_BLOCK.search(text)
    if script is not None:
        skip.append(script.span())
        attrs = script.group(1) or ""
        lang_match = SCRIPT_LANG.search(attrs)
        script_lang = lang_match.group(1).lower() if lang_match else "js"
        if script_lang == "tsx":
            grammar_language = "typescriptreact"
        elif script_lang == "ts":
            grammar_language = "typescript"
        else:
            grammar_language = "javascript"

        try:
            sites.extend(extract_from_script(
                script.group(2), grammar_language, methods,
                base_offset=script.start(2), source_language=language,
            ))
        except ScriptParseError as e:
            logger.warning(f"Блок <script> не разобран, вызовы в нём пропущены: {e}")

    sites.extend(extract_from_template(text, methods, language, skip))
    return sorted(sites, key=lambda s: s.start_offset)


def extract(source: str, source_language: str, methods: Iterable[str]) -> List[CallSite]:
    """
    Находит все вызовы функций перевода в документе.

    Чистая синхронная функция, безопасна для вызова из нескольких потоков;
    троттлинг повторных вызовов - забота хоста.

    Args:
        source: Полный текст документа
        source_language: javascript / typescript / vue / svelte / *react
        methods: Имена методов перевода

    Returns:
        Список CallSite в порядке документа (пустой при ошибке разбора)
    """
    methods = list(methods)
    language = source_language.lower()

    if language in COMPONENT_LANGUAGES:
        return _extract_component(source, language, methods)

    if language not in JS_LANGUAGES + TS_LANGUAGES:
        logger.debug(f"Язык не поддерживается: {source_language}")
        return []

    try:
        return extract_from_script(source, language, methods)
    except ScriptParseError as e:
        logger.warning(f"Документ не разобран, вызовы перевода не найдены: {e}")
        return []
