"""Общие фикстуры тестов locale_lens."""

import json
from pathlib import Path
from typing import Any, Callable, Dict

import pytest

from locale_lens.config import LensConfig
from locale_lens.loader import LocaleData, flatten


@pytest.fixture
def write_file(tmp_path: Path) -> Callable[[str, Any], Path]:
    """Создаёт файл относительно tmp_path (dict сериализуется в JSON)."""

    def _write(relative: str, content: Any) -> Path:
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        if not isinstance(content, str):
            content = json.dumps(content, ensure_ascii=False, indent=2)
        path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def project(tmp_path: Path, write_file) -> Path:
    """Небольшой проект с JSON и TS локалями."""
    write_file("src/locales/en.json", {
        "home": {"title": "Home"},
        "nav": {"back": "Back"},
    })
    write_file("src/locales/zh-CN/common.json", {"home": {"title": "首页"}})
    write_file(
        "src/locales/zh-CN/user.ts",
        "// user namespace\n"
        "export default {\n"
        "  name: '用户',\n"
        "  /* profile block */\n"
        "  profile: { title: \"资料\", },\n"
        "};\n",
    )
    write_file("src/locales/index.ts", "export * from './en'\n")
    write_file("src/locales/node_modules/en.json", {"ignored": "yes"})
    return tmp_path


@pytest.fixture
def config(project: Path) -> LensConfig:
    return LensConfig(locales_paths=["src/locales"], project_roots=[project])


@pytest.fixture
def make_data() -> Callable[[Dict[str, Any]], LocaleData]:
    """Строит LocaleData из готового дерева locale -> namespace -> объект."""

    def _make(tree: Dict[str, Any]) -> LocaleData:
        flat = {
            locale: {namespace: flatten(obj) for namespace, obj in namespaces.items()}
            for locale, namespaces in tree.items()
        }
        return LocaleData(tree=tree, flat=flat)

    return _make
