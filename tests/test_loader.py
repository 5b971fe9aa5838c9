"""Тесты Loader: разбор файлов, deep merge и плоские карты."""

import copy
from pathlib import Path

import pytest

from locale_lens.errors import LocaleFileError
from locale_lens.loader import deep_merge, flatten, load_locale_data, parse_locale_file
from locale_lens.locator import LocaleFile, locate


def _file(path: Path, locale: str = "en", namespace: str = "common") -> LocaleFile:
    return LocaleFile(path=path, locale=locale, namespace=namespace, relative_path=path.name)


def _unflatten_leaves(flat: dict) -> dict:
    result: dict = {}
    for key, value in flat.items():
        if isinstance(value, dict):
            continue
        current = result
        parts = key.split(".")
        for part in parts[:-1]:
            current = current.setdefault(part, {})
        current[parts[-1]] = value
    return result


class TestDeepMerge:
    """Рекурсивное слияние объектов."""

    def test_objects_merged_scalars_replaced(self) -> None:
        target = {"a": "1", "b": {"x": "1", "y": "1"}, "c": {"k": "v"}}
        source = {"a": "2", "b": {"y": "2", "z": "2"}, "c": "scalar"}
        assert deep_merge(target, source) == {
            "a": "2",
            "b": {"x": "1", "y": "2", "z": "2"},
            "c": "scalar",
        }

    def test_idempotent(self) -> None:
        target = {"a": {"b": "1"}, "list": [1, 2]}
        source = {"a": {"c": "2"}, "list": [3]}
        once = deep_merge(copy.deepcopy(target), source)
        twice = deep_merge(deep_merge(copy.deepcopy(target), source), source)
        assert once == twice

    def test_source_not_shared(self) -> None:
        source = {"a": {"b": "1"}}
        merged = deep_merge({}, source)
        merged["a"]["b"] = "changed"
        assert source["a"]["b"] == "1"


class TestFlatten:
    """Плоское представление вложенных объектов."""

    def test_keeps_intermediate_nodes(self) -> None:
        flat = flatten({"a": {"b": {"c": "v"}}, "list": ["x"]})
        assert flat["a.b.c"] == "v"
        assert flat["a.b"] == {"c": "v"}
        assert flat["a"] == {"b": {"c": "v"}}
        assert flat["list"] == ["x"]
        assert "list.0" not in flat

    def test_leaves_rebuild_tree(self) -> None:
        tree = {"home": {"title": "Home", "menu": {"open": "Open"}}, "ok": "OK", "n": 3}
        assert _unflatten_leaves(flatten(tree)) == tree

    def test_literal_dotted_key_wins(self) -> None:
        assert flatten({"a.b": "X", "a": {"b": "Y"}})["a.b"] == "X"
        assert flatten({"a": {"b": "Y"}, "a.b": "X"})["a.b"] == "X"
        assert flatten({"ns": {"a": {"b": "Y"}, "a.b": "X"}})["ns.a.b"] == "X"
        assert flatten({"a": {"b": "Y"}})["a.b"] == "Y"


class TestParseLocaleFile:
    """Разбор одного файла по расширению."""

    def test_json_with_bom(self, write_file) -> None:
        path = write_file("en.json", "\ufeff" + '{"a": "b"}')
        assert parse_locale_file(_file(path)) == {"a": "b"}

    def test_script_module(self, write_file) -> None:
        path = write_file("en.ts", "// c\nexport default {\n  a: 'b', // tail\n  url: 'https://x.io',\n};\n")
        assert parse_locale_file(_file(path)) == {"a": "b", "url": "https://x.io"}

    def test_invalid_json(self, write_file) -> None:
        path = write_file("en.json", '{"a": ')
        with pytest.raises(LocaleFileError) as exc_info:
            parse_locale_file(_file(path))
        assert exc_info.value.path == path

    def test_json_root_must_be_object(self, write_file) -> None:
        path = write_file("en.json", '["a"]')
        with pytest.raises(LocaleFileError):
            parse_locale_file(_file(path))

    def test_script_without_export(self, write_file) -> None:
        path = write_file("en.js", "console.log('nothing here')\n")
        with pytest.raises(LocaleFileError):
            parse_locale_file(_file(path))

    def test_export_block(self, write_file) -> None:
        path = write_file("en.js", "// messages\nexport {\n  hello: 'Hello',\n  bye: 'Bye',\n};\n")
        assert parse_locale_file(_file(path)) == {"hello": "Hello", "bye": "Bye"}

    def test_const_before_export_block(self, write_file) -> None:
        path = write_file("en.ts", "const messages = { hello: 'Hi' };\nexport { messages };\n")
        assert parse_locale_file(_file(path)) == {"hello": "Hi"}


class TestLoadLocaleData:
    """Параллельная загрузка и слияние."""

    @pytest.mark.asyncio
    async def test_project_loaded(self, project: Path) -> None:
        files = locate([project / "src" / "locales"], [".json", ".ts"])
        data = await load_locale_data(files)

        assert sorted(data.locales) == ["en", "zh-cn"]
        assert data.tree["en"]["common"]["home"]["title"] == "Home"
        assert data.flat["zh-cn"]["user"]["profile.title"] == "资料"
        assert data.flat["zh-cn"]["user"]["name"] == "用户"
        assert data.report.files_total == 3
        assert data.report.succeeded == 3
        assert data.report.failed == 0
        assert set(data.files["zh-cn"]) == {"common", "user"}

    @pytest.mark.asyncio
    async def test_files_merged_in_order(self, write_file) -> None:
        first = write_file("a/en.json", {"a": "1", "b": {"x": "1"}})
        second = write_file("b/en.json", {"a": "2", "b": {"y": "2"}})

        data = await load_locale_data([_file(first), _file(second)])

        assert data.tree["en"]["common"] == {"a": "2", "b": {"x": "1", "y": "2"}}
        assert data.flat["en"]["common"]["b.x"] == "1"

    @pytest.mark.asyncio
    async def test_broken_file_skipped(self, write_file) -> None:
        good = write_file("a/en.json", {"ok": "yes"})
        broken = write_file("b/en.json", "{ not json")
        other = write_file("c/en.json", {"more": "data"})

        data = await load_locale_data([_file(good), _file(broken), _file(other)])

        assert data.tree["en"]["common"] == {"ok": "yes", "more": "data"}
        assert data.report.failed == 1
        assert data.report.succeeded == 2
        assert data.report.errors[0]["path"] == str(broken)
        # Индекс файлов включает и неразобранный файл: в него всё ещё можно писать
        assert len(data.files["en"]["common"]) == 3

    @pytest.mark.asyncio
    async def test_empty(self) -> None:
        data = await load_locale_data([])
        assert data.tree == {}
        assert data.key_count() == 0

    @pytest.mark.asyncio
    async def test_key_count_leaves_only(self, write_file) -> None:
        en = write_file("a/en.json", {"home": {"title": "Home", "sub": "Welcome"}})
        de = write_file("b/de.json", {"home": {"title": "Start"}, "ok": "OK"})

        data = await load_locale_data([_file(en), _file(de, locale="de")])

        assert data.key_count() == 3
