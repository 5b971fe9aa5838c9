"""Тесты Writer: выбор файла и запись значений с сохранением формата."""

import json
from pathlib import Path

import pytest

from locale_lens.loader import load_locale_data, parse_locale_file
from locale_lens.locator import LocaleFile, build_file_index, locate
from locale_lens.resolver import resolve
from locale_lens.writer import select_target, set_nested_value, update_json, update_script, write_translation


def _index(root: Path):
    return build_file_index(locate([root], [".json", ".js", ".ts"]))


class TestSetNestedValue:
    """Установка значения по пути."""

    def test_creates_intermediate_objects(self) -> None:
        obj = {"a": "scalar"}
        set_nested_value(obj, ["a", "b", "c"], "v")
        set_nested_value(obj, ["x"], "y")
        assert obj == {"a": {"b": {"c": "v"}}, "x": "y"}


class TestSelectTarget:
    """Выбор файла и пути внутри него."""

    def test_namespace_segment_stripped(self, tmp_path: Path) -> None:
        home = LocaleFile(path=tmp_path / "en" / "home.json", locale="en", namespace="home")
        common = LocaleFile(path=tmp_path / "en.json", locale="en", namespace="common")
        namespaces = {"common": [common], "home": [home]}

        assert select_target("home.title", namespaces) == (home, ["title"])
        assert select_target("nav.back", namespaces) == (common, ["nav", "back"])

    def test_falls_back_to_first_namespace(self, tmp_path: Path) -> None:
        user = LocaleFile(path=tmp_path / "en" / "user.json", locale="en", namespace="user")
        assert select_target("nav.back", {"user": [user]}) == (user, ["nav", "back"])

    def test_no_files(self) -> None:
        assert select_target("a.b", {}) is None


class TestUpdateText:
    """Изменение текста файлов."""

    def test_update_json_keeps_trailing_newline(self) -> None:
        text = '{\n  "a": "1"\n}\n'
        result = update_json(text, ["b", "c"], "2")
        assert result.endswith("}\n")
        assert json.loads(result) == {"a": "1", "b": {"c": "2"}}

    def test_update_script_preserves_surroundings(self) -> None:
        text = (
            "// Generated messages\n"
            "import extra from './extra'\n"
            "export default {\n"
            "  a: 'x', // keep value\n"
            "};\n"
        )
        result = update_script(text, ["b", "c"], "新")

        assert result.startswith("// Generated messages\nimport extra from './extra'\nexport default {")
        assert result.endswith("};\n")
        literal = result[result.index("{"):result.rindex("}") + 1]
        assert json.loads(literal) == {"a": "x", "b": {"c": "新"}}


class TestWriteTranslation:
    """Запись значений по локалям."""

    def test_json_round_trip(self, tmp_path: Path, write_file) -> None:
        path = write_file("locales/es.json", {"home": {"title": "Inicio"}})
        root = tmp_path / "locales"

        results = write_translation("home.title", {"es": "Hola"}, _index(root))

        assert results["es"].ok
        assert results["es"].path == path
        assert json.loads(path.read_text(encoding="utf-8")) == {"home": {"title": "Hola"}}

    @pytest.mark.asyncio
    async def test_written_value_resolves(self, tmp_path: Path, write_file) -> None:
        write_file("locales/es.json", {"home": {"title": "Inicio"}})
        root = tmp_path / "locales"
        write_translation("home.title", {"es": "Hola"}, _index(root))

        data = await load_locale_data(locate([root], [".json"]))
        assert resolve("home.title", data) == {"es": "Hola"}

    def test_namespace_file(self, tmp_path: Path, write_file) -> None:
        path = write_file("locales/en/home.json", {"title": "Home"})
        results = write_translation("home.subtitle", {"en": "Welcome"}, _index(tmp_path / "locales"))

        assert results["en"].ok
        assert json.loads(path.read_text(encoding="utf-8")) == {"title": "Home", "subtitle": "Welcome"}

    def test_failure_isolated_per_locale(self, tmp_path: Path, write_file) -> None:
        es = write_file("locales/es.js", "module.exports = {\n  home: { title: 'Inicio' },\n};\n")
        fr = write_file("locales/fr.ts", "export default {\n  home: { title: 'Accueil' },\n};\n")
        es_before = es.read_text(encoding="utf-8")

        results = write_translation(
            "home.title", {"es": "Hola", "fr": "Bonjour"}, _index(tmp_path / "locales"),
        )

        assert not results["es"].ok
        assert "export default" in results["es"].error
        assert es.read_text(encoding="utf-8") == es_before
        assert results["fr"].ok
        fr_file = LocaleFile(path=fr, locale="fr", namespace="common")
        assert parse_locale_file(fr_file) == {"home": {"title": "Bonjour"}}

    def test_missing_locale_and_empty_values(self, tmp_path: Path, write_file) -> None:
        write_file("locales/en.json", {"a": "1"})
        results = write_translation(
            "a", {"en": "", "de": "Eins", "fr": None}, _index(tmp_path / "locales"),
        )

        assert list(results) == ["de"]
        assert results["de"].skipped
        assert not results["de"].ok

    def test_locale_case_insensitive(self, tmp_path: Path, write_file) -> None:
        path = write_file("locales/zh-CN.json", {"a": "1"})
        results = write_translation("a", {"zh-CN": "一"}, _index(tmp_path / "locales"))

        assert results["zh-CN"].ok
        assert json.loads(path.read_text(encoding="utf-8")) == {"a": "一"}

    def test_key_equal_to_namespace_rejected(self, tmp_path: Path, write_file) -> None:
        write_file("locales/en/home.json", {"title": "Home"})
        results = write_translation("home", {"en": "x"}, _index(tmp_path / "locales"))
        assert not results["en"].ok
        assert not results["en"].skipped
