"""
Tests for the MCP tools exposed by babele.main.
"""

import json

import pytest

# Import main module once -- tools are accessed via m.<tool>.fn()
from babele import main as m
from babele.babel import Babel, BabelState
from babele.models import PackMetadata, TranslationModule
from babele.settings import BabeleSettings

pytestmark = pytest.mark.anyio


@pytest.fixture
async def babel(tmp_path, monkeypatch):
    directory = tmp_path / "modules" / "babele-es" / "es"
    directory.mkdir(parents=True)
    (directory / "world.items.json").write_text(
        json.dumps({"label": "Objetos", "entries": {"Sword": {"name": "Espada"}}}),
        encoding="utf-8",
    )
    settings = BabeleSettings(
        language="es",
        data_root=tmp_path,
        modules=[TranslationModule(module="babele-es", lang="es", dir="es")],
    )
    babel = Babel(
        settings,
        packs=[
            PackMetadata(type="Item", name="items", label="Items"),
            PackMetadata(type="Actor", name="heroes"),
        ],
    )
    await babel.init()
    monkeypatch.setattr(m, "_babel", babel)
    return babel


class TestTranslateDocument:
    async def test_translates(self, babel):
        result = await m.translate_document.fn(
            collection="world.items",
            document=json.dumps({"name": "Sword"}),
        )
        data = json.loads(result)
        assert data["name"] == "Espada"
        assert data["originalName"] == "Sword"

    async def test_invalid_json(self, babel):
        result = await m.translate_document.fn(collection="world.items", document="{oops")
        assert result.startswith("❌ Invalid document JSON")

    async def test_not_an_object(self, babel):
        result = await m.translate_document.fn(collection="world.items", document="[1, 2]")
        assert "expected a JSON object" in result

    async def test_unknown_converter(self, babel):
        babel.register_mapping({"Actor": {"effects": {"path": "effects", "converter": "missing"}}})
        babel.state = BabelState.UNINITIALIZED
        await babel.init()

        result = await m.translate_document.fn(
            collection="world.heroes",
            document=json.dumps({"name": "Aria"}),
        )
        assert result.startswith("❌ Translation failed")
        assert "missing" in result


class TestExtractDocument:
    async def test_extracts(self, babel):
        document = {"name": "Sword", "system": {"description": {"value": "Long"}}}
        result = await m.extract_document.fn(collection="world.items", document=json.dumps(document))
        assert json.loads(result) == {"name": "Sword", "description": "Long"}


class TestTranslateIndex:
    async def test_sorted_listing(self, babel):
        index = [{"_id": "b", "name": "Zweihander"}, {"_id": "a", "name": "Sword"}]
        result = await m.translate_index.fn(collection="world.items", index=json.dumps(index))
        lines = result.splitlines()

        assert lines[0] == "**Index of world.items (2 entries):**"
        assert lines[1] == "- Espada (Sword) `a`"
        assert lines[2] == "- Zweihander `b`"

    async def test_empty_index(self, babel):
        result = await m.translate_index.fn(collection="world.items", index="[]")
        assert result.startswith("❌ No index entries")


class TestListTranslatedPacks:
    async def test_lists_packs(self, babel):
        result = await m.list_translated_packs.fn()
        assert "`world.items` (Item) - Objetos: ✅ translated" in result
        assert "`world.heroes` (Actor): ➖ not translated" in result

    async def test_no_packs(self, tmp_path, monkeypatch):
        empty = Babel(BabeleSettings(language="es", data_root=tmp_path))
        monkeypatch.setattr(m, "_babel", empty)
        result = await m.list_translated_packs.fn()
        assert result.startswith("❌ No packs configured")


class TestExportTranslations:
    async def test_returns_template(self, babel):
        documents = [{"name": "Sword"}, {"name": "Axe"}, "junk"]
        result = await m.export_translations.fn(collection="world.items", documents=json.dumps(documents))
        data = json.loads(result)
        assert data["label"] == "Items"
        assert data["entries"] == {"Sword": {"name": "Sword"}, "Axe": {"name": "Axe"}}

    async def test_writes_file(self, babel, tmp_path):
        output = tmp_path / "export" / "world.items.json"
        result = await m.export_translations.fn(
            collection="world.items",
            documents=json.dumps([{"name": "Sword"}]),
            format="legacy",
            output_path=str(output),
        )
        assert result.startswith("📦 Exported 1 entries")
        assert json.loads(output.read_text(encoding="utf-8"))["entries"] == [{"id": "Sword", "name": "Sword"}]

    async def test_unknown_pack(self, babel):
        result = await m.export_translations.fn(collection="world.nothing", documents="[]")
        assert result.startswith("❌ Pack 'world.nothing'")

    async def test_disabled(self, babel, monkeypatch):
        monkeypatch.setattr(m.settings, "export_enabled", False)
        result = await m.export_translations.fn(collection="world.items", documents="[]")
        assert result == "❌ Export of translations is disabled."
