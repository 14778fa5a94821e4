"""
Tests for settings and pack metadata loading.
"""

import json
from pathlib import Path

import pytest
import yaml

from babele.exceptions import SettingsError
from babele.models import TranslationModule
from babele.settings import BabeleSettings, load_pack_metadata


class TestBabeleSettings:
    def test_defaults(self):
        settings = BabeleSettings()
        assert settings.language == "en"
        assert settings.can_browse is True
        assert settings.export_enabled is True
        assert settings.modules == []

    def test_from_env(self, monkeypatch, tmp_path):
        monkeypatch.setenv("BABELE_LANGUAGE", "es")
        monkeypatch.setenv("BABELE_DIRECTORY", "translations")
        monkeypatch.setenv("BABELE_CAN_BROWSE", "false")
        monkeypatch.setenv("BABELE_DATA_ROOT", str(tmp_path))
        monkeypatch.setenv("BABELE_SYSTEM_ID", "")

        settings = BabeleSettings.from_env(tmp_path / "missing.env")

        assert settings.language == "es"
        assert settings.directory == "translations"
        assert settings.can_browse is False
        assert settings.data_root == tmp_path
        assert settings.system_id is None

    def test_from_env_invalid(self, monkeypatch, tmp_path):
        monkeypatch.setenv("BABELE_CAN_BROWSE", "perhaps")
        with pytest.raises(SettingsError):
            BabeleSettings.from_env(tmp_path / "missing.env")

    def test_yaml_round_trip(self, tmp_path):
        settings = BabeleSettings(
            language="it",
            modules=[TranslationModule(module="babele-it", lang="it", dir="compendium")],
            translation_files=["modules/babele-it/compendium/world.items.json"],
        )
        path = settings.save_yaml(tmp_path / "config" / "babele.yaml")
        loaded = BabeleSettings.from_yaml(path)

        assert loaded.language == "it"
        assert loaded.modules[0].directory == "modules/babele-it/compendium"
        assert loaded.translation_files == settings.translation_files

    def test_from_yaml_errors(self, tmp_path):
        with pytest.raises(SettingsError):
            BabeleSettings.from_yaml(tmp_path / "missing.yaml")

        not_a_mapping = tmp_path / "list.yaml"
        not_a_mapping.write_text("- a\n- b\n")
        with pytest.raises(SettingsError):
            BabeleSettings.from_yaml(not_a_mapping)

        invalid = tmp_path / "invalid.yaml"
        invalid.write_text("can_browse: perhaps\n")
        with pytest.raises(SettingsError):
            BabeleSettings.from_yaml(invalid)


class TestLoadPackMetadata:
    def test_json_list(self, tmp_path):
        path = tmp_path / "packs.json"
        path.write_text(json.dumps([
            {"type": "Item", "name": "items", "packageName": "dnd5e", "packageType": "system"},
        ]))
        packs = load_pack_metadata(path)
        assert [pack.collection for pack in packs] == ["dnd5e.items"]

    def test_yaml_object(self, tmp_path):
        path = tmp_path / "packs.yaml"
        path.write_text(yaml.safe_dump({"packs": [{"type": "Actor", "name": "heroes"}]}))
        packs = load_pack_metadata(path)
        assert packs[0].collection == "world.heroes"

    def test_errors(self, tmp_path):
        with pytest.raises(SettingsError):
            load_pack_metadata(tmp_path / "missing.json")

        path = tmp_path / "packs.json"
        path.write_text(json.dumps({"packs": [{"name": "no type"}]}))
        with pytest.raises(SettingsError):
            load_pack_metadata(path)

        path.write_text(json.dumps("nope"))
        with pytest.raises(SettingsError):
            load_pack_metadata(Path(path))
