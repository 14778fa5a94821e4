"""
Settings for the translation engine.

Settings are read from environment variables (a ``.env`` file is honoured)
or from a YAML file, and can be written back to YAML so that the lists of
discovered files can be shared with clients that cannot browse the data
directory themselves.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError

from .exceptions import SettingsError
from .models import PackMetadata, TranslationModule

logger = logging.getLogger(__name__)

ENV_PREFIX = "BABELE_"


class BabeleSettings(BaseModel):
    """Runtime configuration.

    Attributes:
        language: Active language code; selects the translation directories.
        directory: User translation root; ``<directory>/<language>`` is browsed.
        system_id: Id of the active game system.
        system_translations_dir: Translation directory shipped by the system.
        data_root: Local data directory that data-relative paths resolve against.
        base_url: Remote data server; when set, files are fetched over HTTP.
        can_browse: Whether directories may be listed. When False the shared
            file lists below are used instead.
        show_original_name: Show the original name next to translated entries.
        export_enabled: Allow exporting translation templates.
        modules: Modules that ship translation directories.
        translation_files: Shared list of discovered translation files.
        mapping_files: Shared list of discovered mapping files.
        packs_file: JSON/YAML file listing the pack metadata of the world.
    """

    language: str = Field(default="en")
    directory: str = Field(default="")
    system_id: str | None = Field(default=None)
    system_translations_dir: str | None = Field(default=None)
    data_root: Path = Field(default=Path("."))
    base_url: str | None = Field(default=None)
    can_browse: bool = Field(default=True)
    show_original_name: bool = Field(default=True)
    export_enabled: bool = Field(default=True)
    modules: list[TranslationModule] = Field(default_factory=list)
    translation_files: list[str] = Field(default_factory=list)
    mapping_files: list[str] = Field(default_factory=list)
    packs_file: Path | None = Field(default=None)

    @classmethod
    def from_env(cls, env_file: Path | str | None = None) -> BabeleSettings:
        """Build settings from ``BABELE_*`` environment variables.

        Args:
            env_file: Optional ``.env`` file; the default lookup is used if omitted.
        """
        if not load_dotenv(env_file):
            logger.debug("No .env file found, using process environment only")

        values: dict[str, Any] = {}
        for name in cls.model_fields:
            if name in ("modules", "translation_files", "mapping_files"):
                continue
            raw = os.getenv(f"{ENV_PREFIX}{name.upper()}")
            if raw is not None and raw != "":
                values[name] = raw
        try:
            return cls.model_validate(values)
        except ValidationError as e:
            raise SettingsError(f"Invalid BABELE_* environment settings: {e}") from e

    @classmethod
    def from_yaml(cls, path: Path | str) -> BabeleSettings:
        """Load settings from a YAML file."""
        path = Path(path)
        try:
            with open(path, encoding="utf-8") as fh:
                data = yaml.safe_load(fh) or {}
        except (OSError, yaml.YAMLError) as e:
            raise SettingsError(f"Failed to read settings from {path}: {e}") from e
        if not isinstance(data, dict):
            raise SettingsError(f"Settings file {path} must contain a mapping")
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise SettingsError(f"Invalid settings in {path}: {e}") from e

    def save_yaml(self, path: Path | str) -> Path:
        """Persist the settings to a YAML file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as fh:
            yaml.safe_dump(
                self.model_dump(mode="json", exclude_none=True),
                fh,
                default_flow_style=False,
                sort_keys=False,
                allow_unicode=True,
            )
        logger.debug(f"Settings saved to {path}")
        return path


def load_pack_metadata(path: Path | str) -> list[PackMetadata]:
    """Load the pack metadata list of a world from a JSON or YAML file.

    Accepts either a bare list or an object with a ``packs`` list.

    Raises:
        SettingsError: If the file cannot be read or validated
    """
    path = Path(path)
    try:
        raw = path.read_text(encoding="utf-8")
        data = json.loads(raw) if path.suffix.lower() == ".json" else yaml.safe_load(raw)
    except (OSError, json.JSONDecodeError, yaml.YAMLError) as e:
        raise SettingsError(f"Failed to read pack metadata from {path}: {e}") from e

    if isinstance(data, dict):
        data = data.get("packs", [])
    if not isinstance(data, list):
        raise SettingsError(f"Pack metadata in {path} must be a list")
    try:
        return [PackMetadata.model_validate(item) for item in data]
    except ValidationError as e:
        raise SettingsError(f"Invalid pack metadata in {path}: {e}") from e
