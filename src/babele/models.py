"""
Data models for compendium translation.

Key classes:
- DocumentType: The document types a compendium pack can hold.
- TranslationPayload: The parsed (and merged) content of translation files
  for one collection.
- PackMetadata: Host-provided description of a compendium pack.
- TranslationModule: A module that contributes a translation directory.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

# Suffix of the special files that translate the folders of system packs
PACK_FOLDER_TRANSLATION_NAME_SUFFIX = "_packs-folders"


class DocumentType(str, Enum):
    """Document types supported for translation."""
    ADVENTURE = "Adventure"
    ACTOR = "Actor"
    CARDS = "Cards"
    FOLDER = "Folder"
    ITEM = "Item"
    JOURNAL_ENTRY = "JournalEntry"
    MACRO = "Macro"
    PLAYLIST = "Playlist"
    ROLL_TABLE = "RollTable"
    SCENE = "Scene"

    @classmethod
    def parse(cls, value: str | DocumentType) -> DocumentType | None:
        """Return the matching DocumentType, or None for unsupported types."""
        try:
            return cls(value)
        except ValueError:
            return None


class ExportFormat(str, Enum):
    """Layout of the ``entries`` block of an exported translation file."""
    DEFAULT = "default"
    LEGACY = "legacy"


class TranslationPayload(BaseModel):
    """Translation content for one collection.

    ``entries`` maps a document's original name to its translated fields.
    The legacy array layout (``[{"id": "Sword", "name": "Espada"}]``) is
    normalized to the keyed layout when the payload is validated.
    """

    model_config = ConfigDict(frozen=True)

    collection: str | None = Field(default=None, description="Collection id the payload targets")
    label: str | None = Field(default=None, description="Translated pack label")
    entries: dict[str, Any] = Field(default_factory=dict, description="Entries keyed by original name")
    mapping: dict[str, Any] = Field(default_factory=dict, description="Mapping overrides for this pack")
    folders: dict[str, str] = Field(default_factory=dict, description="Pack folder name translations")
    reference: list[str] = Field(
        default_factory=list,
        description="Collections whose entries are used when this payload has none",
    )

    @field_validator("entries", mode="before")
    @classmethod
    def _normalize_entries(cls, value: Any) -> Any:
        if value is None:
            return {}
        if isinstance(value, list):
            return {
                str(entry["id"]): entry
                for entry in value
                if isinstance(entry, dict) and entry.get("id") is not None
            }
        return value

    @field_validator("mapping", "folders", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator("reference", mode="before")
    @classmethod
    def _reference_as_list(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        return value

    def merge(self, other: TranslationPayload) -> TranslationPayload:
        """Combine this payload with a later-loaded one.

        The later payload wins on every colliding entry, mapping rule and
        folder key. The label is replaced only by a non-empty later label.

        Args:
            other: Payload loaded after this one.

        Returns:
            A new merged payload.
        """
        return TranslationPayload(
            collection=other.collection or self.collection,
            label=other.label or self.label,
            entries={**self.entries, **other.entries},
            mapping={**self.mapping, **other.mapping},
            folders={**self.folders, **other.folders},
            reference=other.reference or self.reference,
        )

    @classmethod
    def merge_all(cls, payloads: list[TranslationPayload]) -> TranslationPayload | None:
        """Merge payloads in load order, or return None if there are none."""
        merged: TranslationPayload | None = None
        for payload in payloads:
            merged = payload if merged is None else merged.merge(payload)
        return merged


class PackMetadata(BaseModel):
    """Host description of one compendium pack.

    Accepts both the host's camelCase keys (``packageName``) and snake_case.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    type: str = Field(description="Document type held by the pack")
    name: str = Field(description="Pack name within its package")
    package_name: str = Field(default="world", description="Owning package id")
    package_type: str = Field(default="world", description="world, system or module")
    label: str | None = Field(default=None, description="Display label")
    id: str | None = Field(default=None, description="Explicit collection id")
    folders: list[dict[str, Any]] = Field(default_factory=list, description="Folders inside the pack")
    index: list[dict[str, Any]] = Field(default_factory=list, description="Lightweight index entries")

    @property
    def collection(self) -> str:
        """Collection id, e.g. ``dnd5e.items`` or ``world.heroes``."""
        if self.id:
            return self.id
        prefix = "world" if self.package_type == "world" else self.package_name
        return f"{prefix}.{self.name}"

    @property
    def document_type(self) -> DocumentType | None:
        return DocumentType.parse(self.type)

    @classmethod
    def for_pack_folders(cls, file_name: str) -> PackMetadata:
        """Build the metadata of a ``<package>.<name>_packs-folders.json`` file."""
        stem = file_name.rsplit("/", 1)[-1].removesuffix(".json")
        package_name, _, name = stem.partition(".")
        return cls(
            type=DocumentType.FOLDER.value,
            name=name,
            package_name=package_name,
            package_type="system",
        )


class TranslationModule(BaseModel):
    """A module that ships translation files for one language."""

    module: str = Field(description="Module id")
    lang: str = Field(description="Language code of the translations")
    dir: str = Field(description="Translation directory inside the module")

    @property
    def directory(self) -> str:
        return f"modules/{self.module}/{self.dir}"
