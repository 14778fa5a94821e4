"""
TranslatedCompendium - the translation store of one compendium pack.

A store owns the merged translation payload of one collection and the
compiled mapping of its document type, and runs translate/extract for
single documents and single fields.
"""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Any, Mapping

from .converters.registry import ConverterRegistry
from .mapping import CompendiumMapping, MappingRegistry
from .models import DocumentType, PackMetadata, TranslationPayload
from .utils import merge_object, original_name

logger = logging.getLogger(__name__)


class TranslatedCompendium:
    """Translation store for one collection.

    Args:
        metadata: Description of the pack the store serves.
        payload: Merged translation files for the pack, or None when the
            pack has no translation (dynamic mappings still apply).
        converters: Registry used to resolve converter rules.
        mappings: Default mapping registry.
        packs: Read-only view of every store built for the session, used by
            converters that look documents up in other packs.
    """

    def __init__(
        self,
        metadata: PackMetadata,
        payload: TranslationPayload | None,
        *,
        converters: ConverterRegistry,
        mappings: MappingRegistry,
        packs: Mapping[str, TranslatedCompendium] | None = None,
    ):
        self.metadata = metadata
        self.document_type = DocumentType(metadata.type)
        self.translated = payload is not None
        self.payload = payload or TranslationPayload()
        self.converters = converters
        self.mappings = mappings
        self.packs: Mapping[str, TranslatedCompendium] = (
            packs if packs is not None else MappingProxyType({})
        )
        self.translations: Mapping[str, Any] = MappingProxyType(self.payload.entries)
        self.folders: Mapping[str, str] = MappingProxyType(self.payload.folders)
        self.mapping = CompendiumMapping(self.document_type, self.payload.mapping, self)

    @property
    def collection(self) -> str:
        return self.metadata.collection

    @property
    def label(self) -> str | None:
        return self.payload.label or self.metadata.label

    def is_dynamic(self) -> bool:
        return self.mapping.is_dynamic()

    # =========================================================================
    # Entry lookup
    # =========================================================================

    def _own_entry(self, data: dict) -> Any:
        for key in (data.get("_id"), original_name(data)):
            if isinstance(key, str) and key in self.translations:
                return self.translations[key]
        return None

    def _find_entry(self, data: dict) -> Any:
        entry = self._own_entry(data)
        if entry is not None:
            return entry
        for reference in self.payload.reference:
            store = self.packs.get(reference)
            if store is not None and store is not self:
                entry = store._own_entry(data)
                if entry is not None:
                    return entry
        return None

    def has_translation(self, data: dict) -> bool:
        """True if an entry exists for the document's id or original name."""
        return self._find_entry(data) is not None

    def translations_for(self, data: dict) -> dict:
        entry = self._find_entry(data)
        return entry if isinstance(entry, dict) else {}

    # =========================================================================
    # Translate
    # =========================================================================

    def translate(self, data: dict | None, translations_only: bool = False) -> dict | None:
        """Return a translated copy of ``data``.

        Documents already stamped as translated are returned as is, and so
        are documents without an entry when the mapping is static.

        Args:
            data: Original document.
            translations_only: Only write fields the entry provides a value
                for (index translation).

        Returns:
            The translated document, stamped with ``translated``,
            ``hasTranslation`` and ``originalName``.

        Raises:
            UnknownConverterError: If a mapping rule names an unregistered
                converter.
        """
        if data is None or data.get("translated"):
            return data
        entry = self._find_entry(data)
        if entry is None and not self.is_dynamic():
            return data

        translations = entry if isinstance(entry, dict) else {}
        translated = self.mapping.map(data, translations, translations_only)
        stamp = {
            "translated": True,
            "hasTranslation": entry is not None,
            "originalName": data.get("name"),
        }
        merge_object(translated, {**stamp, "flags": {"babele": dict(stamp)}}, inplace=True)
        return merge_object(data, translated)

    def translate_field(self, field: str, data: dict | None) -> Any:
        """Translated value of a single field of ``data``."""
        if data is None:
            return None
        if data.get("translated"):
            return self.extract_field(field, data)
        return self.mapping.translate_field(field, data, self.translations_for(data))

    def resolve_field(self, field: str, data: dict) -> Any:
        """Field value for display: translated when possible, else current."""
        if self.has_translation(data) or self.is_dynamic():
            return self.translate_field(field, data)
        return self.extract_field(field, data)

    def translate_folder(self, name: str) -> str:
        return self.folders.get(name, name)

    # =========================================================================
    # Extract
    # =========================================================================

    def extract(self, data: dict) -> dict[str, Any]:
        """Translation template holding the current values of ``data``."""
        return self.mapping.extract(data)

    def extract_field(self, field: str, data: dict) -> Any:
        return self.mapping.extract_field(field, data)

    def __repr__(self) -> str:
        return (
            f"TranslatedCompendium(collection={self.collection!r}, "
            f"type={self.document_type.value}, entries={len(self.translations)})"
        )
