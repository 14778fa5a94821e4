"""
Declarative field mappings for each document type.

A mapping associates a translation field name with a rule:

- a dotted path string: the translated text replaces the value at that path;
- ``{"path": ..., "converter": ...}``: the named converter merges the
  translation into the (usually collection-shaped) value at that path.

``DEFAULT_MAPPINGS`` holds the built-in schema per document type. A
``MappingRegistry`` owns a mutable copy of it that global ``mapping.json``
overrides are merged into, and ``CompendiumMapping`` compiles the schema of
one pack (defaults plus the pack's own overrides) into ``FieldMapping``
objects.
"""

from __future__ import annotations

import copy
import logging
from typing import TYPE_CHECKING, Any, Mapping

from .converters.registry import ConversionContext, Converter
from .models import DocumentType
from .utils import get_property, merge_object, set_property

if TYPE_CHECKING:
    from .compendium import TranslatedCompendium

logger = logging.getLogger(__name__)


DEFAULT_MAPPINGS: dict[str, dict[str, Any]] = {
    "Adventure": {
        "name": "name",
        "description": "description",
        "caption": "caption",
        "folders": {"path": "folders", "converter": "nameCollection"},
        "journals": {"path": "journal", "converter": "adventureJournals"},
        "scenes": {"path": "scenes", "converter": "adventureScenes"},
        "macros": {"path": "macros", "converter": "adventureMacros"},
        "playlists": {"path": "playlists", "converter": "adventurePlaylists"},
        "tables": {"path": "tables", "converter": "tableResultsCollection"},
        "items": {"path": "items", "converter": "adventureItems"},
        "actors": {"path": "actors", "converter": "adventureActors"},
        "cards": {"path": "cards", "converter": "adventureCards"},
    },
    "Actor": {
        "name": "name",
        "description": "system.details.biography.value",
        "items": {"path": "items", "converter": "fromPack"},
        "tokenName": {"path": "prototypeToken.name", "converter": "name"},
    },
    "Cards": {
        "name": "name",
        "description": "description",
        "cards": {"path": "cards", "converter": "deckCards"},
    },
    "Folder": {},
    "Item": {
        "name": "name",
        "description": "system.description.value",
    },
    "JournalEntry": {
        "name": "name",
        "description": "content",
        "pages": {"path": "pages", "converter": "pages"},
    },
    "Macro": {
        "name": "name",
        "command": "command",
    },
    "Playlist": {
        "name": "name",
        "description": "description",
        "sounds": {"path": "sounds", "converter": "playlistSounds"},
    },
    "RollTable": {
        "name": "name",
        "description": "description",
        "results": {"path": "results", "converter": "tableResults"},
    },
    "Scene": {
        "name": "name",
        "drawings": {"path": "drawings", "converter": "textCollection"},
        "notes": {"path": "notes", "converter": "textCollection"},
    },
}


def is_converter_rule(rule: Any) -> bool:
    """True for a structured ``{"path", "converter"}`` rule."""
    return isinstance(rule, dict) and "converter" in rule


class MappingRegistry:
    """Default mapping per document type, extendable at startup.

    Overrides registered here apply to every store constructed afterwards,
    so they must be registered before the stores are built.
    """

    def __init__(self, mappings: Mapping[str, dict[str, Any]] | None = None):
        self._mappings: dict[str, dict[str, Any]] = copy.deepcopy(
            dict(mappings) if mappings is not None else DEFAULT_MAPPINGS
        )

    def register(self, mapping: Mapping[str, Any]) -> None:
        """Merge a ``mapping.json``-shaped document into the defaults.

        Args:
            mapping: ``{document_type: {field: rule}}``. Later registrations
                win for any field key they define.
        """
        for type_name, schema in mapping.items():
            document_type = DocumentType.parse(type_name)
            if document_type is None:
                logger.warning(f"Ignoring mapping for unsupported document type '{type_name}'")
                continue
            if not isinstance(schema, dict):
                logger.warning(f"Ignoring malformed mapping for '{type_name}': expected an object")
                continue
            current = self._mappings.get(document_type.value, {})
            self._mappings[document_type.value] = merge_object(current, schema)

    def for_type(self, document_type: DocumentType | str) -> dict[str, Any]:
        """Return a copy of the schema registered for ``document_type``."""
        key = document_type.value if isinstance(document_type, DocumentType) else document_type
        return copy.deepcopy(self._mappings.get(key, {}))

    def copy(self) -> MappingRegistry:
        return MappingRegistry(self._mappings)

    def __contains__(self, document_type: object) -> bool:
        key = document_type.value if isinstance(document_type, DocumentType) else document_type
        return key in self._mappings

    def __repr__(self) -> str:
        return f"MappingRegistry(types=[{', '.join(self._mappings)}])"


class FieldMapping:
    """One compiled mapping rule."""

    def __init__(self, field: str, rule: str | dict[str, Any], compendium: TranslatedCompendium):
        self.field = field
        self.compendium = compendium
        if isinstance(rule, dict):
            self.path: str = rule.get("path") or field
            self.converter_name: str | None = rule.get("converter")
        else:
            self.path = rule
            self.converter_name = None

    @property
    def converter(self) -> Converter | None:
        """The rule's converter, resolved now.

        Raises:
            UnknownConverterError: If the named converter is not registered.
        """
        if self.converter_name is None:
            return None
        return self.compendium.converters.resolve(self.converter_name)

    def is_dynamic(self) -> bool:
        if self.converter_name is None:
            return False
        converter = self.compendium.converters.get(self.converter_name)
        # Unknown converters count as dynamic so that the configuration
        # error surfaces on translate instead of being skipped.
        return converter is None or converter.dynamic

    def _context(self, data: dict, translations: dict) -> ConversionContext:
        return ConversionContext(
            document=data,
            translations=translations,
            compendium=self.compendium,
            field=self.field,
        )

    def translate(self, data: dict, translations: dict, translations_only: bool = False) -> Any:
        """Compute the translated value for this field.

        Returns:
            The new value for ``self.path``, or None to leave it untouched.
        """
        value = translations.get(self.field) if translations else None
        converter = self.converter
        if converter is None:
            return value
        if translations_only and value is None:
            return None
        original = get_property(data, self.path)
        return converter.translate(original, value, self._context(data, translations))

    def map(self, data: dict, translations: dict, translations_only: bool = False) -> dict | None:
        """Return the translated value as a nested patch, or None."""
        translated = self.translate(data, translations, translations_only)
        if translated is None:
            return None
        patch: dict = {}
        set_property(patch, self.path, translated)
        return patch

    def extract(self, data: dict) -> Any:
        """Read the current value in translation-file shape."""
        value = get_property(data, self.path)
        converter = self.converter
        if converter is None or value is None:
            return value
        return converter.extract(value, self._context(data, {}))

    def __repr__(self) -> str:
        if self.converter_name:
            return f"FieldMapping({self.field!r} -> {self.path!r} via {self.converter_name!r})"
        return f"FieldMapping({self.field!r} -> {self.path!r})"


class CompendiumMapping:
    """The compiled schema of one store.

    Combines the registered default schema of ``document_type`` with the
    overrides supplied by the pack's translation payload. A rule set to
    None (or an empty string) by an override disables that field.
    """

    def __init__(
        self,
        document_type: DocumentType | str,
        mapping: Mapping[str, Any] | None,
        compendium: TranslatedCompendium,
    ):
        self.document_type = document_type
        self.mapping = merge_object(compendium.mappings.for_type(document_type), dict(mapping or {}))
        self.fields: list[FieldMapping] = [
            FieldMapping(field, rule, compendium)
            for field, rule in self.mapping.items()
            if rule
        ]

    def field(self, name: str) -> FieldMapping | None:
        for field_mapping in self.fields:
            if field_mapping.field == name:
                return field_mapping
        return None

    def is_dynamic(self) -> bool:
        return any(field_mapping.is_dynamic() for field_mapping in self.fields)

    def map(self, data: dict, translations: dict, translations_only: bool = False) -> dict:
        """Build the patch of translated fields for ``data``.

        Args:
            data: Original document.
            translations: The document's translation entry.
            translations_only: Skip converter fields with no entry value.

        Returns:
            A nested dict holding only the translated fields.
        """
        translated: dict = {}
        for field_mapping in self.fields:
            patch = field_mapping.map(data, translations, translations_only)
            if patch is not None:
                merge_object(translated, patch, inplace=True)
        return translated

    def translate_field(self, field: str, data: dict, translations: dict) -> Any:
        """Translated value of one field, falling back to its current value."""
        field_mapping = self.field(field)
        if field_mapping is None:
            return None
        translated = field_mapping.translate(data, translations)
        if translated is None:
            return get_property(data, field_mapping.path)
        return translated

    def extract(self, data: dict) -> dict[str, Any]:
        """Translation template for ``data``, omitting absent fields."""
        extracted: dict[str, Any] = {}
        for field_mapping in self.fields:
            value = field_mapping.extract(data)
            if value is not None:
                extracted[field_mapping.field] = value
        return extracted

    def extract_field(self, field: str, data: dict) -> Any:
        field_mapping = self.field(field)
        if field_mapping is None:
            return None
        return field_mapping.extract(data)
