"""
Built-in converters.

Each factory returns a ``Converter`` for one collection-shaped field.
Elements are matched against the translation block by exact,
case-sensitive equality of their identifying key; unmatched elements are
returned unchanged and the collection order is always preserved. Matched
elements are stamped with ``translated: true`` so a second pass leaves them
alone.
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import Any, Callable

from ..mapping import CompendiumMapping, is_converter_rule
from ..models import DocumentType
from ..utils import get_property, merge_object, original_name
from .registry import ConversionContext, Converter, ConverterRegistry

logger = logging.getLogger(__name__)


def _original_key(field: str) -> str:
    return f"original{field[:1].upper()}{field[1:]}"


def _original_value(element: dict, field: str) -> Any:
    """Value the identifying ``field`` had before translation."""
    if field == "name":
        return original_name(element)
    return element.get(_original_key(field)) or element.get(field)


def _stamp(element: dict, patch: dict, key_field: str = "name") -> dict:
    stamped = {**patch, "translated": True}
    if key_field in patch and element.get(key_field):
        stamped.setdefault(_original_key(key_field), _original_value(element, key_field))
    return merge_object(element, stamped)


def _is_pending(element: Any) -> bool:
    return isinstance(element, dict) and not element.get("translated")


def _present(values: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in values.items() if value is not None}


def _keyed_elements(
    collection: Any,
    translations: Any,
    translate_one: Callable[[dict, Any], dict | None],
    key_field: str = "name",
) -> list | None:
    """Apply ``translate_one`` to every element whose key has a translation."""
    if not isinstance(collection, list) or not isinstance(translations, dict):
        return None
    result = []
    for element in collection:
        if not _is_pending(element):
            result.append(element)
            continue
        key = element.get(key_field)
        translation = translations.get(key) if isinstance(key, str) else None
        if not translation:
            result.append(element)
            continue
        patch = translate_one(element, translation)
        result.append(_stamp(element, patch, key_field) if patch else element)
    return result


# ---------------------------------------------------------------------------
# Simple fields and flat collections
# ---------------------------------------------------------------------------


def mapped_field(field: str) -> Converter:
    """Reuse the translation of another field of the same entry.

    The prototype token name follows the translated document name unless
    the entry translates it explicitly.
    """

    def translate(value: Any, translation: Any, context: ConversionContext) -> Any:
        if value is None:
            return None
        return translation or context.translations.get(field) or None

    return Converter(translate=translate)


def field_collection(field: str) -> Converter:
    """Translate ``element[field]`` through a ``{original: translated}`` map."""

    def translate(collection: Any, translations: Any, context: ConversionContext) -> list | None:
        return _keyed_elements(
            collection,
            translations,
            lambda element, translation: {field: translation} if isinstance(translation, str) else None,
            key_field=field,
        )

    def extract(collection: Any, context: ConversionContext) -> dict[str, str]:
        if not isinstance(collection, list):
            return {}
        return {
            _original_value(element, field): element[field]
            for element in collection
            if isinstance(element, dict) and element.get(field)
        }

    return Converter(translate=translate, extract=extract)


# ---------------------------------------------------------------------------
# Roll tables
# ---------------------------------------------------------------------------


def _range_key(result: dict) -> str | None:
    bounds = result.get("range")
    if isinstance(bounds, list) and len(bounds) == 2:
        return f"{bounds[0]}-{bounds[1]}"
    return None


def _result_text_field(result: dict) -> str:
    # Newer table results carry their text in "description".
    if "text" not in result and "description" in result:
        return "description"
    return "text"


def _translate_results(results: Any, translations: Any, context: ConversionContext) -> list | None:
    if not isinstance(results, list):
        return None
    if not isinstance(translations, dict):
        translations = {}
    translated = []
    for result in results:
        if not _is_pending(result):
            translated.append(result)
            continue
        text_field = _result_text_field(result)
        text = result.get(text_field)
        translation = None
        key = _range_key(result)
        if key is not None:
            translation = translations.get(key)
        if translation is None and isinstance(text, str):
            translation = translations.get(text)
        if translation is None and result.get("documentCollection"):
            store = context.packs.get(result["documentCollection"])
            if store is not None:
                linked_name = result.get("text") or result.get("name")
                translation = store.resolve_field("name", {"name": linked_name})
                if translation == linked_name:
                    translation = None
        if isinstance(translation, str):
            translated.append(_stamp(result, {text_field: translation}, text_field))
        else:
            translated.append(result)
    return translated


def _extract_results(results: Any, context: ConversionContext) -> dict[str, str]:
    if not isinstance(results, list):
        return {}
    extracted: dict[str, str] = {}
    for result in results:
        if not isinstance(result, dict):
            continue
        text_field = _result_text_field(result)
        text = result.get(text_field)
        if not text:
            continue
        extracted[_range_key(result) or _original_value(result, text_field)] = text
    return extracted


def table_results() -> Converter:
    """Translate roll-table rows, keyed by ``"<low>-<high>"`` range.

    Rows without a range entry are matched by their own text. Rows that
    link a document from another pack take that pack's translated name.
    Ranges, weights and every other field are never touched.
    """
    return Converter(translate=_translate_results, extract=_extract_results, dynamic=True)


def table_results_collection() -> Converter:
    """Translate the roll tables embedded in an adventure, keyed by name."""

    def translate_table(table: dict, translation: Any, context: ConversionContext) -> dict | None:
        if not isinstance(translation, dict):
            return None
        patch = _present({
            "name": translation.get("name"),
            "description": translation.get("description"),
        })
        if "results" in translation:
            results = _translate_results(table.get("results"), translation["results"], context)
            if results is not None:
                patch["results"] = results
        return patch

    def translate(tables: Any, translations: Any, context: ConversionContext) -> list | None:
        return _keyed_elements(
            tables,
            translations,
            lambda table, translation: translate_table(table, translation, context),
        )

    def extract(tables: Any, context: ConversionContext) -> dict[str, dict]:
        if not isinstance(tables, list):
            return {}
        extracted = {}
        for table in tables:
            if isinstance(table, dict) and table.get("name"):
                extracted[original_name(table)] = _present({
                    "name": table.get("name"),
                    "description": table.get("description") or None,
                    "results": _extract_results(table.get("results"), context) or None,
                })
        return extracted

    return Converter(translate=translate, extract=extract)


# ---------------------------------------------------------------------------
# Journal pages, playlist sounds, deck cards
# ---------------------------------------------------------------------------


def _page_keys(pages: list) -> list[str]:
    """Page name, or position when the name is missing or shared."""
    names = [original_name(page) if isinstance(page, dict) else None for page in pages]
    counts = Counter(name for name in names if name)
    return [
        name if name and counts[name] == 1 else str(position)
        for position, name in enumerate(names)
    ]


def pages() -> Converter:
    """Translate journal pages: name, text content, image caption and src."""

    def translate(collection: Any, translations: Any, context: ConversionContext) -> list | None:
        if not isinstance(collection, list) or not isinstance(translations, dict):
            return None
        result = []
        for page, key in zip(collection, _page_keys(collection)):
            translation = translations.get(key)
            if not _is_pending(page) or not isinstance(translation, dict):
                result.append(page)
                continue
            patch = _present({"name": translation.get("name"), "src": translation.get("src")})
            if translation.get("text") is not None:
                patch["text"] = {"content": translation["text"]}
            if translation.get("caption") is not None:
                patch["image"] = {"caption": translation["caption"]}
            result.append(_stamp(page, patch))
        return result

    def extract(collection: Any, context: ConversionContext) -> dict[str, dict]:
        if not isinstance(collection, list):
            return {}
        return {
            key: _present({
                "name": page.get("name"),
                "text": get_property(page, "text.content") or None,
                "caption": get_property(page, "image.caption") or None,
                "src": page.get("src") or None,
            })
            for page, key in zip(collection, _page_keys(collection))
            if isinstance(page, dict)
        }

    return Converter(translate=translate, extract=extract)


def playlist_sounds() -> Converter:
    """Translate playlist sounds keyed by name."""

    def translate(sounds: Any, translations: Any, context: ConversionContext) -> list | None:
        return _keyed_elements(
            sounds,
            translations,
            lambda sound, translation: _present({
                "name": translation.get("name"),
                "description": translation.get("description"),
            }) if isinstance(translation, dict) else None,
        )

    def extract(sounds: Any, context: ConversionContext) -> dict[str, dict]:
        if not isinstance(sounds, list):
            return {}
        return {
            original_name(sound): _present({
                "name": sound["name"],
                "description": sound.get("description") or None,
            })
            for sound in sounds
            if isinstance(sound, dict) and sound.get("name")
        }

    return Converter(translate=translate, extract=extract)


def _translate_card(card: dict, translation: Any) -> dict | None:
    if not isinstance(translation, dict):
        return None
    patch = _present({
        "name": translation.get("name"),
        "description": translation.get("description"),
        "suit": translation.get("suit"),
    })
    face_translations = translation.get("faces")
    if isinstance(face_translations, list):
        faces = list(card.get("faces") or [])
        for position, face in enumerate(face_translations):
            if not isinstance(face, dict):
                continue
            face_patch = _present({key: face.get(key) for key in ("name", "text", "img")})
            if position < len(faces) and isinstance(faces[position], dict):
                faces[position] = merge_object(faces[position], face_patch)
            elif position >= len(faces):
                faces.append(face_patch)
        patch["faces"] = faces
    back = translation.get("back")
    if isinstance(back, dict):
        patch["back"] = _present({"name": back.get("name"), "text": back.get("text")})
    return patch


def _extract_card(card: dict) -> dict:
    faces = [
        _present({"name": face.get("name") or None, "text": face.get("text") or None})
        for face in card.get("faces") or []
        if isinstance(face, dict)
    ]
    back = card.get("back") if isinstance(card.get("back"), dict) else {}
    return _present({
        "name": card.get("name"),
        "description": card.get("description") or None,
        "suit": card.get("suit") or None,
        "faces": faces if any(faces) else None,
        "back": _present({"name": back.get("name") or None, "text": back.get("text") or None}) or None,
    })


def deck_cards() -> Converter:
    """Translate the cards of a deck: name, description, suit, faces and back."""

    def translate(cards: Any, translations: Any, context: ConversionContext) -> list | None:
        return _keyed_elements(cards, translations, _translate_card)

    def extract(cards: Any, context: ConversionContext) -> dict[str, dict]:
        if not isinstance(cards, list):
            return {}
        return {
            original_name(card): _extract_card(card)
            for card in cards
            if isinstance(card, dict) and card.get("name")
        }

    return Converter(translate=translate, extract=extract)


# ---------------------------------------------------------------------------
# Embedded documents of another type
# ---------------------------------------------------------------------------


def _find_embedded_translation(translations: Any, element: dict) -> Any:
    keys = {element.get("_id"), element.get("name")} - {None}
    if isinstance(translations, list):
        for translation in reversed(translations):
            if isinstance(translation, dict) and translation.get("id") in keys:
                return translation
        return None
    if isinstance(translations, dict):
        for key in (element.get("_id"), element.get("name")):
            if isinstance(key, str) and key in translations:
                return translations[key]
    return None


def _translate_embedded(
    elements: Any,
    translations: Any,
    context: ConversionContext,
    document_type: DocumentType,
    mapping: dict | None,
) -> list | None:
    if not isinstance(elements, list):
        return None
    sub_mapping = CompendiumMapping(document_type, mapping, context.compendium)
    result = []
    for element in elements:
        if not _is_pending(element):
            result.append(element)
            continue
        translation = _find_embedded_translation(translations, element)
        if isinstance(translation, dict):
            patch = sub_mapping.map(element, translation)
            patch["originalName"] = element.get("name")
            result.append(_stamp(element, patch))
            continue
        store = next(
            (
                store for store in context.packs.values()
                if store.translated
                and store.document_type == document_type
                and store.has_translation(element)
            ),
            None,
        )
        result.append(store.translate(element) if store is not None else element)
    return result


def _extract_embedded(
    elements: Any,
    context: ConversionContext,
    document_type: DocumentType,
    mapping: dict | None,
) -> dict[str, dict]:
    if not isinstance(elements, list):
        return {}
    sub_mapping = CompendiumMapping(document_type, mapping, context.compendium)
    return {
        original_name(element): sub_mapping.extract(element)
        for element in elements
        if isinstance(element, dict) and original_name(element)
    }


def from_pack(document_type: DocumentType = DocumentType.ITEM, mapping: dict | None = None) -> Converter:
    """Translate embedded documents (e.g. the items of an actor).

    Elements are matched by ``_id`` or name in the translation block and
    mapped with ``document_type``'s schema. Elements without a translation
    are looked up in every other translated pack of the same type.
    """

    def translate(elements: Any, translations: Any, context: ConversionContext) -> list | None:
        return _translate_embedded(elements, translations, context, document_type, mapping)

    def extract(elements: Any, context: ConversionContext) -> dict[str, dict]:
        return _extract_embedded(elements, context, document_type, mapping)

    return Converter(translate=translate, extract=extract, dynamic=True)


def from_default_mapping(document_type: DocumentType, mapping_key: str) -> Converter:
    """Translate the embedded documents of an adventure.

    Like ``from_pack``, but the pack payload may refine the sub-document
    schema with an object stored under ``mapping_key`` in its mapping.
    """

    def custom_mapping(context: ConversionContext) -> dict | None:
        rule = context.compendium.payload.mapping.get(mapping_key)
        if isinstance(rule, dict) and not is_converter_rule(rule):
            return rule
        return None

    def translate(elements: Any, translations: Any, context: ConversionContext) -> list | None:
        return _translate_embedded(elements, translations, context, document_type, custom_mapping(context))

    def extract(elements: Any, context: ConversionContext) -> dict[str, dict]:
        return _extract_embedded(elements, context, document_type, custom_mapping(context))

    return Converter(translate=translate, extract=extract, dynamic=True)


def default_converters() -> dict[str, Converter]:
    """The converters every registry starts with."""
    return {
        "fromPack": from_pack(),
        "name": mapped_field("name"),
        "nameCollection": field_collection("name"),
        "textCollection": field_collection("text"),
        "tableResults": table_results(),
        "tableResultsCollection": table_results_collection(),
        "pages": pages(),
        "playlistSounds": playlist_sounds(),
        "deckCards": deck_cards(),
        "adventureItems": from_default_mapping(DocumentType.ITEM, "items"),
        "adventureActors": from_default_mapping(DocumentType.ACTOR, "actors"),
        "adventureCards": from_default_mapping(DocumentType.CARDS, "cards"),
        "adventureJournals": from_default_mapping(DocumentType.JOURNAL_ENTRY, "journals"),
        "adventurePlaylists": from_default_mapping(DocumentType.PLAYLIST, "playlists"),
        "adventureMacros": from_default_mapping(DocumentType.MACRO, "macros"),
        "adventureScenes": from_default_mapping(DocumentType.SCENE, "scenes"),
    }


def default_registry() -> ConverterRegistry:
    """A fresh registry holding the built-in converters."""
    registry = ConverterRegistry(default_converters())
    logger.debug(f"Registered {len(registry)} default converters")
    return registry
