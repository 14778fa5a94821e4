"""
Babele MCP Server
Exposes compendium translation and translation-template export as MCP tools.
"""

import json
import logging
from pathlib import Path
from typing import Annotated, Literal

from fastmcp import FastMCP
from pydantic import Field

from .babel import Babel
from .exceptions import BabeleError, UnknownConverterError
from .settings import BabeleSettings, load_pack_metadata
from .export import write_translation_file

logger = logging.getLogger("babele")

logging.basicConfig(
    level=logging.INFO,
    )

settings = BabeleSettings.from_env()
logger.debug(f"📂 Data root: {settings.data_root.resolve()} (language: {settings.language})")

mcp = FastMCP(
    name="babele"
)

_babel: Babel | None = None


async def get_babel() -> Babel:
    """Build the Babel instance on first use and make sure it is initialized."""
    global _babel
    if _babel is None:
        packs = load_pack_metadata(settings.packs_file) if settings.packs_file else []
        _babel = Babel(settings, packs=packs)
    await _babel.init()
    return _babel


def _parse_json(raw: str, expected: type, what: str) -> tuple[object | None, str | None]:
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        return None, f"❌ Invalid {what} JSON: {e}"
    if not isinstance(data, expected):
        return None, f"❌ Invalid {what}: expected a JSON {'object' if expected is dict else 'array'}"
    return data, None


# ----------------------------------------------------------------------
# Tools
# ----------------------------------------------------------------------

@mcp.tool
async def translate_document(
    collection: Annotated[str, Field(description="Collection id of the pack, e.g. 'dnd5e.items'")],
    document: Annotated[str, Field(description="The document as a JSON object")],
    translations_only: Annotated[bool, Field(description="Only apply fields that have a translation")] = False,
) -> str:
    """Translate a compendium document with the loaded translation files."""
    babel = await get_babel()
    data, error = _parse_json(document, dict, "document")
    if error:
        return error
    try:
        translated = babel.translate(collection, data, translations_only)
    except UnknownConverterError as e:
        return f"❌ Translation failed: {e}"
    return json.dumps(translated, ensure_ascii=False, indent=2)


@mcp.tool
async def extract_document(
    collection: Annotated[str, Field(description="Collection id of the pack")],
    document: Annotated[str, Field(description="The document as a JSON object")],
) -> str:
    """Extract the translatable fields of a document as a translation entry."""
    babel = await get_babel()
    data, error = _parse_json(document, dict, "document")
    if error:
        return error
    try:
        extracted = babel.extract(collection, data)
    except UnknownConverterError as e:
        return f"❌ Extraction failed: {e}"
    return json.dumps(extracted, ensure_ascii=False, indent=2)


@mcp.tool
async def translate_index(
    collection: Annotated[str, Field(description="Collection id of the pack")],
    index: Annotated[str, Field(description="JSON array of index entries ({_id, name, ...})")],
) -> str:
    """Translate the index of a pack and list it sorted by translated name."""
    babel = await get_babel()
    data, error = _parse_json(index, list, "index")
    if error:
        return error

    entries = [entry for entry in data if isinstance(entry, dict)]
    try:
        babel.translate_index(entries, collection)
    except UnknownConverterError as e:
        return f"❌ Translation failed: {e}"
    if not entries:
        return f"❌ No index entries given for '{collection}'."

    entries.sort(key=babel.collator.key_for(lambda entry: entry.get("name")))
    lines = [f"**Index of {collection} ({len(entries)} entries):**"]
    for entry in entries:
        entry_id = f" `{entry['_id']}`" if entry.get("_id") else ""
        lines.append(f"- {babel.display_name(entry)}{entry_id}")
    return "\n".join(lines)


@mcp.tool
async def list_translated_packs() -> str:
    """List the packs known to Babele and whether a translation is loaded."""
    babel = await get_babel()
    if not babel.packs:
        return f"❌ No packs configured for language '{babel.settings.language}'."

    lines = [f"**Packs ({babel.settings.language}):**"]
    for collection, store in sorted(babel.packs.items()):
        status = "✅ translated" if store.translated else "➖ not translated"
        label = f" - {store.label}" if store.label else ""
        lines.append(f"- `{collection}` ({store.document_type.value}){label}: {status}")
    return "\n".join(lines)


@mcp.tool
async def export_translations(
    collection: Annotated[str, Field(description="Collection id of the pack")],
    documents: Annotated[str, Field(description="JSON array with the full documents of the pack")],
    format: Annotated[Literal["default", "legacy"], Field(description="Entries keyed by name, or legacy id list")] = "default",
    output_path: Annotated[str | None, Field(description="Optional file to write the template to")] = None,
) -> str:
    """Build a translation file template for a pack."""
    if not settings.export_enabled:
        return "❌ Export of translations is disabled."
    babel = await get_babel()
    data, error = _parse_json(documents, list, "documents")
    if error:
        return error

    store = babel.packs.get(collection)
    if store is None:
        return f"❌ Pack '{collection}' is not supported or not configured."
    try:
        template = babel.export_translations(
            store.metadata,
            [document for document in data if isinstance(document, dict)],
            format,
        )
    except BabeleError as e:
        return f"❌ Export failed: {e}"

    if output_path:
        path = write_translation_file(Path(output_path), template)
        return f"📦 Exported {len(template['entries'])} entries of '{collection}' to {path}"
    return json.dumps(template, ensure_ascii=False, indent="\t")


logger.debug("✅ All tools registered")


def main() -> None:
    """Main entry point for the Babele MCP server."""
    mcp.run()


if __name__ == "__main__":
    main()
