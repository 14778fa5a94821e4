"""
Translation file templates built from pack documents.

Translators bootstrap their work from an exported file: every document of a
pack is extracted through the pack's mapping and keyed by its original
name, so the result can be loaded back as a translation file.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Callable, Iterable

from .models import ExportFormat
from .utils import original_name

logger = logging.getLogger(__name__)


def build_translation_file(
    label: str | None,
    documents: Iterable[dict],
    extract: Callable[[dict], dict[str, Any]],
    format: ExportFormat | str = ExportFormat.DEFAULT,
) -> dict[str, Any]:
    """Build a translation file for a set of documents.

    Args:
        label: Pack label written to the file.
        documents: Full documents of the pack.
        extract: Extracts the translatable fields of one document.
        format: ``default`` keys entries by original name; ``legacy``
            writes a list of entries carrying an ``id`` field.

    Returns:
        ``{"label": ..., "entries": ...}``
    """
    legacy = ExportFormat(format) == ExportFormat.LEGACY
    entries: dict[str, Any] | list[dict[str, Any]] = [] if legacy else {}
    for document in documents:
        name = original_name(document)
        if not name:
            logger.warning(f"Skipping unnamed document {document.get('_id')!r} on export")
            continue
        extracted = extract(document)
        if legacy:
            entries.append({"id": name, **extracted})
        else:
            entries[name] = extracted
    return {"label": label, "entries": entries}


def write_translation_file(path: Path | str, data: dict[str, Any]) -> Path:
    """Write a translation file as tab-indented UTF-8 JSON."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent="\t", ensure_ascii=False), encoding="utf-8")
    logger.info(f"Exported translations to {path}")
    return path
