"""
Pytest configuration and fixtures for babele tests.
"""

import sys
from pathlib import Path
import pytest

# Add src directory to Python path to allow importing babele
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from babele.compendium import TranslatedCompendium
from babele.converters.library import default_registry
from babele.mapping import MappingRegistry
from babele.models import PackMetadata, TranslationPayload


# Configure anyio to only use asyncio (not trio)
@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def packs() -> dict:
    """Shared store lookup, filled by the stores a test builds."""
    return {}


@pytest.fixture
def make_store(packs):
    """Factory building a store and adding it to ``packs``.

    ``payload`` may be a raw translation file dict; None builds a store for
    a pack without translation.
    """

    def factory(
        document_type: str,
        payload: dict | None = None,
        *,
        collection: str = "world.test",
        converters=None,
        mappings=None,
    ) -> TranslatedCompendium:
        name = collection.split(".", 1)[-1]
        store = TranslatedCompendium(
            PackMetadata(type=document_type, name=name, id=collection),
            TranslationPayload.model_validate(payload) if payload is not None else None,
            converters=converters if converters is not None else default_registry(),
            mappings=mappings if mappings is not None else MappingRegistry(),
            packs=packs,
        )
        packs[collection] = store
        return store

    return factory
