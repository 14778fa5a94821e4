"""
Babele - compendium translation engine.

Translates compendium documents (actors, items, journals, adventures, ...)
with declarative per-type field mappings and pluggable converters, and
extracts translation templates from documents for export.
"""

from .babel import Babel, BabelState, SUPPORTED_PACKS
from .collation import Collator
from .compendium import TranslatedCompendium
from .converters import ConversionContext, Converter, ConverterRegistry
from .converters.library import default_converters, default_registry
from .exceptions import (
    BabeleError,
    DirectoryBrowseError,
    MalformedTranslationFileError,
    SettingsError,
    UnknownConverterError,
)
from .mapping import DEFAULT_MAPPINGS, CompendiumMapping, FieldMapping, MappingRegistry
from .models import (
    DocumentType,
    ExportFormat,
    PackMetadata,
    TranslationModule,
    TranslationPayload,
)
from .settings import BabeleSettings, load_pack_metadata

__version__ = "1.0.0"

__all__ = [
    # Orchestrator
    "Babel",
    "BabelState",
    "SUPPORTED_PACKS",
    # Stores and mappings
    "TranslatedCompendium",
    "CompendiumMapping",
    "FieldMapping",
    "MappingRegistry",
    "DEFAULT_MAPPINGS",
    # Converters
    "ConversionContext",
    "Converter",
    "ConverterRegistry",
    "default_converters",
    "default_registry",
    # Models
    "DocumentType",
    "ExportFormat",
    "PackMetadata",
    "TranslationModule",
    "TranslationPayload",
    # Settings
    "BabeleSettings",
    "load_pack_metadata",
    # Utilities
    "Collator",
    # Errors
    "BabeleError",
    "DirectoryBrowseError",
    "MalformedTranslationFileError",
    "SettingsError",
    "UnknownConverterError",
]
