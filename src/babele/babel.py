"""
Babel - discovers translation files and routes documents to their stores.

Initialization runs once per session:

  1. Discover translation files and global ``mapping.json`` files in the
     registered module directories, the user directory and the system
     directory.
  2. Fetch every file of a collection concurrently and merge them in
     discovery order (later files win).
  3. Register the global mapping overrides on the default mappings.
  4. Build one TranslatedCompendium per supported pack, plus a synthetic
     ``<collection>-items`` store for every adventure pack.

After that the stores are read-only and the translate/extract façade can be
used from any caller.
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from types import MappingProxyType
from typing import Any, Iterable, Mapping

from pydantic import ValidationError

from .collation import Collator
from .compendium import TranslatedCompendium
from .converters.library import default_registry
from .converters.registry import Converter, TranslateFn
from .discovery import MAPPING_FILE_NAME, FileBrowser, LocalFileBrowser, TranslationFetcher, file_name
from .exceptions import DirectoryBrowseError, MalformedTranslationFileError
from .export import build_translation_file
from .mapping import MappingRegistry, is_converter_rule
from .models import (
    PACK_FOLDER_TRANSLATION_NAME_SUFFIX,
    DocumentType,
    ExportFormat,
    PackMetadata,
    TranslationModule,
    TranslationPayload,
)
from .settings import BabeleSettings

logger = logging.getLogger(__name__)

SUPPORTED_PACKS = [document_type.value for document_type in DocumentType]


class BabelState(str, Enum):
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    READY = "ready"


class Babel:
    """Translation façade for all compendium packs of a world.

    Args:
        settings: Engine settings; defaults are used when omitted.
        packs: Metadata of every pack known to the host.
        folders: World folders; pack-folder translation files are only
            processed when this is provided.
        browser: Directory lister, defaults to the local data root.
        fetcher: File fetcher, defaults to the local data root or the
            configured remote data server.
    """

    def __init__(
        self,
        settings: BabeleSettings | None = None,
        *,
        packs: Iterable[PackMetadata] = (),
        folders: list[dict[str, Any]] | None = None,
        browser: FileBrowser | None = None,
        fetcher: TranslationFetcher | None = None,
    ):
        self.settings = settings or BabeleSettings()
        self.modules: list[TranslationModule] = list(self.settings.modules)
        self.system_translations_dir = self.settings.system_translations_dir
        self.pack_metadata: list[PackMetadata] = list(packs)
        self.folders = folders
        self.browser = browser or LocalFileBrowser(self.settings.data_root)
        self.fetcher = fetcher or TranslationFetcher(
            data_root=self.settings.data_root,
            base_url=self.settings.base_url,
        )
        self.converters = default_registry()
        self.mappings = MappingRegistry()
        self.translations: list[TranslationPayload] | None = None
        self.state = BabelState.UNINITIALIZED
        self._packs: dict[str, TranslatedCompendium] = {}
        self._files: list[str] | None = None
        self._mapping_files: list[str] | None = None

    @property
    def packs(self) -> Mapping[str, TranslatedCompendium]:
        """Read-only view of the stores, keyed by collection id."""
        return MappingProxyType(self._packs)

    @property
    def initialized(self) -> bool:
        return self.state == BabelState.READY

    # =========================================================================
    # Registration
    # =========================================================================

    def register(self, module: TranslationModule | dict) -> None:
        """Register a module that ships translations for one language."""
        if not isinstance(module, TranslationModule):
            module = TranslationModule.model_validate(module)
        self.modules.append(module)
        self._files = None
        self._mapping_files = None

    def register_converters(self, converters: Mapping[str, Converter | TranslateFn]) -> None:
        self.converters.register_many(converters)

    def register_mapping(self, mapping: Mapping[str, Any]) -> None:
        self.mappings.register(mapping)

    def set_system_translations_dir(self, directory: str) -> None:
        self.system_translations_dir = directory
        self._files = None
        self._mapping_files = None

    def supported(self, pack: PackMetadata) -> bool:
        return pack.type in SUPPORTED_PACKS

    # =========================================================================
    # Initialization
    # =========================================================================

    async def init(self) -> None:
        """Load the translations and build the stores. Idempotent."""
        if self.state == BabelState.READY:
            return

        self.state = BabelState.LOADING
        try:
            if self.translations is None:
                self.translations = await self.load_translations()

            by_collection = {t.collection: t for t in self.translations if t.collection}
            self._packs.clear()
            for metadata in self.pack_metadata:
                self._add_store(metadata, by_collection)

            if self.folders is not None:
                for file in await self._get_translation_files():
                    if self._is_pack_folders_file(file):
                        self._add_store(PackMetadata.for_pack_folders(file_name(file)), by_collection)
        except Exception:
            self.state = BabelState.UNINITIALIZED
            raise

        self.state = BabelState.READY
        translated = sum(1 for store in self._packs.values() if store.translated)
        logger.info(f"Babele ready: {len(self._packs)} packs, {translated} translated")

    def _new_store(self, metadata: PackMetadata, payload: TranslationPayload | None) -> TranslatedCompendium:
        return TranslatedCompendium(
            metadata,
            payload,
            converters=self.converters,
            mappings=self.mappings,
            packs=self.packs,
        )

    def _add_store(self, metadata: PackMetadata, translations: Mapping[str, TranslationPayload]) -> None:
        if not self.supported(metadata):
            return
        collection = metadata.collection
        payload = translations.get(collection)
        self._packs[collection] = self._new_store(metadata, payload)

        if metadata.document_type == DocumentType.ADVENTURE and payload is not None and payload.entries:
            items_collection = f"{collection}-items"
            self._packs[items_collection] = self._new_store(
                PackMetadata(
                    type=DocumentType.ITEM.value,
                    name=f"{metadata.name}-items",
                    package_name=metadata.package_name,
                    package_type=metadata.package_type,
                    id=items_collection,
                ),
                self._adventure_items_payload(items_collection, payload),
            )

    @staticmethod
    def _adventure_items_payload(collection: str, payload: TranslationPayload) -> TranslationPayload:
        """Flatten the embedded item entries of every adventure entry."""
        entries: dict[str, Any] = {}
        for adventure in payload.entries.values():
            if not isinstance(adventure, dict) or not isinstance(adventure.get("items"), (dict, list)):
                continue
            entries.update(TranslationPayload(entries=adventure["items"]).entries)

        mapping = payload.mapping.get("items")
        if not isinstance(mapping, dict) or is_converter_rule(mapping):
            mapping = {}
        return TranslationPayload(collection=collection, entries=entries, mapping=mapping)

    # =========================================================================
    # Loading
    # =========================================================================

    async def load_translations(self) -> list[TranslationPayload]:
        """Fetch and merge the translation files of every supported pack.

        Global mapping overrides are registered as a side effect, before any
        store is built.

        Returns:
            One merged payload per collection that has translation files.
        """
        files = await self._get_translation_files()
        if not files:
            logger.info(f"No compendium translation files found for {self.settings.language} language")

        jobs = []
        for metadata in self.pack_metadata:
            if self.supported(metadata):
                collection = metadata.collection
                expected = f"{collection}.json"
                urls = [file for file in files if file_name(file) == expected]
                jobs.append(self._load_collection(collection, urls))

        for file in files:
            if self._is_pack_folders_file(file):
                jobs.append(self._load_collection(file_name(file).removesuffix(".json"), [file]))

        results = await asyncio.gather(*jobs)
        await self._load_mappings()
        return [payload for payload in results if payload is not None]

    async def _load_collection(self, collection: str, urls: list[str]) -> TranslationPayload | None:
        if not urls:
            logger.debug(f"No translation file found for {collection} pack")
            return None

        payloads = await asyncio.gather(*(self._fetch_payload(url) for url in urls))
        merged = TranslationPayload.merge_all([p for p in payloads if p is not None])
        if merged is None:
            return None

        logger.info(f"Translation for {collection} pack successfully loaded")
        return merged.model_copy(update={"collection": collection})

    async def _fetch_payload(self, url: str) -> TranslationPayload | None:
        try:
            data = await self.fetcher.fetch_json(url)
            return TranslationPayload.model_validate(data)
        except MalformedTranslationFileError as e:
            logger.warning(f"Skipping translation file {url}: {e}")
        except ValidationError as e:
            logger.warning(f"Skipping translation file {url}: unexpected content ({e.error_count()} errors)")
        return None

    async def _load_mappings(self) -> None:
        mapping_files = await self._get_mapping_files()
        if not mapping_files:
            return

        logger.info("Global mapping files found, defaults will be enriched/overwritten")

        async def fetch(url: str) -> Any:
            try:
                return await self.fetcher.fetch_json(url)
            except MalformedTranslationFileError as e:
                logger.warning(f"Skipping mapping file {url}: {e}")
                return None

        for url, mapping in zip(mapping_files, await asyncio.gather(*(fetch(url) for url in mapping_files))):
            if isinstance(mapping, dict):
                self.register_mapping(mapping)
            elif mapping is not None:
                logger.warning(f"Skipping mapping file {url}: expected an object")

    @staticmethod
    def _is_pack_folders_file(file: str) -> bool:
        return file_name(file).endswith(f"{PACK_FOLDER_TRANSLATION_NAME_SUFFIX}.json")

    # =========================================================================
    # File discovery
    # =========================================================================

    def _translation_directories(self) -> list[str]:
        lang = self.settings.language
        directories = [m.directory for m in self.modules if m.lang == lang]
        if self.settings.directory.strip():
            directories.append(f"{self.settings.directory.strip()}/{lang}")
        if self.system_translations_dir and self.settings.system_id:
            directories.append(f"systems/{self.settings.system_id}/{self.system_translations_dir}/{lang}")
        return directories

    def _mapping_directories(self) -> list[str]:
        directories = [m.directory for m in self.modules]
        if self.settings.directory.strip():
            directories.append(self.settings.directory.strip())
        if self.system_translations_dir and self.settings.system_id:
            directories.append(f"systems/{self.settings.system_id}/{self.system_translations_dir}")
        return directories

    async def _browse(self, directory: str) -> list[str]:
        try:
            return await self.browser.browse(directory)
        except DirectoryBrowseError as e:
            logger.warning(f"Babele: {e}")
            return []

    async def _browse_all(self, directories: list[str]) -> list[str]:
        listings = await asyncio.gather(*(self._browse(d) for d in directories))
        return [file for listing in listings for file in listing]

    async def _get_translation_files(self) -> list[str]:
        if self._files is not None:
            return self._files
        if not self.settings.can_browse:
            return list(self.settings.translation_files)

        self._files = await self._browse_all(self._translation_directories())
        return self._files

    async def _get_mapping_files(self) -> list[str]:
        if self._mapping_files is not None:
            return self._mapping_files
        if not self.settings.can_browse:
            return list(self.settings.mapping_files)

        files = await self._browse_all(self._mapping_directories())
        self._mapping_files = [file for file in files if file_name(file) == MAPPING_FILE_NAME]
        return self._mapping_files

    async def share_translation_files(self) -> list[str]:
        """Store the discovered translation files in the settings."""
        files = await self._get_translation_files()
        if self.settings.can_browse:
            self.settings.translation_files = list(files)
        return files

    async def share_mapping_files(self) -> list[str]:
        """Store the discovered mapping files in the settings."""
        files = await self._get_mapping_files()
        if self.settings.can_browse:
            self.settings.mapping_files = list(files)
        return files

    # =========================================================================
    # Façade
    # =========================================================================

    def is_translated(self, collection: str) -> bool:
        """True if the pack has an associated translation file."""
        store = self._packs.get(collection)
        return bool(store and store.translated)

    def translate(self, collection: str, data: dict, translations_only: bool = False) -> dict:
        """Translate a document of ``collection``; unknown packs pass it through."""
        if data is None:
            return data
        store = self._packs.get(collection)
        if store is None or not (store.has_translation(data) or store.is_dynamic()):
            return data
        return store.translate(data, translations_only)

    def translate_field(self, field: str, collection: str, data: dict) -> Any:
        store = self._packs.get(collection)
        if store is None or data is None:
            return None
        return store.resolve_field(field, data)

    def extract(self, collection: str, data: dict) -> dict[str, Any]:
        store = self._packs.get(collection)
        if store is None:
            return {}
        return store.extract(data)

    def extract_field(self, collection: str, field: str, data: dict) -> Any:
        store = self._packs.get(collection)
        if store is None:
            return None
        return store.extract_field(field, data)

    def translate_index(self, index: list[dict], collection: str) -> list[dict]:
        """Translate lightweight index entries in place.

        Only fields with an available translation are written. Sorting the
        result is left to the caller (see ``collator``).
        """
        for entry in index:
            translated = self.translate(collection, entry, True)
            if translated is not entry:
                entry.clear()
                entry.update(translated)
        return index

    @property
    def collator(self) -> Collator:
        """Collator for the active language."""
        return Collator.for_language(self.settings.language)

    def display_name(self, entry: dict) -> str:
        """Name shown for an index entry, with the original name if enabled."""
        name = entry.get("name") or ""
        original = entry.get("originalName")
        if (
            self.settings.show_original_name
            and entry.get("translated")
            and entry.get("hasTranslation")
            and original
            and original != name
        ):
            return f"{name} ({original})"
        return name

    # =========================================================================
    # Folders
    # =========================================================================

    def translate_pack_folders(self, pack: PackMetadata) -> list[dict[str, Any]]:
        """Rename the folders of ``pack`` in place with its folder translations."""
        store = self._packs.get(pack.collection)
        if store is None or not pack.folders:
            return pack.folders
        for folder in pack.folders:
            if isinstance(folder.get("name"), str):
                folder["name"] = store.translate_folder(folder["name"])
        return pack.folders

    def translate_system_pack_folders(self, folders: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """Rename world folders in place with the ``_packs-folders`` files."""
        translations: dict[str, Any] = {}
        for store in self._packs.values():
            if store.metadata.name.endswith(PACK_FOLDER_TRANSLATION_NAME_SUFFIX):
                translations.update(store.translations)
        for folder in folders:
            name = folder.get("name")
            if isinstance(name, str) and isinstance(translations.get(name), str):
                folder["name"] = translations[name]
        return folders

    # =========================================================================
    # Export
    # =========================================================================

    def export_translations(
        self,
        pack: PackMetadata,
        documents: Iterable[dict],
        format: ExportFormat | str = ExportFormat.DEFAULT,
    ) -> dict[str, Any]:
        """Translation file template for every document of ``pack``."""
        return build_translation_file(
            pack.label,
            documents,
            lambda document: self.extract(pack.collection, document),
            format,
        )

    def __repr__(self) -> str:
        return f"Babel(state={self.state.value}, packs=[{', '.join(self._packs)}])"
