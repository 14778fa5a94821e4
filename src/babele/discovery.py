"""
Discovery and fetching of translation files.

``FileBrowser`` lists the files of a data directory (the host's file picker
in the original application); ``TranslationFetcher`` downloads and parses
one file, either from the local data root or from a remote data server.
"""

from __future__ import annotations

import asyncio
import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any
from urllib.parse import unquote

import httpx

from .exceptions import DirectoryBrowseError, MalformedTranslationFileError

logger = logging.getLogger(__name__)

MAPPING_FILE_NAME = "mapping.json"


def file_name(location: str) -> str:
    """Decoded last path segment of a file path or URL."""
    return unquote(location.replace("\\", "/").rsplit("/", 1)[-1])


def is_remote(location: str) -> bool:
    return location.startswith(("http://", "https://"))


class FileBrowser(ABC):
    """Lists the files directly inside a data directory."""

    @abstractmethod
    async def browse(self, directory: str) -> list[str]:
        """
        List the files of ``directory``.

        Args:
            directory: Data-relative directory, e.g. ``modules/foo/compendium/it``

        Returns:
            Data-relative file paths

        Raises:
            DirectoryBrowseError: If the directory cannot be listed
        """


class LocalFileBrowser(FileBrowser):
    """Browses directories below a local data root."""

    def __init__(self, data_root: Path | str):
        self.data_root = Path(data_root)

    def _list(self, directory: str) -> list[str]:
        path = self.data_root / directory
        if not path.is_dir():
            raise DirectoryBrowseError(f"Directory not found: {directory}")
        try:
            names = sorted(entry.name for entry in path.iterdir() if entry.is_file())
        except OSError as e:
            raise DirectoryBrowseError(f"Failed to list {directory}: {e}") from e
        return [f"{directory.rstrip('/')}/{name}" for name in names]

    async def browse(self, directory: str) -> list[str]:
        return await asyncio.to_thread(self._list, directory)

    def __repr__(self) -> str:
        return f"LocalFileBrowser(data_root={str(self.data_root)!r})"


class TranslationFetcher:
    """Fetches and parses JSON translation and mapping files.

    Absolute URLs are always fetched over HTTP. Data-relative paths are
    fetched from ``base_url`` when one is configured, otherwise read from
    ``data_root``.
    """

    def __init__(
        self,
        data_root: Path | str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
    ):
        self.data_root = Path(data_root) if data_root is not None else Path(".")
        self.base_url = base_url.rstrip("/") if base_url else None
        self.timeout = timeout

    async def fetch_json(self, location: str) -> Any:
        """
        Fetch one file and parse it as JSON.

        Raises:
            MalformedTranslationFileError: If the file cannot be fetched or parsed
        """
        if is_remote(location):
            return await self._fetch_remote(location)
        if self.base_url:
            return await self._fetch_remote(f"{self.base_url}/{location.lstrip('/')}")
        return await asyncio.to_thread(self._read_local, location)

    def _read_local(self, location: str) -> Any:
        path = self.data_root / location
        try:
            with path.open("r", encoding="utf-8") as f:
                return json.load(f)
        except json.JSONDecodeError as e:
            raise MalformedTranslationFileError(f"Invalid JSON in {location}: {e}") from e
        except UnicodeDecodeError as e:
            raise MalformedTranslationFileError(f"{location} is not valid UTF-8: {e}") from e
        except OSError as e:
            raise MalformedTranslationFileError(f"Failed to read {location}: {e}") from e

    async def _fetch_remote(self, url: str) -> Any:
        try:
            async with httpx.AsyncClient() as client:
                response = await client.get(url, timeout=self.timeout)
                response.raise_for_status()
                return response.json()
        except httpx.HTTPStatusError as e:
            raise MalformedTranslationFileError(
                f"{url} returned HTTP {e.response.status_code}"
            ) from e
        except httpx.RequestError as e:
            raise MalformedTranslationFileError(f"Failed to fetch {url}: {e}") from e
        except ValueError as e:
            raise MalformedTranslationFileError(f"Invalid JSON in {url}: {e}") from e

    def __repr__(self) -> str:
        source = self.base_url or str(self.data_root)
        return f"TranslationFetcher(source={source!r})"
