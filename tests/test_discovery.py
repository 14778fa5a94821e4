"""
Tests for translation file browsing and fetching.
"""

import json
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from babele.discovery import LocalFileBrowser, TranslationFetcher, file_name, is_remote
from babele.exceptions import DirectoryBrowseError, MalformedTranslationFileError

pytestmark = pytest.mark.anyio


def _mock_client(mock_client_class, response=None, side_effect=None):
    mock_client = MagicMock()
    mock_client.get = AsyncMock(return_value=response, side_effect=side_effect)
    mock_client.__aenter__ = AsyncMock(return_value=mock_client)
    mock_client.__aexit__ = AsyncMock(return_value=None)
    mock_client_class.return_value = mock_client
    return mock_client


class TestHelpers:
    def test_file_name(self):
        assert file_name("modules/babele-es/compendium/es/dnd5e.items.json") == "dnd5e.items.json"
        assert file_name("https://example.com/es/world.h%C3%A9roes.json") == "world.héroes.json"
        assert file_name("translations\\es\\world.items.json") == "world.items.json"

    def test_is_remote(self):
        assert is_remote("https://example.com/es/world.items.json")
        assert not is_remote("modules/babele-es/es/world.items.json")


class TestLocalFileBrowser:
    async def test_lists_files_only(self, tmp_path):
        directory = tmp_path / "translations" / "es"
        (directory / "nested").mkdir(parents=True)
        (directory / "world.items.json").write_text("{}")
        (directory / "dnd5e.monsters.json").write_text("{}")

        files = await LocalFileBrowser(tmp_path).browse("translations/es")

        assert files == ["translations/es/dnd5e.monsters.json", "translations/es/world.items.json"]

    async def test_missing_directory(self, tmp_path):
        with pytest.raises(DirectoryBrowseError):
            await LocalFileBrowser(tmp_path).browse("translations/fr")


class TestTranslationFetcher:
    async def test_reads_local_file(self, tmp_path):
        (tmp_path / "world.items.json").write_text(
            json.dumps({"entries": {"Sword": {"name": "Espada"}}}), encoding="utf-8"
        )
        data = await TranslationFetcher(tmp_path).fetch_json("world.items.json")
        assert data == {"entries": {"Sword": {"name": "Espada"}}}

    async def test_malformed_local_file(self, tmp_path):
        (tmp_path / "world.items.json").write_text("{not json")
        with pytest.raises(MalformedTranslationFileError):
            await TranslationFetcher(tmp_path).fetch_json("world.items.json")

    async def test_local_file_not_utf8(self, tmp_path):
        (tmp_path / "world.items.json").write_bytes(b"\xff\xfe{\"entries\": {}}")
        with pytest.raises(MalformedTranslationFileError, match="not valid UTF-8"):
            await TranslationFetcher(tmp_path).fetch_json("world.items.json")

    async def test_missing_local_file(self, tmp_path):
        with pytest.raises(MalformedTranslationFileError):
            await TranslationFetcher(tmp_path).fetch_json("world.items.json")

    async def test_remote_file(self):
        with patch("httpx.AsyncClient") as mock_client_class:
            mock_response = MagicMock()
            mock_response.raise_for_status = MagicMock()
            mock_response.json = MagicMock(return_value={"label": "Objetos"})
            mock_client = _mock_client(mock_client_class, response=mock_response)

            fetcher = TranslationFetcher(base_url="https://data.example.com/")
            data = await fetcher.fetch_json("translations/es/world.items.json")

            assert data == {"label": "Objetos"}
            mock_client.get.assert_awaited_once_with(
                "https://data.example.com/translations/es/world.items.json", timeout=None
            )

    async def test_remote_http_error(self):
        with patch("httpx.AsyncClient") as mock_client_class:
            request = httpx.Request("GET", "https://data.example.com/x.json")
            response = httpx.Response(404, request=request)
            mock_response = MagicMock()
            mock_response.raise_for_status = MagicMock(
                side_effect=httpx.HTTPStatusError("Not found", request=request, response=response)
            )
            _mock_client(mock_client_class, response=mock_response)

            with pytest.raises(MalformedTranslationFileError) as exc_info:
                await TranslationFetcher().fetch_json("https://data.example.com/x.json")
            assert "404" in str(exc_info.value)

    async def test_remote_connection_error(self):
        with patch("httpx.AsyncClient") as mock_client_class:
            _mock_client(mock_client_class, side_effect=httpx.ConnectError("Connection refused"))

            with pytest.raises(MalformedTranslationFileError):
                await TranslationFetcher().fetch_json("https://data.example.com/x.json")

    async def test_remote_invalid_json(self):
        with patch("httpx.AsyncClient") as mock_client_class:
            mock_response = MagicMock()
            mock_response.raise_for_status = MagicMock()
            mock_response.json = MagicMock(side_effect=json.JSONDecodeError("Expecting value", "", 0))
            _mock_client(mock_client_class, response=mock_response)

            with pytest.raises(MalformedTranslationFileError):
                await TranslationFetcher().fetch_json("https://data.example.com/x.json")
