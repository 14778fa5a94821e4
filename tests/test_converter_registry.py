"""
Tests for ConverterRegistry.
"""

import pytest

from babele.converters import Converter, ConverterRegistry
from babele.converters.library import default_registry
from babele.exceptions import UnknownConverterError


def _upper(value, translation, context):
    return translation or (value.upper() if isinstance(value, str) else value)


class TestConverterRegistry:
    def test_register_and_resolve(self):
        registry = ConverterRegistry()
        converter = Converter(translate=_upper)
        registry.register("upper", converter)

        assert "upper" in registry
        assert registry.resolve("upper") is converter
        assert registry.names == ["upper"]
        assert len(registry) == 1

    def test_unknown_converter(self):
        registry = ConverterRegistry()
        with pytest.raises(UnknownConverterError) as exc_info:
            registry.resolve("missing")
        assert exc_info.value.name == "missing"
        assert "missing" in str(exc_info.value)
        assert registry.get("missing") is None

    def test_last_registration_wins(self):
        registry = ConverterRegistry()
        first = Converter(translate=_upper)
        second = Converter(translate=_upper, dynamic=True)
        registry.register("upper", first)
        registry.register("upper", second)
        assert registry.resolve("upper") is second

    def test_plain_callable_is_wrapped_as_dynamic(self):
        registry = ConverterRegistry({"upper": _upper})
        converter = registry.resolve("upper")
        assert converter.dynamic is True
        assert converter.translate("sword", None, None) == "SWORD"
        # extract returns the stored value unchanged
        assert converter.extract("Sword", None) == "Sword"

    def test_non_callable_rejected(self):
        registry = ConverterRegistry()
        with pytest.raises(TypeError):
            registry.register("broken", "not a function")

    def test_copy_is_independent(self):
        registry = default_registry()
        clone = registry.copy()
        clone.register("extra", _upper)
        assert "extra" in clone
        assert "extra" not in registry


class TestDefaultRegistry:
    def test_builtin_converters(self):
        registry = default_registry()
        assert set(registry) == {
            "fromPack",
            "name",
            "nameCollection",
            "textCollection",
            "tableResults",
            "tableResultsCollection",
            "pages",
            "playlistSounds",
            "deckCards",
            "adventureItems",
            "adventureActors",
            "adventureCards",
            "adventureJournals",
            "adventurePlaylists",
            "adventureMacros",
            "adventureScenes",
        }

    def test_dynamic_flags(self):
        registry = default_registry()
        dynamic = {name for name in registry if registry.resolve(name).dynamic}
        assert dynamic == {
            "fromPack",
            "tableResults",
            "adventureItems",
            "adventureActors",
            "adventureCards",
            "adventureJournals",
            "adventurePlaylists",
            "adventureMacros",
            "adventureScenes",
        }

    def test_registries_are_not_shared(self):
        first = default_registry()
        second = default_registry()
        first.register("pages", _upper)
        assert second.resolve("pages").dynamic is False
