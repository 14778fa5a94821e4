"""
Converter contract and the name → converter registry.

A converter governs one structured mapping rule (``{"path": ..., "converter":
...}``). Its ``translate`` function merges the translation for the field into
the original value; its ``extract`` function is the inverse used when
exporting translation templates, and must return exactly the shape that
``translate`` consumes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Iterator, Mapping

from ..exceptions import UnknownConverterError

if TYPE_CHECKING:
    from ..compendium import TranslatedCompendium

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConversionContext:
    """Everything a converter may need besides the value itself.

    Attributes:
        document: The whole document being translated or extracted.
        translations: The document's translation entry ({} when none).
        compendium: The store running the mapping. Gives access to the
            pack snapshot, the mapping registry and the converter registry.
        field: Name of the mapping field being processed.
    """

    document: dict
    translations: dict
    compendium: TranslatedCompendium
    field: str

    @property
    def packs(self) -> Mapping[str, TranslatedCompendium]:
        return self.compendium.packs


TranslateFn = Callable[[Any, Any, ConversionContext], Any]
ExtractFn = Callable[[Any, ConversionContext], Any]


def _extract_as_is(value: Any, context: ConversionContext) -> Any:
    return value


@dataclass(frozen=True)
class Converter:
    """A translate/extract function pair.

    Attributes:
        translate: ``(original_value, translation, context) -> merged value``.
            Returning None leaves the field untouched.
        extract: ``(value, context) -> translation template value``.
        dynamic: True when the converter can translate without an explicit
            entry value; a mapping with a dynamic converter makes its store
            translate documents that have no entry.
    """

    translate: TranslateFn
    extract: ExtractFn = _extract_as_is
    dynamic: bool = False


class ConverterRegistry:
    """Name → Converter lookup table.

    Registration is last-wins. Plain callables are accepted for
    compatibility with third-party converters and are treated as dynamic
    converters whose extract returns the stored value unchanged.
    """

    def __init__(self, converters: Mapping[str, Converter | TranslateFn] | None = None):
        self._converters: dict[str, Converter] = {}
        if converters:
            self.register_many(converters)

    def register(self, name: str, converter: Converter | TranslateFn) -> None:
        """Add or replace the converter registered under ``name``."""
        if not isinstance(converter, Converter):
            if not callable(converter):
                raise TypeError(f"Converter '{name}' must be a Converter or a callable")
            converter = Converter(translate=converter, dynamic=True)
        if name in self._converters:
            logger.debug(f"Replacing converter '{name}'")
        self._converters[name] = converter

    def register_many(self, converters: Mapping[str, Converter | TranslateFn]) -> None:
        for name, converter in converters.items():
            self.register(name, converter)

    def resolve(self, name: str) -> Converter:
        """Return the converter for ``name``.

        Raises:
            UnknownConverterError: If nothing is registered under ``name``.
        """
        try:
            return self._converters[name]
        except KeyError:
            raise UnknownConverterError(name) from None

    def get(self, name: str) -> Converter | None:
        return self._converters.get(name)

    @property
    def names(self) -> list[str]:
        return list(self._converters)

    def copy(self) -> ConverterRegistry:
        return ConverterRegistry(self._converters)

    def __contains__(self, name: object) -> bool:
        return name in self._converters

    def __iter__(self) -> Iterator[str]:
        return iter(self._converters)

    def __len__(self) -> int:
        return len(self._converters)

    def __repr__(self) -> str:
        return f"ConverterRegistry(converters=[{', '.join(self._converters)}])"
