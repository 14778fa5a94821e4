"""
Locale-aware ordering of translated display names.

Callers that sort a translated index use ``Collator.for_language`` with the
active UI language; unknown languages fall back to ``DEFAULT_LOCALE``.
"""

from __future__ import annotations

import locale
import unicodedata
from functools import cmp_to_key
from typing import Any, Callable, Iterable

DEFAULT_LOCALE = "en"

_KNOWN_LOCALES = frozenset(locale.locale_alias.values())

# Letters a language alphabetizes on their own instead of as accented
# variants. Private-use code points sort after every Latin letter.
_NORDIC_SV = {"\u00e5": "\ue000", "\u00e4": "\ue001", "\u00e6": "\ue001", "\u00f6": "\ue002", "\u00f8": "\ue002"}
_NORDIC_DA = {"\u00e6": "\ue000", "\u00e4": "\ue000", "\u00f8": "\ue001", "\u00f6": "\ue001", "\u00e5": "\ue002"}

TAILORINGS: dict[str, dict[str, str]] = {
    "sv": _NORDIC_SV,
    "fi": _NORDIC_SV,
    "da": _NORDIC_DA,
    "nb": _NORDIC_DA,
    "nn": _NORDIC_DA,
    "no": _NORDIC_DA,
    "es": {"\u00f1": "n\ue000"},
}


def _normalize_tag(language: str) -> str:
    return language.strip().replace("-", "_")


def _primary_subtag(language: str) -> str:
    return _normalize_tag(language).split(".")[0].split("_")[0].lower()


class Collator:
    """Compares strings by base letters first, then accents, then case.

    Languages listed in ``TAILORINGS`` treat some accented letters as
    separate letters of the alphabet, so the same names can order
    differently per language.

    Example:
        >>> sorted(["zebra", "åsna"], key=Collator.for_language("en").sort_key)
        ['åsna', 'zebra']
        >>> sorted(["zebra", "åsna"], key=Collator.for_language("sv").sort_key)
        ['zebra', 'åsna']
    """

    def __init__(self, language: str = DEFAULT_LOCALE):
        self.language = language
        self._tailoring = str.maketrans(TAILORINGS.get(_primary_subtag(language), {}))

    @staticmethod
    def is_supported(language: str) -> bool:
        """True if ``language`` is a locale name known to the platform."""
        tag = _normalize_tag(language)
        if not tag:
            return False
        normalized = locale.normalize(tag)
        return normalized != tag or normalized in _KNOWN_LOCALES

    @classmethod
    def supported_locales_of(cls, languages: Iterable[str]) -> list[str]:
        return [language for language in languages if cls.is_supported(language)]

    @classmethod
    def for_language(cls, language: str | None) -> Collator:
        """Collator for ``language``, or for the default locale if unsupported."""
        if language and cls.supported_locales_of([language]):
            return cls(language)
        return cls(DEFAULT_LOCALE)

    def sort_key(self, text: str | None) -> tuple[str, str, str]:
        text = text or ""
        folded = unicodedata.normalize("NFC", text.casefold()).translate(self._tailoring)
        decomposed = unicodedata.normalize("NFD", folded)
        base = "".join(c for c in decomposed if not unicodedata.combining(c))
        return (base, decomposed, text)

    def compare(self, a: str | None, b: str | None) -> int:
        key_a, key_b = self.sort_key(a), self.sort_key(b)
        return (key_a > key_b) - (key_a < key_b)

    def key_for(self, getter: Callable[[Any], str | None]) -> Callable[[Any], Any]:
        """Sort key for arbitrary objects, e.g. ``key_for(lambda e: e["name"])``."""
        return cmp_to_key(lambda a, b: self.compare(getter(a), getter(b)))

    def __repr__(self) -> str:
        return f"Collator(language={self.language!r})"
