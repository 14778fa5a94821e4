"""
Converters merge translations into collection-shaped document fields.

The built-in converters live in ``babele.converters.library``; this package
exposes the converter contract and the registry.
"""

from .registry import ConversionContext, Converter, ConverterRegistry

__all__ = ["ConversionContext", "Converter", "ConverterRegistry"]
