"""
Exceptions raised by the babele translation engine.
"""


class BabeleError(Exception):
    """Base class for all babele errors."""
    pass


class UnknownConverterError(BabeleError):
    """Raised when a mapping rule names a converter that is not registered."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown converter: '{name}'")


class MalformedTranslationFileError(BabeleError):
    """Raised when a translation or mapping file cannot be fetched or parsed."""
    pass


class DirectoryBrowseError(BabeleError):
    """Raised by a file browser when a directory cannot be listed."""
    pass


class SettingsError(BabeleError):
    """Raised when settings or pack metadata files cannot be read."""
    pass
