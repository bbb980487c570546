"""Custom exception hierarchy for word-search generation."""


class WordSearchError(Exception):
    """Base exception for generator failures."""


class ConfigurationError(WordSearchError):
    """Raised when grid dimensions or generator settings are unusable."""


class ImageDecodeError(WordSearchError):
    """Raised when the mask source image cannot be loaded or decoded."""


class SupplierFailure(WordSearchError):
    """Raised when the word supplier fails and nothing else can be placed."""


class PlacementError(WordSearchError):
    """Raised when a word is committed at a position that breaks grid rules."""


class GenerationCancelled(WordSearchError):
    """Raised when the owning session is reset mid-generation."""


class ValidationError(WordSearchError):
    """Raised when the puzzle integrity checks fail."""
