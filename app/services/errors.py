"""Error types raised by the translation layer."""


class TranslationError(Exception):
    """Base class for translation layer failures."""


class CacheReadError(TranslationError):
    """The translation cache could not be queried."""


class CacheWriteError(TranslationError):
    """Translations could not be written to the cache, even by plain insert."""


class TranslationServiceError(TranslationError):
    """The machine translation API was unavailable or returned unusable output.

    Attributes:
        status_code: HTTP status reported by the API, when there was one.
    """

    def __init__(self, message: str, status_code: int = 0) -> None:
        super().__init__(message)
        self.status_code = status_code
