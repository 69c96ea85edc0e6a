# src/mill_atlas/exceptions.py
"""
Semantic exception types for mill-atlas.

Every expected failure raised by the service layer derives from
`MillAtlasError`, so callers (the HTTP layer, the CLI) can translate them
into responses without catching unrelated errors.
"""


class MillAtlasError(Exception):
    """Common base class for all mill-atlas errors."""

    pass


class ConfigurationError(MillAtlasError):
    """Configuration could not be loaded or failed validation."""

    pass


class DatabaseError(MillAtlasError):
    """
    A persistence-layer operation failed.
    Usually wraps the underlying driver exception.
    """

    pass


class InvalidLocaleError(MillAtlasError, ValueError):
    """The requested locale is not one of the configured locales."""

    def __init__(self, locale: str | None, supported: tuple[str, ...] = ()):
        self.locale = locale
        self.supported = supported
        if supported:
            allowed = " or ".join(f'"{s}"' for s in supported)
            msg = f"Invalid locale. Must be {allowed}"
        else:
            msg = f"Invalid locale: {locale!r}"
        super().__init__(msg)


class ValidationError(MillAtlasError, ValueError):
    """User input failed domain validation."""

    pass


class NotFoundError(MillAtlasError, LookupError):
    """
    The requested record does not exist.
    Inherits from LookupError to match dictionary-style lookups.
    """

    pass


class AuthenticationError(MillAtlasError):
    """No valid identity was presented."""

    pass


class AuthorizationError(MillAtlasError):
    """The identity is valid but lacks the required role."""

    pass


class StorageError(MillAtlasError):
    """An object-storage or auth-provider request failed."""

    pass
