"""
Exception hierarchy for the artwork pipeline.

Configuration and validation errors abort a build. Not-found and I/O
errors are recoverable: the caller falls back to the default image, or
the affected derivative job fails on its own.
"""


class ArtworkError(Exception):
    """Base class for all artwork pipeline errors."""
    pass


class ConfigurationError(ArtworkError):
    """Raised when a required setting is missing or invalid."""
    pass


class UnsupportedTypeError(ConfigurationError):
    """Raised when no decoder is registered for a source file extension."""

    def __init__(self, path: str, extension: str):
        self.path = path
        self.extension = extension
        super().__init__(
            f"Unknown image type requested: [ {extension or '(none)'} ] "
            f"for source [ {path} ]"
        )


class ValidationError(ArtworkError, ValueError):
    """Raised when a value object is constructed from incomplete data."""
    pass


class NotFoundError(ArtworkError):
    """Raised when a catalog record, archive or archive entry is missing."""
    pass


class ExtractionError(ArtworkError, OSError):
    """Raised when an archive cannot be opened or an entry cannot be copied."""
    pass


class DecodeError(ArtworkError, OSError):
    """Raised when a source file cannot be decoded to a bitmap."""
    pass
