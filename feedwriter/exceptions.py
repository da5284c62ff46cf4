"""Errors raised while building feeds."""

from .models import Capability, Dialect


class FeedWriterError(Exception):
    """Base class for all feedwriter errors."""

    def __init__(
        self,
        message: str,
        parameter: str | None = None,
        dialect: Dialect | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.parameter = parameter
        self.dialect = dialect


class UnsupportedCapabilityError(FeedWriterError):
    """Raised when a setter is called that the item's dialect does not support."""

    def __init__(
        self,
        message: str,
        capability: Capability,
        dialect: Dialect | None = None,
        parameter: str | None = None,
    ):
        super().__init__(message, parameter=parameter, dialect=dialect)
        self.capability = capability


class MalformedInputError(FeedWriterError, ValueError):
    """Raised when a value fails a format check."""
