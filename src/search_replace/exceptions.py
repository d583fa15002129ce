"""Custom exceptions for search_replace."""

from __future__ import annotations

from typing import Optional


class SearchReplaceError(Exception):
    """Base class for all search_replace errors."""


class ConfigurationError(SearchReplaceError):
    """Raised when the replacement configuration is unusable."""

    exit_code = 1


class UsageError(ConfigurationError):
    """Raised when no replacement pairs, or an odd number of arguments, are given."""


class InvalidReplacementError(ConfigurationError):
    """Raised when a replacement value fails validation."""


class InvalidFromError(InvalidReplacementError):
    """Raised when a <from> value is too short or looks like serialized structure."""

    exit_code = 2


class InvalidToError(InvalidReplacementError):
    """Raised when a <to> value is too short or contains disallowed characters."""

    exit_code = 3


class MalformedTokenError(SearchReplaceError):
    """Raised when a serialized string token cannot be walked to its terminator."""

    def __init__(self, message: str, offset: int, declared_length: Optional[int] = None) -> None:
        super().__init__(message)
        self.offset = offset
        self.declared_length = declared_length


class PipelineError(SearchReplaceError):
    """Raised when the ordered pipeline is misconfigured or misused."""
