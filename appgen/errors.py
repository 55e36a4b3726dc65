"""Exception hierarchy for the app generator.

Every failure that can happen while processing one request maps to an
``ErrorKind``.  The pipeline catches ``AppGenError`` at the per-request
boundary and turns it into a failed ``GenerationOutcome``; nothing here is
meant to escape to the interactive loop.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """Classification of a failed request."""
    UNSAFE_INPUT = "UnsafeInputError"
    SERVICE = "ServiceError"
    PARSE = "ParseError"
    IO = "IOError"


class AppGenError(Exception):
    """Base class for per-request failures."""

    kind: ErrorKind


class UnsafeInputError(AppGenError):
    """Raised when a request matches a denylist rule."""

    kind = ErrorKind.UNSAFE_INPUT

    def __init__(self, pattern: str, reason: str = "") -> None:
        self.pattern = pattern
        self.reason = reason
        detail = f" ({reason})" if reason else ""
        super().__init__(f"Unsafe or forbidden token detected: {pattern!r}{detail}")


class ServiceError(AppGenError):
    """Raised when the completion service fails or returns no usable text."""

    kind = ErrorKind.SERVICE


class ParseError(AppGenError):
    """Raised when the response text is not a valid generation document."""

    kind = ErrorKind.PARSE

    def __init__(self, message: str, raw_text: str = "") -> None:
        self.raw_text = raw_text
        super().__init__(message)


class MaterializeError(AppGenError):
    """Raised when the project files cannot be written."""

    kind = ErrorKind.IO

    def __init__(self, message: str, path: str | None = None) -> None:
        self.path = path
        super().__init__(message)


class ConfigError(Exception):
    """Raised at startup when required configuration is missing."""
