"""Exception hierarchy shared by the engine, the backends and the CLI."""

from __future__ import annotations


class LangTranslatorError(Exception):
    """Base class for all langtranslator errors."""


class ConfigurationError(LangTranslatorError):
    """Missing directories, bad settings or missing credentials. Fatal to a run."""


class FileShapeError(LangTranslatorError):
    """A language file does not parse into a key/value tree."""


class FileIOError(LangTranslatorError):
    """A target directory or file could not be created or written."""


class ProviderError(LangTranslatorError):
    """A remote translation call failed.

    Carries the HTTP status code when one was received and a short
    diagnostic taken from the response body or the underlying exception.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    def __str__(self) -> str:
        if self.status_code is not None:
            return f"HTTP {self.status_code}: {self.message}"
        return self.message
