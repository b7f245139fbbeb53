"""Error types raised by the selog core."""

from __future__ import annotations


class SelogError(Exception):
    """Base class for all selog failures."""


class ConfigurationMissing(SelogError):
    """A required persisted value is absent and could not be collected."""


class ReferenceNotFound(SelogError):
    """A commit or tag reference does not resolve in the repository."""

    def __init__(self, reference: str, detail: str = "") -> None:
        message = f"unknown commit or tag '{reference}'"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
        self.reference = reference


class SelectionAborted(SelogError):
    """The interactive picker produced no selection."""


class OptionalSinkUnavailable(SelogError):
    """An optional output sink (clipboard, browser, previewer) is missing."""


class MalformedArguments(SelogError):
    """The command line could not be parsed."""
