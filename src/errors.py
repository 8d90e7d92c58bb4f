"""Error types raised by the chat analysis pipeline.

Input errors (:class:`ContentValidationError`) map to HTTP 400.  Contract
violations from the generative backend (:class:`BackendResponseError`) are
never retried.  Transient backend failures are the SDKs' own exceptions and
are classified in :mod:`src.extraction.retry`.
"""

from __future__ import annotations


class ContentValidationError(ValueError):
    """The submitted transcript cannot be analysed."""


class InvalidFormatError(ContentValidationError):
    """Content is missing or is not text."""

    def __init__(self, message: str = "Invalid content format") -> None:
        super().__init__(message)


class TooShortError(ContentValidationError):
    """Content is below the minimum length for meaningful analysis."""

    def __init__(self, message: str = "Content too short for meaningful analysis") -> None:
        super().__init__(message)


class BackendResponseError(ValueError):
    """The generative backend answered, but not with what was asked for."""


class EmptyResponseError(BackendResponseError):
    """The backend returned no text."""


class MalformedResponseError(BackendResponseError):
    """The backend output is not valid JSON."""


class InvalidConceptsFormatError(BackendResponseError):
    """Concept extraction did not return a JSON array of strings."""

    def __init__(self, message: str = "Invalid concepts format") -> None:
        super().__init__(message)


class InvalidResponseStructureError(BackendResponseError):
    """A thread summary does not match the ThreadDiscussion schema."""

    def __init__(self, message: str = "Invalid response structure") -> None:
        super().__init__(message)
