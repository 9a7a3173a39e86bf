"""
Error taxonomy for Comic Cover

Raised by the services and the client flow, translated to HTTP error
payloads by the API routes.
"""

from typing import Optional


class ComicCoverError(Exception):
    """Base class for all Comic Cover errors."""


class InputValidationError(ComicCoverError):
    """
    A required input is missing or malformed.

    Raised before any network call is made.
    """

    def __init__(self, message: str, missing: Optional[list] = None):
        super().__init__(message)
        self.missing = missing or []


class UploadError(ComicCoverError):
    """The storage collaborator rejected an upload or returned no URL."""


class GenerationError(ComicCoverError):
    """
    A prediction ended without a usable output.

    `status` is the last status observed: "failed", "canceled", or a
    non-terminal status when the poll budget ran out.
    """

    def __init__(self, status: str, message: Optional[str] = None, attempts: int = 0):
        self.status = status
        self.attempts = attempts
        super().__init__(message or f"Image generation failed or incomplete (status: {status})")


class DialogueParseError(ComicCoverError):
    """Model output did not contain a readable dialogue array."""
