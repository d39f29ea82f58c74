"""Error types for the Lingua Learn service.

Every error raised by the service layer derives from :class:`LinguaLearnError`
and carries the HTTP status code, a human readable message and optional
field errors. The exception handlers render them into the JSON error envelope.
"""

from __future__ import annotations

from typing import Any, Optional


class LinguaLearnError(Exception):
    """Base error for all Lingua Learn exceptions."""

    status_code: int = 400
    default_message: str = "Request could not be processed."

    def __init__(self, message: Optional[str] = None, errors: Any = None) -> None:
        self.message = message or self.default_message
        self.errors = errors
        super().__init__(self.message)


class ContentRuleError(LinguaLearnError):
    """Raised when an operation breaks a content rule (e.g. deleting published content)."""

    status_code = 400


class AuthenticationError(LinguaLearnError):
    """Raised when credentials or a bearer token are missing or invalid."""

    status_code = 401
    default_message = "Unauthenticated."


class AuthorizationError(LinguaLearnError):
    """Raised when the authenticated user may not perform the action."""

    status_code = 403
    default_message = "This action is unauthorized."


class NotFoundError(LinguaLearnError):
    """Raised when a requested row does not exist."""

    status_code = 404
    default_message = "Resource not found"

    @classmethod
    def for_entity(cls, entity: str, entity_id: Any) -> "NotFoundError":
        return cls(f"{entity} {entity_id} not found")


class UnsupportedMediaTypeError(LinguaLearnError):
    """Raised when an upload's mime type is not accepted by its collection."""

    status_code = 415
    default_message = "Unsupported media type."


class ValidationFailedError(LinguaLearnError):
    """Raised when input fails validation; ``errors`` maps field paths to messages."""

    status_code = 422
    default_message = "The given data was invalid."

    def __init__(self, errors: dict[str, list[str]], message: Optional[str] = None) -> None:
        super().__init__(message, errors)

    @classmethod
    def single(cls, field: str, message: str) -> "ValidationFailedError":
        return cls({field: [message]}, message)


class AudioProcessingError(LinguaLearnError):
    """Raised when an audio file cannot be analysed or transcoded."""

    status_code = 422
    default_message = "Failed to process audio file."
