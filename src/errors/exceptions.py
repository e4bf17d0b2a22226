"""Custom exception types for Novus Academica.

This module defines a hierarchy of exceptions for categorizing errors
throughout the manuscript pipeline, enabling targeted retry, fallback
and degradation decisions.
"""

from typing import Any


class NovusError(Exception):
    """Base exception for all Novus Academica errors.

    Attributes:
        message: Human-readable error description
        details: Additional error context
        recoverable: Whether the session can continue after this error
    """

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        recoverable: bool = True,
    ):
        self.message = message
        self.details = details or {}
        self.recoverable = recoverable
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
            "recoverable": self.recoverable,
        }


# =============================================================================
# Provider Errors
# =============================================================================


class ProviderError(NovusError):
    """Error returned by the text generation provider.

    Base class for provider failures including rate limits,
    authentication failures and content policy rejections.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        tier: str | None = None,
        details: dict[str, Any] | None = None,
        recoverable: bool = True,
    ):
        details = details or {}
        if status_code:
            details["status_code"] = status_code
        if tier:
            details["tier"] = tier
        super().__init__(message, details, recoverable)
        self.status_code = status_code
        self.tier = tier


class RateLimitError(ProviderError):
    """Rate limit or quota exceeded at the provider.

    Attributes:
        retry_after: Seconds to wait before retrying (if provided)
    """

    def __init__(
        self,
        message: str,
        retry_after: float | None = None,
        status_code: int = 429,
        tier: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        details = details or {}
        if retry_after:
            details["retry_after"] = retry_after
        super().__init__(
            message,
            status_code=status_code,
            tier=tier,
            details=details,
            recoverable=True,  # Rate limits are always recoverable
        )
        self.retry_after = retry_after


class MalformedResponseError(NovusError):
    """Provider returned an empty body or output that fails to parse.

    Never coerced into a default value.
    """

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        raw_response: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        details = details or {}
        if operation:
            details["operation"] = operation
        if raw_response is not None:
            details["raw_response"] = raw_response[:500]  # Truncate
        super().__init__(message, details, recoverable=True)
        self.operation = operation


class TaskFailedError(NovusError):
    """A pipeline task failed on every tier it is allowed to use."""

    def __init__(
        self,
        message: str,
        operation: str,
        details: dict[str, Any] | None = None,
    ):
        details = details or {}
        details["operation"] = operation
        super().__init__(message, details, recoverable=True)
        self.operation = operation


# =============================================================================
# Input Validation Errors
# =============================================================================


class DocumentValidationError(NovusError):
    """Uploaded documents are missing, empty or unusable.

    Raised before any provider call is made.
    """

    def __init__(
        self,
        message: str,
        document: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        details = details or {}
        if document:
            details["document"] = document
        super().__init__(message, details, recoverable=True)
        self.document = document


class UnsupportedDocumentError(DocumentValidationError):
    """Uploaded file is not in one of the supported formats."""

    def __init__(
        self,
        message: str,
        document: str | None = None,
        mime_type: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        details = details or {}
        if mime_type:
            details["mime_type"] = mime_type
        super().__init__(message, document=document, details=details)
        self.mime_type = mime_type


class MissingAnalysisError(NovusError):
    """An operation needs the analysis blueprint, but none exists yet."""

    def __init__(
        self,
        message: str = "Run the manuscript analysis first.",
        operation: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        details = details or {}
        if operation:
            details["operation"] = operation
        super().__init__(message, details, recoverable=True)
        self.operation = operation


class WritingError(NovusError):
    """Error during section drafting.

    Raised when a drafting or editing operation names an unknown section.
    """

    def __init__(
        self,
        message: str,
        section: str | None = None,
        details: dict[str, Any] | None = None,
        recoverable: bool = True,
    ):
        details = details or {}
        if section:
            details["section"] = section
        super().__init__(message, details, recoverable)
        self.section = section
