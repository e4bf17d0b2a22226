"""Error handlers for classifying, logging and presenting failures.

This module maps exceptions onto the error taxonomy of the pipeline
(transient provider, permanent provider, malformed response, input
validation) and turns them into log records and user-visible text.
"""

import logging
import traceback
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from src.errors.exceptions import (
    DocumentValidationError,
    MalformedResponseError,
    MissingAnalysisError,
    NovusError,
    ProviderError,
    TaskFailedError,
)
from src.errors.policies import is_transient_error

logger = logging.getLogger(__name__)


class ErrorCategory(str, Enum):
    """Error taxonomy used for logging and presentation."""

    TRANSIENT_PROVIDER = "transient_provider"    # Rate limit, quota, overload
    PERMANENT_PROVIDER = "permanent_provider"    # Bad request, auth, policy rejection
    MALFORMED_RESPONSE = "malformed_response"    # Empty or unparseable output
    INPUT_VALIDATION = "input_validation"        # Rejected before any provider call
    TASK_FAILED = "task_failed"                  # Every allowed tier failed
    UNKNOWN = "unknown"


def classify_error(error: BaseException) -> ErrorCategory:
    """Detect the error category of an exception.

    Args:
        error: The exception

    Returns:
        Category for the error
    """
    if isinstance(error, (DocumentValidationError, MissingAnalysisError)):
        return ErrorCategory.INPUT_VALIDATION
    if isinstance(error, MalformedResponseError):
        return ErrorCategory.MALFORMED_RESPONSE
    if isinstance(error, TaskFailedError):
        return ErrorCategory.TASK_FAILED
    if is_transient_error(error):
        return ErrorCategory.TRANSIENT_PROVIDER
    if isinstance(error, ProviderError):
        return ErrorCategory.PERMANENT_PROVIDER
    if isinstance(error, NovusError):
        return ErrorCategory.UNKNOWN
    # Anything else raised by a provider client is not worth retrying
    return ErrorCategory.PERMANENT_PROVIDER


# =============================================================================
# Error Response Creation
# =============================================================================


def create_error_response(
    error: BaseException,
    operation: str | None = None,
    include_traceback: bool = False,
) -> dict[str, Any]:
    """Create a standardized error response dictionary.

    Args:
        error: The exception that occurred
        operation: Pipeline operation where the error occurred
        include_traceback: Whether to include full traceback

    Returns:
        Standardized error response dictionary
    """
    if isinstance(error, NovusError):
        response = {
            "error_type": error.__class__.__name__,
            "message": error.message,
            "details": error.details,
            "recoverable": error.recoverable,
        }
    else:
        response = {
            "error_type": error.__class__.__name__,
            "message": str(error),
            "details": {},
            "recoverable": True,  # Assume recoverable for unknown errors
        }

    response["category"] = classify_error(error).value
    if operation:
        response["operation"] = operation
    response["timestamp"] = datetime.now(timezone.utc).isoformat()

    if include_traceback:
        response["traceback"] = traceback.format_exc()

    return response


def user_facing_message(error: BaseException, operation: str | None = None) -> str:
    """Render an error as text suitable for showing to the user.

    Args:
        error: The exception that occurred
        operation: Human-readable operation name, e.g. "Analysis"

    Returns:
        One line of user-visible text
    """
    message = error.message if isinstance(error, NovusError) else str(error)
    message = message or error.__class__.__name__
    if operation:
        return f"{operation} failed: {message}"
    return message


# =============================================================================
# Error Logging
# =============================================================================


def log_error_with_context(
    error: BaseException,
    operation: str | None = None,
    context: dict[str, Any] | None = None,
    level: int = logging.ERROR,
) -> None:
    """Log an error with full context.

    Args:
        error: The exception that occurred
        operation: Pipeline operation where the error occurred
        context: Additional context to log
        level: Logging level (default: ERROR)
    """
    parts = [f"Error: {error.__class__.__name__}: {error}"]

    if operation:
        parts.append(f"Operation: {operation}")

    parts.append(f"Category: {classify_error(error).value}")

    if isinstance(error, NovusError) and error.details:
        parts.append(f"Details: {error.details}")

    if context:
        parts.append(f"Context: {context}")

    logger.log(level, " | ".join(parts))

    # Log traceback at debug level
    logger.debug(f"Traceback:\n{traceback.format_exc()}")
