"""Error handling for Novus Academica.

This module provides:
- Custom exception types for pipeline errors
- The retry governor and retry policy for provider calls
- Error handlers for classification, logging and user-visible messages
"""

from src.errors.exceptions import (
    NovusError,
    ProviderError,
    RateLimitError,
    MalformedResponseError,
    TaskFailedError,
    DocumentValidationError,
    UnsupportedDocumentError,
    MissingAnalysisError,
    WritingError,
)
from src.errors.policies import (
    RetryPolicy,
    NO_RETRY_POLICY,
    TRANSIENT_ERROR_MARKERS,
    attempt_with_retry,
    default_retry_policy,
    is_transient_error,
    run_with_policy,
)
from src.errors.handlers import (
    ErrorCategory,
    classify_error,
    create_error_response,
    log_error_with_context,
    user_facing_message,
)

__all__ = [
    # Exceptions
    "NovusError",
    "ProviderError",
    "RateLimitError",
    "MalformedResponseError",
    "TaskFailedError",
    "DocumentValidationError",
    "UnsupportedDocumentError",
    "MissingAnalysisError",
    "WritingError",
    # Policies
    "RetryPolicy",
    "NO_RETRY_POLICY",
    "TRANSIENT_ERROR_MARKERS",
    "attempt_with_retry",
    "default_retry_policy",
    "is_transient_error",
    "run_with_policy",
    # Handlers
    "ErrorCategory",
    "classify_error",
    "create_error_response",
    "log_error_with_context",
    "user_facing_message",
]
