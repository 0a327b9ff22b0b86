"""
Error Classification

Errors are classified as recoverable (worth retrying) or unrecoverable.
"""

from enum import Enum
from typing import Optional

import httpx


class ErrorCategory(str, Enum):
    """Categories of errors for recovery decisions."""

    NETWORK = "network"           # Network/connectivity issues
    RATE_LIMIT = "rate_limit"     # API rate limits
    TIMEOUT = "timeout"           # Operation timed out
    PROVIDER = "provider"         # Upstream returned an error
    VALIDATION = "validation"     # Input validation error
    UNKNOWN = "unknown"           # Unclassified error


class RecoverableError(Exception):
    """Base class for transient errors that can be retried."""

    def __init__(
        self,
        message: str,
        category: ErrorCategory = ErrorCategory.UNKNOWN,
        retry_after: Optional[float] = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category
        self.retry_after = retry_after


class UnrecoverableError(Exception):
    """Base class for errors a retry cannot fix."""

    def __init__(
        self,
        message: str,
        category: ErrorCategory = ErrorCategory.UNKNOWN,
    ):
        super().__init__(message)
        self.message = message
        self.category = category


class RequestTimeoutError(RecoverableError):
    """A request did not finish inside its time budget."""

    def __init__(self, timeout_seconds: float, operation: Optional[str] = None):
        label = operation or "Request"
        super().__init__(
            f"{label} timed out after {timeout_seconds:g}s",
            category=ErrorCategory.TIMEOUT,
        )
        self.timeout_seconds = timeout_seconds
        self.operation = operation


def classify_error(error: Exception) -> ErrorCategory:
    """Classify an exception raised by an outbound call."""
    if isinstance(error, (RecoverableError, UnrecoverableError)):
        return error.category

    if isinstance(error, httpx.TimeoutException):
        return ErrorCategory.TIMEOUT
    if isinstance(error, httpx.HTTPStatusError):
        status = error.response.status_code
        if status == 429:
            return ErrorCategory.RATE_LIMIT
        if status >= 500:
            return ErrorCategory.PROVIDER
        return ErrorCategory.VALIDATION
    if isinstance(error, httpx.TransportError):
        return ErrorCategory.NETWORK

    message = str(error).lower()
    if any(p in message for p in ("rate limit", "too many requests", "429")):
        return ErrorCategory.RATE_LIMIT
    if any(p in message for p in ("timeout", "timed out")):
        return ErrorCategory.TIMEOUT
    if any(p in message for p in ("connection", "network", "unreachable", "refused")):
        return ErrorCategory.NETWORK
    return ErrorCategory.UNKNOWN


def is_retryable(error: Exception) -> bool:
    if isinstance(error, UnrecoverableError):
        return False
    if isinstance(error, RecoverableError):
        return True
    # Client errors other than 429 will fail the same way again
    return classify_error(error) != ErrorCategory.VALIDATION
