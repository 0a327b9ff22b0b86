"""
Error Recovery Module

Error classification, retry policy and request timeouts for calls that leave
the process (Solana RPC, market data APIs, the LLM).
"""

from .errors import (
    ErrorCategory,
    RecoverableError,
    UnrecoverableError,
    RequestTimeoutError,
    classify_error,
)
from .strategies import RetryConfig, RetryPolicy
from .timeouts import run_with_timeout

__all__ = [
    # Errors
    "ErrorCategory",
    "RecoverableError",
    "UnrecoverableError",
    "RequestTimeoutError",
    "classify_error",
    # Strategies
    "RetryConfig",
    "RetryPolicy",
    "run_with_timeout",
]
