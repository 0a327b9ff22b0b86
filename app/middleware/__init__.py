from .error_handlers import register_error_handlers
from .logging_middleware import RequestLoggingMiddleware

__all__ = [
    "RequestLoggingMiddleware",
    "register_error_handlers",
]
