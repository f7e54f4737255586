"""Security key error handling - Structured errors with context."""

from .errors import ErrorCategory, ErrorTemplate, SecurityKeyError
from .factory import create_error, get_error_registry
from .registry import ErrorRegistry

__all__ = [
    # Core error types
    "SecurityKeyError",
    "ErrorCategory",
    "ErrorTemplate",
    # Registry
    "ErrorRegistry",
    # Convenience functions
    "get_error_registry",
    "create_error",
]
