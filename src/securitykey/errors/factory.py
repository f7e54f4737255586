"""Convenience helpers for creating SecurityKeyErrors."""

from typing import Any

from .errors import SecurityKeyError
from .registry import ErrorRegistry

# Convenience singleton
_default_registry: ErrorRegistry | None = None


def get_error_registry() -> ErrorRegistry:
    """Get default error registry singleton.

    Returns:
        Default ErrorRegistry instance
    """
    global _default_registry  # noqa: PLW0603
    if _default_registry is None:
        _default_registry = ErrorRegistry()
    return _default_registry


def create_error(code: str, **context: Any) -> SecurityKeyError:
    """Convenience function to create error.

    Args:
        code: Error code
        **context: Context variables for template interpolation

    Returns:
        SecurityKeyError instance
    """
    return get_error_registry().create(code, context)
