"""Security key error types."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Error source categories."""

    CONFIGURATION = "CONFIGURATION"
    AUTHENTICATION = "AUTHENTICATION"
    VALIDATION = "VALIDATION"


@dataclass
class SecurityKeyError(Exception):
    """Structured error with context. Base exception for all securitykey errors.

    Only raised for programmer or operator errors detected at startup.
    Per-request failures are reported as boolean results or anonymous
    outcomes, never as exceptions.
    """

    # Identity
    code: str  # e.g., "CONFIG_SOURCE_MISSING"
    category: ErrorCategory

    # Messages
    message: str
    detail: str | None = None
    suggestion: str | None = None

    # Context
    http_status: int = 500
    option_name: str | None = None

    # Metadata
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    def __post_init__(self) -> None:
        """Set Exception message."""
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for API responses.

        Returns:
            Dictionary representation of the error
        """
        return {
            "code": self.code,
            "category": self.category.value,
            "message": self.message,
            "detail": self.detail,
            "suggestion": self.suggestion,
            "option_name": self.option_name,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass
class ErrorTemplate:
    """Template for creating errors."""

    code: str
    category: ErrorCategory
    message_template: str  # "Invalid value for option '{option_name}'"
    detail_template: str | None = None
    suggestion_template: str | None = None
    default_http_status: int = 500
