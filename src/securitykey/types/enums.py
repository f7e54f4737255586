"""Shared enumerations for securitykey."""

from enum import Enum


class LogLevel(str, Enum):
    """Log verbosity level."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"


class LogFormat(str, Enum):
    """Log output format."""

    COLORED = "colored"
    JSON = "json"


class KeyComparison(str, Enum):
    """String comparison used by the comparer key policy."""

    ORDINAL = "ordinal"  # Case-sensitive
    ORDINAL_IGNORE_CASE = "ordinal_ignore_case"


class KeyPolicy(str, Enum):
    """How presented keys are matched against configured keys."""

    CONSTANT_TIME = "constant_time"  # Byte-exact, timing-safe
    COMPARER = "comparer"  # Set lookup under KeyComparison
