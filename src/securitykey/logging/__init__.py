"""Security key logging - colored or JSON event logging."""

from .colors import CYAN, LIGHT_BLUE, MAGENTA, RED, RESET, YELLOW
from .logger import LogConfig, SecurityKeyLogger, redact_key

__all__ = [
    # Logger
    "SecurityKeyLogger",
    "LogConfig",
    "redact_key",
    # Colors
    "RESET",
    "RED",
    "YELLOW",
    "LIGHT_BLUE",
    "CYAN",
    "MAGENTA",
]
