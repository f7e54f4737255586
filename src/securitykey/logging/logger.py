"""Security key logger - colored or JSON event logging for key validation."""

import json
import sys
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, TextIO

from securitykey.logging.colors import CYAN, LIGHT_BLUE, MAGENTA, RED, RESET, YELLOW
from securitykey.types import LogFormat, LogLevel

COMPONENT = "securitykey"

# Characters of a presented key that may appear in logs
KEY_PREFIX_LENGTH = 4


def redact_key(key: str | None) -> str:
    """Return a log-safe representation of a presented key.

    Args:
        key: Presented key (may be None)

    Returns:
        "<none>" for a missing key, otherwise the first characters followed by "..."
    """
    if key is None:
        return "<none>"
    if len(key) <= KEY_PREFIX_LENGTH:
        return "..."
    return key[:KEY_PREFIX_LENGTH] + "..."


@dataclass
class LogConfig:
    """Logger configuration."""

    level: LogLevel = LogLevel.INFO
    format: LogFormat = LogFormat.COLORED
    show_context: bool = True
    truncate_at: int = 200
    output: TextIO = field(default=sys.stderr)


class SecurityKeyLogger:
    """Event logger for key loading and validation.

    Never receives full keys: callers pass counts, configuration names and
    redacted prefixes only.
    """

    def __init__(self, config: LogConfig | None = None):
        """Initialize logger with configuration.

        Args:
            config: Logger configuration (defaults to LogConfig())
        """
        self.config = config or LogConfig()
        self._level_order = {
            LogLevel.DEBUG: 0,
            LogLevel.INFO: 1,
            LogLevel.WARN: 2,
            LogLevel.ERROR: 3,
        }

    def configure(self, config: LogConfig) -> None:
        """Replace the logger configuration."""
        self.config = config

    def key_usage(self, configuration_name: str, key_count: int, structured: bool) -> None:
        """Log which configuration entry the keys were loaded from."""
        context = {
            "event": "key_usage",
            "configuration_name": configuration_name,
            "key_count": key_count,
            "format": "structured" if structured else "legacy",
        }
        message = f"Using {key_count} security key(s) from configuration '{configuration_name}'"
        self._log(LogLevel.DEBUG, message, context)

    def no_keys(self, configuration_name: str) -> None:
        """Log that no keys were configured; every validation will fail."""
        context = {"event": "no_keys", "configuration_name": configuration_name}
        message = (
            f"No security keys found in configuration '{configuration_name}', "
            "all requests will be rejected"
        )
        self._log(LogLevel.WARN, message, context)

    def invalid_network(self, network: str) -> None:
        """Log a configured network entry that is not valid CIDR."""
        context = {"event": "invalid_network", "network": network}
        message = f"Ignoring invalid network '{network}'"
        self._log(LogLevel.WARN, message, context)

    def invalid_key(self, key: str | None) -> None:
        """Log a rejected key (redacted)."""
        key_prefix = redact_key(key)
        context = {"event": "invalid_key", "key_prefix": key_prefix}
        message = f"Invalid security key '{key_prefix}'"
        self._log(LogLevel.WARN, message, context)

    def address_rejected(self, address: Any) -> None:
        """Log a caller address outside the allowed addresses and networks."""
        address_text = str(address) if address is not None else "<none>"
        context = {"event": "address_rejected", "address": address_text}
        message = f"Address '{address_text}' is not allowed"
        self._log(LogLevel.WARN, message, context)

    def _should_log(self, level: LogLevel) -> bool:
        """Check if a log level should be logged."""
        return self._level_order.get(level, 0) >= self._level_order.get(self.config.level, 1)

    def _log(self, level: LogLevel, message: str, context: dict[str, Any] | None = None) -> None:
        """Internal logging method."""
        if not self._should_log(level):
            return

        if self.config.format == LogFormat.JSON:
            self._log_json(level, message, context)
        else:
            self._log_colored(level, message, context)

    def _log_json(self, level: LogLevel, message: str, context: dict[str, Any] | None) -> None:
        """Log in JSON format."""
        log_entry = {
            "timestamp": datetime.now(UTC).isoformat().replace("+00:00", "Z"),
            "level": level.value,
            "component": COMPONENT,
            "message": message,
        }
        if context:
            log_entry.update(context)

        print(json.dumps(log_entry), file=self.config.output)

    def _log_colored(self, level: LogLevel, message: str, context: dict[str, Any] | None) -> None:
        """Log in colored format."""
        level_colors = {
            LogLevel.DEBUG: LIGHT_BLUE,
            LogLevel.INFO: CYAN,
            LogLevel.WARN: YELLOW,
            LogLevel.ERROR: RED,
        }
        color = level_colors.get(level, RESET)

        # Format: [SECURITYKEY] message
        output = f"{MAGENTA}[{COMPONENT.upper()}]{RESET} {color}{message}{RESET}"

        if context and self.config.show_context:
            context_str = str(context)
            if len(context_str) > self.config.truncate_at:
                context_str = context_str[: self.config.truncate_at] + "..."
            output += f" {LIGHT_BLUE}{context_str}{RESET}"

        print(output, file=self.config.output)
