"""ANSI color codes for terminal output.

All colors use the 256-color palette for better compatibility and consistency.

Usage:
    from securitykey.logging.colors import YELLOW, RESET

    print(f"{YELLOW}No security keys configured{RESET}")
"""

RESET = "\033[0m"

RED = "\033[38;5;196m"  # Errors - bright red
YELLOW = "\033[38;5;226m"  # Warnings - bright yellow
LIGHT_BLUE = "\033[38;5;153m"  # Debug and context - light blue
CYAN = "\033[38;5;51m"  # Info - cyan
MAGENTA = "\033[38;5;201m"  # Component tag - magenta

__all__ = [
    "RESET",
    "RED",
    "YELLOW",
    "LIGHT_BLUE",
    "CYAN",
    "MAGENTA",
]
