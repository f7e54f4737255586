"""Shared types for securitykey.

Import from here rather than submodules:
    from securitykey.types import KeyPolicy, LogLevel
"""

from .enums import KeyComparison, KeyPolicy, LogFormat, LogLevel

__all__ = [
    "KeyComparison",
    "KeyPolicy",
    "LogFormat",
    "LogLevel",
]
