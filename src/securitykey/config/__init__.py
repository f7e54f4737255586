"""Security key configuration - options and key-value configuration sources."""

from .models import SecurityKeyOptions, options_from_dict, options_from_source
from .source import ConfigurationSource, resolve_env_vars

__all__ = [
    # Options
    "SecurityKeyOptions",
    "options_from_dict",
    "options_from_source",
    # Sources
    "ConfigurationSource",
    "resolve_env_vars",
]
