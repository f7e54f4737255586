"""Key-value configuration source.

Configuration is addressed by colon-separated paths, e.g.
``SecurityKey:AllowedKeys:0``. Nested dicts and lists, flat colon keys,
YAML files and environment variables all flatten to the same view. Path
lookups are case-insensitive.
"""

import os
import re
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

import yaml

from securitykey.errors import create_error

PATH_SEPARATOR = ":"
ENV_SEPARATOR = "__"


def resolve_env_vars(value: str) -> str:
    """Resolve environment variable references in string.

    Supports:
    - ${VAR} - Required, error if not set
    - ${VAR:-default} - With default value
    - ${VAR:?error message} - Required with custom error

    Args:
        value: String with potential env var references

    Returns:
        String with env vars resolved

    Raises:
        SecurityKeyError: If required var not set
    """
    # Pattern: ${VAR}, ${VAR:-default}, ${VAR:?error}
    pattern = r"\$\{([^}:]+)(?::([?-])([^}]*))?\}"

    def replacer(match: re.Match[str]) -> str:
        var_name = match.group(1)
        operator = match.group(2)  # '-' or '?' or None
        operand = match.group(3)  # default value or error message

        env_value = os.environ.get(var_name)

        if env_value is not None:
            return env_value

        if operator == "-":
            return operand or ""
        elif operator == "?":
            error_msg = operand or f"Required environment variable {var_name} not set"
            raise create_error("CONFIG_INVALID", detail=error_msg)
        else:
            raise create_error(
                "CONFIG_INVALID",
                detail=f"Required environment variable {var_name} not set",
            )

    return re.sub(pattern, replacer, value)


def _resolve_env_vars_recursive(data: Any) -> Any:
    """Recursively resolve env vars in data structure."""
    if isinstance(data, dict):
        return {k: _resolve_env_vars_recursive(v) for k, v in data.items()}
    elif isinstance(data, list):
        return [_resolve_env_vars_recursive(item) for item in data]
    elif isinstance(data, str):
        return resolve_env_vars(data)
    else:
        return data


def _join(*parts: str) -> str:
    return PATH_SEPARATOR.join(part for part in parts if part)


def _segment_sort_key(item: tuple[int, str]) -> tuple[int, int, int]:
    """Order numeric segments numerically, others by first appearance."""
    position, segment = item
    if segment.isdigit():
        return (0, int(segment), position)
    return (1, 0, position)


class ConfigurationSource:
    """Read-only, case-insensitive view over flattened configuration values."""

    def __init__(self, values: Mapping[str, Any] | None = None):
        """Initialize configuration source.

        Args:
            values: Flat mapping of colon paths to scalar values
        """
        # lowercased path -> value
        self._values: dict[str, Any] = {}
        # lowercased path -> path as first written
        self._names: dict[str, str] = {}

        for path, value in (values or {}).items():
            self._set(str(path), value)

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> "ConfigurationSource":
        """Create a source from nested dicts/lists and/or flat colon keys.

        Args:
            data: Configuration mapping

        Returns:
            ConfigurationSource instance
        """
        flat: dict[str, Any] = {}
        cls._flatten(data or {}, "", flat)
        return cls(flat)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "ConfigurationSource":
        """Create a source from a YAML file, resolving ${VAR} references.

        Args:
            path: Path to YAML file

        Returns:
            ConfigurationSource instance

        Raises:
            SecurityKeyError: If the file is missing, invalid or not a mapping
        """
        config_path = Path(path)
        if not config_path.exists():
            raise create_error(
                "CONFIG_INVALID",
                detail=f"Configuration file not found: {config_path}",
            )

        try:
            with config_path.open() as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise create_error(
                "CONFIG_INVALID",
                detail=f"Invalid YAML in config file: {e}",
            ) from e

        if not isinstance(data, dict):
            raise create_error(
                "CONFIG_INVALID",
                detail=f"Configuration file must contain a mapping: {config_path}",
            )

        return cls.from_dict(_resolve_env_vars_recursive(data))

    @classmethod
    def from_env(
        cls, environ: Mapping[str, str] | None = None, prefix: str = ""
    ) -> "ConfigurationSource":
        """Create a source from environment variables.

        ``SecurityKey__AllowedKeys__0=abc`` maps to ``SecurityKey:AllowedKeys:0``.
        When ``prefix`` is set, only variables starting with it are read and the
        prefix is stripped.

        Args:
            environ: Environment mapping (defaults to os.environ)
            prefix: Optional variable name prefix

        Returns:
            ConfigurationSource instance
        """
        environ = os.environ if environ is None else environ
        flat: dict[str, Any] = {}

        for name, value in environ.items():
            if prefix:
                if not name.lower().startswith(prefix.lower()):
                    continue
                name = name[len(prefix) :]
            path = name.replace(ENV_SEPARATOR, PATH_SEPARATOR).strip(PATH_SEPARATOR)
            if path:
                flat[path] = value

        return cls(flat)

    @classmethod
    def chain(cls, *sources: "ConfigurationSource") -> "ConfigurationSource":
        """Combine sources; later sources override earlier ones."""
        combined = cls()
        for source in sources:
            for key, value in source._values.items():
                combined._set(source._names[key], value)
        return combined

    @classmethod
    def _flatten(cls, data: Any, prefix: str, out: dict[str, Any]) -> None:
        if isinstance(data, Mapping):
            for key, value in data.items():
                cls._flatten(value, _join(prefix, str(key)), out)
        elif isinstance(data, (list, tuple)):
            for index, value in enumerate(data):
                cls._flatten(value, _join(prefix, str(index)), out)
        elif prefix:
            out[prefix] = data

    def _set(self, path: str, value: Any) -> None:
        path = path.strip(PATH_SEPARATOR)
        key = path.lower()
        self._names.setdefault(key, path)
        self._values[key] = value

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get_value(self, path: str) -> str | None:
        """Get the scalar value at a path as a string.

        Returns None when the path is missing, holds null, or is a section.
        """
        value = self._values.get(path.lower())
        if value is None:
            return None
        if isinstance(value, bool):
            return "true" if value else "false"
        return str(value)

    def children(self, path: str) -> list[str]:
        """Get the immediate child segment names under a path.

        Numeric (list index) segments sort numerically.
        """
        prefix = path.lower() + PATH_SEPARATOR if path else ""
        seen: dict[str, tuple[int, str]] = {}

        for key in self._values:
            if not key.startswith(prefix):
                continue
            original = self._names[key][len(prefix) :]
            segment = original.split(PATH_SEPARATOR, 1)[0]
            if segment and segment.lower() not in seen:
                seen[segment.lower()] = (len(seen), segment)

        return [segment for _, segment in sorted(seen.values(), key=_segment_sort_key)]

    def exists(self, path: str) -> bool:
        """Whether a path holds a non-null value or has children."""
        return self.get_value(path) is not None or bool(self.children(path))

    def get_list(self, path: str) -> list[str]:
        """Get the scalar values of a path's children in index order.

        A scalar stored directly at the path is returned as a single entry.
        """
        values = [self.get_value(_join(path, child)) for child in self.children(path)]
        result = [value for value in values if value is not None]
        if not result:
            single = self.get_value(path)
            if single is not None:
                result.append(single)
        return result

    def get_section(self, path: str) -> "ConfigurationSource":
        """Get a source rooted at a path."""
        prefix = path.lower() + PATH_SEPARATOR
        section = ConfigurationSource()
        for key, value in self._values.items():
            if key.startswith(prefix):
                section._set(self._names[key][len(prefix) :], value)
        return section

    def as_dict(self) -> dict[str, Any]:
        """Get the leaf values directly under the root as a dict."""
        return {
            self._names[key]: value
            for key, value in self._values.items()
            if PATH_SEPARATOR not in key
        }

    def paths(self) -> Iterable[str]:
        """Iterate over all stored paths."""
        return (self._names[key] for key in self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"ConfigurationSource({len(self._values)} values)"
