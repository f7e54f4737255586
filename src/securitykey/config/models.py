"""Security key configuration models."""

from dataclasses import dataclass, fields
from enum import Enum
from typing import TYPE_CHECKING, Any

from securitykey.errors import create_error
from securitykey.types import KeyComparison, KeyPolicy

if TYPE_CHECKING:
    from .source import ConfigurationSource

# Names accepted for every string option
_STRING_OPTIONS = (
    "header_name",
    "query_name",
    "cookie_name",
    "forwarded_header_name",
    "configuration_name",
    "authentication_scheme",
    "claim_name_type",
    "claim_role_type",
    "identity_name",
)


@dataclass(frozen=True)
class SecurityKeyOptions:
    """Security key options.

    Created once at startup and read-only for the lifetime of the process.
    """

    # Where the presented key is looked up, in priority order
    header_name: str = "x-api-key"
    query_name: str = "x-api-key"
    cookie_name: str = "x-api-key"

    # Caller address header (comma-separated chain, first valid entry wins)
    forwarded_header_name: str = "X-Forwarded-For"

    # Configuration entry holding the allowed keys
    configuration_name: str = "SecurityKey"

    # Key matching
    key_comparison: KeyComparison = KeyComparison.ORDINAL
    key_policy: KeyPolicy = KeyPolicy.CONSTANT_TIME

    # Identity produced on success
    authentication_scheme: str = "SecurityKey"
    claim_name_type: str = "name"
    claim_role_type: str = "role"
    identity_name: str = "SecurityKey"

    # Optional memo of successful outcomes (None = disabled)
    claim_cache_seconds: float | None = None
    claim_cache_max_entries: int = 1024

    def __post_init__(self) -> None:
        """Validate option values."""
        for name in _STRING_OPTIONS:
            value = getattr(self, name)
            if not isinstance(value, str) or not value.strip():
                raise create_error("OPTIONS_INVALID", option_name=name, value=value)

        if not isinstance(self.key_comparison, KeyComparison):
            raise create_error(
                "OPTIONS_INVALID", option_name="key_comparison", value=self.key_comparison
            )
        if not isinstance(self.key_policy, KeyPolicy):
            raise create_error("OPTIONS_INVALID", option_name="key_policy", value=self.key_policy)

        cache_seconds = self.claim_cache_seconds
        if cache_seconds is not None and (
            isinstance(cache_seconds, bool)
            or not isinstance(cache_seconds, (int, float))
            or cache_seconds <= 0
        ):
            raise create_error(
                "OPTIONS_INVALID", option_name="claim_cache_seconds", value=cache_seconds
            )

        max_entries = self.claim_cache_max_entries
        if isinstance(max_entries, bool) or not isinstance(max_entries, int) or max_entries <= 0:
            raise create_error(
                "OPTIONS_INVALID", option_name="claim_cache_max_entries", value=max_entries
            )

    @property
    def claim_cache_enabled(self) -> bool:
        """Whether successful outcomes are memoized."""
        return self.claim_cache_seconds is not None


def _normalize_name(name: str) -> str:
    """Normalize an option or enum name: "HeaderName", "header_name" -> "headername"."""
    return name.replace("_", "").replace("-", "").lower()


_FIELD_NAMES = {_normalize_name(f.name): f.name for f in fields(SecurityKeyOptions)}


def _convert_enum(enum_type: type[Enum], option_name: str, value: Any) -> Enum:
    """Convert a config value to an enum member by value or by name."""
    if isinstance(value, enum_type):
        return value

    if isinstance(value, str):
        wanted = _normalize_name(value)
        for member in enum_type:
            if _normalize_name(member.value) == wanted or _normalize_name(member.name) == wanted:
                return member

    raise create_error("OPTIONS_INVALID", option_name=option_name, value=value)


def _convert_number(option_name: str, value: Any, number_type: type) -> Any:
    """Convert numeric strings (from env vars or flat config) to numbers."""
    if value is None or isinstance(value, bool):
        return value
    if isinstance(value, str):
        if not value.strip():
            return None
        try:
            return number_type(value)
        except ValueError as e:
            raise create_error("OPTIONS_INVALID", option_name=option_name, value=value) from e
    return value


def options_from_dict(data: dict[str, Any] | None) -> SecurityKeyOptions:
    """Build SecurityKeyOptions from a configuration mapping.

    Accepts snake_case ("header_name") or PascalCase ("HeaderName") keys, and
    enum values by value or name ("ordinal_ignore_case", "OrdinalIgnoreCase").

    Args:
        data: Option values (missing keys use defaults)

    Returns:
        SecurityKeyOptions instance

    Raises:
        SecurityKeyError: If a key is unknown or a value is invalid
    """
    kwargs: dict[str, Any] = {}

    for key, value in (data or {}).items():
        field_name = _FIELD_NAMES.get(_normalize_name(str(key)))
        if field_name is None:
            raise create_error("OPTIONS_INVALID", option_name=str(key), value=value)

        if field_name == "key_comparison":
            value = _convert_enum(KeyComparison, field_name, value)
        elif field_name == "key_policy":
            value = _convert_enum(KeyPolicy, field_name, value)
        elif field_name == "claim_cache_seconds":
            value = _convert_number(field_name, value, float)
        elif field_name == "claim_cache_max_entries":
            value = _convert_number(field_name, value, int)

        kwargs[field_name] = value

    return SecurityKeyOptions(**kwargs)


def options_from_source(
    source: "ConfigurationSource", section: str = "SecurityKeyOptions"
) -> SecurityKeyOptions:
    """Build SecurityKeyOptions from a configuration section.

    Args:
        source: Configuration source
        section: Section path holding the option values

    Returns:
        SecurityKeyOptions instance (defaults when the section is missing)
    """
    return options_from_dict(source.get_section(section).as_dict())
