"""Wiring of options, extractor and validator for a host application."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from securitykey.auth import (
    AuthenticationOutcome,
    SecurityKeyExtractor,
    SecurityKeyExtractorProtocol,
    SecurityKeyMiddleware,
    SecurityKeyValidatorProtocol,
    create_validator,
    require_security_key,
)
from securitykey.config import ConfigurationSource, SecurityKeyOptions, options_from_source
from securitykey.errors import create_error
from securitykey.logging import SecurityKeyLogger

# Section read for options when none are passed
OPTIONS_SECTION = "SecurityKeyOptions"


@dataclass(frozen=True)
class SecurityKey:
    """Options, extractor and validator configured for one application."""

    options: SecurityKeyOptions
    extractor: SecurityKeyExtractorProtocol
    validator: SecurityKeyValidatorProtocol

    def add_middleware(self, app: Any, exclude_paths: list[str] | None = None) -> None:
        """Require a valid key on every non-excluded path of a Starlette/FastAPI app."""
        app.add_middleware(
            SecurityKeyMiddleware,
            extractor=self.extractor,
            validator=self.validator,
            exclude_paths=exclude_paths,
            header_name=self.options.header_name,
        )

    def dependency(self) -> Callable[..., Awaitable[AuthenticationOutcome]]:
        """Route dependency requiring a valid key (use with fastapi.Depends)."""
        return require_security_key(self.extractor, self.validator, self.options)

    def is_valid(self, key: str | None) -> bool:
        """Key-only check for hosts without address context."""
        return self.validator.validate_key(key)


def create_security_key(
    source: ConfigurationSource,
    options: SecurityKeyOptions | None = None,
    logger: SecurityKeyLogger | None = None,
    extractor: SecurityKeyExtractorProtocol | None = None,
    validator: SecurityKeyValidatorProtocol | None = None,
) -> SecurityKey:
    """Create the security key services for an application.

    Args:
        source: Configuration source holding the allowed keys (required)
        options: Security key options; read from the "SecurityKeyOptions"
            section of source when not given
        logger: Optional event logger
        extractor: Replacement extractor (defaults to SecurityKeyExtractor)
        validator: Replacement validator (defaults to the options.key_policy one)

    Returns:
        SecurityKey bundle

    Raises:
        SecurityKeyError: If source is None or options are invalid
    """
    if source is None:
        raise create_error("CONFIG_SOURCE_MISSING", component="create_security_key")

    options = options or options_from_source(source, OPTIONS_SECTION)

    return SecurityKey(
        options=options,
        extractor=extractor or SecurityKeyExtractor(options),
        validator=validator or create_validator(source, options, logger),
    )
