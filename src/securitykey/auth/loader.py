"""Allow-list loading from configuration.

Two formats are accepted under the configured name (default "SecurityKey"):

Legacy, a single delimited string (no address restriction possible):

    SecurityKey: "key1;key2,key3"

Structured, independent lists:

    SecurityKey:
      AllowedKeys: [key1, key2]
      AllowedAddresses: [10.0.0.1]
      AllowedNetworks: [192.168.0.0/16]

The structured format is selected when an "AllowedKeys" entry exists.
"""

from __future__ import annotations

import re

from securitykey.config import ConfigurationSource, SecurityKeyOptions
from securitykey.errors import create_error
from securitykey.logging import SecurityKeyLogger

from .models import AllowedKeySet, AllowedNetwork, AllowList
from .whitelist import parse_network

ALLOWED_KEYS = "AllowedKeys"
ALLOWED_ADDRESSES = "AllowedAddresses"
ALLOWED_NETWORKS = "AllowedNetworks"

LEGACY_DELIMITERS = re.compile(r"[;,]")


def split_keys(value: str | None) -> list[str]:
    """Split a legacy key string on ';' or ',', trimming and dropping empties."""
    if not value:
        return []
    return [item.strip() for item in LEGACY_DELIMITERS.split(value) if item.strip()]


def _clean(values: list[str]) -> list[str]:
    return [value.strip() for value in values if value and value.strip()]


class AllowListLoader:
    """Parse configuration into an AllowList."""

    def __init__(
        self,
        source: ConfigurationSource,
        options: SecurityKeyOptions | None = None,
        logger: SecurityKeyLogger | None = None,
    ):
        """Initialize loader.

        Args:
            source: Configuration source (required)
            options: Security key options (defaults to SecurityKeyOptions())
            logger: Optional SecurityKeyLogger instance

        Raises:
            SecurityKeyError: If source is None
        """
        if source is None:
            raise create_error("CONFIG_SOURCE_MISSING", component=type(self).__name__)

        self._source = source
        self._options = options or SecurityKeyOptions()
        self._logger = logger

    def is_structured(self) -> bool:
        """Whether the configuration uses the structured list format."""
        return self._source.exists(self._path(ALLOWED_KEYS))

    def load(self) -> AllowList:
        """Load keys, addresses and networks.

        Never raises for missing or malformed entries: zero keys yields an
        empty key set (every validation fails) and bad networks never match.

        Returns:
            AllowList instance
        """
        configuration_name = self._options.configuration_name

        if self.is_structured():
            keys = _clean(self._source.get_list(self._path(ALLOWED_KEYS)))
            addresses = _clean(self._source.get_list(self._path(ALLOWED_ADDRESSES)))
            networks = _clean(self._source.get_list(self._path(ALLOWED_NETWORKS)))
            structured = True
        else:
            keys = split_keys(self._source.get_value(configuration_name))
            addresses = []
            networks = []
            structured = False

        if self._logger:
            self._logger.key_usage(configuration_name, len(keys), structured)
            if not keys:
                self._logger.no_keys(configuration_name)

        return AllowList(
            keys=AllowedKeySet.from_keys(keys),
            addresses=tuple(addresses),
            networks=tuple(networks),
            parsed_networks=self._parse_networks(networks),
            structured=structured,
        )

    def _parse_networks(self, networks: list[str]) -> tuple[AllowedNetwork, ...]:
        parsed: list[AllowedNetwork] = []
        for network in networks:
            allowed = parse_network(network)
            if allowed is None:
                if self._logger:
                    self._logger.invalid_network(network)
                continue
            parsed.append(allowed)
        return tuple(parsed)

    def _path(self, name: str) -> str:
        return f"{self._options.configuration_name}:{name}"
