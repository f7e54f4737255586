"""Security key validation.

Two key policies, chosen per deployment with SecurityKeyOptions.key_policy:

- CONSTANT_TIME (SecurityKeyValidator): presented key is UTF-8 encoded and
  compared byte-for-byte with every configured key of equal length using a
  constant-time compare. Only the key length can short-circuit.
- COMPARER (ComparerSecurityKeyValidator): set lookup under
  SecurityKeyOptions.key_comparison (case-sensitive or not). Faster and
  optionally case-insensitive, but not timing-safe.

Both apply the same address restriction when the structured configuration
lists allowed addresses or networks.
"""

from __future__ import annotations

import asyncio
import hmac
import threading
from typing import Protocol, runtime_checkable

from securitykey.config import ConfigurationSource, SecurityKeyOptions
from securitykey.logging import SecurityKeyLogger
from securitykey.types import KeyComparison, KeyPolicy

from .cache import ClaimCache
from .loader import AllowListLoader
from .models import AllowList, AuthenticationOutcome, IPAddress
from .whitelist import is_address_allowed, parse_address

# Encoding of keys for byte comparison; surrogatepass keeps odd input from raising
KEY_ENCODING = "utf-8"
KEY_ENCODING_ERRORS = "surrogatepass"


def constant_time_equals(left: bytes, right: bytes) -> bool:
    """Compare two byte buffers in time independent of where they differ."""
    return hmac.compare_digest(left, right)


def encode_key(key: str) -> bytes:
    """Encode a key for byte comparison."""
    return key.encode(KEY_ENCODING, KEY_ENCODING_ERRORS)


def fold_case(key: str) -> str:
    """Upper-case a key one character at a time.

    Characters whose upper case is longer than one character ("ß" -> "SS")
    are kept as they are, so keys only match when they differ by case.
    """
    return "".join(_upper_char(char) for char in key)


def _upper_char(char: str) -> str:
    upper = char.upper()
    return upper if len(upper) == 1 else char


def _is_blank(key: str | None) -> bool:
    return not isinstance(key, str) or not key.strip()


def _raise_if_cancelled(cancellation: asyncio.Event | None) -> None:
    if cancellation is not None and cancellation.is_set():
        raise asyncio.CancelledError("security key validation cancelled")


@runtime_checkable
class SecurityKeyValidatorProtocol(Protocol):
    """Decides whether a presented key (and caller address) is allowed."""

    def validate_key(self, key: str | None) -> bool:
        """Key-only check."""
        ...

    def authenticate_request(
        self, key: str | None, address: str | IPAddress | None = None
    ) -> AuthenticationOutcome:
        """Key and address check producing an identity."""
        ...

    async def validate(self, key: str | None, cancellation: asyncio.Event | None = None) -> bool:
        """Async key-only check."""
        ...

    async def authenticate(
        self,
        key: str | None,
        address: str | IPAddress | None = None,
        cancellation: asyncio.Event | None = None,
    ) -> AuthenticationOutcome:
        """Async key and address check producing an identity."""
        ...


class SecurityKeyValidator:
    """Default validator: constant-time key compare plus address restriction.

    The allow list is read from configuration once, on first use, and never
    changes afterwards. All methods are safe to call from many threads.
    """

    policy = KeyPolicy.CONSTANT_TIME

    def __init__(
        self,
        source: ConfigurationSource,
        options: SecurityKeyOptions | None = None,
        logger: SecurityKeyLogger | None = None,
        cache: ClaimCache | None = None,
    ):
        """Initialize validator.

        Args:
            source: Configuration source holding the allowed keys (required)
            options: Security key options (defaults to SecurityKeyOptions())
            logger: Event logger (defaults to SecurityKeyLogger())
            cache: Claim cache; created from options.claim_cache_seconds
                when not given

        Raises:
            SecurityKeyError: If source is None
        """
        self._options = options or SecurityKeyOptions()
        self._logger = logger or SecurityKeyLogger()
        self._loader = AllowListLoader(source, self._options, self._logger)

        if cache is None and self._options.claim_cache_enabled:
            cache = ClaimCache(
                ttl_seconds=self._options.claim_cache_seconds,
                max_entries=self._options.claim_cache_max_entries,
            )
        self._cache = cache

        self._allow_list: AllowList | None = None
        self._lock = threading.Lock()

    @property
    def options(self) -> SecurityKeyOptions:
        return self._options

    @property
    def cache(self) -> ClaimCache | None:
        return self._cache

    @property
    def allow_list(self) -> AllowList:
        """The allow list, loaded exactly once on first access."""
        return self._load_once()

    def _load_once(self) -> AllowList:
        allow_list = self._allow_list
        if allow_list is None:
            with self._lock:
                if self._allow_list is None:
                    loaded = self._loader.load()
                    self._on_loaded(loaded)
                    self._allow_list = loaded
                allow_list = self._allow_list
        return allow_list

    def _on_loaded(self, allow_list: AllowList) -> None:
        """Hook for subclasses to derive lookup state; runs once, under the lock."""

    # ------------------------------------------------------------------
    # Sync API
    # ------------------------------------------------------------------

    def validate_key(self, key: str | None) -> bool:
        """Check a presented key against the configured keys.

        None, empty and whitespace-only keys are rejected without comparing.
        """
        if _is_blank(key):
            return False
        return self._match_key(key)

    def _match_key(self, key: str) -> bool:
        candidate = encode_key(key)
        matched = False

        # Scan the whole set; only unequal lengths skip the compare
        for allowed in self.allow_list.keys.key_bytes:
            if len(allowed) != len(candidate):
                continue
            if constant_time_equals(candidate, allowed):
                matched = True

        return matched

    def check_address(self, address: str | IPAddress | None) -> bool:
        """Check a caller address against the allowed addresses and networks."""
        allow_list = self.allow_list
        if not allow_list.restricted:
            return True

        # Every configured network was malformed: nothing can match
        if not allow_list.addresses and not allow_list.parsed_networks:
            return False

        return is_address_allowed(address, allow_list.addresses, allow_list.parsed_networks)

    def authenticate_request(
        self, key: str | None, address: str | IPAddress | None = None
    ) -> AuthenticationOutcome:
        """Check key and caller address and produce an identity.

        Args:
            key: Presented key
            address: Caller address (only consulted when restricted)

        Returns:
            Authenticated outcome with one name claim, or the anonymous outcome
        """
        if _is_blank(key):
            self._logger.invalid_key(key)
            return AuthenticationOutcome.anonymous()

        parsed_address = parse_address(address)
        cache_key = (key, parsed_address)

        if self._cache is not None:
            cached = self._cache.get(cache_key)
            if cached is not None:
                return cached

        if not self._match_key(key):
            self._logger.invalid_key(key)
            return AuthenticationOutcome.anonymous()

        if not self.check_address(parsed_address):
            self._logger.address_rejected(address)
            return AuthenticationOutcome.anonymous()

        outcome = AuthenticationOutcome.success(
            scheme=self._options.authentication_scheme,
            name=self._options.identity_name,
            name_claim_type=self._options.claim_name_type,
            role_claim_type=self._options.claim_role_type,
        )

        if self._cache is not None:
            self._cache.set(cache_key, outcome)

        return outcome

    # ------------------------------------------------------------------
    # Async API
    # ------------------------------------------------------------------

    async def validate(self, key: str | None, cancellation: asyncio.Event | None = None) -> bool:
        """Async form of validate_key.

        Raises:
            asyncio.CancelledError: If cancellation is already set
        """
        _raise_if_cancelled(cancellation)
        return self.validate_key(key)

    async def authenticate(
        self,
        key: str | None,
        address: str | IPAddress | None = None,
        cancellation: asyncio.Event | None = None,
    ) -> AuthenticationOutcome:
        """Async form of authenticate_request.

        Raises:
            asyncio.CancelledError: If cancellation is already set
        """
        _raise_if_cancelled(cancellation)
        return self.authenticate_request(key, address)


class ComparerSecurityKeyValidator(SecurityKeyValidator):
    """Validator using a set lookup under the configured key comparison."""

    policy = KeyPolicy.COMPARER

    def __init__(
        self,
        source: ConfigurationSource,
        options: SecurityKeyOptions | None = None,
        logger: SecurityKeyLogger | None = None,
        cache: ClaimCache | None = None,
    ):
        super().__init__(source, options, logger, cache)
        self._keys: frozenset[str] = frozenset()

    def _normalize(self, key: str) -> str:
        if self._options.key_comparison == KeyComparison.ORDINAL_IGNORE_CASE:
            return fold_case(key)
        return key

    def _on_loaded(self, allow_list: AllowList) -> None:
        self._keys = frozenset(self._normalize(key) for key in allow_list.keys.keys)

    def _match_key(self, key: str) -> bool:
        self._load_once()
        return self._normalize(key) in self._keys


def create_validator(
    source: ConfigurationSource,
    options: SecurityKeyOptions | None = None,
    logger: SecurityKeyLogger | None = None,
) -> SecurityKeyValidator:
    """Create the validator for options.key_policy.

    Args:
        source: Configuration source holding the allowed keys
        options: Security key options (defaults to SecurityKeyOptions())
        logger: Optional event logger

    Returns:
        SecurityKeyValidator or ComparerSecurityKeyValidator
    """
    options = options or SecurityKeyOptions()
    if options.key_policy == KeyPolicy.COMPARER:
        return ComparerSecurityKeyValidator(source, options, logger)
    return SecurityKeyValidator(source, options, logger)
