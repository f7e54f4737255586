"""Allow-list and authentication models.

- AllowedKeySet: configured keys plus their UTF-8 encodings
- AllowedNetwork: a parsed CIDR entry
- AllowList: everything loaded from configuration, built once
- CandidateRequest: what a request presented (key + caller address)
- AuthenticationOutcome: the decision plus a minimal identity
"""

from __future__ import annotations

from dataclasses import dataclass, field
from ipaddress import IPv4Address, IPv6Address

IPAddress = IPv4Address | IPv6Address


@dataclass(frozen=True)
class AllowedKeySet:
    """Configured keys and their byte forms (parallel tuples, same indexing)."""

    keys: tuple[str, ...] = ()
    key_bytes: tuple[bytes, ...] = ()

    @classmethod
    def from_keys(cls, keys: list[str] | tuple[str, ...]) -> AllowedKeySet:
        """Build a key set, encoding every key as UTF-8."""
        keys = tuple(keys)
        key_bytes = tuple(key.encode("utf-8", "surrogatepass") for key in keys)
        return cls(keys=keys, key_bytes=key_bytes)

    def __len__(self) -> int:
        return len(self.keys)

    def __bool__(self) -> bool:
        return bool(self.keys)


@dataclass(frozen=True)
class AllowedNetwork:
    """A CIDR entry parsed into base-address bytes and prefix length.

    ``len(base_bytes)`` is 4 for IPv4 and 16 for IPv6.
    """

    cidr: str
    base_bytes: bytes
    prefix_length: int

    @property
    def version(self) -> int:
        """IP version of the base address."""
        return 4 if len(self.base_bytes) == 4 else 6


@dataclass(frozen=True)
class AllowList:
    """Allowed keys, addresses and networks loaded from configuration."""

    keys: AllowedKeySet = field(default_factory=AllowedKeySet)
    addresses: tuple[str, ...] = ()
    networks: tuple[str, ...] = ()
    parsed_networks: tuple[AllowedNetwork, ...] = ()
    structured: bool = False

    @property
    def restricted(self) -> bool:
        """Whether callers are limited to the allowed addresses and networks."""
        return bool(self.addresses) or bool(self.networks)


@dataclass(frozen=True)
class CandidateRequest:
    """Key and caller address presented by a single request."""

    key: str | None = None
    address: IPAddress | None = None


@dataclass(frozen=True)
class Claim:
    """A single identity claim."""

    type: str
    value: str


@dataclass(frozen=True)
class AuthenticationOutcome:
    """Result of authenticating a request.

    A failed outcome carries no scheme and no claims (anonymous identity).
    """

    authenticated: bool = False
    scheme: str | None = None
    claims: tuple[Claim, ...] = ()
    name_claim_type: str = "name"
    role_claim_type: str = "role"

    @classmethod
    def anonymous(cls) -> AuthenticationOutcome:
        """Outcome for a request that did not authenticate."""
        return ANONYMOUS_OUTCOME

    @classmethod
    def success(
        cls,
        scheme: str,
        name: str,
        name_claim_type: str = "name",
        role_claim_type: str = "role",
    ) -> AuthenticationOutcome:
        """Outcome for an authenticated request with a single name claim."""
        return cls(
            authenticated=True,
            scheme=scheme,
            claims=(Claim(type=name_claim_type, value=name),),
            name_claim_type=name_claim_type,
            role_claim_type=role_claim_type,
        )

    @property
    def name(self) -> str | None:
        """Value of the first name claim, if any."""
        for claim in self.claims:
            if claim.type == self.name_claim_type:
                return claim.value
        return None

    @property
    def roles(self) -> list[str]:
        """Values of all role claims."""
        return [claim.value for claim in self.claims if claim.type == self.role_claim_type]

    def __bool__(self) -> bool:
        return self.authenticated


ANONYMOUS_OUTCOME = AuthenticationOutcome()
