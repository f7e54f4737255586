"""Caller address checks against allowed addresses and CIDR networks.

Every function here sits on the request path and answers with a definite
boolean: malformed input is treated as "not allowed", never raised.
"""

from __future__ import annotations

import ipaddress
from collections.abc import Iterable, Sequence

from .models import AllowedNetwork, IPAddress

IPV4_ANY = ipaddress.IPv4Address("0.0.0.0")
IPV6_ANY = ipaddress.IPv6Address("::")


def parse_address(value: str | IPAddress | None) -> IPAddress | None:
    """Parse an IPv4 or IPv6 address.

    IPv6 scope ids ("fe80::1%eth0") are dropped.

    Args:
        value: Address text or an already-parsed address

    Returns:
        Parsed address, or None if missing or malformed
    """
    if value is None:
        return None
    if isinstance(value, (ipaddress.IPv4Address, ipaddress.IPv6Address)):
        if isinstance(value, ipaddress.IPv6Address) and value.scope_id:
            return ipaddress.IPv6Address(value.packed)
        return value
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None

    # Bracketed IPv6 as sent by some proxies: "[2001:db8::1]"
    if text.startswith("[") and text.endswith("]"):
        text = text[1:-1]
    # IPv6 scope id
    if ":" in text:
        text = text.split("%", 1)[0]

    try:
        return ipaddress.ip_address(text)
    except ValueError:
        return None


def parse_network(cidr: str | None) -> AllowedNetwork | None:
    """Parse "base/prefix" CIDR notation.

    The base address keeps its host bits; only the top ``prefix`` bits are
    ever compared.

    Args:
        cidr: Network in CIDR notation

    Returns:
        AllowedNetwork, or None if malformed (wrong part count, bad base
        address, non-integer or out-of-range prefix)
    """
    if not isinstance(cidr, str) or not cidr.strip():
        return None

    parts = cidr.strip().split("/")
    if len(parts) != 2:
        return None

    base = parse_address(parts[0])
    if base is None:
        return None

    prefix_text = parts[1].strip()
    if not (prefix_text.isascii() and prefix_text.isdigit()) or len(prefix_text) > 3:
        return None
    prefix_length = int(prefix_text)

    base_bytes = base.packed
    if prefix_length > len(base_bytes) * 8:
        return None

    return AllowedNetwork(cidr=cidr, base_bytes=base_bytes, prefix_length=prefix_length)


def _network_contains(network: AllowedNetwork, address: IPAddress) -> bool:
    """Compare the top ``prefix_length`` bits of address and network base."""
    base_bytes = network.base_bytes
    remote_bytes = address.packed

    # IPv4 vs IPv6 never match
    if len(base_bytes) != len(remote_bytes):
        return False

    full_bytes, remaining_bits = divmod(network.prefix_length, 8)

    if base_bytes[:full_bytes] != remote_bytes[:full_bytes]:
        return False

    if remaining_bits > 0:
        mask = ~(0xFF >> remaining_bits) & 0xFF
        if (base_bytes[full_bytes] & mask) != (remote_bytes[full_bytes] & mask):
            return False

    return True


def is_in_network(address: str | IPAddress | None, network: str | AllowedNetwork | None) -> bool:
    """Check whether an address falls within a CIDR network.

    Args:
        address: Address to check
        network: CIDR string (e.g. "192.168.1.0/24", "2001:db8::/32") or a
            pre-parsed AllowedNetwork

    Returns:
        True if the address shares the network's top prefix bits and address
        family; False otherwise, including for malformed input
    """
    parsed_address = parse_address(address)
    if parsed_address is None:
        return False

    parsed_network = network if isinstance(network, AllowedNetwork) else parse_network(network)
    if parsed_network is None:
        return False

    return _network_contains(parsed_network, parsed_address)


def _address_matches(address: IPAddress, allowed: Iterable[str | IPAddress]) -> bool:
    for entry in allowed:
        parsed = parse_address(entry)
        # Unparsable entries are ignored
        if parsed is not None and parsed == address:
            return True
    return False


def is_address_allowed(
    address: str | IPAddress | None,
    allowed_addresses: Sequence[str | IPAddress] | None,
    allowed_networks: Sequence[str | AllowedNetwork] | None,
) -> bool:
    """Check whether a caller address is allowed.

    With no addresses and no networks configured every caller is allowed.
    Otherwise a missing, malformed or unspecified ("0.0.0.0", "::") address
    is rejected, and the address must equal an allowed address (compared as
    IP values) or fall within an allowed network.

    Args:
        address: Caller address
        allowed_addresses: Allowed literal addresses
        allowed_networks: Allowed networks (CIDR strings or AllowedNetwork)

    Returns:
        True if allowed
    """
    if not allowed_addresses and not allowed_networks:
        return True

    parsed = parse_address(address)
    if parsed is None:
        return False

    if parsed in (IPV4_ANY, IPV6_ANY):
        return False

    if allowed_addresses and _address_matches(parsed, allowed_addresses):
        return True

    if allowed_networks and any(is_in_network(parsed, network) for network in allowed_networks):
        return True

    return False
