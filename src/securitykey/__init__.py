"""securitykey - Static security key authentication with IP allow lists.

Authenticates requests against operator-configured keys, optionally limited
to allowed client addresses and CIDR networks.
"""

from securitykey.factory import SecurityKey, create_security_key

__version__ = "1.0.0"
__all__ = ["__version__", "SecurityKey", "create_security_key"]
