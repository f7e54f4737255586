"""Security key authentication - key/address extraction, allow lists and validation.

- Extractor: presented key (header -> query -> cookie) and caller address
  (forwarded-for chain -> transport peer)
- Loader: legacy delimited string or structured key/address/network lists
- Validator: constant-time or comparer key policy plus address restriction
- Whitelist: IPv4/IPv6 address and CIDR matching
- Middleware/dependency: Starlette and FastAPI glue
"""

from .cache import ClaimCache
from .dependencies import require_security_key
from .extractor import RequestContext, SecurityKeyExtractor, SecurityKeyExtractorProtocol
from .loader import AllowListLoader, split_keys
from .middleware import SecurityKeyMiddleware, is_excluded_path, unauthorized_response
from .models import (
    AllowedKeySet,
    AllowedNetwork,
    AllowList,
    AuthenticationOutcome,
    CandidateRequest,
    Claim,
)
from .validator import (
    ComparerSecurityKeyValidator,
    SecurityKeyValidator,
    SecurityKeyValidatorProtocol,
    constant_time_equals,
    create_validator,
)
from .whitelist import is_address_allowed, is_in_network, parse_address, parse_network

__all__ = [
    # Models
    "AllowedKeySet",
    "AllowedNetwork",
    "AllowList",
    "AuthenticationOutcome",
    "CandidateRequest",
    "Claim",
    # Extraction
    "RequestContext",
    "SecurityKeyExtractor",
    "SecurityKeyExtractorProtocol",
    # Loading
    "AllowListLoader",
    "split_keys",
    # Validation
    "ComparerSecurityKeyValidator",
    "SecurityKeyValidator",
    "SecurityKeyValidatorProtocol",
    "constant_time_equals",
    "create_validator",
    "ClaimCache",
    # Address matching
    "is_address_allowed",
    "is_in_network",
    "parse_address",
    "parse_network",
    # Host glue
    "SecurityKeyMiddleware",
    "is_excluded_path",
    "require_security_key",
    "unauthorized_response",
]
