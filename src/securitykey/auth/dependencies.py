"""FastAPI dependency requiring a security key on individual routes.

Usage:
    require_key = require_security_key(extractor, validator)

    @app.get("/users", dependencies=[Depends(require_key)])
    async def users(): ...

The dependency declares an API key header security scheme, so protected
routes show the key header in the OpenAPI document.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable

from fastapi import HTTPException, Request, Security
from fastapi.security import APIKeyHeader

from securitykey.config import SecurityKeyOptions
from securitykey.errors import create_error

from .extractor import RequestContext, SecurityKeyExtractorProtocol
from .middleware import STATE_ATTRIBUTE
from .models import AuthenticationOutcome
from .validator import SecurityKeyValidatorProtocol

logger = logging.getLogger(__name__)


def require_security_key(
    extractor: SecurityKeyExtractorProtocol,
    validator: SecurityKeyValidatorProtocol,
    options: SecurityKeyOptions | None = None,
) -> Callable[..., Awaitable[AuthenticationOutcome]]:
    """Create a route dependency that authenticates the request.

    Args:
        extractor: Resolves key and caller address from the request
        validator: Authenticates key and caller address
        options: Names the documented header and security scheme
            (defaults to SecurityKeyOptions())

    Returns:
        Async dependency returning the AuthenticationOutcome, raising
        HTTPException(401) when authentication fails
    """
    options = options or SecurityKeyOptions()

    api_key_header = APIKeyHeader(
        name=options.header_name,
        scheme_name=options.authentication_scheme,
        description=f"Security key sent in the '{options.header_name}' header",
        auto_error=False,
    )

    async def security_key_dependency(
        request: Request,
        _header_key: str | None = Security(api_key_header),
    ) -> AuthenticationOutcome:
        candidate = extractor.extract(RequestContext.from_request(request))
        outcome = await validator.authenticate(candidate.key, candidate.address)

        if not outcome.authenticated:
            logger.debug("Rejected %s %s", request.method, request.url.path)
            error = create_error("UNAUTHORIZED", header_name=options.header_name)
            raise HTTPException(
                status_code=error.http_status,
                detail=error.message,
                headers={"WWW-Authenticate": options.authentication_scheme},
            )

        setattr(request.state, STATE_ATTRIBUTE, outcome)
        return outcome

    return security_key_dependency
