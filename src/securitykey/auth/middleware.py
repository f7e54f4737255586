"""Security key middleware for Starlette/FastAPI applications.

Authentication flow:
1. Skip excluded paths
2. Extract key and caller address from the request
3. Authenticate against the configured allow list
4. Attach the AuthenticationOutcome to request.state.security_key, or
   answer 401 Unauthorized
"""

from __future__ import annotations

import logging

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from securitykey.errors import create_error

from .extractor import RequestContext, SecurityKeyExtractorProtocol
from .validator import SecurityKeyValidatorProtocol

logger = logging.getLogger(__name__)

# Paths excluded from authentication
DEFAULT_EXCLUDE_PATHS = [
    "/health",
    "/docs",
    "/redoc",
    "/openapi.json",
]

# Attribute of request.state holding the outcome
STATE_ATTRIBUTE = "security_key"


def unauthorized_response(header_name: str = "x-api-key") -> JSONResponse:
    """Return 401 Unauthorized response built from the UNAUTHORIZED error."""
    error = create_error("UNAUTHORIZED", header_name=header_name)
    return JSONResponse(
        status_code=error.http_status,
        content={
            "error": {
                "code": error.code,
                "message": error.message,
                "suggestion": error.suggestion,
            }
        },
    )


def is_excluded_path(path: str, exclude_paths: list[str]) -> bool:
    """Whether path is an excluded path or lies beneath one.

    Matching stops at segment boundaries: "/health" excludes "/health" and
    "/health/live" but not "/health-admin".
    """
    for excluded in exclude_paths:
        prefix = excluded.rstrip("/")
        if not prefix:
            return True
        if path == prefix or path.startswith(prefix + "/"):
            return True
    return False


class SecurityKeyMiddleware(BaseHTTPMiddleware):
    """Middleware requiring a valid security key on every non-excluded path."""

    def __init__(
        self,
        app: ASGIApp,
        extractor: SecurityKeyExtractorProtocol,
        validator: SecurityKeyValidatorProtocol,
        exclude_paths: list[str] | None = None,
        header_name: str = "x-api-key",
    ):
        """Initialize middleware.

        Args:
            app: ASGI application
            extractor: Resolves key and caller address from the request
            validator: Authenticates key and caller address
            exclude_paths: Paths to exclude from authentication, with
                everything beneath them
            header_name: Key header named in the 401 response

        Raises:
            ValueError: If extractor or validator is missing
        """
        super().__init__(app)
        if extractor is None:
            raise ValueError("extractor is required")
        if validator is None:
            raise ValueError("validator is required")

        self._extractor = extractor
        self._validator = validator
        self._exclude_paths = DEFAULT_EXCLUDE_PATHS if exclude_paths is None else exclude_paths
        self._header_name = header_name

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        """Process request with authentication."""
        path = request.url.path

        # Skip auth for excluded paths
        if is_excluded_path(path, self._exclude_paths):
            return await call_next(request)

        candidate = self._extractor.extract(RequestContext.from_request(request))
        outcome = await self._validator.authenticate(candidate.key, candidate.address)

        if not outcome.authenticated:
            logger.debug("Rejected %s %s from %s", request.method, path, candidate.address)
            return unauthorized_response(self._header_name)

        setattr(request.state, STATE_ATTRIBUTE, outcome)
        return await call_next(request)
