"""Security key and caller address extraction.

Key lookup order: header -> query string -> cookie. The first source that
carries the configured name wins, even when its value is empty.

Caller address: first entry of the forwarded-for chain that parses as an IP,
falling back to the transport peer address.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from securitykey.config import SecurityKeyOptions

from .models import CandidateRequest, IPAddress
from .whitelist import parse_address

if TYPE_CHECKING:
    from starlette.requests import HTTPConnection


def _lower_keys(values: Mapping[str, str] | None) -> dict[str, str]:
    return {str(k).lower(): v for k, v in (values or {}).items()}


@dataclass(frozen=True)
class RequestContext:
    """Framework-neutral view of the parts of a request the extractor reads.

    Header names are case-insensitive; query and cookie names are not.
    """

    headers: Mapping[str, str] = field(default_factory=dict)
    query_params: Mapping[str, str] = field(default_factory=dict)
    cookies: Mapping[str, str] = field(default_factory=dict)
    client_host: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "headers", _lower_keys(self.headers))

    def header(self, name: str) -> str | None:
        """Get a header value by case-insensitive name."""
        return self.headers.get(name.lower())

    @classmethod
    def from_request(cls, request: HTTPConnection) -> RequestContext:
        """Build a context from a Starlette request or websocket.

        Repeated header lines are joined with ", " in arrival order.
        """
        client = request.client
        return cls(
            headers={
                name: ", ".join(request.headers.getlist(name))
                for name in dict.fromkeys(request.headers.keys())
            },
            query_params=dict(request.query_params.items()),
            cookies=dict(request.cookies),
            client_host=client.host if client else None,
        )


@runtime_checkable
class SecurityKeyExtractorProtocol(Protocol):
    """Resolves the presented key and the caller address from a request."""

    def get_key(self, request: RequestContext | None) -> str | None:
        """Get the presented key, or None if the request carries none."""
        ...

    def get_address(self, request: RequestContext | None) -> IPAddress | None:
        """Get the caller address, or None if unavailable."""
        ...

    def extract(self, request: RequestContext | None) -> CandidateRequest:
        """Get key and caller address together."""
        ...


class SecurityKeyExtractor:
    """Default extractor driven by SecurityKeyOptions names."""

    def __init__(self, options: SecurityKeyOptions | None = None):
        """Initialize extractor.

        Args:
            options: Names of the header, query parameter, cookie and
                forwarded-for header (defaults to SecurityKeyOptions())
        """
        self._options = options or SecurityKeyOptions()

    @property
    def options(self) -> SecurityKeyOptions:
        return self._options

    def get_key(self, request: RequestContext | None) -> str | None:
        if request is None:
            return None

        header_key = request.header(self._options.header_name)
        if header_key is not None:
            return header_key

        query_key = request.query_params.get(self._options.query_name)
        if query_key is not None:
            return query_key

        return request.cookies.get(self._options.cookie_name)

    def get_address(self, request: RequestContext | None) -> IPAddress | None:
        if request is None:
            return None

        forwarded = request.header(self._options.forwarded_header_name)
        if forwarded and forwarded.strip():
            for entry in forwarded.split(","):
                address = parse_address(entry)
                if address is not None:
                    return address

        return parse_address(request.client_host)

    def extract(self, request: RequestContext | None) -> CandidateRequest:
        return CandidateRequest(key=self.get_key(request), address=self.get_address(request))
