"""Tests for the security key middleware and route dependency."""

import json

import pytest
from fastapi import Depends, FastAPI, Request
from starlette.testclient import TestClient

from securitykey.auth import (
    AuthenticationOutcome,
    SecurityKeyExtractor,
    SecurityKeyMiddleware,
    SecurityKeyValidator,
    is_excluded_path,
    require_security_key,
    unauthorized_response,
)
from securitykey.config import SecurityKeyOptions


def create_test_app() -> FastAPI:
    """Create a minimal test app."""
    app = FastAPI()

    @app.get("/test")
    async def test_endpoint(request: Request) -> dict:
        outcome = getattr(request.state, "security_key", None)
        return {"name": outcome.name if outcome else None}

    @app.get("/health")
    async def health() -> dict:
        return {"status": "ok"}

    return app


@pytest.fixture
def legacy_app(legacy_source) -> FastAPI:
    app = create_test_app()
    app.add_middleware(
        SecurityKeyMiddleware,
        extractor=SecurityKeyExtractor(),
        validator=SecurityKeyValidator(legacy_source),
    )
    return app


@pytest.fixture
def restricted_app(structured_source) -> FastAPI:
    app = create_test_app()
    app.add_middleware(
        SecurityKeyMiddleware,
        extractor=SecurityKeyExtractor(),
        validator=SecurityKeyValidator(structured_source),
    )
    return app


class TestUnauthorizedResponse:
    """Tests for unauthorized_response."""

    def test_body(self):
        response = unauthorized_response()
        assert response.status_code == 401
        assert json.loads(response.body) == {
            "error": {
                "code": "UNAUTHORIZED",
                "message": "Invalid or missing security key",
                "suggestion": "Send a valid key in the 'x-api-key' header",
            }
        }

    def test_names_header(self):
        body = json.loads(unauthorized_response("X-Service-Key").body)
        assert body["error"]["suggestion"] == "Send a valid key in the 'X-Service-Key' header"


class TestIsExcludedPath:
    """Tests for is_excluded_path."""

    @pytest.mark.parametrize(
        "path", ["/health", "/health/", "/health/live", "/docs/oauth2-redirect"]
    )
    def test_excluded(self, path):
        assert is_excluded_path(path, ["/health", "/docs"])

    @pytest.mark.parametrize(
        "path", ["/health-admin", "/health-admin/secrets", "/docsecret", "/redocs-internal", "/"]
    )
    def test_not_excluded(self, path):
        assert not is_excluded_path(path, ["/health", "/docs", "/redoc"])

    def test_trailing_slash_in_config(self):
        assert is_excluded_path("/status", ["/status/"])
        assert not is_excluded_path("/status-page", ["/status/"])

    def test_root_excludes_everything(self):
        assert is_excluded_path("/anything", ["/"])


class TestSecurityKeyMiddleware:
    """Tests for SecurityKeyMiddleware."""

    def test_allows_valid_header_key(self, legacy_app):
        response = TestClient(legacy_app).get("/test", headers={"x-api-key": "short"})
        assert response.status_code == 200
        assert response.json() == {"name": "SecurityKey"}

    def test_allows_valid_query_key(self, legacy_app):
        response = TestClient(legacy_app).get("/test?x-api-key=short")
        assert response.status_code == 200

    def test_allows_valid_cookie_key(self, legacy_app):
        client = TestClient(legacy_app)
        client.cookies.set("x-api-key", "short")
        assert client.get("/test").status_code == 200

    def test_rejects_missing_key(self, legacy_app):
        response = TestClient(legacy_app).get("/test")
        assert response.status_code == 401
        assert response.json()["error"]["code"] == "UNAUTHORIZED"

    def test_rejects_invalid_key(self, legacy_app):
        response = TestClient(legacy_app).get("/test", headers={"x-api-key": "shor"})
        assert response.status_code == 401

    def test_excluded_path(self, legacy_app):
        response = TestClient(legacy_app).get("/health")
        assert response.status_code == 200

    def test_sibling_of_excluded_path_requires_key(self, legacy_source):
        app = create_test_app()

        @app.get("/health-admin/secrets")
        async def secrets() -> dict:
            return {"secret": True}

        app.add_middleware(
            SecurityKeyMiddleware,
            extractor=SecurityKeyExtractor(),
            validator=SecurityKeyValidator(legacy_source),
        )
        client = TestClient(app)

        assert client.get("/health-admin/secrets").status_code == 401
        assert client.get("/health").status_code == 200

    def test_custom_exclude_paths(self, legacy_source):
        app = create_test_app()
        app.add_middleware(
            SecurityKeyMiddleware,
            extractor=SecurityKeyExtractor(),
            validator=SecurityKeyValidator(legacy_source),
            exclude_paths=["/test"],
        )
        client = TestClient(app)

        assert client.get("/test").status_code == 200
        assert client.get("/health").status_code == 401

    def test_allowed_forwarded_address(self, restricted_app):
        response = TestClient(restricted_app).get(
            "/test", headers={"x-api-key": "short", "X-Forwarded-For": "192.168.1.10"}
        )
        assert response.status_code == 200

    def test_rejected_forwarded_address(self, restricted_app):
        response = TestClient(restricted_app).get(
            "/test", headers={"x-api-key": "short", "X-Forwarded-For": "172.16.0.1"}
        )
        assert response.status_code == 401

    def test_first_forwarded_line_decides(self, restricted_app):
        client = TestClient(restricted_app)
        allowed_first = [
            ("x-api-key", "short"),
            ("X-Forwarded-For", "192.168.1.10"),
            ("X-Forwarded-For", "172.16.0.1"),
        ]
        rejected_first = [
            ("x-api-key", "short"),
            ("X-Forwarded-For", "172.16.0.1"),
            ("X-Forwarded-For", "192.168.1.10"),
        ]

        assert client.get("/test", headers=allowed_first).status_code == 200
        assert client.get("/test", headers=rejected_first).status_code == 401

    def test_unparsable_peer_rejected_when_restricted(self, restricted_app):
        # TestClient reports its peer as "testclient"
        response = TestClient(restricted_app).get("/test", headers={"x-api-key": "short"})
        assert response.status_code == 401

    def test_requires_extractor_and_validator(self, legacy_source):
        with pytest.raises(ValueError, match="extractor"):
            SecurityKeyMiddleware(create_test_app(), None, SecurityKeyValidator(legacy_source))
        with pytest.raises(ValueError, match="validator"):
            SecurityKeyMiddleware(create_test_app(), SecurityKeyExtractor(), None)


class TestRequireSecurityKey:
    """Tests for the require_security_key dependency."""

    @pytest.fixture
    def app(self, legacy_source) -> FastAPI:
        options = SecurityKeyOptions(header_name="X-Service-Key")
        require_key = require_security_key(
            SecurityKeyExtractor(options), SecurityKeyValidator(legacy_source, options), options
        )

        app = FastAPI()

        @app.get("/protected")
        async def protected(outcome: AuthenticationOutcome = Depends(require_key)) -> dict:
            return {"name": outcome.name, "scheme": outcome.scheme}

        @app.get("/open")
        async def open_route() -> dict:
            return {"status": "ok"}

        return app

    def test_valid_key(self, app):
        response = TestClient(app).get("/protected", headers={"X-Service-Key": "short"})
        assert response.status_code == 200
        assert response.json() == {"name": "SecurityKey", "scheme": "SecurityKey"}

    def test_invalid_key(self, app):
        response = TestClient(app).get("/protected", headers={"X-Service-Key": "wrong"})
        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "SecurityKey"
        assert response.json() == {"detail": "Invalid or missing security key"}

    def test_missing_key(self, app):
        assert TestClient(app).get("/protected").status_code == 401

    def test_unprotected_route(self, app):
        assert TestClient(app).get("/open").status_code == 200

    def test_openapi_security_scheme(self, app):
        schema = TestClient(app).get("/openapi.json").json()
        scheme = schema["components"]["securitySchemes"]["SecurityKey"]

        assert scheme["type"] == "apiKey"
        assert scheme["in"] == "header"
        assert scheme["name"] == "X-Service-Key"
