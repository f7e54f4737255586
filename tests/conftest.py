"""
Pytest configuration and shared fixtures for securitykey tests.
"""

import io
import sys
from pathlib import Path
from typing import Any

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from securitykey.config import ConfigurationSource  # noqa: E402
from securitykey.logging import LogConfig, SecurityKeyLogger  # noqa: E402
from securitykey.types import LogFormat, LogLevel  # noqa: E402


# =============================================================================
# Path Fixtures
# =============================================================================


@pytest.fixture(scope="session")
def tests_dir() -> Path:
    """Return the tests directory."""
    return Path(__file__).parent


@pytest.fixture(scope="session")
def configs_dir(tests_dir: Path) -> Path:
    """Return the config fixtures directory."""
    return tests_dir / "fixtures" / "configs"


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture
def legacy_config() -> dict[str, Any]:
    """Legacy single-string key configuration."""
    return {"SecurityKey": "short;very-long-security-key-for-testing"}


@pytest.fixture
def legacy_source(legacy_config: dict[str, Any]) -> ConfigurationSource:
    """Configuration source with legacy keys."""
    return ConfigurationSource.from_dict(legacy_config)


@pytest.fixture
def structured_config() -> dict[str, Any]:
    """Structured configuration with address and network restrictions."""
    return {
        "SecurityKey": {
            "AllowedKeys": ["short", "very-long-security-key-for-testing"],
            "AllowedAddresses": ["10.0.0.5", "2001:db8::1"],
            "AllowedNetworks": ["192.168.1.0/24", "fd00::/8"],
        }
    }


@pytest.fixture
def structured_source(structured_config: dict[str, Any]) -> ConfigurationSource:
    """Configuration source with structured keys and restrictions."""
    return ConfigurationSource.from_dict(structured_config)


# =============================================================================
# Logging Fixtures
# =============================================================================


@pytest.fixture
def log_output() -> io.StringIO:
    """Buffer capturing logger output."""
    return io.StringIO()


@pytest.fixture
def json_logger(log_output: io.StringIO) -> SecurityKeyLogger:
    """Logger writing JSON lines at DEBUG level into log_output."""
    return SecurityKeyLogger(
        LogConfig(level=LogLevel.DEBUG, format=LogFormat.JSON, output=log_output)
    )


# =============================================================================
# Markers Configuration
# =============================================================================


def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "property: Property-based tests")
