"""Pytest configuration and shared fixtures for integration tests.

Integration tests talk to a real Snowflake account. They run only when
test_config.toml exists in the snowrest config directory and names a profile:

    [test]
    profile = "dev"
    database = "ANALYTICS"
    schema = "PUBLIC"
    write_table = "SNOWREST_TEST"
"""

import sys
from typing import Any, Dict

# Use tomllib for Python 3.11+, fallback to tomli for older versions
if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

import pytest

from snowrest.config.paths import _get_config_directory


def _load_test_config() -> Dict[str, Any]:
    """Load the [test] section of test_config.toml, or {} when absent."""
    test_config_path = _get_config_directory() / "test_config.toml"
    if not test_config_path.exists():
        return {}
    with open(test_config_path, "rb") as f:
        return tomllib.load(f).get("test", {})


# Load test config once at module level
_TEST_CONFIG = _load_test_config()


def pytest_collection_modifyitems(config, items):
    if _TEST_CONFIG.get("profile"):
        return
    skip = pytest.mark.skip(reason="Integration tests need test_config.toml with a [test] profile")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip)


@pytest.fixture(scope="session")
def test_profile() -> str:
    """Snowflake profile to use for integration tests."""
    return _TEST_CONFIG["profile"]


@pytest.fixture(scope="session")
def test_database() -> str:
    return _TEST_CONFIG.get("database", "SNOWREST_TEST")


@pytest.fixture(scope="session")
def test_schema() -> str:
    return _TEST_CONFIG.get("schema", "PUBLIC")


@pytest.fixture(scope="session")
def test_write_table() -> str:
    """Table name for write tests (will be created/dropped)."""
    return _TEST_CONFIG.get("write_table", "SNOWREST_TEST_TABLE")
