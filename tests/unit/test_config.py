"""Unit tests for snowrest configuration module."""

import pytest
from pathlib import Path

from snowrest.config import (
    get_default_config_path,
    get_example_config_path,
    list_profiles,
    load_profile,
    load_profile_from_env,
    resolve_config_path,
)


@pytest.fixture
def temp_config_file(tmp_path):
    """Create a temporary TOML config file for testing."""
    config_content = """
[default]
account = "test-account"
user = "test-user"
warehouse = "TEST_WH"
database = "TEST_DB"
private_key_file = "~/.snowrest/rsa_key.p8"

[dev]
account = "dev-account"
user = "dev-user"
warehouse = "DEV_WH"
database = "DEV_DB"
schema = "DEV_SCHEMA"
polling_interval = 250

[dev.session_parameters]
QUERY_TAG = "dev"

[oauth]
account = "prod-account"
authenticator = "OAUTH"
oauth_client_id = "client"
"""
    config_path = tmp_path / "connections.toml"
    config_path.write_text(config_content)
    return config_path


class TestLoadProfile:
    """Tests for load_profile function."""

    def test_load_default_profile(self, temp_config_file):
        config = load_profile("default", path=temp_config_file)

        assert config["account"] == "test-account"
        assert config["user"] == "test-user"
        assert config["warehouse"] == "TEST_WH"
        assert config["database"] == "TEST_DB"

    def test_load_nested_tables_and_ints(self, temp_config_file):
        config = load_profile("dev", path=temp_config_file)

        assert config["schema"] == "DEV_SCHEMA"
        assert config["polling_interval"] == 250
        assert config["session_parameters"] == {"QUERY_TAG": "dev"}

    def test_returns_copy(self, temp_config_file):
        config = load_profile("default", path=temp_config_file)
        config["warehouse"] = "CHANGED"
        assert load_profile("default", path=temp_config_file)["warehouse"] == "TEST_WH"

    def test_missing_profile_raises_error(self, temp_config_file):
        with pytest.raises(KeyError) as exc_info:
            load_profile("nonexistent", path=temp_config_file)

        error_msg = str(exc_info.value)
        assert "nonexistent" in error_msg
        assert "default, dev, oauth" in error_msg

    def test_missing_file_raises_error(self, tmp_path):
        with pytest.raises(FileNotFoundError, match="not found"):
            load_profile("default", path=tmp_path / "missing.toml")

    def test_default_location_from_env(self, temp_config_file, monkeypatch):
        monkeypatch.setenv("SNOWREST_CONFIG_DIR", str(temp_config_file.parent))
        assert load_profile("dev")["database"] == "DEV_DB"


class TestListProfiles:
    """Tests for list_profiles function."""

    def test_list_all_profiles(self, temp_config_file):
        assert list_profiles(path=temp_config_file) == ["default", "dev", "oauth"]

    def test_list_profiles_missing_file(self, tmp_path):
        assert list_profiles(path=tmp_path / "missing.toml") == []

    def test_list_profiles_missing_default_location(self, tmp_path, monkeypatch):
        monkeypatch.setenv("SNOWREST_CONFIG_DIR", str(tmp_path))
        assert list_profiles() == []


class TestPaths:
    """Config path resolution."""

    def test_explicit_path_takes_precedence(self, tmp_path, monkeypatch):
        monkeypatch.setenv("SNOWREST_CONFIG_DIR", "/somewhere/else")
        explicit = tmp_path / "custom.toml"
        assert resolve_config_path(explicit) == explicit

    def test_string_path_converted_to_path_object(self):
        assert isinstance(resolve_config_path("/tmp/connections.toml"), Path)

    def test_default_path_uses_env_dir(self, temp_config_file, monkeypatch):
        monkeypatch.setenv("SNOWREST_CONFIG_DIR", str(temp_config_file.parent))
        assert get_default_config_path() == temp_config_file

    def test_default_path_missing_explains_setup(self, tmp_path, monkeypatch):
        monkeypatch.setenv("SNOWREST_CONFIG_DIR", str(tmp_path))
        with pytest.raises(FileNotFoundError, match="SNOWREST_CONFIG_DIR"):
            get_default_config_path()

    def test_home_dotfile_directory(self, tmp_path, monkeypatch):
        monkeypatch.delenv("SNOWREST_CONFIG_DIR", raising=False)
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))
        with pytest.raises(FileNotFoundError) as exc_info:
            get_default_config_path()
        assert str(tmp_path / ".snowrest" / "connections.toml") in str(exc_info.value)

    def test_example_config_shipped(self):
        assert get_example_config_path().name == "connections.toml.example"


class TestLoadProfileFromEnv:
    """Profiles built from SNOWFLAKE_* variables."""

    def test_reads_set_variables(self):
        env = {
            "SNOWFLAKE_ACCOUNT": "myorg-myaccount",
            "SNOWFLAKE_USER": "etl",
            "SNOWFLAKE_WAREHOUSE": "WH",
            "SNOWFLAKE_PRIVATE_KEY_PATH": "/keys/rsa.p8",
            "SNOWFLAKE_AUTH_METHOD": "jwt",
            "SNOWFLAKE_ROLE": "",
        }
        cfg = load_profile_from_env(env)

        assert cfg == {
            "account": "myorg-myaccount",
            "user": "etl",
            "warehouse": "WH",
            "private_key_file": "/keys/rsa.p8",
            "authenticator": "jwt",
        }

    def test_numeric_values_converted(self):
        cfg = load_profile_from_env({"SNOWFLAKE_QUERY_TIMEOUT": "30", "SNOWFLAKE_POLLING_INTERVAL": "250"})
        assert cfg == {"timeout": 30, "polling_interval": 250}

    def test_bad_numeric_value(self):
        with pytest.raises(ValueError, match="SNOWFLAKE_QUERY_TIMEOUT"):
            load_profile_from_env({"SNOWFLAKE_QUERY_TIMEOUT": "soon"})

    def test_defaults_to_process_environment(self, monkeypatch):
        monkeypatch.setenv("SNOWFLAKE_DATABASE", "FROM_ENV")
        assert load_profile_from_env()["database"] == "FROM_ENV"
