"""Configuration loading for Snowflake connection profiles."""

import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional, Union

# Use tomllib for Python 3.11+, fallback to tomli for older versions
if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from .paths import resolve_config_path

# Profile key -> environment variable
ENV_VARS: Dict[str, str] = {
    "account": "SNOWFLAKE_ACCOUNT",
    "user": "SNOWFLAKE_USER",
    "warehouse": "SNOWFLAKE_WAREHOUSE",
    "database": "SNOWFLAKE_DATABASE",
    "schema": "SNOWFLAKE_SCHEMA",
    "role": "SNOWFLAKE_ROLE",
    "authenticator": "SNOWFLAKE_AUTH_METHOD",
    "private_key_file": "SNOWFLAKE_PRIVATE_KEY_PATH",
    "private_key": "SNOWFLAKE_PRIVATE_KEY",
    "private_key_passphrase": "SNOWFLAKE_PRIVATE_KEY_PASSPHRASE",
    "oauth_token_endpoint": "SNOWFLAKE_OAUTH_TOKEN_ENDPOINT",
    "oauth_client_id": "SNOWFLAKE_OAUTH_CLIENT_ID",
    "oauth_client_secret": "SNOWFLAKE_OAUTH_CLIENT_SECRET",
    "oauth_scope": "SNOWFLAKE_OAUTH_SCOPE",
    "oauth_refresh_token": "SNOWFLAKE_OAUTH_REFRESH_TOKEN",
    "timeout": "SNOWFLAKE_QUERY_TIMEOUT",
    "polling_interval": "SNOWFLAKE_POLLING_INTERVAL",
    "max_poll_attempts": "SNOWFLAKE_MAX_POLL_ATTEMPTS",
    "base_url": "SNOWFLAKE_BASE_URL",
}

_INT_KEYS = ("timeout", "polling_interval", "max_poll_attempts")


def _read_profiles(config_file: Path) -> Dict[str, Any]:
    with open(config_file, "rb") as f:
        return tomllib.load(f)


def load_profile(
    profile: str,
    path: Optional[Union[str, Path]] = None
) -> Dict[str, Any]:
    """
    Load a Snowflake connection profile from connections.toml file.

    Args:
        profile: Name of the profile to load
        path: Optional explicit path to connections.toml file.
              If None, searches in standard locations.

    Returns:
        Dictionary containing connection parameters for the profile

    Raises:
        FileNotFoundError: If connections.toml file is not found
        KeyError: If the specified profile doesn't exist in the file

    Example:
        >>> config = load_profile("dev")
        >>> config
        {'account': 'myorg-myaccount', 'user': 'myuser', ...}
    """
    config_file = resolve_config_path(path)

    if not config_file.exists():
        raise FileNotFoundError(
            f"Snowflake configuration file not found at {config_file}. " +
            "Create a connections.toml file or see connections.toml.example for template."
        )

    all_profiles = _read_profiles(config_file)

    if profile not in all_profiles:
        available = ", ".join(all_profiles.keys())
        raise KeyError(
            f"Profile '{profile}' not found in {config_file}. " +
            f"Available profiles: {available}"
        )

    return dict(all_profiles[profile])


def list_profiles(path: Optional[Union[str, Path]] = None) -> list[str]:
    """
    List all available profiles in connections.toml file.

    Example:
        >>> list_profiles()
        ['default', 'dev', 'prod']
    """
    try:
        config_file = resolve_config_path(path)
    except FileNotFoundError:
        return []

    if not config_file.exists():
        return []

    return list(_read_profiles(config_file).keys())


def load_profile_from_env(environ: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
    """
    Build a profile from SNOWFLAKE_* environment variables.

    Only variables that are set (and non-empty) appear in the profile. Numeric
    tuning values are converted to int.

    Example:
        >>> os.environ["SNOWFLAKE_ACCOUNT"] = "myorg-myaccount"
        >>> load_profile_from_env()["account"]
        'myorg-myaccount'
    """
    env = os.environ if environ is None else environ
    cfg: Dict[str, Any] = {
        key: env[var] for key, var in ENV_VARS.items() if env.get(var)
    }
    for key in _INT_KEYS:
        if key in cfg:
            try:
                cfg[key] = int(cfg[key])
            except ValueError as e:
                raise ValueError(f"{ENV_VARS[key]} must be an integer, got {cfg[key]!r}") from e
    return cfg
