"""Path resolution for snowrest configuration files."""

import os
from importlib.resources import files as importlib_files
from pathlib import Path
from typing import Optional, Union

CONFIG_DIR_ENV = "SNOWREST_CONFIG_DIR"
CONFIG_FILENAME = "connections.toml"


def _get_config_directory() -> Path:
    """
    Get the configuration directory for snowrest.

    Priority order:
    1. SNOWREST_CONFIG_DIR environment variable (override)
    2. ~/.snowrest/ (dotfile directory in user home, like ~/.snowsql)

    The directory is not created here; nothing is written to it by the library.

    Returns:
        Path: Configuration directory path
    """
    env_config_dir = os.getenv(CONFIG_DIR_ENV)
    if env_config_dir:
        return Path(env_config_dir)
    return Path.home() / ".snowrest"


def _get_example_files_dir() -> Path:
    """Directory holding the .example files shipped with the package"""
    package_data = importlib_files("snowrest") / "_data"
    return Path(str(package_data))


def get_default_config_path() -> Path:
    """
    Get the path to the connections.toml configuration file.

    Returns:
        Path: The path to connections.toml

    Raises:
        FileNotFoundError: If connections.toml doesn't exist in the config directory
    """
    config_path = _get_config_directory() / CONFIG_FILENAME

    if not config_path.exists():
        example_file = _get_example_files_dir() / f"{CONFIG_FILENAME}.example"
        raise FileNotFoundError(
            f"Configuration file '{CONFIG_FILENAME}' not found at: {config_path}\n\n"
            f"To create it:\n"
            f"1. Copy example: {example_file}\n"
            f"2. To: {config_path}\n"
            f"3. Edit with your connection details\n\n"
            f"Configuration directory priority:\n"
            f"  1. {CONFIG_DIR_ENV} environment variable (if set)\n"
            f"  2. ~/.snowrest/ (dotfile directory)\n"
        )

    return config_path


def resolve_config_path(path: Optional[Union[str, Path]] = None) -> Path:
    """Return the explicit path if given, otherwise the default connections.toml"""
    if path:
        return Path(path).expanduser()
    return get_default_config_path()


def get_example_config_path(filename: str = f"{CONFIG_FILENAME}.example") -> Path:
    """
    Get path to an example configuration file from the package.

    Raises:
        FileNotFoundError: If the example file doesn't exist
    """
    example_path = _get_example_files_dir() / filename
    if not example_path.exists():
        raise FileNotFoundError(f"Example file not found: {example_path}")
    return example_path
