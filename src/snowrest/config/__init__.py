"""Configuration module exports."""

from .config import load_profile, list_profiles, load_profile_from_env
from .paths import resolve_config_path, get_default_config_path, get_example_config_path

__all__ = [
    "load_profile",
    "list_profiles",
    "load_profile_from_env",
    "resolve_config_path",
    "get_default_config_path",
    "get_example_config_path",
]
