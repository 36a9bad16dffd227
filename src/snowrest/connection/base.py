"""Base connector class with shared profile and authentication logic."""

import os
from pathlib import Path
from typing import Any, Dict, Optional

import keyring
from pydantic import SecretStr

from snowrest.auth import AuthMethod, TokenProvider, create_token_provider
from snowrest.config import load_profile, load_profile_from_env
from snowrest.errors import AuthenticationError


class BaseConnector:
    """Base class for Snowflake connectors with TOML profile support and authentication handling"""

    def __init__(self, profile: Optional[str] = None, **kwargs: Any) -> None:
        """Load the profile (or SNOWFLAKE_* environment variables) and build the token provider"""
        self._cfg: Dict[str, Any] = load_profile(profile) if profile else load_profile_from_env()
        self._cfg.update(kwargs)
        self._profile = profile
        self.token_provider: TokenProvider = self._process_auth()

    @property
    def config(self) -> Dict[str, Any]:
        """Resolved profile, secrets redacted"""
        return {
            key: "**********" if ("secret" in key or "passphrase" in key or key == "private_key") else value
            for key, value in self._cfg.items()
        }

    def _process_auth(self) -> TokenProvider:
        """Resolve key material for key-pair auth and create the profile's token provider"""
        if "token_provider" in self._cfg:
            return self._cfg.pop("token_provider")

        method = AuthMethod.from_string(self._cfg.get("authenticator") or "SNOWFLAKE_JWT")
        if method is AuthMethod.KEYPAIR:
            self._process_keypair_auth()
        return create_token_provider(self._cfg)

    def _process_keypair_auth(self) -> None:
        """Validate the key path and resolve the passphrase into the profile"""
        if not self._cfg.get("private_key"):
            self._cfg["private_key_file"] = str(self._get_key_path())

        passphrase = self._get_passphrase()
        if passphrase:
            self._cfg["private_key_passphrase"] = passphrase

    def _get_key_path(self) -> Path:
        """Validate the private key path from the profile"""
        private_key_file = self._cfg.get("private_key_file")
        if not private_key_file:
            raise AuthenticationError.configuration_error(
                "Keypair authentication requires 'private_key_file' or 'private_key' in profile configuration"
            )

        key_path = Path(private_key_file).expanduser()

        # Only allow absolute paths or home directory expansion
        if not key_path.is_absolute():
            raise AuthenticationError.configuration_error(
                f"Private key path must be absolute or use ~ for home directory. Got: {private_key_file}"
            )

        if not key_path.exists():
            raise AuthenticationError.configuration_error(f"Private key file not found: {key_path}")

        return key_path

    def _get_passphrase(self) -> Optional[SecretStr]:
        """Retrieve the private key passphrase from the profile, an environment variable or the keyring"""
        explicit = self._cfg.get("private_key_passphrase")
        if explicit:
            return explicit if isinstance(explicit, SecretStr) else SecretStr(explicit)

        passphrase_env_var = self._cfg.get("private_key_passphrase_env")
        if passphrase_env_var:
            env_pass = os.environ.get(passphrase_env_var)
            if env_pass:
                return SecretStr(env_pass)

        use_keyring = self._cfg.get("use_keyring", False)
        keyring_service = self._cfg.get("keyring_service", f"snowrest.{self._profile or 'env'}")
        keyring_username = self._cfg.get("keyring_username", self._cfg.get("user"))

        if use_keyring:
            if not keyring_username:
                raise AuthenticationError.configuration_error(
                    "Keyring usage requires 'user' in profile or 'keyring_username' override."
                )

            keyring_pass = keyring.get_password(keyring_service, keyring_username)
            if keyring_pass:
                return SecretStr(keyring_pass)

        return None
