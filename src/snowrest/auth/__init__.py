"""Authentication providers for the Snowflake SQL API"""

from typing import Any, Optional

import requests

from snowrest.errors import AuthenticationError

from .base import REFRESH_BUFFER_SECONDS, AuthMethod, TokenProvider
from .keypair import KeyPairTokenProvider
from .oauth import DEFAULT_SCOPE, OAuthTokenProvider


def create_token_provider(
    cfg: dict[str, Any],
    http: Optional[requests.Session] = None,
) -> TokenProvider:
    """Build the token provider selected by the profile's 'authenticator' (key-pair by default)"""
    method = AuthMethod.from_string(cfg.get("authenticator") or "SNOWFLAKE_JWT")

    if method is AuthMethod.OAUTH:
        return OAuthTokenProvider(
            token_endpoint=cfg.get("oauth_token_endpoint", ""),
            client_id=cfg.get("oauth_client_id", ""),
            client_secret=cfg.get("oauth_client_secret", ""),
            scope=cfg.get("oauth_scope") or DEFAULT_SCOPE,
            refresh_token=cfg.get("oauth_refresh_token"),
            http=http,
        )

    if not cfg.get("account"):
        raise AuthenticationError.configuration_error("Snowflake account is required")
    return KeyPairTokenProvider(
        account=cfg["account"],
        user=cfg.get("user", ""),
        private_key_path=cfg.get("private_key_file"),
        private_key=cfg.get("private_key"),
        private_key_passphrase=cfg.get("private_key_passphrase"),
    )


__all__ = [
    "AuthMethod",
    "TokenProvider",
    "KeyPairTokenProvider",
    "OAuthTokenProvider",
    "create_token_provider",
    "REFRESH_BUFFER_SECONDS",
]
