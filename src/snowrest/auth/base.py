"""Token provider contract shared by key-pair and OAuth authentication"""

import threading
import time
from abc import ABC, abstractmethod
from enum import Enum
from typing import Callable, Optional

from snowrest.errors import AuthenticationError

# Tokens are refreshed this many seconds before they actually expire
REFRESH_BUFFER_SECONDS = 300


class AuthMethod(Enum):
    """Supported SQL API authentication methods"""

    KEYPAIR = "keypair"
    OAUTH = "oauth"

    @property
    def token_type(self) -> str:
        """Value for the X-Snowflake-Authorization-Token-Type header"""
        return "KEYPAIR_JWT" if self is AuthMethod.KEYPAIR else "OAUTH"

    @classmethod
    def from_string(cls, method: str) -> "AuthMethod":
        """Parse an authenticator name from a profile"""
        normalized = method.strip().lower()
        if normalized in ("keypair", "jwt", "snowflake_jwt", "keypair_jwt"):
            return cls.KEYPAIR
        if normalized == "oauth":
            return cls.OAUTH
        raise AuthenticationError.configuration_error(
            f"Unknown authentication method: {method}. Use 'SNOWFLAKE_JWT' or 'OAUTH'."
        )


class TokenProvider(ABC):
    """Produces bearer tokens, caching each until it enters the refresh buffer.

    The cached token and its expiry belong to this instance only. ``refresh``
    replaces both at once under an instance lock, and ``get_token`` re-checks
    validity under the same lock so concurrent callers share one refresh.

    Subclasses implement ``_fetch_token`` returning ``(token, expiry_epoch)``.
    """

    auth_method: AuthMethod

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._lock = threading.RLock()
        self._token: Optional[str] = None
        self._expires_at: Optional[float] = None

    @property
    def token_type(self) -> str:
        """Header discriminator for this provider's tokens"""
        return self.auth_method.token_type

    @property
    def expires_at(self) -> Optional[float]:
        """Epoch seconds at which the cached token expires, if one is cached"""
        return self._expires_at

    def get_token(self) -> str:
        """Return a valid token, refreshing only if the cached one is stale"""
        if self.is_valid():
            assert self._token is not None
            return self._token
        with self._lock:
            if not self.is_valid():
                self.refresh()
            assert self._token is not None
            return self._token

    def refresh(self) -> None:
        """Unconditionally obtain a new token and replace the cached one"""
        with self._lock:
            token, expires_at = self._fetch_token()
            self._token, self._expires_at = token, expires_at

    def is_valid(self) -> bool:
        """True while a token is cached and now < expiry - refresh buffer"""
        token, expires_at = self._token, self._expires_at
        if token is None or expires_at is None:
            return False
        return self._clock() < expires_at - REFRESH_BUFFER_SECONDS

    @abstractmethod
    def _fetch_token(self) -> tuple[str, float]:
        """Obtain a fresh token and its absolute expiry"""
        raise NotImplementedError
