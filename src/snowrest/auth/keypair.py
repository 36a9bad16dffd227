"""Key-pair (signed JWT) authentication for the SQL API"""

import base64
import hashlib
import logging
import time
from pathlib import Path
from typing import Any, Callable, Optional, Union

import jwt
from cryptography.hazmat.backends import default_backend
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from pydantic import SecretStr

from snowrest.errors import AuthenticationError

from .base import AuthMethod, TokenProvider

logger = logging.getLogger(__name__)

# Snowflake rejects key-pair JWTs that live longer than one hour
TOKEN_LIFETIME_SECONDS = 3600


def _secret_value(value: Union[str, SecretStr, None]) -> Optional[str]:
    if isinstance(value, SecretStr):
        return value.get_secret_value()
    return value


class KeyPairTokenProvider(TokenProvider):
    """Sign short-lived RS256 JWTs with the user's registered private key.

    The key is loaded and its public fingerprint computed at construction, so
    a missing, unreadable or undecryptable key fails before any request is
    made.

    Args:
        account: Account identifier, e.g. "myorg-myaccount" or "xy12345.us-east-1"
        user: Snowflake user the key is registered to
        private_key_path: PEM (or DER) private key file
        private_key: Key material given inline, used instead of the file
        private_key_passphrase: Passphrase for an encrypted key
        clock: Epoch-seconds source, replaceable in tests

    Example:
        >>> provider = KeyPairTokenProvider(
        ...     account="myorg-myaccount",
        ...     user="etl_user",
        ...     private_key_path="~/.ssh/snowflake_rsa_key.p8",
        ... )
        >>> headers = {"Authorization": f"Bearer {provider.get_token()}"}
    """

    auth_method = AuthMethod.KEYPAIR

    def __init__(
        self,
        account: str,
        user: str,
        private_key_path: Union[str, Path, None] = None,
        private_key: Union[str, bytes, SecretStr, None] = None,
        private_key_passphrase: Union[str, SecretStr, None] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        super().__init__(clock=clock)
        if not account:
            raise AuthenticationError.configuration_error("Snowflake account is required")
        if not user:
            raise AuthenticationError.configuration_error("Snowflake user is required for key-pair auth")
        if private_key_path is None and private_key is None:
            raise AuthenticationError.configuration_error(
                "Either private_key_file or private_key must be provided"
            )

        self.account = account
        self.user = user
        self._private_key = self._load_private_key(
            private_key_path, private_key, _secret_value(private_key_passphrase)
        )
        self.public_key_fingerprint = self._fingerprint(self._private_key)

    @property
    def qualified_username(self) -> str:
        """ACCOUNT.USER with account dots replaced by hyphens, upper-cased"""
        account = self.account.replace(".", "-").upper()
        return f"{account}.{self.user.upper()}"

    def _fetch_token(self) -> tuple[str, float]:
        now = int(self._clock())
        expires_at = now + TOKEN_LIFETIME_SECONDS
        payload = {
            "iss": f"{self.qualified_username}.{self.public_key_fingerprint}",
            "sub": self.qualified_username,
            "iat": now,
            "exp": expires_at,
        }
        try:
            token = jwt.encode(payload, self._private_key, algorithm="RS256")
        except (jwt.PyJWTError, ValueError, TypeError) as e:
            raise AuthenticationError(f"Failed to sign key-pair JWT: {e}") from e
        logger.debug("Issued key-pair JWT for %s (expires %s)", self.qualified_username, expires_at)
        return token, float(expires_at)

    @staticmethod
    def _load_private_key(
        path: Union[str, Path, None],
        material: Union[str, bytes, SecretStr, None],
        passphrase: Optional[str],
    ) -> Any:
        """Read and deserialize the private key, preferring inline material over the file"""
        if material is not None:
            raw = _secret_value(material) if isinstance(material, SecretStr) else material
            key_bytes = raw.encode() if isinstance(raw, str) else raw
            source = "inline private key"
        else:
            assert path is not None
            key_path = Path(path).expanduser()
            if not key_path.exists():
                raise AuthenticationError(f"Private key file not found: {key_path}")
            try:
                key_bytes = key_path.read_bytes()
            except OSError as e:
                raise AuthenticationError(f"Failed to read private key file {key_path}: {e}") from e
            source = str(key_path)

        password = passphrase.encode() if passphrase else None
        try:
            if key_bytes.lstrip().startswith(b"-----"):
                key = serialization.load_pem_private_key(
                    key_bytes, password=password, backend=default_backend()
                )
            else:
                key = serialization.load_der_private_key(
                    key_bytes, password=password, backend=default_backend()
                )
        except (ValueError, TypeError) as e:
            raise AuthenticationError(f"Failed to load private key from {source}: {e}") from e

        if not isinstance(key, rsa.RSAPrivateKey):
            raise AuthenticationError(f"Private key from {source} is not an RSA key")
        return key

    @staticmethod
    def _fingerprint(private_key: Any) -> str:
        """SHA256:<base64 digest of the DER SubjectPublicKeyInfo>"""
        public_der = private_key.public_key().public_bytes(
            encoding=serialization.Encoding.DER,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )
        digest = hashlib.sha256(public_der).digest()
        return "SHA256:" + base64.b64encode(digest).decode("ascii")

    def __repr__(self) -> str:
        return f"KeyPairTokenProvider(user='{self.qualified_username}', valid={self.is_valid()})"
