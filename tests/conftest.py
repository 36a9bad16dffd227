"""Shared fixtures for snowrest tests."""

from typing import Any, Optional
from unittest.mock import MagicMock, Mock

import pytest
import requests
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from snowrest.auth import TokenProvider
from snowrest.auth.base import AuthMethod
from snowrest.primitives.executor import StatementExecutor


def make_response(status_code: int = 200, body: Optional[Any] = None) -> Mock:
    """Fake requests.Response with a JSON body."""
    response = Mock(spec=requests.Response)
    response.status_code = status_code
    response.ok = status_code < 400
    if body is None:
        response.json.side_effect = ValueError("No JSON body")
    else:
        response.json.return_value = body
    return response


def result_body(
    rows: list[list[Any]],
    row_type: Optional[list[dict[str, Any]]] = None,
    handle: str = "01b2-handle",
    partitions: int = 1,
    num_rows: Optional[int] = None,
) -> dict[str, Any]:
    """A completed SQL API response with resultSetMetaData."""
    row_type = row_type or [{"name": "ID", "type": "fixed", "scale": 0, "nullable": False}]
    return {
        "code": "090001",
        "message": "Statement executed successfully.",
        "statementHandle": handle,
        "resultSetMetaData": {
            "numRows": len(rows) if num_rows is None else num_rows,
            "format": "jsonv2",
            "rowType": row_type,
            "partitionInfo": [{"rowCount": len(rows)} for _ in range(partitions)],
        },
        "data": rows,
    }


class StaticTokenProvider(TokenProvider):
    """Token provider returning a fixed token, counting fetches."""

    auth_method = AuthMethod.KEYPAIR

    def __init__(self, token: str = "test-token", lifetime: float = 3600, clock: Any = None) -> None:
        super().__init__(clock=clock or (lambda: 1_000_000.0))
        self.token = token
        self.lifetime = lifetime
        self.fetch_count = 0

    def _fetch_token(self) -> tuple[str, float]:
        self.fetch_count += 1
        return self.token, self._clock() + self.lifetime


@pytest.fixture(scope="session")
def rsa_private_key():
    """A 2048-bit RSA key generated once per test run."""
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def private_key_pem(rsa_private_key) -> bytes:
    return rsa_private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )


@pytest.fixture
def private_key_file(tmp_path, private_key_pem):
    """Unencrypted PKCS#8 PEM key written to a temp file."""
    key_path = tmp_path / "rsa_key.p8"
    key_path.write_bytes(private_key_pem)
    return key_path


@pytest.fixture
def encrypted_key_file(tmp_path, rsa_private_key):
    """PEM key encrypted with the passphrase 'secret-pass'."""
    key_path = tmp_path / "rsa_key_encrypted.p8"
    key_path.write_bytes(
        rsa_private_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.BestAvailableEncryption(b"secret-pass"),
        )
    )
    return key_path


@pytest.fixture
def token_provider() -> StaticTokenProvider:
    return StaticTokenProvider()


@pytest.fixture
def mock_http() -> MagicMock:
    """A mocked requests.Session; tests set request.side_effect/return_value."""
    return MagicMock(spec=requests.Session)


@pytest.fixture
def executor(token_provider, mock_http, monkeypatch) -> StatementExecutor:
    """StatementExecutor over a mocked HTTP session with sleeping disabled."""
    monkeypatch.setattr("snowrest.primitives.executor.time.sleep", lambda seconds: None)
    return StatementExecutor(
        account="myorg-myaccount",
        token_provider=token_provider,
        database="TEST_DB",
        warehouse="TEST_WH",
        polling_interval=10,
        max_poll_attempts=3,
        http=mock_http,
    )


@pytest.fixture
def response():
    """Factory for fake responses: response(status_code, body)."""
    return make_response


@pytest.fixture
def completed():
    """Factory for completed statement bodies: completed(rows, row_type=..., ...)."""
    return result_body
