"""OAuth authentication for the SQL API"""

import logging
import time
from typing import Any, Callable, Optional, Union

import requests
from pydantic import SecretStr

from snowrest.errors import AuthenticationError

from .base import AuthMethod, TokenProvider

logger = logging.getLogger(__name__)

DEFAULT_SCOPE = "session:role-any"
DEFAULT_EXPIRES_IN = 3600


class OAuthTokenProvider(TokenProvider):
    """Obtain access tokens from an OAuth token endpoint.

    A refresh-token grant is used while a refresh token is held, otherwise a
    client-credentials grant. Rotated refresh tokens returned by the endpoint
    replace the held one.
    """

    auth_method = AuthMethod.OAUTH

    def __init__(
        self,
        token_endpoint: str,
        client_id: str,
        client_secret: Union[str, SecretStr],
        scope: str = DEFAULT_SCOPE,
        refresh_token: Union[str, SecretStr, None] = None,
        http: Optional[requests.Session] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        super().__init__(clock=clock)
        if not token_endpoint:
            raise AuthenticationError.configuration_error("OAuth token endpoint is required")
        if not client_id:
            raise AuthenticationError.configuration_error("OAuth client ID is required")
        if not client_secret:
            raise AuthenticationError.configuration_error("OAuth client secret is required")

        self.token_endpoint = token_endpoint
        self.client_id = client_id
        self.scope = scope
        self._client_secret = client_secret if isinstance(client_secret, SecretStr) else SecretStr(client_secret)
        if isinstance(refresh_token, str):
            refresh_token = SecretStr(refresh_token)
        self._refresh_token: Optional[SecretStr] = refresh_token
        self._http = http or requests.Session()

    def _fetch_token(self) -> tuple[str, float]:
        if self._refresh_token is not None:
            form = {
                "grant_type": "refresh_token",
                "client_id": self.client_id,
                "client_secret": self._client_secret.get_secret_value(),
                "refresh_token": self._refresh_token.get_secret_value(),
            }
        else:
            form = {
                "grant_type": "client_credentials",
                "client_id": self.client_id,
                "client_secret": self._client_secret.get_secret_value(),
                "scope": self.scope,
            }
        logger.debug("Requesting OAuth token (%s grant) from %s", form["grant_type"], self.token_endpoint)

        try:
            response = self._http.post(self.token_endpoint, data=form)
        except requests.RequestException as e:
            raise AuthenticationError(f"OAuth authentication failed: {e}") from e

        body = self._json_body(response)
        if not response.ok:
            error = body.get("error_description") or body.get("error") or "Unknown error"
            raise AuthenticationError(f"OAuth authentication failed: {error}", status_code=response.status_code)

        token = body.get("access_token")
        if not token:
            raise AuthenticationError("No access token in OAuth response")

        expires_in = body.get("expires_in") or DEFAULT_EXPIRES_IN
        if body.get("refresh_token"):
            self._refresh_token = SecretStr(body["refresh_token"])
        return token, self._clock() + float(expires_in)

    @staticmethod
    def _json_body(response: requests.Response) -> dict[str, Any]:
        try:
            body = response.json()
        except ValueError:
            return {}
        return body if isinstance(body, dict) else {}

    def __repr__(self) -> str:
        return f"OAuthTokenProvider(endpoint='{self.token_endpoint}', valid={self.is_valid()})"
