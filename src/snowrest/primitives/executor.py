"""Statement execution against the Snowflake SQL API.

``StatementExecutor`` turns the stateless ``/api/v2/statements`` endpoints into
a blocking "run this and give me the result" call:

1. bound values are encoded as SQL literals and spliced into the statement
   (the API has no placeholders)
2. the statement is POSTed with a fresh request id and a bearer token
3. a 200 response is the result; a 202 (or async-in-progress code) is polled
   at a fixed interval until it completes, fails or runs out of attempts
4. the result keeps a callable that fetches the remaining partitions lazily

Exhausting the polling budget issues one best-effort cancel and raises
``StatementTimeoutError``. Nothing else is retried.
"""

import logging
import threading
import time
import uuid
from typing import Any, Mapping, Optional, Sequence, Union

import requests

from snowrest import __version__
from snowrest.auth import TokenProvider
from snowrest.errors import AuthenticationError, QueryError, StatementCancelledError, StatementError, StatementTimeoutError

from .async_query import AsyncStatement
from .codec import ValueCodec
from .result import StatementResult
from .sqltext import interpolate_bindings
from .statement_context import StatementContext

logger = logging.getLogger(__name__)

DEFAULT_POLLING_INTERVAL_MS = 500
DEFAULT_MAX_POLL_ATTEMPTS = 7200

STATEMENTS_PATH = "/api/v2/statements"

# Response codes reported by the SQL API
SUCCESS_CODES = frozenset({"090001", "success"})
ASYNC_IN_PROGRESS_CODES = frozenset({"333333", "333334"})
# OAuth access token expired, session expired
TOKEN_EXPIRED_CODES = frozenset({"390318", "390112"})

ContextLike = Union[StatementContext, Mapping[str, Any], None]


class StatementExecutor:
    """Execute SQL statements through the Snowflake SQL API.

    Args:
        account: Account identifier used to build the API host
        token_provider: Source of bearer tokens (key-pair or OAuth)
        database, schema, warehouse, role: Default statement context
        session_parameters: Parameters sent with every statement
        timeout: Server-side statement timeout in seconds (0 = Snowflake default)
        polling_interval: Milliseconds between status checks of async statements
        max_poll_attempts: Status checks before giving up and cancelling
        base_url: Override for https://{account}.snowflakecomputing.com
        http: requests.Session to use; one is created (and owned) if omitted
        codec: ValueCodec used for bindings and row decoding

    Example:
        >>> executor = StatementExecutor(account="myorg-myaccount", token_provider=provider,
        ...                              database="ANALYTICS", warehouse="COMPUTE_WH")
        >>> result = executor.execute("SELECT * FROM orders WHERE status = ?", ["open"])
        >>> for row in result.result_set:
        ...     print(row)
    """

    def __init__(
        self,
        account: str,
        token_provider: TokenProvider,
        database: Optional[str] = None,
        schema: Optional[str] = "PUBLIC",
        warehouse: Optional[str] = None,
        role: Optional[str] = None,
        session_parameters: Optional[Mapping[str, Any]] = None,
        timeout: int = 0,
        polling_interval: int = DEFAULT_POLLING_INTERVAL_MS,
        max_poll_attempts: int = DEFAULT_MAX_POLL_ATTEMPTS,
        base_url: Optional[str] = None,
        http: Optional[requests.Session] = None,
        codec: Optional[ValueCodec] = None,
    ):
        if not account and not base_url:
            raise StatementError("Snowflake account is required")
        self.account = account
        self.token_provider = token_provider
        self.context = StatementContext(
            database=database,
            schema=schema or "PUBLIC",
            warehouse=warehouse,
            role=role,
            session_parameters=dict(session_parameters or {}),
        )
        self.timeout = timeout
        self.polling_interval = polling_interval
        self.max_poll_attempts = max_poll_attempts
        self.base_url = (base_url or f"https://{account}.snowflakecomputing.com").rstrip("/")
        self.codec = codec or ValueCodec()
        self._owns_http = http is None
        self._http = http or requests.Session()

    # Requests

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.token_provider.get_token()}",
            "X-Snowflake-Authorization-Token-Type": self.token_provider.token_type,
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": f"snowrest/{__version__}",
        }

    def _request(
        self, method: str, path: str, params: Optional[dict[str, Any]] = None, json: Any = None
    ) -> requests.Response:
        try:
            return self._http.request(
                method,
                f"{self.base_url}{path}",
                params=params,
                json=json,
                headers=self._headers(),
                timeout=None,
            )
        except requests.RequestException as e:
            raise StatementError(f"Failed to connect to Snowflake: {e}") from e

    @staticmethod
    def _body(response: requests.Response) -> dict[str, Any]:
        try:
            body = response.json()
        except ValueError:
            return {}
        return body if isinstance(body, dict) else {}

    def _build_payload(self, statement: str, context: StatementContext) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "statement": statement,
            "timeout": self.timeout,
            "database": context.database,
            "schema": context.schema or "PUBLIC",
            "warehouse": context.warehouse,
        }
        if context.role:
            payload["role"] = context.role
        if context.session_parameters:
            payload["parameters"] = dict(context.session_parameters)
        return payload

    def _check_status(
        self,
        response: requests.Response,
        body: dict[str, Any],
        sql: str,
        bindings: Optional[Sequence[Any]],
    ) -> None:
        """Raise the error matching a failed HTTP status"""
        status = response.status_code
        if status in (401, 403):
            if body.get("code") in TOKEN_EXPIRED_CODES:
                error = AuthenticationError.token_expired()
                error.code = body.get("code")
                error.status_code = status
                raise error
            error = AuthenticationError.invalid_credentials(body.get("message") or "Authentication failed")
            error.status_code = status
            raise error
        if status == 422:
            raise QueryError.from_api_response(body, sql, bindings)
        if not 200 <= status < 300:
            raise StatementError(
                body.get("message") or f"Request failed with status {status}",
                code=body.get("code"),
                sql_state=body.get("sqlState"),
                statement_handle=body.get("statementHandle"),
                status_code=status,
            )

    @staticmethod
    def _is_pending(response: requests.Response, body: dict[str, Any]) -> bool:
        return response.status_code == 202 or body.get("code") in ASYNC_IN_PROGRESS_CODES

    @staticmethod
    def is_complete(body: dict[str, Any]) -> bool:
        return "data" in body or body.get("code") in SUCCESS_CODES

    def _result(self, body: dict[str, Any], sql: str, handle: Optional[str] = None) -> StatementResult:
        if handle and not body.get("statementHandle"):
            body["statementHandle"] = handle
        return StatementResult(
            _response=body,
            _partition_fetcher=self.fetch_partition,
            sql=sql,
            _codec=self.codec,
        )

    # Statements

    def _submit(
        self, sql: str, bindings: Optional[Sequence[Any]], context: ContextLike
    ) -> tuple[requests.Response, dict[str, Any]]:
        request_id = str(uuid.uuid4())
        statement = interpolate_bindings(sql, bindings, self.codec)
        payload = self._build_payload(statement, self.context.merged_with(context))

        logger.debug("Submitting statement (requestId=%s)", request_id)
        response = self._request("POST", STATEMENTS_PATH, params={"requestId": request_id}, json=payload)
        body = self._body(response)
        self._check_status(response, body, sql, bindings)
        return response, body

    def execute(
        self,
        sql: str,
        bindings: Optional[Sequence[Any]] = None,
        context: ContextLike = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> StatementResult:
        """Execute a statement and block until its result is available.

        Args:
            sql: SQL text with optional ? placeholders
            bindings: Positional values for the placeholders
            context: Per-statement database/schema/warehouse/role/session_parameters
            cancel_event: Set from another thread to abandon an async statement

        Returns:
            StatementResult with the first partition loaded and the rest fetched lazily

        Raises:
            AuthenticationError: Credentials rejected (401/403) or unusable
            QueryError: Snowflake rejected the statement (422)
            StatementTimeoutError: Polling budget exhausted (statement cancelled)
            StatementCancelledError: cancel_event was set while polling
            StatementError: Any other HTTP or connection failure
        """
        response, body = self._submit(sql, bindings, context)
        if self._is_pending(response, body):
            handle = body.get("statementHandle")
            if not handle:
                raise StatementError(
                    "Snowflake accepted the statement asynchronously but returned no statement handle",
                    status_code=response.status_code,
                )
            return self.wait_for_completion(handle, sql, bindings, cancel_event=cancel_event)
        return self._result(body, sql)

    def submit(
        self,
        sql: str,
        bindings: Optional[Sequence[Any]] = None,
        context: ContextLike = None,
    ) -> AsyncStatement:
        """Submit a statement and return without waiting for it to finish"""
        response, body = self._submit(sql, bindings, context)
        handle = body.get("statementHandle")
        if not handle:
            raise StatementError(
                f"Failed to get statementHandle from submission response. Response: {body}",
                status_code=response.status_code,
            )
        initial = None if self._is_pending(response, body) else self._result(body, sql)
        return AsyncStatement(
            statement_handle=handle,
            sql=sql,
            bindings=tuple(bindings or ()),
            _executor=self,
            _initial_result=initial,
        )

    def get_statement_status(
        self,
        handle: str,
        sql: str = "",
        bindings: Optional[Sequence[Any]] = None,
    ) -> dict[str, Any]:
        """Check a statement once: returns the status body or raises on failure"""
        response = self._request("GET", f"{STATEMENTS_PATH}/{handle}")
        body = self._body(response)
        self._check_status(response, body, sql, bindings)
        return body

    def wait_for_completion(
        self,
        handle: str,
        sql: str = "",
        bindings: Optional[Sequence[Any]] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> StatementResult:
        """Poll an async statement until it completes, fails or exhausts max_poll_attempts"""
        interval = self.polling_interval / 1000.0

        for attempt in range(1, self.max_poll_attempts + 1):
            time.sleep(interval)
            if cancel_event is not None and cancel_event.is_set():
                cancelled = self.cancel_statement(handle)
                raise StatementCancelledError(
                    f"Statement {handle} was cancelled by the caller",
                    statement_handle=handle,
                    cancel_succeeded=cancelled,
                )

            body = self.get_statement_status(handle, sql, bindings)
            if self.is_complete(body):
                logger.debug("Statement %s completed after %d poll(s)", handle, attempt)
                return self._result(body, sql, handle)
            logger.debug("Statement %s still running (poll %d/%d)", handle, attempt, self.max_poll_attempts)

        cancelled = self.cancel_statement(handle)
        raise StatementTimeoutError(
            f"Query timed out after polling for {self.max_poll_attempts} attempts",
            statement_handle=handle,
            attempts=self.max_poll_attempts,
            cancel_succeeded=cancelled,
        )

    def fetch_partition(self, handle: str, index: int) -> list[list[Any]]:
        """Fetch the raw rows of one result partition; any failure is fatal"""
        response = self._request("GET", f"{STATEMENTS_PATH}/{handle}", params={"partition": index})
        if not 200 <= response.status_code < 300:
            raise StatementError(
                f"Failed to fetch partition {index}: {response.status_code}",
                statement_handle=handle,
                status_code=response.status_code,
            )
        return self._body(response).get("data") or []

    def cancel_statement(self, handle: str) -> bool:
        """Ask Snowflake to cancel a statement; never raises"""
        try:
            response = self._request("POST", f"{STATEMENTS_PATH}/{handle}/cancel")
            cancelled = 200 <= response.status_code < 300
        except Exception as e:
            logger.warning("Cancel request for statement %s failed: %s", handle, e)
            return False
        if not cancelled:
            logger.warning("Cancel request for statement %s returned status %s", handle, response.status_code)
        return cancelled

    # Lifecycle

    def close(self) -> None:
        """Close the HTTP session if this executor created it"""
        if self._owns_http:
            self._http.close()

    def __enter__(self) -> "StatementExecutor":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"StatementExecutor(base_url='{self.base_url}', auth={self.token_provider.token_type})"
