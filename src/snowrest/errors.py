"""Exception hierarchy for Snowflake SQL API failures"""

import json
from typing import Any, Optional, Sequence


class SnowflakeError(Exception):
    """Base exception for all snowrest errors"""

    def __init__(
        self,
        message: str = "",
        code: Optional[str] = None,
        sql_state: Optional[str] = None,
        statement_handle: Optional[str] = None,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.sql_state = sql_state
        self.statement_handle = statement_handle
        self.status_code = status_code


class AuthenticationError(SnowflakeError):
    """Credentials are missing, malformed, expired or rejected"""

    @classmethod
    def invalid_credentials(cls, message: str = "Invalid credentials") -> "AuthenticationError":
        return cls(message, status_code=401)

    @classmethod
    def token_expired(cls) -> "AuthenticationError":
        return cls("Authentication token has expired", status_code=401)

    @classmethod
    def configuration_error(cls, detail: str) -> "AuthenticationError":
        return cls(f"Authentication configuration error: {detail}")


class QueryError(SnowflakeError):
    """Snowflake rejected the SQL statement (HTTP 422)"""

    def __init__(
        self,
        message: str,
        sql: str,
        bindings: Optional[Sequence[Any]] = None,
        code: Optional[str] = None,
        sql_state: Optional[str] = None,
        statement_handle: Optional[str] = None,
        status_code: Optional[int] = 422,
    ) -> None:
        super().__init__(
            message,
            code=code,
            sql_state=sql_state,
            statement_handle=statement_handle,
            status_code=status_code,
        )
        self.sql = sql
        self.bindings = list(bindings) if bindings else []

    @classmethod
    def from_api_response(
        cls,
        body: dict[str, Any],
        sql: str,
        bindings: Optional[Sequence[Any]] = None,
    ) -> "QueryError":
        """Build from a SQL API error body ({message, code, sqlState, statementHandle})"""
        return cls(
            body.get("message") or "Query execution failed",
            sql=sql,
            bindings=bindings,
            code=body.get("code"),
            sql_state=body.get("sqlState"),
            statement_handle=body.get("statementHandle"),
        )

    def formatted_message(self) -> str:
        """Error message with SQL state, statement text and bindings appended"""
        message = self.message
        if self.sql_state:
            message += f" [SQLSTATE: {self.sql_state}]"
        message += f"\n\nSQL: {self.sql}"
        if self.bindings:
            message += f"\n\nBindings: {json.dumps(self.bindings, default=str)}"
        return message


class StatementError(SnowflakeError):
    """Generic statement failure: unexpected HTTP status, connection failure, polling failure"""


class StatementTimeoutError(StatementError):
    """The statement did not complete within the polling budget"""

    def __init__(
        self,
        message: str,
        statement_handle: Optional[str] = None,
        attempts: int = 0,
        cancel_succeeded: bool = False,
    ) -> None:
        super().__init__(message, statement_handle=statement_handle)
        self.attempts = attempts
        self.cancel_succeeded = cancel_succeeded


class StatementCancelledError(StatementError):
    """The caller asked for the statement to be abandoned while it was still running"""

    def __init__(
        self,
        message: str,
        statement_handle: Optional[str] = None,
        cancel_succeeded: bool = False,
    ) -> None:
        super().__init__(message, statement_handle=statement_handle)
        self.cancel_succeeded = cancel_succeeded
