"""Asynchronous statement handle"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Optional

from .result import StatementResult

if TYPE_CHECKING:
    from .executor import StatementExecutor

RUNNING = "RUNNING"
SUCCESS = "SUCCESS"


@dataclass(frozen=True)
class AsyncStatement:
    """Represents a statement executing asynchronously on Snowflake"""

    statement_handle: str
    sql: str
    _executor: StatementExecutor = field(repr=False)
    bindings: tuple[Any, ...] = ()
    _initial_result: Optional[StatementResult] = field(default=None, repr=False)

    @property
    def query_id(self) -> str:
        return self.statement_handle

    def get_result(self) -> StatementResult:
        """Block until the statement completes and return the results"""
        if self._initial_result is not None:
            return self._initial_result
        return self._executor.wait_for_completion(self.statement_handle, self.sql, self.bindings)

    @property
    def status(self) -> str:
        """Return the current status of the statement: RUNNING or SUCCESS.

        A failed statement raises the matching error instead of reporting a status.
        """
        if self._initial_result is not None:
            return SUCCESS
        body = self._executor.get_statement_status(self.statement_handle, self.sql, self.bindings)
        if self._executor.is_complete(body):
            return SUCCESS
        return RUNNING

    def is_running(self) -> bool:
        """Check if the statement is still running"""
        return self.status == RUNNING

    def is_done(self) -> bool:
        """Check if the statement has completed.

        Returns:
            bool: True if the statement is no longer running, False otherwise.

        Example:
            >>> job = execute_sql_async("SELECT * FROM table", context="main")
            >>> while not job.is_done():
            ...     print("Still running...")
            ...     time.sleep(1)
            >>> result = job.get_result()
        """
        return not self.is_running()

    def abort(self) -> bool:
        """Cancel the running statement.

        Returns:
            bool: True if Snowflake accepted the cancel request, False otherwise.

        Example:
            >>> job = execute_sql_async("SELECT * FROM huge_table", context="main")
            >>> # Changed our mind...
            >>> job.abort()
        """
        return self._executor.cancel_statement(self.statement_handle)
